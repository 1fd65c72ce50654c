from __future__ import annotations

"""
Artifact Rendering Utility.

Derives the three deterministic tiers of a flattened bundle:
- raw: unmodified passthrough, kept for debugging.
- clean: comments removed, blank-line runs collapsed, trailing spaces trimmed.
- minified: comments removed, whitespace collapsed and dropped around
  structural delimiters.

Both derived tiers are computed from the raw text, never from each other,
so the two whitespace strategies cannot compound. String literals are
masked while whitespace is rewritten, so their content survives verbatim.
"""

import logging
import re
from typing import Dict, Final

from ucss_build.core.processing.masking import KIND_STRING, mask, strip_comments, unmask
from ucss_build.domain.constants import VARIANT_CLEAN, VARIANT_MINIFIED, VARIANT_RAW

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# WHITESPACE PATTERNS
# -----------------------------------------------------------------------------

_TRAILING_SPACE_PATTERN: Final[re.Pattern] = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN_PATTERN: Final[re.Pattern] = re.compile(r"\n{3,}")
_WHITESPACE_PATTERN: Final[re.Pattern] = re.compile(r"\s+")
_DELIMITER_PATTERN: Final[re.Pattern] = re.compile(r"\s*([{};:,>])\s*")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_clean(raw: str) -> str:
    """
    Produce the readable, comment-free tier.

    Indentation and line structure are kept, leading blank lines included;
    only comments, trailing horizontal whitespace and runs of more than one
    blank line go away.

    Args:
        raw: Flattened bundle text.

    Returns:
        str: Cleaned text ending with exactly one newline.
    """
    text = strip_comments(raw or "").replace("\r\n", "\n")
    text = _TRAILING_SPACE_PATTERN.sub("", text)
    text = _BLANK_RUN_PATTERN.sub("\n\n", text)
    return text.rstrip() + "\n"


def render_minified(raw: str) -> str:
    """
    Produce the single-line production tier.

    Args:
        raw: Flattened bundle text.

    Returns:
        str: Minified text without leading or trailing whitespace.
    """
    masked = mask(strip_comments(raw or ""), kinds=(KIND_STRING,))

    text = _WHITESPACE_PATTERN.sub(" ", masked.text)
    text = _DELIMITER_PATTERN.sub(r"\1", text)
    # Last declaration of a block needs no terminator
    text = text.replace(";}", "}")

    return unmask(text.strip(), masked.spans)


def render_variants(raw: str) -> Dict[str, str]:
    """
    Render all three tiers of one bundle.

    Args:
        raw: Flattened bundle text.

    Returns:
        Dict[str, str]: Variant name -> rendered text.
    """
    raw = raw or ""
    clean = render_clean(raw)
    minified = render_minified(raw)

    if raw:
        reduction = 100 - (len(minified) * 100 / len(raw))
        logger.debug(f"Rendered tiers: raw={len(raw)} clean={len(clean)} min={len(minified)} chars ({reduction:.1f}% reduction)")

    return {
        VARIANT_RAW: raw,
        VARIANT_CLEAN: clean,
        VARIANT_MINIFIED: minified,
    }
