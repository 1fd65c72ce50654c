from __future__ import annotations

"""
Protected Span Masking Utility.

Locates comments, quoted string literals and unquoted url() bodies in a
stylesheet and swaps them for opaque placeholders keyed into a side table.
Every regex-based rewrite of the build runs on masked text, so no rule can
fire inside a comment or a literal. Unmasking restores each span verbatim.
"""

import re
from typing import Final, Iterable, List, Optional, Tuple

from ucss_build.domain.source_models import MaskedSpan, MaskResult

# -----------------------------------------------------------------------------
# SCANNING PATTERNS
# -----------------------------------------------------------------------------

KIND_COMMENT: Final[str] = "comment"
KIND_STRING: Final[str] = "string"
KIND_URL: Final[str] = "url"

ALL_KINDS: Final[Tuple[str, ...]] = (KIND_COMMENT, KIND_STRING, KIND_URL)

# Leftmost match wins, so a "/*" inside a string never opens a comment
# and a quote inside a comment never opens a string.
_PROTECTED_PATTERN: Final[re.Pattern] = re.compile(
    r"(?P<comment>/\*[\s\S]*?\*/)"
    r"|(?P<string>\"(?:\\[\s\S]|[^\"\\\n])*\"|'(?:\\[\s\S]|[^'\\\n])*')"
    r"|(?P<url>(?<![\w-])url\(\s*[^\s\"')][^)]*\))",
    re.IGNORECASE,
)

_MARKER_BASE: Final[str] = "___MASK_"
_MARKER_KEY_PATTERN: Final[re.Pattern] = re.compile(r"(_+MASK_)\d+___$")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def find_protected_spans(text: str) -> List[Tuple[int, int, str]]:
    """
    List every protected span of a text.

    Args:
        text: Stylesheet source.

    Returns:
        List[Tuple[int, int, str]]: (start, end, kind) triples in document order.
    """
    if not text:
        return []
    return [(m.start(), m.end(), m.lastgroup or "") for m in _PROTECTED_PATTERN.finditer(text)]


def comment_spans(text: str) -> List[Tuple[int, int]]:
    """Return the (start, end) offsets of comments, ignoring comment-like text inside strings."""
    return [(s, e) for s, e, kind in find_protected_spans(text) if kind == KIND_COMMENT]


def mask(text: str, kinds: Optional[Iterable[str]] = None) -> MaskResult:
    """
    Replace protected spans with placeholders.

    The placeholder marker is chosen so that it does not already occur in
    the input, which keeps unmasking unambiguous for any text.

    Args:
        text: Raw stylesheet source.
        kinds: Span kinds to protect (defaults to comments, strings and url bodies).

    Returns:
        MaskResult: Masked text and the side table needed to restore it.
    """
    if not text:
        return MaskResult(text="", spans=[])

    wanted = set(kinds) if kinds is not None else set(ALL_KINDS)
    marker = _choose_marker(text)
    spans: List[MaskedSpan] = []

    def _store(match: re.Match) -> str:
        kind = match.lastgroup or ""
        if kind not in wanted:
            return match.group(0)
        key = f"{marker}{len(spans)}___"
        spans.append(MaskedSpan(key=key, original=match.group(0), kind=kind))
        return key

    masked = _PROTECTED_PATTERN.sub(_store, text)
    return MaskResult(text=masked, spans=spans)


def unmask(text: str, spans: List[MaskedSpan]) -> str:
    """
    Restore every placeholder produced by mask().

    Args:
        text: Masked (and possibly rewritten) text.
        spans: Side table returned by mask().

    Returns:
        str: Text with the original protected spans reinstated.
    """
    if not spans:
        return text

    table = {span.key: span.original for span in spans}
    marker = _MARKER_KEY_PATTERN.match(spans[0].key).group(1)
    pattern = re.compile(re.escape(marker) + r"\d+___")
    return pattern.sub(lambda m: table.get(m.group(0), m.group(0)), text)


def strip_comments(text: str) -> str:
    """
    Remove every comment while keeping string literals intact.

    Args:
        text: Stylesheet source.

    Returns:
        str: Source without comments.
    """
    if not text:
        return ""
    return _PROTECTED_PATTERN.sub(
        lambda m: "" if m.lastgroup == KIND_COMMENT else m.group(0),
        text
    )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _choose_marker(text: str) -> str:
    """Pick a placeholder marker absent from the text."""
    marker = _MARKER_BASE
    while marker in text:
        marker = "_" + marker
    return marker
