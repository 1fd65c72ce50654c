from __future__ import annotations

"""
Namespace Prefixing (Encapsulation) Service.

Renames class selectors and custom properties so the same bundle can be
embedded several times on one host page without identifier collisions.

The transform is regex based and only sound because it runs on masked text:
1. Mask comments, string literals and unquoted url() bodies.
2. Rewrite custom properties: --name -> --{prefix}-name.
3. Rewrite class tokens: .name -> .{prefix}-name.
4. Unmask.

Names listed in the exclusion lists (exactly, or as a hyphen-delimited
prefix) are left byte-identical so host platform hooks keep working.

The output must never be fed back into rewrite(): prefixing is a one-time
build step and is not idempotent.
"""

import logging
import re
from typing import Final, Iterable, Optional, Sequence, Tuple

from ucss_build.core.processing.masking import mask, unmask
from ucss_build.domain.constants import (
    DEFAULT_CLASS_EXCLUSIONS,
    DEFAULT_VARIABLE_EXCLUSIONS,
    PREFIX_MODE_ALIASES,
)
from ucss_build.domain.source_models import PrefixRule

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# TOKEN PATTERNS
# -----------------------------------------------------------------------------

# Not preceded by a name character, so BEM modifiers (.btn--primary) stay intact
_CUSTOM_PROPERTY_PATTERN: Final[re.Pattern] = re.compile(r"(?<![\w-])--([\w-]+)")
_CLASS_PATTERN: Final[re.Pattern] = re.compile(r"\.([a-zA-Z_][\w-]*)")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def rewrite(
        text: str,
        category: str,
        prefix: str,
        class_exclusions: Optional[Sequence[str]] = None,
        variable_exclusions: Optional[Sequence[str]] = None,
) -> str:
    """
    Prefix class and/or custom property tokens of a stylesheet.

    Args:
        text: Stylesheet source (typically a flattened bundle).
        category: "classes", "custom_properties", "both" or a p/c/v alias.
        prefix: Namespace prefix, with or without trailing hyphen.
        class_exclusions: Class names left untouched (defaults apply when None).
        variable_exclusions: Custom property names left untouched (defaults apply when None).

    Returns:
        str: The prefixed stylesheet.

    Raises:
        ValueError: If the category is unknown or the prefix is empty.
    """
    rule = build_prefix_rule(category, prefix, class_exclusions, variable_exclusions)
    return rewrite_with_rule(text, rule)


def rewrite_with_rule(text: str, rule: PrefixRule) -> str:
    """
    Apply a PrefixRule to a stylesheet.

    Args:
        text: Stylesheet source.
        rule: Normalized prefixing policy.

    Returns:
        str: The prefixed stylesheet.
    """
    if not text:
        return ""

    masked = mask(text)
    safe = masked.text
    p = rule.normalized_prefix

    var_count = 0
    class_count = 0

    if rule.rewrites_custom_properties:
        safe, var_count = _CUSTOM_PROPERTY_PATTERN.subn(
            lambda m: _rename(m, "--", p, rule.variable_exclusions),
            safe
        )

    if rule.rewrites_classes:
        safe, class_count = _CLASS_PATTERN.subn(
            lambda m: _rename(m, ".", p, rule.class_exclusions),
            safe
        )

    logger.debug(
        f"Prefix '{p}' ({rule.category}): scanned {var_count} custom properties, "
        f"{class_count} class tokens, {len(masked.spans)} masked spans."
    )

    return unmask(safe, masked.spans)


def build_prefix_rule(
        category: str,
        prefix: str,
        class_exclusions: Optional[Sequence[str]] = None,
        variable_exclusions: Optional[Sequence[str]] = None,
) -> PrefixRule:
    """
    Normalize raw prefixing settings into a PrefixRule.

    Raises:
        ValueError: If the category is unknown or the prefix is empty.
    """
    normalized = PREFIX_MODE_ALIASES.get((category or "").strip().lower())
    if not normalized:
        raise ValueError(f"Unknown prefix category: '{category}'.")

    cleaned_prefix = (prefix or "").strip()
    if not cleaned_prefix.strip("-"):
        raise ValueError("Prefix string must not be empty.")

    return PrefixRule(
        category=normalized,
        prefix=cleaned_prefix,
        class_exclusions=_as_tuple(class_exclusions, DEFAULT_CLASS_EXCLUSIONS),
        variable_exclusions=_as_tuple(variable_exclusions, DEFAULT_VARIABLE_EXCLUSIONS),
    )


def is_excluded(name: str, exclusions: Iterable[str]) -> bool:
    """
    Check a token name against an exclusion list.

    An entry excludes the identical name and any name that continues it
    after a hyphen: "wp" excludes "wp" and "wp-block" but not "wpx".
    """
    for entry in exclusions:
        if name == entry or name.startswith(f"{entry}-"):
            return True
    return False

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _rename(match: re.Match, sigil: str, prefix: str, exclusions: Tuple[str, ...]) -> str:
    name = match.group(1)
    if is_excluded(name, exclusions):
        return match.group(0)
    return f"{sigil}{prefix}{name}"


def _as_tuple(values: Optional[Sequence[str]], fallback: Sequence[str]) -> Tuple[str, ...]:
    if values is None:
        return tuple(fallback)
    return tuple(v.strip() for v in values if v and v.strip())
