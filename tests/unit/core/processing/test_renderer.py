from __future__ import annotations

"""
Unit tests for the Artifact Renderer.

Verifies:
1. Minified tier delimiter and whitespace handling.
2. Clean tier blank-line and trailing whitespace handling.
3. Equivalence of non-whitespace content between the derived tiers.
"""

import re

from ucss_build.core.processing.renderer import render_clean, render_minified, render_variants

BUNDLE = (
    "/* Header */\n"
    ".a {\n"
    "  color: red;\n"
    "  margin: 0 auto;\n"
    "}\n"
    "\n\n\n"
    ".b > .c,\n"
    ".d {\n"
    "  top: 0;\n"
    "}\n"
)


def _no_ws(text: str) -> str:
    return re.sub(r"\s+", "", text)


# -----------------------------------------------------------------------------
# MINIFIED
# -----------------------------------------------------------------------------

def test_minify_simple_rule() -> None:
    assert render_minified("a {\n  color: red;\n}\n") == "a{color:red}"


def test_minify_removes_comments_and_delimiter_spaces() -> None:
    assert render_minified("/* c */\n.a , .b > .c { x : 1 }") == ".a,.b>.c{x:1}"


def test_minify_keeps_descendant_combinator() -> None:
    assert render_minified(".a .b {\n  x: 1;\n}") == ".a .b{x:1}"


def test_minify_preserves_string_content() -> None:
    assert render_minified('a::after { content: "x  :  y"; }') == 'a::after{content:"x  :  y"}'


def test_minify_keeps_comment_text_inside_strings() -> None:
    assert render_minified('a { content: "/* x */"; }') == 'a{content:"/* x */"}'


# -----------------------------------------------------------------------------
# CLEAN
# -----------------------------------------------------------------------------

def test_clean_collapses_blank_runs_and_trailing_spaces() -> None:
    raw = "/* header */\n\n\n\n.a {  \n  color: red;\t\n}\n\n\n\n.b {}\n\n"
    assert render_clean(raw) == "\n\n.a {\n  color: red;\n}\n\n.b {}\n"


def test_clean_preserves_leading_blank_line() -> None:
    assert render_clean("\n.a {}\n") == "\n.a {}\n"
    assert render_clean("\n\n\n\n.a {}") == "\n\n.a {}\n"


def test_clean_normalizes_crlf() -> None:
    assert render_clean("a {\r\n  b: c;\r\n}\r\n") == "a {\n  b: c;\n}\n"


def test_clean_keeps_indentation() -> None:
    out = render_clean(BUNDLE)
    assert "  color: red;\n" in out
    assert out.endswith("}\n")
    assert "\n\n\n" not in out


# -----------------------------------------------------------------------------
# TIERS
# -----------------------------------------------------------------------------

def test_variants_keys_and_raw_passthrough() -> None:
    variants = render_variants(BUNDLE)

    assert set(variants) == {"raw", "clean", "minified"}
    assert variants["raw"] == BUNDLE


def test_minified_and_clean_share_non_whitespace_content() -> None:
    variants = render_variants(BUNDLE)

    clean_tokens = _no_ws(variants["clean"]).replace(";}", "}")
    assert _no_ws(variants["minified"]) == clean_tokens


def test_minified_unaffected_by_prior_clean_pass() -> None:
    """Clean only changes whitespace and comments, so minifying it gives the same result."""
    assert render_minified(render_clean(BUNDLE)) == render_minified(BUNDLE)
