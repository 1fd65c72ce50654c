from __future__ import annotations

"""
Unit tests for the Namespace Prefixer.

Verifies:
1. Class and custom property renaming per category.
2. Exclusion lists (exact and hyphenated prefix matches).
3. Protection of comments, strings and url() bodies.
"""

import pytest

from ucss_build.core.processing.prefixer import build_prefix_rule, is_excluded, rewrite


def test_classes_only_leaves_comment_untouched() -> None:
    out = rewrite(".foo{color:red}/* .bar inside comment */", "classes", "u")
    assert out == ".u-foo{color:red}/* .bar inside comment */"


def test_custom_properties_declaration_and_usage() -> None:
    out = rewrite(":root{--fg:#000}.a{color:var(--fg)}", "custom_properties", "ucss")
    assert out == ":root{--ucss-fg:#000}.a{color:var(--ucss-fg)}"


def test_both_categories_with_short_alias() -> None:
    assert rewrite(".a{--x:1}", "p", "k") == ".k-a{--k-x:1}"


def test_classes_alias_does_not_touch_properties() -> None:
    assert rewrite(".a{--x:1}", "c", "k") == ".k-a{--x:1}"


def test_variables_alias_does_not_touch_classes() -> None:
    assert rewrite(".a{--x:1}", "v", "k") == ".a{--k-x:1}"


def test_default_class_exclusions() -> None:
    out = rewrite(".wp-block{}.wpx{}.wp{}.editor-styles{}", "classes", "u")
    assert out == ".wp-block{}.u-wpx{}.wp{}.editor-styles{}"


def test_default_variable_exclusions() -> None:
    out = rewrite(":root{--wp-color:red;--u-size:1px;--gap:2px}", "v", "ucss")
    assert out == ":root{--wp-color:red;--u-size:1px;--ucss-gap:2px}"


def test_explicit_empty_exclusions_disable_defaults() -> None:
    assert rewrite(".wp{}", "c", "u", class_exclusions=[]) == ".u-wp{}"


def test_strings_and_urls_are_protected() -> None:
    out = rewrite('.a{content:".b";background:url(img/x.png)}', "classes", "u")
    assert out == '.u-a{content:".b";background:url(img/x.png)}'


def test_bem_modifier_is_not_a_custom_property() -> None:
    assert rewrite(".btn--primary{}", "both", "u") == ".u-btn--primary{}"


def test_decimal_values_are_not_classes() -> None:
    assert rewrite(".a{margin:0.5em 1.25rem}", "classes", "u") == ".u-a{margin:0.5em 1.25rem}"


def test_pseudo_classes_and_descendants() -> None:
    assert rewrite(".a:hover .b>.c{}", "classes", "u") == ".u-a:hover .u-b>.u-c{}"


def test_prefix_with_trailing_hyphen() -> None:
    assert rewrite(".a{}", "classes", "u-") == ".u-a{}"


def test_rewrite_is_not_idempotent() -> None:
    once = rewrite(".a{}", "classes", "u")
    assert rewrite(once, "classes", "u") == ".u-u-a{}"


def test_empty_text() -> None:
    assert rewrite("", "both", "u") == ""


def test_unknown_category_raises() -> None:
    with pytest.raises(ValueError):
        rewrite(".a{}", "ids", "u")


def test_empty_prefix_raises() -> None:
    with pytest.raises(ValueError):
        build_prefix_rule("classes", " - ")


def test_build_prefix_rule_normalizes_category() -> None:
    rule = build_prefix_rule("P", "ns", ["x"], None)

    assert rule.category == "both"
    assert rule.class_exclusions == ("x",)
    assert "wp" in rule.variable_exclusions


@pytest.mark.parametrize("name, expected", [
    ("wp", True),
    ("wp-block", True),
    ("wpx", False),
    ("block-editor", True),
    ("my-wp", False),
])
def test_is_excluded(name: str, expected: bool) -> None:
    assert is_excluded(name, ["wp", "block"]) is expected
