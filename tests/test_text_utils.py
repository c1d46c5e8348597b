# -*- coding: utf-8 -*-
"""
Tests for text helpers, span application and key normalization.
"""

import pytest

from core.text_utils import (
    has_target_script, split_surrounding_whitespace, escape_template_content,
    to_safe_template_literal, to_unix_path, find_placeholders, missing_placeholders,
)
from core.span_rewriter import apply_spans, sort_spans
from core.key_normalizer import generate_name, PlaceholderCounter, normalize_fragment
from i18nmark_models import ReplacementSpan


class TestTargetScript:

    def test_detects_cjk(self):
        """Any ideograph counts as target script."""
        assert has_target_script("hello 世界")
        assert not has_target_script("hello world")

    def test_non_strings_never_match(self):
        assert not has_target_script(None)
        assert not has_target_script(42)
        assert not has_target_script("")

    def test_custom_pattern(self):
        assert has_target_script("привет", "[а-я]")
        assert not has_target_script("你好", "[а-я]")


class TestEscaping:

    def test_whitespace_split(self):
        assert split_surrounding_whitespace("  你好 \n") == ("  ", "你好", " \n")
        assert split_surrounding_whitespace("   ") == ("   ", "", "")

    def test_backtick_and_interpolation_escaped(self):
        """Backticks and `${` cannot break out of the template literal."""
        assert escape_template_content("a`b") == "a\\`b"
        assert escape_template_content("${x}") == "\\${x}"
        assert escape_template_content("$x") == "$x"

    def test_backslash_rules(self):
        """Control escapes stay single, other backslashes are doubled."""
        assert escape_template_content("a\\nb") == "a\\nb"
        assert escape_template_content("a\\qb") == "a\\\\qb"
        assert escape_template_content("end\\") == "end\\\\"

    def test_safe_literal(self):
        assert to_safe_template_literal("你好") == "`你好`"


class TestPaths:

    def test_relative_forward_slashes(self, tmp_path):
        path = tmp_path / "src" / "a.js"
        assert to_unix_path(path, tmp_path) == "src/a.js"

    def test_relative_path_untouched(self):
        assert to_unix_path("src/b.js") == "src/b.js"


class TestPlaceholders:

    def test_find(self):
        assert find_placeholders("你好{a}，{b}") == ["{a}", "{b}"]

    def test_missing(self):
        assert missing_placeholders("你好{a}", "Hello") == ["{a}"]
        assert missing_placeholders("你好{a}", "Hello {a}") == []

    def test_custom_delimiters(self):
        assert find_placeholders("你好{{a}}", ("{{", "}}")) == ["{{a}}"]


class TestSpanRewriter:

    def test_single_span_with_length_change(self):
        """Replacing [1, 3) of 'a你好b' keeps both neighbours."""
        assert apply_spans("a你好b", [ReplacementSpan(1, 3, "TAG(你好)")]) == "aTAG(你好)b"

    def test_order_independent(self):
        spans = [ReplacementSpan(0, 1, "XX"), ReplacementSpan(2, 3, "YYY")]
        assert apply_spans("abc", spans) == apply_spans("abc", list(reversed(spans))) == "XXbYYY"

    def test_insertion_before_replacement_at_same_offset(self):
        spans = [ReplacementSpan(0, 2, "[ab]"), ReplacementSpan(0, 0, "import;\n")]
        assert apply_spans("abc", spans) == "import;\n[ab]c"

    def test_overlap_rejected(self):
        with pytest.raises(ValueError):
            sort_spans([ReplacementSpan(0, 3, "x"), ReplacementSpan(2, 4, "y")])

    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            apply_spans("ab", [ReplacementSpan(1, 5, "x")])


class TestKeyNormalizer:

    def test_generate_name(self):
        """Names run a..z, then aa, bb, ..."""
        assert generate_name(0) == "a"
        assert generate_name(25) == "z"
        assert generate_name(26) == "aa"
        assert generate_name(27) == "bb"
        assert generate_name(52) == "aaa"

    def test_generate_name_injective(self):
        names = [generate_name(i) for i in range(500)]
        assert len(set(names)) == len(names)

    def test_negative_index(self):
        with pytest.raises(ValueError):
            generate_name(-1)

    def test_normalize_fragment(self):
        key, variables = normalize_fragment(["你好，", "，欢迎", ""])
        assert key == "你好，{a}，欢迎{b}"
        assert variables == ["a", "b"]

    def test_plain_fragment(self):
        assert normalize_fragment(["你好世界"]) == ("你好世界", [])

    def test_custom_placeholder(self):
        key, _ = normalize_fragment(["你好", ""], ("%{", "}"))
        assert key == "你好%{a}"

    def test_shared_counter_continues(self):
        counter = PlaceholderCounter()
        normalize_fragment(["a", "b"], counter=counter)
        key, variables = normalize_fragment(["c", "d"], counter=counter)
        assert variables == ["b"]
        assert key == "c{b}d"
        counter.reset()
        assert counter.next_name() == "a"
