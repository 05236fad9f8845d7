"""Tests for output type descriptors."""

from __future__ import annotations

import pytest

from parsecomb.union import MaybeType, OneOf, OneOfType, dedupe_types, flatten_types


class TestFlattenTypes:
    def test_plain_types_kept(self):
        assert flatten_types([str, int]) == [str, int]

    def test_nested_sum_expanded_in_place(self):
        nested = OneOfType((int, bytes))
        assert flatten_types([str, nested, float]) == [str, int, bytes, float]


class TestDedupeTypes:
    def test_first_occurrence_wins(self):
        assert dedupe_types([str, int, str, float, int]) == [str, int, float]

    def test_generic_aliases_compared_structurally(self):
        assert dedupe_types([list[str], list[str], list[int]]) == [list[str], list[int]]


class TestOneOfType:
    def test_of_flattens_and_dedupes(self):
        t = OneOfType.of(str, OneOfType.of(int, str), int)
        assert t.members == (str, int)

    def test_single_member(self):
        assert OneOfType.of(str, str).members == (str,)

    def test_equality_is_order_insensitive(self):
        assert OneOfType.of(str, int) == OneOfType.of(int, str)
        assert hash(OneOfType.of(str, int)) == hash(OneOfType.of(int, str))

    def test_different_members_not_equal(self):
        assert OneOfType.of(str) != OneOfType.of(str, int)
        assert OneOfType.of(str, int) != OneOfType.of(str, float)

    def test_index(self):
        t = OneOfType.of(str, list[str])
        assert t.index(list[str]) == 1
        with pytest.raises(ValueError):
            t.index(int)

    def test_contains(self):
        assert tuple[str, str] in OneOfType.of(tuple[str, str], int)

    def test_repr(self):
        assert repr(OneOfType.of(str, list[str])) == "OneOf[str, list[str]]"


class TestDescriptors:
    def test_one_of_value(self):
        v = OneOf(1, int, 5)
        assert (v.tag, v.type, v.value) == (1, int, 5)

    def test_maybe_type(self):
        assert MaybeType(str) == MaybeType(str)
        assert repr(MaybeType(str)) == "Maybe[str]"
