"""Tests for parse results."""

from __future__ import annotations

import pytest

from parsecomb.result import (
    ABSENT,
    UNIT,
    Err,
    ErrorKind,
    InvariantViolation,
    NoParseError,
    Ok,
)


class TestOk:
    def test_variant(self):
        res = Ok(3, "C++")
        assert res.is_ok()
        assert not res.is_err()

    def test_unwrap_value(self):
        assert Ok(1, "a").unwrap_value() == "a"

    def test_unwrap_error_is_invariant_violation(self):
        with pytest.raises(InvariantViolation):
            Ok(1, "a").unwrap_error()

    def test_consumed(self):
        assert Ok(7, ("a", "shwith")).consumed_or_position() == 7

    def test_map(self):
        assert Ok(2, "ab").map(str.upper) == Ok(2, "AB")

    def test_immutable(self):
        res = Ok(1, "a")
        with pytest.raises(AttributeError):
            res.consumed = 2  # type: ignore[misc]


class TestErr:
    def test_variant(self):
        res = Err(0, "got unexpected token")
        assert res.is_err()
        assert not res.is_ok()
        assert res.kind is ErrorKind.NO_MATCH

    def test_unwrap_error(self):
        assert Err(4, "boom").unwrap_error() == "boom"

    def test_unwrap_value_is_invariant_violation(self):
        with pytest.raises(InvariantViolation):
            Err(0, "boom").unwrap_value()

    def test_position(self):
        assert Err(5, "boom").consumed_or_position() == 5

    def test_map_does_not_call_function(self):
        def fail(_):
            raise AssertionError("must not be called")

        res = Err(2, "boom", ErrorKind.EMPTY_INPUT)
        assert res.map(fail) is res

    def test_shift(self):
        res = Err(1, "boom", ErrorKind.INPUT_TOO_SHORT, expected="'ab'")
        shifted = res.shift(3)
        assert shifted.position == 4
        assert shifted.message == "boom"
        assert shifted.kind is ErrorKind.INPUT_TOO_SHORT
        assert shifted.expected == "'ab'"

    def test_shift_moves_cause(self):
        res = Err(0, "outer", cause=Err(1, "inner")).shift(2)
        assert res.position == 2
        assert res.cause is not None
        assert res.cause.position == 3
        assert res.cause.message == "inner"

    def test_shift_by_zero_is_identity(self):
        res = Err(1, "boom")
        assert res.shift(0) is res

    def test_equality_ignores_cause(self):
        assert Err(0, "x", cause=Err(1, "y")) == Err(0, "x")


class TestNoParseError:
    def test_unexpected_token(self):
        err = Err(1, "got unexpected token", expected="'y'").error("xz")
        assert isinstance(err, NoParseError)
        assert str(err) == "got unexpected token: 'z' at 1, expected: 'y'"

    def test_end_of_input(self):
        err = Err(2, "got unexpected end of input", ErrorKind.EMPTY_INPUT).error("ab")
        assert str(err) == "got unexpected end of input"

    def test_non_string_tokens(self):
        err = Err(0, "got unexpected token").error([42])
        assert str(err) == "got unexpected token: 42 at 0"

    def test_keeps_failure(self):
        failure = Err(0, "got unexpected token")
        assert failure.error("a").failure is failure


class TestMarkers:
    def test_repr(self):
        assert repr(UNIT) == "UNIT"
        assert repr(ABSENT) == "ABSENT"

    def test_distinct(self):
        assert UNIT != ABSENT
