# Copyright © 2009/2023 Andrey Vlasovskikh
#
# Permission is hereby granted, free of charge, to any person obtaining a copy of this
# software and associated documentation files (the "Software"), to deal in the Software
# without restriction, including without limitation the rights to use, copy, modify,
# merge, publish, distribute, sublicense, and/or sell copies of the Software, and to
# permit persons to whom the Software is furnished to do so, subject to the following
# conditions:
#
# The above copyright notice and this permission notice shall be included in all copies
# or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED,
# INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A
# PARTICULAR PURPOSE AND NON-INFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT
# HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF
# CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE
# OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.

"""Outcome of a single parse attempt.

A parser returns either `Ok(consumed, value)` or `Err(position, message, kind)`.
Both are relative to the slice of tokens the parser was given: `consumed` is how many
tokens the parser advanced past, `position` is where the mismatch was detected.
Combinators translate positions of their children into their own frame with
`Err.shift()`.
"""

__all__ = [
    "Result",
    "Ok",
    "Err",
    "ErrorKind",
    "InvariantViolation",
    "NoParseError",
    "Unit",
    "UNIT",
    "Absent",
    "ABSENT",
]

import dataclasses as dc
import enum
import sys
from collections.abc import Sequence
from typing import Any, Callable, Optional, Protocol, TypeVar, final

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

_C = TypeVar("_C")

# Parsing result value
_R = TypeVar("_R", covariant=True)


_DC_KWARGS: dict[str, bool] = {}
if sys.version_info >= (3, 10):
    _DC_KWARGS["slots"] = True


class ErrorKind(enum.Enum):
    EMPTY_INPUT = "empty input"
    NO_MATCH = "no match"
    INPUT_TOO_SHORT = "input too short"
    NO_ALTERNATIVE_MATCHED = "no alternative matched"
    REPETITION_LIMIT_EXCEEDED = "repetition limit exceeded"
    END_OF_INPUT_EXPECTED = "end of input expected"


class InvariantViolation(Exception):
    """Raised when a result is unwrapped as the variant it is not."""


class NoParseError(Exception):
    def __init__(self, msg: str, failure: "Err") -> None:
        self.msg = msg
        self.failure = failure

    def __str__(self) -> str:
        return self.msg


class Result(Protocol[_R]):
    """Result of running a parser against a slice of tokens.

    Immutable (objects' data should not be changed after creation).
    """

    def is_ok(self) -> bool:
        ...

    def is_err(self) -> bool:
        ...

    def unwrap_value(self) -> _R:
        ...

    def unwrap_error(self) -> str:
        ...

    def consumed_or_position(self) -> int:
        ...

    def map(self, f: Callable[[_R], _C]) -> "Result[_C]":
        ...


@final
@dc.dataclass(frozen=True, **_DC_KWARGS)
class Ok(Result[_R]):
    consumed: int
    value: _R

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap_value(self) -> _R:
        return self.value

    def unwrap_error(self) -> str:
        raise InvariantViolation(
            "unwrap_error() called on a successful result: %r" % (self.value,)
        )

    def consumed_or_position(self) -> int:
        return self.consumed

    def map(self, f: Callable[[_R], _C]) -> Result[_C]:
        return Ok(self.consumed, f(self.value))


@final
@dc.dataclass(frozen=True, **_DC_KWARGS)
class Err(Result[_R]):
    position: int
    message: str
    kind: ErrorKind = ErrorKind.NO_MATCH
    cause: Optional["Err"] = dc.field(default=None, compare=False)
    expected: Optional[str] = dc.field(default=None, compare=False)
    """Name of the parser that detected the failure, for error messages."""

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap_value(self) -> _R:
        raise InvariantViolation(
            "unwrap_value() called on a failed result: %s" % self.message
        )

    def unwrap_error(self) -> str:
        return self.message

    def consumed_or_position(self) -> int:
        return self.position

    def map(self, f: Callable[[_R], _C]) -> Result[_C]:
        return self  # type: ignore

    def shift(self, offset: int) -> Self:
        """Translate the failure position into a frame that starts `offset` tokens
        earlier. The `cause` is translated too."""
        if offset == 0:
            return self
        cause = self.cause.shift(offset) if self.cause is not None else None
        return dc.replace(self, position=self.position + offset, cause=cause)

    def error(self, tokens: Sequence[Any]) -> NoParseError:
        """Convert this failure into a `NoParseError` with a message that shows the
        offending token of `tokens`."""
        if len(tokens) <= self.position:
            msg = "got unexpected end of input"
        else:
            t = tokens[self.position]
            msg = "%s: %s at %d" % (
                self.message,
                repr(t) if isinstance(t, str) else str(t),
                self.position,
            )
        if self.expected is not None:
            msg = f"{msg}, expected: {self.expected}"
        return NoParseError(msg, self)


@final
@dc.dataclass(frozen=True, **_DC_KWARGS)
class Unit:
    """Value of parsers that match tokens and drop what they matched."""

    def __repr__(self) -> str:
        return "UNIT"


UNIT = Unit()


@final
@dc.dataclass(frozen=True, **_DC_KWARGS)
class Absent:
    """Value of `optional(p)` when `p` did not match."""

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()
