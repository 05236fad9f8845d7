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

"""Output type descriptors of composite parsers.

Every `Parser` carries a descriptor of the values it produces: a plain type (`str`),
a generic alias (`tuple[str, str]`, `list[str]`), `typing.Any`, or one of the
descriptors defined here. The choice combinator uses `OneOfType` to build a sum type
over the distinct output types of its alternatives.
"""

__all__ = [
    "OneOfType",
    "OneOf",
    "MaybeType",
    "flatten_types",
    "dedupe_types",
]

import dataclasses as dc
import sys
from collections.abc import Iterable
from types import GenericAlias
from typing import Any, Generic, TypeVar, final

_V = TypeVar("_V", covariant=True)

_DC_KWARGS: dict[str, bool] = {}
if sys.version_info >= (3, 10):
    _DC_KWARGS["slots"] = True


def flatten_types(types: Iterable[Any]) -> list[Any]:
    """Expand every `OneOfType` in `types` into its members, keeping their order."""
    flat: list[Any] = []
    for t in types:
        if isinstance(t, OneOfType):
            flat.extend(t.members)
        else:
            flat.append(t)
    return flat


def dedupe_types(types: Iterable[Any]) -> list[Any]:
    """Drop repeated types, keeping the first occurrence of each.

    Descriptors are compared with `==`, so `list[str]` occurs once no matter how many
    times it was spelled.
    """
    unique: list[Any] = []
    for t in types:
        if not any(t == u for u in unique):
            unique.append(t)
    return unique


@final
@dc.dataclass(frozen=True, eq=False, **_DC_KWARGS)
class OneOfType:
    """Sum type over distinct output types.

    Build it with `OneOfType.of(...)`, which flattens nested sums and removes
    duplicates:

    ```pycon
    >>> OneOfType.of(str, OneOfType.of(int, str))
    OneOf[str, int]

    ```

    Two sums are equal if they have the same members, regardless of their order.
    """

    members: tuple[Any, ...]

    @classmethod
    def of(cls, *types: Any) -> "OneOfType":
        return cls(tuple(dedupe_types(flatten_types(types))))

    def index(self, t: Any) -> int:
        for i, m in enumerate(self.members):
            if m == t:
                return i
        raise ValueError(f"{t!r} is not a member of {self!r}")

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, t: object) -> bool:
        return any(t == m for m in self.members)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OneOfType):
            return NotImplemented
        return len(self) == len(other) and all(m in other for m in self.members)

    def __hash__(self) -> int:
        return hash(frozenset(self.members))

    def __repr__(self) -> str:
        return "OneOf[%s]" % ", ".join(_type_name(m) for m in self.members)


@final
@dc.dataclass(frozen=True, **_DC_KWARGS)
class OneOf(Generic[_V]):
    """Value of a choice parser: the parsed value tagged with the member of the
    `OneOfType` it belongs to."""

    tag: int
    type: Any
    value: _V


@final
@dc.dataclass(frozen=True, **_DC_KWARGS)
class MaybeType:
    """Output descriptor of `optional(p)`: either `inner` or `Absent`."""

    inner: Any

    def __repr__(self) -> str:
        return "Maybe[%s]" % _type_name(self.inner)


def _type_name(t: Any) -> str:
    if isinstance(t, type) and not isinstance(t, GenericAlias):
        return t.__qualname__
    return repr(t)
