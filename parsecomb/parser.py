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

"""Functional parsing combinators.

The structure of the language:

* Class `Parser`
    * All the primitives and combinators of the language return `Parser` objects
    * It defines the main `Parser.parse(tokens)` method that returns a `Result`
* Primitive parsers
    * `token(value_or_pred)`, `literal(seq)`, `pure(x)`, `forward_decl()`, `finished`
* Parser combinators
    * `sequence(p1, p2)` or `p1 + p2`, `choice(p1, p2, ...)` or `p1 | p2`,
      `map(p, f)` or `p >> f`, `discard(p)` or `-p`, `optional(p)`, `many(p)`,
      `many_bounded(p, max)`, `oneplus(p)`, `skip(p)`

Every time you apply one of the combinators, you get a new `Parser` object. Parsers
never raise on bad input: `parse()` returns `Ok(consumed, value)` or
`Err(position, message, kind)`, both measured from the start of the tokens given to
`parse()`.

Each parser also knows the type of the values it produces (`Parser.output`). The
output of `p1 + p2` is `tuple[...]` of both outputs, the output of `many(p)` is
`list[...]`, and the output of `choice(...)` is a `OneOfType` over the distinct output
types of its alternatives, with nested choices flattened into it.
"""

__all__ = [
    "Parser",
    "parser",
    "token",
    "literal",
    "sequence",
    "choice",
    "many",
    "many_bounded",
    "oneplus",
    "optional",
    "discard",
    "skip",
    "map",
    "pure",
    "finished",
    "forward_decl",
]

import dataclasses as dc
import logging
import sys
from collections.abc import Sequence
from typing import Any, Callable, Generic, Optional, TypeVar, Union, cast, final

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from parsecomb.result import ABSENT, UNIT, Err, ErrorKind, Ok, Result, Unit
from parsecomb.union import MaybeType, OneOf, OneOfType

log = logging.getLogger("parsecomb")

debug = False

_A = TypeVar("_A")
_B = TypeVar("_B")
_C = TypeVar("_C")

_DC_KWARGS: dict[str, bool] = {}
if sys.version_info >= (3, 10):
    _DC_KWARGS["slots"] = True

_ParserFn = Callable[[Sequence[_A], int], Result[_B]]
_ParserObjOrFn = Union["Parser[_A, _B]", _ParserFn]

@final
@dc.dataclass(frozen=True, init=False, **_DC_KWARGS)
class Parser(Generic[_A, _B]):
    """A parser object that can parse a sequence of tokens or can be combined with
    other parsers using `+`, `|`, `>>`, `-`, `many()`, and other parsing combinators.

    Type: `Parser[A, B]`

    The generic variables in the type are: `A` — the type of the tokens in the
    sequence to parse, `B` — the type of the parsed value.

    !!! Note

        The constructor `Parser.__init__()` is considered **internal**. Use primitive
        parsers and parsing combinators to construct new parsers.
    """

    run: _ParserFn[_A, _B]
    """Run the parser against the tokens starting at the offset `start`.

    Type: `(Sequence[A], int) -> Result[B]`

    The consumed length of `Ok` and the position of `Err` are relative to `start`.

    !!! Warning

        This method is **internal**. Use `Parser.parse(tokens)` instead.
    """

    name: str = dc.field(compare=False)

    output: Any = dc.field(compare=False)
    """Descriptor of the type of the parsed values."""

    def __init__(self, p: _ParserObjOrFn[_A, _B], output: Any = Any) -> None:
        """Wrap the parser function `p` into a `Parser` object."""
        object.__setattr__(self, "output", output)
        self.define(p)

    def named(self, name: str) -> Self:
        """Specify the name of the parser for easier debugging.

        Type: `(str) -> Parser[A, B]`

        This name is used in the debug-level parsing log and in the messages of
        `NoParseError`.

        ```pycon
        >>> expr = (token("x") + token("y")).named("expr")
        >>> expr.name
        'expr'

        ```

        ```pycon
        >>> expr = token("x") + token("y")
        >>> expr.name
        "('x', 'y')"

        ```

        !!! Note

            You can enable the parsing log this way:

            ```python
            import logging
            logging.basicConfig(level=logging.DEBUG)
            import parsecomb.parser
            parsecomb.parser.debug = True
            ```

            Parsers created before the switch are not traced.
        """
        object.__setattr__(self, "name", name)
        return self

    def _named_from(self, p: _ParserObjOrFn[_A, _B]) -> Self:
        if (name := getattr(p, "name", p.__doc__)) is not None:
            return self.named(name)
        return self.named(getattr(p, "__name__", "parser"))

    def define(self, p: _ParserObjOrFn[_A, _B]) -> None:
        """Define the parser created earlier as a forward declaration.

        Type: `(Parser[A, B]) -> None`

        Use `p = forward_decl()` in combination with `p.define(...)` to define
        recursive parsers.
        """
        f = p.run if isinstance(p, Parser) else p
        object.__setattr__(self, "run", self._wrap_for_debug(f) if debug else f)
        if isinstance(p, Parser):
            object.__setattr__(self, "output", p.output)

        self._named_from(p)

    def _wrap_for_debug(self, f: _ParserFn[_A, _B]) -> _ParserFn[_A, _B]:
        def run_parser_verbose(tokens: Sequence[_A], start: int) -> Result[_B]:
            log.debug("trying %s at %d" % (self.name, start))
            return f(tokens, start)

        return run_parser_verbose

    def parse(self, tokens: Sequence[_A]) -> Result[_B]:
        """Parse the sequence of tokens.

        Type: `(Sequence[A]) -> Result[B]`

        Returns `Ok(consumed, value)` if a prefix of the tokens matched, or
        `Err(position, message, kind)` otherwise. Trailing tokens are not an error,
        use `finished` to require the end of input.

        ```pycon
        >>> literal("C++").parse("C++ is amazing!")
        Ok(consumed=3, value='C++')
        >>> literal("Java").parse("C++ is amazing").is_err()
        True

        ```
        """
        return self.run(tokens, 0)

    def parse_value(self, tokens: Sequence[_A]) -> _B:
        """Parse the sequence of tokens and return the parsed value.

        Type: `(Sequence[A]) -> B`

        If the parser fails to parse the tokens, it raises `NoParseError`.

        ```pycon
        >>> (token("x") + token("y")).parse_value("xy")
        ('x', 'y')
        >>> (token("x") + token("y")).parse_value("xz")
        Traceback (most recent call last):
            ...
        parsecomb.result.NoParseError: got unexpected token: 'z' at 1, expected: 'y'

        ```
        """
        res = self.run(tokens, 0)
        if isinstance(res, Err):
            raise res.error(tokens)
        return res.unwrap_value()

    def map(self, f: Callable[[_B], _C], output: Any = Any) -> "Parser[_A, _C]":
        """Transform the parsing result by applying the specified function.

        Type: `(Callable[[B], C]) -> Parser[A, C]`

        See `map()`.
        """
        return map(self, f, output)

    def __add__(self, other: "Parser[_A, _C]") -> "Parser[_A, tuple[_B, _C]]":
        """Sequential combination of parsers. An alias for `sequence(self, other)`.

        ```pycon
        >>> expr = token("x") + token("y") + token("z")
        >>> expr.parse("xyz").unwrap_value()
        (('x', 'y'), 'z')

        ```
        """
        return sequence(self, other)

    def __or__(self, other: "Parser[_A, _C]") -> "Parser[_A, OneOf[Any]]":
        """Choice combination of parsers. An alias for `choice(self, other)`."""
        return choice(self, other)

    def __rshift__(self, f: Callable[[_B], _C]) -> "Parser[_A, _C]":
        """Transform the parsing result. An alias for `map(self, f)`.

        ```pycon
        >>> expr = many(token("1")) >> len
        >>> expr.parse("111x").unwrap_value()
        3

        ```
        """
        return map(self, f)

    def __neg__(self) -> "Parser[_A, Unit]":
        """Match the same tokens, but drop the parsed value. An alias for
        `discard(self)`."""
        return discard(self)


def parser(name: str, output: Any = Any) -> Callable[[_ParserFn[_A, _B]], Parser[_A, _B]]:
    """Decorator to create named parsers directly."""

    def _parser(f: _ParserFn[_A, _B]) -> Parser[_A, _B]:
        return Parser(f, output).named(name)

    return _parser


def token(value: Union[_A, Callable[[_A], bool]], output: Any = None) -> Parser[_A, _A]:
    """Return a parser that parses a single token.

    Type: `(A | Callable[[A], bool]) -> Parser[A, A]`

    If `value` is callable, it is a predicate the token has to satisfy, otherwise the
    token has to be equal to `value`. The parsed value is the token itself.

    Classes are callable too, so `token(int)` calls `int(t)` as a predicate and never
    matches a token that is the class `int` itself. Use `token(lambda t: t is int)`
    for that.

    ```pycon
    >>> token("a").parse("abc")
    Ok(consumed=1, value='a')
    >>> token("a").parse("").kind
    <ErrorKind.EMPTY_INPUT: 'empty input'>
    >>> token("a").parse("xyz").kind
    <ErrorKind.NO_MATCH: 'no match'>
    >>> token(str.isdigit).named("digit").parse("7up").unwrap_value()
    '7'

    ```

    The output type is the type of `value`, or `output` for predicates (`Any` if
    omitted).
    """
    if callable(value):
        pred = cast(Callable[[_A], bool], value)
        name = "token(...)"
        if output is None:
            output = Any
    else:

        def pred(t: _A) -> bool:
            return t == value

        name = repr(getattr(value, "name", value))
        if output is None:
            output = type(value)

    @parser(name, output)
    def _token(tokens: Sequence[_A], start: int) -> Result[_A]:
        if start >= len(tokens):
            return Err(
                0,
                "got unexpected end of input",
                ErrorKind.EMPTY_INPUT,
                expected=_token.name,
            )

        t = tokens[start]
        if pred(t):
            if debug:
                log.debug("*matched* %r at %d" % (t, start))
            return Ok(1, t)

        if debug:
            log.debug("failed %r at %d, expected: %s" % (t, start, _token.name))
        return Err(0, "got unexpected token", ErrorKind.NO_MATCH, expected=_token.name)

    return _token


def literal(expected: Sequence[_A]) -> Parser[_A, Sequence[_A]]:
    """Return a parser that parses the tokens of `expected` in a row.

    Type: `(Sequence[A]) -> Parser[A, Sequence[A]]`

    The parsed value is `expected` itself. An empty `expected` always matches without
    consuming anything.

    ```pycon
    >>> literal("").parse("Python")
    Ok(consumed=0, value='')
    >>> literal("JS").parse("J").kind
    <ErrorKind.INPUT_TOO_SHORT: 'input too short'>
    >>> literal(["def", "f"]).parse(["def", "f", "(", ")"])
    Ok(consumed=2, value=['def', 'f'])

    ```
    """
    n = len(expected)

    @parser(repr(expected), type(expected))
    def _literal(tokens: Sequence[_A], start: int) -> Result[Sequence[_A]]:
        if n == 0:
            return Ok(0, expected)
        if len(tokens) - start < n:
            return Err(
                0,
                "got input shorter than expected",
                ErrorKind.INPUT_TOO_SHORT,
                expected=_literal.name,
            )
        for i, e in enumerate(expected):
            if tokens[start + i] != e:
                if debug:
                    log.debug("failed at %d, expected: %s" % (start, _literal.name))
                return Err(
                    0,
                    "got unexpected token",
                    ErrorKind.NO_MATCH,
                    expected=_literal.name,
                )
        if debug:
            log.debug("*matched* %s at %d" % (_literal.name, start))
        return Ok(n, expected)

    return _literal


def sequence(first: Parser[_A, _B], second: Parser[_A, _C]) -> Parser[_A, tuple[_B, _C]]:
    """Return a parser that runs `first`, then runs `second` on the rest of the tokens.

    Type: `(Parser[A, B], Parser[A, C]) -> Parser[A, tuple[B, C]]`

    The parsed value is the pair of both parsed values. If `second` fails, its error
    position is reported relative to the tokens given to the sequence.

    ```pycon
    >>> sequence(token("a"), literal("shwith")).parse("ashwith")
    Ok(consumed=7, value=('a', 'shwith'))
    >>> sequence(token("a"), literal("sh")).parse("axe").consumed_or_position()
    1

    ```
    """

    @parser(
        "(%s, %s)" % (first.name, second.name),
        tuple[first.output, second.output],  # type: ignore[name-defined]
    )
    def _sequence(tokens: Sequence[_A], start: int) -> Result[tuple[_B, _C]]:
        res_l = first.run(tokens, start)
        if isinstance(res_l, Err):
            return res_l
        res_l = cast("Ok[_B]", res_l)

        res_r = second.run(tokens, start + res_l.consumed)
        if isinstance(res_r, Err):
            return res_r.shift(res_l.consumed)
        res_r = cast("Ok[_C]", res_r)

        return Ok(res_l.consumed + res_r.consumed, (res_l.value, res_r.value))

    return _sequence


def choice(*alternatives: Parser[_A, Any]) -> Parser[_A, OneOf[Any]]:
    """Return a parser that runs the alternatives in order and returns the result of
    the first one that succeeds.

    Type: `(Parser[A, B1], Parser[A, B2], ...) -> Parser[A, OneOf[B1 | B2 | ...]]`

    The parsed value is a `OneOf` holding the value of the alternative that succeeded,
    tagged with its type. Alternatives with the same output type share a single tag,
    and nested choices are flattened into the enclosing one.

    ```pycon
    >>> expr = choice(literal("a"), literal("also"))
    >>> expr.parse("ashwith")
    Ok(consumed=1, value=OneOf(tag=0, type=<class 'str'>, value='a'))
    >>> expr.output
    OneOf[str]
    >>> choice(token("a"), many(token("b"))).output
    OneOf[str, list[str]]

    ```

    If every alternative fails, the result is a `NO_ALTERNATIVE_MATCHED` error at the
    start of the tokens, with the failure of the last alternative as its `cause`.
    """
    if len(alternatives) == 0:
        raise ValueError("At least one parser required.")
    output = OneOfType.of(*(p.output for p in alternatives))
    # Values of nested choices are retagged by their own type when parsed
    branches = [
        (p, None if isinstance(p.output, OneOfType) else output.index(p.output))
        for p in alternatives
    ]

    @parser(" or ".join(p.name for p in alternatives), output)
    def _choice(tokens: Sequence[_A], start: int) -> Result[OneOf[Any]]:
        res: Result[Any]
        err: Optional[Err] = None
        for p, tag in branches:
            res = p.run(tokens, start)
            if isinstance(res, Ok):
                if tag is None:
                    nested = cast("OneOf[Any]", res.value)
                    i, value = output.index(nested.type), nested.value
                else:
                    i, value = tag, res.value
                return Ok(res.consumed, OneOf(i, output.members[i], value))
            err = cast(Err, res)

        if debug:
            log.debug("no alternative of %s matched at %d" % (_choice.name, start))
        return Err(
            0,
            "no alternative matched",
            ErrorKind.NO_ALTERNATIVE_MATCHED,
            cause=err,
            expected=_choice.name,
        )

    return _choice


# noinspection PyShadowingBuiltins
def many(p: Parser[_A, _B], max: Optional[int] = None) -> Parser[_A, list[_B]]:
    """Return a parser that applies the parser `p` as many times as it succeeds at
    parsing the tokens.

    Type: `(Parser[A, B], int | None) -> Parser[A, list[B]]`

    The parsed value is a list of the sequentially parsed values. The repetition stops
    when `p` fails or when it succeeds without consuming any tokens, so `many()`
    itself never fails unless `max` is given.

    ```pycon
    >>> expr = many(token("a"))
    >>> expr.parse("aaab")
    Ok(consumed=3, value=['a', 'a', 'a'])
    >>> expr.parse("b")
    Ok(consumed=0, value=[])

    ```

    If `max` is given and `p` can still match after `max` repetitions, the result is a
    `REPETITION_LIMIT_EXCEEDED` error positioned at the first extra match. Exactly
    `max` repetitions followed by a failure (or the end of input) is a success:

    ```pycon
    >>> many(token("a"), 2).parse("aab").unwrap_value()
    ['a', 'a']
    >>> many(token("a"), 2).parse("aa").unwrap_value()
    ['a', 'a']
    >>> res = many(token("a"), 2).parse("aaab")
    >>> res.kind, res.position
    (<ErrorKind.REPETITION_LIMIT_EXCEEDED: 'repetition limit exceeded'>, 2)

    ```
    """
    if max is not None and max < 0:
        raise ValueError("The repetition limit must not be negative.")
    name = "{ %s }" % p.name if max is None else "{ %s }<=%d" % (p.name, max)

    @parser(name, list[p.output])  # type: ignore[name-defined]
    def _many(tokens: Sequence[_A], start: int) -> Result[list[_B]]:
        acc: list[_B] = []
        consumed = 0
        while True:
            res = p.run(tokens, start + consumed)
            if isinstance(res, Err):
                break
            res = cast("Ok[_B]", res)
            if res.consumed == 0:
                break
            if max is not None and len(acc) >= max:
                if debug:
                    log.debug(f"{_many.name} exceeded its limit at {start + consumed}")
                return Err(
                    consumed,
                    "got more than %d repetitions of %s" % (max, p.name),
                    ErrorKind.REPETITION_LIMIT_EXCEEDED,
                )
            acc.append(res.value)
            consumed += res.consumed

        if debug:
            log.debug(
                f"*matched* {len(acc)} instances of {_many.name}, consumed = {consumed}"
            )
        return Ok(consumed, acc)

    return _many


# noinspection PyShadowingBuiltins
def many_bounded(p: Parser[_A, _B], max: int) -> Parser[_A, list[_B]]:
    """An alias for `many(p, max)`."""
    return many(p, max)


def oneplus(p: Parser[_A, _B]) -> Parser[_A, list[_B]]:
    """Return a parser that applies the parser `p` one or more times.

    A similar parser combinator `many(p)` means apply `p` zero or more times, whereas
    `oneplus(p)` means apply `p` one or more times.

    ```pycon
    >>> expr = oneplus(token("x"))
    >>> expr.parse("xxy").unwrap_value()
    ['x', 'x']
    >>> expr.parse("y").kind
    <ErrorKind.NO_MATCH: 'no match'>

    ```
    """
    many_p = many(p)

    @parser("(%s, { %s })" % (p.name, p.name), list[p.output])  # type: ignore[name-defined]
    def _oneplus(tokens: Sequence[_A], start: int) -> Result[list[_B]]:
        first = p.run(tokens, start)
        if isinstance(first, Err):
            return first
        first = cast("Ok[_B]", first)
        rest = cast("Ok[list[_B]]", many_p.run(tokens, start + first.consumed))
        return Ok(first.consumed + rest.consumed, [first.value] + rest.value)

    return _oneplus


def optional(p: Parser[_A, _B]) -> Parser[_A, Union[_B, Any]]:
    """Return a parser that returns `ABSENT` if the parser `p` fails.

    ```pycon
    >>> expr = optional(token("x"))
    >>> expr.parse("xy")
    Ok(consumed=1, value='x')
    >>> expr.parse("y")
    Ok(consumed=0, value=ABSENT)

    ```
    """

    @parser("[ %s ]" % (p.name,), MaybeType(p.output))
    def _optional(tokens: Sequence[_A], start: int) -> Result[Any]:
        res = p.run(tokens, start)
        if isinstance(res, Ok):
            return res
        return Ok(0, ABSENT)

    return _optional


def _to_unit(_: Any) -> Unit:
    return UNIT


def discard(p: Parser[_A, Any]) -> Parser[_A, Unit]:
    """Return a parser that parses the same tokens, but drops the parsed value.

    You can use it for throwing away elements of concrete syntax (e.g. `","`,
    `";"`).

    ```pycon
    >>> expr = -token("(") + token("x")
    >>> expr.parse("(x").unwrap_value()
    (UNIT, 'x')

    ```
    """

    @parser(p.name, Unit)
    def _discard(tokens: Sequence[_A], start: int) -> Result[Unit]:
        return p.run(tokens, start).map(_to_unit)

    return _discard


def skip(p: Parser[_A, Any]) -> Parser[_A, Unit]:
    """Return a parser that applies the parser `p` as many times as it succeeds and
    drops the parsed values.

    It never fails, skipping nothing is fine too.

    ```pycon
    >>> ws = skip(token(" "))
    >>> ws.parse("   x")
    Ok(consumed=3, value=UNIT)
    >>> ws.parse("x")
    Ok(consumed=0, value=UNIT)

    ```
    """
    return discard(many(p)).named("skip(%s)" % (p.name,))


# noinspection PyShadowingBuiltins
def map(p: Parser[_A, _B], f: Callable[[_B], _C], output: Any = Any) -> Parser[_A, _C]:
    """Return a parser that transforms the value parsed by `p` with `f`.

    Type: `(Parser[A, B], Callable[[B], C]) -> Parser[A, C]`

    Failures are passed through unchanged and `f` is not called for them. Pass
    `output` to declare the type of the transformed values for `choice()`.

    ```pycon
    >>> expr = map(token("D") | token("d"), lambda v: v.value.lower())
    >>> expr.parse("D").unwrap_value()
    'd'

    ```
    """

    @parser(p.name, output)
    def _map(tokens: Sequence[_A], start: int) -> Result[_C]:
        return p.run(tokens, start).map(f)

    return _map


def pure(x: _A) -> Parser[Any, _A]:
    """Wrap any object into a parser.

    Type: `(A) -> Parser[Any, A]`

    A pure parser doesn't touch the tokens sequence, it just returns its pure `x`
    value.
    """

    @parser("(pure %r)" % (x,), type(x))
    def _pure(_: Sequence[Any], start: int) -> Result[_A]:
        return Ok(0, x)

    return _pure


@parser("end of input", type(None))
def finished(tokens: Sequence[Any], start: int) -> Result[None]:
    """A parser that fails if there are any unparsed tokens left in the sequence."""
    if start >= len(tokens):
        return Ok(0, None)
    return Err(
        0,
        "got unexpected token",
        ErrorKind.END_OF_INPUT_EXPECTED,
        expected=finished.name,
    )


def forward_decl(output: Any = Any) -> Parser[Any, Any]:
    """Return an undefined parser that can be used as a forward declaration.

    Type: `Parser[Any, Any]`

    Use `p = forward_decl()` in combination with `p.define(...)` to define recursive
    parsers.

    ```pycon
    >>> expr = forward_decl()
    >>> expr.define(token("x") + optional(expr) + token("y"))
    >>> expr.parse("xxyy").unwrap_value()
    (('x', (('x', ABSENT), 'y')), 'y')
    >>> expr.parse_value("xxy")
    Traceback (most recent call last):
        ...
    parsecomb.result.NoParseError: got unexpected end of input, expected: 'y'

    ```

    !!! Note

        Combinators read the output type of their operands when they are created.
        Pass `output` if a choice over the declaration is built before `define()`.
    """

    @parser("forward_decl()", output)
    def f(_tokens: Any, _start: Any) -> Any:
        raise NotImplementedError("you must define() a forward_decl somewhere")

    return f
