"""Character-level parser combinators for the Erebus grammar.

Every parser is a callable ``(state, index) -> (value, next_index)`` that raises
:class:`~erebus.errors.ParseError` when it cannot match at ``index``. Larger
grammars are assembled from the primitives below (``just``, ``keyword``,
``satisfy``, ``seq``, ``choice``) and the fluent methods on :class:`Parser`
(``map``, ``repeated``, ``separated_by``, ``padded``, ``try_map``, ...).

Whitespace is never skipped implicitly; rules opt in with ``padded()`` so that
whitespace-sensitive rules such as string literals see every character.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from .errors import Diagnostic, ErrorKind, GrammarError, LexError, ParseError, SourceSpan

T = TypeVar("T")
U = TypeVar("U")

ParseFn = Callable[["State", int], Tuple[Any, int]]


#characters that may continue an identifier; keywords must not be followed by one
def is_ident_continue(char: str) -> bool:
    return char == "_" or char.isalnum()


#skips any run of whitespace without recording a failure
def skip_whitespace(source: str, index: int) -> int:
    length = len(source)
    while index < length and source[index].isspace():
        index += 1
    return index


#per-parse bookkeeping so independent parses never share anything
@dataclass(slots=True)
class State:
    source: str
    max_depth: Optional[int] = None
    furthest: Optional[ParseError] = field(init=False, default=None)
    memo: Dict[Tuple[int, int], Any] = field(init=False, default_factory=dict)
    depth: int = field(init=False, default=0)
    _offsets: Optional[List[int]] = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.source.isascii():
            offsets = [0]
            for char in self.source:
                offsets.append(offsets[-1] + len(char.encode("utf-8")))
            self._offsets = offsets

    #forgets failures and cached results before an unrelated attempt
    def reset(self) -> None:
        self.furthest = None
        self.memo.clear()
        self.depth = 0

    def found(self, index: int) -> Optional[str]:
        if index < len(self.source):
            return self.source[index]
        return None

    #creates a failure and remembers it if it is the furthest one so far
    def fail(self, index: int, *expected: Optional[str]) -> ParseError:
        labels = [label for label in expected if label]
        error = ParseError(index, expected=labels, found=self.found(index))
        if labels:
            self.record(error)
        return error

    def record(self, error: ParseError) -> None:
        furthest = self.furthest
        if furthest is None or error.index > furthest.index:
            self.furthest = error
        elif error.index == furthest.index and not furthest.fatal:
            self.furthest = furthest.merge(error)

    #fatal failures end the parse regardless of remaining alternatives
    def fatal(
        self,
        start: int,
        end: int,
        message: str,
        reason: str,
        kind: ErrorKind = ErrorKind.LEXICAL,
    ) -> ParseError:
        error = ParseError(
            start,
            end,
            found=self.found(start),
            message=message,
            reason=reason,
            kind=kind,
            fatal=True,
        )
        self.furthest = error
        return error

    #the most informative failure to report for a rule that gave up
    def best(self, error: ParseError) -> ParseError:
        if error.fatal or self.furthest is None:
            return error
        return self.furthest

    def byte_offset(self, index: int) -> int:
        if self._offsets is None:
            return index
        return self._offsets[min(index, len(self._offsets) - 1)]

    def span(self, start: int, end: int) -> SourceSpan:
        return SourceSpan(start=self.byte_offset(start), end=self.byte_offset(end))

    def diagnostic(self, error: ParseError) -> Diagnostic:
        length = len(self.source)
        span = self.span(min(error.index, length), min(error.end, length))
        return Diagnostic(message=error.message, reason=error.reason, span=span, kind=error.error_kind)


#wraps a parsing function with the fluent combinator surface
class Parser(Generic[T]):
    """A grammar rule.

    Combinators call the wrapped ``_fn`` of their children directly rather than
    going through ``__call__``, so each grammar step costs one interpreter frame.
    """

    __slots__ = ("_fn", "name")

    def __init__(self, fn: ParseFn, name: str = "parser") -> None:
        self._fn = fn
        self.name = name

    def __call__(self, state: State, index: int) -> Tuple[T, int]:
        return self._fn(state, index)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"<Parser {self.name}>"

    # Entry points -------------------------------------------------------

    def parse(self, source: str, max_depth: Optional[int] = None) -> T:
        """Parse the whole of ``source``; trailing input is an error."""

        value, _ = self.skip(end()).parse_partial(source, max_depth)
        return value

    def parse_partial(self, source: str, max_depth: Optional[int] = None) -> Tuple[T, int]:
        """Parse a prefix of ``source`` and return the value and where it stopped."""

        return run(self, State(source, max_depth=max_depth))

    # Sequencing ---------------------------------------------------------

    def skip(self, other: Parser[Any]) -> Parser[T]:
        first, second = self._fn, other._fn

        def parse(state: State, index: int) -> Tuple[T, int]:
            value, index = first(state, index)
            _, index = second(state, index)
            return value, index

        return Parser(parse, f"{self.name} << {other.name}")

    def ignore_then(self, other: Parser[U]) -> Parser[U]:
        first, second = self._fn, other._fn

        def parse(state: State, index: int) -> Tuple[U, int]:
            _, index = first(state, index)
            return second(state, index)

        return Parser(parse, f"{self.name} >> {other.name}")

    # Transformation -----------------------------------------------------

    def map(self, fn: Callable[[T], U]) -> Parser[U]:
        inner = self._fn

        def parse(state: State, index: int) -> Tuple[U, int]:
            value, index = inner(state, index)
            return fn(value), index

        return Parser(parse, self.name)

    def to(self, value: U) -> Parser[U]:
        return self.map(lambda _: value)

    def map_with_span(self, fn: Callable[[T, SourceSpan], U]) -> Parser[U]:
        inner = self._fn

        def parse(state: State, index: int) -> Tuple[U, int]:
            value, end_index = inner(state, index)
            return fn(value, state.span(index, end_index)), end_index

        return Parser(parse, self.name)

    def try_map(self, fn: Callable[[T, SourceSpan], U]) -> Parser[U]:
        """Post-process a match; a :class:`LexError` from ``fn`` is fatal."""

        inner = self._fn

        def parse(state: State, index: int) -> Tuple[U, int]:
            value, end_index = inner(state, index)
            try:
                return fn(value, state.span(index, end_index)), end_index
            except LexError as error:
                raise state.fatal(index, end_index, error.message, error.reason) from None

        return Parser(parse, self.name)

    # Repetition ---------------------------------------------------------

    def optional(self, default: Any = None) -> Parser[Any]:
        inner = self._fn

        def parse(state: State, index: int) -> Tuple[Any, int]:
            try:
                return inner(state, index)
            except ParseError as error:
                if error.fatal:
                    raise
                return default, index

        return Parser(parse, f"{self.name}?")

    def repeated(self, min: int = 0, max: Optional[int] = None) -> Parser[List[T]]:
        inner = self._fn

        def parse(state: State, index: int) -> Tuple[List[T], int]:
            values: List[T] = []
            last_error: Optional[ParseError] = None
            while max is None or len(values) < max:
                try:
                    value, next_index = inner(state, index)
                except ParseError as error:
                    if error.fatal:
                        raise
                    last_error = error
                    break
                if next_index == index and max is None:
                    raise GrammarError(f"{self.name} matched empty input inside an unbounded repetition")
                values.append(value)
                index = next_index
            if len(values) < min:
                assert last_error is not None
                raise last_error
            return values, index

        return Parser(parse, f"{self.name}*")

    def separated_by(
        self,
        separator: Parser[Any],
        min: int = 0,
        allow_trailing: bool = False,
    ) -> Parser[List[T]]:
        item, between = self._fn, separator._fn

        def parse(state: State, index: int) -> Tuple[List[T], int]:
            values: List[T] = []
            try:
                value, index = item(state, index)
            except ParseError as error:
                if error.fatal or min > 0:
                    raise
                return values, index
            values.append(value)
            last_error: Optional[ParseError] = None
            while True:
                try:
                    _, after_separator = between(state, index)
                except ParseError as error:
                    if error.fatal:
                        raise
                    last_error = error
                    break
                try:
                    value, after_item = item(state, after_separator)
                except ParseError as error:
                    if error.fatal:
                        raise
                    last_error = error
                    if allow_trailing:
                        index = after_separator
                    break
                if after_item == index:
                    raise GrammarError(f"{self.name} separated by {separator.name} matched empty input")
                values.append(value)
                index = after_item
            if len(values) < min:
                assert last_error is not None
                raise last_error
            return values, index

        return Parser(parse, f"{self.name} separated by {separator.name}")

    # Whitespace, diagnostics and caching --------------------------------

    def padded(self) -> Parser[T]:
        inner = self._fn

        def parse(state: State, index: int) -> Tuple[T, int]:
            value, index = inner(state, skip_whitespace(state.source, index))
            return value, skip_whitespace(state.source, index)

        return Parser(parse, self.name)

    def labelled(self, label: str) -> Parser[T]:
        """Report ``label`` instead of the inner expectations when nothing matched."""

        inner = self._fn

        def parse(state: State, index: int) -> Tuple[T, int]:
            saved = state.furthest
            try:
                return inner(state, index)
            except ParseError as error:
                if error.fatal:
                    raise
                furthest = state.furthest
                if furthest is not None and furthest.index > index:
                    raise
                state.furthest = saved
                raise state.fail(index, label) from None

        return Parser(parse, label)

    def memo(self) -> Parser[T]:
        """Cache results per input position for the duration of one parse."""

        inner = self._fn
        key = id(self)

        def parse(state: State, index: int) -> Tuple[T, int]:
            cached = state.memo.get((key, index))
            if cached is None:
                try:
                    cached = inner(state, index)
                except ParseError as error:
                    cached = error
                state.memo[(key, index)] = cached
            if isinstance(cached, ParseError):
                raise cached
            return cached

        return Parser(parse, self.name)


#forward-declared grammar handle used to tie recursive rules together
class Recursive(Parser[T]):
    __slots__ = ("_inner",)

    def __init__(self, name: str = "recursive") -> None:
        self._inner: Optional[Parser[T]] = None

        def enter(state: State, index: int) -> Tuple[T, int]:
            inner = self._inner
            if inner is None:
                raise GrammarError(f"recursive rule {self.name!r} used before it was defined")
            state.depth += 1
            try:
                if state.max_depth is not None and state.depth > state.max_depth:
                    raise state.fatal(
                        index,
                        index + 1,
                        f"{self.name} is nested too deeply",
                        f"the nesting limit is {state.max_depth}",
                        kind=ErrorKind.STRUCTURE,
                    )
                return inner._fn(state, index)
            finally:
                state.depth -= 1

        super().__init__(enter, name)

    def define(self, parser: Parser[T]) -> Recursive[T]:
        if self._inner is not None:
            raise GrammarError(f"recursive rule {self.name!r} is already defined")
        self._inner = parser
        return self


def recursive(builder: Callable[[Parser[T]], Parser[T]], name: str = "recursive") -> Recursive[T]:
    """Build a self-referential rule: ``builder`` receives the rule itself."""

    handle: Recursive[T] = Recursive(name)
    return handle.define(builder(handle))


#runs a parser on a fresh or reused state and reports the best failure
def run(parser: Parser[T], state: State, index: int = 0) -> Tuple[T, int]:
    try:
        return parser(state, index)
    except ParseError as error:
        raise state.best(error) from None
    except RecursionError:
        deepest = state.furthest.index if state.furthest is not None else index
        raise ParseError(
            deepest,
            len(state.source),
            found=state.found(deepest),
            message="input is nested too deeply",
            reason="the interpreter recursion limit was reached",
            kind=ErrorKind.STRUCTURE,
            fatal=True,
        ) from None


# Primitives -----------------------------------------------------------------


def just(text: str) -> Parser[str]:
    label = f"'{text}'"

    def parse(state: State, index: int) -> Tuple[str, int]:
        if state.source.startswith(text, index):
            return text, index + len(text)
        raise state.fail(index, label)

    return Parser(parse, label)


#matches a whole word so that `letmut` is never read as `let`
def keyword(word: str) -> Parser[str]:
    label = f"'{word}'"

    def parse(state: State, index: int) -> Tuple[str, int]:
        end_index = index + len(word)
        source = state.source
        if source.startswith(word, index) and not (
            end_index < len(source) and is_ident_continue(source[end_index])
        ):
            return word, end_index
        raise state.fail(index, label)

    return Parser(parse, label)


def satisfy(predicate: Callable[[str], bool], label: Optional[str] = None) -> Parser[str]:
    def parse(state: State, index: int) -> Tuple[str, int]:
        if index < len(state.source):
            char = state.source[index]
            if predicate(char):
                return char, index + 1
        raise state.fail(index, label)

    return Parser(parse, label or "character")


def one_of(chars: str, label: Optional[str] = None) -> Parser[str]:
    return satisfy(lambda char: char in chars, label)


def none_of(chars: str, label: Optional[str] = None) -> Parser[str]:
    return satisfy(lambda char: char not in chars, label)


def any_char() -> Parser[str]:
    return satisfy(lambda _: True, "any character")


def end() -> Parser[None]:
    def parse(state: State, index: int) -> Tuple[None, int]:
        if index >= len(state.source):
            return None, index
        raise state.fail(index, "end of input")

    return Parser(parse, "end of input")


def seq(*parsers: Parser[Any]) -> Parser[Tuple[Any, ...]]:
    fns = tuple(parser._fn for parser in parsers)

    def parse(state: State, index: int) -> Tuple[Tuple[Any, ...], int]:
        values = []
        for fn in fns:
            value, index = fn(state, index)
            values.append(value)
        return tuple(values), index

    return Parser(parse, " ".join(parser.name for parser in parsers))


#ordered alternation: the first success wins, the furthest failure is kept
def choice(*parsers: Parser[Any]) -> Parser[Any]:
    if not parsers:
        raise GrammarError("choice() needs at least one alternative")

    fns = tuple(parser._fn for parser in parsers)

    def parse(state: State, index: int) -> Tuple[Any, int]:
        best: Optional[ParseError] = None
        for fn in fns:
            try:
                return fn(state, index)
            except ParseError as error:
                if error.fatal:
                    raise
                if best is None or error.index > best.index:
                    best = error
        assert best is not None
        raise best

    return Parser(parse, " | ".join(parser.name for parser in parsers))


whitespace: Parser[None] = Parser(
    lambda state, index: (None, skip_whitespace(state.source, index)),
    "whitespace",
)


__all__ = [
    "Parser",
    "Recursive",
    "State",
    "any_char",
    "choice",
    "end",
    "is_ident_continue",
    "just",
    "keyword",
    "none_of",
    "one_of",
    "recursive",
    "run",
    "satisfy",
    "seq",
    "skip_whitespace",
    "whitespace",
]
