"""Common error, diagnostic and source span utilities."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


#describes an exact line/column position derived from a byte offset
@dataclass(frozen=True, slots=True)
class SourceLocation:
    """A 1-based line/column location inside a source file."""

    line: int
    column: int

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.line}:{self.column}"


#stores the start/end byte offsets for highlighting user diagnostics
@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Represents a half-open byte range [start, end) into the source buffer."""

    start: int
    end: int

    def merge(self, other: "SourceSpan") -> "SourceSpan":
        """Return the minimal span that covers both spans."""

        return SourceSpan(start=min(self.start, other.start), end=max(self.end, other.end))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.start}..{self.end}"


#turns a byte offset back into the line/column a human would look for
def locate(source: str, offset: int) -> SourceLocation:
    prefix = source.encode("utf-8")[:offset].decode("utf-8", errors="ignore")
    line = prefix.count("\n") + 1
    column = len(prefix) - (prefix.rfind("\n") + 1) + 1
    return SourceLocation(line=line, column=column)


#the three families of problems the grammar can report
class ErrorKind(Enum):
    LEXICAL = "lexical"
    SYNTAX = "syntax"
    STRUCTURE = "structure"


#labels that name a required closing construct rather than a fresh token
CLOSING_LABELS = frozenset({"'}'", "')'", "';'", "tail expression", "end of input"})


#the record handed back to callers for every reported problem
@dataclass(frozen=True, slots=True)
class Diagnostic:
    message: str
    reason: str
    span: SourceSpan
    kind: ErrorKind = ErrorKind.SYNTAX

    def format(self, source: str, path: str = "<input>") -> str:
        location = locate(source, self.span.start)
        return f"{path}:{location}: error: {self.message} ({self.reason})"


#normalizes the base exception for all parser layers
class ErebusError(Exception):
    """Base class for Erebus-related errors."""


#a grammar was assembled or driven in a way that can never terminate or resolve
class GrammarError(ErebusError):
    """Raised for bugs in grammar construction, not for bad user input."""


#try-map callbacks raise this to reject a literal they already matched
class LexError(ErebusError):
    """Raised when a matched literal turns out to be malformed."""

    def __init__(self, message: str, reason: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason


#combinators raise this at the failure point; spans are character indices here
class ParseError(ErebusError):
    """Raised when a grammar rule cannot match at a position."""

    def __init__(
        self,
        index: int,
        end: Optional[int] = None,
        expected: Iterable[str] = (),
        found: Optional[str] = None,
        message: Optional[str] = None,
        reason: Optional[str] = None,
        kind: ErrorKind = ErrorKind.SYNTAX,
        fatal: bool = False,
    ) -> None:
        self.index = index
        self.end = index + 1 if end is None else end
        self.expected = frozenset(expected)
        self.found = found
        self.message = message if message is not None else self._unexpected()
        self.reason = reason if reason is not None else self._expected_text()
        self.kind = kind
        self.fatal = fatal
        super().__init__(f"{self.message} ({self.reason})")

    def merge(self, other: "ParseError") -> "ParseError":
        """Combine two failures at the same position into one expected-set."""

        return ParseError(
            self.index,
            max(self.end, other.end),
            expected=self.expected | other.expected,
            found=self.found,
            kind=self.kind,
        )

    @property
    def error_kind(self) -> ErrorKind:
        if self.kind is not ErrorKind.SYNTAX:
            return self.kind
        closing = self.expected & CLOSING_LABELS
        # running out of input while something still had to be closed is structural
        if closing and (self.found is None or closing == self.expected):
            return ErrorKind.STRUCTURE
        return ErrorKind.SYNTAX

    def _unexpected(self) -> str:
        if self.found is None:
            return "unexpected end of input"
        return f"unexpected {self.found!r}"

    def _expected_text(self) -> str:
        labels = sorted(self.expected)
        if not labels:
            return "no alternative matched"
        if len(labels) == 1:
            return f"expected {labels[0]}"
        return f"expected one of {', '.join(labels)}"


#raised by `ParseResult.unwrap` so callers can use plain try/except
class ParseFailure(ErebusError):
    """Raised when a whole parse produced diagnostics instead of an AST."""

    def __init__(self, diagnostics: tuple[Diagnostic, ...]) -> None:
        count = len(diagnostics)
        super().__init__(f"{count} problem{'s' if count != 1 else ''} found")
        self.diagnostics = diagnostics
