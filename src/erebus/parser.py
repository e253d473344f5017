"""Parser entry point that turns Erebus source text into an AST."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, List, Optional, Tuple

from . import ast
from .combinators import Parser, State, end, run, skip_whitespace, whitespace
from .errors import Diagnostic, ParseError, ParseFailure
from .statement import TOP_LEVEL_STATEMENT

logger = logging.getLogger(__name__)

# The strict whole-file grammar: no recovery, first failure wins.
AST: Final[Parser[ast.Ast]] = (
    TOP_LEVEL_STATEMENT.repeated()
    .skip(whitespace)
    .skip(end())
    .map_with_span(lambda statements, span: ast.Ast(tuple(statements), span=span))
)


#knobs a caller can turn for one parse
@dataclass(frozen=True, slots=True)
class ParseOptions:
    # keep parsing later top-level statements after one fails
    recover: bool = True
    # cap on nested expressions/types; None leaves only the interpreter's limit
    max_depth: Optional[int] = None


#either a complete tree or the ordered, non-empty diagnostics
@dataclass(frozen=True, slots=True)
class ParseResult:
    tree: Optional[ast.Ast]
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return self.tree is not None

    def unwrap(self) -> ast.Ast:
        if self.tree is None:
            raise ParseFailure(self.diagnostics)
        return self.tree


def parse(source: str, options: Optional[ParseOptions] = None) -> ParseResult:
    """Parse a whole file, collecting one diagnostic per failed top-level statement."""

    options = options or ParseOptions()
    state = State(source, max_depth=options.max_depth)
    statements: List[ast.TopLevelStatement] = []
    diagnostics: List[Diagnostic] = []
    index = skip_whitespace(source, 0)
    while index < len(source):
        state.reset()
        start = index
        try:
            statement, index = run(TOP_LEVEL_STATEMENT, state, index)
        except ParseError as error:
            diagnostic = state.diagnostic(error)
            diagnostics.append(diagnostic)
            logger.debug("top-level statement at %d failed: %s", start, diagnostic.message)
            if not options.recover:
                break
            index = skip_whitespace(source, resync(source, start, error.index))
            continue
        statements.append(statement)

    logger.debug(
        "parsed %d top-level statements with %d diagnostics",
        len(statements),
        len(diagnostics),
    )
    if diagnostics:
        return ParseResult(tree=None, diagnostics=tuple(diagnostics))
    return ParseResult(tree=ast.Ast(tuple(statements), span=state.span(0, len(source))))


#finds where the next top-level statement may start after a failure
def resync(source: str, start: int, failed_at: int) -> int:
    """Return the index just past the first `;` or closing `}` at brace depth zero
    that lies beyond ``failed_at``, or the end of the source."""

    depth = 0
    index = start
    length = len(source)
    while index < length:
        char = source[index]
        index += 1
        if char == '"':
            after = _skip_string(source, index)
            if after > failed_at and source[after - 1] != '"':
                # the literal that broke at a raw line break ends at its closing quote
                after = _skip_string(source, index, stop_at_newline=False)
            index = after
        elif char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
            if depth == 0 and index > failed_at:
                return index
        elif char == ";" and depth == 0 and index > failed_at:
            return index
    return length


def _skip_string(source: str, index: int, stop_at_newline: bool = True) -> int:
    length = len(source)
    while index < length:
        char = source[index]
        if char == "\\":
            index += 2
            continue
        index += 1
        if char == '"' or (char == "\n" and stop_at_newline):
            break
    return min(index, length)


__all__ = ["AST", "ParseOptions", "ParseResult", "parse", "resync"]
