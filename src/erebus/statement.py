"""Statements, declarations and code scopes."""
from __future__ import annotations

from typing import Final

from . import ast
from .combinators import Parser, choice, seq, whitespace
from .expr import EXPRESSION
from .literals import IDENT
from .token import (
    ARROW,
    ASSIGN,
    COMMA,
    FN,
    LEFT_CURLY,
    LEFT_PAREN,
    LET,
    MUT,
    PUB,
    RIGHT_CURLY,
    RIGHT_PAREN,
    SEMICOLON,
    STRUCT,
)
from .type_literal import IDENT_WITH_OPTIONAL_TYPE, IDENT_WITH_TYPE, TYPE_LITERAL

# `let [mut] name[: Type] = value`; the terminating `;` belongs to the caller.
LET_BINDING: Final[Parser[ast.Let]] = seq(
    LET,
    MUT.padded().optional(),
    IDENT_WITH_OPTIONAL_TYPE.padded(),
    ASSIGN.ignore_then(EXPRESSION),
).map_with_span(
    lambda parts, span: ast.Let(parts[1] is not None, parts[2], parts[3], span=span)
)

# Something that cannot yield a value; always terminated by `;`.
STATEMENT: Final[Parser[ast.Statement]] = LET_BINDING.skip(SEMICOLON)

# A scope always yields a value, so the tail expression is mandatory.
CODE_SCOPE: Final[Parser[ast.CodeScope]] = seq(
    LEFT_CURLY.ignore_then(STATEMENT.repeated()),
    EXPRESSION.labelled("tail expression").skip(RIGHT_CURLY),
).map_with_span(lambda parts, span: ast.CodeScope(tuple(parts[0]), parts[1], span=span))

FN_DEF: Final[Parser[ast.FnDef]] = seq(
    FN.skip(whitespace).ignore_then(IDENT),
    LEFT_PAREN.ignore_then(IDENT_WITH_TYPE.separated_by(COMMA)).skip(RIGHT_PAREN),
    ARROW.ignore_then(TYPE_LITERAL),
    CODE_SCOPE,
).map_with_span(
    lambda parts, span: ast.FnDef(parts[0], tuple(parts[1]), parts[2], parts[3], span=span)
)

STRUCT_DEF: Final[Parser[ast.StructDef]] = seq(
    STRUCT.ignore_then(IDENT.padded()),
    LEFT_CURLY.ignore_then(IDENT_WITH_TYPE.separated_by(COMMA, allow_trailing=True)).skip(RIGHT_CURLY),
).map_with_span(lambda parts, span: ast.StructDef(parts[0], tuple(parts[1]), span=span))

# Declarations allowed at the outermost scope of a file, tried in this order.
RAW_TOP_LEVEL_STATEMENT: Final[Parser[ast.Let | ast.FnDef | ast.StructDef]] = choice(
    LET_BINDING.skip(SEMICOLON),
    FN_DEF,
    STRUCT_DEF,
).padded()

TOP_LEVEL_STATEMENT: Final[Parser[ast.TopLevelStatement]] = (
    seq(PUB.optional(), RAW_TOP_LEVEL_STATEMENT)
    .map_with_span(
        lambda parts, span: ast.TopLevelStatement(parts[0] is not None, parts[1], span=span)
    )
    .padded()
)


__all__ = [
    "CODE_SCOPE",
    "FN_DEF",
    "LET_BINDING",
    "RAW_TOP_LEVEL_STATEMENT",
    "STATEMENT",
    "STRUCT_DEF",
    "TOP_LEVEL_STATEMENT",
]
