"""Recursive grammar for type literals and the binding sites that use them."""
from __future__ import annotations

from typing import Final

from . import ast
from .combinators import Parser, Recursive, choice, seq
from .literals import IDENT
from .token import ARROW, COLON, COMMA, FN, LEFT_PAREN, RIGHT_PAREN


def tuple_type(type_parser: Parser[ast.TypeLiteral]) -> Parser[ast.TupleType]:
    return (
        LEFT_PAREN.ignore_then(type_parser.separated_by(COMMA, allow_trailing=True))
        .skip(RIGHT_PAREN)
        .map_with_span(lambda elements, span: ast.TupleType(tuple(elements), span=span))
    )


def fn_signature_type(type_parser: Parser[ast.TypeLiteral]) -> Parser[ast.FnSignatureType]:
    return seq(
        FN,
        tuple_type(type_parser),
        ARROW.ignore_then(type_parser).optional(ast.TupleType.UNIT),
    ).map_with_span(
        lambda parts, span: ast.FnSignatureType(parts[1].elements, parts[2], span=span)
    )


TYPE_LITERAL: Final[Recursive[ast.TypeLiteral]] = Recursive("type")
TYPE_LITERAL.define(
    choice(
        fn_signature_type(TYPE_LITERAL),
        tuple_type(TYPE_LITERAL),
        # an identifier must come last: `fn` would otherwise be read as a type name
        IDENT,
    ).labelled("type")
)

TUPLE_TYPE: Final = tuple_type(TYPE_LITERAL)
FN_SIGNATURE_TYPE: Final = fn_signature_type(TYPE_LITERAL)


# Binding sites ----------------------------------------------------------------

# The colon has to follow the name directly: `name: Type`, not `name : Type`.
IDENT_WITH_TYPE: Final[Parser[ast.IdentWithType]] = seq(
    IDENT.skip(COLON).padded(),
    TYPE_LITERAL,
).map_with_span(lambda parts, span: ast.IdentWithType(parts[0], parts[1], span=span))

IDENT_WITH_OPTIONAL_TYPE: Final[Parser[ast.IdentWithOptionalType]] = choice(
    IDENT_WITH_TYPE.map(ast.IdentWithOptionalType.from_typed),
    IDENT.map(ast.IdentWithOptionalType.from_ident),
)


__all__ = [
    "FN_SIGNATURE_TYPE",
    "IDENT_WITH_OPTIONAL_TYPE",
    "IDENT_WITH_TYPE",
    "TUPLE_TYPE",
    "TYPE_LITERAL",
]
