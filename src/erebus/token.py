"""Keyword, punctuation and operator grammar units for Erebus."""
from __future__ import annotations

from enum import Enum
from typing import Final

from .combinators import Parser, just, keyword


#payload-free markers produced by keyword and punctuation units
class Symbol(Enum):
    # Keywords
    LET = "let"
    FN = "fn"
    STRUCT = "struct"
    MUT = "mut"
    PUB = "pub"

    # Punctuation
    LEFT_CURLY = "{"
    RIGHT_CURLY = "}"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    ARROW = "->"
    ASSIGN = "="
    DOT = "."


KEYWORDS: Final[frozenset[Symbol]] = frozenset(
    {Symbol.LET, Symbol.FN, Symbol.STRUCT, Symbol.MUT, Symbol.PUB}
)


#binary operator kinds; their binding strength lives in PRECEDENCE
class BinOp(Enum):
    EQUALS = "=="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def precedence(self) -> int:
        return PRECEDENCE[self]


# Ranks start at 1 because rank 0 is the threshold that admits every operator.
PRECEDENCE: Final[dict[BinOp, int]] = {
    BinOp.EQUALS: 1,
    BinOp.ADD: 2,
    BinOp.SUB: 2,
    BinOp.MUL: 3,
    BinOp.DIV: 3,
}


def element(symbol: Symbol, padded: bool = False) -> Parser[Symbol]:
    if symbol in KEYWORDS:
        parser = keyword(symbol.value)
    else:
        parser = just(symbol.value)
    if padded:
        parser = parser.padded()
    return parser.to(symbol)


def operator(op: BinOp) -> Parser[BinOp]:
    return just(op.value).padded().to(op)


LET: Final = element(Symbol.LET)
FN: Final = element(Symbol.FN)
STRUCT: Final = element(Symbol.STRUCT)
MUT: Final = element(Symbol.MUT)
PUB: Final = element(Symbol.PUB)

LEFT_CURLY: Final = element(Symbol.LEFT_CURLY, padded=True)
RIGHT_CURLY: Final = element(Symbol.RIGHT_CURLY, padded=True)
LEFT_PAREN: Final = element(Symbol.LEFT_PAREN, padded=True)
RIGHT_PAREN: Final = element(Symbol.RIGHT_PAREN, padded=True)
COMMA: Final = element(Symbol.COMMA, padded=True)
SEMICOLON: Final = element(Symbol.SEMICOLON, padded=True)
ARROW: Final = element(Symbol.ARROW, padded=True)
ASSIGN: Final = element(Symbol.ASSIGN, padded=True)
COLON: Final = element(Symbol.COLON)
DOT: Final = element(Symbol.DOT)

OPERATORS: Final[dict[BinOp, Parser[BinOp]]] = {op: operator(op) for op in BinOp}
