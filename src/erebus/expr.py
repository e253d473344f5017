"""Expression grammar with precedence climbing over n-ary operator chains.

``expression_at(threshold)`` only admits binary operators whose rank is strictly
greater than ``threshold``. It reads one operand at the next tighter level and
then, while an operator of the loosest admitted rank follows, another such
operand. The loosest operator therefore ends up outermost, and the left operand
can never re-match the same or a looser operator (no left recursion). A run of
one operator becomes a single n-ary node, ``1 + 2 + 3`` is ``Add(1, 2, 3)``; a
different operator of the same rank folds the chain so far into its first
operand, so ``3 + 2 - 1`` is ``Sub(Add(3, 2), 1)``.

The tightest level has no operators and reads an atom: a function call (it
shares the identifier prefix with a variable but is longer), a variable, a
number, a string. Atoms are memoized per position for the rules that try
several ranks over the same operand, such as ``BIN_EXPR``.
"""
from __future__ import annotations

from typing import Final, List, Tuple

from . import ast
from .combinators import Parser, Recursive, choice, seq
from .literals import IDENT, NUM_LIT, STRING_LIT
from .token import COMMA, LEFT_PAREN, OPERATORS, PRECEDENCE, RIGHT_PAREN, BinOp

RANKS: Final[Tuple[int, ...]] = tuple(sorted(set(PRECEDENCE.values())))

EXPRESSION: Final[Recursive[ast.Expression]] = Recursive("expression")


def fn_call(expression: Parser[ast.Expression]) -> Parser[ast.FnCall]:
    return seq(IDENT, LEFT_PAREN, expression.separated_by(COMMA), RIGHT_PAREN).map_with_span(
        lambda parts, span: ast.FnCall(parts[0], tuple(parts[2]), span=span)
    )


FN_CALL: Final = fn_call(EXPRESSION)
VARIABLE: Final = IDENT.map(lambda name: ast.Variable(name, span=name.span))
ATOM: Final[Parser[ast.Expression]] = choice(FN_CALL, VARIABLE, NUM_LIT, STRING_LIT).memo()


#builds left-to-right nodes from `first (op operand)+`
def fold_chain(
    first: ast.Expression,
    steps: List[Tuple[BinOp, ast.Expression]],
) -> ast.BinExpr:
    op = steps[0][0]
    operands: List[ast.Expression] = [first]
    for step_op, operand in steps:
        if step_op is not op:
            operands = [_bin_expr(op, operands)]
            op = step_op
        operands.append(operand)
    return _bin_expr(op, operands)


def _bin_expr(op: BinOp, operands: List[ast.Expression]) -> ast.BinExpr:
    span = None
    first, last = operands[0].span, operands[-1].span
    if first is not None and last is not None:
        span = first.merge(last)
    return ast.BinExpr(op, tuple(operands), span=span)


def _fold(parts: Tuple[ast.Expression, List[Tuple[BinOp, ast.Expression]]]) -> ast.Expression:
    first, steps = parts
    if not steps:
        return first
    return fold_chain(first, steps)


#`operand (op operand)*` over the operators of one rank
def _operator_chain(rank: int, operand: Parser[ast.Expression], min_steps: int = 0) -> Parser[ast.Expression]:
    # within a rank the operators are tried in declaration order
    operators = choice(*(OPERATORS[op] for op in BinOp if op.precedence == rank))
    return seq(operand, seq(operators, operand).repeated(min=min_steps)).map(_fold)


def _build_levels() -> dict[int, Parser[ast.Expression]]:
    # threshold -> parser; the tightest threshold admits no operator at all
    levels: dict[int, Parser[ast.Expression]] = {RANKS[-1]: ATOM}
    operand = ATOM
    thresholds = (0, *RANKS[:-1])
    for rank, threshold in zip(reversed(RANKS), reversed(thresholds)):
        operand = _operator_chain(rank, operand)
        levels[threshold] = operand
    return levels


_LEVELS: Final = _build_levels()


def expression_at(threshold: int) -> Parser[ast.Expression]:
    """Expression parser admitting only operators ranked above ``threshold``."""

    return _LEVELS[threshold]


EXPRESSION.define(expression_at(0).labelled("expression"))
BIN_EXPR: Final[Parser[ast.BinExpr]] = choice(
    *(_operator_chain(rank, expression_at(rank), min_steps=1) for rank in RANKS)
)


__all__ = [
    "ATOM",
    "BIN_EXPR",
    "EXPRESSION",
    "FN_CALL",
    "RANKS",
    "VARIABLE",
    "expression_at",
    "fold_chain",
]
