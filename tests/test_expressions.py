import pytest

from erebus.ast import BinExpr, FnCall, Ident, NumLit, StringLit, Variable
from erebus.errors import ErrorKind, ParseError
from erebus.expr import BIN_EXPR, EXPRESSION, FN_CALL, VARIABLE, expression_at, fold_chain
from erebus.token import BinOp


def n(value: float) -> NumLit:
    return NumLit(value)


def var(name: str) -> Variable:
    return Variable(Ident(name))


def binary(op: BinOp, *operands) -> BinExpr:
    return BinExpr(op, tuple(operands))


#a single operator between two operands
def test_simple_binary() -> None:
    assert EXPRESSION.parse("1 + 1") == binary(BinOp.ADD, n(1), n(1))
    assert EXPRESSION.parse("1+1") == binary(BinOp.ADD, n(1), n(1))


#runs of the same operator collapse into one node
def test_same_operator_is_n_ary() -> None:
    assert EXPRESSION.parse("1 + 2 + 3") == binary(BinOp.ADD, n(1), n(2), n(3))


#tighter operators end up deeper in the tree
def test_precedence_layers() -> None:
    expected = binary(
        BinOp.EQUALS,
        binary(
            BinOp.ADD,
            binary(BinOp.MUL, n(1), n(2)),
            binary(BinOp.MUL, n(3), n(4)),
            n(5),
        ),
        n(6),
    )
    assert EXPRESSION.parse("1 * 2 + 3 * 4 + 5 == 6") == expected


#operators of one rank group left to right
def test_same_rank_mixing_folds_left() -> None:
    assert EXPRESSION.parse("3 + 2 - 1") == binary(BinOp.SUB, binary(BinOp.ADD, n(3), n(2)), n(1))
    assert EXPRESSION.parse("1 + 2 * 3 / 4") == binary(
        BinOp.ADD, n(1), binary(BinOp.DIV, binary(BinOp.MUL, n(2), n(3)), n(4))
    )
    assert EXPRESSION.parse("a - b + c + d") == binary(
        BinOp.ADD, binary(BinOp.SUB, var("a"), var("b")), var("c"), var("d")
    )


#the folding helper on its own
def test_fold_chain() -> None:
    steps = [(BinOp.MUL, n(2)), (BinOp.MUL, n(3)), (BinOp.DIV, n(4)), (BinOp.MUL, n(5))]
    assert fold_chain(n(1), steps) == binary(
        BinOp.MUL, binary(BinOp.DIV, binary(BinOp.MUL, n(1), n(2), n(3)), n(4)), n(5)
    )


#calls take comma separated expressions
def test_function_calls() -> None:
    assert FN_CALL.parse("simple_test(123)") == FnCall(Ident("simple_test"), (n(123),))
    assert EXPRESSION.parse("f()") == FnCall(Ident("f"))
    assert EXPRESSION.parse("f(x, g(1 + 2))") == FnCall(
        Ident("f"), (var("x"), FnCall(Ident("g"), (binary(BinOp.ADD, n(1), n(2)),)))
    )


#calls and variables work as operands
def test_calls_and_variables_as_operands() -> None:
    assert EXPRESSION.parse("f(1) * answer") == binary(BinOp.MUL, FnCall(Ident("f"), (n(1),)), var("answer"))
    assert VARIABLE.parse("answer") == var("answer")


#strings are operands too
def test_string_operands() -> None:
    assert EXPRESSION.parse('"a" == "b"') == binary(BinOp.EQUALS, StringLit("a"), StringLit("b"))


#a level only admits operators tighter than its threshold
def test_threshold_excludes_looser_operators() -> None:
    assert expression_at(2).parse("2 * 3") == binary(BinOp.MUL, n(2), n(3))
    with pytest.raises(ParseError):
        expression_at(2).parse("1 == 2")


#a binary expression needs at least two operands
def test_bin_expr_requires_operator() -> None:
    assert BIN_EXPR.parse("7 / 7") == binary(BinOp.DIV, n(7), n(7))
    with pytest.raises(ParseError):
        BIN_EXPR.parse("7")


#a dangling operator reports what could have followed it
def test_missing_operand() -> None:
    with pytest.raises(ParseError) as info:
        EXPRESSION.parse("1 +")
    assert info.value.index == 3
    assert info.value.message == "unexpected end of input"
    assert "number" in info.value.reason


#lexical errors inside an expression are not retried as something else
def test_lexical_error_in_operand() -> None:
    with pytest.raises(ParseError) as info:
        EXPRESSION.parse("1 + 0x1.8")
    assert info.value.fatal
    assert info.value.kind is ErrorKind.LEXICAL


#node spans cover the whole chain
def test_binary_span() -> None:
    expr = EXPRESSION.parse("10 * x")
    assert (expr.span.start, expr.span.end) == (0, 6)


#ordinary nesting depths stay well inside the interpreter's limits
def test_deeply_nested_calls() -> None:
    depth = 50
    expr = EXPRESSION.parse("f(" * depth + "1 + x" + ")" * depth)
    for _ in range(depth):
        assert expr.name == Ident("f")
        (expr,) = expr.args
    assert expr == binary(BinOp.ADD, n(1), var("x"))


#nested operands inside chains climb back to the loosest level
def test_nested_calls_inside_chains() -> None:
    depth = 50
    expr = EXPRESSION.parse("1 + f(" * depth + "2" + ")" * depth)
    for _ in range(depth):
        assert expr.op is BinOp.ADD
        first, call = expr.operands
        assert first == n(1)
        (expr,) = call.args
    assert expr == n(2)
