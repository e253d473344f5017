import pytest

from erebus import ast, parse
from erebus.errors import ErrorKind, ParseError, ParseFailure, SourceSpan, locate
from erebus.parser import AST, ParseOptions, resync


PROGRAM = """
pub struct Point {
    x: int,
    y: int,
}

let origin_x = 0;

pub fn scale(factor: int, value: int) -> int {
    let mut result: int = factor * value;
    result
}
"""

BROKEN = "let a = ;\nlet b = 2;\nfn f( -> int { 1 }\nstruct S { a: int }\n"


#collects the diagnostics of a source that must fail
def diagnostics(source: str, **options) -> list:
    result = parse(source, ParseOptions(**options))
    assert not result.ok
    return list(result.diagnostics)


#a complete file parses into its top-level statements in order
def test_parse_whole_program() -> None:
    result = parse(PROGRAM)
    assert result.ok
    assert result.diagnostics == ()
    tree = result.unwrap()
    kinds = [(type(statement.inner), statement.is_pub) for statement in tree.statements]
    assert kinds == [(ast.StructDef, True), (ast.Let, False), (ast.FnDef, True)]
    scale = tree.statements[2].inner
    assert scale.name == ast.Ident("scale")
    assert scale.body.expr == ast.Variable(ast.Ident("result"))


#the strict grammar and the recovering driver agree on valid input
def test_strict_grammar_matches_driver() -> None:
    assert AST.parse(PROGRAM) == parse(PROGRAM).unwrap()
    with pytest.raises(ParseError):
        AST.parse("let a = 1")


#empty or blank input is an empty file
@pytest.mark.parametrize("source", ["", "   \n\t\n"])
def test_empty_source(source: str) -> None:
    assert parse(source).unwrap() == ast.Ast(())


#parsing keeps going after a broken statement
def test_recovery_reports_every_broken_statement() -> None:
    first, second = diagnostics(BROKEN)
    assert first.message == "unexpected ';'"
    assert first.reason == "expected expression"
    assert first.span == SourceSpan(8, 9)
    assert first.kind is ErrorKind.SYNTAX
    assert second.message == "unexpected '-'"
    assert "')'" in second.reason
    assert second.span.start == BROKEN.index("->")


#without recovery only the first problem is reported
def test_no_recover_stops_at_first_problem() -> None:
    (only,) = diagnostics(BROKEN, recover=False)
    assert only.span == SourceSpan(8, 9)


#input that is not a top-level statement is reported where it starts
def test_trailing_garbage() -> None:
    (only,) = diagnostics("let a = 1; 42")
    assert only.span.start == 11
    assert "'let'" in only.reason


#lexical problems keep their kind in the diagnostic
def test_lexical_diagnostic() -> None:
    (only,) = diagnostics("let x = 0x1.8;\nlet y = 1;")
    assert only.kind is ErrorKind.LEXICAL
    assert "float literals" in only.message


#an unterminated string is reported as a lexical problem
def test_unterminated_string_diagnostic() -> None:
    found = diagnostics('let s = "oops;\nlet t = 1;')
    assert found[0].message == "unterminated string literal"
    assert found[0].kind is ErrorKind.LEXICAL


#a missing closing brace is reported as a structural problem
def test_missing_closing_brace_is_structural() -> None:
    (only,) = diagnostics("fn f() -> int { 1")
    assert only.kind is ErrorKind.STRUCTURE
    assert only.message == "unexpected end of input"


#spans are byte offsets while locations count characters
def test_diagnostic_span_is_in_bytes() -> None:
    source = 'let s = "héllo";\nlet t = ;'
    (only,) = diagnostics(source)
    assert only.span == SourceSpan(26, 27)
    location = locate(source, only.span.start)
    assert (location.line, location.column) == (2, 9)
    assert only.format(source, "main.eb") == "main.eb:2:9: error: unexpected ';' (expected expression)"


#node spans are byte offsets too
def test_node_spans_are_in_bytes() -> None:
    tree = parse('let s = "é";\nlet t = 1;').unwrap()
    second = tree.statements[1]
    assert second.span == SourceSpan(14, 24)


#unwrap turns diagnostics into an exception
def test_unwrap_raises_parse_failure() -> None:
    with pytest.raises(ParseFailure) as info:
        parse(BROKEN).unwrap()
    assert len(info.value.diagnostics) == 2
    assert str(info.value) == "2 problems found"


#the optional depth cap turns deep nesting into a diagnostic
def test_max_depth() -> None:
    source = "let x = f(f(f(f(1))));"
    assert parse(source).ok
    (only,) = diagnostics(source, max_depth=2)
    assert only.kind is ErrorKind.STRUCTURE
    assert only.message == "expression is nested too deeply"


#nesting beyond the interpreter's limit is reported, not raised
def test_interpreter_recursion_limit() -> None:
    source = "let x = " + "f(" * 2000 + "1" + ")" * 2000 + ";\nlet y = 2;"
    found = diagnostics(source)
    assert found[0].kind is ErrorKind.STRUCTURE
    assert "nested too deeply" in found[0].message


#resync skips strings and nested braces
def test_resync_skips_strings_and_nested_braces() -> None:
    source = 'fn f() { "}" ; } let'
    assert resync(source, 0, 3) == 16
    assert resync("let a = ; let b", 0, 8) == 9
    assert resync("let a = 1", 0, 4) == len("let a = 1")


#fifty nested calls in a function body are ordinary code
def test_nested_calls_in_function_body() -> None:
    source = "fn main() -> int { " + "f(" * 50 + "1" + ")" * 50 + " }"
    (statement,) = parse(source).unwrap().statements
    assert isinstance(statement.inner.body.expr, ast.FnCall)


#a string broken by a raw line break ends at its own closing quote
def test_recovery_after_string_broken_by_line_break() -> None:
    first, second = diagnostics('let s = "x\ny";\nlet t = ;\nlet u = 1;')
    assert first.message == "unterminated string literal"
    assert second.message == "unexpected ';'"
    assert second.span == SourceSpan(23, 24)
    assert resync('let s = "x\ny";\nlet t = 1;', 0, 10) == 14
