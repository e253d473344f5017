import json
from pathlib import Path

import pytest

from erebus.cli import build_parser, main


#writes a source file for the CLI to read
def write_source(tmp_path: Path, source: str) -> Path:
    path = tmp_path / "main.eb"
    path.write_text(source, encoding="utf-8")
    return path


#a valid file prints its tree and exits cleanly
def test_cli_prints_ast(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_source(tmp_path, "pub fn one() -> int { 1 }\n")
    assert main(["-i", str(path)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Ast: Ast(statements=(TopLevelStatement(is_pub=True")


#json output is a nested node/field mapping with byte spans
def test_cli_emits_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_source(tmp_path, "let a = 1 + 2;")
    assert main(["-i", str(path), "--emit", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["node"] == "Ast"
    (statement,) = data["statements"]
    assert statement["is_pub"] is False
    let = statement["inner"]
    assert let["node"] == "Let"
    assert let["right"]["op"] == "+"
    assert [operand["value"] for operand in let["right"]["operands"]] == [1, 2]
    assert statement["span"] == [0, 14]


#failures go to stderr with positions and a non-zero status
def test_cli_reports_diagnostics(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_source(tmp_path, "let a = ;\nlet b = ;\n")
    assert main(["-i", str(path)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    lines = captured.err.splitlines()
    assert lines[0] == f"{path}:1:9: error: unexpected ';' (expected expression)"
    assert lines[1] == f"{path}:2:9: error: unexpected ';' (expected expression)"
    assert lines[-1] == f"{path}: 2 problems found"


#--no-recover stops after the first diagnostic
def test_cli_no_recover(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_source(tmp_path, "let a = ;\nlet b = ;\n")
    assert main(["-i", str(path), "--no-recover"]) == 1
    assert capsys.readouterr().err.splitlines()[-1] == f"{path}: 1 problem found"


#--max-depth is forwarded to the parser
def test_cli_max_depth(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_source(tmp_path, "let a = f(g(1));")
    assert main(["-i", str(path), "--max-depth", "1"]) == 1
    assert "nested too deeply" in capsys.readouterr().err


#the input file is mandatory
def test_cli_requires_input() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
