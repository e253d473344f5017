"""Command-line entry point for Erebus."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import ast
from .parser import ParseOptions, ParseResult, parse

logger = logging.getLogger(__name__)


#reads a file and runs it through the parser with the chosen options
def parse_file(path: Path, options: ParseOptions) -> tuple[str, ParseResult]:
    source = path.read_text(encoding="utf-8")
    logger.debug("read %d bytes from %s", len(source.encode("utf-8")), path)
    return source, parse(source, options)


#prints one plain line per diagnostic plus a summary to stderr
def report(result: ParseResult, source: str, path: Path) -> None:
    for diagnostic in result.diagnostics:
        print(diagnostic.format(source, str(path)), file=sys.stderr)
    count = len(result.diagnostics)
    print(f"{path}: {count} problem{'s' if count != 1 else ''} found", file=sys.stderr)


#writes the tree in the requested format
def emit(tree: ast.Ast, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(ast.to_dict(tree), indent=2))
    else:
        print(f"Ast: {tree!r}")


#handles a single file end to end and maps the outcome to an exit status
def cmd_parse(args: argparse.Namespace) -> int:
    options = ParseOptions(recover=not args.no_recover, max_depth=args.max_depth)
    path = Path(args.input_file)
    source, result = parse_file(path, options)
    if result.tree is None:
        report(result, source, path)
        return 1
    emit(result.tree, args.emit)
    return 0


#configures the CLI surface
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="erebus", description="Erebus language front end")
    parser.add_argument("-i", "--input-file", required=True, help="path to source file")
    parser.add_argument(
        "-e",
        "--emit",
        choices=("ast", "json"),
        default="ast",
        help="type of output to emit (default: ast)",
    )
    parser.add_argument(
        "--no-recover",
        action="store_true",
        help="stop at the first top-level statement that fails to parse",
    )
    parser.add_argument("--max-depth", type=int, default=None, help="maximum nesting depth")
    parser.add_argument("-v", "--verbose", action="store_true", help="log parser progress")
    parser.set_defaults(func=cmd_parse)
    return parser


#entry point used by both console script and module execution
def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
