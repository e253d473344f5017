"""Erebus: the parsing front end of a small programming language."""

#makes package exports explicit for downstream imports
from . import ast, combinators, errors, expr, literals, parser, statement, token, type_literal
from .errors import Diagnostic, ErrorKind, ParseFailure, SourceSpan
from .parser import ParseOptions, ParseResult, parse

__all__ = [
    "Diagnostic",
    "ErrorKind",
    "ParseFailure",
    "ParseOptions",
    "ParseResult",
    "SourceSpan",
    "ast",
    "combinators",
    "errors",
    "expr",
    "literals",
    "parse",
    "parser",
    "statement",
    "token",
    "type_literal",
]
