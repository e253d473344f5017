"""Lexical rules for identifiers, numeric literals and string literals."""
from __future__ import annotations

from typing import Final, Optional, Tuple

from . import ast
from .combinators import (
    Parser,
    any_char,
    choice,
    end,
    is_ident_continue,
    just,
    none_of,
    one_of,
    satisfy,
    seq,
)
from .errors import LexError, SourceSpan
from .token import DOT

# Identifiers ------------------------------------------------------------------

# Any run of leading underscores, then a letter, then letters, digits or underscores.
IDENT: Final[Parser[ast.Ident]] = (
    seq(
        one_of("_").repeated(),
        satisfy(str.isalpha),
        satisfy(is_ident_continue).repeated(),
    )
    .map_with_span(
        lambda parts, span: ast.Ident("".join(parts[0]) + parts[1] + "".join(parts[2]), span=span)
    )
    .labelled("identifier")
)


# Numbers ----------------------------------------------------------------------

_DIGITS: Final[dict[int, str]] = {
    2: "01",
    8: "01234567",
    10: "0123456789",
    16: "0123456789abcdefABCDEF",
}


#shifts the fractional digits behind the point in the literal's own base
def based_float_literal_to_value(base: int, integer: str, fractional: str) -> float:
    value = float(int(integer, base))
    if not fractional:
        return value
    return value + int(fractional, base) / base ** len(fractional)


def _digit_run(base: int) -> Parser[str]:
    return one_of(_DIGITS[base], f"base-{base} digit").repeated(min=1).map("".join)


def _integer_part(base: int) -> Parser[str]:
    digits = _digit_run(base)
    return choice(
        # leading zeros carry no value; a literal made only of zeros is 0
        just("0").repeated(min=1).ignore_then(digits.optional("0")),
        digits,
    )


def _based_literal(prefix: str, base: int) -> Parser[ast.NumLit]:
    fraction = DOT.ignore_then(_digit_run(base)).optional()

    def build(parts: Tuple[str, str, Optional[str]], span: SourceSpan) -> ast.NumLit:
        _, integer, fractional = parts
        if fractional is not None and base > 10:
            # 0x0.dead_beef() would be ambiguous
            raise LexError(
                "float literals for bases greater than 10 are not supported",
                f"base-{base} literal has a fractional part",
            )
        return ast.NumLit(based_float_literal_to_value(base, integer, fractional or ""), span=span)

    return seq(just(prefix), _integer_part(base), fraction).try_map(build)


NUM_LIT: Final[Parser[ast.NumLit]] = choice(
    _based_literal("0x", 16),
    _based_literal("0b", 2),
    _based_literal("0o", 8),
    _based_literal("", 10),
).labelled("number")


# Strings ----------------------------------------------------------------------

_ESCAPES: Final[dict[str, str]] = {"n": "\n", "\\": "\\", '"': '"'}


def _unknown_escape(char: str, span: SourceSpan) -> str:
    raise LexError(f"unknown escape sequence '\\{char}'", "only \\n, \\\\, \\\" and a line break can be escaped")


def _newline_in_string(_: str, span: SourceSpan) -> str:
    raise LexError("unterminated string literal", "found a line break before the closing quote")


def _eof_in_string(_: None, span: SourceSpan) -> str:
    raise LexError("unterminated string literal", "reached the end of input before the closing quote")


_ESCAPE: Final = just("\\").ignore_then(
    choice(
        one_of('n\\"').map(_ESCAPES.__getitem__),
        # escaped line break: a line continuation that produces nothing
        choice(just("\r\n"), just("\n"), just("\r")).to(""),
        any_char().try_map(_unknown_escape),
        end().try_map(_eof_in_string),
    )
)

_CLOSING_QUOTE: Final = choice(
    just('"'),
    just("\n").try_map(_newline_in_string),
    end().try_map(_eof_in_string),
)

STRING_LIT: Final[Parser[ast.StringLit]] = (
    just('"')
    .ignore_then(choice(_ESCAPE, none_of('"\\\n')).repeated())
    .skip(_CLOSING_QUOTE)
    .map_with_span(lambda chars, span: ast.StringLit("".join(chars), span=span))
    .labelled("string")
)


__all__ = ["IDENT", "NUM_LIT", "STRING_LIT", "based_float_literal_to_value"]
