"""Abstract syntax tree definitions for Erebus."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Optional, Tuple

from .errors import SourceSpan
from .token import BinOp


#every node tracks a span for diagnostics, but structure alone decides equality
@dataclass(frozen=True, slots=True)
class Node:
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False, kw_only=True)


# Names and literals -----------------------------------------------------------


#a name token; also used as a named type
@dataclass(frozen=True, slots=True)
class Ident(Node):
    name: str

    def __str__(self) -> str:
        return self.name


#numeric literals are always resolved to a float, whatever their base
@dataclass(frozen=True, slots=True)
class NumLit(Node):
    value: float


#string literals hold the value with escapes already expanded
@dataclass(frozen=True, slots=True)
class StringLit(Node):
    value: str


# Types ------------------------------------------------------------------------


#`(A, B, ...)`; the empty tuple is the unit type
@dataclass(frozen=True, slots=True)
class TupleType(Node):
    elements: Tuple["TypeLiteral", ...] = ()

    UNIT: ClassVar["TupleType"]


TupleType.UNIT = TupleType(())


#`fn(A, B) -> R`; a missing return type means unit
@dataclass(frozen=True, slots=True)
class FnSignatureType(Node):
    params: Tuple["TypeLiteral", ...]
    return_type: "TypeLiteral" = TupleType.UNIT


TypeLiteral = Ident | FnSignatureType | TupleType


#binding site with a mandatory annotation, e.g. a parameter or struct field
@dataclass(frozen=True, slots=True)
class IdentWithType(Node):
    ident: Ident
    type: TypeLiteral


#binding site of a `let`, where the annotation may be left out
@dataclass(frozen=True, slots=True)
class IdentWithOptionalType(Node):
    ident: Ident
    type: Optional[TypeLiteral] = None

    @classmethod
    def from_typed(cls, typed: IdentWithType) -> IdentWithOptionalType:
        return cls(typed.ident, typed.type, span=typed.span)

    @classmethod
    def from_ident(cls, ident: Ident) -> IdentWithOptionalType:
        return cls(ident, None, span=ident.span)


# Expressions ------------------------------------------------------------------


#one operator applied left to right over two or more operands
@dataclass(frozen=True, slots=True)
class BinExpr(Node):
    op: BinOp
    operands: Tuple["Expression", ...]


#function calls store the callee name and positional arguments
@dataclass(frozen=True, slots=True)
class FnCall(Node):
    name: Ident
    args: Tuple["Expression", ...] = ()


@dataclass(frozen=True, slots=True)
class Variable(Node):
    name: Ident


Expression = BinExpr | FnCall | Variable | NumLit | StringLit


# Statements -------------------------------------------------------------------


#`let [mut] name[: Type] = value`
@dataclass(frozen=True, slots=True)
class Let(Node):
    is_mut: bool
    left: IdentWithOptionalType
    right: Expression


# Only `let` can appear inside a scope for now.
Statement = Let


#block of code used for fn bodies; its value is the tail expression
@dataclass(frozen=True, slots=True)
class CodeScope(Node):
    statements: Tuple[Statement, ...]
    expr: Expression


@dataclass(frozen=True, slots=True)
class FnDef(Node):
    name: Ident
    params: Tuple[IdentWithType, ...]
    return_type: TypeLiteral
    body: CodeScope


@dataclass(frozen=True, slots=True)
class StructDef(Node):
    name: Ident
    fields: Tuple[IdentWithType, ...] = ()


#file-level declaration together with its visibility
@dataclass(frozen=True, slots=True)
class TopLevelStatement(Node):
    is_pub: bool
    inner: Let | FnDef | StructDef


#represents the root of the parsed file
@dataclass(frozen=True, slots=True)
class Ast(Node):
    statements: Tuple[TopLevelStatement, ...] = ()


#plain JSON-ready view of a tree, used by the CLI's json output
def to_dict(value: Any) -> Any:
    if isinstance(value, Node):
        data: dict[str, Any] = {"node": type(value).__name__}
        for item in fields(value):
            if item.name == "span":
                continue
            data[item.name] = to_dict(getattr(value, item.name))
        if value.span is not None:
            data["span"] = [value.span.start, value.span.end]
        return data
    if isinstance(value, tuple):
        return [to_dict(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    return value
