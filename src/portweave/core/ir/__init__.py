"""Intermediate representation for portweave expressions."""

from portweave.core.ir.expressions import (
    ArrayLiteral,
    ArrowFunc,
    BinaryExpr,
    BinaryOp,
    CallExpr,
    ConditionalExpr,
    Expr,
    Identifier,
    Literal,
    MemberExpr,
    ObjectLiteral,
    UnaryExpr,
    UnaryOp,
)

__all__ = [
    "ArrayLiteral",
    "ArrowFunc",
    "BinaryExpr",
    "BinaryOp",
    "CallExpr",
    "ConditionalExpr",
    "Expr",
    "Identifier",
    "Literal",
    "MemberExpr",
    "ObjectLiteral",
    "UnaryExpr",
    "UnaryOp",
]
