"""
Typed expression AST for binding and transform expressions.

Expressions are the small JavaScript-like snippets that appear in
reactive bindings (``source * 2``, ``source.toUpperCase()``) and in data
binding transforms (``value * 10``).

Supports:
- Arithmetic: +, -, *, /, %, **
- Comparison: ==, !=, ===, !==, <, >, <=, >=
- Logic: &&, ||, !, ??, cond ? a : b
- Member access: value.name, value["name"], value?.name, items[0]
- Method calls on strings, arrays, numbers: source.trim(), items.join(", ")
- Arrow functions as call arguments: items.map(x => x * 2)
- Array and object literals: [1, 2], {label: source}
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class BinaryOp(StrEnum):
    """Binary operators for expressions."""

    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    POW = "**"
    # Comparison
    EQ = "=="
    NE = "!="
    STRICT_EQ = "==="
    STRICT_NE = "!=="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    # Logical (short-circuit)
    AND = "&&"
    OR = "||"
    NULLISH = "??"


class UnaryOp(StrEnum):
    """Unary operators for expressions."""

    NEG = "-"
    PLUS = "+"
    NOT = "!"
    TYPEOF = "typeof"


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Literal(BaseModel):
    """A literal value: int, float, str, bool, or None (null/undefined)."""

    value: int | float | str | bool | None = Field(description="The literal value")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.value is None:
            return "null"
        if isinstance(self.value, str):
            return f'"{self.value}"'
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


class Identifier(BaseModel):
    """A bare name, resolved against the caller's bindings."""

    name: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


class ArrayLiteral(BaseModel):
    """[a, b, c]"""

    items: list[Expr] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "[" + ", ".join(str(i) for i in self.items) + "]"


class ObjectLiteral(BaseModel):
    """{key: value, "other": value}"""

    entries: list[tuple[str, Expr]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "{" + ", ".join(f"{k}: {v}" for k, v in self.entries) + "}"


class MemberExpr(BaseModel):
    """
    Property access.

    Examples:
        - MemberExpr(obj=source, prop=Literal("name")) → source.name
        - MemberExpr(obj=items, prop=Literal(0), computed=True) → items[0]
        - MemberExpr(..., optional=True) → source?.name
    """

    obj: Expr
    prop: Expr
    computed: bool = False
    optional: bool = False

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        dot = "?." if self.optional else "."
        if self.computed:
            return f"{self.obj}{'?.' if self.optional else ''}[{self.prop}]"
        assert isinstance(self.prop, Literal)
        return f"{self.obj}{dot}{self.prop.value}"


class CallExpr(BaseModel):
    """Call of a method (callee is a MemberExpr) or a helper (callee is an Identifier)."""

    callee: Expr
    args: list[Expr] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.callee}(" + ", ".join(str(a) for a in self.args) + ")"


class ArrowFunc(BaseModel):
    """Single-expression arrow function: (a, b) => body."""

    params: list[str]
    body: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({', '.join(self.params)}) => {self.body}"


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    op: BinaryOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


class UnaryExpr(BaseModel):
    """Unary operation: op operand."""

    op: UnaryOp
    operand: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.op == UnaryOp.TYPEOF:
            return f"typeof {self.operand}"
        return f"{self.op.value}{self.operand}"


class ConditionalExpr(BaseModel):
    """Ternary: test ? consequent : alternate."""

    test: Expr
    consequent: Expr
    alternate: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.test} ? {self.consequent} : {self.alternate})"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = (
    Literal
    | Identifier
    | ArrayLiteral
    | ObjectLiteral
    | MemberExpr
    | CallExpr
    | ArrowFunc
    | BinaryExpr
    | UnaryExpr
    | ConditionalExpr
)

# Rebuild models for recursive forward references
ArrayLiteral.model_rebuild()
ObjectLiteral.model_rebuild()
MemberExpr.model_rebuild()
CallExpr.model_rebuild()
ArrowFunc.model_rebuild()
BinaryExpr.model_rebuild()
UnaryExpr.model_rebuild()
ConditionalExpr.model_rebuild()
