"""
Expression evaluator for the portweave expression language.

Evaluates expression AST nodes against the caller's bindings (usually
``{"source": value}`` or ``{"value": value}``).
Pure evaluation with no I/O. Does NOT use Python's eval(),
and never reads attributes of Python objects: values are treated as the
JSON shapes a widget port can hold (None, bool, int, float, str, list, dict).

Semantics follow JavaScript where the two languages disagree (truthiness,
string concatenation, ``.length``), since binding expressions are written
in JavaScript syntax by the UI generator.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from typing import Any

from portweave.core.errors import ExpressionError
from portweave.core.expression_lang.parser import ExpressionParseError, parse_expr
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


class ExpressionEvalError(ExpressionError):
    """Error during expression evaluation."""


class _Closure:
    """Runtime value of an arrow function; only usable as a call argument."""

    __slots__ = ("params", "body", "ctx")

    def __init__(self, params: list[str], body: Expr, ctx: Mapping[str, Any]) -> None:
        self.params = params
        self.body = body
        self.ctx = ctx

    def __call__(self, *args: Any) -> Any:
        scope = dict(self.ctx)
        for i, name in enumerate(self.params):
            scope[name] = args[i] if i < len(args) else None
        return _interpret(self.body, scope)


class _Builtin:
    """A pure helper function from the closed helper namespace."""

    __slots__ = ("name", "fn")

    def __init__(self, name: str, fn: Callable[..., Any]) -> None:
        self.name = name
        self.fn = fn

    def __call__(self, *args: Any) -> Any:
        return self.fn(*args)


class _Namespace:
    """Read-only helper namespace such as ``Math``."""

    __slots__ = ("name", "members")

    def __init__(self, name: str, members: dict[str, Any]) -> None:
        self.name = name
        self.members = members


_CALLABLE = (_Closure, _Builtin)


# =============================================================================
# Public API
# =============================================================================


def evaluate(expr: Expr, context: Mapping[str, Any]) -> Any:
    """Evaluate an expression against a context dict.

    This is a safe tree-walking interpreter; it does NOT use Python's
    eval(). Only the closed set of AST node types are handled.

    Args:
        expr: Parsed expression AST.
        context: Variable name -> value. Only these names (plus the pure
            helpers ``Math``, ``String``, ``Number``, ``Boolean``,
            ``parseInt``, ``parseFloat``, ``isNaN``) are visible.

    Returns:
        The computed value.

    Raises:
        ExpressionEvalError: If evaluation fails.
    """
    try:
        result = _interpret(expr, context)
    except ExpressionEvalError:
        raise
    except (
        TypeError,
        ValueError,
        IndexError,
        KeyError,
        ArithmeticError,
        MemoryError,
        RecursionError,
    ) as e:
        raise ExpressionEvalError(f"Evaluation failed: {e}") from e
    if isinstance(result, (_Closure, _Builtin, _Namespace)):
        raise ExpressionEvalError("Expression did not produce a value")
    return result


def evaluate_source(source: str, bindings: Mapping[str, Any]) -> Any:
    """Parse and evaluate an expression string in one step.

    Raises:
        ExpressionError: ExpressionParseError for syntax errors,
            ExpressionEvalError for runtime failures.
    """
    return evaluate(parse_expr(source), bindings)


def validate_syntax(source: str) -> tuple[bool, str | None]:
    """Check that an expression parses, without evaluating it."""
    try:
        parse_expr(source)
    except ExpressionParseError as e:
        return False, str(e)
    return True, None


def is_truthy(value: Any) -> bool:
    """JavaScript truthiness: 0, "", null, NaN and false are falsy; [] and {} are truthy."""
    if value is None or value is False:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def to_js_string(value: Any) -> str:
    """String conversion as JavaScript's String(value) would produce it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, list):
        return ",".join("" if v is None else to_js_string(v) for v in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def to_number(value: Any) -> int | float:
    """Numeric conversion as JavaScript's Number(value) would produce it."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    if isinstance(value, list) and len(value) <= 1:
        return to_number(value[0]) if value else 0
    return math.nan


# =============================================================================
# Interpreter
# =============================================================================


def _interpret(expr: Expr, ctx: Mapping[str, Any]) -> Any:
    """Dispatch evaluation to the appropriate handler."""
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, Identifier):
        return _interpret_identifier(expr, ctx)

    if isinstance(expr, BinaryExpr):
        return _interpret_binary(expr, ctx)

    if isinstance(expr, UnaryExpr):
        return _interpret_unary(expr, ctx)

    if isinstance(expr, MemberExpr):
        obj = _interpret(expr.obj, ctx)
        if obj is None and expr.optional:
            return None
        return _get_member(obj, _member_key(expr, ctx))

    if isinstance(expr, CallExpr):
        return _interpret_call(expr, ctx)

    if isinstance(expr, ConditionalExpr):
        if is_truthy(_interpret(expr.test, ctx)):
            return _interpret(expr.consequent, ctx)
        return _interpret(expr.alternate, ctx)

    if isinstance(expr, ArrayLiteral):
        return [_interpret(item, ctx) for item in expr.items]

    if isinstance(expr, ObjectLiteral):
        return {key: _interpret(value, ctx) for key, value in expr.entries}

    if isinstance(expr, ArrowFunc):
        return _Closure(expr.params, expr.body, ctx)

    raise ExpressionEvalError(f"Unknown expression type: {type(expr).__name__}")


def _interpret_identifier(expr: Identifier, ctx: Mapping[str, Any]) -> Any:
    # Caller bindings shadow helpers
    if expr.name in ctx:
        return ctx[expr.name]
    if expr.name in _HELPERS:
        return _HELPERS[expr.name]
    raise ExpressionEvalError(f"{expr.name} is not defined")


def _member_key(expr: MemberExpr, ctx: Mapping[str, Any]) -> Any:
    if expr.computed:
        return _interpret(expr.prop, ctx)
    assert isinstance(expr.prop, Literal)
    return expr.prop.value


def _get_member(obj: Any, key: Any) -> Any:
    """Property read with JavaScript semantics for the supported value shapes."""
    if obj is None:
        raise ExpressionEvalError(f"Cannot read properties of null (reading {to_js_string(key)!r})")

    if isinstance(obj, _Namespace):
        return obj.members.get(to_js_string(key))

    if isinstance(obj, dict):
        return obj.get(key if isinstance(key, str) else to_js_string(key))

    if isinstance(obj, (list, str)):
        if key == "length":
            return len(obj)
        index = _as_index(key)
        if index is not None and 0 <= index < len(obj):
            return obj[index]
        return None

    # Numbers, booleans and functions carry no readable properties here
    return None


def _as_index(key: Any) -> int | None:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, float) and key.is_integer():
        return int(key)
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return None


def _interpret_binary(expr: BinaryExpr, ctx: Mapping[str, Any]) -> Any:
    """Evaluate a binary expression."""
    # Short-circuit for logical operators
    if expr.op == BinaryOp.AND:
        left = _interpret(expr.left, ctx)
        if not is_truthy(left):
            return left
        return _interpret(expr.right, ctx)

    if expr.op == BinaryOp.OR:
        left = _interpret(expr.left, ctx)
        if is_truthy(left):
            return left
        return _interpret(expr.right, ctx)

    if expr.op == BinaryOp.NULLISH:
        left = _interpret(expr.left, ctx)
        if left is not None:
            return left
        return _interpret(expr.right, ctx)

    left = _interpret(expr.left, ctx)
    right = _interpret(expr.right, ctx)

    if expr.op == BinaryOp.STRICT_EQ:
        return _strict_equals(left, right)
    if expr.op == BinaryOp.STRICT_NE:
        return not _strict_equals(left, right)
    if expr.op == BinaryOp.EQ:
        return _loose_equals(left, right)
    if expr.op == BinaryOp.NE:
        return not _loose_equals(left, right)

    if expr.op in (BinaryOp.LT, BinaryOp.GT, BinaryOp.LE, BinaryOp.GE):
        return _compare(expr.op, left, right)

    if expr.op == BinaryOp.ADD:
        return _add(left, right)

    a = _arith_operand(left, expr.op)
    b = _arith_operand(right, expr.op)

    if expr.op == BinaryOp.SUB:
        return a - b
    if expr.op == BinaryOp.MUL:
        return a * b
    if expr.op == BinaryOp.DIV:
        if b == 0:
            raise ExpressionEvalError("Division by zero")
        result = a / b
        if isinstance(a, int) and isinstance(b, int) and result.is_integer():
            return int(result)
        return result
    if expr.op == BinaryOp.MOD:
        if b == 0:
            raise ExpressionEvalError("Modulo by zero")
        # Sign follows the dividend, as in JavaScript
        if isinstance(a, int) and isinstance(b, int):
            remainder = abs(a) % abs(b)
            return -remainder if a < 0 else remainder
        return math.fmod(a, b)
    if expr.op == BinaryOp.POW:
        return _js_pow(a, b)

    raise ExpressionEvalError(f"Unknown binary op: {expr.op}")


def _arith_operand(value: Any, op: BinaryOp) -> int | float:
    if isinstance(value, (list, dict)) or isinstance(value, _CALLABLE + (_Namespace,)):
        raise ExpressionEvalError(f"Unsupported operand for {op.value}: {type(value).__name__}")
    return to_number(value)


def _add(left: Any, right: Any) -> Any:
    """JavaScript '+': concatenation when either side is a string."""
    if isinstance(left, str) or isinstance(right, str):
        return to_js_string(left) + to_js_string(right)
    return _arith_operand(left, BinaryOp.ADD) + _arith_operand(right, BinaryOp.ADD)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _strict_equals(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    # Arrays and objects compare by identity
    return left is right


def _loose_equals(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, (list, dict)) or isinstance(right, (list, dict)):
        return left is right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return to_number(left) == to_number(right)


def _compare(op: BinaryOp, left: Any, right: Any) -> bool:
    # Null-safe: comparisons against a missing value are false
    if left is None or right is None:
        return False
    if not (isinstance(left, str) and isinstance(right, str)):
        left = _arith_operand(left, op)
        right = _arith_operand(right, op)
    if op == BinaryOp.LT:
        return left < right
    if op == BinaryOp.GT:
        return left > right
    if op == BinaryOp.LE:
        return left <= right
    return left >= right


def _interpret_unary(expr: UnaryExpr, ctx: Mapping[str, Any]) -> Any:
    """Evaluate a unary expression."""
    if expr.op == UnaryOp.TYPEOF:
        # typeof tolerates undefined names, as in JavaScript
        operand = expr.operand
        if isinstance(operand, Identifier) and not (operand.name in ctx or operand.name in _HELPERS):
            return "undefined"
        return _typeof(_interpret(expr.operand, ctx))

    val = _interpret(expr.operand, ctx)
    if expr.op == UnaryOp.NOT:
        return not is_truthy(val)
    if expr.op == UnaryOp.NEG:
        return -_arith_operand(val, BinaryOp.SUB)
    if expr.op == UnaryOp.PLUS:
        return _arith_operand(val, BinaryOp.ADD)
    raise ExpressionEvalError(f"Unknown unary op: {expr.op}")


def _typeof(value: Any) -> str:
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, _CALLABLE):
        return "function"
    return "object"


# =============================================================================
# Calls
# =============================================================================


def _interpret_call(expr: CallExpr, ctx: Mapping[str, Any]) -> Any:
    args = [_interpret(a, ctx) for a in expr.args]

    callee = expr.callee
    if isinstance(callee, MemberExpr):
        obj = _interpret(callee.obj, ctx)
        if obj is None and callee.optional:
            return None
        name = _member_key(callee, ctx)
        if isinstance(obj, _Namespace):
            fn = obj.members.get(to_js_string(name))
            if not isinstance(fn, _Builtin):
                raise ExpressionEvalError(f"{obj.name}.{name} is not a function")
            return fn(*args)
        if obj is None:
            raise ExpressionEvalError(f"Cannot read properties of null (reading {to_js_string(name)!r})")
        return _call_method(obj, to_js_string(name), args)

    fn = _interpret(callee, ctx)
    if not isinstance(fn, _CALLABLE):
        raise ExpressionEvalError(f"{callee} is not a function")
    return fn(*args)


def _call_method(obj: Any, name: str, args: list[Any]) -> Any:
    if isinstance(obj, str):
        method = _STRING_METHODS.get(name)
    elif isinstance(obj, list):
        method = _ARRAY_METHODS.get(name)
    elif _is_number(obj):
        method = _NUMBER_METHODS.get(name)
    elif isinstance(obj, bool) and name == "toString":
        return to_js_string(obj)
    else:
        method = None

    if method is None:
        raise ExpressionEvalError(f"{type(obj).__name__}.{name} is not a supported method")
    return method(obj, *args)


def _arg(args: tuple[Any, ...], i: int, default: Any = None) -> Any:
    return args[i] if i < len(args) and args[i] is not None else default


def _js_slice_bounds(length: int, start: Any, end: Any) -> tuple[int, int]:
    def norm(v: Any, fallback: int) -> int:
        if v is None:
            return fallback
        n = int(to_number(v))
        if n < 0:
            return max(length + n, 0)
        return min(n, length)

    return norm(start, 0), norm(end, length)


def _js_slice(obj: Any, *args: Any) -> Any:
    start, end = _js_slice_bounds(len(obj), _arg(args, 0), _arg(args, 1))
    return obj[start:end]


def _js_substring(s: str, *args: Any) -> str:
    def clamp(v: Any, fallback: int) -> int:
        if v is None:
            return fallback
        return min(max(int(to_number(v)), 0), len(s))

    start, end = clamp(_arg(args, 0), 0), clamp(_arg(args, 1), len(s))
    if start > end:
        start, end = end, start
    return s[start:end]


def _js_at(obj: Any, *args: Any) -> Any:
    index = int(to_number(_arg(args, 0, 0)))
    if index < 0:
        index += len(obj)
    if 0 <= index < len(obj):
        return obj[index]
    return None


def _js_split(s: str, *args: Any) -> list[str]:
    sep = _arg(args, 0)
    limit = _arg(args, 1)
    if sep is None:
        parts = [s]
    elif sep == "":
        parts = list(s)
    else:
        parts = s.split(to_js_string(sep))
    return parts if limit is None else parts[: int(to_number(limit))]


# Longest string a JavaScript engine will build (V8)
_MAX_STRING_LENGTH = 2**29 - 24


def _js_repeat(s: str, count: Any = 0) -> str:
    n = to_number(count)
    if math.isnan(n):
        return ""
    if n < 0 or math.isinf(n):
        raise ExpressionEvalError(f"Invalid count value: {to_js_string(n)}")
    n = int(n)
    if len(s) * n > _MAX_STRING_LENGTH:
        raise ExpressionEvalError("Invalid string length")
    return s * n


def _js_pad(s: str, length: Any, fill: Any, at_start: bool) -> str:
    target = int(to_number(length))
    fill_str = " " if fill is None else to_js_string(fill)
    if target <= len(s) or not fill_str:
        return s
    needed = target - len(s)
    padding = (fill_str * (needed // len(fill_str) + 1))[:needed]
    return padding + s if at_start else s + padding


def _require_callable(value: Any, method: str) -> Callable[..., Any]:
    if not isinstance(value, _CALLABLE):
        raise ExpressionEvalError(f"Array.{method} expects a function argument")
    return value


def _js_reduce(items: list[Any], *args: Any) -> Any:
    fn = _require_callable(_arg(args, 0), "reduce")
    values = list(items)
    if len(args) > 1:
        acc = args[1]
    elif values:
        acc = values.pop(0)
    else:
        raise ExpressionEvalError("Reduce of empty array with no initial value")
    for i, item in enumerate(values):
        acc = fn(acc, item, i)
    return acc


def _js_find(items: list[Any], fn: Any) -> Any:
    fn = _require_callable(fn, "find")
    for i, item in enumerate(items):
        if is_truthy(fn(item, i)):
            return item
    return None


def _js_find_index(items: list[Any], fn: Any) -> int:
    fn = _require_callable(fn, "findIndex")
    for i, item in enumerate(items):
        if is_truthy(fn(item, i)):
            return i
    return -1


def _index_of(obj: Any, needle: Any) -> int:
    if isinstance(obj, str):
        return obj.find(to_js_string(needle))
    for i, item in enumerate(obj):
        if _strict_equals(item, needle):
            return i
    return -1


def _includes(obj: Any, needle: Any) -> bool:
    if isinstance(obj, str):
        return to_js_string(needle) in obj
    return any(_strict_equals(item, needle) for item in obj)


def _to_fixed(n: int | float, digits: Any = None) -> str:
    places = int(to_number(digits)) if digits is not None else 0
    return f"{n:.{places}f}"


_STRING_METHODS: dict[str, Callable[..., Any]] = {
    "toUpperCase": lambda s: s.upper(),
    "toLowerCase": lambda s: s.lower(),
    "trim": lambda s: s.strip(),
    "trimStart": lambda s: s.lstrip(),
    "trimEnd": lambda s: s.rstrip(),
    "includes": lambda s, sub=None: _includes(s, sub),
    "startsWith": lambda s, p=None: s.startswith(to_js_string(p)),
    "endsWith": lambda s, p=None: s.endswith(to_js_string(p)),
    "indexOf": lambda s, sub=None: _index_of(s, sub),
    "slice": _js_slice,
    "substring": _js_substring,
    "split": _js_split,
    "replace": lambda s, old=None, new=None: s.replace(to_js_string(old), to_js_string(new), 1),
    "replaceAll": lambda s, old=None, new=None: s.replace(to_js_string(old), to_js_string(new)),
    "padStart": lambda s, n=0, fill=None: _js_pad(s, n, fill, at_start=True),
    "padEnd": lambda s, n=0, fill=None: _js_pad(s, n, fill, at_start=False),
    "repeat": _js_repeat,
    "charAt": lambda s, i=0: _get_member(s, int(to_number(i))) or "",
    "at": _js_at,
    "concat": lambda s, *parts: s + "".join(to_js_string(p) for p in parts),
    "toString": lambda s: s,
}

_ARRAY_METHODS: dict[str, Callable[..., Any]] = {
    "includes": lambda a, v=None: _includes(a, v),
    "indexOf": lambda a, v=None: _index_of(a, v),
    "join": lambda a, sep=",": (
        ("," if sep is None else to_js_string(sep)).join(
            "" if v is None else to_js_string(v) for v in a
        )
    ),
    "slice": _js_slice,
    "at": _js_at,
    "concat": lambda a, *others: a + [x for o in others for x in (o if isinstance(o, list) else [o])],
    "map": lambda a, fn=None: [_require_callable(fn, "map")(v, i) for i, v in enumerate(a)],
    "filter": lambda a, fn=None: [
        v for i, v in enumerate(a) if is_truthy(_require_callable(fn, "filter")(v, i))
    ],
    "some": lambda a, fn=None: any(
        is_truthy(_require_callable(fn, "some")(v, i)) for i, v in enumerate(a)
    ),
    "every": lambda a, fn=None: all(
        is_truthy(_require_callable(fn, "every")(v, i)) for i, v in enumerate(a)
    ),
    "find": _js_find,
    "findIndex": _js_find_index,
    "reduce": _js_reduce,
    "toString": to_js_string,
}

_NUMBER_METHODS: dict[str, Callable[..., Any]] = {
    "toFixed": _to_fixed,
    "toString": lambda n: to_js_string(n),
}


# =============================================================================
# Helper namespace
# =============================================================================


def _js_round(x: Any) -> int | float:
    n = to_number(x)
    if isinstance(n, float) and (math.isnan(n) or math.isinf(n)):
        return n
    return math.floor(n + 0.5)


def _numbers(args: tuple[Any, ...]) -> list[int | float]:
    # Math.min([1, 2]) is NaN in JavaScript, but generated code often passes arrays
    if len(args) == 1 and isinstance(args[0], list):
        args = tuple(args[0])
    return [to_number(a) for a in args]


def _math_min(*args: Any) -> int | float:
    values = _numbers(args)
    return min(values) if values else math.inf


def _math_max(*args: Any) -> int | float:
    values = _numbers(args)
    return max(values) if values else -math.inf


def _unary_math(fn: Callable[[float], Any]) -> Callable[[Any], Any]:
    def apply(x: Any = None) -> Any:
        n = to_number(x)
        if isinstance(n, float) and math.isnan(n):
            return n
        return fn(n)

    return apply


def _sqrt(n: float) -> float:
    if n < 0:
        return math.nan
    return math.sqrt(n)


def _js_pow(a: int | float, b: int | float) -> int | float:
    """JavaScript '**': never raises and never returns a complex number."""
    if math.isnan(b) or math.isnan(a):
        return 1 if b == 0 else math.nan
    if b == 0:
        return 1
    if math.isinf(b) and abs(a) == 1:
        return math.nan

    integral = isinstance(b, int) or (not math.isinf(b) and b.is_integer())
    odd_exponent = integral and int(b) % 2 == 1
    negative_result = odd_exponent and math.copysign(1.0, a) < 0
    if a == 0 and b < 0:
        return -math.inf if negative_result else math.inf
    if a < 0 and not integral and not math.isinf(b):
        return math.nan

    try:
        result = math.pow(a, b)
    except OverflowError:
        return -math.inf if negative_result else math.inf
    if isinstance(a, int) and isinstance(b, int) and b >= 0 and abs(result) < 2**53:
        return a**b
    return result


_INT_PREFIX_RE = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX_RE = re.compile(r"\s*[+-]?(\d+\.?\d*([eE][+-]?\d+)?|\.\d+([eE][+-]?\d+)?)")


def _parse_int(value: Any = None, radix: Any = None) -> int | float:
    text = to_js_string(value)
    base = int(to_number(radix)) if radix is not None else 10
    if base == 10:
        m = _INT_PREFIX_RE.match(text)
        return int(m.group(0)) if m else math.nan
    try:
        return int(text.strip(), base)
    except ValueError:
        return math.nan


def _parse_float(value: Any = None) -> int | float:
    m = _FLOAT_PREFIX_RE.match(to_js_string(value))
    if not m:
        return math.nan
    return float(m.group(0))


def _is_nan(value: Any = None) -> bool:
    n = to_number(value)
    return isinstance(n, float) and math.isnan(n)


_MATH = _Namespace(
    "Math",
    {
        "abs": _Builtin("abs", _unary_math(abs)),
        "min": _Builtin("min", _math_min),
        "max": _Builtin("max", _math_max),
        "round": _Builtin("round", _js_round),
        "floor": _Builtin("floor", _unary_math(math.floor)),
        "ceil": _Builtin("ceil", _unary_math(math.ceil)),
        "pow": _Builtin("pow", lambda a=None, b=None: _js_pow(to_number(a), to_number(b))),
        "sqrt": _Builtin("sqrt", _unary_math(_sqrt)),
        "PI": math.pi,
    },
)

_HELPERS: dict[str, Any] = {
    "Math": _MATH,
    "String": _Builtin("String", lambda v=None: to_js_string(v)),
    "Number": _Builtin("Number", lambda v=None: to_number(v)),
    "Boolean": _Builtin("Boolean", lambda v=None: is_truthy(v)),
    "parseInt": _Builtin("parseInt", _parse_int),
    "parseFloat": _Builtin("parseFloat", _parse_float),
    "isNaN": _Builtin("isNaN", _is_nan),
}
