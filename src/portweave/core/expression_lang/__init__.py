"""
portweave expression language.

Tokenizer, parser and evaluator for the JavaScript-like snippets carried by
reactive bindings and data binding transforms.

Usage:
    from portweave.core.expression_lang import evaluate_source

    evaluate_source("source * 2", {"source": 21})
    # 42
"""

from portweave.core.expression_lang.evaluator import (
    ExpressionEvalError,
    evaluate,
    evaluate_source,
    is_truthy,
    validate_syntax,
)
from portweave.core.expression_lang.parser import ExpressionParseError, parse_expr
from portweave.core.expression_lang.tokenizer import ExpressionTokenError

__all__ = [
    "ExpressionEvalError",
    "ExpressionParseError",
    "ExpressionTokenError",
    "evaluate",
    "evaluate_source",
    "is_truthy",
    "parse_expr",
    "validate_syntax",
]
