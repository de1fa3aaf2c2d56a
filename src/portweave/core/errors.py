"""
Error types for portweave binding specs, paths, and configuration.
"""

from __future__ import annotations


class PortweaveError(Exception):
    """Base exception for all portweave errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BindingConfigError(PortweaveError):
    """
    Raised when a binding spec cannot be turned into a running engine.

    Examples:
    - debounced binding without debounceMs
    - javascript/transform relationship without an expression
    - two bindings sharing one id
    """

    pass


class InvalidPathError(PortweaveError):
    """Raised when a "widgetId.portId" or "entityId.attributeName" path is malformed."""

    pass


class ConfigError(PortweaveError):
    """Raised when portweave.toml cannot be read or validated."""

    pass


class ExpressionError(PortweaveError):
    """
    Raised when a binding or transform expression cannot be evaluated.

    ``pos`` is the character offset into the expression source, when known.
    """

    def __init__(self, message: str, pos: int = 0) -> None:
        super().__init__(message)
        self.pos = pos
