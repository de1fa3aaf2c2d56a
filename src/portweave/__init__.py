"""
portweave - reactive port bindings for generated UI widgets.

Keeps widget ports in sync through declarative bindings and connects
widget ports to an ORS entity graph.
"""

from __future__ import annotations

from ._version import __version__
from .config import EngineConfig, PortweaveConfig, ProcessorConfig, load_config
from .core.errors import (
    BindingConfigError,
    ConfigError,
    ExpressionError,
    InvalidPathError,
    PortweaveError,
)
from .runtime import (
    DataBindingProcessor,
    FlowValidationState,
    ManualScheduler,
    ReactiveBindingEngine,
)

__all__ = [
    "__version__",
    # Config
    "EngineConfig",
    "PortweaveConfig",
    "ProcessorConfig",
    "load_config",
    # Errors
    "BindingConfigError",
    "ConfigError",
    "ExpressionError",
    "InvalidPathError",
    "PortweaveError",
    # Runtime
    "DataBindingProcessor",
    "FlowValidationState",
    "ManualScheduler",
    "ReactiveBindingEngine",
]
