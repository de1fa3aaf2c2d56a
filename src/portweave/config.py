"""
Runtime configuration models for portweave.

Configuration is loaded from the [engine] and [processor] sections of
portweave.toml:

    [engine]
    max_propagation_depth = 10
    debug = false

    [processor]
    debug = false
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from portweave.core.errors import ConfigError

DEFAULT_CONFIG_FILE = "portweave.toml"


class EngineConfig(BaseModel):
    """ReactiveBindingEngine settings."""

    max_propagation_depth: int = Field(
        default=10,
        ge=1,
        alias="maxPropagationDepth",
        description="Deepest chained propagation allowed before a branch is aborted",
    )
    debug: bool = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ProcessorConfig(BaseModel):
    """DataBindingProcessor settings."""

    debug: bool = False

    model_config = ConfigDict(frozen=True)


class PortweaveConfig(BaseModel):
    """Top-level portweave.toml contents."""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    processor: ProcessorConfig = Field(default_factory=ProcessorConfig)

    model_config = ConfigDict(frozen=True)


def load_config(toml_path: Path | None = None, **engine_overrides: Any) -> PortweaveConfig:
    """
    Load configuration from portweave.toml.

    Args:
        toml_path: Path to the TOML file (defaults to ./portweave.toml)
        **engine_overrides: Engine settings that win over file values

    Returns:
        PortweaveConfig with values from file or defaults

    Raises:
        ConfigError: If the file exists but is not valid TOML or holds invalid values
    """
    path = toml_path or Path.cwd() / DEFAULT_CONFIG_FILE
    data: dict[str, Any] = {}

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    engine_section = dict(data.get("engine", {}))
    engine_section.update({k: v for k, v in engine_overrides.items() if v is not None})

    try:
        return PortweaveConfig(
            engine=EngineConfig.model_validate(engine_section),
            processor=ProcessorConfig.model_validate(data.get("processor", {})),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
