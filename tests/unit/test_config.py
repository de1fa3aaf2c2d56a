"""Tests for portweave.toml loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from portweave.config import EngineConfig, load_config
from portweave.core.errors import ConfigError


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "portweave.toml")
        assert config.engine.max_propagation_depth == 10
        assert not config.engine.debug
        assert not config.processor.debug

    def test_reads_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "portweave.toml"
        path.write_text("[engine]\nmax_propagation_depth = 4\ndebug = true\n\n[processor]\ndebug = true\n")
        config = load_config(path)
        assert config.engine.max_propagation_depth == 4
        assert config.engine.debug
        assert config.processor.debug

    def test_overrides_win(self, tmp_path: Path) -> None:
        path = tmp_path / "portweave.toml"
        path.write_text("[engine]\nmax_propagation_depth = 4\n")
        config = load_config(path, max_propagation_depth=7, debug=None)
        assert config.engine.max_propagation_depth == 7
        assert not config.engine.debug

    def test_default_path_is_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "portweave.toml").write_text("[engine]\nmax_propagation_depth = 2\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().engine.max_propagation_depth == 2

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "portweave.toml"
        path.write_text("[engine\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "portweave.toml"
        path.write_text("[engine]\nmax_propagation_depth = 0\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)


class TestEngineConfig:
    def test_camel_case_alias(self) -> None:
        assert EngineConfig.model_validate({"maxPropagationDepth": 3}).max_propagation_depth == 3
