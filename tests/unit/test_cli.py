"""Tests for the portweave CLI."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from portweave.cli import app

runner = CliRunner()


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data))
    return path


BINDINGS = [
    {
        "id": "double",
        "source": "slider.value",
        "target": "preview.scale",
        "relationship": {"type": "javascript", "javascript": "source * 2"},
    },
    {
        "id": "search",
        "source": "input.text",
        "target": "results.query",
        "updateMode": "debounced",
        "debounceMs": 300,
    },
]


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "portweave" in result.stdout


class TestCheck:
    def test_valid_spec(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "bindings.json", {"bindings": BINDINGS})
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 0
        assert "OK" in result.stdout

    def test_bare_list_accepted(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "bindings.json", BINDINGS)
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 0

    def test_reports_cycles(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "bindings.json",
            [
                {"id": "ab", "source": "a.v", "target": "b.v"},
                {"id": "ba", "source": "b.v", "target": "a.v"},
            ],
        )
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 0
        assert "Cycle" in result.stdout

    def test_config_error_fails(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "bindings.json",
            [{"id": "d", "source": "a.v", "target": "b.v", "updateMode": "debounced"}],
        )
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 1
        assert "debounceMs" in result.stdout

    def test_invalid_expression_fails(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "bindings.json",
            [
                {
                    "id": "bad",
                    "source": "a.v",
                    "target": "b.v",
                    "relationship": {"type": "javascript", "javascript": "source *"},
                }
            ],
        )
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 1

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bindings.json"
        path.write_text("{not json")
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.stdout


class TestSimulate:
    def test_scenario(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "scenario.json",
            {
                "bindings": BINDINGS,
                "steps": [
                    {"update": "slider.value", "value": 21},
                    {"update": "input.text", "value": "ab"},
                    {"advance": 300},
                ],
            },
        )
        result = runner.invoke(app, ["simulate", str(path)])
        assert result.exit_code == 0
        assert "42" in result.stdout
        assert "search" in result.stdout

    def test_scenario_must_be_object(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "scenario.json", BINDINGS)
        result = runner.invoke(app, ["simulate", str(path)])
        assert result.exit_code == 1


class TestEval:
    def test_expression(self) -> None:
        result = runner.invoke(app, ["eval", "source * 2", "--var", "source=21"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "42"

    def test_string_var_falls_back_to_raw(self) -> None:
        result = runner.invoke(app, ["eval", "source.toUpperCase()", "--var", "source=abc"])
        assert result.exit_code == 0
        assert result.stdout.strip() == '"ABC"'

    def test_array_result(self) -> None:
        result = runner.invoke(app, ["eval", "source.map(x => x + 1)", "--var", "source=[1, 2]"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == [2, 3]

    def test_error(self) -> None:
        result = runner.invoke(app, ["eval", "missing"])
        assert result.exit_code == 1
        assert "not defined" in result.stdout


class TestSimulateWithORS:
    def test_ports_seeded_and_written_back(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "scenario.json",
            {
                "bindings": BINDINGS[:1],
                "ors": {
                    "metadata": {"stage": "diverge"},
                    "entities": [
                        {
                            "id": "concern",
                            "type": "concern",
                            "attributes": [
                                {"name": "level", "structuralType": "SVAL", "defaultValue": 5}
                            ],
                        }
                    ],
                },
                "dataBindings": {
                    "slider": [
                        {"portId": "value", "entityAttribute": "concern.level", "direction": "inout"}
                    ]
                },
                "steps": [{"update": "slider.value", "value": 7}],
            },
        )
        result = runner.invoke(app, ["simulate", str(path)])
        assert result.exit_code == 0
        assert "ORS runtime values" in result.stdout
        assert "concern.level" in result.stdout
        assert "14" in result.stdout

    def test_invalid_data_bindings(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "scenario.json",
            {"bindings": [], "ors": {"metadata": {"stage": "diverge"}}, "dataBindings": []},
        )
        result = runner.invoke(app, ["simulate", str(path)])
        assert result.exit_code == 1
