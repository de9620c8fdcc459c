"""Unit tests for the CLI: command registration, validate, and config."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from stepgate.cli.app import app
from stepgate.cli.commands.validate_cmd import load_output_map
from stepgate.models.config import DEFAULT_OUTPUT_MAP

runner = CliRunner()

GOOD_JSON = json.dumps({"keywords": [f"kw-{i}" for i in range(20)]})


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "validate" in result.output
        assert "config" in result.output


class TestValidateCommand:
    def test_all_outputs_valid(self, tmp_path: Path):
        (tmp_path / "a.json").write_text(GOOD_JSON, encoding="utf-8")
        (tmp_path / "b.json").write_text(GOOD_JSON, encoding="utf-8")

        result = runner.invoke(
            app,
            ["validate", str(tmp_path), "--start", "1", "--end", "2",
             "-o", "1=a.json", "-o", "2=b.json"],
        )

        assert result.exit_code == 0, result.output

    def test_missing_output_exits_nonzero(self, tmp_path: Path):
        result = runner.invoke(
            app, ["validate", str(tmp_path), "--start", "1", "--end", "1", "-o", "1=gone.json"]
        )
        assert result.exit_code == 1
        assert "HALT" in result.output

    def test_map_file(self, tmp_path: Path):
        (tmp_path / "x.json").write_text(GOOD_JSON, encoding="utf-8")
        map_file = tmp_path / "outputs.json"
        map_file.write_text(json.dumps({"4": "x.json"}), encoding="utf-8")

        result = runner.invoke(
            app,
            ["validate", str(tmp_path), "--start", "4", "--end", "4", "--map", str(map_file)],
        )
        assert result.exit_code == 0, result.output

    def test_allow_empty_step(self, tmp_path: Path):
        (tmp_path / "e.json").write_text("[]", encoding="utf-8")
        args = ["validate", str(tmp_path), "--start", "2", "--end", "2", "-o", "2=e.json"]

        assert runner.invoke(app, args).exit_code == 1
        assert runner.invoke(app, args + ["--allow-empty", "2"]).exit_code == 0

    def test_reversed_range_rejected(self, tmp_path: Path):
        result = runner.invoke(app, ["validate", str(tmp_path), "--start", "3", "--end", "1"])
        assert result.exit_code != 0


class TestLoadOutputMap:
    def test_default_map(self):
        assert load_output_map() == DEFAULT_OUTPUT_MAP

    def test_overrides_applied(self):
        output_map = load_output_map(overrides=["2=custom.json"])
        assert output_map[2] == "custom.json"
        assert output_map[1] == DEFAULT_OUTPUT_MAP[1]

    def test_bad_override_rejected(self):
        with pytest.raises(typer.BadParameter):
            load_output_map(overrides=["two=custom.json"])

    def test_map_file_must_be_object(self, tmp_path: Path):
        map_file = tmp_path / "outputs.json"
        map_file.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(typer.BadParameter):
            load_output_map(map_file)


class TestConfigCommand:
    def test_config_prints_settings(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "final_step" in result.output
