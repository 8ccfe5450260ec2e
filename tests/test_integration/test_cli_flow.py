"""Integration tests for the specwrap command line.

Drives the real Typer application (root callback included) through
``CliRunner`` and checks exit codes, stdout/stderr content and the files
written to disk. Every test runs inside :func:`isolated_config`, so the
working directory is a fresh temporary directory and no user config leaks in.
"""

from __future__ import annotations

import ast
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from specwrap import __version__
from specwrap.app import app
from specwrap.config import global_config_path, load_global_config, save_global_config
from specwrap.exit_codes import (
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_SUCCESS,
)
from specwrap.models import GlobalConfig


@pytest.fixture
def runner(isolated_config: Path) -> CliRunner:
    return CliRunner()


# ---------------------------------------------------------------------------
# Root options
# ---------------------------------------------------------------------------


class TestRootOptions:
    """--version and help."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == EXIT_SUCCESS
        assert result.output.strip() == f"specwrap {__version__}"

    def test_no_args_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, [])
        assert "generate" in result.output
        assert "inspect" in result.output


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    """``specwrap generate``."""

    def test_non_interactive_defaults(
        self, runner: CliRunner, isolated_config: Path, petstore_path: Path
    ) -> None:
        result = runner.invoke(app, ["generate", str(petstore_path), "--non-interactive"])
        assert result.exit_code == EXIT_SUCCESS, result.output
        target = isolated_config / "petstore_api.py"
        assert target.is_file()
        assert "petstore_api.py" in result.output
        assert "Generated 5 function(s) in 'petstore_api' at level Standard." in result.output
        ast.parse(target.read_text(encoding="utf-8"))

    def test_all_options(
        self, runner: CliRunner, isolated_config: Path, swagger_path: Path
    ) -> None:
        result = runner.invoke(
            app,
            [
                "generate",
                str(swagger_path),
                "--non-interactive",
                "-o",
                "clients",
                "-n",
                "users",
                "--base-url",
                "https://staging.example.com/",
                "--level",
                "expert",
            ],
        )
        assert result.exit_code == EXIT_SUCCESS, result.output
        source = (isolated_config / "clients" / "users.py").read_text(encoding="utf-8")
        assert "BASE_URL: Optional[str] = 'https://staging.example.com'" in source
        assert "Enhancement level: Expert." in source
        assert "retry_mode: str = 'Default'," in source

    def test_level_from_config(
        self, runner: CliRunner, isolated_config: Path, health_path: Path
    ) -> None:
        save_global_config(GlobalConfig(default_level="Basic", default_output="gen"))
        result = runner.invoke(app, ["generate", str(health_path), "--non-interactive"])
        assert result.exit_code == EXIT_SUCCESS, result.output
        source = (isolated_config / "gen" / "health.py").read_text(encoding="utf-8")
        assert "Enhancement level: Basic." in source
        assert "timeout" not in source
        assert "pass base_url=" in result.output

    def test_project_config_base_url(
        self, runner: CliRunner, isolated_config: Path, health_path: Path
    ) -> None:
        (isolated_config / "specwrap.json").write_text(
            json.dumps({"base_url": "https://health.example.com"}), encoding="utf-8"
        )
        result = runner.invoke(app, ["generate", str(health_path), "--non-interactive"])
        assert result.exit_code == EXIT_SUCCESS, result.output
        source = (isolated_config / "health.py").read_text(encoding="utf-8")
        assert "BASE_URL: Optional[str] = 'https://health.example.com'" in source

    def test_relative_server_url_kept(
        self, runner: CliRunner, isolated_config: Path, refs_path: Path
    ) -> None:
        result = runner.invoke(app, ["generate", str(refs_path), "--non-interactive"])
        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "Warning:" in result.output
        assert "#/components/parameters/Missing" in result.output
        source = (isolated_config / "reference_edge_cases.py").read_text(encoding="utf-8")
        assert "BASE_URL: Optional[str] = '/relative/v2'" in source

    def test_interactive_prompts(
        self, runner: CliRunner, isolated_config: Path, petstore_path: Path
    ) -> None:
        result = runner.invoke(
            app,
            ["generate", str(petstore_path), "--interactive"],
            input="pets\n\nout\nAdvanced\n",
        )
        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "Module name" in result.output
        assert "Enhancement level" in result.output
        source = (isolated_config / "out" / "pets.py").read_text(encoding="utf-8")
        assert "Enhancement level: Advanced." in source
        assert "BASE_URL: Optional[str] = 'https://eu.petstore.example.com/v1'" in source

    def test_interactive_skips_given_values(
        self, runner: CliRunner, isolated_config: Path, health_path: Path
    ) -> None:
        result = runner.invoke(
            app,
            [
                "generate",
                str(health_path),
                "--interactive",
                "-n",
                "hc",
                "-o",
                ".",
                "-l",
                "Basic",
            ],
            input="https://h.example.com\n",
        )
        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "Module name" not in result.output
        source = (isolated_config / "hc.py").read_text(encoding="utf-8")
        assert "BASE_URL: Optional[str] = 'https://h.example.com'" in source

    @pytest.mark.parametrize(
        "args",
        [
            ["-n", "1bad"],
            ["-n", "class"],
            ["--base-url", "not-a-url"],
            ["--level", "Ultra"],
        ],
    )
    def test_invalid_usage(
        self, runner: CliRunner, isolated_config: Path, petstore_path: Path, args: list[str]
    ) -> None:
        result = runner.invoke(
            app, ["generate", str(petstore_path), "--non-interactive", *args]
        )
        assert result.exit_code == EXIT_INVALID_USAGE
        assert "Error:" in result.output
        assert not list(isolated_config.glob("*.py"))

    def test_missing_spec(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["generate", "absent.yaml", "--non-interactive"])
        assert result.exit_code == EXIT_NOT_FOUND
        assert "absent.yaml" in result.output

    def test_unparseable_spec_writes_nothing(
        self, runner: CliRunner, isolated_config: Path
    ) -> None:
        bad = isolated_config / "bad.json"
        bad.write_text("{broken", encoding="utf-8")
        result = runner.invoke(app, ["generate", str(bad), "--non-interactive"])
        assert result.exit_code == EXIT_SPEC_PARSE_ERROR
        assert not list(isolated_config.glob("*.py"))

    def test_split_threshold_from_config(
        self, runner: CliRunner, isolated_config: Path, petstore_path: Path
    ) -> None:
        save_global_config(GlobalConfig(split_threshold=2))
        result = runner.invoke(app, ["generate", str(petstore_path), "--non-interactive"])
        assert result.exit_code == EXIT_SUCCESS, result.output
        package = isolated_config / "petstore_api"
        assert sorted(p.name for p in package.iterdir()) == [
            "__init__.py",
            "_operations_1.py",
            "_operations_2.py",
            "_operations_3.py",
            "_settings.py",
        ]


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


class TestInspect:
    """``specwrap inspect``."""

    def test_json_table(self, runner: CliRunner, petstore_path: Path) -> None:
        result = runner.invoke(
            app, ["--json", "--quiet", "inspect", str(petstore_path), "--level", "Basic"]
        )
        assert result.exit_code == EXIT_SUCCESS, result.output
        rows = json.loads(result.stdout)
        assert [r["Function"] for r in rows] == [
            "get_pets_list",
            "new_pets",
            "get_pets",
            "set_pets",
            "remove_pets",
        ]
        assert rows[2] == {
            "Function": "get_pets",
            "Method": "GET",
            "Path": "/pets/{petId}",
            "Parameters": "5",
            "Deprecated": "",
        }
        assert rows[4]["Deprecated"] == "Yes"

    def test_plain_writes_nothing(
        self, runner: CliRunner, isolated_config: Path, swagger_path: Path
    ) -> None:
        result = runner.invoke(app, ["--plain", "inspect", str(swagger_path)])
        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "Function\tMethod\tPath\tParameters\tDeprecated" in result.output
        assert "update_roles\tPATCH\t/users/{userId}/roles" in result.output
        assert "User Service v2.1.0" in result.output
        assert not list(isolated_config.glob("*.py"))

    def test_diagnostics_reported(self, runner: CliRunner, refs_path: Path) -> None:
        result = runner.invoke(app, ["--plain", "inspect", str(refs_path)])
        assert result.exit_code == EXIT_SUCCESS
        assert result.output.count("Warning:") == 3

    def test_invalid_level(self, runner: CliRunner, petstore_path: Path) -> None:
        result = runner.invoke(app, ["inspect", str(petstore_path), "--level", "max"])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_missing_file(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["inspect", "nope.json"])
        assert result.exit_code == EXIT_NOT_FOUND


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    """``specwrap config show|set|reset``."""

    def test_show(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--json", "config", "show"])
        assert result.exit_code == EXIT_SUCCESS
        assert '"default_level": "Standard"' in result.output
        assert "Config file:" in result.output

    def test_set_scalar_values(self, runner: CliRunner) -> None:
        assert runner.invoke(app, ["config", "set", "query_param_cap", "30"]).exit_code == 0
        assert runner.invoke(app, ["config", "set", "retry_backoff", "1.5"]).exit_code == 0
        assert runner.invoke(app, ["config", "set", "default_level", "Expert"]).exit_code == 0
        config = load_global_config()
        assert config.query_param_cap == 30
        assert config.retry_backoff == 1.5
        assert config.default_level == "Expert"
        assert global_config_path().is_file()

    def test_set_nested_and_open_mapping(self, runner: CliRunner) -> None:
        assert runner.invoke(app, ["config", "set", "output.format", "json"]).exit_code == 0
        result = runner.invoke(app, ["config", "set", "verb_synonyms.adopt", "New"])
        assert result.exit_code == 0, result.output
        config = load_global_config()
        assert config.output.format == "json"
        assert config.verb_synonyms == {"adopt": "New"}

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("nonexistent", "1"),
            ("output.missing", "x"),
            ("default_level.deep", "x"),
            ("query_param_cap", "many"),
            ("query_param_cap", "0"),
        ],
    )
    def test_set_rejected(self, runner: CliRunner, key: str, value: str) -> None:
        result = runner.invoke(app, ["config", "set", key, value])
        assert result.exit_code == EXIT_INVALID_USAGE
        assert load_global_config() == GlobalConfig()

    def test_reset_with_yes(self, runner: CliRunner) -> None:
        save_global_config(GlobalConfig(split_threshold=3))
        result = runner.invoke(app, ["config", "reset", "--yes"])
        assert result.exit_code == EXIT_SUCCESS
        assert load_global_config().split_threshold == 50

    def test_reset_declined(self, runner: CliRunner) -> None:
        save_global_config(GlobalConfig(split_threshold=3))
        result = runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == EXIT_SUCCESS
        assert load_global_config().split_threshold == 3
