"""Shared test fixtures for specwrap.

Provides reusable fixtures for loading spec fixtures, creating isolated
config environments, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from specwrap.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and logging handler after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()
    logger = logging.getLogger("specwrap")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_path() -> Path:
    """Path to the OpenAPI 3.0 petstore YAML fixture."""
    return FIXTURES_DIR / "petstore_3.0.yaml"


@pytest.fixture
def swagger_path() -> Path:
    """Path to the Swagger 2.0 user-service JSON fixture."""
    return FIXTURES_DIR / "swagger_2.0.json"


@pytest.fixture
def refs_path() -> Path:
    """Path to the OpenAPI 3.1 fixture with broken and chained references."""
    return FIXTURES_DIR / "refs_3.1.json"


@pytest.fixture
def health_path() -> Path:
    """Path to the single-operation ``GET /health`` fixture."""
    return FIXTURES_DIR / "health.json"


@pytest.fixture
def petstore_spec(petstore_path: Path) -> dict[str, Any]:
    """Loaded (normalised, validated) petstore document."""
    from specwrap.parser import load_spec

    return load_spec(petstore_path)


@pytest.fixture
def swagger_spec(swagger_path: Path) -> dict[str, Any]:
    from specwrap.parser import load_spec

    return load_spec(swagger_path)


@pytest.fixture
def refs_spec(refs_path: Path) -> dict[str, Any]:
    with open(refs_path) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all SPECWRAP_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specwrap.config._is_xdg_platform", lambda: True)

    for var in ["SPECWRAP_LEVEL", "SPECWRAP_BASE_URL", "SPECWRAP_OUTPUT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
