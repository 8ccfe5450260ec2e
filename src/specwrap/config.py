"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specwrap:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specwrap/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~specwrap.models.GlobalConfig`
  JSON file storing generation defaults (level, output directory, query
  parameter cap, retry settings, extra verb synonyms).
* **Project config** -- An optional ``./specwrap.json`` whose keys override
  the global ones for a single repository; it may also pin ``base_url``.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes, generated modules included, go through :func:`atomic_write`
so an interrupted run never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specwrap.exceptions import ConfigError
from specwrap.models import EnhancementLevel, GlobalConfig

logger = logging.getLogger(__name__)

_APP_NAME = "specwrap"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specwrap.json"

ENV_LEVEL = "SPECWRAP_LEVEL"
ENV_BASE_URL = "SPECWRAP_BASE_URL"
ENV_OUTPUT = "SPECWRAP_OUTPUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specwrap/`` (default ``~/.config/specwrap/``).
    On macOS/Windows: ``~/.specwrap/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specwrap/`` (default ``~/.local/share/specwrap/``).
    On macOS/Windows: ``~/.specwrap/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file is created next to *path* so that ``os.replace`` is an
    atomic rename on POSIX systems. On any failure the temp file is removed
    and the original file, if any, is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~specwrap.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def project_config_path() -> Path:
    return Path.cwd() / _PROJECT_CONFIG_FILENAME


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specwrap.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    path = project_config_path()
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_level: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    cli_output: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[str]]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_level``, ``cli_base_url``, ``cli_output``)
        2. Environment variables (``SPECWRAP_LEVEL``, ``SPECWRAP_BASE_URL``,
           ``SPECWRAP_OUTPUT``)
        3. Project config (``./specwrap.json``)
        4. User config (``~/.config/specwrap/config.json``)
        5. Defaults

    Returns:
        A tuple of ``(effective_config, base_url_or_None)``. ``base_url`` is
        only set when one of the layers overrides the spec's server URL.

    Raises:
        ConfigError: If a config file is invalid or the resolved level is
            not a known enhancement level.
    """
    global_cfg = load_global_config()
    base_url: Optional[str] = None

    project = load_project_config()
    if project is not None:
        base_url = project.pop("base_url", None)
        merged = {**global_cfg.model_dump(), **project}
        try:
            global_cfg = GlobalConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config at {project_config_path()}: {exc}") from exc
        logger.debug("Applied project config from %s", project_config_path())

    level = os.environ.get(ENV_LEVEL) or global_cfg.default_level
    output = os.environ.get(ENV_OUTPUT) or global_cfg.default_output
    base_url = os.environ.get(ENV_BASE_URL) or base_url

    if cli_level is not None:
        level = cli_level
    if cli_output is not None:
        output = cli_output
    if cli_base_url is not None:
        base_url = cli_base_url

    try:
        level = EnhancementLevel.parse(level).value
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    global_cfg = global_cfg.model_copy(update={"default_level": level, "default_output": output})
    return global_cfg, base_url
