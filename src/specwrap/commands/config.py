"""Config commands -- view and modify global configuration.

Provides the ``specwrap config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~specwrap.models.GlobalConfig`). Settings control generation
defaults such as the enhancement level, output directory, query parameter
cap and the retry behaviour baked into Expert-level functions.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from specwrap.output import error, format_data, info, success


config_app = typer.Typer(no_args_is_help=True)

# Mapping-valued fields that accept new keys through ``config set``.
_OPEN_MAPPINGS = frozenset({"verb_synonyms"})


@config_app.command("show")
def config_show() -> None:
    """Show the current global configuration.

    Example::

        specwrap config show
        specwrap --json config show
    """
    from specwrap.config import global_config_path, load_global_config

    config = load_global_config()
    info(f"Config file: {global_config_path()}")
    format_data(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'output.format' or 'verb_synonyms.fetchall')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type (bool, int, float or
    str) and the result is validated against
    :class:`~specwrap.models.GlobalConfig` before saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or validation fails.

    Example::

        specwrap config set default_level Expert
        specwrap config set query_param_cap 30
        specwrap config set verb_synonyms.fetchall Get
    """
    from specwrap.config import load_global_config, save_global_config
    from specwrap.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    open_mapping = len(keys) == 2 and keys[0] in _OPEN_MAPPINGS
    if final_key not in target and not open_mapping:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    try:
        coerced = _coerce(target.get(final_key), value)
    except ValueError:
        error(f"Expected {type(target[final_key]).__name__} for {key}, got: {value}")
        raise typer.Exit(code=2) from None

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Reset configuration to defaults.

    Example::

        specwrap config reset --yes
    """
    from specwrap.config import save_global_config
    from specwrap.models import GlobalConfig

    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")


def _coerce(current: Any, value: str) -> Any:
    """Convert *value* to the type of *current*.

    Raises:
        ValueError: If *value* does not parse as the target number type.
    """
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value
