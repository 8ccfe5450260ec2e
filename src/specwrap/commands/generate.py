"""Generate command -- turn a spec file into a Python client module.

Implements ``specwrap generate``. The run is all-or-nothing: the spec is
loaded, validated and turned into a complete
:class:`~specwrap.models.ModuleDescriptor` before the emitter writes a single
file, so any fatal error leaves the output directory untouched.

Values not given on the command line are taken from configuration
(``--level``, ``--output``, ``--base-url``; see
:func:`~specwrap.config.resolve_config`) or derived from the spec (module
name from ``info.title``, base URL from ``servers``). In interactive mode
(the default when stdin is a terminal) each missing value is prompted for,
with the derived value offered as the default.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

from specwrap.exceptions import InvalidUsageError, SpecwrapError
from specwrap.models import EnhancementLevel
from specwrap.output import debug, error, info, print_data, success, suggest, warning


def generate_command(
    spec: Path = typer.Argument(..., help="OpenAPI 3.x / Swagger 2.0 spec (.json, .yaml, .yml)."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Directory the module is written to."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Module name (derived from the API title if omitted)."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the base URL taken from the spec."
    ),
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="Enhancement level: Basic, Standard, Advanced, Expert."
    ),
    interactive: Optional[bool] = typer.Option(
        None,
        "--interactive/--non-interactive",
        help="Prompt for missing values (default: only when stdin is a terminal).",
    ),
) -> None:
    """Generate a Python client module from an OpenAPI spec.

    Args:
        spec: Path to the spec file.
        output: Output directory; config ``default_output`` when omitted.
        name: Python module name.
        base_url: Absolute http(s) URL overriding the spec's server URL.
        level: Enhancement level; config ``default_level`` when omitted.
        interactive: Force prompting on or off.

    Raises:
        typer.Exit: With the failing error's exit code.

    Example::

        specwrap generate petstore.yaml --level Expert --non-interactive
        specwrap generate api.json -o clients/ -n billing --base-url https://api.example.com
    """
    try:
        _generate(spec, output, name, base_url, level, interactive)
    except SpecwrapError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _generate(
    spec_path: Path,
    output: Optional[Path],
    name: Optional[str],
    base_url: Optional[str],
    level: Optional[str],
    interactive: Optional[bool],
) -> None:
    from specwrap.config import resolve_config
    from specwrap.emitter import emit_module
    from specwrap.generator.builder import (
        build_module,
        module_name_from_title,
        validate_base_url,
        validate_module_name,
    )
    from specwrap.parser import load_spec
    from specwrap.parser.extractor import extract_base_url, extract_info

    if interactive is None:
        interactive = sys.stdin.isatty()

    # CLI-supplied values are checked before anything is read.
    if name is not None:
        name = validate_module_name(name)
    if base_url is not None:
        base_url = validate_base_url(base_url)
    if level is not None:
        level = _parse_level(level).value

    config, configured_base_url = resolve_config(
        cli_level=level,
        cli_base_url=base_url,
        cli_output=str(output) if output is not None else None,
    )

    debug(f"Loading spec from {spec_path}")
    document = load_spec(spec_path)
    api_info = extract_info(document)
    info(f"Loaded: {api_info.title} v{api_info.version}")

    module_name = name or module_name_from_title(api_info.title)
    spec_base_url = extract_base_url(document)
    override = configured_base_url
    output_dir = config.default_output
    chosen_level = config.default_level

    if interactive:
        if name is None:
            module_name = validate_module_name(typer.prompt("Module name", default=module_name))
        if base_url is None:
            current = override or spec_base_url
            answer = typer.prompt(
                "Base URL (empty to keep the spec's)",
                default=current or "",
                show_default=bool(current),
            )
            override = answer.strip() or None
        if output is None:
            output_dir = typer.prompt("Output directory", default=output_dir)
        if level is None:
            chosen_level = _parse_level(
                typer.prompt("Enhancement level", default=chosen_level)
            ).value

    # The spec's own server URL may be relative; only overrides are validated.
    if override == spec_base_url:
        override = None

    module = build_module(
        document,
        module_name=module_name,
        base_url=override,
        level=EnhancementLevel.parse(chosen_level),
        config=config,
    )

    for diagnostic in module.diagnostics:
        warning(diagnostic)

    written = emit_module(module, output_dir, config)
    for path in written:
        print_data(str(path))

    success(
        f"Generated {len(module.functions)} function(s) in '{module.name}' "
        f"at level {module.level.value}."
    )
    if module.base_url is None:
        suggest("The spec declares no server URL: pass base_url=... when calling.")


def _parse_level(value: str) -> EnhancementLevel:
    try:
        return EnhancementLevel.parse(value)
    except ValueError as exc:
        raise InvalidUsageError(str(exc)) from exc
