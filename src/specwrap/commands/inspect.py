"""Inspect command -- preview what ``generate`` would produce.

``specwrap inspect SPEC`` builds the module model exactly as ``generate``
does but writes nothing: it prints one table row per derived function (name,
method, path, parameter count at the chosen level) and reports the
generation diagnostics on stderr.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from specwrap.exceptions import InvalidUsageError, SpecwrapError
from specwrap.output import error, get_output, info, warning


def inspect_command(
    spec: Path = typer.Argument(..., help="OpenAPI 3.x / Swagger 2.0 spec (.json, .yaml, .yml)."),
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="Enhancement level used to count parameters."
    ),
) -> None:
    """List the functions a spec would generate.

    Example::

        specwrap inspect petstore.yaml
        specwrap --json inspect petstore.yaml --level Expert
    """
    from specwrap.config import resolve_config
    from specwrap.generator import compose
    from specwrap.generator.builder import build_module
    from specwrap.models import EnhancementLevel
    from specwrap.parser import load_spec

    try:
        if level is not None:
            try:
                level = EnhancementLevel.parse(level).value
            except ValueError as exc:
                raise InvalidUsageError(str(exc)) from exc
        config, base_url = resolve_config(cli_level=level)
        module = build_module(
            load_spec(spec),
            base_url=base_url,
            level=EnhancementLevel.parse(config.default_level),
            config=config,
        )
    except SpecwrapError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(
        f"{module.info.title} v{module.info.version} "
        f"(spec {module.spec_version}), base URL: {module.base_url or '-'}"
    )

    rows: list[list[str]] = []
    for function in module.functions:
        composed = compose(function, module.level)
        rows.append([
            function.python_name,
            function.http_method.value.upper(),
            function.path_template,
            str(len(composed.parameters)),
            "Yes" if function.deprecated else "",
        ])

    get_output().print_table(
        ["Function", "Method", "Path", "Parameters", "Deprecated"],
        rows,
        title=f"{module.name} -- {len(rows)} functions at level {module.level.value}",
    )

    for diagnostic in module.diagnostics:
        warning(diagnostic)
