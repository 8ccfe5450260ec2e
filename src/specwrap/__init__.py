"""specwrap -- Generate Python client wrapper modules from OpenAPI 2.0/3.x specs.

This package reads an OpenAPI or Swagger document (YAML or JSON) and emits a
Python module exposing one callable per documented operation. Callables get
verb-style names (``GetPetsList``, ``NewPets``, ``RemovePets``), surface the
operation's path and query parameters as typed arguments, and delegate the
actual HTTP call to :func:`specwrap.runtime.invoke_request`.

Typical workflow::

    specwrap generate petstore.yaml --output ./clients --level Advanced

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    runtime: HTTP helpers imported by generated modules.
"""

__version__ = "0.3.0"
