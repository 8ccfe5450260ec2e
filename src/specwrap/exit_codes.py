"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specwrap.exceptions.SpecwrapError` subclass.
External tooling (CI scripts, build steps) can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ specwrap generate missing.yaml --non-interactive
    $ echo $?
    4   # EXIT_NOT_FOUND -- the spec file does not exist
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (bad module name, bad base URL)."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed (generated-client runtime)."""

EXIT_NOT_FOUND = 4
"""The spec file, or a remote resource, was not found."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an error status (generated-client runtime)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be parsed, validated, or has an unsupported format."""

EXIT_MISSING_DEPENDENCY = 8
"""An optional capability (YAML support) is not installed."""
