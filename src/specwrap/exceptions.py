"""Exception hierarchy for specwrap.

All exceptions inherit from :class:`SpecwrapError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specwrap.exit_codes`.
The top-level error handler in :func:`specwrap.app.main` catches
``SpecwrapError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Structural errors (file, format, spec validity) abort a generation run before
anything is written. :class:`UnresolvedReferenceError` is the only
recoverable one: the extractor skips the offending parameter and records a
diagnostic instead of raising it.

Subclass hierarchy::

    SpecwrapError (exit 1)
    +-- InvalidUsageError          (exit 2)
    |   +-- InvalidModuleNameError (exit 2)
    |   +-- InvalidBaseUriError    (exit 2)
    +-- SpecNotFoundError          (exit 4)
    +-- SpecParseError             (exit 7)
    |   +-- UnsupportedFormatError (exit 7)
    |   +-- InvalidSpecError       (exit 7)
    +-- MissingYamlSupportError    (exit 8)
    +-- UnresolvedReferenceError   (exit 7)
    +-- ConfigError                (exit 1)
    +-- AuthError                  (exit 3)
    +-- NotFoundError              (exit 4)
    +-- ServerError                (exit 5)
    +-- ConnectionError_           (exit 6)
"""

from specwrap.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MISSING_DEPENDENCY,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecwrapError(Exception):
    """Base exception for all specwrap errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specwrap.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecwrapError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class InvalidModuleNameError(InvalidUsageError):
    """Raised when the requested module name is not a usable Python identifier."""


class InvalidBaseUriError(InvalidUsageError):
    """Raised when a base URL override is not an absolute http(s) URL."""


class SpecNotFoundError(SpecwrapError):
    """Raised when the input spec file does not exist."""

    exit_code = EXIT_NOT_FOUND


class SpecParseError(SpecwrapError):
    """Raised when the spec content is not valid JSON/YAML."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnsupportedFormatError(SpecParseError):
    """Raised when the spec file extension is not ``.json``, ``.yaml`` or ``.yml``."""


class InvalidSpecError(SpecParseError):
    """Raised when the parsed document lacks a version marker or a ``paths`` object."""


class MissingYamlSupportError(SpecwrapError):
    """Raised when a YAML spec is supplied but PyYAML is not importable."""

    exit_code = EXIT_MISSING_DEPENDENCY


class UnresolvedReferenceError(SpecwrapError):
    """Raised when a ``$ref`` pointer cannot be followed.

    Args:
        ref: The offending ``$ref`` string.
        message: Optional override for the default message.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, ref: str, message: str | None = None):
        super().__init__(message or f"Cannot resolve $ref '{ref}'")
        self.ref = ref


class ConfigError(SpecwrapError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(SpecwrapError):
    """Raised by generated clients when the API returns HTTP 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(SpecwrapError):
    """Raised by generated clients when the API returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(SpecwrapError):
    """Raised by generated clients for any other HTTP error status.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code returned by the server.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConnectionError_(SpecwrapError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR
