"""Load OpenAPI/Swagger specifications from local JSON or YAML files.

This module handles all I/O for reading raw spec documents and converting
them into normalised Python dictionaries. The format is chosen from the file
extension (``.json``, ``.yaml``, ``.yml``); there is no content sniffing, so
a ``.json`` file holding YAML is reported as a parse error rather than
silently accepted.

The public functions are:

* :func:`load_spec` -- Read, parse, normalise and validate a spec file.
* :func:`detect_format` -- Map a path to ``"json"`` or ``"yaml"``.
* :func:`validate_spec` -- Check the version marker and ``paths`` object and
  return the version string.

YAML support comes from PyYAML, with YAML 1.2 booleans: only ``true``/``false``
become booleans, so ``on``, ``off``, ``yes`` and ``no`` stay strings. When
PyYAML is not installed, YAML input fails with
:class:`~specwrap.exceptions.MissingYamlSupportError`; JSON input keeps working.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from specwrap.exceptions import (
    InvalidSpecError,
    MissingYamlSupportError,
    SpecNotFoundError,
    SpecParseError,
    UnsupportedFormatError,
)
from specwrap.parser.tree import get, normalize_tree

logger = logging.getLogger(__name__)

_FORMATS: dict[str, str] = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def load_spec(path: str | Path) -> dict[str, Any]:
    """Load a spec file and return its validated, normalised document tree.

    Args:
        path: Path to a ``.json``, ``.yaml`` or ``.yml`` file.

    Returns:
        The parsed spec as a dictionary with string keys throughout.

    Raises:
        UnsupportedFormatError: If the extension is not recognised.
        SpecNotFoundError: If the file does not exist.
        SpecParseError: If the content is not UTF-8, empty, not valid JSON/YAML,
            or recursive (a YAML alias inside its own anchor).
        MissingYamlSupportError: If a YAML file is given and PyYAML is missing.
        InvalidSpecError: If the document lacks a version marker or ``paths``.
    """
    file_path = Path(path)
    fmt = detect_format(file_path)

    if not file_path.is_file():
        raise SpecNotFoundError(f"Spec file not found: {file_path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SpecParseError(
            f"Spec file is not valid UTF-8: {file_path} ({exc.reason} at byte {exc.start})"
        ) from exc
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {file_path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {file_path}")

    try:
        if fmt == "json":
            document = _parse_json(content, file_path)
        else:
            document = _parse_yaml(content, file_path)
        document = normalize_tree(document)
    except RecursionError as exc:
        raise SpecParseError(
            f"Spec is nested too deeply or self-referential: {file_path}"
        ) from exc

    version = validate_spec(document, source=str(file_path))
    logger.debug("Loaded %s (spec version %s)", file_path, version)
    return document


def detect_format(path: str | Path) -> str:
    """Return ``"json"`` or ``"yaml"`` for *path* based on its extension.

    Raises:
        UnsupportedFormatError: For any other extension.
    """
    suffix = Path(path).suffix.lower()
    fmt = _FORMATS.get(suffix)
    if fmt is None:
        supported = ", ".join(sorted(_FORMATS))
        raise UnsupportedFormatError(
            f"Unsupported spec format '{suffix or '<none>'}' for {path} "
            f"(supported: {supported})"
        )
    return fmt


def _parse_json(content: str, path: Path) -> dict[str, Any]:
    try:
        result = json.loads(content)
    except json.JSONDecodeError as exc:
        raise SpecParseError(f"Invalid JSON in {path}: {exc}") from exc
    return _require_mapping(result, path)


def _parse_yaml(content: str, path: Path) -> dict[str, Any]:
    yaml = _import_yaml()
    try:
        result = yaml.load(content, Loader=_spec_loader(yaml))  # noqa: S506
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Invalid YAML in {path}: {exc}") from exc
    return _require_mapping(result, path)


_BOOL_TAG = "tag:yaml.org,2002:bool"
_YAML12_BOOL_RE = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")


def _spec_loader(yaml: Any) -> type:  # noqa: ANN401
    """Return a ``SafeLoader`` subclass that resolves booleans the YAML 1.2 way.

    PyYAML follows YAML 1.1, where ``on``, ``off``, ``yes`` and ``no`` are
    booleans. OpenAPI documents use them as plain strings (enum values,
    property names), so only ``true``/``false`` are treated as booleans.
    """

    class SpecLoader(yaml.SafeLoader):
        pass

    SpecLoader.yaml_implicit_resolvers = {
        first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
        for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }
    SpecLoader.add_implicit_resolver(_BOOL_TAG, _YAML12_BOOL_RE, list("tTfF"))
    return SpecLoader


def _import_yaml() -> Any:  # noqa: ANN401
    """Import PyYAML, turning its absence into an actionable error."""
    try:
        import yaml
    except ImportError as exc:
        raise MissingYamlSupportError(
            "YAML support is not available. Install it with "
            "'pip install pyyaml', or supply the spec as JSON instead."
        ) from exc
    return yaml


def _require_mapping(result: Any, path: Path) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind}) in {path}")
    return result


def validate_spec(spec: dict[str, Any], source: str = "spec") -> str:
    """Validate the structural minimum needed for generation.

    Both Swagger 2.0 (``swagger`` field) and OpenAPI 3.x (``openapi`` field)
    are accepted. A ``paths`` object is always required; an empty one is
    allowed and simply yields no functions.

    Args:
        spec: The parsed spec dictionary.
        source: Identifier used in error messages (usually the file path).

    Returns:
        The version string (e.g. ``"2.0"``, ``"3.0.3"``, ``"3.1.0"``).

    Raises:
        InvalidSpecError: If the version marker or the ``paths`` object is missing.
    """
    version = get(spec, "openapi")
    if version is None:
        version = get(spec, "swagger")
    if version is None:
        raise InvalidSpecError(
            f"{source}: missing 'openapi' or 'swagger' version field. "
            "Is this an OpenAPI/Swagger document?"
        )

    paths = get(spec, "paths")
    if paths is None:
        raise InvalidSpecError(f"{source}: missing 'paths' object")
    if not isinstance(paths, dict):
        raise InvalidSpecError(
            f"{source}: 'paths' must be an object (got {type(paths).__name__})"
        )

    return str(version)
