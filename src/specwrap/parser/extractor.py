"""Extract operations, parameters, request bodies and API metadata from a spec.

This module walks the normalised document tree produced by
:func:`~specwrap.parser.loader.load_spec` and turns each operation's
parameter declarations into an ordered list of
:class:`~specwrap.models.ParameterDescriptor` objects.

The public entry points are:

* :func:`iter_operations` -- every (path, method, operation, path item) in
  document order.
* :func:`extract_parameters` -- the normalised parameter list of one
  operation: path parameters, capped query parameters, the body parameter,
  then the standard parameters.
* :func:`extract_request_body` -- whether (and how) an operation takes a body.
* :func:`extract_info` / :func:`extract_base_url` -- module-level metadata.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.

Problems confined to one parameter (unresolvable ``$ref``, unknown ``in``,
duplicate safe name, query cap overflow, a ``pattern`` Python cannot compile)
never abort extraction; they are appended to the caller-supplied
``diagnostics`` list, or logged as warnings when no list is given.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Optional

from specwrap.generator.param_mapper import (
    RESERVED_NAMES,
    auth_token_parameter,
    base_url_parameter,
    body_parameter,
    build_constraints,
    collection_format,
    map_schema_type,
    no_throw_parameter,
    sanitize_param_name,
)
from specwrap.models import (
    APIInfo,
    HTTPMethod,
    ParameterDescriptor,
    ParameterLocation,
    ParameterType,
)
from specwrap.parser.resolver import UNRESOLVED, resolve
from specwrap.parser.tree import get, get_list, get_mapping, get_str, keys_of

logger = logging.getLogger(__name__)

DEFAULT_QUERY_CAP = 20
"""Maximum number of query parameters surfaced per operation."""

_HTTP_METHODS = [m.value for m in HTTPMethod]
_BODY_LOCATIONS = frozenset({"body", "formData"})
_SERVER_VARIABLE_RE = re.compile(r"\{([^{}]+)\}")
_PATH_PLACEHOLDER_RE = _SERVER_VARIABLE_RE


@dataclass(frozen=True)
class RequestBodyInfo:
    """Request body metadata for one operation."""

    required: bool = False
    description: str = ""
    content_types: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Module-level metadata
# ---------------------------------------------------------------------------


def extract_info(spec: dict[str, Any]) -> APIInfo:
    """Read ``info.title``, ``info.version`` and ``info.description`` with defaults.

    Missing values fall back to ``"Generated API"``, ``"1.0.0"`` and ``""``.
    """
    info = get_mapping(spec, "info")
    return APIInfo(
        title=get_str(info, "title") or "Generated API",
        version=get_str(info, "version") or "1.0.0",
        description=get_str(info, "description"),
    )


def extract_base_url(spec: dict[str, Any]) -> Optional[str]:
    """Derive the API base URL from the spec.

    * OpenAPI 3.x: ``servers[0].url`` with ``{variable}`` placeholders replaced
      by the variable's ``default``.
    * Swagger 2.0: ``schemes[0]`` (default ``https``) + ``host`` + ``basePath``.

    Returns:
        The base URL without a trailing slash, or ``None`` when the spec
        declares none. Relative server URLs (``/v1``) are returned as-is.
    """
    servers = get_list(spec, "servers")
    if servers and isinstance(servers[0], dict):
        server = servers[0]
        url = get_str(server, "url")
        if url:
            variables = get_mapping(server, "variables")

            def _substitute(match: re.Match[str]) -> str:
                default = get(get_mapping(variables, match.group(1)), "default")
                return str(default) if default is not None else match.group(0)

            url = _SERVER_VARIABLE_RE.sub(_substitute, url)
            return url.rstrip("/") or "/"

    host = get_str(spec, "host")
    if host:
        schemes = get_list(spec, "schemes")
        scheme = str(schemes[0]) if schemes else "https"
        base_path = get_str(spec, "basePath").rstrip("/")
        if base_path and not base_path.startswith("/"):
            base_path = "/" + base_path
        return f"{scheme}://{host}{base_path}"

    return None


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def iter_operations(
    spec: dict[str, Any],
    diagnostics: Optional[list[str]] = None,
) -> Iterator[tuple[str, HTTPMethod, dict[str, Any], dict[str, Any]]]:
    """Yield ``(path, method, operation, path_item)`` for every operation.

    Paths are visited in document order and methods in the fixed order of
    :class:`~specwrap.models.HTTPMethod`, so repeated runs over the same
    document produce the same sequence. Path items that are unresolvable
    references are skipped with a diagnostic.
    """
    paths = get_mapping(spec, "paths")
    for path in keys_of(paths):
        path_item = resolve(paths[path], spec)
        if path_item is UNRESOLVED:
            _report(diagnostics, f"{path}: unresolved path item reference, skipped")
            continue
        if not isinstance(path_item, dict):
            continue

        for method_str in _HTTP_METHODS:
            operation = path_item.get(method_str)
            if not isinstance(operation, dict):
                continue
            yield path, HTTPMethod(method_str), operation, path_item


def extract_parameters(
    operation: dict[str, Any],
    path_item: dict[str, Any],
    document: dict[str, Any],
    *,
    path: str = "",
    context: str = "",
    query_cap: int = DEFAULT_QUERY_CAP,
    base_url: Optional[str] = None,
    auth_header: str = "X-API-Key",
    diagnostics: Optional[list[str]] = None,
) -> list[ParameterDescriptor]:
    """Build the ordered parameter list of one operation.

    Args:
        operation: The raw operation object (``paths[path][method]``).
        path_item: The enclosing path item (for path-level ``parameters``).
        document: The root spec, used for ``$ref`` resolution.
        path: The path template; placeholders without a declared path
            parameter are added as required string parameters.
        context: Label for diagnostics, e.g. ``"GET /pets"``.
        query_cap: Maximum number of query parameters kept, chosen by
            ascending original name.
        base_url: Spec-derived base URL, the default of the ``base_url``
            standard parameter.
        auth_header: Header name the ``auth_token`` parameter maps to.
        diagnostics: Optional list receiving one message per skipped item.

    Returns:
        Path parameters (sorted by name, always required), query parameters
        (sorted by name, capped), the ``body`` parameter when the operation
        declares a request body, then ``base_url``, ``auth_token`` and
        ``no_throw``. Safe names are unique within the list.
    """
    label = context or "operation"
    raw_params = _collect_parameters(operation, path_item, document, label, diagnostics)

    path_params: dict[str, ParameterDescriptor] = {}
    query_params: dict[str, ParameterDescriptor] = {}

    for raw in raw_params:
        name = raw.get("name")
        if not isinstance(name, str) or not name:
            continue
        location = raw.get("in")
        if location in ("path", "query"):
            bucket = path_params if location == "path" else query_params
            if name not in bucket:
                bucket[name] = _build_descriptor(
                    raw, ParameterLocation(location), document, label, diagnostics
                )
        elif location not in _BODY_LOCATIONS:
            logger.debug("%s: parameter '%s' in '%s' is not surfaced", label, name, location)

    for placeholder in _PATH_PLACEHOLDER_RE.findall(path):
        if placeholder not in path_params:
            _report(
                diagnostics,
                f"{label}: path placeholder '{{{placeholder}}}' is not declared, "
                "added as a string parameter",
            )
            path_params[placeholder] = _build_descriptor(
                {"name": placeholder, "in": "path"},
                ParameterLocation.PATH,
                document,
                label,
                diagnostics,
            )

    taken: set[str] = set()
    ordered_path = _dedupe_safe_names(
        [path_params[n] for n in sorted(path_params)], taken, label, diagnostics
    )
    ordered_query = _dedupe_safe_names(
        [query_params[n] for n in sorted(query_params)], taken, label, diagnostics
    )
    if len(ordered_query) > query_cap:
        dropped = [p.original_name for p in ordered_query[query_cap:]]
        _report(
            diagnostics,
            f"{label}: {len(ordered_query)} query parameters, keeping the first "
            f"{query_cap} by name (dropped: {', '.join(dropped)})",
        )
        ordered_query = ordered_query[:query_cap]

    result = ordered_path + ordered_query

    body = extract_request_body(operation, document, raw_params, label, diagnostics)
    if body is not None:
        result.append(body_parameter(body.required, body.description))

    result.extend(
        [
            base_url_parameter(base_url),
            auth_token_parameter(auth_header),
            no_throw_parameter(),
        ]
    )
    return result


def extract_request_body(
    operation: dict[str, Any],
    document: dict[str, Any],
    raw_params: Optional[list[dict[str, Any]]] = None,
    context: str = "",
    diagnostics: Optional[list[str]] = None,
) -> Optional[RequestBodyInfo]:
    """Detect whether *operation* takes a request body.

    OpenAPI 3 declares it in ``requestBody`` (possibly a ``$ref`` into
    ``components.requestBodies``); Swagger 2 uses ``in: body`` or
    ``in: formData`` parameters.

    Returns:
        A :class:`RequestBodyInfo`, or ``None`` when the operation has no
        body or its body reference cannot be resolved.
    """
    label = context or "operation"
    if "requestBody" in operation:
        body = resolve(operation["requestBody"], document)
        if body is UNRESOLVED:
            _report(diagnostics, f"{label}: unresolved requestBody reference, body omitted")
            return None
        if not isinstance(body, dict):
            return None
        return RequestBodyInfo(
            required=bool(body.get("required", False)),
            description=get_str(body, "description"),
            content_types=tuple(keys_of(get_mapping(body, "content"))),
        )

    if raw_params is None:
        raw_params = get_list(operation, "parameters")
    swagger_body = [
        p for p in raw_params if isinstance(p, dict) and p.get("in") in _BODY_LOCATIONS
    ]
    if not swagger_body:
        return None
    consumes = get_list(operation, "consumes") or get_list(document, "consumes")
    return RequestBodyInfo(
        required=any(bool(p.get("required", False)) for p in swagger_body),
        description=get_str(swagger_body[0], "description"),
        content_types=tuple(str(c) for c in consumes),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _collect_parameters(
    operation: dict[str, Any],
    path_item: dict[str, Any],
    document: dict[str, Any],
    label: str,
    diagnostics: Optional[list[str]],
) -> list[dict[str, Any]]:
    """Resolve and merge path-level and operation-level parameter lists.

    Operation-level entries override path-level entries with the same
    ``name`` and ``in``. Unresolvable references are skipped.
    """
    path_level = _resolve_all(get_list(path_item, "parameters"), document, label, diagnostics)
    op_level = _resolve_all(get_list(operation, "parameters"), document, label, diagnostics)

    op_keys = {(p.get("name", ""), p.get("in", "")) for p in op_level}
    merged = [p for p in path_level if (p.get("name", ""), p.get("in", "")) not in op_keys]
    merged.extend(op_level)
    return merged


def _resolve_all(
    entries: list[Any],
    document: dict[str, Any],
    label: str,
    diagnostics: Optional[list[str]],
) -> list[dict[str, Any]]:
    resolved: list[dict[str, Any]] = []
    for entry in entries:
        target = resolve(entry, document)
        if target is UNRESOLVED:
            ref = entry.get("$ref") if isinstance(entry, dict) else entry
            _report(diagnostics, f"{label}: unresolved parameter reference '{ref}', skipped")
            continue
        if isinstance(target, dict):
            resolved.append(target)
    return resolved


def _parameter_schema(raw: dict[str, Any], document: dict[str, Any]) -> dict[str, Any]:
    """Return the schema describing a parameter's value.

    OpenAPI 3 puts it under ``schema`` (or ``content.<media>.schema``);
    Swagger 2 puts ``type``/``enum``/... on the parameter itself.
    """
    schema: Any = raw.get("schema")
    if schema is None and isinstance(raw.get("content"), dict):
        for media in raw["content"].values():
            if isinstance(media, dict) and "schema" in media:
                schema = media["schema"]
                break
    if schema is None:
        return raw
    schema = resolve(schema, document)
    return schema if isinstance(schema, dict) else {}


def _build_descriptor(
    raw: dict[str, Any],
    location: ParameterLocation,
    document: dict[str, Any],
    label: str,
    diagnostics: Optional[list[str]],
) -> ParameterDescriptor:
    schema = _parameter_schema(raw, document)
    items = schema.get("items")
    items_schema = resolve(items, document) if items is not None else None
    if items_schema is UNRESOLVED:
        items_schema = None

    required = bool(raw.get("required", False)) or location == ParameterLocation.PATH
    description = get_str(raw, "description") or get_str(schema, "description")
    param_type = map_schema_type(schema)

    constraints = build_constraints(schema, items_schema)
    pattern = schema.get("pattern")
    if isinstance(pattern, str) and pattern and constraints.pattern is None:
        _report(
            diagnostics,
            f"{label}: parameter '{raw['name']}' pattern {pattern!r} is not a valid "
            "Python regular expression, not enforced",
        )
    if param_type == ParameterType.STRING_ARRAY:
        fmt = collection_format(raw, location, swagger=get(document, "swagger") is not None)
        constraints = constraints.model_copy(update={"collection_format": fmt})

    return ParameterDescriptor(
        original_name=raw["name"],
        safe_name=sanitize_param_name(raw["name"]),
        location=location,
        type=param_type,
        required=required,
        constraints=constraints,
        description=description,
        default=schema.get("default"),
    )


def _dedupe_safe_names(
    params: list[ParameterDescriptor],
    taken: set[str],
    label: str,
    diagnostics: Optional[list[str]],
) -> list[ParameterDescriptor]:
    """Keep the first parameter for every safe name, renaming reserved clashes.

    A spec parameter whose safe name equals a standard parameter's name gets
    its location appended (``timeout`` -> ``timeout_query``). *taken* is
    updated in place so later buckets see earlier names.
    """
    kept: list[ParameterDescriptor] = []
    for param in params:
        safe = param.safe_name
        if safe in RESERVED_NAMES:
            safe = f"{safe}_{param.location.value}"
            param = param.model_copy(update={"safe_name": safe})
        if safe in taken:
            _report(
                diagnostics,
                f"{label}: parameter '{param.original_name}' duplicates safe name "
                f"'{safe}', skipped",
            )
            continue
        taken.add(safe)
        kept.append(param)
    return kept


def _report(diagnostics: Optional[list[str]], message: str) -> None:
    # Callers collecting diagnostics surface them themselves.
    if diagnostics is None:
        logger.warning(message)
    else:
        logger.debug(message)
        diagnostics.append(message)
