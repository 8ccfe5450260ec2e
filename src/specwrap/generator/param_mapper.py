"""Map OpenAPI parameter schemas to typed, safely named descriptors.

This module bridges raw OpenAPI parameter declarations and the
:class:`~specwrap.models.ParameterDescriptor` model consumed by the composer
and emitter.

**Mapping rules:**

* **OpenAPI types** map to semantic types: ``integer`` to ``integer``,
  ``number`` to ``float``, ``boolean`` to ``boolean``, ``array`` to
  ``string_array``; anything else (``string``, ``object``, missing) to
  ``string``. OpenAPI 3.1 type arrays use their first non-null entry.
* **Constraints** (``enum``, ``pattern``, ``minLength``/``maxLength``,
  ``minimum``/``maximum``, ``items.type``/``items.enum``) are copied into a
  :class:`~specwrap.models.ParameterConstraints`. Patterns Python cannot
  compile are dropped; array parameters record their ``collectionFormat``
  (Swagger 2) or ``style``/``explode`` (OpenAPI 3) encoding.
* **Parameter names** are sanitised to valid Python identifiers via
  :func:`sanitize_param_name`.
* **Standard parameters** (base URL, headers, auth token, no-throw flag,
  timeout, retry mode, body) are synthesised by the ``*_parameter`` helpers.
"""

from __future__ import annotations

import keyword
import re
from typing import Any, Optional

from specwrap.models import (
    ParameterConstraints,
    ParameterDescriptor,
    ParameterLocation,
    ParameterType,
    RetryMode,
)


# ---------------------------------------------------------------------------
# Type mapping
# ---------------------------------------------------------------------------

_TYPE_MAP: dict[str, ParameterType] = {
    "integer": ParameterType.INTEGER,
    "number": ParameterType.FLOAT,
    "boolean": ParameterType.BOOLEAN,
    "array": ParameterType.STRING_ARRAY,
}

PYTHON_ANNOTATIONS: dict[ParameterType, str] = {
    ParameterType.STRING: "str",
    ParameterType.INTEGER: "int",
    ParameterType.FLOAT: "float",
    ParameterType.BOOLEAN: "bool",
    ParameterType.STRING_ARRAY: "list[str]",
    ParameterType.OBJECT: "Any",
}
"""Annotation source text used by the emitter for each semantic type."""


def schema_type_name(schema: Any) -> str:
    """Extract the raw ``type`` string from a schema object.

    Handles OpenAPI 3.1 type arrays (e.g., ``["string", "null"]``) by returning
    the first non-null type. Falls back to ``"string"`` if type is missing.
    """
    if not isinstance(schema, dict):
        return "string"

    type_value = schema.get("type", "string")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else "string"
    return str(type_value)


def map_schema_type(schema: Any) -> ParameterType:
    """Map an OpenAPI schema to a :class:`~specwrap.models.ParameterType`.

    Example::

        >>> map_schema_type({"type": "integer", "format": "int64"})
        <ParameterType.INTEGER: 'integer'>
        >>> map_schema_type({"type": "array", "items": {"type": "string"}})
        <ParameterType.STRING_ARRAY: 'string_array'>
        >>> map_schema_type({"type": "object"})
        <ParameterType.STRING: 'string'>
    """
    return _TYPE_MAP.get(schema_type_name(schema), ParameterType.STRING)


def build_constraints(schema: Any, items_schema: Any = None) -> ParameterConstraints:
    """Collect enum/pattern/length/range constraints from *schema*.

    Args:
        schema: The parameter's (resolved) schema dict.
        items_schema: The resolved ``items`` schema for arrays, if any.

    Returns:
        A :class:`~specwrap.models.ParameterConstraints`; empty when the
        schema declares nothing usable. A ``pattern`` Python's :mod:`re`
        cannot compile (ECMA-262 only syntax such as ``\\p{L}``) is left out.
    """
    if not isinstance(schema, dict):
        return ParameterConstraints()

    pattern = _as_str(schema.get("pattern"))
    enum_values = schema.get("enum")
    item_type: Optional[ParameterType] = None
    item_enum: Optional[list[Any]] = None
    if isinstance(items_schema, dict):
        item_type = map_schema_type(items_schema)
        if isinstance(items_schema.get("enum"), list):
            item_enum = list(items_schema["enum"])

    return ParameterConstraints(
        enum=list(enum_values) if isinstance(enum_values, list) and enum_values else None,
        pattern=pattern if pattern is not None and is_python_pattern(pattern) else None,
        min_length=_as_int(schema.get("minLength")),
        max_length=_as_int(schema.get("maxLength")),
        minimum=_as_float(schema.get("minimum")),
        maximum=_as_float(schema.get("maximum")),
        item_type=item_type,
        item_enum=item_enum,
    )


def is_python_pattern(pattern: str) -> bool:
    """Return ``True`` when *pattern* compiles with Python's :mod:`re`."""
    try:
        re.compile(pattern)
    except re.error:
        return False
    return True


# Swagger 2 ``collectionFormat`` values sent as one delimited value; ``multi``
# (repeated keys) is the runtime default and needs no marker.
COLLECTION_FORMATS = frozenset({"csv", "ssv", "tsv", "pipes"})

_OAS3_QUERY_STYLES: dict[str, str] = {
    "form": "csv",
    "spaceDelimited": "ssv",
    "pipeDelimited": "pipes",
}


def collection_format(
    raw: dict[str, Any], location: ParameterLocation, *, swagger: bool
) -> Optional[str]:
    """Return the delimited encoding of an array parameter, or ``None`` for repeated keys.

    Swagger 2 reads ``collectionFormat`` (default ``csv``). OpenAPI 3 derives
    it from ``style``/``explode``: path arrays are comma-joined, query arrays
    repeat the key unless ``explode: false``.
    """
    if swagger:
        fmt = raw.get("collectionFormat", "csv")
        return fmt if fmt in COLLECTION_FORMATS else None

    if location == ParameterLocation.PATH:
        return "csv"
    style = raw.get("style", "form")
    explode = raw.get("explode", style == "form")
    if explode is True:
        return None
    return _OAS3_QUERY_STYLES.get(style)


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


# ---------------------------------------------------------------------------
# Name sanitisation
# ---------------------------------------------------------------------------

_BRACKETS_RE = re.compile(r"[\[\]()]")
_INVALID_IDENT_RE = re.compile(r"[^A-Za-z0-9_]")
_REPEATED_UNDERSCORE_RE = re.compile(r"_+")


def sanitize_param_name(name: str) -> str:
    """Convert a spec parameter name to a valid Python identifier.

    Applies the following transformations in order:

    1. Brackets and parentheses become underscores.
    2. Any remaining character outside ``[A-Za-z0-9_]`` becomes an underscore.
    3. Runs of underscores collapse to one; leading/trailing ones are stripped.
    4. An empty result defaults to ``"param"``.
    5. A leading digit gets an underscore prefix.
    6. Python keywords get a trailing underscore (``"from"`` -> ``"from_"``).

    Case is preserved: ``petId`` stays ``petId`` so generated signatures keep
    the names API documentation uses.

    Example::

        >>> sanitize_param_name("filter[first_name][eq]")
        'filter_first_name_eq'
        >>> sanitize_param_name("X-Request-ID")
        'X_Request_ID'
        >>> sanitize_param_name("2fa")
        '_2fa'
    """
    result = _BRACKETS_RE.sub("_", name)
    result = _INVALID_IDENT_RE.sub("_", result)
    result = _REPEATED_UNDERSCORE_RE.sub("_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


# ---------------------------------------------------------------------------
# Standard parameters
# ---------------------------------------------------------------------------

RESERVED_NAMES = frozenset(
    {"base_url", "headers", "auth_token", "no_throw", "timeout", "retry_mode", "body"}
)
"""Safe names owned by synthetic parameters; spec parameters must avoid them."""


def base_url_parameter(base_url: Optional[str]) -> ParameterDescriptor:
    """The base-URL override, defaulting to the spec-derived URL."""
    return ParameterDescriptor(
        original_name="base_url",
        safe_name="base_url",
        location=ParameterLocation.STANDARD,
        required=base_url is None,
        description="Base URL of the API. Overrides the URL taken from the spec.",
        default=base_url,
    )


def headers_parameter() -> ParameterDescriptor:
    return ParameterDescriptor(
        original_name="headers",
        safe_name="headers",
        location=ParameterLocation.STANDARD,
        type=ParameterType.OBJECT,
        description="Extra HTTP headers sent with the request.",
    )


def auth_token_parameter(auth_header: str) -> ParameterDescriptor:
    return ParameterDescriptor(
        original_name=auth_header,
        safe_name="auth_token",
        location=ParameterLocation.STANDARD,
        description=f"Token sent in the '{auth_header}' header.",
    )


def no_throw_parameter() -> ParameterDescriptor:
    return ParameterDescriptor(
        original_name="no_throw",
        safe_name="no_throw",
        location=ParameterLocation.STANDARD,
        type=ParameterType.BOOLEAN,
        description="Return None instead of raising when the request fails.",
        default=False,
    )


def timeout_parameter() -> ParameterDescriptor:
    return ParameterDescriptor(
        original_name="timeout",
        safe_name="timeout",
        location=ParameterLocation.STANDARD,
        type=ParameterType.FLOAT,
        description="Request timeout in seconds. Uses the HTTP client default when omitted.",
    )


def retry_mode_parameter() -> ParameterDescriptor:
    return ParameterDescriptor(
        original_name="retry_mode",
        safe_name="retry_mode",
        location=ParameterLocation.STANDARD,
        constraints=ParameterConstraints(enum=[mode.value for mode in RetryMode]),
        description=(
            "Failure handling: 'Default' raises, 'Ignore' returns None, "
            "'Retry' retries transient failures before raising."
        ),
        default=RetryMode.DEFAULT.value,
    )


def body_parameter(required_by_api: bool = False, description: str = "") -> ParameterDescriptor:
    """The synthetic request-body parameter.

    The body always stays optional in the signature; when the API marks it
    required that is stated in the description instead.
    """
    text = description or "Request body, sent as JSON."
    if required_by_api:
        text = f"{text} Required by the API."
    return ParameterDescriptor(
        original_name="body",
        safe_name="body",
        location=ParameterLocation.BODY,
        type=ParameterType.OBJECT,
        description=text,
    )
