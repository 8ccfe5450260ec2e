"""Build the module model from a loaded spec document.

:func:`build_module` is the generation pipeline's middle stage: it walks every
(path, method) pair of the document, extracts parameters, derives a unique
callable name, and collects the resulting
:class:`~specwrap.models.FunctionDescriptor` objects into a
:class:`~specwrap.models.ModuleDescriptor` for the emitter.

Per-operation work is independent; name de-duplication is the one sequential
step and runs through a single :class:`~specwrap.generator.naming.NameRegistry`
in document order, so the same spec always yields the same names.
"""

from __future__ import annotations

import keyword
import logging
import re
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import urlparse

from specwrap.exceptions import InvalidBaseUriError, InvalidModuleNameError
from specwrap.generator.naming import (
    VERB_SYNONYMS,
    NameRegistry,
    derive_name,
    merge_synonyms,
    to_snake_case,
)
from specwrap.models import (
    EnhancementLevel,
    FunctionDescriptor,
    GlobalConfig,
    HTTPMethod,
    ModuleDescriptor,
    ParameterLocation,
)
from specwrap.parser.extractor import (
    extract_base_url,
    extract_info,
    extract_parameters,
    iter_operations,
)
from specwrap.parser.loader import validate_spec
from specwrap.parser.tree import get_list, get_str

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def build_module(
    spec: dict[str, Any],
    *,
    module_name: Optional[str] = None,
    base_url: Optional[str] = None,
    level: EnhancementLevel = EnhancementLevel.STANDARD,
    config: Optional[GlobalConfig] = None,
) -> ModuleDescriptor:
    """Turn a loaded spec into a :class:`~specwrap.models.ModuleDescriptor`.

    Args:
        spec: Document returned by :func:`~specwrap.parser.loader.load_spec`.
        module_name: Python module name. Derived from ``info.title`` when
            omitted (``"Petstore API"`` -> ``"petstore_api"``).
        base_url: Override for the spec-derived base URL.
        level: Enhancement level recorded on the module.
        config: Generation settings (query cap, auth header, extra verb
            synonyms). Defaults to :class:`~specwrap.models.GlobalConfig`.

    Returns:
        The module model with one function per (path, method) pair.

    Raises:
        InvalidSpecError: If *spec* lacks a version marker or ``paths``.
        InvalidModuleNameError: If *module_name* is not a valid identifier.
        InvalidBaseUriError: If *base_url* is not an absolute http(s) URL.
    """
    config = config or GlobalConfig()
    spec_version = validate_spec(spec)
    info = extract_info(spec)

    name = validate_module_name(module_name) if module_name else module_name_from_title(info.title)
    if base_url:
        resolved_base_url: Optional[str] = validate_base_url(base_url)
    else:
        resolved_base_url = extract_base_url(spec)

    synonyms = merge_synonyms(config.verb_synonyms)
    registry = NameRegistry()
    diagnostics: list[str] = []
    functions: list[FunctionDescriptor] = []

    for path, method, operation, path_item in iter_operations(spec, diagnostics):
        functions.append(
            build_function(
                path,
                method,
                operation,
                path_item,
                spec,
                registry=registry,
                base_url=resolved_base_url,
                config=config,
                synonyms=synonyms,
                diagnostics=diagnostics,
            )
        )

    logger.debug("Built %d functions for module %s", len(functions), name)
    return ModuleDescriptor(
        name=name,
        info=info,
        base_url=resolved_base_url,
        level=level,
        functions=functions,
        diagnostics=diagnostics,
        spec_version=spec_version,
    )


def build_function(
    path: str,
    method: HTTPMethod,
    operation: dict[str, Any],
    path_item: dict[str, Any],
    spec: dict[str, Any],
    *,
    registry: NameRegistry,
    base_url: Optional[str] = None,
    config: Optional[GlobalConfig] = None,
    synonyms: Mapping[str, str] = VERB_SYNONYMS,
    diagnostics: Optional[list[str]] = None,
) -> FunctionDescriptor:
    """Build the descriptor for one operation and claim its name in *registry*."""
    config = config or GlobalConfig()
    context = f"{method.value.upper()} {path}"

    operation_id = get_str(operation, "operationId") or None
    summary = get_str(operation, "summary")
    description = get_str(operation, "description")

    parameters = extract_parameters(
        operation,
        path_item,
        spec,
        path=path,
        context=context,
        query_cap=config.query_param_cap,
        base_url=base_url,
        auth_header=config.auth_header,
        diagnostics=diagnostics,
    )

    name = registry.claim(derive_name(method, path, operation_id, summary, description, synonyms))
    return FunctionDescriptor(
        name=name,
        python_name=to_snake_case(name),
        http_method=method,
        path_template=path,
        parameters=parameters,
        summary=summary or context,
        description=description or summary or f"Calls {context}.",
        has_body=any(p.location == ParameterLocation.BODY for p in parameters),
        operation_id=operation_id,
        tags=[str(tag) for tag in get_list(operation, "tags")],
        deprecated=bool(operation.get("deprecated", False)),
    )


def module_name_from_title(title: str) -> str:
    """Derive a Python module name from the API title.

    Example::

        >>> module_name_from_title("Petstore API")
        'petstore_api'
        >>> module_name_from_title("3D Printing Service!")
        'api_3d_printing_service'
    """
    slug = re.sub(r"[^a-z0-9]+", "_", title.lower()).strip("_")
    if not slug:
        return "generated_api"
    if slug[0].isdigit():
        slug = f"api_{slug}"
    if keyword.iskeyword(slug):
        slug = f"{slug}_api"
    return slug


def validate_module_name(name: str) -> str:
    """Check that *name* can be imported as a Python module.

    Raises:
        InvalidModuleNameError: If *name* is empty, not an identifier, or a keyword.
    """
    candidate = name.strip()
    if not _IDENTIFIER_RE.match(candidate) or keyword.iskeyword(candidate):
        raise InvalidModuleNameError(
            f"Invalid module name '{name}': use letters, digits and underscores, "
            "not starting with a digit and not a Python keyword"
        )
    return candidate


def validate_base_url(url: str) -> str:
    """Check that *url* is an absolute http(s) URL and strip trailing slashes.

    Raises:
        InvalidBaseUriError: If the scheme is not http/https or the host is missing.
    """
    candidate = url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidBaseUriError(
            f"Invalid base URL '{url}': expected an absolute http:// or https:// URL"
        )
    return candidate.rstrip("/")
