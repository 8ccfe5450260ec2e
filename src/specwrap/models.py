"""Canonical Pydantic models shared across all specwrap modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig` and :class:`GlobalConfig`.

**Generation models** -- produced by the parser and generator, consumed by
the emitter:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`ParameterType`,
    :class:`ParameterConstraints`, :class:`ParameterDescriptor`,
    :class:`FunctionDescriptor`, :class:`EnhancementLevel`,
    :class:`RetryMode`, :class:`APIInfo` and :class:`ModuleDescriptor`.

Generation models are frozen: they are built once per run and never mutated
afterwards.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specwrap/config.json``.

    Loaded and saved by :func:`~specwrap.config.load_global_config` and
    :func:`~specwrap.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~specwrap.config.resolve_config`
    for the full precedence chain.
    """

    default_level: str = Field(
        default="Standard",
        description="Enhancement level used when none is given: Basic, Standard, Advanced, Expert",
    )
    default_output: str = Field(
        default=".", description="Directory generated modules are written to"
    )
    query_param_cap: int = Field(
        default=20, ge=1, description="Maximum number of query parameters per operation"
    )
    split_threshold: int = Field(
        default=50,
        ge=1,
        description="Functions per file before the emitter splits into a package",
    )
    retry_attempts: int = Field(
        default=3, ge=1, description="Attempts made by Expert-level callables in Retry mode"
    )
    retry_backoff: float = Field(
        default=0.5, ge=0, description="Initial retry delay in seconds, doubled per attempt"
    )
    auth_header: str = Field(
        default="X-API-Key", description="Header carrying the auth_token argument"
    )
    verb_synonyms: dict[str, str] = Field(
        default_factory=dict,
        description="Extra operationId/summary keyword -> verb mappings",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Generation models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods that produce a generated callable."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"


class ParameterLocation(str, enum.Enum):
    """Where a parameter travels in the request.

    ``standard`` covers synthetic parameters every callable receives (base
    URL override, headers, auth token, no-throw flag, timeout, retry mode).
    """

    PATH = "path"
    QUERY = "query"
    BODY = "body"
    STANDARD = "standard"


class ParameterType(str, enum.Enum):
    """Semantic parameter types, mapped from OpenAPI schema types."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING_ARRAY = "string_array"
    OBJECT = "object"


class EnhancementLevel(str, enum.Enum):
    """Feature tier controlling how much a generated callable can do.

    Tiers are strictly additive: every parameter available at one level is
    available at all higher levels.
    """

    BASIC = "Basic"
    STANDARD = "Standard"
    ADVANCED = "Advanced"
    EXPERT = "Expert"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    def includes(self, other: EnhancementLevel) -> bool:
        """Return ``True`` if this level provides everything *other* provides."""
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str) -> EnhancementLevel:
        """Case-insensitive lookup (``"expert"`` -> :attr:`EXPERT`).

        Raises:
            ValueError: If *value* names no level.
        """
        for level in cls:
            if level.value.lower() == value.strip().lower():
                return level
        choices = ", ".join(level.value for level in cls)
        raise ValueError(f"Unknown enhancement level '{value}' (choose from: {choices})")


_LEVEL_ORDER = list(EnhancementLevel)


class RetryMode(str, enum.Enum):
    """Failure handling for Expert-level callables."""

    DEFAULT = "Default"
    IGNORE = "Ignore"
    RETRY = "Retry"


class ParameterConstraints(BaseModel):
    """Validation constraints carried over from a parameter's schema."""

    model_config = ConfigDict(frozen=True)

    enum: Optional[list[Any]] = None
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    item_type: Optional[ParameterType] = None
    item_enum: Optional[list[Any]] = None
    collection_format: Optional[str] = None

    def is_empty(self) -> bool:
        """Return ``True`` when no constraint is set."""
        return all(value is None for value in self.model_dump().values())

    def as_kwargs(self) -> dict[str, Any]:
        """Return the set constraints as keyword arguments for
        :func:`~specwrap.runtime.validate_argument`."""
        return {
            key: value
            for key, value in self.model_dump(mode="json").items()
            if value is not None and key not in ("item_type", "collection_format")
        }


class ParameterDescriptor(BaseModel):
    """A single parameter of a generated callable.

    ``original_name`` is the name as declared in the spec (used on the wire),
    ``safe_name`` the sanitised Python identifier used in the signature.
    """

    model_config = ConfigDict(frozen=True)

    original_name: str
    safe_name: str
    location: ParameterLocation
    type: ParameterType = ParameterType.STRING
    required: bool = False
    constraints: ParameterConstraints = Field(default_factory=ParameterConstraints)
    description: str = ""
    default: Any = None


class FunctionDescriptor(BaseModel):
    """Everything needed to emit one callable, one per (path, method) pair.

    ``parameters`` is ordered: path parameters (sorted by name), query
    parameters (sorted, capped), the body parameter when present, then the
    standard parameters.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    python_name: str
    http_method: HTTPMethod
    path_template: str
    parameters: list[ParameterDescriptor] = Field(default_factory=list)
    summary: str = ""
    description: str = ""
    has_body: bool = False
    operation_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    deprecated: bool = False

    def parameters_in(self, location: ParameterLocation) -> list[ParameterDescriptor]:
        """Return the parameters declared at *location*, in descriptor order."""
        return [p for p in self.parameters if p.location == location]


class APIInfo(BaseModel):
    """API metadata read from the spec's *Info Object*, with defaults applied."""

    model_config = ConfigDict(frozen=True)

    title: str = "Generated API"
    version: str = "1.0.0"
    description: str = ""


class ModuleDescriptor(BaseModel):
    """Root object handed to the emitter.

    ``diagnostics`` collects every recoverable problem met while building the
    functions (unresolved references, dropped parameters) so the CLI can
    report them after generation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    info: APIInfo = Field(default_factory=APIInfo)
    base_url: Optional[str] = None
    level: EnhancementLevel = EnhancementLevel.STANDARD
    functions: list[FunctionDescriptor] = Field(default_factory=list)
    diagnostics: list[str] = Field(default_factory=list)
    spec_version: str = ""
