"""Compose the final callable signature for an enhancement level.

:func:`compose` turns a :class:`~specwrap.models.FunctionDescriptor` and an
:class:`~specwrap.models.EnhancementLevel` into an
:class:`ExecutableFunctionSpec`: the exact parameter list the emitted
callable takes plus the request-construction switches the template needs.

Levels are strictly additive:

========  =============================================================
Level     Adds
========  =============================================================
Basic     path parameters, ``base_url``, ``headers``, ``auth_token``,
          ``no_throw``; one plain request
Standard  ``timeout``
Advanced  typed query parameters (query string assembly), ``body``
Expert    ``retry_mode`` (bounded retry loop when ``Retry`` is chosen)
========  =============================================================

Path parameters are carried at every level because the request URI cannot be
built without them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from specwrap.generator.param_mapper import (
    headers_parameter,
    retry_mode_parameter,
    timeout_parameter,
)
from specwrap.models import (
    EnhancementLevel,
    FunctionDescriptor,
    ParameterDescriptor,
    ParameterLocation,
)


@dataclass(frozen=True)
class ExecutableFunctionSpec:
    """A function descriptor specialised for one enhancement level.

    Attributes:
        function: The level-independent descriptor.
        level: The enhancement level this spec was composed for.
        parameters: Signature order: path parameters, query parameters,
            ``body``, then standard parameters.
        path_parameters: The path subset of ``parameters``.
        query_parameters: The query subset (empty below Advanced).
        body_parameter: The body parameter (Advanced+ with a request body).
        uses_timeout: Whether ``timeout`` is forwarded to the request.
        uses_retry: Whether ``retry_mode`` is accepted.
    """

    function: FunctionDescriptor
    level: EnhancementLevel
    parameters: tuple[ParameterDescriptor, ...]
    path_parameters: tuple[ParameterDescriptor, ...] = ()
    query_parameters: tuple[ParameterDescriptor, ...] = ()
    body_parameter: ParameterDescriptor | None = None
    uses_timeout: bool = False
    uses_retry: bool = False
    notes: tuple[str, ...] = field(default=())

    @property
    def name(self) -> str:
        return self.function.python_name

    @property
    def parameter_names(self) -> list[str]:
        """Safe names in signature order."""
        return [p.safe_name for p in self.parameters]

    @property
    def required_parameters(self) -> list[ParameterDescriptor]:
        return [p for p in self.parameters if p.required]

    @property
    def optional_parameters(self) -> list[ParameterDescriptor]:
        return [p for p in self.parameters if not p.required]


def compose(function: FunctionDescriptor, level: EnhancementLevel) -> ExecutableFunctionSpec:
    """Assemble the parameter set and request switches for *level*.

    Args:
        function: The descriptor built by
            :func:`~specwrap.generator.builder.build_function`.
        level: The requested enhancement level.

    Returns:
        An :class:`ExecutableFunctionSpec`. For the same *function*, the
        parameter names at each level are a superset of the level below.
    """
    path_params = tuple(function.parameters_in(ParameterLocation.PATH))
    standard = {p.safe_name: p for p in function.parameters_in(ParameterLocation.STANDARD)}

    query_params: tuple[ParameterDescriptor, ...] = ()
    body: ParameterDescriptor | None = None
    if level.includes(EnhancementLevel.ADVANCED):
        query_params = tuple(function.parameters_in(ParameterLocation.QUERY))
        if function.has_body:
            body_params = function.parameters_in(ParameterLocation.BODY)
            body = body_params[0] if body_params else None

    uses_timeout = level.includes(EnhancementLevel.STANDARD)
    uses_retry = level.includes(EnhancementLevel.EXPERT)

    trailing: list[ParameterDescriptor] = []
    if "base_url" in standard:
        trailing.append(standard["base_url"])
    trailing.append(headers_parameter())
    trailing.extend(standard[n] for n in ("auth_token", "no_throw") if n in standard)
    if uses_timeout:
        trailing.append(timeout_parameter())
    if uses_retry:
        trailing.append(retry_mode_parameter())

    parameters = path_params + query_params + ((body,) if body else ()) + tuple(trailing)

    notes: list[str] = []
    if query_params:
        notes.append("Only query parameters that are explicitly passed are sent.")

    return ExecutableFunctionSpec(
        function=function,
        level=level,
        parameters=parameters,
        path_parameters=path_params,
        query_parameters=query_params,
        body_parameter=body,
        uses_timeout=uses_timeout,
        uses_retry=uses_retry,
        notes=tuple(notes),
    )
