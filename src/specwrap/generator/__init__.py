"""Function model generator -- names, parameter mapping, level composition.

This sub-package turns extracted operations into the structured model the
emitter renders:

* :mod:`~specwrap.generator.param_mapper` -- safe names, type mapping,
  constraints and the synthetic standard parameters.
* :mod:`~specwrap.generator.naming` -- verb-noun name derivation and
  module-wide uniqueness.
* :mod:`~specwrap.generator.composer` -- per-level parameter sets
  (Basic/Standard/Advanced/Expert).
* :mod:`~specwrap.generator.builder` -- walks a spec and assembles the
  :class:`~specwrap.models.ModuleDescriptor`. Import it directly
  (``from specwrap.generator.builder import build_module``); it depends on
  :mod:`specwrap.parser`, which in turn uses ``param_mapper``.
"""

from specwrap.generator.composer import ExecutableFunctionSpec, compose
from specwrap.generator.naming import NameRegistry, derive_name, to_snake_case
from specwrap.generator.param_mapper import sanitize_param_name

__all__ = [
    "ExecutableFunctionSpec",
    "compose",
    "NameRegistry",
    "derive_name",
    "to_snake_case",
    "sanitize_param_name",
]
