"""Spec parser -- load documents, resolve ``$ref`` pointers, extract parameters.

This sub-package is responsible for the first half of the specwrap pipeline:
turning an OpenAPI 2.0/3.x document (JSON or YAML file) into normalised
parameter descriptors the generator can consume.

Typical usage::

    from specwrap.parser import load_spec, extract_parameters

    spec = load_spec("petstore.yaml")
    path_item = spec["paths"]["/pets"]
    params = extract_parameters(path_item["get"], path_item, spec)

Sub-modules:

* :mod:`~specwrap.parser.loader` -- file I/O, format detection and
  structural validation.
* :mod:`~specwrap.parser.tree` -- uniform accessors over the parsed tree.
* :mod:`~specwrap.parser.resolver` -- single-node ``$ref`` resolution with a
  depth limit.
* :mod:`~specwrap.parser.extractor` -- operations, parameters, request
  bodies, info and base URL.
"""

from specwrap.parser.extractor import extract_parameters, iter_operations
from specwrap.parser.loader import load_spec, validate_spec
from specwrap.parser.resolver import UNRESOLVED, resolve

__all__ = [
    "load_spec",
    "validate_spec",
    "resolve",
    "UNRESOLVED",
    "extract_parameters",
    "iter_operations",
]
