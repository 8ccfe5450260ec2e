"""Resolve ``$ref`` JSON Reference pointers against the spec document.

Unlike a whole-document inliner, :func:`resolve` works one node at a time:
the extractor calls it on each parameter, schema or request body it is about
to read. A node that is not a reference object is returned unchanged.

Only **internal** references (those starting with ``#/``) are followed.
External file or URL references, missing keys, and chains longer than
:data:`MAX_REF_DEPTH` descents all yield the :data:`UNRESOLVED` sentinel; the
caller decides whether to skip the node or raise
(:func:`resolve_or_raise`). No cycle detection is needed beyond the depth
limit: a self-referencing chain simply runs out of budget.
"""

from __future__ import annotations

import logging
from typing import Any

from specwrap.exceptions import UnresolvedReferenceError

logger = logging.getLogger(__name__)

MAX_REF_DEPTH = 32
"""Upper bound on pointer segments plus reference hops followed for one node."""


class _Unresolved:
    """Sentinel type for a reference that could not be followed."""

    _instance: _Unresolved | None = None

    def __new__(cls) -> _Unresolved:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED = _Unresolved()
"""Returned by :func:`resolve` when a reference cannot be followed."""


def is_ref(node: Any) -> bool:
    """Return ``True`` if *node* is a reference object (``{"$ref": "..."}``)."""
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def resolve(node: Any, document: dict[str, Any], max_depth: int = MAX_REF_DEPTH) -> Any:
    """Follow *node* to its target if it is a reference object.

    Args:
        node: Any tree node. Non-references are returned as-is.
        document: The root spec dictionary to resolve against.
        max_depth: Total budget of pointer segments and reference hops.

    Returns:
        The referenced node (itself never a reference), *node* unchanged when
        it is not a reference, or :data:`UNRESOLVED`.

    Example::

        doc = {"components": {"parameters": {"Limit": {"name": "limit", "in": "query"}}}}
        resolve({"$ref": "#/components/parameters/Limit"}, doc)
        # {'name': 'limit', 'in': 'query'}
    """
    budget = max_depth
    current = node
    while is_ref(current):
        ref = current["$ref"]
        target, budget = _follow_pointer(ref, document, budget)
        if target is UNRESOLVED:
            logger.debug("Unresolved $ref %s", ref)
            return UNRESOLVED
        budget -= 1
        if budget < 0:
            logger.debug("Reference depth limit exceeded at $ref %s", ref)
            return UNRESOLVED
        current = target
    return current


def resolve_or_raise(node: Any, document: dict[str, Any]) -> Any:
    """Like :func:`resolve`, but raise instead of returning the sentinel.

    Raises:
        UnresolvedReferenceError: If *node* is a reference that cannot be followed.
    """
    result = resolve(node, document)
    if result is UNRESOLVED:
        raise UnresolvedReferenceError(node.get("$ref", "") if isinstance(node, dict) else "")
    return result


def _follow_pointer(ref: str, root: dict[str, Any], budget: int) -> tuple[Any, int]:
    """Navigate a single ``#/a/b/c`` pointer.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``) and
    numeric indices into arrays. Returns ``(target, remaining_budget)``.
    """
    if not ref.startswith("#/"):
        return UNRESOLVED, budget

    # The leading "#" produces the first, empty segment; drop it.
    segments = ref.split("/")[1:]
    current: Any = root
    for raw_segment in segments:
        budget -= 1
        if budget < 0:
            return UNRESOLVED, budget
        segment = raw_segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                return UNRESOLVED, budget
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return UNRESOLVED, budget
        else:
            return UNRESOLVED, budget

    return current, budget
