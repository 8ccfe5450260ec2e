"""Uniform accessors over the parsed spec tree.

JSON and YAML parsers disagree on a few details: YAML turns unquoted ``200:``
response keys into integers, ``true:`` keys into booleans, and timestamps
into :class:`datetime.date` objects (the loader keeps ``on``/``yes`` as strings).
:func:`normalize_tree` is applied once by the loader so the rest of the
package only ever sees ``dict[str, Any]``, ``list`` and JSON scalars.

:func:`get` and :func:`keys_of` are the only way the extractor and resolver
touch the tree; both tolerate non-mapping nodes by returning "absent".
"""

from __future__ import annotations

import datetime
from typing import Any


def normalize_tree(node: Any) -> Any:
    """Return a copy of *node* with string keys and JSON-compatible scalars.

    Args:
        node: Any value produced by ``json.loads`` or ``yaml.safe_load``.

    Returns:
        The normalised tree. Mapping keys are converted with :func:`_key_str`;
        dates and datetimes become ISO-8601 strings.
    """
    if isinstance(node, dict):
        return {_key_str(key): normalize_tree(value) for key, value in node.items()}
    if isinstance(node, (list, tuple)):
        return [normalize_tree(item) for item in node]
    if isinstance(node, (datetime.date, datetime.datetime)):
        return node.isoformat()
    return node


def _key_str(key: Any) -> str:
    # Unquoted true/false keys come back as booleans; keep the JSON spelling.
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def get(node: Any, key: str, default: Any = None) -> Any:
    """Return ``node[key]`` when *node* is a mapping holding *key*, else *default*."""
    if isinstance(node, dict):
        return node.get(key, default)
    return default


def get_mapping(node: Any, key: str) -> dict[str, Any]:
    """Return ``node[key]`` if it is a mapping, else an empty dict."""
    value = get(node, key)
    return value if isinstance(value, dict) else {}


def get_list(node: Any, key: str) -> list[Any]:
    """Return ``node[key]`` if it is a list, else an empty list."""
    value = get(node, key)
    return value if isinstance(value, list) else []


def get_str(node: Any, key: str, default: str = "") -> str:
    """Return ``node[key]`` as a stripped string, or *default* when absent or null."""
    value = get(node, key)
    if value is None:
        return default
    return str(value).strip()


def keys_of(node: Any) -> list[str]:
    """Return the keys of *node* in document order (empty for non-mappings)."""
    if isinstance(node, dict):
        return list(node.keys())
    return []
