"""Derive verb-noun callable names for operations.

Every generated callable is named ``<Verb><Noun>`` (``GetPetsList``,
``NewPets``, ``RemovePets``) and exposed in Python as the snake_case form
(``get_pets_list``). The verb is chosen by, in order of precedence:

1. the first token of the ``operationId`` when it is in the synonym table
   (``createPet`` -> ``New``, ``listPets`` -> ``Get``);
2. the first word of ``summary`` + ``description`` that is in the table;
3. the HTTP method (GET -> Get, POST -> New, PUT -> Set, PATCH -> Update,
   DELETE -> Remove, anything else -> Invoke).

The noun is the last non-parameter path segment, capitalised token by token.
A ``Get`` on a collection path (final segment is not ``{placeholder}``) gets a
``List`` suffix. :class:`NameRegistry` makes names unique within a module by
appending ``1``, ``2``, ... in first-seen order.

The synonym table is immutable; :func:`merge_synonyms` builds an extended
copy from configuration.
"""

from __future__ import annotations

import keyword
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from specwrap.models import HTTPMethod


_BASE_SYNONYMS: dict[str, str] = {
    # create
    "create": "New",
    "new": "New",
    "generate": "New",
    "allocate": "New",
    "make": "New",
    "build": "New",
    "provision": "New",
    "add": "Add",
    "append": "Add",
    "insert": "Add",
    # read
    "get": "Get",
    "fetch": "Get",
    "retrieve": "Get",
    "list": "Get",
    "read": "Get",
    "find": "Get",
    "show": "Get",
    "describe": "Get",
    "lookup": "Get",
    "load": "Get",
    "download": "Get",
    "search": "Search",
    "query": "Search",
    "filter": "Search",
    # update
    "update": "Update",
    "modify": "Update",
    "patch": "Update",
    "edit": "Update",
    "change": "Update",
    "upsert": "Update",
    "set": "Set",
    "replace": "Set",
    "put": "Set",
    "assign": "Set",
    "configure": "Set",
    "rename": "Rename",
    # delete
    "delete": "Remove",
    "remove": "Remove",
    "destroy": "Remove",
    "purge": "Remove",
    "drop": "Remove",
    "erase": "Remove",
    "clear": "Clear",
    # lifecycle
    "start": "Start",
    "launch": "Start",
    "begin": "Start",
    "resume": "Resume",
    "stop": "Stop",
    "halt": "Stop",
    "terminate": "Stop",
    "cancel": "Stop",
    "abort": "Stop",
    "restart": "Restart",
    "reboot": "Restart",
    "suspend": "Suspend",
    "pause": "Suspend",
    "enable": "Enable",
    "activate": "Enable",
    "disable": "Disable",
    "deactivate": "Disable",
    "archive": "Backup",
    "backup": "Backup",
    "restore": "Restore",
    "reset": "Reset",
    "lock": "Lock",
    "unlock": "Unlock",
    "register": "Register",
    "unregister": "Unregister",
    "approve": "Approve",
    "accept": "Approve",
    "deny": "Deny",
    "reject": "Deny",
    "submit": "Submit",
    "publish": "Publish",
    "unpublish": "Unpublish",
    "send": "Send",
    "notify": "Send",
    "upload": "Send",
    "connect": "Connect",
    "disconnect": "Disconnect",
    # comparison and verification
    "compare": "Compare",
    "diff": "Compare",
    "test": "Test",
    "validate": "Test",
    "verify": "Test",
    "check": "Test",
    "ping": "Test",
    "measure": "Measure",
    "count": "Measure",
    # data movement
    "copy": "Copy",
    "clone": "Copy",
    "duplicate": "Copy",
    "move": "Move",
    "transfer": "Move",
    "import": "Import",
    "export": "Export",
    "sync": "Sync",
    "synchronize": "Sync",
    "merge": "Merge",
    "split": "Split",
    "join": "Join",
    # batch
    "batch": "Invoke",
    "bulk": "Invoke",
    "execute": "Invoke",
    "invoke": "Invoke",
    "run": "Invoke",
    "trigger": "Invoke",
}

VERB_SYNONYMS: Mapping[str, str] = MappingProxyType(_BASE_SYNONYMS)
"""Read-only keyword -> verb table, keyed by lower-case keyword."""

METHOD_VERBS: Mapping[HTTPMethod, str] = MappingProxyType(
    {
        HTTPMethod.GET: "Get",
        HTTPMethod.POST: "New",
        HTTPMethod.PUT: "Set",
        HTTPMethod.PATCH: "Update",
        HTTPMethod.DELETE: "Remove",
    }
)

DEFAULT_NOUN = "Resource"

_TOKEN_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z]|\d|\b|_|$)|[A-Z]?[a-z]+|[A-Z]+|\d+")
_WORD_RE = re.compile(r"[A-Za-z]+")


def merge_synonyms(extra: Optional[Mapping[str, str]] = None) -> Mapping[str, str]:
    """Return a read-only table with *extra* entries layered over the defaults.

    Keys are lower-cased; values are capitalised verbs.
    """
    if not extra:
        return VERB_SYNONYMS
    merged = dict(_BASE_SYNONYMS)
    for key, verb in extra.items():
        merged[key.strip().lower()] = _capitalize(verb.strip())
    return MappingProxyType(merged)


def tokenize(text: str) -> list[str]:
    """Split an identifier on separators and case boundaries.

    Example::

        >>> tokenize("createPetAPIKey")
        ['create', 'Pet', 'API', 'Key']
        >>> tokenize("user-profiles.v2")
        ['user', 'profiles', 'v', '2']
    """
    tokens: list[str] = []
    for chunk in re.split(r"[^A-Za-z0-9]+", text):
        if chunk:
            tokens.extend(_TOKEN_RE.findall(chunk))
    return tokens


def derive_verb(
    method: HTTPMethod,
    operation_id: Optional[str] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    synonyms: Mapping[str, str] = VERB_SYNONYMS,
) -> str:
    """Choose the verb for an operation (see module docstring for precedence)."""
    if operation_id:
        tokens = tokenize(operation_id)
        if tokens:
            verb = synonyms.get(tokens[0].lower())
            if verb:
                return verb

    text = " ".join(part for part in (summary, description) if part)
    for word in _WORD_RE.findall(text):
        verb = synonyms.get(word.lower())
        if verb:
            return verb

    return METHOD_VERBS.get(method, "Invoke")


def derive_noun(path: str) -> str:
    """Build the noun from the last non-parameter path segment.

    Example::

        >>> derive_noun("/users/{id}/api-keys")
        'ApiKeys'
        >>> derive_noun("/{id}")
        'Resource'
    """
    segments = [s for s in path.split("/") if s and not _is_path_param(s)]
    if not segments:
        return DEFAULT_NOUN
    noun = "".join(_capitalize(token) for token in tokenize(segments[-1]))
    return noun or DEFAULT_NOUN


def derive_name(
    method: HTTPMethod,
    path: str,
    operation_id: Optional[str] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    synonyms: Mapping[str, str] = VERB_SYNONYMS,
) -> str:
    """Compute the (not yet de-duplicated) callable name for one operation.

    Example::

        >>> derive_name(HTTPMethod.GET, "/pets")
        'GetPetsList'
        >>> derive_name(HTTPMethod.GET, "/pets/{id}")
        'GetPets'
        >>> derive_name(HTTPMethod.POST, "/users", operation_id="createUser")
        'NewUsers'
    """
    verb = derive_verb(method, operation_id, summary, description, synonyms)
    noun = derive_noun(path)
    if verb == "Get" and not _ends_with_param(path):
        noun = f"{noun}List"
    return f"{verb}{noun}"


def to_snake_case(name: str) -> str:
    """Convert a PascalCase callable name to a Python function name.

    Example::

        >>> to_snake_case("GetPetsList")
        'get_pets_list'
        >>> to_snake_case("NewUser1")
        'new_user1'
    """
    tokens = tokenize(name)
    # Keep collision suffixes attached: NewUser1 -> new_user1, not new_user_1.
    parts: list[str] = []
    for token in tokens:
        if token.isdigit() and parts:
            parts[-1] += token
        else:
            parts.append(token.lower())
    result = "_".join(parts) or "operation"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


class NameRegistry:
    """Hands out module-unique names in first-seen order.

    Uniqueness is checked on the snake_case form so that both the PascalCase
    name and the emitted Python name are unique.

    Example::

        >>> registry = NameRegistry()
        >>> registry.claim("NewUser"), registry.claim("NewUser"), registry.claim("NewUser")
        ('NewUser', 'NewUser1', 'NewUser2')
    """

    def __init__(self) -> None:
        self._taken: set[str] = set()

    def claim(self, name: str) -> str:
        """Reserve *name*, or the first free ``name<N>`` variant, and return it."""
        candidate = name
        suffix = 0
        while to_snake_case(candidate) in self._taken:
            suffix += 1
            candidate = f"{name}{suffix}"
        self._taken.add(to_snake_case(candidate))
        return candidate

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and to_snake_case(name) in self._taken

    def __len__(self) -> int:
        return len(self._taken)


def _is_path_param(segment: str) -> bool:
    """Return ``True`` if *segment* is a path parameter (e.g., ``{id}``)."""
    return segment.startswith("{") and segment.endswith("}")


def _ends_with_param(path: str) -> bool:
    segments = [s for s in path.split("/") if s]
    return bool(segments) and _is_path_param(segments[-1])


def _capitalize(token: str) -> str:
    return token[:1].upper() + token[1:]
