"""HTTP runtime imported by generated client modules.

Generated callables do no networking themselves: they validate their
arguments, collect path/query/body values, and hand everything to
:func:`invoke_request`, which wraps :class:`httpx.Client` and layers on:

- **URI construction** -- ``{placeholder}`` substitution with percent-encoded
  values, plus a query string built by :func:`build_query_string`.
- **Auth injection** -- an ``auth_token`` is sent in a fixed header.
- **Retry with backoff** -- in ``Retry`` mode, network errors, HTTP 429 and
  5xx responses are retried with exponential delay; the final failure is
  re-raised.
- **Error suppression** -- ``no_throw=True`` or ``Ignore`` mode turns a failed
  request into ``None``.
- **Error mapping** -- failures surface as
  :class:`~specwrap.exceptions.AuthError`,
  :class:`~specwrap.exceptions.NotFoundError`,
  :class:`~specwrap.exceptions.ServerError` or
  :class:`~specwrap.exceptions.ConnectionError_`.

:data:`UNSET` is the default of every optional query parameter. Presence is
tested with ``is not UNSET`` so a caller may legitimately send ``False``,
``0`` or an empty string; an explicit ``None`` is left out like :data:`UNSET`.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Iterable, Mapping
from typing import Any, Optional
from urllib.parse import quote

import httpx

from specwrap.exceptions import (
    AuthError,
    ConnectionError_,
    NotFoundError,
    ServerError,
    SpecwrapError,
)
from specwrap.models import RetryMode

logger = logging.getLogger(__name__)

DEFAULT_AUTH_HEADER = "X-API-Key"
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF = 0.5

_RETRYABLE_STATUS = frozenset({429})
_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


class _Unset:
    """Marker for "argument not supplied"."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()
"""Default for optional arguments whose presence, not value, matters."""


# ---------------------------------------------------------------------------
# Argument validation
# ---------------------------------------------------------------------------


def validate_argument(
    name: str,
    value: Any,
    *,
    enum: Optional[list[Any]] = None,
    pattern: Optional[str] = None,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    item_enum: Optional[list[Any]] = None,
) -> None:
    """Check *value* against the constraints declared in the spec.

    ``None`` and :data:`UNSET` are not checked. Length constraints apply to
    strings and lists; range constraints to numbers (booleans excluded).

    Raises:
        ValueError: Naming the parameter and the violated constraint.
    """
    if value is None or value is UNSET:
        return

    if enum is not None and value not in enum:
        raise ValueError(f"{name}: {value!r} is not one of {enum!r}")

    if item_enum is not None and isinstance(value, (list, tuple)):
        invalid = [item for item in value if item not in item_enum]
        if invalid:
            raise ValueError(f"{name}: {invalid!r} not in {item_enum!r}")

    if pattern is not None and isinstance(value, str) and re.search(pattern, value) is None:
        raise ValueError(f"{name}: {value!r} does not match pattern {pattern!r}")

    if isinstance(value, (str, list, tuple)):
        if min_length is not None and len(value) < min_length:
            raise ValueError(f"{name}: length {len(value)} is below minimum {min_length}")
        if max_length is not None and len(value) > max_length:
            raise ValueError(f"{name}: length {len(value)} exceeds maximum {max_length}")

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if minimum is not None and value < minimum:
            raise ValueError(f"{name}: {value!r} is below minimum {minimum:g}")
        if maximum is not None and value > maximum:
            raise ValueError(f"{name}: {value!r} exceeds maximum {maximum:g}")


# ---------------------------------------------------------------------------
# URI construction
# ---------------------------------------------------------------------------


def format_value(value: Any) -> str:
    """Render a scalar the way query strings and paths expect it.

    Booleans become ``true``/``false``; everything else uses ``str``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


_COLLECTION_DELIMITERS: dict[str, str] = {
    "csv": ",",
    "ssv": " ",
    "tsv": "\t",
    "pipes": "|",
}


def join_collection(value: Any, collection_format: str) -> Any:
    """Join a list argument into one delimited value (``csv``, ``ssv``, ``tsv``, ``pipes``).

    Non-list values, :data:`UNSET` and ``None`` are returned unchanged.

    Example::

        >>> join_collection(["a", True], "csv")
        'a,true'
    """
    if not isinstance(value, (list, tuple)):
        return value
    delimiter = _COLLECTION_DELIMITERS[collection_format]
    return delimiter.join(format_value(item) for item in value)


def build_query_string(pairs: Iterable[tuple[str, Any]]) -> str:
    """Assemble ``name=value`` pairs into a query string (without ``?``).

    Names and values are percent-encoded. List values repeat the name once
    per item (``tag=a&tag=b``). Pairs whose value is :data:`UNSET` or ``None``
    are skipped; ``False``, ``0`` and ``""`` are sent.

    Example::

        >>> build_query_string([("filter[name]", "a b"), ("active", False), ("tag", ["x", "y"])])
        'filter%5Bname%5D=a%20b&active=false&tag=x&tag=y'
    """
    parts: list[str] = []
    for name, value in pairs:
        if value is UNSET or value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            parts.append(f"{quote(name, safe='')}={quote(format_value(item), safe='')}")
    return "&".join(parts)


def build_url(
    base_url: str,
    path_template: str,
    path_params: Optional[Mapping[str, Any]] = None,
    query: Optional[Iterable[tuple[str, Any]]] = None,
) -> str:
    """Join *base_url* and *path_template*, filling placeholders and the query string.

    Raises:
        ValueError: If a placeholder has no value in *path_params*.
    """
    params = path_params or {}

    def _substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in params or params[key] is None:
            raise ValueError(f"Missing value for path parameter '{key}'")
        return quote(format_value(params[key]), safe="")

    path = _PLACEHOLDER_RE.sub(_substitute, path_template)
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}" if path else base_url
    query_string = build_query_string(query or [])
    if query_string:
        url = f"{url}?{query_string}"
    return url


# ---------------------------------------------------------------------------
# Request execution
# ---------------------------------------------------------------------------


def _make_client(timeout: Optional[float]) -> httpx.Client:
    """Create the HTTP client used for one call."""
    if timeout is None:
        return httpx.Client(follow_redirects=True)
    return httpx.Client(timeout=timeout, follow_redirects=True)


def invoke_request(
    method: str,
    base_url: Optional[str],
    path_template: str,
    *,
    path_params: Optional[Mapping[str, Any]] = None,
    query: Optional[Iterable[tuple[str, Any]]] = None,
    body: Any = UNSET,
    headers: Optional[Mapping[str, str]] = None,
    auth_token: Optional[str] = None,
    auth_header: str = DEFAULT_AUTH_HEADER,
    timeout: Optional[float] = None,
    no_throw: bool = False,
    retry_mode: RetryMode | str = RetryMode.DEFAULT,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff: float = DEFAULT_BACKOFF,
) -> Any:
    """Send one API request and return the decoded response body.

    Args:
        method: HTTP method (``"GET"``, ``"POST"``, ...).
        base_url: API base URL; required.
        path_template: Path with ``{placeholder}`` segments.
        path_params: Values for the placeholders, keyed by original name.
        query: ``(original_name, value)`` pairs; :data:`UNSET` values are skipped.
        body: JSON-serialisable request body; :data:`UNSET` or ``None`` sends none.
        headers: Extra request headers.
        auth_token: Sent in *auth_header* when given.
        auth_header: Header name for *auth_token*.
        timeout: Request timeout in seconds; httpx default when ``None``.
        no_throw: Return ``None`` instead of raising on failure.
        retry_mode: ``Default`` (raise), ``Ignore`` (return ``None``) or
            ``Retry`` (up to *max_attempts* tries, then raise).
        max_attempts: Attempt budget in ``Retry`` mode.
        backoff: First retry delay in seconds, doubled each attempt.

    Returns:
        The decoded JSON body, the response text for non-JSON bodies, or
        ``None`` for empty bodies and suppressed failures.

    Raises:
        AuthError: On 401 / 403.
        NotFoundError: On 404.
        ServerError: On any other error status.
        ConnectionError_: On network / timeout errors.
        ValueError: If *base_url* is missing or a path parameter is absent.
    """
    mode = RetryMode(retry_mode)
    suppress = no_throw or mode == RetryMode.IGNORE

    if not base_url:
        raise ValueError("base_url is required: the spec declares no server URL")
    url = build_url(base_url, path_template, path_params, query)

    merged_headers: dict[str, str] = {"Accept": "application/json"}
    merged_headers.update(headers or {})
    if auth_token:
        merged_headers[auth_header] = auth_token

    attempts = max(1, max_attempts) if mode == RetryMode.RETRY else 1

    try:
        response = _execute_with_retry(
            method.upper(), url, merged_headers, body, timeout, attempts, backoff
        )
        _raise_for_status(response)
    except SpecwrapError as exc:
        if suppress:
            logger.warning("%s %s failed, returning None: %s", method.upper(), url, exc)
            return None
        raise

    return extract_response_data(response)


def _execute_with_retry(
    method: str,
    url: str,
    headers: dict[str, str],
    body: Any,
    timeout: Optional[float],
    attempts: int,
    backoff: float,
) -> httpx.Response:
    """Execute the request, retrying transient failures with exponential backoff.

    Retries on 429, 5xx and connection / timeout errors while attempts
    remain. The delay doubles each attempt: backoff, 2*backoff, 4*backoff, ...
    """
    kwargs: dict[str, Any] = {"method": method, "url": url, "headers": headers}
    if body is not UNSET and body is not None:
        kwargs["json"] = body

    with _make_client(timeout) as client:
        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                response = client.request(**kwargs)
            except httpx.HTTPError as exc:
                if not last:
                    delay = backoff * (2 ** attempt)
                    logger.debug(
                        "Connection error: %s, retrying in %.2fs (attempt %d/%d)",
                        exc, delay, attempt + 1, attempts,
                    )
                    time.sleep(delay)
                    continue
                suffix = f" after {attempts} attempts" if attempts > 1 else ""
                raise ConnectionError_(f"{method} {url} failed{suffix}: {exc}") from exc

            retryable = response.status_code >= 500 or response.status_code in _RETRYABLE_STATUS
            if retryable and not last:
                delay = backoff * (2 ** attempt)
                logger.debug(
                    "Server returned %d, retrying in %.2fs (attempt %d/%d)",
                    response.status_code, delay, attempt + 1, attempts,
                )
                time.sleep(delay)
                continue
            return response

    # range(attempts) is never empty; every path above returns or raises.
    raise ConnectionError_(f"{method} {url} was not attempted")  # pragma: no cover


def _raise_for_status(response: httpx.Response) -> None:
    """Raise a typed exception for error HTTP status codes."""
    status = response.status_code
    if status < 400:
        return

    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    prefix = f"HTTP {status}"
    full_msg = f"{prefix}: {msg}" if msg else prefix

    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg, status_code=status)


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first. If that fails (e.g. the
    response is HTML or plain text), returns the raw text. Returns
    ``None`` for responses with no content.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        return response.text
