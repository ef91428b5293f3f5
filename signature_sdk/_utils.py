from __future__ import annotations

import calendar
import time
import typing as tp
import uuid
from email.utils import parsedate_tz
from urllib.parse import urlencode

import httpx

SAFE_METHODS = ("GET",)
MUTATING_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def parse_date(date: str) -> tp.Optional[int]:
    expires = parsedate_tz(date)
    if expires is None:
        return None
    timestamp = calendar.timegm(expires[:6])
    return timestamp


def generate_request_id() -> str:
    """
    Generate a value for the ``X-Request-ID`` header.

    The id is a millisecond timestamp followed by a short random suffix,
    e.g. ``1704067200000-3f9a1c2b7``. Collisions are tolerable because the id
    is only used for tracing.
    """
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def strip_base_path(url: httpx.URL, base_url: tp.Optional[httpx.URL]) -> str:
    path = url.path or "/"
    if base_url is None:
        return path

    base_path = base_url.path.rstrip("/")
    if base_path and (path == base_path or path.startswith(base_path + "/")):
        path = path[len(base_path) :] or "/"
    return path


def cache_key_for(url: httpx.URL, base_url: tp.Optional[httpx.URL] = None) -> str:
    """
    Build the conditional cache key for a request URL.

    The key is the request path relative to the base URL followed by the
    query string with its parameters sorted, so that ``/documents?b=2&a=1``
    and ``/documents?a=1&b=2`` share an entry while ``/documents?page=2``
    does not collide with ``/documents``.

    Examples:
        >>> cache_key_for(httpx.URL("https://api.example.com/v1/documents?b=2&a=1"),
        ...               httpx.URL("https://api.example.com/v1"))
        '/documents?a=1&b=2'
    """
    path = strip_base_path(url, base_url)
    params = sorted(url.params.multi_items())
    if params:
        return f"{path}?{urlencode(params)}"
    return path


def parent_path(path: str) -> tp.Optional[str]:
    """
    Return ``path`` without its trailing segment, or None for top-level paths.

    Examples:
        >>> parent_path("/api/v1/documents/123")
        '/api/v1/documents'
        >>> parent_path("/documents") is None
        True
    """
    path = path.split("?", 1)[0].rstrip("/")
    parent = path[: path.rfind("/")]
    return parent or None


def is_json_content_type(content_type: tp.Optional[str]) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")
