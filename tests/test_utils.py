import re

import httpx
import pytest
from time_machine import travel

from signature_sdk._utils import (
    cache_key_for,
    generate_request_id,
    is_json_content_type,
    parent_path,
    parse_date,
    strip_base_path,
)


def test_generate_request_id():
    with travel(1_700_000_000, tick=False):
        request_id = generate_request_id()

    assert re.fullmatch(r"1700000000000-[0-9a-f]{9}", request_id)


def test_request_ids_differ():
    assert generate_request_id() != generate_request_id()


def test_parse_date():
    assert parse_date("Wed, 21 Oct 2015 07:28:00 GMT") == 1445412480
    assert parse_date("not a date") is None


def test_strip_base_path():
    base_url = httpx.URL("https://api.example.com/v1/")

    assert strip_base_path(httpx.URL("https://api.example.com/v1/documents"), base_url) == "/documents"
    assert strip_base_path(httpx.URL("https://api.example.com/v1"), base_url) == "/"
    assert strip_base_path(httpx.URL("https://api.example.com/v10/documents"), base_url) == "/v10/documents"
    assert strip_base_path(httpx.URL("https://api.example.com/documents"), None) == "/documents"


def test_cache_key_sorts_the_query():
    base_url = httpx.URL("https://api.example.com/v1")

    key = cache_key_for(httpx.URL("https://api.example.com/v1/documents?status=DRAFT&page=2"), base_url)

    assert key == "/documents?page=2&status=DRAFT"
    assert key == cache_key_for(httpx.URL("https://api.example.com/v1/documents?page=2&status=DRAFT"), base_url)


def test_cache_key_distinguishes_queries():
    base_url = httpx.URL("https://api.example.com")

    assert cache_key_for(httpx.URL("https://api.example.com/api/v1/documents"), base_url) == "/api/v1/documents"
    assert cache_key_for(httpx.URL("https://api.example.com/api/v1/documents?page=2"), base_url) != cache_key_for(
        httpx.URL("https://api.example.com/api/v1/documents"), base_url
    )


@pytest.mark.parametrize(
    "path, parent",
    [
        ("/api/v1/documents/123", "/api/v1/documents"),
        ("/api/v1/documents/", "/api/v1"),
        ("/api/v1/documents?page=2", "/api/v1"),
        ("/documents", None),
        ("/", None),
    ],
)
def test_parent_path(path, parent):
    assert parent_path(path) == parent


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("application/json", True),
        ("application/json; charset=utf-8", True),
        ("application/problem+json", True),
        ("text/plain", False),
        (None, False),
    ],
)
def test_is_json_content_type(content_type, expected):
    assert is_json_content_type(content_type) is expected

