import pytest

from signature_sdk._headers import parse_max_age, parse_retry_after
from signature_sdk._utils import parse_date


@pytest.mark.parametrize(
    "values, max_age",
    [
        (["max-age=3600"], 3600),
        (["max-age=60, private"], 60),
        (['private="Set-Cookie", max-age=60'], 60),
        (['no-cache="age, authorization", max-age=5'], 5),
        (["public, max-age=60, must-revalidate=1"], 60),
        (["Max-Age = 30"], 30),
        (['max-age="45"'], 45),
        (["no-store", "max-age=10"], 10),
        (["s-maxage=600, max-age=20"], 20),
    ],
)
def test_max_age_is_found(values, max_age):
    assert parse_max_age(values) == max_age


@pytest.mark.parametrize(
    "values",
    [
        [],
        [""],
        ["no-store"],
        ["s-maxage=600"],
        ["max-age"],
        ["max-age="],
        ["max-age=soon"],
        ["max-age=-5"],
        [","],
    ],
)
def test_max_age_is_missing(values):
    assert parse_max_age(values) is None


def test_malformed_directives_do_not_hide_max_age():
    assert parse_max_age(['\x12 , max-age="123, max-age=7']) == 7


def test_retry_after_seconds():
    assert parse_retry_after("2") == 2.0
    assert parse_retry_after(" 120 ") == 120.0


def test_retry_after_negative_seconds():
    assert parse_retry_after("-5") == 0.0


def test_retry_after_http_date():
    value = "Wed, 21 Oct 2015 07:28:00 GMT"
    timestamp = parse_date(value)
    assert timestamp is not None

    assert parse_retry_after(value, now=timestamp - 30) == 30.0
    assert parse_retry_after(value, now=timestamp + 30) == 0.0


@pytest.mark.parametrize("value", [None, "", "soon"])
def test_retry_after_unparseable(value):
    assert parse_retry_after(value) is None
