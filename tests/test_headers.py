"""Unit tests for header lookup and parsing helpers."""

from email.utils import formatdate

import httpx
import pytest

from rate_guard.utils.headers import get_header, parse_remaining, parse_retry_after


def test_exact_name_wins_over_lowercase() -> None:
    headers = {"Retry-After": "10", "retry-after": "99"}

    assert get_header(headers, "Retry-After") == "10"


def test_falls_back_to_lowercase_name() -> None:
    assert get_header({"retry-after": "5"}, "Retry-After") == "5"


def test_missing_header() -> None:
    assert get_header({"Other": "1"}, "Retry-After") is None


def test_first_value_of_list_and_empty_list() -> None:
    assert get_header({"Retry-After": ["3", "4"]}, "Retry-After") == "3"
    assert get_header({"Retry-After": []}, "Retry-After") is None


def test_httpx_headers_are_case_insensitive() -> None:
    headers = httpx.Headers({"x-ratelimit-remaining": "8"})

    assert get_header(headers, "X-RateLimit-Remaining") == "8"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, None), ("12", 12), (" 3 ", 3), ("0", 0), ("-4", 0), ("1.5", None), ("", None)],
)
def test_parse_remaining(raw, expected) -> None:
    assert parse_remaining(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, None), ("60", 60), ("0", None), ("-1", None), ("later", None)],
)
def test_parse_retry_after_seconds(raw, expected) -> None:
    assert parse_retry_after(raw, now=1_000.0) == expected


def test_parse_retry_after_http_date() -> None:
    now = 1_700_000_000.0
    raw = formatdate(now + 120, usegmt=True)

    assert parse_retry_after(raw, now=now) == 120


def test_parse_retry_after_http_date_in_past() -> None:
    now = 1_700_000_000.0

    assert parse_retry_after(formatdate(now - 5, usegmt=True), now=now) is None
