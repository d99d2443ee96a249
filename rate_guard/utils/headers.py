"""Response header lookup and parsing helpers."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Any


def get_header(headers: Mapping[str, Any], name: str) -> str | None:
    """Return a header value, trying the exact name before the lowercased one.

    Multi-valued headers given as lists/tuples yield their first value.

    Args:
        headers: Response headers (plain dict, ``httpx.Headers``, ...).
        name: Header name as usually spelled (e.g. ``X-RateLimit-Remaining``).

    Returns:
        The header value, or None if not present.
    """

    for candidate in (name, name.lower()):
        value = headers.get(candidate)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = value[0]
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        return str(value)

    return None


def parse_remaining(value: str | None) -> int | None:
    """Parse a remaining-quota header, clamping negatives to zero."""

    if value is None:
        return None
    try:
        return max(0, int(value.strip()))
    except ValueError:
        return None


def parse_retry_after(value: str | None, *, now: float) -> int | None:
    """Parse a Retry-After header into whole seconds from now.

    Accepts delta-seconds (``"60"``) and HTTP-dates
    (``"Wed, 21 Oct 2026 07:28:00 GMT"``).

    Args:
        value: Raw header value.
        now: Current UNIX time, used to convert HTTP-dates.

    Returns:
        Positive number of seconds, or None when absent, unparseable or not in
        the future.
    """

    if value is None:
        return None

    value = value.strip()
    try:
        seconds = int(value)
    except ValueError:
        seconds = _seconds_until_http_date(value, now=now)

    if seconds is None or seconds <= 0:
        return None
    return seconds


def _seconds_until_http_date(value: str, *, now: float) -> int | None:
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return math.ceil(when.timestamp() - now)
