"""Rate limit decision engine.

Reads the last observed limit state from a shared store, delays requests
before they are sent when the quota is nearly exhausted, and records the
state reported by response headers.

Strategy:
- No state, or more than ``low_threshold`` requests left: send immediately.
- Reset time already passed: drop the stale entry and send immediately.
- Otherwise wait a fraction of the time left in the window, tiered by how
  close the quota is to exhaustion, and capped per tier.
- A 429 response marks the shared key as exhausted for every cooperating
  process and holds back the caller that received it.

Concurrent writers are not coordinated: the last write to the store wins.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Mapping
from datetime import datetime, timezone
from typing import Any, Callable

from rate_guard.adapters.store.base import RateLimitStore
from rate_guard.core.config import LimiterSettings, settings
from rate_guard.schemas.state import RateLimitState
from rate_guard.utils.headers import get_header, parse_remaining, parse_retry_after


def compute_progressive_delay(
    remaining: int,
    wait_time: float,
    limiter_settings: LimiterSettings,
) -> float:
    """Compute the preemptive delay for the remaining quota.

    Tiers are evaluated from most to least severe:
    - exhausted (``remaining <= 0``): the rest of the window, capped at
      ``max_wait_seconds``
    - ``remaining <= low_threshold``: half the window, capped at
      ``max_progressive_wait_high``
    - ``remaining <= medium_threshold``: a quarter of the window, capped at
      ``max_progressive_wait_low``
    - otherwise no delay

    The exhausted tier may resume before the real reset when the window is
    longer than ``max_wait_seconds``; the cap bounds worst-case blocking.

    Args:
        remaining: Requests believed available.
        wait_time: Seconds until the window resets (must be positive).
        limiter_settings: Thresholds and ceilings.

    Returns:
        Delay in seconds (0 when no delay applies).
    """

    if remaining <= 0:
        return min(wait_time, limiter_settings.max_wait_seconds)
    if remaining <= limiter_settings.low_threshold:
        return min(wait_time / 2, limiter_settings.max_progressive_wait_high)
    if remaining <= limiter_settings.medium_threshold:
        return min(wait_time / 4, limiter_settings.max_progressive_wait_low)
    return 0.0


class RateLimiter:
    """Progressive-delay rate limiter coordinated through a shared store.

    One instance handles one coordination key. Instances in different
    processes that use the same key and a shared store (file or Redis)
    throttle together.

    The limiter owns no threads. ``check_before_send`` and
    ``handle_limit_exceeded`` block the calling thread; their ``a``-prefixed
    counterparts suspend the calling task instead.
    """

    def __init__(
        self,
        store: RateLimitStore,
        *,
        key: str | None = None,
        limiter_settings: LimiterSettings | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            store: Store holding the shared state.
            key: Coordination key; defaults to ``limiter_settings.key_prefix``.
            limiter_settings: Thresholds and ceilings; defaults to global settings.
            logger: Logger for delay/update events; defaults to this module's logger.
            clock: Time source function returning UNIX time in seconds.
            sleep: Blocking sleep used by the synchronous methods.
            async_sleep: Coroutine sleep used by the asynchronous methods.
        """
        self._settings = limiter_settings or settings.limiter
        self._store = store
        self._key = key or self._settings.key_prefix
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._clock = clock
        self._sleep = sleep
        self._async_sleep = async_sleep

    @property
    def key(self) -> str:
        return self._key

    @property
    def store(self) -> RateLimitStore:
        return self._store

    @property
    def settings(self) -> LimiterSettings:
        return self._settings

    def check_before_send(self) -> float:
        """Apply the preemptive delay, if any, before a request is sent.

        Returns:
            Seconds the calling thread was held back (0 when none).
        """

        delay = self._preemptive_delay()
        if delay > 0:
            self._sleep(delay)
        return delay

    async def acheck_before_send(self) -> float:
        """Async variant of ``check_before_send``; suspends instead of blocking."""

        delay = self._preemptive_delay()
        if delay > 0:
            await self._async_sleep(delay)
        return delay

    def update_from_response(self, headers: Mapping[str, Any]) -> RateLimitState | None:
        """Record the limit state advertised by response headers.

        Does nothing when the remaining-quota header is missing or invalid.

        Args:
            headers: Response headers.

        Returns:
            The state written, or None if the response carried no limit info.
        """

        remaining = parse_remaining(get_header(headers, self._settings.remaining_header))
        if remaining is None:
            return None

        now = self._clock()
        window = self._resolve_window(headers, now)
        state = RateLimitState(remaining=remaining, reset_at=now + window, updated_at=now)
        self._write_state(state, window)

        self._logger.debug(
            "rate_limit.updated",
            extra={
                "limiter_key": self._key,
                "remaining": state.remaining,
                "reset_at": _isoformat(state.reset_at),
            },
        )
        return state

    def handle_limit_exceeded(self, headers: Mapping[str, Any]) -> float:
        """Mark the key exhausted after a 429 and hold back the caller.

        Args:
            headers: Headers of the 429 response.

        Returns:
            Seconds the calling thread was held back.
        """

        wait = self._record_exhausted(headers)
        self._sleep(wait)
        return wait

    async def ahandle_limit_exceeded(self, headers: Mapping[str, Any]) -> float:
        """Async variant of ``handle_limit_exceeded``.

        The exhausted state is persisted before suspending, so cancelling the
        wait never drops the update.
        """

        wait = self._record_exhausted(headers)
        await self._async_sleep(wait)
        return wait

    def _preemptive_delay(self) -> float:
        state = self._read_state()
        if state is None:
            return 0.0

        if state.remaining > self._settings.low_threshold:
            return 0.0

        wait_time = state.seconds_until_reset(self._clock())
        if wait_time <= 0:
            self._forget_state()
            self._logger.debug("rate_limit.reset_elapsed", extra={"limiter_key": self._key})
            return 0.0

        delay = compute_progressive_delay(state.remaining, wait_time, self._settings)
        if delay > 0:
            self._logger.info(
                "rate_limit.preemptive_delay",
                extra={
                    "limiter_key": self._key,
                    "delay_s": round(delay, 3),
                    "remaining": state.remaining,
                },
            )
        return delay

    def _record_exhausted(self, headers: Mapping[str, Any]) -> float:
        now = self._clock()
        window = self._resolve_window(headers, now)
        self._write_state(RateLimitState(remaining=0, reset_at=now + window, updated_at=now), window)

        wait = min(window, self._settings.max_wait_seconds)
        self._logger.info(
            "rate_limit.exceeded",
            extra={
                "limiter_key": self._key,
                "retry_after_s": window,
                "wait_s": wait,
            },
        )
        return wait

    def _resolve_window(self, headers: Mapping[str, Any], now: float) -> float:
        retry_after = parse_retry_after(
            get_header(headers, self._settings.retry_after_header),
            now=now,
        )
        if retry_after is None:
            return self._settings.max_wait_seconds
        # Compare before converting: huge header values overflow float()
        if retry_after >= self._settings.max_window_seconds:
            return float(self._settings.max_window_seconds)
        return float(retry_after)

    # Store access: failures are logged and never reach the caller's request.

    def _read_state(self) -> RateLimitState | None:
        try:
            return self._store.get(self._key)
        except Exception as exc:  # noqa: BLE001
            self._log_store_error("get", exc)
            return None

    def _write_state(self, state: RateLimitState, window: float) -> None:
        ttl = window + self._settings.cache_ttl_buffer
        try:
            stored = self._store.put(self._key, state, ttl)
        except Exception as exc:  # noqa: BLE001
            self._log_store_error("put", exc)
            return

        if not stored:
            self._logger.warning(
                "rate_limit.store_write_failed",
                extra={"limiter_key": self._key, "ttl_s": ttl},
            )

    def _forget_state(self) -> None:
        try:
            self._store.forget(self._key)
        except Exception as exc:  # noqa: BLE001
            self._log_store_error("forget", exc)

    def _log_store_error(self, operation: str, exc: Exception) -> None:
        self._logger.warning(
            "rate_limit.store_error",
            extra={
                "limiter_key": self._key,
                "operation": operation,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )


def _isoformat(timestamp: float) -> str:
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return str(timestamp)
