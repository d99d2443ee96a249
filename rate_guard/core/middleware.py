"""Request interceptor wiring the rate limiter around a send function.

The middleware wraps any "send request" callable and returns an equivalent
one, so it composes into whatever middleware chain the HTTP client exposes
(httpx transports, requests adapters, hand-written retry loops).

Around each call it:
- Applies the preemptive delay before the request is sent
- Records limit headers from every response, successful or not
- Handles 429 responses by marking the shared key exhausted and waiting
- Also inspects responses carried by exceptions (e.g. ``httpx.HTTPStatusError``)
  before re-raising them unchanged

Usage:
    middleware = RateLimiterMiddleware(limiter)
    send = middleware(session.send)
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Mapping
from typing import Any, Callable, Protocol, TypeVar

from rate_guard.core.limiter import RateLimiter

logger = logging.getLogger(__name__)


class ResponseLike(Protocol):
    """Minimal response surface the middleware needs."""

    status_code: int

    @property
    def headers(self) -> Mapping[str, Any]: ...


R = TypeVar("R")


def response_from_error(exc: BaseException) -> ResponseLike | None:
    """Return the HTTP response carried by an exception, if any.

    Connection-level errors carry no response and yield None.
    """

    response = getattr(exc, "response", None)
    if response is None:
        return None
    if not hasattr(response, "status_code") or not hasattr(response, "headers"):
        return None
    return response


class RateLimiterMiddleware:
    """Wrap send callables with preemptive delays and response bookkeeping.

    Attributes:
        limiter: Decision engine invoked around each request.
        too_many_requests_status: Status code treated as "limit exceeded".
    """

    def __init__(self, limiter: RateLimiter, *, too_many_requests_status: int | None = None) -> None:
        self.limiter = limiter
        self.too_many_requests_status = (
            too_many_requests_status
            if too_many_requests_status is not None
            else limiter.settings.too_many_requests_status
        )

    def __call__(self, send: Callable[..., R]) -> Callable[..., R]:
        """Wrap a synchronous send callable."""

        @functools.wraps(send)
        def rate_limited_send(*args: Any, **kwargs: Any) -> R:
            self.limiter.check_before_send()

            try:
                response = send(*args, **kwargs)
            except Exception as exc:
                error_response = response_from_error(exc)
                if error_response is not None:
                    self._observe_error_response(error_response)
                raise

            self.observe(response)
            return response

        return rate_limited_send

    def wrap_async(self, send: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        """Wrap a coroutine send function."""

        @functools.wraps(send)
        async def rate_limited_send(*args: Any, **kwargs: Any) -> R:
            await self.limiter.acheck_before_send()

            try:
                response = await send(*args, **kwargs)
            except Exception as exc:
                error_response = response_from_error(exc)
                if error_response is not None:
                    await self._aobserve_error_response(error_response)
                raise

            await self.aobserve(response)
            return response

        return rate_limited_send

    def observe(self, response: Any) -> None:
        """Feed a response to the limiter, blocking after a 429."""

        self.limiter.update_from_response(response.headers)
        if self._is_limit_exceeded(response):
            self.limiter.handle_limit_exceeded(response.headers)

    async def aobserve(self, response: Any) -> None:
        """Feed a response to the limiter, suspending after a 429."""

        self.limiter.update_from_response(response.headers)
        if self._is_limit_exceeded(response):
            await self.limiter.ahandle_limit_exceeded(response.headers)

    def _is_limit_exceeded(self, response: Any) -> bool:
        return getattr(response, "status_code", None) == self.too_many_requests_status

    # The send error is re-raised by the caller; bookkeeping must not replace it.

    def _observe_error_response(self, response: Any) -> None:
        try:
            self.observe(response)
        except Exception as exc:  # noqa: BLE001
            self._log_observe_failure(exc)

    async def _aobserve_error_response(self, response: Any) -> None:
        try:
            await self.aobserve(response)
        except Exception as exc:  # noqa: BLE001
            self._log_observe_failure(exc)

    def _log_observe_failure(self, exc: Exception) -> None:
        logger.warning(
            "rate_limit.observe_failed",
            extra={
                "limiter_key": self.limiter.key,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )
