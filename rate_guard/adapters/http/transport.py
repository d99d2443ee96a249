"""httpx transports applying the rate limiter to every request."""

from __future__ import annotations

import httpx

from rate_guard.core.limiter import RateLimiter
from rate_guard.core.middleware import RateLimiterMiddleware


class RateLimitTransport(httpx.BaseTransport):
    """Synchronous transport wrapping another transport with rate limiting.

    Uses the official httpx transport API, so it works with ``httpx.Client``
    and with any transport (including ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        limiter: RateLimiter,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            limiter: Decision engine shared by requests using this transport.
            transport: Transport that actually sends requests. Defaults to
                ``httpx.HTTPTransport()``.
        """
        self._transport = transport or httpx.HTTPTransport()
        self._middleware = RateLimiterMiddleware(limiter)
        self._send = self._middleware(self._transport.handle_request)

    @property
    def limiter(self) -> RateLimiter:
        return self._middleware.limiter

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._send(request)

    def close(self) -> None:
        self._transport.close()


class AsyncRateLimitTransport(httpx.AsyncBaseTransport):
    """Asynchronous transport wrapping another transport with rate limiting.

    Delays suspend the calling task without blocking the event loop.
    """

    def __init__(
        self,
        limiter: RateLimiter,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            limiter: Decision engine shared by requests using this transport.
            transport: Transport that actually sends requests. Defaults to
                ``httpx.AsyncHTTPTransport()``.
        """
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._middleware = RateLimiterMiddleware(limiter)
        self._send = self._middleware.wrap_async(self._transport.handle_async_request)

    @property
    def limiter(self) -> RateLimiter:
        return self._middleware.limiter

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._send(request)

    async def aclose(self) -> None:
        await self._transport.aclose()
