"""HTTP client adapters - plug the rate limiter into httpx."""

from rate_guard.adapters.http.transport import AsyncRateLimitTransport, RateLimitTransport

__all__ = [
    "AsyncRateLimitTransport",
    "RateLimitTransport",
]
