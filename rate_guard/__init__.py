"""Client-side rate limiting for outbound HTTP requests.

Delays requests before the remote API's quota runs out and shares the observed
limit across processes through a pluggable store.
"""

import logging

from rate_guard.adapters.http import AsyncRateLimitTransport, RateLimitTransport
from rate_guard.adapters.store import (
    FilesystemStore,
    InMemoryStore,
    RateLimitStore,
    RedisStore,
    create_store,
)
from rate_guard.core.client_factory import create_async_client, create_client, create_rate_limiter
from rate_guard.core.limiter import RateLimiter, compute_progressive_delay
from rate_guard.core.middleware import RateLimiterMiddleware
from rate_guard.schemas.state import RateLimitState

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AsyncRateLimitTransport",
    "FilesystemStore",
    "InMemoryStore",
    "RateLimitState",
    "RateLimitStore",
    "RateLimitTransport",
    "RateLimiter",
    "RateLimiterMiddleware",
    "RedisStore",
    "compute_progressive_delay",
    "create_async_client",
    "create_client",
    "create_rate_limiter",
    "create_store",
]
