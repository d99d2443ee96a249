"""Rate limit state stores.

The decision engine only depends on the ``RateLimitStore`` protocol, so the
backend can move from process memory to a shared directory or Redis without
changing the interceptor.
"""

from rate_guard.adapters.store.base import RateLimitStore
from rate_guard.adapters.store.factory import create_store
from rate_guard.adapters.store.filesystem import FilesystemStore
from rate_guard.adapters.store.in_memory import InMemoryStore
from rate_guard.adapters.store.redis_store import RedisStore

__all__ = [
    "FilesystemStore",
    "InMemoryStore",
    "RateLimitStore",
    "RedisStore",
    "create_store",
]
