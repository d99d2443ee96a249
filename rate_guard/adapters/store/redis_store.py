"""Redis-backed rate limit state store.

Lets processes on different hosts share one limit. Expiry is delegated to
Redis (``SET ... EX``), which removes keys on its own once the TTL elapses.
"""

from __future__ import annotations

import logging
import math

import redis
from pydantic import ValidationError

from rate_guard.schemas.state import RateLimitState

logger = logging.getLogger(__name__)


class RedisStore:
    """Store adapter over a synchronous ``redis.Redis`` client.

    Attributes:
        prefix: Namespace prepended to every key as ``"<prefix>:<key>"``.
    """

    def __init__(self, client: redis.Redis, *, prefix: str = "rate_guard") -> None:
        """Initialize the Redis store.

        Args:
            client: Connected Redis client. Owned by the caller.
            prefix: Namespace prepended to every key.
        """
        self._client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str = "rate_guard") -> "RedisStore":
        """Build a store from a Redis URL (e.g. ``redis://localhost:6379/0``)."""
        return cls(redis.Redis.from_url(url), prefix=prefix)

    @property
    def client(self) -> redis.Redis:
        """Return the underlying Redis client."""
        return self._client

    def get(self, key: str) -> RateLimitState | None:
        full_key = self._build_key(key)
        try:
            raw = self._client.get(full_key)
        except redis.RedisError as exc:
            logger.warning("store.read_failed", extra={"store_key": full_key, "error": str(exc)})
            return None

        if raw is None:
            return None

        try:
            return RateLimitState.model_validate_json(raw)
        except ValidationError:
            logger.warning("store.corrupt_entry", extra={"store_key": full_key})
            return None

    def put(self, key: str, state: RateLimitState, ttl_seconds: float) -> bool:
        full_key = self._build_key(key)
        # Redis expiry takes whole seconds; round up so the entry never expires early
        ttl = max(1, math.ceil(ttl_seconds))
        try:
            self._client.set(full_key, state.model_dump_json(), ex=ttl)
        except redis.RedisError as exc:
            logger.warning("store.write_failed", extra={"store_key": full_key, "error": str(exc)})
            return False
        return True

    def forget(self, key: str) -> bool:
        full_key = self._build_key(key)
        try:
            self._client.delete(full_key)
        except redis.RedisError as exc:
            logger.warning("store.delete_failed", extra={"store_key": full_key, "error": str(exc)})
            return False
        return True

    def _build_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"
