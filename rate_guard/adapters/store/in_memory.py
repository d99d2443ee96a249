"""In-memory rate limit state store.

Notes:
- Per-process only: cooperating processes do not see each other's state.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from rate_guard.schemas.state import RateLimitState

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    state: RateLimitState
    expires_at: float


class InMemoryStore:
    """Store keeping rate limit state in a dictionary with TTL expiry.

    Suitable for single-process clients (threads or asyncio tasks sharing one
    limiter) and for tests. Expired entries are dropped lazily on access.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _Entry] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryStore(size={len(self._entries)})"

    def get(self, key: str) -> RateLimitState | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._is_expired(entry):
                self._entries.pop(key, None)
                logger.debug("store.expired", extra={"store_key": key})
                return None

            return entry.state

    def put(self, key: str, state: RateLimitState, ttl_seconds: float) -> bool:
        with self._lock:
            self._entries[key] = _Entry(state=state, expires_at=self._clock() + ttl_seconds)
        return True

    def forget(self, key: str) -> bool:
        with self._lock:
            self._entries.pop(key, None)
        return True

    def clear(self) -> None:
        """Remove all entries."""

        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        """Return keys of entries that have not expired yet."""

        with self._lock:
            return [key for key, entry in self._entries.items() if not self._is_expired(entry)]

    def _is_expired(self, entry: _Entry) -> bool:
        return self._clock() > entry.expires_at
