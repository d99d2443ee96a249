"""Store contract for shared rate limit state.

The decision engine depends on this protocol only, so any key/value cache with
TTL support (process memory, files on a shared volume, Redis) can back it.
Implementations do not share a base class; they only need the three methods.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rate_guard.schemas.state import RateLimitState


@runtime_checkable
class RateLimitStore(Protocol):
    """Interface for rate limit state stores.

    None of the methods may raise for operational failures (I/O errors,
    unreachable backend, corrupt payloads). Reads degrade to "absent" and
    writes report ``False`` so the HTTP exchange never depends on the store.
    """

    def get(self, key: str) -> RateLimitState | None:
        """Return the stored state, or None if missing, expired or unreadable.

        Args:
            key: Coordination key.

        Returns:
            The last written state, or None.
        """
        ...

    def put(self, key: str, state: RateLimitState, ttl_seconds: float) -> bool:
        """Persist state until ``now + ttl_seconds``.

        Args:
            key: Coordination key.
            state: State to store.
            ttl_seconds: Lifetime of the entry, always chosen by the caller.

        Returns:
            True if the state was stored.
        """
        ...

    def forget(self, key: str) -> bool:
        """Remove the entry for key.

        Args:
            key: Coordination key.

        Returns:
            True if the entry is gone, including when it never existed.
        """
        ...
