"""Filesystem-backed rate limit state store.

Each key is stored in its own file holding a JSON envelope with the state and
its expiry. Processes that share the directory (e.g. workers on one host or a
shared volume) share the rate limit state.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from rate_guard.schemas.state import RateLimitState

logger = logging.getLogger(__name__)

FILE_PREFIX = "rate_limit_"
FILE_SUFFIX = ".cache"


class FilesystemStore:
    """Store persisting state as one JSON file per key.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so readers only ever see a complete envelope.

    Attributes:
        directory: Directory holding the cache files.
    """

    def __init__(
        self,
        directory: str | os.PathLike[str],
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the filesystem store.

        The directory is created lazily on the first write.

        Args:
            directory: Directory holding the cache files.
            clock: Time source function returning UNIX time in seconds.
        """
        self.directory = Path(directory)
        self._clock = clock

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"FilesystemStore(directory={str(self.directory)!r})"

    def get(self, key: str) -> RateLimitState | None:
        path = self._path_for(key)

        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("store.read_failed", extra={"path": str(path), "error": str(exc)})
            return None

        envelope = self._decode(raw)
        if envelope is None:
            logger.warning("store.corrupt_entry", extra={"path": str(path)})
            self.forget(key)
            return None

        state, expires_at = envelope
        if expires_at < self._clock():
            self.forget(key)
            return None

        return state

    def put(self, key: str, state: RateLimitState, ttl_seconds: float) -> bool:
        path = self._path_for(key)
        payload = json.dumps(
            {
                "data": state.model_dump(mode="json"),
                "expires_at": self._clock() + ttl_seconds,
            }
        )

        tmp_name: str | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.directory,
                prefix=".tmp_",
                suffix=FILE_SUFFIX,
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
            os.replace(tmp_name, path)
            return True
        except OSError as exc:
            logger.warning("store.write_failed", extra={"path": str(path), "error": str(exc)})
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False

    def forget(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("store.delete_failed", extra={"path": str(path), "error": str(exc)})
            return False
        return True

    def cleanup(self) -> int:
        """Remove expired and unreadable cache files.

        Can be called periodically to keep the directory from growing.

        Returns:
            Number of files removed.
        """

        if not self.directory.is_dir():
            return 0

        now = self._clock()
        cleaned = 0
        for path in self.directory.glob(f"{FILE_PREFIX}*{FILE_SUFFIX}"):
            try:
                envelope = self._decode(path.read_bytes())
                if envelope is None or envelope[1] < now:
                    path.unlink(missing_ok=True)
                    cleaned += 1
            except OSError:
                # Skip files that can't be read or deleted
                continue

        logger.debug("store.cleanup", extra={"removed": cleaned, "directory": str(self.directory)})
        return cleaned

    def _path_for(self, key: str) -> Path:
        # Hash so arbitrary keys map to safe filenames
        digest = hashlib.sha256(key.encode()).hexdigest()
        return self.directory / f"{FILE_PREFIX}{digest}{FILE_SUFFIX}"

    @staticmethod
    def _decode(raw: bytes) -> tuple[RateLimitState, float] | None:
        try:
            envelope: Any = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None

        if not isinstance(envelope, dict) or "data" not in envelope or "expires_at" not in envelope:
            return None

        try:
            state = RateLimitState.model_validate(envelope["data"])
            expires_at = float(envelope["expires_at"])
        except (ValidationError, TypeError, ValueError):
            return None

        return state, expires_at
