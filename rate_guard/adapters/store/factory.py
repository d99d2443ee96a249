"""Factory for creating store instances from configuration."""

from rate_guard.adapters.store.base import RateLimitStore
from rate_guard.adapters.store.filesystem import FilesystemStore
from rate_guard.adapters.store.in_memory import InMemoryStore
from rate_guard.adapters.store.redis_store import RedisStore
from rate_guard.core.config import StoreSettings, settings
from rate_guard.core.errors import ValidationAppError


def create_store(store_settings: StoreSettings | None = None) -> RateLimitStore:
    """Instantiate the configured store backend.

    Validates backend-specific requirements and routes to the matching adapter.

    Args:
        store_settings: Store settings; defaults to ``settings.store``.

    Returns:
        RateLimitStore: Configured store instance.

    Raises:
        ValidationAppError: If the backend is unknown or its settings are incomplete.
    """
    cfg = store_settings or settings.store
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryStore()

    if backend == "file":
        if not cfg.file_directory:
            raise ValidationAppError(
                code="store_missing_directory",
                message="File store requires RATE_GUARD_STORE_FILE_DIRECTORY",
                details={"backend": backend, "setting": "file_directory"},
            )
        return FilesystemStore(cfg.file_directory)

    if backend == "redis":
        if not cfg.redis_url:
            raise ValidationAppError(
                code="store_missing_redis_url",
                message="Redis store requires RATE_GUARD_STORE_REDIS_URL",
                details={"backend": backend, "setting": "redis_url"},
            )
        return RedisStore.from_url(cfg.redis_url, prefix=cfg.redis_prefix)

    raise ValidationAppError(
        code="store_unknown_backend",
        message=(
            f"Unknown store backend: '{backend}'. Supported backends: memory, file, redis"
        ),
        details={"backend": backend},
    )
