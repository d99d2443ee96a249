"""Factory helpers for rate-limited httpx clients.

Centralizes construction (settings, store, limiter, transport) so callers
get a ready client with one call and tests can swap any piece.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from rate_guard.adapters.http.transport import AsyncRateLimitTransport, RateLimitTransport
from rate_guard.adapters.store.base import RateLimitStore
from rate_guard.adapters.store.factory import create_store
from rate_guard.core.config import Settings, settings as default_settings
from rate_guard.core.limiter import RateLimiter


def create_rate_limiter(
    settings: Settings | None = None,
    *,
    store: RateLimitStore | None = None,
    logger: logging.Logger | None = None,
) -> RateLimiter:
    """Build a RateLimiter from settings.

    Args:
        settings: Settings container; defaults to the global settings.
        store: Store to use instead of the configured backend.
        logger: Optional logger for limiter events.

    Returns:
        Configured RateLimiter.
    """
    cfg = settings or default_settings
    return RateLimiter(
        store if store is not None else create_store(cfg.store),
        limiter_settings=cfg.limiter,
        logger=logger,
    )


def create_client(
    *,
    limiter: RateLimiter | None = None,
    transport: httpx.BaseTransport | None = None,
    **client_kwargs: Any,
) -> httpx.Client:
    """Create an ``httpx.Client`` whose requests go through the rate limiter.

    Args:
        limiter: Limiter to use; built from global settings when omitted.
        transport: Underlying transport; defaults to ``httpx.HTTPTransport()``.
        **client_kwargs: Extra arguments for ``httpx.Client`` (base_url, headers, ...).

    Returns:
        Configured httpx client.
    """
    return httpx.Client(
        transport=RateLimitTransport(limiter or create_rate_limiter(), transport),
        **client_kwargs,
    )


def create_async_client(
    *,
    limiter: RateLimiter | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """Async counterpart of ``create_client``."""
    return httpx.AsyncClient(
        transport=AsyncRateLimitTransport(limiter or create_rate_limiter(), transport),
        **client_kwargs,
    )
