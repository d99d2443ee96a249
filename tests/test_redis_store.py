"""Unit tests for the Redis store adapter (client mocked)."""

from unittest.mock import MagicMock, patch

import redis

from rate_guard.adapters.store.redis_store import RedisStore
from rate_guard.schemas.state import RateLimitState


def _state(remaining: int = 4) -> RateLimitState:
    return RateLimitState(remaining=remaining, reset_at=1_060.0, updated_at=1_000.0)


def test_put_sets_prefixed_key_with_ceiled_ttl() -> None:
    client = MagicMock()
    store = RedisStore(client, prefix="svc")

    assert store.put("api", _state(), 70.2) is True

    client.set.assert_called_once()
    args, kwargs = client.set.call_args
    assert args[0] == "svc:api"
    assert RateLimitState.model_validate_json(args[1]) == _state()
    assert kwargs == {"ex": 71}


def test_put_uses_minimum_ttl_of_one_second() -> None:
    client = MagicMock()

    RedisStore(client).put("api", _state(), 0.2)

    assert client.set.call_args.kwargs == {"ex": 1}


def test_get_decodes_stored_payload() -> None:
    client = MagicMock()
    client.get.return_value = _state(remaining=7).model_dump_json().encode()

    state = RedisStore(client, prefix="svc").get("api")

    client.get.assert_called_once_with("svc:api")
    assert state == _state(remaining=7)


def test_get_missing_key_returns_none() -> None:
    client = MagicMock()
    client.get.return_value = None

    assert RedisStore(client).get("api") is None


def test_get_corrupt_payload_returns_none() -> None:
    client = MagicMock()
    client.get.return_value = b'{"remaining": "lots"}'

    assert RedisStore(client).get("api") is None


def test_backend_errors_are_reported_not_raised() -> None:
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.set.side_effect = redis.ConnectionError("down")
    client.delete.side_effect = redis.TimeoutError("slow")
    store = RedisStore(client)

    assert store.get("api") is None
    assert store.put("api", _state(), 10) is False
    assert store.forget("api") is False


def test_forget_deletes_prefixed_key() -> None:
    client = MagicMock()
    client.delete.return_value = 0

    assert RedisStore(client, prefix="svc").forget("api") is True
    client.delete.assert_called_once_with("svc:api")


def test_from_url_builds_client() -> None:
    with patch("rate_guard.adapters.store.redis_store.redis.Redis.from_url") as from_url:
        store = RedisStore.from_url("redis://cache:6379/2", prefix="svc")

    from_url.assert_called_once_with("redis://cache:6379/2")
    assert store.client is from_url.return_value
    assert store.prefix == "svc"
