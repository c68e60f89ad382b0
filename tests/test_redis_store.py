"""
Unit tests for the Redis persisted store (mocked client)
"""

from unittest.mock import Mock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, RedisError, TimeoutError as RedisTimeoutError

from src.storage.factory import create_store
from src.storage.redis_store import RedisStore


@pytest.fixture
def redis_client():
    client = Mock()
    client.get.return_value = None
    client.set.return_value = True
    client.delete.return_value = 1
    return client


def test_get_set_delete(redis_client):
    store = RedisStore(client=redis_client)

    assert store.set_json("cnc:guest_tracker", {"date": "2026-10-19", "count": 1}) is True
    redis_client.set.assert_called_once_with("cnc:guest_tracker", '{"date": "2026-10-19", "count": 1}')

    redis_client.get.return_value = '{"date": "2026-10-19", "count": 1}'
    assert store.get_json("cnc:guest_tracker") == {"date": "2026-10-19", "count": 1}

    assert store.delete("cnc:guest_tracker") is True

    stats = store.get_stats()
    assert stats["sets"] == 1
    assert stats["hits"] == 1
    assert stats["deletes"] == 1
    assert stats["is_available"] is True


def test_miss_counts(redis_client):
    store = RedisStore(client=redis_client)

    assert store.get("cnc:users") is None
    assert store.get_stats()["misses"] == 1
    assert store.get_stats()["hit_rate"] == 0


def test_errors_degrade_gracefully(redis_client):
    """Redis errors return None/False and are counted"""
    redis_client.get.side_effect = RedisError("boom")
    redis_client.set.side_effect = RedisError("boom")
    store = RedisStore(client=redis_client, raise_on_error=False)

    assert store.get("cnc:users") is None
    assert store.set("cnc:users", "[]") is False
    assert store.get_stats()["errors"] == 2


def test_errors_raise_when_configured(redis_client):
    redis_client.get.side_effect = RedisError("boom")
    store = RedisStore(client=redis_client, raise_on_error=True)

    with pytest.raises(RedisError):
        store.get("cnc:users")


def test_initialize_connection_failure():
    """Unreachable Redis leaves the store unavailable"""
    client = Mock()
    client.ping.side_effect = RedisConnectionError("refused")

    with patch("src.storage.redis_store.Redis.from_url", return_value=client):
        store = RedisStore(url="redis://nowhere:6379/0")
        assert store.initialize() is False

    assert store.is_available() is False
    assert store.get("cnc:users") is None
    assert store.set("cnc:users", "[]") is False
    assert store.delete("cnc:users") is False


def test_initialize_and_close():
    client = Mock()

    with patch("src.storage.redis_store.Redis.from_url", return_value=client) as from_url:
        store = RedisStore(url="redis://localhost:6379/1")
        assert store.initialize() is True

    assert from_url.call_args.kwargs["decode_responses"] is True
    assert store.is_available() is True

    store.close()
    client.close.assert_called_once()
    assert store.is_available() is False


def test_initialize_ping_timeout():
    """A ping timeout degrades the same way as a refused connection"""
    client = Mock()
    client.ping.side_effect = RedisTimeoutError("timed out")

    with patch("src.storage.redis_store.Redis.from_url", return_value=client):
        store = RedisStore(url="redis://slow:6379/0")
        assert store.initialize() is False

    assert store.is_available() is False


def test_initialize_bad_url():
    store = RedisStore(url="not-a-redis-url")

    with patch("src.storage.redis_store.Redis.from_url", side_effect=ValueError("bad scheme")):
        assert store.initialize() is False

    assert store.is_available() is False


def test_create_store_redis_unreachable():
    with patch("src.storage.redis_store.Redis.from_url", side_effect=ValueError("bad scheme")):
        store = create_store("redis", redis_url="not-a-redis-url")

    assert isinstance(store, RedisStore)
    assert store.get_json("cnc:users", default=[]) == []
