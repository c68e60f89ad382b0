# coding: utf-8
"""
Redis-backed persisted store

Synchronous Redis client with graceful degradation and error counters.
Values never expire: ledger records are durable, not cache entries.
"""
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError, ConnectionError as RedisConnectionError
from loguru import logger

from config.config import (
    REDIS_URL,
    REDIS_SOCKET_TIMEOUT,
    REDIS_SOCKET_CONNECT_TIMEOUT,
    STORE_RAISE_ON_ERROR,
)
from src.storage.persisted_store import PersistedStore


class RedisStore(PersistedStore):
    """
    Redis persisted store

    Features:
    - Sync Redis operations (ledger operations never suspend)
    - Graceful degradation (reads return None, writes return False)
    - Error and hit/miss counters

    Usage:
        >>> store = RedisStore()
        >>> store.initialize()
        >>> store.set_json("cnc:guest_tracker", {"date": "2026-10-19", "count": 1})
        >>> store.get_json("cnc:guest_tracker")
        {'date': '2026-10-19', 'count': 1}
    """

    def __init__(
        self,
        url: str = REDIS_URL,
        client: Optional[Redis] = None,
        raise_on_error: bool = STORE_RAISE_ON_ERROR,
    ):
        self._url = url
        self._client: Optional[Redis] = client
        self._is_available = client is not None
        self._raise_on_error = raise_on_error
        self._stats = {
            "hits": 0,
            "misses": 0,
            "errors": 0,
            "sets": 0,
            "deletes": 0,
        }

    def initialize(self) -> bool:
        """
        Connect to Redis

        Returns:
            True if Redis is available, False otherwise
        """
        try:
            self._client = Redis.from_url(
                self._url,
                decode_responses=True,  # Auto-decode bytes to strings
                socket_connect_timeout=REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=REDIS_SOCKET_TIMEOUT,
            )
            self._client.ping()
            self._is_available = True
            logger.info(f"Redis store initialized (url={self._url})")
            return True

        except RedisConnectionError as e:
            logger.warning(f"Redis connection failed: {e}. Ledger records will not persist.")
            self._is_available = False
            return False

        except (RedisError, ValueError) as e:
            logger.error(f"Unexpected error initializing Redis store: {e}")
            self._is_available = False
            return False

    def close(self) -> None:
        """Close the Redis connection"""
        if self._client:
            try:
                self._client.close()
                logger.info("Redis store connection closed")
            except RedisError as e:
                logger.error(f"Error closing Redis connection: {e}")
        self._is_available = False

    def _handle_error(self, operation: str, key: str, error: RedisError) -> None:
        self._stats["errors"] += 1
        logger.warning(f"Redis {operation} error for key '{key}': {error}")
        if self._raise_on_error:
            raise error

    def get(self, key: str) -> Optional[str]:
        if not self._is_available:
            return None

        try:
            value = self._client.get(key)  # type: ignore[union-attr]
        except RedisError as e:
            self._handle_error("GET", key, e)
            return None

        if value is None:
            self._stats["misses"] += 1
            return None

        self._stats["hits"] += 1
        return value

    def set(self, key: str, value: str) -> bool:
        if not self._is_available:
            return False

        try:
            self._client.set(key, value)  # type: ignore[union-attr]
        except RedisError as e:
            self._handle_error("SET", key, e)
            return False

        self._stats["sets"] += 1
        logger.debug(f"Store SET: {key}")
        return True

    def delete(self, key: str) -> bool:
        if not self._is_available:
            return False

        try:
            deleted = self._client.delete(key)  # type: ignore[union-attr]
        except RedisError as e:
            self._handle_error("DELETE", key, e)
            return False

        self._stats["deletes"] += 1
        return deleted > 0

    def get_stats(self) -> dict:
        """
        Get store statistics

        Returns:
            Dict with hits, misses, errors, hit_rate and availability
        """
        total = self._stats["hits"] + self._stats["misses"]
        hit_rate = self._stats["hits"] / total if total > 0 else 0

        return {
            **self._stats,
            "total_requests": total,
            "hit_rate": round(hit_rate, 2),
            "is_available": self._is_available,
        }

    def is_available(self) -> bool:
        """Check if Redis is available"""
        return self._is_available
