# coding: utf-8
"""
Backend selection for the persisted store
"""
from pathlib import Path
from typing import Optional

from loguru import logger

from config.config import STORE_BACKEND, STORE_PATH, REDIS_URL
from src.storage.persisted_store import FileStore, MemoryStore, PersistedStore
from src.storage.redis_store import RedisStore


def create_store(
    backend: str = STORE_BACKEND,
    path: Optional[Path] = None,
    redis_url: str = REDIS_URL,
) -> PersistedStore:
    """
    Create the configured persisted store

    Args:
        backend: "file", "redis" or "memory"
        path: Profile file for the file backend (default: STORE_PATH)
        redis_url: Redis URL for the redis backend

    Returns:
        PersistedStore instance
    """
    backend = backend.lower()

    if backend == "memory":
        logger.info("Using in-memory store (records are not durable)")
        return MemoryStore()

    if backend == "redis":
        store = RedisStore(url=redis_url)
        store.initialize()
        return store

    if backend == "file":
        profile_path = path or STORE_PATH
        logger.info(f"Using file store at {profile_path}")
        return FileStore(profile_path)

    raise ValueError(f"Unknown store backend: {backend}")
