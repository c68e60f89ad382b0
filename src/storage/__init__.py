# coding: utf-8
"""
Storage module - synchronous persisted key-value store

Provides the single persistence layer every ledger record lives in.
"""

from src.storage.persisted_store import PersistedStore, MemoryStore, FileStore, decode_record
from src.storage.redis_store import RedisStore
from src.storage.store_keys import StoreKeys
from src.storage.factory import create_store

__all__ = [
    "PersistedStore",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "StoreKeys",
    "create_store",
    "decode_record",
]
