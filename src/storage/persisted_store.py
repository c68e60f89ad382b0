# coding: utf-8
"""
Persisted key-value store

Synchronous key → JSON-string map, durable across restarts and scoped to one
local profile. Every ledger record is one JSON value under one key.

Backends:
- MemoryStore: process-local dict (tests, ephemeral sessions)
- FileStore: one JSON file per profile, replaced atomically on write
- RedisStore: see src/storage/redis_store.py
"""
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from src.core.exceptions import CorruptPersistedRecordError


def decode_record(key: str, raw: str) -> Any:
    """
    Decode a persisted JSON string

    Raises:
        CorruptPersistedRecordError: If the value is not valid JSON
    """
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise CorruptPersistedRecordError(key, str(e)) from e


class PersistedStore(ABC):
    """
    Base class for synchronous key-value backends

    Subclasses implement raw string access; JSON helpers live here so every
    backend recovers from corrupt values the same way.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return raw string for key, or None if absent"""

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        """Store raw string, return True on success"""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key, return True if it existed"""

    def get_json(self, key: str, default: Any = None) -> Any:
        """
        Get JSON value for key

        Args:
            key: Persisted key
            default: Returned when the key is absent or corrupt

        Returns:
            Decoded value or default
        """
        raw = self.get(key)
        if raw is None:
            return default

        try:
            return decode_record(key, raw)
        except CorruptPersistedRecordError as e:
            logger.warning(f"{e}. Treating key as absent.")
            return default

    def set_json(self, key: str, value: Any) -> bool:
        """Serialize value to JSON and store it"""
        return self.set(key, json.dumps(value, ensure_ascii=False))


class MemoryStore(PersistedStore):
    """Dict-backed store (not durable)"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._data)


class FileStore(PersistedStore):
    """
    File-backed store: one JSON object {key: raw_string} per profile

    The file is re-read on every access so that a restarted process sees the
    latest state. Writes go to a temp file and are swapped in with os.replace.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Corrupt profile file {self.path}: {e}. Starting from empty store.")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Profile file {self.path} is not a JSON object. Starting from empty store.")
            return {}

        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".profile-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> bool:
        data = self._read_all()
        data[key] = value
        self._write_all(data)
        logger.debug(f"Store SET: {key}")
        return True

    def delete(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return False
        del data[key]
        self._write_all(data)
        logger.debug(f"Store DELETE: {key}")
        return True
