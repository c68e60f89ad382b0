"""
Unit tests for persisted store backends and key builder
"""

import json

import pytest

from src.core.exceptions import CorruptPersistedRecordError
from src.storage.factory import create_store
from src.storage.persisted_store import FileStore, MemoryStore, decode_record
from src.storage.store_keys import StoreKeys


def test_memory_store_roundtrip():
    """Test raw get/set/delete"""
    store = MemoryStore()

    assert store.get("cnc:users") is None
    assert store.set("cnc:users", "[]") is True
    assert store.get("cnc:users") == "[]"

    assert store.delete("cnc:users") is True
    assert store.delete("cnc:users") is False
    assert store.keys() == []


def test_get_json_corrupt_value_is_absent():
    """Corrupt JSON is treated as absent, never raised to the caller"""
    store = MemoryStore({"cnc:guest_tracker": "{not json"})

    assert store.get_json("cnc:guest_tracker") is None
    assert store.get_json("cnc:guest_tracker", default={"count": 0}) == {"count": 0}


def test_decode_record_raises_on_corrupt():
    with pytest.raises(CorruptPersistedRecordError) as exc_info:
        decode_record("cnc:users", "[{")

    assert exc_info.value.key == "cnc:users"


def test_set_json_keeps_unicode():
    store = MemoryStore()
    store.set_json("cnc:preferences", {"name": "João"})

    assert "João" in store.get("cnc:preferences")
    assert store.get_json("cnc:preferences") == {"name": "João"}


def test_file_store_survives_restart(tmp_path):
    """A new FileStore on the same path sees earlier writes"""
    path = tmp_path / "profile.json"
    FileStore(path).set_json("cnc:guest_tracker", {"date": "2026-10-19", "count": 2})

    reopened = FileStore(path)
    assert reopened.get_json("cnc:guest_tracker") == {"date": "2026-10-19", "count": 2}

    assert reopened.delete("cnc:guest_tracker") is True
    assert FileStore(path).get("cnc:guest_tracker") is None
    assert reopened.delete("cnc:guest_tracker") is False


def test_file_store_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text("not a json object", encoding="utf-8")

    store = FileStore(path)
    assert store.get("cnc:users") is None

    # Writing replaces the corrupt file with a valid one
    store.set("cnc:users", "[]")
    assert json.loads(path.read_text(encoding="utf-8")) == {"cnc:users": "[]"}


def test_file_store_creates_parent_dirs(tmp_path):
    path = tmp_path / "nested" / "dir" / "profile.json"
    store = FileStore(path)
    store.set("k", "v")

    assert path.exists()
    # No temp files left behind
    assert [p.name for p in path.parent.iterdir()] == ["profile.json"]


def test_store_keys():
    """Test key generation"""
    keys = StoreKeys("cnc")

    assert keys.active_session == "cnc:active_session"
    assert keys.user_table == "cnc:users"
    assert keys.guest_counter == "cnc:guest_tracker"
    assert keys.preferences == "cnc:preferences"
    assert keys.history("abc123") == "cnc:history:abc123"
    assert StoreKeys("test").build("a", "b") == "test:a:b"


def test_create_store_backends(tmp_path):
    assert isinstance(create_store("memory"), MemoryStore)

    file_store = create_store("FILE", path=tmp_path / "p.json")
    assert isinstance(file_store, FileStore)

    with pytest.raises(ValueError):
        create_store("sqlite")
