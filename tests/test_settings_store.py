"""
Tests for best-effort settings persistence.
"""
import base64
import json

import pytest

from sleuth.adapters.storage.file_store import FileKVStore
from sleuth.adapters.storage.memory_store import MemoryKVStore
from sleuth.adapters.storage.settings_store import STORAGE_KEY, SettingsStore
from sleuth.orchestrator.contracts import Settings
from sleuth.services.status_store import StatusStore


class BrokenKVStore:
    def get_item(self, key):
        raise OSError("storage unavailable")

    def set_item(self, key, value):
        raise OSError("storage unavailable")


def test_round_trip_across_restart(tmp_path):
    path = tmp_path / "storage.json"
    SettingsStore(FileKVStore(path), StatusStore()).save(Settings(voice=True, hotdog=False))

    # fresh instances stand in for a process restart
    loaded = SettingsStore(FileKVStore(path), StatusStore()).load()
    assert loaded == Settings(voice=True, hotdog=False)


def test_blob_is_base64_json_under_fixed_key():
    kv = MemoryKVStore()
    SettingsStore(kv, StatusStore()).save(Settings(voice=False, hotdog=True))
    assert json.loads(base64.b64decode(kv.items[STORAGE_KEY])) == {"voice": False, "hotdog": True}


def test_missing_blob_gives_defaults():
    assert SettingsStore(MemoryKVStore(), StatusStore()).load() == Settings(voice=False, hotdog=False)


@pytest.mark.parametrize("blob", [
    "not base64 at all!",
    base64.b64encode(b"{broken json").decode(),
    base64.b64encode(b"[1, 2, 3]").decode(),
])
def test_corrupt_blob_gives_defaults(blob):
    status = StatusStore()
    store = SettingsStore(MemoryKVStore({STORAGE_KEY: blob}), status)
    assert store.load() == Settings(voice=False, hotdog=False)
    assert any("load failed" in line for line in status.logs)


def test_truthy_values_are_coerced():
    blob = base64.b64encode(json.dumps({"voice": 1, "hotdog": ""}).encode()).decode()
    loaded = SettingsStore(MemoryKVStore({STORAGE_KEY: blob}), StatusStore()).load()
    assert loaded == Settings(voice=True, hotdog=False)


def test_unavailable_storage_is_not_an_error():
    store = SettingsStore(BrokenKVStore(), StatusStore())
    assert store.load() == Settings()
    assert store.save(Settings(voice=True)) is False


def test_corrupt_storage_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{{{", encoding="utf-8")
    store = SettingsStore(FileKVStore(path), StatusStore())
    assert store.load() == Settings()
    # a write replaces the unreadable file
    assert store.save(Settings(hotdog=True))
    assert store.load() == Settings(hotdog=True)


def test_file_store_keeps_other_keys(tmp_path):
    kv = FileKVStore(tmp_path / "storage.json")
    kv.set_item("other", "value")
    kv.set_item(STORAGE_KEY, "blob")
    assert kv.get_item("other") == "value"
    assert kv.get_item(STORAGE_KEY) == "blob"
    assert kv.get_item("missing") is None
