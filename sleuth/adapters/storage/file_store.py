"""
File-backed key-value store: one JSON object of string values.
SLEUTH_STORAGE_PATH env var (default .sleuth_storage.json) selects the file.
"""
import json
import os
from pathlib import Path
from sleuth.adapters.storage.base import KVStore

class FileKVStore(KVStore):
    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or os.getenv("SLEUTH_STORAGE_PATH", ".sleuth_storage.json"))

    def _read(self) -> dict:
        if not self.path.is_file():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str):
        try:
            data = self._read()
        except ValueError:
            data = {}
        data[key] = value
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp, self.path)
