from sleuth.adapters.storage.base import KVStore

class MemoryKVStore(KVStore):
    def __init__(self, items: dict[str, str] | None = None):
        self.items = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str):
        self.items[key] = value
