class KVStore:
    def get_item(self, key: str) -> str | None:
        raise NotImplementedError

    def set_item(self, key: str, value: str):
        raise NotImplementedError
