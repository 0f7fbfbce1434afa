"""
Settings persistence: the two boolean settings live in one base64(JSON) blob under
STORAGE_KEY. Persistence is best-effort: a missing or corrupt blob loads as
defaults, a failed write is logged and the in-memory value stays authoritative.
"""
import base64
import json
from sleuth.orchestrator.contracts import Settings

STORAGE_KEY = "sleuth_v1_settings"

class SettingsStore:
    def __init__(self, kv, status_store, key: str = STORAGE_KEY):
        self.kv = kv
        self.status = status_store
        self.key = key

    def load(self) -> Settings:
        settings = Settings()
        try:
            raw = self.kv.get_item(self.key)
            if raw:
                saved = json.loads(base64.b64decode(raw, validate=True))
                settings.voice = bool(saved.get("voice"))
                settings.hotdog = bool(saved.get("hotdog"))
        except Exception as e:
            self.status.log(f"settings: load failed, using defaults ({type(e).__name__})")
            return Settings()
        self.status.log(f"settings: loaded voice={settings.voice} hotdog={settings.hotdog}")
        return settings

    def save(self, settings: Settings) -> bool:
        payload = base64.b64encode(
            json.dumps({"voice": settings.voice, "hotdog": settings.hotdog}).encode("utf-8")
        ).decode("ascii")
        try:
            self.kv.set_item(self.key, payload)
        except Exception as e:
            self.status.log(f"settings: save failed ({type(e).__name__}: {e})")
            return False
        return True
