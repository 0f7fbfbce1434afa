"""
HTTP adapter for the host's border-color side-channel.
  Request:  POST <BORDER_URL>/border  {"color": "#22c55e"}
Failures are logged and dropped: the indicator is cosmetic.
"""
import httpx
from sleuth.adapters.indicator.base import BorderIndicator

class HttpBorderIndicator(BorderIndicator):
    def __init__(self, status_store, base_url: str, timeout: float = 2.0):
        self.status = status_store
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.last_color: str | None = None

    def update(self, color: str):
        if color == self.last_color:
            return
        try:
            resp = httpx.post(f"{self.base_url}/border", json={"color": color}, timeout=self.timeout)
            resp.raise_for_status()
            self.last_color = color
        except httpx.HTTPError as e:
            self.status.log(f"http_indicator: border update failed: {e}")
