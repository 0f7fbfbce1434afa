"""
HTTP relay transport.

Posts the request payload to the host relay, which forwards it to the remote
inference service. The reply does not come back on this connection: the relay
calls one of the inbound channels of this service later (/bridge/...).
Contract:
  Request:  POST <HOST_RELAY_URL>/postMessage   body: the JSON payload text
  Response: {"ok": true}   (or {"ok": false, "error": "..."})
"""

import httpx
from sleuth.adapters.transport.base import HostTransport


class HttpRelayTransport(HostTransport):
    def __init__(self, status_store, base_url: str = "http://127.0.0.1:9000", timeout: float = 5.0):
        super().__init__()
        self.status = status_store
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def post_message(self, payload: str):
        url = f"{self.base_url}/postMessage"
        self.status.log(f"http_transport: POST /postMessage len={len(payload)}")
        resp = httpx.post(url, content=payload, headers={"Content-Type": "application/json"}, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        if not data.get("ok", True):
            raise RuntimeError(f"relay error: {data.get('error', 'unknown')}")
        self.status.log("http_transport: posted")

    def get_status(self) -> dict:
        resp = httpx.get(f"{self.base_url}/status", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()
