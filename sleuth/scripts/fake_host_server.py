"""
Fake host relay for testing HttpRelayTransport without the device host.

Simulates the host on port 9000: /postMessage accepts a request, waits a moment
(simulating inference), then calls the reply back into sleuth twice, once through
a named callback and once through the generic message channel, the way a real
host may double-deliver. /border logs border-color updates.

Usage:
    python -m sleuth.scripts.fake_host_server
    TRANSPORT_ADAPTER=http BORDER_URL=http://127.0.0.1:9000 uvicorn sleuth.services.api:app
"""

import json
import os
import threading
import time
import httpx
import uvicorn
from fastapi import FastAPI, Request

from sleuth.orchestrator.prompts import MOCK_REPLIES, PROMPT_HOTDOG

SLEUTH_URL = os.getenv("SLEUTH_URL", "http://127.0.0.1:8000")
REPLY_DELAY_S = float(os.getenv("FAKE_HOST_DELAY_S", "1.0"))

app = FastAPI(title="fake-host-relay")


def _reply_later(body: dict):
    mode = "hotdog" if body.get("message") == PROMPT_HOTDOG else "standard"
    print(f"[host] inference ({mode}) for {REPLY_DELAY_S:.1f}s ...")
    time.sleep(REPLY_DELAY_S)
    reply = MOCK_REPLIES[mode]
    try:
        r = httpx.post(f"{SLEUTH_URL}/bridge/callback/onPluginMessage", json={"data": reply}, timeout=5.0)
        print(f"[host] callback -> {r.json()}")
        r = httpx.post(f"{SLEUTH_URL}/bridge/message", content=json.dumps({"message": reply}), timeout=5.0)
        print(f"[host] duplicate message -> {r.json()}")
    except httpx.HTTPError as e:
        print(f"[host] reply failed: {e}")


@app.post("/postMessage")
async def post_message(request: Request):
    body = json.loads(await request.body())
    print(f"[host] postMessage useLLM={body.get('useLLM')} voice={body.get('wantsR1Response')} "
          f"img len={len(body.get('imageBase64') or '')}")
    threading.Thread(target=_reply_later, args=(body,), daemon=True).start()
    return {"ok": True}


@app.post("/border")
async def border(request: Request):
    body = await request.json()
    print(f"[host] border color {body.get('color')}")
    return {"ok": True}


@app.get("/status")
async def status():
    return {"ok": True, "state": "idle"}


if __name__ == "__main__":
    print("Fake host relay starting on http://localhost:9000")
    uvicorn.run(app, host="0.0.0.0", port=9000)
