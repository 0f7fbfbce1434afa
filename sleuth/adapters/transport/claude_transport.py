"""
Claude transport: stands in for the host relay by calling the Anthropic API directly.

post_message() returns as soon as the worker thread is started; the model's text
reply is delivered later through the same callback alias a real host would use,
wrapped as {"data": <text>}.

Requires ANTHROPIC_API_KEY in environment (.env or system env).
"""
import json
import os
import threading
from sleuth.adapters.camera.base import DATA_URL_PREFIX
from sleuth.adapters.transport.base import HostTransport

REPLY_ALIAS = "onPluginMessage"
CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "claude-haiku-4-5-20251001")


class ClaudeTransport(HostTransport):
    def __init__(self, status_store):
        super().__init__()
        self.status = status_store
        self._client = None
        self._ready = False
        self._init_client()

    def _init_client(self):
        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            self.status.log("claude_transport: ANTHROPIC_API_KEY not set")
            return
        try:
            import anthropic
            self._client = anthropic.Anthropic(api_key=api_key)
            self._ready = True
            self.status.log(f"claude_transport: ready ({CLAUDE_MODEL})")
        except ImportError:
            self.status.log("claude_transport: anthropic package not installed, run: pip install anthropic")

    def post_message(self, payload: str):
        if not self._ready or self._client is None:
            raise RuntimeError("claude transport not ready")
        body = json.loads(payload)
        threading.Thread(target=self._infer, args=(body,), daemon=True).start()

    def _infer(self, body: dict):
        content = []
        image = body.get("imageBase64")
        if image:
            data = image[len(DATA_URL_PREFIX):] if image.startswith(DATA_URL_PREFIX) else image
            content.append({
                "type": "image",
                "source": {"type": "base64", "media_type": "image/jpeg", "data": data},
            })
        content.append({"type": "text", "text": body.get("message", "")})

        try:
            message = self._client.messages.create(
                model=CLAUDE_MODEL,
                max_tokens=300,
                messages=[{"role": "user", "content": content}],
            )
            raw = message.content[0].text.strip()
        except Exception as e:
            self.status.log(f"claude_transport: API error: {e}")
            return

        self.status.log(f"claude_transport: raw response = '{raw[:150]}'")
        self.invoke(REPLY_ALIAS, {"data": raw})
