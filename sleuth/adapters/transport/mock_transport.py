"""Dev-mode transport: no host present, replies with a canned answer after a short delay."""
import json
import threading
from sleuth.adapters.transport.base import HostTransport
from sleuth.orchestrator.contracts import MODE_HOTDOG, MODE_STANDARD
from sleuth.orchestrator.prompts import MOCK_REPLIES, PROMPT_HOTDOG

REPLY_ALIAS = "onPluginMessage"
MOCK_DELAY_S = 1.8

class MockTransport(HostTransport):
    def __init__(self, status_store, delay_s: float = MOCK_DELAY_S):
        super().__init__()
        self.status = status_store
        self.delay_s = delay_s
        self.sent: list[dict] = []

    def post_message(self, payload: str):
        body = json.loads(payload)
        self.sent.append(body)
        mode = MODE_HOTDOG if body.get("message") == PROMPT_HOTDOG else MODE_STANDARD
        reply = {"data": MOCK_REPLIES[mode]}
        self.status.log(f"mock_transport: replying ({mode}) in {self.delay_s}s")
        if self.delay_s <= 0:
            self.invoke(REPLY_ALIAS, reply)
            return
        timer = threading.Timer(self.delay_s, self.invoke, args=(REPLY_ALIAS, reply))
        timer.daemon = True
        timer.start()
