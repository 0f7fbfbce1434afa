"""
Message bridge between the controller and the host transport.

The host's inbound contract is not guaranteed: it may call a named callback (under
any of several aliases), post a generic message, or fire a custom event. Every one
of those channels forwards into a single sink, deliver(), which hands the raw value
to the controller. One logical reply may therefore arrive more than once; the
controller keeps the first one it can parse and ignores the rest.

The bridge also owns the single in-flight Request and its watchdog. The watchdog is
advisory: firing it sets `watchdog_fired` and notifies the controller, but the
Request stays pending and a late reply is still honored.
"""
import json
import threading
from typing import Any, Callable, Optional

from sleuth.orchestrator import errors
from sleuth.orchestrator.contracts import Mode, Request, SendOutcome

CALLBACK_ALIASES = ("onPluginMessage", "onPluginMessageReceived", "pluginMessageHandler")
CHANNEL_MESSAGE = "message"
CHANNEL_EVENT = "event:pluginMessage"
REQUEST_ID_KEYS = ("requestId", "request_id")

RESPONSE_TIMEOUT_MS = 20000


def _preview(raw: Any, limit: int = 150) -> str:
    if isinstance(raw, str):
        return f"len={len(raw)}: {raw[:limit]}"
    if isinstance(raw, dict):
        return "keys=" + ",".join(str(k) for k in raw.keys())
    return str(raw)[:limit]


class MessageBridge:
    def __init__(self, transport, status_store, timeout_ms: int = RESPONSE_TIMEOUT_MS):
        self.transport = transport
        self.status = status_store
        self.timeout_ms = timeout_ms
        self.active_request: Optional[Request] = None
        self.watchdog_fired = False
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._dispatch: Optional[Callable[[Any, str], Any]] = None
        self._on_watchdog: Optional[Callable[[Request], Any]] = None
        self._handlers = {alias: self._alias_handler(alias) for alias in CALLBACK_ALIASES}

    def connect(self, dispatch: Callable[[Any, str], Any], on_watchdog: Callable[[Request], Any]):
        self._dispatch = dispatch
        self._on_watchdog = on_watchdog

    # ── inbound ───────────────────────────────────────────────────────────────

    def register(self):
        """(Re-)bind every callback alias on the transport."""
        for alias, handler in self._handlers.items():
            self.transport.bind(alias, handler)

    def _alias_handler(self, alias: str):
        def handler(data):
            return self.deliver(data, channel=f"callback:{alias}")
        return handler

    def on_window_message(self, data: Any):
        """Generic message channel: string bodies are parsed as JSON when possible."""
        if isinstance(data, str) and data:
            try:
                parsed = json.loads(data)
            except ValueError:
                parsed = {"data": data}
            return self.deliver(parsed, CHANNEL_MESSAGE)
        elif data:
            return self.deliver(data, CHANNEL_MESSAGE)

    def on_plugin_event(self, event: Any):
        """Custom event channel: the payload sits under detail, then data, else the event itself."""
        value = event
        if isinstance(event, dict):
            value = event.get("detail") or event.get("data") or event
        return self.deliver(value, CHANNEL_EVENT)

    def deliver(self, raw: Any, channel: str):
        self.status.log(f"bridge: inbound via {channel} type={type(raw).__name__} {_preview(raw)}")
        if self._dispatch is None:
            self.status.log("bridge: no dispatcher connected, dropping")
            return None
        try:
            return self._dispatch(raw, channel)
        except Exception as e:
            self.status.log(f"bridge: dispatch error {type(e).__name__}: {e}")
            return None

    def matches(self, raw: Any, request: Request) -> bool:
        """False only when the reply names a different request id."""
        if not isinstance(raw, dict):
            return True
        for key in REQUEST_ID_KEYS:
            rid = raw.get(key)
            if rid is not None:
                return str(rid) == request.request_id
        return True

    # ── outbound ──────────────────────────────────────────────────────────────

    def send(self, prompt: str, image: str | None, mode: Mode, wants_voice: bool = False) -> SendOutcome:
        self.register()

        payload = {
            "message": prompt,
            "useLLM": True,
            "wantsR1Response": bool(wants_voice),
            "wantsJournalEntry": False,
        }
        if image:
            payload["imageBase64"] = image

        request = Request(mode=mode, prompt_len=len(prompt), image_len=len(image or ""))
        with self._lock:
            self._cancel_timer()
            self.active_request = request
            self.watchdog_fired = False

        self.status.log(
            f"bridge: posting request={request.request_id[:8]} mode={mode} "
            f"msg len={request.prompt_len} img len={request.image_len}"
        )
        try:
            self.transport.post_message(json.dumps(payload))
        except Exception as e:
            self.status.log(f"bridge: postMessage error {type(e).__name__}: {e}")
            with self._lock:
                if self.active_request is request:
                    self.active_request = None
            return SendOutcome(ok=False, error_code=errors.ERR_SEND_FAILED)

        with self._lock:
            # a synchronous transport may already have answered
            if self.active_request is request:
                self._timer = threading.Timer(self.timeout_ms / 1000.0, self._fire, args=(request,))
                self._timer.daemon = True
                self._timer.start()
        self.status.log("bridge: postMessage sent OK, waiting for reply")
        return SendOutcome(ok=True, request=request)

    def complete(self, request: Request):
        with self._lock:
            if self.active_request is request:
                self.active_request = None
            self._cancel_timer()
            self.watchdog_fired = False
        self.status.log(f"bridge: request={request.request_id[:8]} done dt={request.duration_ms()}ms")

    def discard(self, reason: str):
        with self._lock:
            request = self.active_request
            self.active_request = None
            self._cancel_timer()
            self.watchdog_fired = False
        if request is not None:
            self.status.log(f"bridge: discarded request={request.request_id[:8]} ({reason})")

    def clear_watchdog(self):
        with self._lock:
            self._cancel_timer()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, request: Request):
        with self._lock:
            if self.active_request is not request:
                return
            self._timer = None
            self.watchdog_fired = True
        self.status.log(f"bridge: WATCHDOG no response after {self.timeout_ms}ms")
        if self._on_watchdog is not None:
            self._on_watchdog(request)
