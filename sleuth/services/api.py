import asyncio
import json
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from dotenv import load_dotenv
from sleuth.services.models import (
    StatusResponse, ActionResponse, CaptureResponse, InboundResponse, PluginEventRequest,
)
from sleuth.services.status_store import StatusStore
from sleuth.orchestrator import errors
from sleuth.orchestrator.state_machine import SleuthController
from sleuth.adapters.bridge.message_bridge import CALLBACK_ALIASES, MessageBridge, RESPONSE_TIMEOUT_MS
from sleuth.adapters.indicator.base import BorderIndicator
from sleuth.adapters.storage.file_store import FileKVStore
from sleuth.adapters.storage.settings_store import SettingsStore

load_dotenv(dotenv_path=".env", override=False)

status = StatusStore()


def build_transport(status_store):
    # Values: mock | http | claude  (default: mock, the dev-mode stand-in for the host)
    name = os.getenv("TRANSPORT_ADAPTER", "mock").lower()
    if name == "http":
        from sleuth.adapters.transport.http_transport import HttpRelayTransport
        relay_url = os.getenv("HOST_RELAY_URL", "http://127.0.0.1:9000")
        status_store.log(f"transport: http -> {relay_url}")
        return HttpRelayTransport(status_store, base_url=relay_url)
    if name == "claude":
        from sleuth.adapters.transport.claude_transport import ClaudeTransport
        status_store.log("transport: claude")
        return ClaudeTransport(status_store)
    from sleuth.adapters.transport.mock_transport import MockTransport
    delay = float(os.getenv("MOCK_RESPONSE_DELAY_S", "1.8"))
    status_store.log(f"transport: mock (dev mode, delay={delay}s)")
    return MockTransport(status_store, delay_s=delay)


def build_camera(status_store):
    # Camera: CV2Camera unless CAMERA_ADAPTER=mock
    if os.getenv("CAMERA_ADAPTER", "cv2").lower() != "mock":
        from sleuth.adapters.camera.cv2_camera import CV2Camera
        status_store.log("camera: CV2Camera")
        return CV2Camera(status_store)
    from sleuth.adapters.camera.mock_camera import MockCamera
    status_store.log("camera: MockCamera")
    return MockCamera(status_store)


def build_indicator(status_store):
    border_url = os.getenv("BORDER_URL")
    if not border_url:
        return BorderIndicator()
    from sleuth.adapters.indicator.http_indicator import HttpBorderIndicator
    status_store.log(f"indicator: http -> {border_url}")
    return HttpBorderIndicator(status_store, base_url=border_url)


def build_controller(status_store) -> SleuthController:
    transport = build_transport(status_store)
    timeout_ms = int(os.getenv("RESPONSE_TIMEOUT_MS", str(RESPONSE_TIMEOUT_MS)))
    bridge = MessageBridge(transport, status_store, timeout_ms=timeout_ms)
    settings_store = SettingsStore(FileKVStore(), status_store)
    return SleuthController(
        camera=build_camera(status_store),
        bridge=bridge,
        settings_store=settings_store,
        status_store=status_store,
        indicator=build_indicator(status_store),
    )


controller = build_controller(status)


@asynccontextmanager
async def lifespan(app: FastAPI):
    status.log("sleuth: starting")
    await asyncio.to_thread(controller.start)
    yield
    status.log("sleuth: shutting down")
    controller.camera.release()


app = FastAPI(title="sleuth", lifespan=lifespan)


def _action(ok: bool, error: str | None = None) -> ActionResponse:
    return ActionResponse(ok=ok, state=controller.state, error=None if ok else (error or errors.ERR_ILLEGAL_STATE))


async def _read_body(request: Request):
    raw = await request.body()
    if not raw:
        return None
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


@app.get("/status", response_model=StatusResponse)
def get_status():
    return StatusResponse(**controller.snapshot(), last_error=status.last_error, logs=status.logs)


@app.get("/health")
def health():
    checks = {"api": True}
    checks["camera_adapter"] = type(controller.camera).__name__
    checks["transport_adapter"] = type(controller.bridge.transport).__name__
    checks["camera_ready"] = bool(getattr(controller.camera, "ready", False))

    transport = controller.bridge.transport
    if hasattr(transport, "get_status"):
        try:
            transport.get_status()
            checks["relay_reachable"] = True
        except Exception as e:
            checks["relay_reachable"] = False
            checks["relay_error"] = str(e)
    else:
        checks["relay_reachable"] = True

    checks["all_ok"] = checks["api"] and checks["relay_reachable"]
    return checks


# ===== Hardware + UI =====

@app.post("/hardware/{event}", response_model=ActionResponse)
def hardware_event(event: str):
    status.log(f"HARDWARE: {event}")
    handled = controller.hardware_event(event)
    return _action(handled, errors.ERR_UNKNOWN_EVENT)


@app.post("/capture", response_model=CaptureResponse)
def capture():
    outcome = controller.capture()
    return CaptureResponse(
        ok=outcome.ok,
        state=controller.state,
        request_id=outcome.request.request_id if outcome.request else None,
        error_code=outcome.error_code,
    )


@app.post("/ui/back", response_model=ActionResponse)
def ui_back():
    return _action(controller.back())


@app.post("/ui/settings/open", response_model=ActionResponse)
def ui_open_settings():
    return _action(controller.open_settings())


@app.post("/ui/settings/close", response_model=ActionResponse)
def ui_close_settings():
    return _action(controller.close_settings())


@app.post("/ui/toggle/voice", response_model=ActionResponse)
def ui_toggle_voice():
    return _action(controller.toggle_voice())


@app.post("/ui/toggle/hotdog", response_model=ActionResponse)
def ui_toggle_hotdog():
    return _action(controller.toggle_hotdog())


@app.post("/ui/credit", response_model=ActionResponse)
def ui_credit():
    return _action(controller.tap_credit())


# ===== Inbound channels (host → sleuth) =====

@app.post("/bridge/callback/{alias}", response_model=InboundResponse)
async def bridge_callback(alias: str, request: Request):
    """Host invoking a named callback. Only aliases the bridge has bound are callable."""
    data = await _read_body(request)
    transport = controller.bridge.transport
    if alias not in CALLBACK_ALIASES or alias not in transport.callbacks:
        status.log(f"BRIDGE: callback {alias} not bound")
        return InboundResponse(ok=True, accepted=False, state=controller.state)
    parsed = transport.invoke(alias, data)
    return InboundResponse(ok=True, accepted=parsed is not None, state=controller.state)


@app.post("/bridge/message", response_model=InboundResponse)
async def bridge_message(request: Request):
    """Generic message channel: body is either JSON or plain text."""
    raw = await request.body()
    parsed = controller.bridge.on_window_message(raw.decode("utf-8", errors="replace") if raw else None)
    return InboundResponse(ok=True, accepted=parsed is not None, state=controller.state)


@app.post("/bridge/event/pluginMessage", response_model=InboundResponse)
def bridge_event(req: PluginEventRequest):
    parsed = controller.bridge.on_plugin_event(req.model_dump(exclude_none=True))
    return InboundResponse(ok=True, accepted=parsed is not None, state=controller.state)
