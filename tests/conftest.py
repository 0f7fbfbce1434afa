"""
Shared fixtures: a controller wired to in-memory adapters.
"""
import os
import time

# api.py wires its adapters from the environment at import time
os.environ.setdefault("CAMERA_ADAPTER", "mock")
os.environ.setdefault("TRANSPORT_ADAPTER", "mock")
os.environ.setdefault("MOCK_RESPONSE_DELAY_S", "0")

import pytest

from sleuth.adapters.bridge.message_bridge import MessageBridge
from sleuth.adapters.camera.mock_camera import MockCamera
from sleuth.adapters.indicator.base import BorderIndicator
from sleuth.adapters.storage.memory_store import MemoryKVStore
from sleuth.adapters.storage.settings_store import SettingsStore
from sleuth.adapters.transport.base import HostTransport
from sleuth.adapters.transport.mock_transport import MockTransport
from sleuth.orchestrator.state_machine import SleuthController
from sleuth.services.status_store import StatusStore

MUG_REPLY = (
    '{"name":"Mug","category":"Kitchenware","description":"A drinking vessel.",'
    '"fun_fact":"Ceramic mugs date back millennia."}'
)
STAPLER_REPLY = '{"result":"NOT HOT DOG","reason":"It\'s a stapler."}'


class SilentTransport(HostTransport):
    """Accepts every post and never answers."""

    def __init__(self):
        super().__init__()
        self.sent = []

    def post_message(self, payload: str):
        self.sent.append(payload)


class FailingTransport(HostTransport):
    def post_message(self, payload: str):
        raise ConnectionError("host bridge unavailable")


class RecordingIndicator(BorderIndicator):
    def __init__(self):
        self.colors = []

    def update(self, color: str):
        self.colors.append(color)


def wait_until(predicate, timeout_s: float = 2.0) -> bool:
    deadline = time.time() + timeout_s
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def status():
    return StatusStore()


@pytest.fixture
def kv():
    return MemoryKVStore()


@pytest.fixture
def indicator():
    return RecordingIndicator()


@pytest.fixture
def make_controller(status, kv, indicator):
    """Build a started controller; transport defaults to the instant mock reply."""

    def _make(transport=None, camera=None, timeout_ms: int = 20000, start: bool = True):
        transport = transport if transport is not None else MockTransport(status, delay_s=0)
        camera = camera if camera is not None else MockCamera(status)
        bridge = MessageBridge(transport, status, timeout_ms=timeout_ms)
        controller = SleuthController(
            camera=camera,
            bridge=bridge,
            settings_store=SettingsStore(kv, status),
            status_store=status,
            indicator=indicator,
        )
        if start:
            controller.start()
        return controller

    return _make
