"""
Tests for the message bridge on its own: alias registration, inbound channel
normalization, request bookkeeping and the advisory watchdog.
"""
import json

import pytest

from sleuth.adapters.bridge.message_bridge import CALLBACK_ALIASES, MessageBridge
from sleuth.orchestrator import errors
from sleuth.orchestrator.contracts import MODE_HOTDOG, MODE_STANDARD

from conftest import FailingTransport, SilentTransport, wait_until


@pytest.fixture
def transport():
    return SilentTransport()


@pytest.fixture
def received():
    return []


@pytest.fixture
def bridge(transport, status, received):
    b = MessageBridge(transport, status, timeout_ms=20000)
    b.connect(lambda raw, channel: received.append((raw, channel)) or raw, lambda request: None)
    return b


def test_register_binds_every_alias(bridge, transport):
    bridge.register()
    assert set(CALLBACK_ALIASES) <= set(transport.callbacks)


def test_send_rebinds_replaced_handlers(bridge, transport, received):
    bridge.register()
    transport.callbacks["onPluginMessage"] = lambda data: None  # host overwrote it
    del transport.callbacks["pluginMessageHandler"]             # host dropped it

    bridge.send("prompt", "data:image/jpeg;base64,AAAA", MODE_STANDARD)
    transport.invoke("onPluginMessage", {"data": "x"})
    transport.invoke("pluginMessageHandler", {"data": "y"})
    assert [channel for _, channel in received] == [
        "callback:onPluginMessage", "callback:pluginMessageHandler",
    ]


def test_send_payload(bridge, transport):
    bridge.send("What is this?", "data:image/jpeg;base64,AAAA", MODE_HOTDOG, wants_voice=True)
    body = json.loads(transport.sent[-1])
    assert body == {
        "message": "What is this?",
        "useLLM": True,
        "wantsR1Response": True,
        "wantsJournalEntry": False,
        "imageBase64": "data:image/jpeg;base64,AAAA",
    }


def test_send_without_image_omits_field(bridge, transport):
    bridge.send("hello", None, MODE_STANDARD)
    assert "imageBase64" not in json.loads(transport.sent[-1])


def test_send_tracks_one_request(bridge):
    outcome = bridge.send("p", "img", MODE_HOTDOG)
    request = outcome.request
    assert outcome.ok
    assert bridge.active_request is request
    assert request.mode == MODE_HOTDOG
    assert request.prompt_len == 1
    assert request.image_len == 3

    bridge.complete(request)
    assert bridge.active_request is None
    assert bridge._timer is None


def test_send_failure_discards_request(status):
    bridge = MessageBridge(FailingTransport(), status)
    outcome = bridge.send("p", "img", MODE_STANDARD)
    assert not outcome.ok
    assert outcome.error_code == errors.ERR_SEND_FAILED
    assert bridge.active_request is None
    assert bridge._timer is None


def test_window_message_parses_json_strings(bridge, received):
    bridge.on_window_message('{"data": "hello"}')
    bridge.on_window_message("plain words")
    bridge.on_window_message({"message": "already an object"})
    bridge.on_window_message("")
    assert [raw for raw, _ in received] == [
        {"data": "hello"},
        {"data": "plain words"},
        {"message": "already an object"},
    ]


def test_plugin_event_unwraps_detail_then_data(bridge, received):
    bridge.on_plugin_event({"detail": {"name": "Mug"}})
    bridge.on_plugin_event({"data": "text"})
    bridge.on_plugin_event({"other": 1})
    assert [raw for raw, _ in received] == [{"name": "Mug"}, "text", {"other": 1}]


def test_dispatch_errors_stay_at_the_boundary(transport, status):
    bridge = MessageBridge(transport, status)

    def explode(raw, channel):
        raise RuntimeError("boom")

    bridge.connect(explode, lambda request: None)
    assert bridge.deliver({"data": "x"}, "message") is None
    assert any("dispatch error RuntimeError: boom" in line for line in status.logs)


def test_matches_only_rejects_other_request_ids(bridge):
    request = bridge.send("p", "img", MODE_STANDARD).request
    assert bridge.matches({"data": "x"}, request)
    assert bridge.matches("text", request)
    assert bridge.matches({"request_id": request.request_id}, request)
    assert not bridge.matches({"requestId": "someone-else"}, request)


def test_watchdog_fires_without_cancelling(transport, status):
    fired = []
    bridge = MessageBridge(transport, status, timeout_ms=20)
    bridge.connect(lambda raw, channel: None, fired.append)
    request = bridge.send("p", "img", MODE_STANDARD).request

    assert wait_until(lambda: fired == [request])
    assert bridge.watchdog_fired
    assert bridge.active_request is request


def test_watchdog_does_not_fire_after_completion(transport, status):
    fired = []
    bridge = MessageBridge(transport, status, timeout_ms=20)
    bridge.connect(lambda raw, channel: None, fired.append)
    request = bridge.send("p", "img", MODE_STANDARD).request
    bridge.complete(request)

    assert not wait_until(lambda: fired, timeout_s=0.2)
    assert not bridge.watchdog_fired


def test_discard_drops_pending_request(bridge):
    bridge.send("p", "img", MODE_STANDARD)
    bridge.discard("superseded")
    assert bridge.active_request is None
    assert bridge._timer is None
