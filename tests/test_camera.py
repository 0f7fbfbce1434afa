"""
Tests for frame capture: constraint cascade, the metadata/grace-period race,
and snapshot encoding. OpenCV devices are replaced by a fake VideoCapture.
"""
import base64
import time

import numpy as np
import pytest

from sleuth.adapters.camera import cv2_camera
from sleuth.adapters.camera.cv2_camera import CV2Camera
from sleuth.adapters.camera.mock_camera import MockCamera
from sleuth.services.status_store import StatusStore

from conftest import wait_until


class FakeCapture:
    """Opens only the device indices in `available`; yields frames when `frames` is True."""

    available = {0}
    frames = True
    opened = []

    def __init__(self, index):
        self.index = index
        self.props = {}
        FakeCapture.opened.append(index)

    def isOpened(self):
        return self.index in FakeCapture.available

    def set(self, prop, value):
        self.props[prop] = value

    def read(self):
        time.sleep(0.005)
        if FakeCapture.frames:
            return True, np.zeros((48, 64, 3), dtype=np.uint8)
        return False, None

    def release(self):
        pass


@pytest.fixture
def fake_cv2(monkeypatch):
    FakeCapture.available = {0}
    FakeCapture.frames = True
    FakeCapture.opened = []
    monkeypatch.setattr(cv2_camera.cv2, "VideoCapture", FakeCapture)
    return FakeCapture


def test_first_constraint_set_wins(fake_cv2):
    camera = CV2Camera(StatusStore(), index=0, grace_s=0.5)
    try:
        assert camera.start()
        assert fake_cv2.opened == [0]
        assert camera._cap.props[cv2_camera.cv2.CAP_PROP_FRAME_WIDTH] == 640
        assert camera.ready
    finally:
        camera.release()


def test_falls_through_to_any_camera(fake_cv2):
    fake_cv2.available = {2}
    status = StatusStore()
    camera = CV2Camera(status, index=0, grace_s=0.5)
    try:
        assert camera.start()
        # preferred device twice, then probing 0, 1, 2
        assert fake_cv2.opened == [0, 0, 0, 1, 2]
        assert any("constraints #0 failed" in line for line in status.logs)
    finally:
        camera.release()


def test_no_camera_shows_error_without_raising(fake_cv2):
    fake_cv2.available = set()
    status = StatusStore()
    camera = CV2Camera(status, index=0)
    assert camera.start() is False
    assert status.toast == "Camera not available"
    assert camera.capture_frame() is None


def test_metadata_timeout_forces_playback(fake_cv2):
    fake_cv2.frames = False
    status = StatusStore()
    camera = CV2Camera(status, index=0, grace_s=0.05)
    try:
        assert camera.start()
        assert any("metadata timeout, forcing playback" in line for line in status.logs)
        assert camera.capture_frame() is None

        # frames arriving later are picked up by the running playback loop
        fake_cv2.frames = True
        assert wait_until(lambda: camera.ready)
        assert camera.capture_frame() is not None
    finally:
        camera.release()


def test_capture_frame_is_jpeg_data_url(fake_cv2):
    camera = CV2Camera(StatusStore(), index=0, grace_s=0.5)
    try:
        camera.start()
        frame = camera.capture_frame()
        assert frame.startswith("data:image/jpeg;base64,")
        jpeg = base64.b64decode(frame.split(",", 1)[1])
        assert jpeg[:2] == b"\xff\xd8"
    finally:
        camera.release()


def test_mock_camera(tmp_path):
    status = StatusStore()
    camera = MockCamera(status, refs_dir=tmp_path)
    assert camera.start()
    assert camera.capture_frame().startswith("data:image/jpeg;base64,")

    (tmp_path / "mug.jpg").write_bytes(b"\xff\xd8mug\xff\xd9")
    frame = camera.capture_frame()
    assert base64.b64decode(frame.split(",", 1)[1]) == b"\xff\xd8mug\xff\xd9"

    camera.ready = False
    assert camera.capture_frame() is None
