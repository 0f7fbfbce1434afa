"""
OpenCV webcam capture adapter.
CAMERA_INDEX env var (default 0) selects the rear-facing device.

start() walks CONSTRAINTS from most to least specific. OpenCV has no facing
mode, so "environment" means the configured device; the last set probes any
device index. Once a device opens, two strategies race to start playback:
  1. wait for the first decoded frame ("metadata"), then play
  2. after METADATA_GRACE_S, play regardless
Playback is idempotent, so both may fire.
"""
import os
import threading
import time
import cv2
from sleuth.adapters.camera.base import CameraAdapter, to_data_url
from sleuth.orchestrator import errors

CONSTRAINTS = [
    {"facing": "environment", "width": 640, "height": 480},
    {"facing": "environment"},
    {},  # any camera
]
PROBE_INDICES = range(4)
METADATA_GRACE_S = 2.0
JPEG_QUALITY = 80

class CV2Camera(CameraAdapter):
    def __init__(self, status_store, index: int | None = None, grace_s: float = METADATA_GRACE_S):
        self.status = status_store
        self._index = index if index is not None else int(os.getenv("CAMERA_INDEX", "0"))
        self._grace_s = grace_s
        self._cap = None
        self._cap_lock = threading.Lock()
        self._frame = None
        self._frame_lock = threading.Lock()
        self._reader = None
        self._play_lock = threading.Lock()
        self._stop = threading.Event()

    @property
    def ready(self) -> bool:
        return self._frame is not None

    def start(self) -> bool:
        for i, constraints in enumerate(CONSTRAINTS):
            self.status.log(f"cv2_camera: trying constraints #{i} {constraints}")
            try:
                cap = self._open(constraints)
            except cv2.error as e:
                self.status.log(f"cv2_camera: constraints #{i} failed: {e}")
                continue
            if cap is None:
                self.status.log(f"cv2_camera: constraints #{i} failed: no device")
                continue
            self._cap = cap
            self._attach()
            self.status.log(f"cv2_camera: camera ready, ready={self.ready}")
            return True

        self.status.log("cv2_camera: all constraints failed")
        self.status.show_error(errors.MESSAGES[errors.ERR_CAMERA_UNAVAILABLE])
        return False

    def _open(self, constraints: dict):
        indices = [self._index] if constraints.get("facing") else list(PROBE_INDICES)
        for idx in indices:
            cap = cv2.VideoCapture(idx)
            if not cap.isOpened():
                cap.release()
                continue
            if "width" in constraints:
                cap.set(cv2.CAP_PROP_FRAME_WIDTH, constraints["width"])
                cap.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints["height"])
            self.status.log(f"cv2_camera: opened device {idx}")
            return cap
        return None

    def _attach(self):
        metadata = threading.Event()
        played = threading.Event()

        def wait_metadata():
            with self._cap_lock:
                ok, frame = self._cap.read()
            if not ok or frame is None:
                self.status.log("cv2_camera: metadata read failed")
                return
            self._store(frame)
            metadata.set()
            h, w = frame.shape[:2]
            self.status.log(f"cv2_camera: metadata fired, w={w} h={h}")
            self._play()
            played.set()

        threading.Thread(target=wait_metadata, daemon=True).start()

        if not played.wait(self._grace_s) and not metadata.is_set():
            self.status.log("cv2_camera: metadata timeout, forcing playback")
            self._play()

    def _play(self):
        with self._play_lock:
            if self._reader is not None and self._reader.is_alive():
                return
            self._stop.clear()
            self._reader = threading.Thread(target=self._read_loop, daemon=True)
            self._reader.start()
            self.status.log("cv2_camera: playback started")

    def _read_loop(self):
        while not self._stop.is_set():
            with self._cap_lock:
                if self._cap is None:
                    return
                ok, frame = self._cap.read()
            if ok and frame is not None:
                self._store(frame)
            else:
                time.sleep(0.05)

    def _store(self, frame):
        with self._frame_lock:
            self._frame = frame

    def capture_frame(self) -> str | None:
        with self._frame_lock:
            frame = self._frame
        if frame is None or frame.shape[0] == 0 or frame.shape[1] == 0:
            return None
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, JPEG_QUALITY])
        if not ok:
            self.status.log("cv2_camera: jpeg encode failed")
            return None
        return to_data_url(bytes(buf))

    def resume(self):
        if self._cap is not None and (self._reader is None or not self._reader.is_alive()):
            self.status.log("cv2_camera: resuming playback on user gesture")
            self._play()

    def release(self):
        self._stop.set()
        if self._reader is not None:
            self._reader.join(timeout=1.0)
        with self._cap_lock:
            if self._cap is not None and self._cap.isOpened():
                self._cap.release()
            self._cap = None
