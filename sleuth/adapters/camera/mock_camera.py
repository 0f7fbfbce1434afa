"""Mock camera: serves a random JPEG from refs/ (or a tiny placeholder) for dev and tests."""
import random
from pathlib import Path
from sleuth.adapters.camera.base import CameraAdapter, to_data_url

REFS_DIR = Path(__file__).parent / "refs"

# Smallest byte run that still starts and ends like a JPEG
PLACEHOLDER_JPEG = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"

class MockCamera(CameraAdapter):
    def __init__(self, status_store, ready: bool = True, refs_dir: Path | None = None):
        self.status = status_store
        self.ready = ready
        self.started = False
        self.refs_dir = refs_dir or REFS_DIR

    def start(self) -> bool:
        self.started = True
        self.status.log("mock_camera: started")
        return True

    def capture_frame(self) -> str | None:
        if not self.ready:
            self.status.log("mock_camera: no frame yet")
            return None
        jpegs = list(self.refs_dir.glob("*.jpg")) if self.refs_dir.is_dir() else []
        if not jpegs:
            return to_data_url(PLACEHOLDER_JPEG)
        chosen = random.choice(jpegs)
        self.status.log(f"mock_camera: serving {chosen.name}")
        return to_data_url(chosen.read_bytes())

    def resume(self):
        pass

    def release(self):
        self.started = False
