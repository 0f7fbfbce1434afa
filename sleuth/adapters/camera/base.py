import base64
from abc import ABC, abstractmethod

DATA_URL_PREFIX = "data:image/jpeg;base64,"


def to_data_url(jpeg_bytes: bytes) -> str:
    return DATA_URL_PREFIX + base64.standard_b64encode(jpeg_bytes).decode("utf-8")


class CameraAdapter(ABC):
    @abstractmethod
    def start(self) -> bool:
        """Acquire the video stream. Never raises; False when no camera could be opened."""
        ...

    @abstractmethod
    def capture_frame(self) -> str | None:
        """Snapshot the current frame as a JPEG data URL, or None if no frame is decoded yet."""
        ...

    def resume(self):
        """Restart playback if it stalled (first user interaction)."""

    def release(self):
        pass
