import time
from dataclasses import dataclass, field
from typing import Optional, List

TOAST_VISIBLE_S = 3.0

@dataclass
class StatusStore:
    last_error: Optional[str] = None
    toast_message: Optional[str] = None
    toast_at: float = 0.0
    logs: List[str] = field(default_factory=list)

    def log(self, msg: str):
        self.logs.append(msg)
        if len(self.logs) > 200:
            self.logs = self.logs[-200:]

    def show_error(self, msg: str):
        """User-visible toast; hides itself TOAST_VISIBLE_S after the last call."""
        self.last_error = msg
        self.toast_message = msg
        self.toast_at = time.time()
        self.log(f"toast: {msg}")

    @property
    def toast(self) -> Optional[str]:
        if self.toast_message and time.time() - self.toast_at < TOAST_VISIBLE_S:
            return self.toast_message
        return None
