import time
import uuid
from dataclasses import dataclass, field
from typing import Optional, Literal, Union

Mode = Literal["standard", "hotdog"]

MODE_STANDARD = "standard"
MODE_HOTDOG = "hotdog"

@dataclass
class Request:
    mode: Mode
    prompt_len: int = 0        # diagnostic only
    image_len: int = 0         # diagnostic only
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    started_at: float = field(default_factory=time.time)

    def duration_ms(self) -> int:
        return int((time.time() - self.started_at) * 1000)

@dataclass
class StandardResult:
    name: str = "Unknown"
    category: str = ""
    description: str = ""
    fun_fact: str = ""

@dataclass
class HotdogResult:
    verdict: bool
    reason: str = ""

    @property
    def label(self) -> str:
        return "HOT DOG" if self.verdict else "NOT HOT DOG"

ResultPayload = Union[StandardResult, HotdogResult]

@dataclass
class Settings:
    voice: bool = False
    hotdog: bool = False

@dataclass
class SendOutcome:
    ok: bool
    request: Optional[Request] = None
    error_code: Optional[str] = None
