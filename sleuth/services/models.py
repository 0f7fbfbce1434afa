from pydantic import BaseModel
from typing import Any, Literal, Optional

from sleuth.orchestrator.states import UIStateName

class SettingsOut(BaseModel):
    voice: bool
    hotdog: bool

class ResultOut(BaseModel):
    name: str
    category: str
    category_visible: bool
    description: str
    fun_fact: str

class VerdictOut(BaseModel):
    hotdog: bool
    label: Literal["HOT DOG", "NOT HOT DOG"]
    reason: str

class PendingRequestOut(BaseModel):
    request_id: str
    mode: Literal["standard", "hotdog"]
    elapsed_ms: int

class StatusResponse(BaseModel):
    state: UIStateName
    surface: Optional[str] = None           # active screen; None while the hd overlay is up
    hd_overlay: bool = False
    result_page: int = 1
    settings: SettingsOut
    hotdog_row_visible: bool = False
    pending_request: Optional[PendingRequestOut] = None
    watchdog_fired: bool = False            # advisory only, never a cancellation
    toast: Optional[str] = None
    last_error: Optional[str] = None        # latest toast text, kept after it hides
    result: Optional[ResultOut] = None
    verdict: Optional[VerdictOut] = None
    logs: list[str] = []

class ActionResponse(BaseModel):
    ok: bool
    state: UIStateName
    error: Optional[str] = None

class CaptureResponse(BaseModel):
    ok: bool
    state: UIStateName
    request_id: Optional[str] = None
    error_code: Optional[str] = None

class InboundResponse(BaseModel):
    ok: bool                                # always true: noise is not an error
    accepted: bool
    state: UIStateName

class PluginEventRequest(BaseModel):
    detail: Optional[Any] = None
    data: Optional[Any] = None
