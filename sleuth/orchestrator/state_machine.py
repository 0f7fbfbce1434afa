import threading
from typing import Any, Optional

from sleuth.adapters.indicator.base import (
    BorderIndicator, BORDER_HOTDOG, BORDER_IDLE, BORDER_NOT_HOTDOG,
)
from sleuth.orchestrator import errors, normalizer, states
from sleuth.orchestrator.contracts import (
    HotdogResult, MODE_HOTDOG, MODE_STANDARD, Request, ResultPayload, SendOutcome,
    Settings, StandardResult,
)
from sleuth.orchestrator.prompts import PROMPTS

CREDIT_TAPS_TO_UNLOCK = 3

SURFACE_NAMES = tuple(s for s in states.SURFACES.values() if s)


class SleuthController:
    """Single owner of the UI context: which screen is up and which actions are legal.

    Every entry point (hardware events, UI actions, inbound replies, watchdog) takes
    the same re-entrant lock, so transitions never interleave.
    """

    def __init__(self, camera, bridge, settings_store, status_store, indicator: BorderIndicator | None = None):
        self.camera = camera
        self.bridge = bridge
        self.store = settings_store
        self.status = status_store
        self.indicator = indicator or BorderIndicator()

        self.state = states.CAMERA
        self.surfaces = {name: name == "camera" for name in SURFACE_NAMES}
        self.hd_overlay = False
        self.result_page = 1       # 1 = description, 2 = fun fact
        self.credit_clicks = 0
        self.hotdog_row_visible = False
        self.settings = Settings()
        self.last_result: Optional[ResultPayload] = None
        self._lock = threading.RLock()

        bridge.connect(self.on_inbound, self.on_watchdog)

    def start(self):
        with self._lock:
            self.settings = self.store.load()
            if self.settings.hotdog:
                self.hotdog_row_visible = True
            self.bridge.register()
            self.set_state(self._camera_state())
        # may block up to the metadata grace period
        self.camera.start()

    # ── transitions ──────────────────────────────────────────────────────────

    def set_state(self, new_state: str):
        if new_state not in states.ALL_STATES:
            raise ValueError(f"unknown state {new_state!r}")
        with self._lock:
            prev = self.state
            self.state = new_state

            if new_state not in states.ANALYZING_STATES:
                self.bridge.clear_watchdog()

            for name in self.surfaces:
                self.surfaces[name] = False
            self.hd_overlay = False

            if new_state != states.HD_RESULT:
                self.indicator.update(BORDER_IDLE)

            surface = states.SURFACES[new_state]
            if surface is None:
                # video shows through, only the hot dog controls are overlaid
                self.hd_overlay = True
            else:
                self.surfaces[surface] = True

            if prev != new_state:
                self.status.log(f"state: {prev} -> {new_state}")

    def _camera_state(self) -> str:
        return states.HD_CAMERA if self.settings.hotdog else states.CAMERA

    def return_to_camera(self):
        self.set_state(self._camera_state())

    # ── capture flow ─────────────────────────────────────────────────────────

    def capture(self) -> SendOutcome:
        with self._lock:
            if self.state not in states.CAMERA_STATES:
                self.status.log(f"capture: ignored while state={self.state}")
                return SendOutcome(ok=False, error_code=errors.ERR_ILLEGAL_STATE)

            is_hotdog = self.state == states.HD_CAMERA
            mode = MODE_HOTDOG if is_hotdog else MODE_STANDARD
            back = states.HD_CAMERA if is_hotdog else states.CAMERA

            if self.bridge.active_request is not None:
                self.bridge.discard("superseded by new capture")

            self.set_state(states.HD_ANALYZING if is_hotdog else states.ANALYZING)

            image = self.camera.capture_frame()
            if not image:
                self.status.show_error(errors.MESSAGES[errors.ERR_CAMERA_NOT_READY])
                self.set_state(back)
                return SendOutcome(ok=False, error_code=errors.ERR_CAMERA_NOT_READY)

            outcome = self.bridge.send(PROMPTS[mode], image, mode, wants_voice=self.settings.voice)
            if not outcome.ok:
                self.status.show_error(errors.MESSAGES[errors.ERR_SEND_FAILED])
                self.set_state(back)
            return outcome

    def on_inbound(self, raw: Any, channel: str = "direct") -> Optional[ResultPayload]:
        with self._lock:
            request = self.bridge.active_request
            analyzing = self.state in states.ANALYZING_STATES
            # a pending reply may land on a camera screen, never over settings or a result
            if not analyzing and (request is None or self.state not in states.CAMERA_STATES):
                self.status.log(f"inbound: ignoring plugin message while state={self.state}")
                return None
            if request is not None and not self.bridge.matches(raw, request):
                self.status.log(f"inbound: ignoring reply for another request ({channel})")
                return None

            if request is not None:
                mode = request.mode
            else:
                mode = MODE_HOTDOG if self.state == states.HD_ANALYZING else MODE_STANDARD

            parsed = normalizer.normalize(raw, mode)
            if parsed is None:
                self.status.log(f"inbound: ignored plugin message (no parseable result payload) via {channel}")
                return None

            if request is not None:
                self.bridge.complete(request)
            else:
                self.bridge.clear_watchdog()

            if isinstance(parsed, HotdogResult):
                self._show_hotdog_result(parsed)
            else:
                self._show_result(parsed)
            return parsed

    def on_watchdog(self, request: Request):
        with self._lock:
            if self.bridge.active_request is not request:
                return
            if self.state in states.ANALYZING_STATES:
                self.status.show_error(errors.WATCHDOG_NOTICE)

    # ── results ──────────────────────────────────────────────────────────────

    def _show_result(self, result: StandardResult):
        self.last_result = result
        self.status.log(f"result: name={result.name} category={result.category}")
        self.show_result_page(1)
        self.set_state(states.RESULT)

    def _show_hotdog_result(self, result: HotdogResult):
        self.last_result = result
        self.status.log(f"result: {result.label}")
        self.indicator.update(BORDER_HOTDOG if result.verdict else BORDER_NOT_HOTDOG)
        self.set_state(states.HD_RESULT)

    def show_result_page(self, page: int):
        self.result_page = page

    # ── hardware events ──────────────────────────────────────────────────────

    def hardware_event(self, name: str) -> bool:
        handler = {
            "sideClick": self.side_click,
            "longPressEnd": self.long_press_end,
            "scrollUp": self.scroll_up,
            "scrollDown": self.scroll_down,
        }.get(name)
        if handler is None:
            self.status.log(f"hardware: unknown event {name}")
            return False
        self.camera.resume()
        handler()
        return True

    def side_click(self):
        with self._lock:
            if self.state in states.CAMERA_STATES:
                self.capture()
            elif self.state in states.RESULT_STATES:
                self.return_to_camera()
            elif self.state == states.SETTINGS:
                self.close_settings()

    def long_press_end(self):
        with self._lock:
            if self.state in states.RESULT_STATES:
                self.return_to_camera()
            elif self.state == states.SETTINGS:
                self.close_settings()
            elif self.state in states.ANALYZING_STATES and self.bridge.watchdog_fired:
                # still pending: a late reply can bring the result screen back
                self.set_state(states.HD_CAMERA if self.state == states.HD_ANALYZING else states.CAMERA)

    def scroll_up(self):
        with self._lock:
            if self.state == states.RESULT and self.result_page == 2:
                self.show_result_page(1)

    def scroll_down(self):
        with self._lock:
            if self.state != states.RESULT:
                return
            if self.result_page == 1:
                self.show_result_page(2)
            else:
                self.return_to_camera()

    # ── UI actions ───────────────────────────────────────────────────────────

    def back(self) -> bool:
        with self._lock:
            if self.state not in states.RESULT_STATES:
                return False
            self.return_to_camera()
            return True

    def open_settings(self) -> bool:
        with self._lock:
            if self.state not in states.CAMERA_STATES:
                return False
            self.set_state(states.SETTINGS)
            return True

    def close_settings(self) -> bool:
        with self._lock:
            if self.state != states.SETTINGS:
                return False
            # hot dog mode changes only take effect here
            self.return_to_camera()
            return True

    def toggle_voice(self) -> bool:
        with self._lock:
            if self.state != states.SETTINGS:
                return False
            self.settings.voice = not self.settings.voice
            self.store.save(self.settings)
            self.status.log(f"settings: voice={self.settings.voice}")
            return True

    def toggle_hotdog(self) -> bool:
        with self._lock:
            if self.state != states.SETTINGS or not self.hotdog_row_visible:
                return False
            self.settings.hotdog = not self.settings.hotdog
            self.store.save(self.settings)
            self.status.log(f"settings: hotdog={self.settings.hotdog}")
            return True

    def tap_credit(self) -> bool:
        with self._lock:
            if self.state != states.SETTINGS:
                return False
            self.credit_clicks += 1
            if self.credit_clicks >= CREDIT_TAPS_TO_UNLOCK:
                self.credit_clicks = 0
                self.hotdog_row_visible = True
                self.status.log("settings: hot dog row unlocked")
            return True

    # ── render model ─────────────────────────────────────────────────────────

    def snapshot(self) -> dict:
        with self._lock:
            active = [name for name, on in self.surfaces.items() if on]
            request = self.bridge.active_request
            snap = {
                "state": self.state,
                "surface": active[0] if active else None,
                "hd_overlay": self.hd_overlay,
                "result_page": self.result_page,
                "settings": {"voice": self.settings.voice, "hotdog": self.settings.hotdog},
                "hotdog_row_visible": self.hotdog_row_visible,
                "pending_request": None,
                "watchdog_fired": self.bridge.watchdog_fired,
                "toast": self.status.toast,
                "result": None,
                "verdict": None,
            }
            if request is not None:
                snap["pending_request"] = {
                    "request_id": request.request_id,
                    "mode": request.mode,
                    "elapsed_ms": request.duration_ms(),
                }
            if isinstance(self.last_result, StandardResult):
                snap["result"] = {
                    "name": self.last_result.name,
                    "category": self.last_result.category,
                    "category_visible": bool(self.last_result.category),
                    "description": self.last_result.description,
                    "fun_fact": self.last_result.fun_fact,
                }
            elif isinstance(self.last_result, HotdogResult):
                snap["verdict"] = {
                    "hotdog": self.last_result.verdict,
                    "label": self.last_result.label,
                    "reason": self.last_result.reason,
                }
            return snap
