"""
Payload normalizer: turn whatever the host transport delivered into a typed result.

The host's reply shape is not fixed. A usable answer may arrive as:
  - plain text ("NOT HOT DOG, it's a stapler")
  - JSON text, possibly inside ```json fences
  - an object nesting the real payload under a wrapper key (data/message/response/...)
  - an array whose first usable element carries the payload

Extraction is bounded to MAX_DEPTH levels so malformed or self-similar input always
terminates. Everything here is pure: no logging, no state.
"""
import json
import re
from typing import Any, Optional

from sleuth.orchestrator.contracts import (
    HotdogResult, MODE_HOTDOG, Mode, ResultPayload, StandardResult,
)

MAX_DEPTH = 5

RESULT_FIELDS = ("name", "category", "description", "fun_fact", "reason", "result")
WRAPPER_KEYS = ("data", "message", "response", "payload", "result", "output", "content", "text")
TEXT_KEYS = ("data", "message", "response", "output", "content", "text")

REASON_MAX_CHARS = 200
REASON_PLACEHOLDER = "Unable to classify."

_FENCE_OPEN_JSON = re.compile(r"^```json\s*", re.IGNORECASE)
_FENCE_OPEN = re.compile(r"^```\s*")
_FENCE_CLOSE = re.compile(r"```\s*$")


def clean_json_text(raw: Any) -> str:
    text = "" if raw is None else str(raw)
    text = _FENCE_OPEN_JSON.sub("", text)
    text = _FENCE_OPEN.sub("", text)
    text = _FENCE_CLOSE.sub("", text)
    return text.strip()


def try_parse_json(raw: Any) -> Any:
    """Parse JSON text, falling back to the outermost {...} span. None when nothing parses."""
    if not isinstance(raw, str):
        return None
    cleaned = clean_json_text(raw)
    if not cleaned:
        return None

    try:
        return json.loads(cleaned)
    except ValueError:
        pass

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(cleaned[start:end + 1])
        except ValueError:
            return None
    return None


def is_result_payload(value: Any) -> bool:
    return isinstance(value, dict) and any(isinstance(value.get(k), str) for k in RESULT_FIELDS)


def extract_result_payload(value: Any, depth: int = 0) -> Optional[dict]:
    if depth > MAX_DEPTH or value is None:
        return None

    if isinstance(value, str):
        parsed = try_parse_json(value)
        return extract_result_payload(parsed, depth + 1) if parsed is not None else None

    if isinstance(value, list):
        for item in value:
            nested = extract_result_payload(item, depth + 1)
            if nested:
                return nested
        return None

    if not isinstance(value, dict):
        return None
    if is_result_payload(value):
        return value

    for key in WRAPPER_KEYS:
        if key in value:
            nested = extract_result_payload(value[key], depth + 1)
            if nested:
                return nested
    return None


def extract_plain_text(value: Any, depth: int = 0) -> str:
    if depth > MAX_DEPTH or value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if not isinstance(value, dict):
        return ""

    for key in TEXT_KEYS:
        v = value.get(key)
        if isinstance(v, str) and v.strip():
            return v.strip()
    for key in TEXT_KEYS:
        v = value.get(key)
        if isinstance(v, dict):
            nested = extract_plain_text(v, depth + 1)
            if nested:
                return nested
    return ""


def hotdog_verdict(text: Any) -> bool:
    upper = ("" if text is None else str(text)).upper()
    return "HOT DOG" in upper and "NOT HOT DOG" not in upper


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return value if isinstance(value, str) else str(value)


def to_standard(payload: dict) -> StandardResult:
    return StandardResult(
        name=_text(payload.get("name"), "Unknown"),
        category=_text(payload.get("category")),
        description=_text(payload.get("description")),
        fun_fact=_text(payload.get("fun_fact")),
    )


def to_hotdog(payload: dict) -> HotdogResult:
    return HotdogResult(
        verdict=hotdog_verdict(payload.get("result")),
        reason=_text(payload.get("reason")),
    )


def _stringify(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).lower() if isinstance(value, bool) else str(value)


def _is_json_document(text: str) -> bool:
    try:
        return isinstance(json.loads(clean_json_text(text)), (dict, list))
    except ValueError:
        return False


def normalize(value: Any, mode: Mode) -> Optional[ResultPayload]:
    """Extract a typed result under `mode`, or None when the value is noise."""
    payload = extract_result_payload(value)
    if payload is not None:
        return to_hotdog(payload) if mode == MODE_HOTDOG else to_standard(payload)

    text = extract_plain_text(value)

    if mode == MODE_HOTDOG:
        if "HOT DOG" not in text.upper():
            return None
        reason = text if len(text) <= REASON_MAX_CHARS else REASON_PLACEHOLDER
        return HotdogResult(verdict=hotdog_verdict(text), reason=reason)

    # structured values that carry no result are noise; only bare scalars are stringified
    if not text and not isinstance(value, str):
        text = _stringify(value)
    if not text or _is_json_document(text):
        return None
    return StandardResult(name="Unknown", category="", description=text, fun_fact="")
