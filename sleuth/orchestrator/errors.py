ERR_CAMERA_UNAVAILABLE = "CAMERA_UNAVAILABLE"
ERR_CAMERA_NOT_READY = "CAMERA_NOT_READY"
ERR_SEND_FAILED = "SEND_FAILED"
ERR_ILLEGAL_STATE = "ILLEGAL_STATE"
ERR_UNKNOWN_EVENT = "UNKNOWN_EVENT"

# Toast text shown to the user for each failure path
MESSAGES: dict[str, str] = {
    ERR_CAMERA_UNAVAILABLE: "Camera not available",
    ERR_CAMERA_NOT_READY: "Camera not ready — try again",
    ERR_SEND_FAILED: "Request failed — try again",
}

WATCHDOG_NOTICE = "No response yet — still waiting"
