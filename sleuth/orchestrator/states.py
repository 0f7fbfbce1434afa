from typing import Literal

UIStateName = Literal[
    "camera", "analyzing", "result", "settings",
    "hd-camera", "hd-analyzing", "hd-result",
]

CAMERA = "camera"
ANALYZING = "analyzing"
RESULT = "result"
SETTINGS = "settings"
HD_CAMERA = "hd-camera"
HD_ANALYZING = "hd-analyzing"
HD_RESULT = "hd-result"

ALL_STATES = (CAMERA, ANALYZING, RESULT, SETTINGS, HD_CAMERA, HD_ANALYZING, HD_RESULT)

CAMERA_STATES = (CAMERA, HD_CAMERA)
ANALYZING_STATES = (ANALYZING, HD_ANALYZING)
RESULT_STATES = (RESULT, HD_RESULT)

# Screen surface shown for each state. hd-camera has no screen of its own:
# it overlays controls on the live camera surface.
SURFACES = {
    CAMERA: "camera",
    ANALYZING: "analyzing",
    RESULT: "result",
    SETTINGS: "settings",
    HD_CAMERA: None,
    HD_ANALYZING: "hd-analyzing",
    HD_RESULT: "hd-result",
}

# Flow semantics:
# camera    -> analyzing    -> result    -> camera
# hd-camera -> hd-analyzing -> hd-result -> hd-camera
# either camera variant <-> settings (closing picks the variant from the hotdog flag)
