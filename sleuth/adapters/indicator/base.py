BORDER_HOTDOG = "#22c55e"
BORDER_NOT_HOTDOG = "#ef4444"
BORDER_IDLE = "#000000"

class BorderIndicator:
    """Device border tint. The default does nothing: hosts without the side-channel."""

    def update(self, color: str):
        pass
