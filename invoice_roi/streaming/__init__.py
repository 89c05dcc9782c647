from .events import NotificationType, SSEEvent
from .manager import StreamManager

__all__ = ["NotificationType", "SSEEvent", "StreamManager"]
