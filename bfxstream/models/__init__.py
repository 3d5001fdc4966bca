from .events import InfoEvent, PongEvent, SubscribedEvent, UnsubscribedEvent

__all__ = [
    "InfoEvent",
    "PongEvent",
    "SubscribedEvent",
    "UnsubscribedEvent",
]
