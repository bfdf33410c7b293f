from .bus import Event, EventBus
from .types import EventType

__all__ = ["Event", "EventBus", "EventType"]
