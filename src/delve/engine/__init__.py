from .events import GameEvent, SessionState
from .session import DungeonSession

__all__ = ["DungeonSession", "GameEvent", "SessionState"]
