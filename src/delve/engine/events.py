from enum import Enum, auto


class GameEvent(Enum):
    """Events emitted by DungeonSession to notify UI or systems."""

    PLAYER_MOVED = auto()
    MOVE_BLOCKED = auto()
    FLOOR_CHANGED = auto()
    SESSION_EXITED = auto()


class SessionState(Enum):
    ENTERED = "entered"
    EXPLORING = "exploring"
    DESCENDING = "descending"
    EXITED = "exited"
