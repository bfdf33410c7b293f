from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class Tile(Enum):
    """Terrain category of a grid position.

    - WALL: non-walkable obstacle
    - ROOM_FLOOR: walkable tile belonging to a generated room
    - CORRIDOR: walkable tile carved between rooms
    """

    WALL = "wall"
    ROOM_FLOOR = "room_floor"
    CORRIDOR = "corridor"

    @property
    def is_walkable(self) -> bool:
        return self is not Tile.WALL

    @property
    def glyph(self) -> str:
        """Single-character visualization for logs and debug dumps."""
        return {Tile.WALL: "#", Tile.ROOM_FLOOR: ".", Tile.CORRIDOR: ","}[self]


class CellType(Enum):
    """Semantic marker of a cell, independent of its tile.

    Every marker except EMPTY carries a one-shot trigger.
    """

    EMPTY = "empty"
    ENTRANCE = "entrance"
    STAIRS = "stairs"
    ENEMY = "enemy"
    TREASURE = "treasure"
    TRAP = "trap"
    SPRING = "spring"
    LORE = "lore"
    NPC = "npc"

    @property
    def has_trigger(self) -> bool:
        return self is not CellType.EMPTY

    @property
    def glyph(self) -> str:
        return {
            CellType.EMPTY: "",
            CellType.ENTRANCE: "<",
            CellType.STAIRS: ">",
            CellType.ENEMY: "!",
            CellType.TREASURE: "$",
            CellType.TRAP: "^",
            CellType.SPRING: "~",
            CellType.LORE: "?",
            CellType.NPC: "&",
        }[self]

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class Direction(Enum):
    """Absolute cardinal directions. Row 0 is the top of the grid, so NORTH is dy=-1."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @property
    def dx(self) -> int:
        return _DELTAS[self][0]

    @property
    def dy(self) -> int:
        return _DELTAS[self][1]

    @classmethod
    def from_key(cls, key: str) -> "Direction":
        """Parse 'n', 'north', 'N', ... into a Direction."""
        k = key.strip().lower()
        for d in cls:
            if k in (d.value, d.value[0]):
                return d
        raise ValueError(f"Unknown direction: {key!r}")


_DELTAS: Dict[Direction, Tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}


__all__ = ["Tile", "CellType", "Direction"]
