from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Set, Tuple

from ..settings import VisibilitySettings
from .map import DungeonMap

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]


class TileVisibility(str, Enum):
    UNDISCOVERED = "undiscovered"  # never revealed; fully dark
    REVEALED = "revealed"          # revealed earlier but not in the current visible set; dim
    VISIBLE = "visible"            # in the current visible set; full brightness


class VisibilityEngine:
    """
    Room-aware visibility over a DungeonMap.

    - Inside a room: the whole room plus its one-tile border is visible.
    - In a corridor: a square of Chebyshev radius `corridor_radius` around the player.

    No occlusion is modeled. Everything returned is also marked revealed on
    the map, so the auto-map only ever grows during a floor.
    """

    def __init__(self, settings: Optional[VisibilitySettings] = None) -> None:
        self.settings = settings or VisibilitySettings()

    def compute_visible(self, dmap: DungeonMap) -> Set[Coord]:
        p = dmap.player
        room_id = dmap.cell(p.x, p.y).room_id
        if room_id is not None:
            visible = self._room_with_border(dmap, room_id)
        else:
            visible = self._corridor_square(dmap, p.x, p.y)

        for (x, y) in visible:
            dmap.grid[y][x].revealed = True

        logger.debug("Visible set at (%d,%d): %d tiles (room=%s)", p.x, p.y, len(visible), room_id)
        return visible

    def reveal_room(self, dmap: DungeonMap, room_id: int) -> None:
        """Mark every tile of a room revealed. Border walls are left to compute_visible."""
        for p in dmap.room_tiles(room_id):
            dmap.grid[p.y][p.x].revealed = True

    def _room_with_border(self, dmap: DungeonMap, room_id: int) -> Set[Coord]:
        visible: Set[Coord] = set()
        for p in dmap.room_tiles(room_id):
            visible.add((p.x, p.y))
            for n in dmap.neighbors_4(p.x, p.y):
                visible.add((n.x, n.y))
        return visible

    def _corridor_square(self, dmap: DungeonMap, px: int, py: int) -> Set[Coord]:
        r = self.settings.corridor_radius
        return {
            (x, y)
            for y in range(max(0, py - r), min(dmap.height, py + r + 1))
            for x in range(max(0, px - r), min(dmap.width, px + r + 1))
        }


def tile_state(dmap: DungeonMap, visible: Set[Coord], x: int, y: int) -> TileVisibility:
    cell = dmap.cell(x, y)
    if (x, y) in visible:
        return TileVisibility.VISIBLE
    if cell.revealed:
        return TileVisibility.REVEALED
    return TileVisibility.UNDISCOVERED


def light_map(dmap: DungeonMap, visible: Set[Coord], dim_factor: float = 0.35) -> List[List[float]]:
    """
    Returns a matrix [height][width] of brightness multipliers suitable for rendering.
    0.0 for undiscovered, dim_factor for revealed-not-visible, 1.0 for visible.
    """
    if not (0.0 <= dim_factor <= 1.0):
        raise ValueError("dim_factor must be between 0.0 and 1.0")
    result: List[List[float]] = [[0.0 for _ in range(dmap.width)] for _ in range(dmap.height)]
    for y in range(dmap.height):
        for x in range(dmap.width):
            if (x, y) in visible:
                result[y][x] = 1.0
            elif dmap.grid[y][x].revealed:
                result[y][x] = dim_factor
    return result


__all__ = ["TileVisibility", "VisibilityEngine", "tile_state", "light_map", "Coord"]
