"""
Corridor carving between rooms of neighbouring macro-sections.

Each link is a right-angled corridor: an exit leg along the source room's
outer wall, a crossing leg over the section boundary on a randomly chosen
line between the two rooms' midpoints, and an entry leg along the
destination room's wall. Only Wall tiles are ever overwritten.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from .map import DungeonMap, Room

logger = logging.getLogger(__name__)

SECTIONS_PER_SIDE = 3


class ConnectivityBuilder:
    """Carves corridors for a 3x3 section layout.

    `section_rooms[i]` is the index into `dmap.rooms` of the room hosted by
    section i (row-major), or None for a roomless section.
    """

    def __init__(self, dmap: DungeonMap, section_rooms: Sequence[Optional[int]], rng: random.Random) -> None:
        if len(section_rooms) != SECTIONS_PER_SIDE * SECTIONS_PER_SIDE:
            raise ValueError("section_rooms must describe a 3x3 section grid")
        self.dmap = dmap
        self.section_rooms = list(section_rooms)
        self.rng = rng

    def _room_in(self, row: int, col: int) -> Optional[Room]:
        idx = self.section_rooms[row * SECTIONS_PER_SIDE + col]
        return None if idx is None else self.dmap.rooms[idx]

    def connect_all(self) -> int:
        """Link every pair of rooms in adjacent sections. Returns the number of corridors carved."""
        carved = 0
        # Horizontal neighbours, row by row
        for row in range(SECTIONS_PER_SIDE):
            for col in range(SECTIONS_PER_SIDE - 1):
                left = self._room_in(row, col)
                right = self._room_in(row, col + 1)
                if left is not None and right is not None:
                    self.carve_horizontal(left, right)
                    carved += 1
        # Vertical neighbours, column by column
        for col in range(SECTIONS_PER_SIDE):
            for row in range(SECTIONS_PER_SIDE - 1):
                top = self._room_in(row, col)
                bottom = self._room_in(row + 1, col)
                if top is not None and bottom is not None:
                    self.carve_vertical(top, bottom)
                    carved += 1
        logger.debug("Carved %d corridors on floor %d", carved, self.dmap.floor)
        return carved

    def carve_horizontal(self, left: Room, right: Room) -> None:
        """Connect `left` to `right`, which lies in the next section to the east."""
        w, h = self.dmap.width, self.dmap.height
        left_mid_y = left.center().y
        right_mid_y = right.center().y

        lo, hi = sorted((left_mid_y, right_mid_y))
        cy = lo + self.rng.randrange(hi - lo + 1)
        cy = max(1, min(h - 2, cy))

        exit_x = min(left.right(), w - 1)
        entry_x = min(max(right.x - 1, 0), w - 1)

        self._carve_v_segment(exit_x, left_mid_y, cy)
        self._carve_h_segment(exit_x, entry_x, cy)
        self._carve_v_segment(entry_x, cy, right_mid_y)

    def carve_vertical(self, top: Room, bottom: Room) -> None:
        """Connect `top` to `bottom`, which lies in the next section to the south."""
        w, h = self.dmap.width, self.dmap.height
        top_mid_x = top.center().x
        bottom_mid_x = bottom.center().x

        lo, hi = sorted((top_mid_x, bottom_mid_x))
        cx = lo + self.rng.randrange(hi - lo + 1)
        cx = max(1, min(w - 2, cx))

        exit_y = min(top.bottom(), h - 1)
        entry_y = min(max(bottom.y - 1, 0), h - 1)

        self._carve_h_segment(top_mid_x, cx, exit_y)
        self._carve_v_segment(cx, exit_y, entry_y)
        self._carve_h_segment(cx, bottom_mid_x, entry_y)

    def _carve_h_segment(self, x1: int, x2: int, y: int) -> None:
        if x2 < x1:
            x1, x2 = x2, x1
        for xx in range(x1, min(x2, self.dmap.width - 1) + 1):
            self.dmap.carve_corridor_cell(xx, y)

    def _carve_v_segment(self, x: int, y1: int, y2: int) -> None:
        if y2 < y1:
            y1, y2 = y2, y1
        for yy in range(y1, min(y2, self.dmap.height - 1) + 1):
            self.dmap.carve_corridor_cell(x, yy)


def sections_reachable(section_rooms: Sequence[Optional[int]], start: int) -> List[bool]:
    """Which room-bearing sections are linked to section `start` through a chain
    of neighbouring room-bearing sections."""
    present = [r is not None for r in section_rooms]
    seen = [False] * len(section_rooms)
    if not present[start]:
        return seen
    stack = [start]
    seen[start] = True
    while stack:
        i = stack.pop()
        row, col = divmod(i, SECTIONS_PER_SIDE)
        for dr, dc in ((-1, 0), (0, 1), (1, 0), (0, -1)):
            nr, nc = row + dr, col + dc
            if 0 <= nr < SECTIONS_PER_SIDE and 0 <= nc < SECTIONS_PER_SIDE:
                j = nr * SECTIONS_PER_SIDE + nc
                if present[j] and not seen[j]:
                    seen[j] = True
                    stack.append(j)
    return seen
