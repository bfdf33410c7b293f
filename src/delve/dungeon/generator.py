from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from ..exceptions import GenerationError
from ..settings import GenerationSettings, Settings
from .corridors import SECTIONS_PER_SIDE, ConnectivityBuilder, sections_reachable
from .map import DungeonMap, Point, Room
from .tiles import CellType, Tile

logger = logging.getLogger(__name__)

# Section 7 is (row=2, col=1): the bottom-middle section always hosts the entrance room.
ENTRANCE_SECTION = 7
SECTION_COUNT = SECTIONS_PER_SIDE * SECTIONS_PER_SIDE
_SKIP_DRAWS = 30


def map_size(floor: int) -> Tuple[int, int]:
    """Map (width, height) for a floor. The last tier is the compact boss floor."""
    if 1 <= floor <= 2:
        return (27, 27)
    if 3 <= floor <= 5:
        return (33, 33)
    if 6 <= floor <= 9:
        return (39, 39)
    return (27, 27)


def floor_tier(floor: int) -> str:
    """Event-density tier name for a floor."""
    if 1 <= floor <= 2:
        return "shallow"
    if 3 <= floor <= 5:
        return "middle"
    if 6 <= floor <= 9:
        return "deep"
    return "boss"


class MapGenerator:
    """
    Section-based rooms + corridors generator.

    Guarantees:
    - Deterministic layout for a given rng state and floor
    - Exactly one Entrance (bottom-middle room centre) and one Stairs
      (room centre farthest from the Entrance by walking distance)
    - All walkable tiles connected; otherwise GenerationError after the retry budget

    The rng is consumed and advanced so that successive floors drawn from the
    same generator object form one reproducible sequence.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()

    @property
    def _gen(self) -> GenerationSettings:
        return self.settings.generation

    def generate(self, floor: int, rng: random.Random) -> DungeonMap:
        if floor < 1:
            raise ValueError(f"floor must be a positive integer, got {floor}")
        attempts = self._gen.max_attempts
        for attempt in range(1, attempts + 1):
            logger.debug("Generating floor %d (attempt %d/%d)", floor, attempt, attempts)
            dmap = self._build_layout(floor, rng)
            if dmap is not None:
                logger.info(
                    "Generated floor %d: %dx%d, %d rooms, stairs at (%d,%d)",
                    floor,
                    dmap.width,
                    dmap.height,
                    len(dmap.rooms),
                    *_stairs_coords(dmap),
                )
                return dmap
        raise GenerationError(f"Floor {floor} failed the connectivity check after {attempts} attempts")

    # ---- Phases ----------------------------------------------------------
    def _build_layout(self, floor: int, rng: random.Random) -> Optional[DungeonMap]:
        width, height = map_size(floor)
        dmap = DungeonMap(floor, width, height)

        has_room = self._choose_room_sections(rng)
        section_rooms = self._place_rooms(dmap, has_room, rng)
        ConnectivityBuilder(dmap, section_rooms, rng).connect_all()

        entrance_room = dmap.rooms[section_rooms[ENTRANCE_SECTION]]
        entrance = entrance_room.center()
        if not dmap.is_fully_connected(entrance):
            reachable = sections_reachable(section_rooms, ENTRANCE_SECTION)
            isolated = [i for i, r in enumerate(section_rooms) if r is not None and not reachable[i]]
            logger.warning("Floor %d layout has isolated sections %s; retrying", floor, isolated)
            return None

        dmap.cell_at(entrance).cell_type = CellType.ENTRANCE
        dmap.player = entrance

        stairs = self._pick_stairs(dmap, entrance)
        dmap.cell_at(stairs).cell_type = CellType.STAIRS

        self._place_events(dmap, rng)
        return dmap

    def _choose_room_sections(self, rng: random.Random) -> List[bool]:
        """Decide which sections host a room; 1-2 are left empty, never the entrance section."""
        has_room = [True] * SECTION_COUNT
        lo, hi = self._gen.min_skipped_sections, self._gen.max_skipped_sections
        skip_count = lo + rng.randrange(hi - lo + 1)
        skipped = 0
        draws = 0
        while skipped < skip_count and draws < _SKIP_DRAWS:
            idx = rng.randrange(SECTION_COUNT)
            if idx != ENTRANCE_SECTION and has_room[idx]:
                has_room[idx] = False
                skipped += 1
            draws += 1
        return has_room

    def _place_rooms(self, dmap: DungeonMap, has_room: List[bool], rng: random.Random) -> List[Optional[int]]:
        sec_w = dmap.width // SECTIONS_PER_SIDE
        sec_h = dmap.height // SECTIONS_PER_SIDE
        section_rooms: List[Optional[int]] = [None] * SECTION_COUNT

        for sec_idx in range(SECTION_COUNT):
            if not has_room[sec_idx]:
                continue
            sec_row, sec_col = divmod(sec_idx, SECTIONS_PER_SIDE)
            sx, sy = sec_col * sec_w, sec_row * sec_h

            # Fit inside the section with a margin of at least one tile
            max_rw = min(sec_w - 2, self._gen.room_max_size)
            max_rh = min(sec_h - 2, self._gen.room_max_size)
            min_rw = min(self._gen.room_min_size, max_rw)
            min_rh = min(self._gen.room_min_size, max_rh)
            rw = min_rw + rng.randrange(max_rw - min_rw + 1)
            rh = min_rh + rng.randrange(max_rh - min_rh + 1)

            max_rx = sec_w - rw - 1
            max_ry = sec_h - rh - 1
            rx = 1 + (rng.randrange(max_rx) if max_rx > 1 else 0)
            ry = 1 + (rng.randrange(max_ry) if max_ry > 1 else 0)

            room = Room(sx + rx, sy + ry, rw, rh)
            room_id = len(dmap.rooms)
            dmap.rooms.append(room)
            dmap.carve_room(room, room_id)
            section_rooms[sec_idx] = room_id

        return section_rooms

    @staticmethod
    def _pick_stairs(dmap: DungeonMap, entrance: Point) -> Point:
        """Centre of the room farthest from the entrance; first room wins ties.

        The entrance room itself is never chosen.
        """
        dist = dmap.bfs_distance_map(entrance)
        best: Optional[Point] = None
        best_d = -1
        for room in dmap.rooms:
            c = room.center()
            d = dist[c.y][c.x]
            if c == entrance or d is None:
                continue
            if d > best_d:
                best, best_d = c, d
        if best is None:
            raise GenerationError(f"Floor {dmap.floor} has no room besides the entrance room for the stairs")
        return best

    def _place_events(self, dmap: DungeonMap, rng: random.Random) -> None:
        candidates = [
            p for p, c in dmap.iter_cells()
            if c.tile is Tile.ROOM_FLOOR and c.cell_type is CellType.EMPTY
        ]
        rng.shuffle(candidates)
        density = self.settings.density_for(floor_tier(dmap.floor))

        placed = 0
        for name, count in density.counts(len(candidates)):
            cell_type = CellType(name)
            for p in candidates[placed:placed + count]:
                dmap.cell_at(p).cell_type = cell_type
            placed = min(len(candidates), placed + count)
        logger.debug("Placed %d events on floor %d", placed, dmap.floor)


def _stairs_coords(dmap: DungeonMap) -> Tuple[int, int]:
    stairs = dmap.cells_of_type(CellType.STAIRS)
    return (stairs[0].x, stairs[0].y) if stairs else (-1, -1)


__all__ = ["MapGenerator", "map_size", "floor_tier", "ENTRANCE_SECTION"]
