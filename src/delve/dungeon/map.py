from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from ..exceptions import CellOutOfBounds
from .tiles import CellType, Direction, Tile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def step(self, direction: Direction) -> "Point":
        return Point(self.x + direction.dx, self.y + direction.dy)


@dataclass(frozen=True)
class Room:
    x: int
    y: int
    w: int
    h: int

    def right(self) -> int:
        return self.x + self.w

    def bottom(self) -> int:
        return self.y + self.h

    def center(self) -> Point:
        return Point(self.x + self.w // 2, self.y + self.h // 2)

    def contains(self, p: Point) -> bool:
        return (self.x <= p.x < self.right()) and (self.y <= p.y < self.bottom())

    def cells(self) -> Iterator[Point]:
        for yy in range(self.y, self.bottom()):
            for xx in range(self.x, self.right()):
                yield Point(xx, yy)


@dataclass
class Cell:
    """Per-position record: terrain, semantic marker and discovery flags."""

    tile: Tile = Tile.WALL
    cell_type: CellType = CellType.EMPTY
    visited: bool = False
    revealed: bool = False
    event_done: bool = False
    room_id: Optional[int] = None

    @property
    def is_walkable(self) -> bool:
        return self.tile.is_walkable


class DungeonMap:
    """
    One generated floor: the cell grid, its rooms and the player's position.

    Coordinates are (x, y) with (0, 0) at the top-left; the grid is stored as
    grid[y][x]. Reads through cell() are bounds-checked and raise
    CellOutOfBounds instead of clamping.
    """

    def __init__(self, floor: int, width: int, height: int) -> None:
        if width < 3 or height < 3:
            raise ValueError("Map must be at least 3x3")
        self.floor = floor
        self.width = width
        self.height = height
        self.grid: List[List[Cell]] = [[Cell() for _ in range(width)] for _ in range(height)]
        self.rooms: List[Room] = []
        self.player = Point(0, 0)
        # Flavor only; movement validity never reads this.
        self.last_direction = Direction.NORTH

    # ---- Safety / Bounds -------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        if not self.in_bounds(x, y):
            raise CellOutOfBounds(f"Cell out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})")
        return self.grid[y][x]

    def cell_at(self, p: Point) -> Cell:
        return self.cell(p.x, p.y)

    @property
    def player_cell(self) -> Cell:
        return self.cell_at(self.player)

    # ---- Query -----------------------------------------------------------
    def is_walkable(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return self.grid[y][x].is_walkable

    def neighbors_4(self, x: int, y: int) -> Iterable[Point]:
        # Ordered N, E, S, W for deterministic traversal
        for d in (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST):
            nx, ny = x + d.dx, y + d.dy
            if self.in_bounds(nx, ny):
                yield Point(nx, ny)

    def iter_cells(self) -> Iterator[Tuple[Point, Cell]]:
        for y, row in enumerate(self.grid):
            for x, c in enumerate(row):
                yield Point(x, y), c

    def cells_of_type(self, cell_type: CellType) -> List[Point]:
        return [p for p, c in self.iter_cells() if c.cell_type is cell_type]

    def room_tiles(self, room_id: int) -> List[Point]:
        """Every tile carrying room_id; all of them lie inside the room rectangle."""
        room = self.rooms[room_id]
        return [p for p in room.cells() if self.grid[p.y][p.x].room_id == room_id]

    def walkable_tiles(self) -> Set[Point]:
        return {p for p, c in self.iter_cells() if c.is_walkable}

    # ---- Carving ---------------------------------------------------------
    def carve_room(self, room: Room, room_id: int) -> None:
        for p in room.cells():
            c = self.cell(p.x, p.y)
            c.tile = Tile.ROOM_FLOOR
            c.room_id = room_id

    def carve_corridor_cell(self, x: int, y: int) -> None:
        """Turn a Wall into Corridor. Room floor and existing corridors are left alone."""
        c = self.cell(x, y)
        if c.tile is Tile.WALL:
            c.tile = Tile.CORRIDOR

    # ---- Search ----------------------------------------------------------
    def bfs_distance_map(self, start: Point) -> List[List[Optional[int]]]:
        """
        Compute BFS distances from start to all reachable walkable tiles.
        Returns 2D list [y][x] of distances, None for unreachable.
        """
        dist: List[List[Optional[int]]] = [[None for _ in range(self.width)] for _ in range(self.height)]
        if not self.is_walkable(start.x, start.y):
            return dist
        dq = deque([start])
        dist[start.y][start.x] = 0
        while dq:
            p = dq.popleft()
            d = dist[p.y][p.x]
            for n in self.neighbors_4(p.x, p.y):
                if dist[n.y][n.x] is not None or not self.is_walkable(n.x, n.y):
                    continue
                dist[n.y][n.x] = d + 1
                dq.append(n)
        return dist

    def walkable_component(self, start: Point) -> Set[Point]:
        dist = self.bfs_distance_map(start)
        return {Point(x, y) for y in range(self.height) for x in range(self.width) if dist[y][x] is not None}

    def is_fully_connected(self, start: Point) -> bool:
        """True if every walkable tile is reachable from start."""
        return self.walkable_component(start) == self.walkable_tiles()

    def shortest_path(self, start: Point, goal: Point) -> Optional[List[Direction]]:
        """Cardinal steps leading from start to goal over walkable tiles, or None."""
        if not (self.is_walkable(start.x, start.y) and self.is_walkable(goal.x, goal.y)):
            return None
        came_from = {start: None}
        dq = deque([start])
        while dq:
            p = dq.popleft()
            if p == goal:
                break
            for d in (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST):
                n = p.step(d)
                if n in came_from or not self.is_walkable(n.x, n.y):
                    continue
                came_from[n] = (p, d)
                dq.append(n)
        if goal not in came_from:
            return None
        steps: List[Direction] = []
        cur = goal
        while came_from[cur] is not None:
            prev, d = came_from[cur]
            steps.append(d)
            cur = prev
        steps.reverse()
        return steps

    # ---- Export / Compare -----------------------------------------------
    def to_str_lines(self, visible: Optional[Set[Point]] = None) -> List[str]:
        """ASCII dump. With a visible set, undiscovered tiles are blank and
        revealed-but-not-visible floor is shown as ':'."""
        lines: List[str] = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                c = self.grid[y][x]
                p = Point(x, y)
                if p == self.player:
                    row.append("@")
                    continue
                if visible is not None and p not in visible:
                    if not c.revealed:
                        row.append(" ")
                        continue
                    if c.is_walkable:
                        row.append(":")
                        continue
                row.append(c.cell_type.glyph or c.tile.glyph)
            lines.append("".join(row))
        return lines

    def snapshot(self) -> Tuple[Tuple[Tuple[str, str, Optional[int]], ...], ...]:
        """Deterministic, hashable snapshot of the layout for equality tests."""
        return tuple(
            tuple((c.tile.value, c.cell_type.value, c.room_id) for c in row)
            for row in self.grid
        )
