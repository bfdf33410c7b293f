"""Forward view: what the player sees straight ahead in the last-moved direction."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .map import DungeonMap
from .tiles import CellType, Tile

MAX_VIEW_DEPTH = 4

# Traps stay hidden; Entrance and Empty are not worth mentioning.
_LANDMARKS = {
    CellType.STAIRS: "stairs",
    CellType.TREASURE: "a treasure chest",
    CellType.ENEMY: "an enemy",
    CellType.SPRING: "a spring",
    CellType.NPC: "a figure",
    CellType.LORE: "an inscription",
}


@dataclass
class DepthSlice:
    wall_front: bool
    cell_type: CellType


@dataclass
class ForwardView:
    # depths[0] is the player's own cell
    depths: List[DepthSlice] = field(default_factory=list)

    @property
    def open_steps(self) -> int:
        steps = 0
        for d in self.depths:
            if d.wall_front:
                break
            steps += 1
        return steps


def compute_view(dmap: DungeonMap) -> ForwardView:
    view = ForwardView()
    facing = dmap.last_direction
    x, y = dmap.player.x, dmap.player.y
    for _ in range(MAX_VIEW_DEPTH):
        if not dmap.in_bounds(x, y):
            break
        fx, fy = x + facing.dx, y + facing.dy
        wall_front = not dmap.in_bounds(fx, fy) or dmap.grid[fy][fx].tile is Tile.WALL
        view.depths.append(DepthSlice(wall_front=wall_front, cell_type=dmap.grid[y][x].cell_type))
        if wall_front:
            break
        x, y = fx, fy
    return view


def _nearest_landmark(view: ForwardView) -> Optional[str]:
    for i, d in enumerate(view.depths):
        if i == 0:
            continue
        label = _LANDMARKS.get(d.cell_type)
        if label is not None:
            step = "step" if i == 1 else "steps"
            return f"{label.capitalize()} {i} {step} ahead."
    return None


def describe_view(view: ForwardView) -> str:
    """One-line English description, e.g. 'The way ahead is open for 2 steps. A spring 2 steps ahead.'"""
    if not view.depths:
        return "A wall blocks the way."
    steps = view.open_steps
    if steps == 0:
        text = "A wall stands right ahead."
    else:
        text = f"The way ahead is open for {steps} {'step' if steps == 1 else 'steps'}."
    landmark = _nearest_landmark(view)
    return f"{text} {landmark}" if landmark else text
