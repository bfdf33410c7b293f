from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .events import EventDispatcher, NullDispatcher
from .map import DungeonMap, Point
from .tiles import CellType, Direction
from .visibility import VisibilityEngine

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    moved: bool
    position: Point
    message: str = ""
    newly_explored: bool = False
    triggered: Optional[CellType] = None


class MovementController:
    """
    Applies single-step cardinal moves to a DungeonMap.

    A blocked move (out of bounds or into a wall) returns moved=False and
    leaves the map untouched. A successful move updates position, facing,
    discovery flags and the exploration counter, then fires the destination's
    trigger if it has not fired yet on this floor.
    """

    def __init__(
        self,
        dispatcher: Optional[EventDispatcher] = None,
        visibility: Optional[VisibilityEngine] = None,
        tiles_explored: int = 0,
    ) -> None:
        self.dispatcher = dispatcher or NullDispatcher()
        self.visibility = visibility or VisibilityEngine()
        self.tiles_explored = tiles_explored

    def move(self, dmap: DungeonMap, direction: Direction) -> MoveResult:
        target = dmap.player.step(direction)
        if not dmap.in_bounds(target.x, target.y):
            logger.debug("Blocked move %s from %s: edge of map", direction.value, dmap.player)
            return MoveResult(moved=False, position=dmap.player, message="blocked: the edge of the map")
        if not dmap.is_walkable(target.x, target.y):
            logger.debug("Blocked move %s from %s: wall", direction.value, dmap.player)
            return MoveResult(moved=False, position=dmap.player, message="blocked: a wall")

        dmap.player = target
        dmap.last_direction = direction
        cell = dmap.cell_at(target)
        newly_explored = not cell.visited
        cell.visited = True
        cell.revealed = True
        if cell.room_id is not None:
            self.visibility.reveal_room(dmap, cell.room_id)
        if newly_explored:
            self.tiles_explored += 1
        logger.debug("Moved %s to %s", direction.value, target)

        triggered: Optional[CellType] = None
        if cell.cell_type.has_trigger and not cell.event_done:
            triggered = cell.cell_type
            logger.info("Triggering %s at (%d,%d) on floor %d", triggered.value, target.x, target.y, dmap.floor)
            try:
                self.dispatcher.dispatch(target, triggered)
            finally:
                cell.event_done = True

        message = f"moved {direction.value}"
        if triggered is not None:
            message += f": {triggered.label}"
        return MoveResult(
            moved=True,
            position=target,
            message=message,
            newly_explored=newly_explored,
            triggered=triggered,
        )
