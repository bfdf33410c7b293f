from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional, Set

from ..dungeon.events import EventBusDispatcher
from ..dungeon.generator import MapGenerator
from ..dungeon.map import DungeonMap
from ..dungeon.movement import MovementController, MoveResult
from ..dungeon.tiles import CellType, Direction
from ..dungeon.view import compute_view, describe_view
from ..dungeon.visibility import Coord, VisibilityEngine
from ..events import EventBus, EventType
from ..exceptions import GenerationError, InvalidSessionState
from ..settings import Settings
from .events import GameEvent, SessionState

logger = logging.getLogger(__name__)


class DungeonSession:
    """Holds one dungeon run: the seeded rng, the current floor map and the
    exploration counter.

    Floors are generated from a single random.Random seeded once per run, so a
    run is fully reproducible from its seed and the sequence of actions.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.seed: int = seed if seed is not None else random.SystemRandom().getrandbits(32)
        self.rng = random.Random(self.seed)
        self.settings = settings or Settings()
        self.bus = bus or EventBus()
        self.generator = MapGenerator(self.settings)
        self.visibility = VisibilityEngine(self.settings.visibility)
        self.movement = MovementController(
            dispatcher=EventBusDispatcher(self.bus, lambda: self.floor),
            visibility=self.visibility,
        )
        self.map: Optional[DungeonMap] = None
        # None until the first floor is entered
        self.state: Optional[SessionState] = None
        self._listeners: List[Callable[[GameEvent, "DungeonSession"], None]] = []

    def add_listener(self, listener: Callable[[GameEvent, "DungeonSession"], None]) -> None:
        """Subscribe to session events (movement, floor change, exit)."""
        self._listeners.append(listener)

    def _emit(self, event: GameEvent) -> None:
        for l in list(self._listeners):
            try:
                l(event, self)
            except Exception as ex:
                logger.exception("Listener errored on %s: %s", event, ex)

    # ---- Accessors -------------------------------------------------------
    @property
    def floor(self) -> int:
        return self.map.floor if self.map is not None else 0

    @property
    def tiles_explored(self) -> int:
        return self.movement.tiles_explored

    def require_map(self) -> DungeonMap:
        if self.map is None:
            raise InvalidSessionState(f"No active floor (state={self.state})")
        return self.map

    # ---- Lifecycle -------------------------------------------------------
    def enter(self, floor: int = 1) -> DungeonMap:
        """Generate `floor` and place the player on its Entrance."""
        if self.state is SessionState.DESCENDING:
            raise InvalidSessionState("Cannot enter a floor while descending")
        dmap = self.generator.generate(floor, self.rng)
        self._arrive(dmap)
        self.state = SessionState.ENTERED
        logger.info("Entered floor %d (seed=%d)", floor, self.seed)
        self._emit(GameEvent.FLOOR_CHANGED)
        return dmap

    def _arrive(self, dmap: DungeonMap) -> None:
        self.map = dmap
        cell = dmap.player_cell
        # Standing on the Entrance is the arrival itself; it never re-fires.
        cell.event_done = True
        cell.revealed = True
        if not cell.visited:
            cell.visited = True
            self.movement.tiles_explored += 1
        if cell.room_id is not None:
            self.visibility.reveal_room(dmap, cell.room_id)
        self.bus.publish(EventType.FLOOR_ENTERED, {"floor": dmap.floor})

    def move(self, direction: Direction) -> MoveResult:
        dmap = self.require_map()
        if self.state is SessionState.ENTERED:
            self.state = SessionState.EXPLORING
        result = self.movement.move(dmap, direction)
        self._emit(GameEvent.PLAYER_MOVED if result.moved else GameEvent.MOVE_BLOCKED)
        return result

    def can_descend(self) -> bool:
        return self.map is not None and self.map.player_cell.cell_type is CellType.STAIRS

    def descend(self) -> DungeonMap:
        """Generate the next floor. Only legal while standing on Stairs.

        If generation fails the current floor is kept and GenerationError propagates.
        """
        dmap = self.require_map()
        if dmap.player_cell.cell_type is not CellType.STAIRS:
            raise InvalidSessionState(f"Not on stairs at {dmap.player}")
        self.state = SessionState.DESCENDING
        try:
            new_map = self.generator.generate(dmap.floor + 1, self.rng)
        except GenerationError:
            logger.error("Descent from floor %d failed; staying on current floor", dmap.floor)
            self.state = SessionState.EXPLORING
            raise
        self._arrive(new_map)
        self.state = SessionState.EXPLORING
        logger.info("Descended to floor %d. Player at %s", new_map.floor, new_map.player)
        self._emit(GameEvent.FLOOR_CHANGED)
        return new_map

    def exit(self) -> None:
        self.map = None
        self.state = SessionState.EXITED
        logger.info("Session exited after exploring %d tiles", self.tiles_explored)
        self._emit(GameEvent.SESSION_EXITED)

    # ---- Views -----------------------------------------------------------
    def compute_visible(self) -> Set[Coord]:
        return self.visibility.compute_visible(self.require_map())

    def describe_ahead(self) -> str:
        return describe_view(compute_view(self.require_map()))

    def render_lines(self) -> List[str]:
        """Fog-aware ASCII dump of the current floor."""
        return self.require_map().to_str_lines(visible=self.compute_visible())
