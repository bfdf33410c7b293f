from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from ..events import EventBus, EventType
from .map import Point
from .tiles import CellType

logger = logging.getLogger(__name__)


class EventDispatcher(ABC):
    """Receives one-shot cell triggers from movement.

    Implementations own the payload (combat, loot, dialogue...). Movement only
    guarantees that dispatch is called at most once per cell per floor.
    """

    @abstractmethod
    def dispatch(self, position: Point, cell_type: CellType) -> None:
        raise NotImplementedError


class NullDispatcher(EventDispatcher):
    def dispatch(self, position: Point, cell_type: CellType) -> None:
        logger.debug("Ignoring %s trigger at (%d,%d)", cell_type.value, position.x, position.y)


class EventBusDispatcher(EventDispatcher):
    """Publishes every trigger as EventType.CELL_TRIGGERED on an EventBus."""

    def __init__(self, bus: EventBus, floor_provider: Callable[[], int]) -> None:
        self.bus = bus
        self._floor_provider = floor_provider

    def dispatch(self, position: Point, cell_type: CellType) -> None:
        self.bus.publish(
            EventType.CELL_TRIGGERED,
            {
                "x": position.x,
                "y": position.y,
                "cell_type": cell_type.value,
                "floor": self._floor_provider(),
            },
        )
