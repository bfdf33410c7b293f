from .events import EventBusDispatcher, EventDispatcher, NullDispatcher
from .generator import MapGenerator, floor_tier, map_size
from .map import Cell, DungeonMap, Point, Room
from .movement import MoveResult, MovementController
from .tiles import CellType, Direction, Tile
from .visibility import TileVisibility, VisibilityEngine, light_map, tile_state

__all__ = [
    "Cell",
    "CellType",
    "Direction",
    "DungeonMap",
    "EventBusDispatcher",
    "EventDispatcher",
    "MapGenerator",
    "MoveResult",
    "MovementController",
    "NullDispatcher",
    "Point",
    "Room",
    "Tile",
    "TileVisibility",
    "VisibilityEngine",
    "floor_tier",
    "light_map",
    "map_size",
    "tile_state",
]
