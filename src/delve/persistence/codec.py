from __future__ import annotations

import json
import random
from typing import Any, Dict, List, Optional

from ..dungeon.map import Cell, DungeonMap, Point, Room
from ..dungeon.tiles import CellType, Direction, Tile
from ..engine.events import SessionState
from ..engine.session import DungeonSession
from ..events import EventBus
from ..settings import Settings
from .errors import SaveValidationError

SCHEMA_VERSION = 1


def _encode_rng_state(rng: random.Random) -> Dict[str, Any]:
    version, internal, gauss = rng.getstate()
    return {"version": version, "internal": list(internal), "gauss_next": gauss}


def _decode_rng_state(data: Dict[str, Any]) -> tuple:
    return (int(data["version"]), tuple(int(v) for v in data["internal"]), data.get("gauss_next"))


def encode_map(dmap: DungeonMap) -> Dict[str, Any]:
    # Each cell is [tile, cell_type, visited, revealed, event_done, room_id]
    cells: List[List[List[Any]]] = [
        [[c.tile.value, c.cell_type.value, c.visited, c.revealed, c.event_done, c.room_id] for c in row]
        for row in dmap.grid
    ]
    return {
        "floor": dmap.floor,
        "width": dmap.width,
        "height": dmap.height,
        "player": [dmap.player.x, dmap.player.y],
        "last_direction": dmap.last_direction.value,
        "rooms": [[r.x, r.y, r.w, r.h] for r in dmap.rooms],
        "cells": cells,
    }


def decode_map(data: Dict[str, Any]) -> DungeonMap:
    dmap = DungeonMap(int(data["floor"]), int(data["width"]), int(data["height"]))
    rows = data["cells"]
    if len(rows) != dmap.height or any(len(row) != dmap.width for row in rows):
        raise SaveValidationError("Cell grid does not match the declared map size")
    dmap.rooms = [Room(*(int(v) for v in r)) for r in data["rooms"]]
    for y, row in enumerate(rows):
        for x, (tile, cell_type, visited, revealed, event_done, room_id) in enumerate(row):
            dmap.grid[y][x] = Cell(
                tile=Tile(tile),
                cell_type=CellType(cell_type),
                visited=bool(visited),
                revealed=bool(revealed),
                event_done=bool(event_done),
                room_id=None if room_id is None else int(room_id),
            )
    px, py = data["player"]
    if not dmap.is_walkable(px, py):
        raise SaveValidationError(f"Player position ({px},{py}) is not a walkable tile")
    dmap.player = Point(int(px), int(py))
    dmap.last_direction = Direction(data.get("last_direction", Direction.NORTH.value))
    return dmap


def encode_session(session: DungeonSession) -> str:
    """Encode a DungeonSession to a pretty-printed JSON string."""
    data = {
        "schema_version": SCHEMA_VERSION,
        "seed": session.seed,
        "state": session.state.value if session.state is not None else None,
        "tiles_explored": session.tiles_explored,
        "rng_state": _encode_rng_state(session.rng),
        "map": encode_map(session.map) if session.map is not None else None,
    }
    return json.dumps(data, ensure_ascii=False, sort_keys=True, indent=2)


def decode_session(
    text: str,
    settings: Optional[Settings] = None,
    bus: Optional[EventBus] = None,
) -> DungeonSession:
    """Decode JSON text into a DungeonSession that continues exactly where the saved one stopped."""
    try:
        data: Dict[str, Any] = json.loads(text)
    except json.JSONDecodeError as e:
        raise SaveValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SaveValidationError("Save root must be a JSON object")

    version = int(data.get("schema_version", SCHEMA_VERSION))
    if version != SCHEMA_VERSION:
        raise SaveValidationError(f"Save schema version {version} is not supported (expected {SCHEMA_VERSION})")

    try:
        session = DungeonSession(seed=int(data["seed"]), settings=settings, bus=bus)
        session.rng.setstate(_decode_rng_state(data["rng_state"]))
        session.movement.tiles_explored = int(data.get("tiles_explored", 0))
        state = data.get("state")
        session.state = SessionState(state) if state is not None else None
        session.map = decode_map(data["map"]) if data.get("map") is not None else None
    except (KeyError, TypeError, ValueError) as e:
        raise SaveValidationError(f"Malformed save data: {e}") from e
    return session
