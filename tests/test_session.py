import pytest

from delve.dungeon.generator import MapGenerator
from delve.dungeon.tiles import CellType, Direction
from delve.engine.events import GameEvent, SessionState
from delve.engine.session import DungeonSession
from delve.events import EventType
from delve.exceptions import GenerationError, InvalidSessionState


def _walk_to_stairs(session):
    dmap = session.require_map()
    stairs = dmap.cells_of_type(CellType.STAIRS)[0]
    path = dmap.shortest_path(dmap.player, stairs)
    assert path
    for d in path:
        assert session.move(d).moved
    return stairs


def test_enter_places_player_on_entrance():
    session = DungeonSession(seed=42)
    dmap = session.enter(1)

    assert session.state is SessionState.ENTERED
    assert session.floor == 1
    entrance = dmap.cells_of_type(CellType.ENTRANCE)[0]
    assert dmap.player == entrance
    cell = dmap.cell_at(entrance)
    assert cell.visited and cell.revealed and cell.event_done
    room_id = cell.room_id
    assert all(dmap.cell_at(p).revealed for p in dmap.room_tiles(room_id))
    assert session.tiles_explored == 1


def test_operations_without_map_raise():
    session = DungeonSession(seed=1)
    with pytest.raises(InvalidSessionState):
        session.move(Direction.NORTH)
    with pytest.raises(InvalidSessionState):
        session.descend()
    with pytest.raises(InvalidSessionState):
        session.compute_visible()


def test_first_move_attempt_starts_exploring():
    session = DungeonSession(seed=42)
    session.enter(1)
    session.move(Direction.NORTH)
    assert session.state is SessionState.EXPLORING


def test_listeners_receive_moved_and_blocked():
    session = DungeonSession(seed=42)
    events = []
    session.add_listener(lambda e, s: events.append(e))
    session.enter(1)
    dmap = session.require_map()

    # From the entrance walk until something blocks us
    for _ in range(dmap.height):
        session.move(Direction.SOUTH)

    assert events[0] is GameEvent.FLOOR_CHANGED
    assert GameEvent.PLAYER_MOVED in events
    assert GameEvent.MOVE_BLOCKED in events


def test_descend_requires_stairs():
    session = DungeonSession(seed=42)
    session.enter(1)
    with pytest.raises(InvalidSessionState):
        session.descend()
    assert session.floor == 1


def test_walk_to_stairs_and_descend():
    session = DungeonSession(seed=42)
    events = []
    session.add_listener(lambda e, s: events.append(e))
    session.enter(1)
    _walk_to_stairs(session)
    assert session.can_descend()

    new_map = session.descend()

    assert session.floor == 2
    assert session.state is SessionState.EXPLORING
    assert new_map.player == new_map.cells_of_type(CellType.ENTRANCE)[0]
    assert events.count(GameEvent.FLOOR_CHANGED) == 2


def test_descent_is_reproducible_from_seed():
    a, b = DungeonSession(seed=777), DungeonSession(seed=777)
    for s in (a, b):
        s.enter(1)
        _walk_to_stairs(s)
        s.descend()
    assert a.require_map().snapshot() == b.require_map().snapshot()


def test_failed_descent_keeps_current_floor(monkeypatch):
    session = DungeonSession(seed=42)
    session.enter(1)
    _walk_to_stairs(session)
    before = session.require_map()

    def boom(self, floor, rng):
        raise GenerationError("no luck")

    monkeypatch.setattr(MapGenerator, "generate", boom)
    with pytest.raises(GenerationError):
        session.descend()

    assert session.map is before
    assert session.floor == 1
    assert session.state is SessionState.EXPLORING


def test_exit_drops_map():
    session = DungeonSession(seed=42)
    events = []
    session.add_listener(lambda e, s: events.append(e))
    session.enter(1)
    session.exit()

    assert session.map is None
    assert session.state is SessionState.EXITED
    assert events[-1] is GameEvent.SESSION_EXITED
    with pytest.raises(InvalidSessionState):
        session.move(Direction.EAST)


def test_cell_triggers_are_published_on_the_bus():
    session = DungeonSession(seed=42)
    received = []
    session.bus.subscribe(EventType.CELL_TRIGGERED, received.append)
    session.enter(1)
    stairs = _walk_to_stairs(session)

    stairs_events = [e for e in received if e.payload["cell_type"] == CellType.STAIRS.value]
    assert len(stairs_events) == 1
    assert stairs_events[0].payload == {"x": stairs.x, "y": stairs.y, "cell_type": "stairs", "floor": 1}


def test_floor_entered_is_published():
    session = DungeonSession(seed=5)
    floors = []
    session.bus.subscribe(EventType.FLOOR_ENTERED, lambda e: floors.append(e.payload["floor"]))
    session.enter(3)
    assert floors == [3]


def test_failing_listener_does_not_break_session():
    session = DungeonSession(seed=42)

    def bad(event, s):
        raise RuntimeError("listener bug")

    session.add_listener(bad)
    session.enter(1)
    assert session.state is SessionState.ENTERED


def test_visible_set_and_text_views():
    session = DungeonSession(seed=42)
    dmap = session.enter(1)
    visible = session.compute_visible()
    assert (dmap.player.x, dmap.player.y) in visible
    lines = session.render_lines()
    assert len(lines) == dmap.height
    assert "@" in "".join(lines)
    assert session.describe_ahead()
