import pytest

from delve.dungeon.events import EventDispatcher
from delve.dungeon.map import DungeonMap, Point, Room
from delve.dungeon.movement import MovementController
from delve.dungeon.tiles import CellType, Direction, Tile


class RecordingDispatcher(EventDispatcher):
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def dispatch(self, position, cell_type):
        self.calls.append((position, cell_type))
        if self.fail:
            raise RuntimeError("payload exploded")


def _flags(dmap):
    return [(p, c.visited, c.revealed, c.event_done) for p, c in dmap.iter_cells()]


@pytest.fixture
def small_map():
    # Room 0 at x 1..4, y 1..3 with a corridor leaving east along row 2
    dmap = DungeonMap(1, 9, 5)
    room = Room(1, 1, 4, 3)
    dmap.rooms = [room]
    dmap.carve_room(room, 0)
    for x in range(5, 8):
        dmap.carve_corridor_cell(x, 2)
    dmap.player = Point(2, 1)
    return dmap


def test_move_north_into_wall_is_blocked(small_map):
    # (2,1) is the room's top row; (2,0) is Wall
    assert small_map.cell(2, 0).tile is Tile.WALL
    ctl = MovementController()
    before = _flags(small_map)

    result = ctl.move(small_map, Direction.NORTH)

    assert result.moved is False
    assert result.position == Point(2, 1)
    assert "blocked" in result.message
    assert small_map.player == Point(2, 1)
    assert small_map.last_direction is Direction.NORTH
    assert _flags(small_map) == before
    assert ctl.tiles_explored == 0


def test_blocked_move_does_not_touch_last_direction(small_map):
    small_map.last_direction = Direction.SOUTH
    MovementController().move(small_map, Direction.NORTH)
    assert small_map.last_direction is Direction.SOUTH


def test_out_of_bounds_is_blocked_without_error():
    dmap = DungeonMap(1, 3, 3)
    dmap.carve_corridor_cell(0, 0)
    dmap.player = Point(0, 0)
    result = MovementController().move(dmap, Direction.WEST)
    assert not result.moved
    assert dmap.player == Point(0, 0)


def test_successful_move_updates_state(small_map):
    ctl = MovementController()
    result = ctl.move(small_map, Direction.SOUTH)

    assert result.moved
    assert result.position == Point(2, 2)
    assert result.newly_explored
    assert small_map.player == Point(2, 2)
    assert small_map.last_direction is Direction.SOUTH
    cell = small_map.cell(2, 2)
    assert cell.visited and cell.revealed
    assert ctl.tiles_explored == 1


def test_entering_room_reveals_whole_room(small_map):
    small_map.player = Point(5, 2)
    ctl = MovementController()
    ctl.move(small_map, Direction.WEST)
    for p in small_map.rooms[0].cells():
        assert small_map.cell_at(p).revealed
    # Border walls are only revealed by a visibility query
    assert not small_map.cell(0, 2).revealed

    # Leaving and re-entering the room changes nothing
    ctl.move(small_map, Direction.EAST)
    revealed = {p for p, c in small_map.iter_cells() if c.revealed}
    explored = ctl.tiles_explored
    result = ctl.move(small_map, Direction.WEST)
    assert result.moved
    assert not result.newly_explored
    assert {p for p, c in small_map.iter_cells() if c.revealed} == revealed
    assert ctl.tiles_explored == explored


def test_revisiting_does_not_count_twice(small_map):
    ctl = MovementController()
    ctl.move(small_map, Direction.EAST)
    ctl.move(small_map, Direction.WEST)
    ctl.move(small_map, Direction.EAST)
    assert ctl.tiles_explored == 2


def test_corridor_move_does_not_reveal_room(small_map):
    small_map.player = Point(6, 2)
    MovementController().move(small_map, Direction.EAST)
    assert small_map.cell(7, 2).revealed
    assert not small_map.cell(1, 1).revealed


def test_event_fires_once(small_map):
    small_map.cell(3, 1).cell_type = CellType.TREASURE
    dispatcher = RecordingDispatcher()
    ctl = MovementController(dispatcher=dispatcher)

    first = ctl.move(small_map, Direction.EAST)
    assert first.triggered is CellType.TREASURE
    assert "treasure" in first.message
    ctl.move(small_map, Direction.WEST)
    second = ctl.move(small_map, Direction.EAST)

    assert second.triggered is None
    assert dispatcher.calls == [(Point(3, 1), CellType.TREASURE)]
    assert small_map.cell(3, 1).event_done


def test_event_done_is_set_even_if_dispatch_raises(small_map):
    small_map.cell(3, 1).cell_type = CellType.TRAP
    dispatcher = RecordingDispatcher(fail=True)
    ctl = MovementController(dispatcher=dispatcher)

    with pytest.raises(RuntimeError):
        ctl.move(small_map, Direction.EAST)

    assert small_map.player == Point(3, 1)
    assert small_map.cell(3, 1).event_done
    ctl.move(small_map, Direction.WEST)
    ctl.move(small_map, Direction.EAST)
    assert len(dispatcher.calls) == 1


def test_empty_cells_never_dispatch(small_map):
    dispatcher = RecordingDispatcher()
    ctl = MovementController(dispatcher=dispatcher)
    for d in (Direction.EAST, Direction.SOUTH, Direction.EAST, Direction.EAST):
        assert ctl.move(small_map, d).moved
    assert dispatcher.calls == []
