import json

import pytest

from delve.dungeon.tiles import CellType, Direction
from delve.engine.events import SessionState
from delve.engine.session import DungeonSession
from delve.persistence import (
    SCHEMA_VERSION,
    CorruptSaveError,
    SaveError,
    SaveManager,
    SaveValidationError,
    decode_session,
    encode_session,
)


def _played_session(seed=42):
    session = DungeonSession(seed=seed)
    session.enter(1)
    for d in (Direction.NORTH, Direction.EAST, Direction.EAST, Direction.SOUTH, Direction.WEST):
        session.move(d)
    session.compute_visible()
    return session


def _cells(dmap):
    return [
        (p, c.tile, c.cell_type, c.visited, c.revealed, c.event_done, c.room_id)
        for p, c in dmap.iter_cells()
    ]


def test_round_trip_restores_every_cell_field():
    session = _played_session()
    restored = decode_session(encode_session(session))

    a, b = session.require_map(), restored.require_map()
    assert _cells(a) == _cells(b)
    assert a.rooms == b.rooms
    assert a.player == b.player
    assert a.last_direction is b.last_direction
    assert a.floor == b.floor
    assert restored.seed == session.seed
    assert restored.state is session.state
    assert restored.tiles_explored == session.tiles_explored


def test_restored_rng_continues_the_same_run():
    session = _played_session(seed=2024)
    restored = decode_session(encode_session(session))

    for s in (session, restored):
        dmap = s.require_map()
        stairs = dmap.cells_of_type(CellType.STAIRS)[0]
        for d in dmap.shortest_path(dmap.player, stairs):
            s.move(d)
        s.descend()

    assert session.require_map().snapshot() == restored.require_map().snapshot()
    assert session.rng.random() == restored.rng.random()


def test_exited_session_round_trips_without_map():
    session = DungeonSession(seed=3)
    session.enter(1)
    session.exit()
    restored = decode_session(encode_session(session))
    assert restored.map is None
    assert restored.state is SessionState.EXITED


def test_encoded_text_is_versioned_json():
    data = json.loads(encode_session(_played_session()))
    assert data["schema_version"] == SCHEMA_VERSION
    assert data["map"]["width"] == 27
    assert len(data["map"]["cells"]) == 27


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        json.dumps({"schema_version": 99, "seed": 1}),
        json.dumps({"schema_version": 1}),
    ],
)
def test_decode_rejects_bad_input(text):
    with pytest.raises(SaveValidationError):
        decode_session(text)


def test_decode_rejects_player_inside_wall():
    data = json.loads(encode_session(_played_session()))
    data["map"]["player"] = [0, 0]
    with pytest.raises(SaveValidationError):
        decode_session(json.dumps(data))


def test_save_manager_round_trip_and_backup(tmp_path):
    mgr = SaveManager(root_dir=tmp_path)
    session = _played_session()

    path = mgr.save(session)
    assert path.exists()
    assert mgr.has_save()
    mgr.save(session)
    assert path.with_suffix(".json.bak").exists()
    assert not path.with_suffix(".json.tmp").exists()

    loaded = mgr.load()
    assert _cells(loaded.require_map()) == _cells(session.require_map())


def test_corrupt_primary_falls_back_to_backup(tmp_path):
    mgr = SaveManager(root_dir=tmp_path)
    session = _played_session()
    mgr.save(session)
    path = mgr.save(session)

    path.write_text("{ broken", encoding="utf-8")
    loaded = mgr.load()
    assert loaded.require_map().player == session.require_map().player


def test_corrupt_without_backup_raises(tmp_path):
    mgr = SaveManager(root_dir=tmp_path)
    path = mgr.save(_played_session())
    path.write_text("{ broken", encoding="utf-8")
    with pytest.raises(CorruptSaveError):
        mgr.load()


def test_missing_save_raises_save_error(tmp_path):
    mgr = SaveManager(root_dir=tmp_path)
    with pytest.raises(SaveError):
        mgr.load("nope")
    assert not mgr.has_save("nope")


def test_delete_removes_slot(tmp_path):
    mgr = SaveManager(root_dir=tmp_path)
    session = _played_session()
    mgr.save(session, slot="a")
    mgr.save(session, slot="a")
    mgr.delete("a")
    assert not mgr.has_save("a")
    assert not mgr.path_for("a").with_suffix(".json.bak").exists()


def test_save_to_explicit_path(tmp_path):
    target = tmp_path / "runs" / "snap.json"
    path = SaveManager(root_dir=tmp_path).save_to_path(_played_session(), target)
    assert path == target
    assert decode_session(target.read_text(encoding="utf-8")).floor == 1
