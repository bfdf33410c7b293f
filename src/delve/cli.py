import argparse
import json
import logging
import random
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional

from .dungeon.generator import MapGenerator
from .dungeon.map import DungeonMap
from .dungeon.tiles import CellType, Direction
from .engine.session import DungeonSession
from .exceptions import DelveError
from .logging_config import configure_logging
from .persistence.manager import SaveManager
from .settings import Settings

logger = logging.getLogger(__name__)


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="delve",
        description="Delve - generate and explore procedural dungeon floors from the terminal",
    )
    parser.add_argument(
        "--settings",
        dest="settings_path",
        type=Path,
        default=None,
        help="Path to a user settings YAML file to load/override defaults.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a single floor and print it.")
    gen.add_argument("--seed", type=int, required=True)
    gen.add_argument("--floor", type=_positive_int, default=1)
    gen.add_argument("--json", action="store_true", help="Print a JSON summary instead of the ASCII map.")

    walk = sub.add_parser("walk", help="Enter floor 1 and replay a sequence of moves.")
    walk.add_argument("--seed", type=int, required=True)
    walk.add_argument("--moves", default="", help="Direction letters, e.g. NNEESW.")
    walk.add_argument("--to-stairs", action="store_true", help="Walk the shortest path to the stairs and descend.")
    walk.add_argument("--save", type=Path, default=None, help="Write a session snapshot to this file.")
    return parser.parse_args(argv)


def summarize(dmap: DungeonMap) -> dict:
    events = Counter(c.cell_type.value for _, c in dmap.iter_cells() if c.cell_type is not CellType.EMPTY)
    entrance = dmap.cells_of_type(CellType.ENTRANCE)[0]
    return {
        "floor": dmap.floor,
        "width": dmap.width,
        "height": dmap.height,
        "rooms": [[r.x, r.y, r.w, r.h] for r in dmap.rooms],
        "entrance": [entrance.x, entrance.y],
        "stairs": [[p.x, p.y] for p in dmap.cells_of_type(CellType.STAIRS)],
        "events": dict(sorted(events.items())),
    }


def parse_moves(text: str) -> List[Direction]:
    return [Direction.from_key(ch) for ch in text if not ch.isspace() and ch != ","]


def _cmd_generate(args, settings: Settings) -> int:
    dmap = MapGenerator(settings).generate(args.floor, random.Random(args.seed))
    if args.json:
        print(json.dumps(summarize(dmap), indent=2))
    else:
        print("\n".join(dmap.to_str_lines()))
    return 0


def _cmd_walk(args, settings: Settings) -> int:
    try:
        moves = parse_moves(args.moves)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    session = DungeonSession(seed=args.seed, settings=settings)
    session.enter(1)
    for d in moves:
        result = session.move(d)
        print(f"{d.value:>5}: {result.message}")

    if args.to_stairs:
        dmap = session.require_map()
        stairs = dmap.cells_of_type(CellType.STAIRS)[0]
        path = dmap.shortest_path(dmap.player, stairs) or []
        for d in path:
            session.move(d)
        print(f"Walked {len(path)} steps to the stairs at ({stairs.x},{stairs.y})")
        session.descend()
        print(f"Descended to floor {session.floor}")

    print("\n".join(session.render_lines()))
    print(session.describe_ahead())
    print(f"Floor {session.floor}, tiles explored: {session.tiles_explored}")

    if args.save is not None:
        path = SaveManager(root_dir=args.save.parent).save_to_path(session, args.save)
        print(f"Saved to {path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(default_level=logging.DEBUG if args.debug else logging.WARNING)
    try:
        settings = Settings.load(user_path=args.settings_path)
    except ValueError as e:
        print(f"error: invalid settings: {e}", file=sys.stderr)
        return 2
    try:
        if args.command == "generate":
            return _cmd_generate(args, settings)
        return _cmd_walk(args, settings)
    except DelveError as e:
        logger.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2
