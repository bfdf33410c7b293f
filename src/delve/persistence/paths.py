from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "delve"


def default_save_root() -> Path:
    """Platform user data directory, e.g. ~/.local/share/delve on Linux."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_data_dir)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
