from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from ..engine.session import DungeonSession
from ..events import EventBus
from ..settings import Settings
from .codec import decode_session, encode_session
from .errors import CorruptSaveError, SaveError
from .paths import default_save_root, ensure_dir

logger = logging.getLogger(__name__)


class SaveManager:
    """Reads and writes session saves, one file per slot, with atomic replacement."""

    def __init__(self, root_dir: Optional[Path] = None) -> None:
        self.root_dir = ensure_dir(Path(root_dir) if root_dir is not None else default_save_root())
        self.save_dir = self.root_dir / "saves"

    def path_for(self, slot: str = "default") -> Path:
        return self.save_dir / f"{slot}.json"

    def has_save(self, slot: str = "default") -> bool:
        return self.path_for(slot).exists()

    def save(self, session: DungeonSession, slot: str = "default") -> Path:
        path = self.path_for(slot)
        self._atomic_write(path, encode_session(session))
        logger.info("Saved session (floor %d) to %s", session.floor, path)
        return path

    def load(
        self,
        slot: str = "default",
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
    ) -> DungeonSession:
        """Load a slot, falling back to its .bak copy if the primary file is unreadable."""
        path = self.path_for(slot)
        try:
            return self._read(path, settings, bus)
        except SaveError as primary_exc:
            bak = path.with_suffix(path.suffix + ".bak")
            if bak.exists():
                logger.warning("Primary save %s unreadable (%s); trying backup", path, primary_exc)
                try:
                    return self._read(bak, settings, bus)
                except SaveError as bak_exc:
                    raise CorruptSaveError(f"Unable to load save from {path}: {primary_exc}; backup: {bak_exc}") from bak_exc
            if not path.exists():
                raise
            raise CorruptSaveError(f"Unable to load save from {path}: {primary_exc}") from primary_exc

    def delete(self, slot: str = "default") -> None:
        for p in (self.path_for(slot), self.path_for(slot).with_suffix(".json.bak")):
            if p.exists():
                p.unlink()

    def _read(self, path: Path, settings: Optional[Settings], bus: Optional[EventBus]) -> DungeonSession:
        try:
            with path.open("r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError as e:
            raise SaveError(f"Save file not found: {path}") from e
        return decode_session(text, settings=settings, bus=bus)

    def save_to_path(self, session: DungeonSession, path: Path) -> Path:
        """Save to an explicit file path instead of a slot."""
        path = Path(path)
        self._atomic_write(path, encode_session(session))
        logger.info("Saved session (floor %d) to %s", session.floor, path)
        return path

    def _atomic_write(self, path: Path, text: str) -> None:
        """Write text to path atomically, keeping the previous file as path.bak.

        - Write to path.tmp, flush and fsync
        - Move the existing file to path.bak
        - Rename path.tmp to path
        """
        tmp = path.with_suffix(path.suffix + ".tmp")
        bak = path.with_suffix(path.suffix + ".bak")
        ensure_dir(path.parent)
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copy2(str(path), str(bak))
        os.replace(str(tmp), str(path))
