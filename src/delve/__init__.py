"""
Delve: procedural dungeon subsystem.

Floor generation, discovery state, room-aware visibility and movement with
one-shot cell events. Rendering and input decoding live outside this package.
"""
from importlib.metadata import version, PackageNotFoundError

__all__ = ["__version__"]

try:
    __version__ = version("delve")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
