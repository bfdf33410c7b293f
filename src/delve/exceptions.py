class DelveError(Exception):
    """Base exception for the dungeon subsystem."""


class GenerationError(DelveError):
    """Raised when a floor cannot satisfy the connectivity invariant within the retry budget."""


class CellOutOfBounds(DelveError, IndexError):
    """Raised when a cell is accessed outside the grid. Callers must check in_bounds first."""


class InvalidSessionState(DelveError):
    """Raised when a session operation is not legal in the current state."""
