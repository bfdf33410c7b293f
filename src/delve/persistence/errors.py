from ..exceptions import DelveError


class SaveError(DelveError):
    """Base exception for save/load errors."""


class SaveValidationError(SaveError):
    """Raised when save data is malformed or from an unsupported schema."""


class CorruptSaveError(SaveError):
    """Raised when save files are corrupted and cannot be recovered from backup."""
