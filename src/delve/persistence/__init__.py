from .codec import SCHEMA_VERSION, decode_session, encode_session
from .errors import CorruptSaveError, SaveError, SaveValidationError
from .manager import SaveManager

__all__ = [
    "SCHEMA_VERSION",
    "CorruptSaveError",
    "SaveError",
    "SaveManager",
    "SaveValidationError",
    "decode_session",
    "encode_session",
]
