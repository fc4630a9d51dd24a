"""
Store backends for forgettable.

Provides:
- Redis storage (sorted sets + scalar metadata)
- In-memory storage for tests and single-process use
- Canonical numeric encoding for store round-trips
"""

from forgettable.storage.base import (
    BaseStore,
    BatchOperation,
    SetScore,
    SetValue,
    StorageError,
    DecodeError,
    MemberNotFoundError,
    MissingMetadataError,
    DecayWriteError,
)
from forgettable.storage.encoding import format_float, format_int, float_map, parse_float
from forgettable.storage.memory import InMemoryStore
from forgettable.storage.redis_store import RedisStore

__all__ = [
    # Base
    "BaseStore",
    "BatchOperation",
    "SetScore",
    "SetValue",
    # Errors
    "StorageError",
    "DecodeError",
    "MemberNotFoundError",
    "MissingMetadataError",
    "DecayWriteError",
    # Encoding
    "format_float",
    "format_int",
    "float_map",
    "parse_float",
    # Implementations
    "InMemoryStore",
    "RedisStore",
]
