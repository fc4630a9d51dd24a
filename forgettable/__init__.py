"""
forgettable - Trending scores from time-decaying counters

Keeps, for every tracked metric, two exponentially decaying counters per
observed key in Redis:
- a fast-decaying primary counter
- a slow-decaying secondary baseline
Their ratio tells how hot a key is right now relative to its usual rate.

Quick Start:
    from datetime import timedelta
    from forgettable import Table

    with Table.from_config() as table:
        delta = table.create_delta("favorites", timedelta(days=7))
        delta.incr("art_1")
        print(delta.scores())

Quick Start (no Redis):
    from forgettable import Table, InMemoryStore

    table = Table(InMemoryStore())
"""

from forgettable.config import (
    ForgettableConfig,
    StoreConfig,
    DecayConfig,
    NORM_TIME_MULT,
    SCRUB_THRESHOLD,
)
from forgettable.counters import CounterSet, Delta, InvalidLifetimeError
from forgettable.decay import DecayReport
from forgettable.storage import (
    BaseStore,
    InMemoryStore,
    RedisStore,
    StorageError,
    DecodeError,
    MemberNotFoundError,
    MissingMetadataError,
    DecayWriteError,
)
from forgettable.api import Table

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "Table",
    "Delta",
    "CounterSet",
    "DecayReport",

    # Configuration
    "ForgettableConfig",
    "StoreConfig",
    "DecayConfig",
    "NORM_TIME_MULT",
    "SCRUB_THRESHOLD",

    # Stores
    "BaseStore",
    "InMemoryStore",
    "RedisStore",

    # Errors
    "InvalidLifetimeError",
    "StorageError",
    "DecodeError",
    "MemberNotFoundError",
    "MissingMetadataError",
    "DecayWriteError",
]
