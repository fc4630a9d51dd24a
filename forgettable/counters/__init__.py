"""
Counter sets and deltas.

Provides:
- CounterSet: lazily decaying scores with an ordering guard
- Delta: primary / secondary sets producing a normalized trend ratio
"""

from forgettable.counters.counter_set import (
    CounterSet,
    LAST_DECAY_SUFFIX,
    LIFETIME_SUFFIX,
)
from forgettable.counters.delta import Delta, InvalidLifetimeError

__all__ = [
    "CounterSet",
    "Delta",
    "InvalidLifetimeError",
    "LAST_DECAY_SUFFIX",
    "LIFETIME_SUFFIX",
]
