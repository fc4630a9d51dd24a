"""
Decay module for counter score management.

Provides:
- Exponential decay of scores over elapsed time
- Anchor calculations for primary / secondary sets
- Epoch-second conversions for persisted decay dates
"""

from forgettable.decay.functions import (
    DecayReport,
    decay_factor,
    exponential_decay,
    secondary_anchor,
    replay_anchor,
    ensure_utc,
    to_timedelta,
    to_epoch_seconds,
    from_epoch_seconds,
)

__all__ = [
    "DecayReport",
    "decay_factor",
    "exponential_decay",
    "secondary_anchor",
    "replay_anchor",
    "ensure_utc",
    "to_timedelta",
    "to_epoch_seconds",
    "from_epoch_seconds",
]
