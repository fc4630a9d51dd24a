"""
Decay functions for time-decaying counters.

Counters forget exponentially: after `t` seconds a score `v` has become
v × e^(-t / lifetime), where lifetime is the characteristic time.
"""

import math
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_epoch_seconds(value: datetime) -> int:
    """Whole Unix seconds for a datetime (sub-second part is dropped)."""
    return math.floor(ensure_utc(value).timestamp())


def from_epoch_seconds(seconds: int) -> datetime:
    """Timezone-aware UTC datetime for Unix seconds."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def to_timedelta(value: timedelta | float) -> timedelta:
    """Accept a timedelta or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


class DecayReport(BaseModel):
    """Result of one decay pass over a counter set."""

    set_name: str
    elapsed_seconds: float = Field(ge=0.0)
    factor: float = Field(ge=0.0, le=1.0)
    members_rewritten: int = Field(default=0, ge=0)
    applied: bool = Field(
        default=True,
        description="False when the clock had not moved past the last decay date",
    )


def decay_factor(elapsed_seconds: float, lifetime_seconds: float) -> float:
    """
    Multiplier applied to every score after elapsed_seconds.

    Formula: e^(-Δt / lifetime)

    Negative elapsed time is clamped to zero so a decay pass never
    grows a score.
    """
    if lifetime_seconds <= 0:
        raise ValueError("lifetime must be positive")
    return math.exp(-max(0.0, elapsed_seconds) / lifetime_seconds)


def exponential_decay(
    score: float,
    elapsed_seconds: float,
    lifetime_seconds: float,
) -> float:
    """Decay a single score over elapsed_seconds."""
    return score * decay_factor(elapsed_seconds, lifetime_seconds)


def secondary_anchor(now: datetime, anchor: datetime, multiplier: int) -> datetime:
    """
    Decay anchor for the secondary (baseline) set of a delta.

    The distance between now and the primary anchor is stretched by the
    multiplier, so the baseline covers a window as many times longer as
    its lifetime.
    """
    return now - (now - anchor) * multiplier


def replay_anchor(now: datetime, lifetime: timedelta) -> datetime:
    """Anchor one lifetime in the past, admitting backdated observations."""
    return now - lifetime
