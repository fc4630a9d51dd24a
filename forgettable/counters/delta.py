"""
Deltas: trending scores from a pair of counter sets.

The primary set decays with the delta's lifetime; the secondary set
decays NORM_TIME_MULT times slower and serves as the baseline. The
ratio primary / secondary tells how active a key is now relative to
its usual rate.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from forgettable.config import DecayConfig
from forgettable.counters.counter_set import CounterSet
from forgettable.decay.functions import (
    _utcnow,
    ensure_utc,
    replay_anchor,
    secondary_anchor,
    to_timedelta,
)
from forgettable.storage.base import BaseStore


logger = logging.getLogger(__name__)


class InvalidLifetimeError(ValueError):
    """Raised when a delta is created with a non-positive lifetime."""

    pass


class Delta:
    """
    A trend described by two sets of counters.

    Usage:
        delta = Delta.create("favorites", store, timedelta(days=7), replay=True)
        delta.incr_by("art_1", 1.0, observed_at)
        scores = delta.scores()
    """

    def __init__(
        self,
        name: str,
        store: BaseStore,
        clock: Callable[[], datetime] | None = None,
        config: DecayConfig | None = None,
    ):
        self.name = name
        self.store = store
        self.clock = clock or _utcnow
        self.config = config or DecayConfig()
        self._primary: CounterSet | None = None
        self._secondary: CounterSet | None = None

    @classmethod
    def create(
        cls,
        name: str,
        store: BaseStore,
        lifetime: timedelta | float,
        anchor_date: datetime | None = None,
        replay: bool = False,
        clock: Callable[[], datetime] | None = None,
        config: DecayConfig | None = None,
    ) -> "Delta":
        """
        Create a delta and initialize both of its counter sets.

        Args:
            name: Delta name (also the primary set key)
            store: Store holding the sets
            lifetime: Mean lifetime of an observation (timedelta or seconds)
            anchor_date: Last decay date of the primary set (defaults to now)
            replay: Anchor one lifetime in the past so historical
                observations can be replayed; overrides anchor_date
            clock: Source of the current time
            config: Decay configuration

        Raises:
            InvalidLifetimeError: lifetime is not positive (nothing is written)
        """
        lifetime = to_timedelta(lifetime)
        if lifetime.total_seconds() <= 0:
            raise InvalidLifetimeError(
                "mean lifetime of an observation must be set to a positive number"
            )

        delta = cls(name, store, clock=clock, config=config)
        now = delta.now()
        if replay:
            anchor_date = replay_anchor(now, lifetime)
        elif anchor_date is None:
            anchor_date = now
        anchor_date = ensure_utc(anchor_date)

        # the secondary set starts further in the past than the primary
        # so it covers a window as long as its lifetime
        mult = delta.config.norm_time_mult
        CounterSet.create(
            delta.primary_key,
            store,
            lifetime,
            anchor_date,
            clock=delta.clock,
            scrub_threshold=delta.config.scrub_threshold,
        )
        CounterSet.create(
            delta.secondary_key,
            store,
            lifetime * mult,
            secondary_anchor(now, anchor_date, mult),
            clock=delta.clock,
            scrub_threshold=delta.config.scrub_threshold,
        )

        logger.info(f"Created delta {name!r} (lifetime={lifetime}, anchor={anchor_date.isoformat()}, replay={replay})")
        return delta

    def __repr__(self) -> str:
        return f"Delta(name={self.name!r})"

    def now(self) -> datetime:
        return ensure_utc(self.clock())

    @property
    def primary_key(self) -> str:
        return self.name

    @property
    def secondary_key(self) -> str:
        return f"{self.name}_{self.config.norm_time_mult}t"

    @property
    def primary(self) -> CounterSet:
        if self._primary is None:
            self._primary = self._counter_set(self.primary_key)
        return self._primary

    @property
    def secondary(self) -> CounterSet:
        if self._secondary is None:
            self._secondary = self._counter_set(self.secondary_key)
        return self._secondary

    def _counter_set(self, key: str) -> CounterSet:
        return CounterSet(
            key,
            self.store,
            clock=self.clock,
            scrub_threshold=self.config.scrub_threshold,
        )

    def incr(self, member: str) -> None:
        """Increment member by 1 at the current time."""
        self.incr_by(member, 1.0)

    def incr_by(
        self,
        member: str,
        amount: float = 1.0,
        timestamp: datetime | None = None,
    ) -> None:
        """
        Record an observation in both sets.

        Each set applies its own ordering guard, so a backdated
        observation may land in the secondary set only.
        """
        if timestamp is None:
            timestamp = self.now()
        self.primary.incr_by(member, amount, timestamp)
        self.secondary.incr_by(member, amount, timestamp)

    def scores(self) -> dict[str, float]:
        """
        Trending score of every key in the primary set.

        Returns:
            Mapping of key to primary / secondary. Keys with no baseline
            (secondary score missing or zero) score 0.
        """
        counts = self.primary.all_scores()
        norm = self.secondary.all_scores()

        result: dict[str, float] = {}
        for member, count in counts.items():
            baseline = norm.get(member, 0.0)
            result[member] = 0.0 if baseline == 0.0 else count / baseline
        return result

    def top(self, limit: int = -1) -> list[tuple[str, float]]:
        """
        Keys ranked by trending score, highest first.

        Args:
            limit: Maximum number of keys (-1 for all)
        """
        ranked = sorted(self.scores().items(), key=lambda item: item[1], reverse=True)
        if limit < 0:
            return ranked
        return ranked[:limit]
