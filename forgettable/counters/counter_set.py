"""
Counter sets: named collections of time-decaying scores.

A set is stored as a sorted set of raw scores plus two scalar keys:
the lifetime (decay time constant, seconds) and the date of the last
decay pass (whole Unix seconds). Scores are only decayed when read
through all_scores().
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from forgettable.config import SCRUB_THRESHOLD
from forgettable.decay.functions import (
    DecayReport,
    _utcnow,
    decay_factor,
    ensure_utc,
    from_epoch_seconds,
    to_epoch_seconds,
    to_timedelta,
)
from forgettable.storage.base import (
    BaseStore,
    DecayWriteError,
    DecodeError,
    MissingMetadataError,
    SetScore,
    SetValue,
    StorageError,
)
from forgettable.storage.encoding import format_float, format_int, parse_float


logger = logging.getLogger(__name__)

LAST_DECAY_SUFFIX = "_last_decay"
LIFETIME_SUFFIX = "_lifetime"


class CounterSet:
    """
    A collection of observables with a mean observation lifetime.

    Instances are stateless handles (name + store), so any number of them
    may refer to the same stored set. Decay is read-modify-write and is
    not isolated: callers must not run all_scores() concurrently on the
    same set.

    Usage:
        counters = CounterSet.create("favorites", store, timedelta(days=7))
        counters.incr("art_1")
        scores = counters.all_scores()
    """

    def __init__(
        self,
        name: str,
        store: BaseStore,
        clock: Callable[[], datetime] | None = None,
        scrub_threshold: float = SCRUB_THRESHOLD,
    ):
        self.name = name
        self.store = store
        self.clock = clock or _utcnow
        self.scrub_threshold = scrub_threshold

    @classmethod
    def create(
        cls,
        name: str,
        store: BaseStore,
        lifetime: timedelta | float,
        last_decay_date: datetime,
        clock: Callable[[], datetime] | None = None,
        scrub_threshold: float = SCRUB_THRESHOLD,
    ) -> "CounterSet":
        """Create a set by persisting its lifetime and decay anchor."""
        counter_set = cls(name, store, clock=clock, scrub_threshold=scrub_threshold)
        lifetime = to_timedelta(lifetime)
        if lifetime.total_seconds() <= 0:
            raise ValueError("lifetime must be a positive duration")
        store.batch([
            SetValue(counter_set.last_decay_key, format_int(to_epoch_seconds(last_decay_date))),
            SetValue(counter_set.lifetime_key, format_float(lifetime.total_seconds())),
        ])
        return counter_set

    def __repr__(self) -> str:
        return f"CounterSet(name={self.name!r})"

    def now(self) -> datetime:
        """Current time from the injected clock (UTC)."""
        return ensure_utc(self.clock())

    @property
    def lifetime_key(self) -> str:
        return self.name + LIFETIME_SUFFIX

    @property
    def last_decay_key(self) -> str:
        return self.name + LAST_DECAY_SUFFIX

    # Observations
    def incr(self, member: str) -> bool:
        """Increment member by 1 at the current time."""
        return self.incr_by(member, 1.0)

    def incr_by(
        self,
        member: str,
        amount: float = 1.0,
        timestamp: datetime | None = None,
    ) -> bool:
        """
        Add amount to the raw score of member.

        Observations dated at or before the last decay date are dropped:
        the scores have already been decayed past that instant, so adding
        them at full weight would overcount.

        Args:
            member: Observed key
            amount: Amount to add (no decay is applied at write time)
            timestamp: When the observation happened (defaults to now)

        Returns:
            True if recorded, False if dropped by the ordering guard
        """
        timestamp = ensure_utc(timestamp) if timestamp is not None else self.now()
        if timestamp <= self.last_decay_date():
            logger.debug(f"Dropped stale observation of {member!r} on {self.name!r} at {timestamp.isoformat()}")
            return False
        self.store.incr_score(self.name, amount, member)
        return True

    # Reads
    def all_scores(self) -> dict[str, float]:
        """
        Decay, scrub and return every score in the set.

        Raises:
            DecayWriteError: the decay rewrite failed; nothing was changed
        """
        self.decay()
        self.scrub()
        return self.fetch(-1)

    def fetch(self, limit: int = -1) -> dict[str, float]:
        """
        Scores from highest to lowest, without decaying first.

        Args:
            limit: Maximum number of members (-1 for all)

        Returns:
            Ordered mapping of member to score as of the last decay pass
        """
        if limit == 0:
            return {}
        stop = -1 if limit < 0 else limit - 1
        return self.store.rev_range(self.name, 0, stop)

    def score(self, member: str) -> float:
        """Stored score of one member (not decayed)."""
        return self.store.get_score(self.name, member)

    # Metadata
    def init_lifetime(self, duration: timedelta | float) -> None:
        """Persist the decay time constant."""
        duration = to_timedelta(duration)
        if duration.total_seconds() <= 0:
            raise ValueError("lifetime must be a positive duration")
        self.store.set_value(self.lifetime_key, format_float(duration.total_seconds()))

    def get_lifetime(self) -> timedelta:
        """
        The decay time constant of this set.

        Raises:
            MissingMetadataError: the set was never created
        """
        raw = self.store.get_value(self.lifetime_key)
        if raw is None:
            raise MissingMetadataError(f"No lifetime stored for set {self.name!r}")
        return timedelta(seconds=parse_float(raw))

    def update_decay_date(self, timestamp: datetime) -> None:
        """Persist timestamp (whole seconds) as the last decay date."""
        self.store.set_value(self.last_decay_key, format_int(to_epoch_seconds(timestamp)))

    def last_decay_date(self) -> datetime:
        """Date of the last decay pass (the Unix epoch if never set)."""
        raw = self.store.get_value(self.last_decay_key)
        if raw is None:
            return from_epoch_seconds(0)
        try:
            return from_epoch_seconds(int(raw))
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Unparsable decay date {raw!r} for set {self.name!r}") from e

    # Maintenance
    def decay(self, now: datetime | None = None) -> DecayReport:
        """
        Apply exponential decay to every member up to now.

        All rewritten scores and the new decay date are committed in one
        batch, so a failed pass leaves the set exactly as it was. Time is
        counted in whole seconds, matching the persisted decay date.
        """
        now_seconds = to_epoch_seconds(now if now is not None else self.now())
        last_seconds = to_epoch_seconds(self.last_decay_date())
        lifetime_seconds = self.get_lifetime().total_seconds()

        elapsed = now_seconds - last_seconds
        if elapsed <= 0:
            return DecayReport(
                set_name=self.name,
                elapsed_seconds=0.0,
                factor=1.0,
                applied=False,
            )

        factor = decay_factor(elapsed, lifetime_seconds)
        members = self.fetch(-1)
        operations = [
            SetScore(self.name, member, score * factor)
            for member, score in members.items()
        ]
        operations.append(SetValue(self.last_decay_key, format_int(now_seconds)))

        try:
            self.store.batch(operations)
        except StorageError as e:
            logger.error(f"Could not decay set {self.name!r}: {e}")
            raise DecayWriteError(f"Could not decay set {self.name!r}") from e

        logger.debug(f"Decayed {len(members)} members of {self.name!r} by {factor:.6f} over {elapsed}s")
        return DecayReport(
            set_name=self.name,
            elapsed_seconds=float(elapsed),
            factor=factor,
            members_rewritten=len(members),
        )

    def scrub(self) -> int:
        """Remove members whose score fell below the scrub threshold."""
        removed = self.store.remove_by_score(
            self.name,
            float("-inf"),
            self.scrub_threshold,
            max_exclusive=True,
        )
        if removed:
            logger.debug(f"Scrubbed {removed} members from {self.name!r}")
        return removed
