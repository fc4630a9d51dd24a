"""
Tests for counter sets: ordering guard, lazy decay and scrubbing.
"""

import math
import pytest
from datetime import timedelta

from forgettable.counters.counter_set import CounterSet
from forgettable.decay.functions import to_epoch_seconds
from forgettable.storage.base import (
    DecayWriteError,
    DecodeError,
    MemberNotFoundError,
    MissingMetadataError,
    StorageError,
)
from forgettable.storage.memory import InMemoryStore


DAY = timedelta(days=1)


class FailingBatchStore(InMemoryStore):
    """In-memory store whose transactions always fail."""

    def batch(self, operations):
        raise StorageError("EXECABORT")


@pytest.fixture
def counters(store, clock):
    """A set with a one-day lifetime anchored at the current time."""
    return CounterSet.create("views", store, DAY, clock(), clock=clock)


class TestCreate:
    """Tests for set creation and metadata."""

    def test_persists_metadata(self, store, clock):
        counters = CounterSet.create("views", store, DAY, clock(), clock=clock)

        assert counters.get_lifetime() == DAY
        assert to_epoch_seconds(counters.last_decay_date()) == to_epoch_seconds(clock())
        assert store.get_value("views_lifetime") == "86400"
        assert store.get_value("views_last_decay") == "1700000000"

    def test_rejects_non_positive_lifetime(self, store, clock):
        with pytest.raises(ValueError):
            CounterSet.create("views", store, 0, clock(), clock=clock)
        assert store.get_value("views_lifetime") is None

    def test_init_lifetime(self, store):
        counters = CounterSet("views", store)
        counters.init_lifetime(3600)
        assert counters.get_lifetime() == timedelta(hours=1)

        with pytest.raises(ValueError):
            counters.init_lifetime(-1)

    def test_update_decay_date(self, counters, clock):
        later = clock() + DAY
        counters.update_decay_date(later)
        assert to_epoch_seconds(counters.last_decay_date()) == to_epoch_seconds(later)

    def test_missing_decay_date_is_epoch(self, store):
        assert to_epoch_seconds(CounterSet("nothing", store).last_decay_date()) == 0

    def test_corrupt_decay_date(self, store):
        store.set_value("views_last_decay", "yesterday")
        with pytest.raises(DecodeError):
            CounterSet("views", store).last_decay_date()

    def test_missing_lifetime(self, store, clock):
        counters = CounterSet("views", store, clock=clock)
        counters.update_decay_date(clock() - DAY)
        with pytest.raises(MissingMetadataError):
            counters.all_scores()


class TestIncrBy:
    """Tests for observations and the ordering guard."""

    def test_adds_exact_amount(self, counters, clock):
        """Observations after the decay date add their raw amount."""
        assert counters.incr_by("a", 1.5, clock())
        assert counters.incr_by("a", 2.25, clock())
        assert counters.score("a") == 3.75

    def test_defaults_to_now(self, counters):
        assert counters.incr("a")
        assert counters.score("a") == 1.0

    def test_at_decay_date_is_dropped(self, counters):
        """An observation exactly at the decay date is not recorded."""
        assert not counters.incr_by("a", 1.0, counters.last_decay_date())
        with pytest.raises(MemberNotFoundError):
            counters.score("a")

    def test_before_decay_date_is_dropped(self, counters, clock):
        counters.incr_by("a", 1.0, clock())

        assert not counters.incr_by("a", 5.0, clock() - timedelta(hours=1))
        assert counters.score("a") == 1.0

    def test_guard_moves_with_decay(self, counters, clock):
        """After a decay pass, observations older than the pass are dropped."""
        before = clock()
        clock.advance(hours=2)
        counters.all_scores()

        assert not counters.incr_by("a", 1.0, before + timedelta(hours=1))
        assert counters.incr_by("a", 1.0, clock())


class TestAllScores:
    """Tests for lazy decay on read."""

    def test_exact_decay_formula(self, counters, clock):
        counters.incr_by("a", 10.0, clock())
        clock.advance(hours=3)

        scores = counters.all_scores()

        assert scores["a"] == pytest.approx(10.0 * math.exp(-10800 / 86400))

    def test_decay_is_monotonic(self, counters, clock):
        """Without new observations scores never increase."""
        counters.incr_by("a", 4.0, clock())
        counters.incr_by("b", 1.0, clock())

        previous = counters.all_scores()
        for hours in [1, 5, 12, 30]:
            clock.advance(hours=hours)
            current = counters.all_scores()
            for member, score in current.items():
                assert score <= previous[member]
            previous = current

    def test_zero_elapsed_is_idempotent(self, counters, clock):
        counters.incr_by("a", 3.0, clock())
        clock.advance(minutes=10)

        first = counters.all_scores()
        second = counters.all_scores()

        assert first == second

    def test_advances_decay_date(self, counters, clock):
        clock.advance(hours=6)
        counters.all_scores()
        assert to_epoch_seconds(counters.last_decay_date()) == to_epoch_seconds(clock())

    def test_clock_behind_anchor(self, store, clock):
        """A clock behind the decay date neither grows scores nor rewinds the date."""
        anchor = clock() + DAY
        counters = CounterSet.create("views", store, DAY, anchor, clock=clock)
        store.incr_score("views", 2.0, "a")

        report = counters.decay()

        assert not report.applied
        assert report.factor == 1.0
        assert counters.all_scores() == {"a": 2.0}
        assert to_epoch_seconds(counters.last_decay_date()) == to_epoch_seconds(anchor)

    def test_decay_report(self, counters, clock):
        counters.incr_by("a", 1.0, clock())
        counters.incr_by("b", 1.0, clock())
        clock.advance(days=1)

        report = counters.decay()

        assert report.applied
        assert report.elapsed_seconds == 86400.0
        assert report.factor == pytest.approx(math.exp(-1))
        assert report.members_rewritten == 2

    def test_failed_decay_leaves_set_unchanged(self, clock):
        """A failed rewrite keeps scores and decay date, and is raised."""
        store = FailingBatchStore()
        store.set_value("views_lifetime", "86400")
        store.set_value("views_last_decay", str(to_epoch_seconds(clock())))
        counters = CounterSet("views", store, clock=clock)
        counters.incr_by("a", 2.0, clock())
        clock.advance(hours=12)

        with pytest.raises(DecayWriteError):
            counters.all_scores()

        assert counters.score("a") == 2.0
        assert store.get_value("views_last_decay") == "1700000000"


class TestScrub:
    """Tests for near-zero scrubbing."""

    def test_below_threshold_removed(self, counters, store, clock):
        store.set_score("views", 0.00005, "tiny")
        store.set_score("views", 0.0001, "edge")
        store.set_score("views", 1.0, "big")

        scores = counters.all_scores()

        assert "tiny" not in scores
        assert scores == {"big": 1.0, "edge": 0.0001}

    def test_negative_scores_removed(self, counters, clock):
        counters.incr_by("a", -3.0, clock())
        assert counters.all_scores() == {}

    def test_decayed_to_nothing(self, counters, clock):
        """Members that decay below the threshold vanish from later reads."""
        counters.incr_by("a", 1.0, clock())
        counters.incr_by("b", 1000.0, clock())
        clock.advance(days=10)

        scores = counters.all_scores()

        assert "a" not in scores
        assert "a" not in counters.fetch()
        assert scores["b"] == pytest.approx(1000.0 * math.exp(-10))

    def test_custom_threshold(self, store, clock):
        counters = CounterSet.create(
            "views", store, DAY, clock(), clock=clock, scrub_threshold=0.5
        )
        store.set_score("views", 0.4, "a")
        store.set_score("views", 0.6, "b")

        assert counters.all_scores() == {"b": 0.6}


class TestFetch:
    """Tests for the possibly-stale read path."""

    def test_does_not_decay(self, counters, clock):
        counters.incr_by("a", 2.0, clock())
        clock.advance(days=3)

        assert counters.fetch() == {"a": 2.0}
        assert to_epoch_seconds(counters.last_decay_date()) < to_epoch_seconds(clock())

    def test_limit(self, counters, clock):
        counters.incr_by("a", 1.0, clock())
        counters.incr_by("b", 3.0, clock())
        counters.incr_by("c", 2.0, clock())

        assert list(counters.fetch(2)) == ["b", "c"]
        assert list(counters.fetch(-1)) == ["b", "c", "a"]
        assert counters.fetch(0) == {}

    def test_reflects_last_decay(self, counters, clock):
        counters.incr_by("a", 2.0, clock())
        clock.advance(days=1)
        decayed = counters.all_scores()

        clock.advance(days=1)
        assert counters.fetch() == decayed
