"""
Table: the main entry point for forgettable.

Holds a store handle and hands out deltas and counter sets bound to it.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from forgettable.config import ForgettableConfig
from forgettable.counters.counter_set import CounterSet
from forgettable.counters.delta import Delta
from forgettable.decay.functions import _utcnow
from forgettable.storage.base import BaseStore
from forgettable.storage.redis_store import RedisStore


logger = logging.getLogger(__name__)


class Table:
    """
    A store of deltas.

    Usage:
        with Table.from_config() as table:
            delta = table.create_delta("favorites", timedelta(days=7))
            delta.incr("art_1")
            print(delta.scores())
    """

    def __init__(
        self,
        store: BaseStore,
        config: ForgettableConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.config = config or ForgettableConfig()
        self.clock = clock or _utcnow

    @classmethod
    def from_config(cls, config: ForgettableConfig | None = None) -> "Table":
        """Connect to the Redis store described by config."""
        config = config or ForgettableConfig()
        if config.debug:
            logging.getLogger("forgettable").setLevel(logging.DEBUG)
        logger.info(f"Opening table on {config.store.host}:{config.store.port}/{config.store.db}")
        return cls(RedisStore(config.store), config=config)

    def create_delta(
        self,
        name: str,
        lifetime: timedelta | float,
        anchor_date: datetime | None = None,
        replay: bool = False,
    ) -> Delta:
        """
        Create a delta with the given name.

        Args:
            name: Delta name
            lifetime: Mean lifetime of an observation
            anchor_date: Last decay date of the delta (defaults to now)
            replay: Anchor one lifetime ago to replay historical data

        Raises:
            InvalidLifetimeError: lifetime is not positive
        """
        return Delta.create(
            name,
            self.store,
            lifetime,
            anchor_date=anchor_date,
            replay=replay,
            clock=self.clock,
            config=self.config.decay,
        )

    def fetch_delta(self, name: str) -> Delta:
        """Handle to an existing delta (nothing is read or written)."""
        return Delta(name, self.store, clock=self.clock, config=self.config.decay)

    def counter_set(self, name: str) -> CounterSet:
        """Handle to a single counter set."""
        return CounterSet(
            name,
            self.store,
            clock=self.clock,
            scrub_threshold=self.config.decay.scrub_threshold,
        )

    def ping(self) -> bool:
        return self.store.ping()

    def close(self) -> None:
        """Close the store's connection pool."""
        self.store.close()

    def __enter__(self) -> "Table":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
