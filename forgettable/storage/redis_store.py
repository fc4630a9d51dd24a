"""
Redis store backend.

Uses redis-py with a shared connection pool. Every command borrows a
connection from the pool and returns it when the command completes,
including when it fails.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

import redis

from forgettable.config import StoreConfig
from forgettable.storage.base import (
    BaseStore,
    BatchOperation,
    MemberNotFoundError,
    SetScore,
    SetValue,
    StorageError,
)
from forgettable.storage.encoding import float_map, format_float, format_int, parse_float


logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(command: str) -> Iterator[None]:
    """Translate redis-py failures into StorageError."""
    try:
        yield
    except redis.RedisError as e:
        raise StorageError(f"{command} failed: {e}") from e


class RedisStore(BaseStore):
    """
    Redis-backed store.

    Usage:
        store = RedisStore(StoreConfig(host="localhost"))
        store.incr_score("favorites", 1.0, "art_1")
        store.close()
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        client: redis.Redis | None = None,
    ):
        """
        Initialize the Redis store.

        Args:
            config: Store configuration (ignored when client is given)
            client: Pre-built redis client, e.g. from RedisStore.from_url
        """
        self.config = config or StoreConfig()
        self._pool: redis.ConnectionPool | None = None
        if client is None:
            pool = redis.ConnectionPool(
                host=self.config.host,
                port=self.config.port,
                password=self.config.password,
                db=self.config.db,
                max_connections=self.config.max_connections,
                health_check_interval=self.config.health_check_interval_seconds,
                socket_timeout=self.config.socket_timeout_seconds,
                decode_responses=True,
            )
            client = redis.Redis(connection_pool=pool)
            self._pool = pool
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisStore":
        """Create a store from a redis:// URL."""
        return cls(client=redis.Redis.from_url(url, decode_responses=True))

    def incr_score(self, key: str, amount: float, member: str) -> float:
        with _store_errors("ZINCRBY"):
            reply = self._client.execute_command(
                "ZINCRBY", key, format_float(amount), member
            )
        return parse_float(reply)

    def set_score(self, key: str, score: float, member: str) -> None:
        with _store_errors("ZADD"):
            self._client.execute_command("ZADD", key, format_float(score), member)

    def get_score(self, key: str, member: str) -> float:
        with _store_errors("ZSCORE"):
            reply = self._client.execute_command("ZSCORE", key, member)
        if reply is None:
            raise MemberNotFoundError(f"{member!r} has no score in {key!r}")
        return parse_float(reply)

    def rev_range(self, key: str, start: int, stop: int) -> dict[str, float]:
        with _store_errors("ZREVRANGE"):
            reply = self._client.execute_command(
                "ZREVRANGE", key, format_int(start), format_int(stop), "WITHSCORES"
            )
        return float_map(reply)

    def remove_by_score(
        self,
        key: str,
        min_score: float,
        max_score: float,
        max_exclusive: bool = False,
    ) -> int:
        upper = format_float(max_score)
        if max_exclusive:
            upper = "(" + upper
        with _store_errors("ZREMRANGEBYSCORE"):
            removed = self._client.execute_command(
                "ZREMRANGEBYSCORE", key, format_float(min_score), upper
            )
        return int(removed or 0)

    def get_value(self, key: str) -> str | None:
        with _store_errors("GET"):
            return self._client.execute_command("GET", key)

    def set_value(self, key: str, value: str) -> None:
        with _store_errors("SET"):
            self._client.execute_command("SET", key, value)

    def batch(self, operations: Iterable[BatchOperation]) -> None:
        operations = list(operations)
        with _store_errors("MULTI/EXEC"):
            with self._client.pipeline(transaction=True) as pipe:
                for op in operations:
                    if isinstance(op, SetScore):
                        pipe.execute_command(
                            "ZADD", op.key, format_float(op.score), op.member
                        )
                    elif isinstance(op, SetValue):
                        pipe.execute_command("SET", op.key, op.value)
                    else:
                        raise StorageError(f"Unsupported batch operation: {op!r}")
                pipe.execute()
        logger.debug(f"Committed batch of {len(operations)} operations")

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    def close(self) -> None:
        self._client.close()
        if self._pool is not None:
            self._pool.disconnect()
