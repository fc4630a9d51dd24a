"""
In-process store backend.

Keeps sorted sets and scalar values in dictionaries guarded by a lock.
Useful for tests and single-process deployments without Redis.
"""

import threading
from typing import Iterable

from forgettable.storage.base import (
    BaseStore,
    BatchOperation,
    MemberNotFoundError,
    SetScore,
    SetValue,
    StorageError,
)
from forgettable.storage.encoding import format_float, parse_float


class InMemoryStore(BaseStore):
    """
    Dictionary-backed store with Redis sorted-set semantics.

    Scores are stored through the same canonical encoding as the Redis
    backend so values read back identically.
    """

    def __init__(self):
        self._sets: dict[str, dict[str, str]] = {}
        self._values: dict[str, str] = {}
        self._lock = threading.RLock()

    def _members(self, key: str) -> dict[str, float]:
        return {m: parse_float(s) for m, s in self._sets.get(key, {}).items()}

    def incr_score(self, key: str, amount: float, member: str) -> float:
        with self._lock:
            members = self._sets.setdefault(key, {})
            current = parse_float(members[member]) if member in members else 0.0
            members[member] = format_float(current + amount)
            return parse_float(members[member])

    def set_score(self, key: str, score: float, member: str) -> None:
        with self._lock:
            self._sets.setdefault(key, {})[member] = format_float(score)

    def get_score(self, key: str, member: str) -> float:
        with self._lock:
            members = self._sets.get(key, {})
            if member not in members:
                raise MemberNotFoundError(f"{member!r} has no score in {key!r}")
            return parse_float(members[member])

    def rev_range(self, key: str, start: int, stop: int) -> dict[str, float]:
        with self._lock:
            ranked = sorted(
                self._members(key).items(),
                key=lambda item: (item[1], item[0]),
                reverse=True,
            )
        size = len(ranked)
        if start < 0:
            start = max(0, size + start)
        if stop < 0:
            stop = size + stop
        if start > stop or start >= size:
            return {}
        return dict(ranked[start : stop + 1])

    def remove_by_score(
        self,
        key: str,
        min_score: float,
        max_score: float,
        max_exclusive: bool = False,
    ) -> int:
        def in_range(score: float) -> bool:
            if score < min_score:
                return False
            return score < max_score if max_exclusive else score <= max_score

        with self._lock:
            members = self._sets.get(key, {})
            doomed = [m for m, s in members.items() if in_range(parse_float(s))]
            for member in doomed:
                del members[member]
            if not members:
                self._sets.pop(key, None)
            return len(doomed)

    def get_value(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set_value(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = str(value)

    def batch(self, operations: Iterable[BatchOperation]) -> None:
        operations = list(operations)
        for op in operations:
            if not isinstance(op, (SetScore, SetValue)):
                raise StorageError(f"Unsupported batch operation: {op!r}")
        # encode everything up front so a bad score aborts before any write
        encoded = [
            (op, format_float(op.score) if isinstance(op, SetScore) else op.value)
            for op in operations
        ]
        with self._lock:
            for op, value in encoded:
                if isinstance(op, SetScore):
                    self._sets.setdefault(op.key, {})[op.member] = value
                else:
                    self._values[op.key] = value

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass
