"""
Abstract base class for store backends.

Defines the sorted-set and scalar capabilities the counter sets consume.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Union


# Custom exceptions
class StorageError(Exception):
    """Base exception for store errors."""

    pass


class DecodeError(StorageError):
    """Raised when a store reply cannot be decoded."""

    pass


class MemberNotFoundError(StorageError):
    """Raised when a member has no score in a sorted set."""

    pass


class MissingMetadataError(StorageError):
    """Raised when a set's lifetime or decay metadata is absent."""

    pass


class DecayWriteError(StorageError):
    """Raised when the atomic decay rewrite of a set fails."""

    pass


@dataclass(frozen=True)
class SetScore:
    """Batch operation: set the absolute score of a member."""

    key: str
    member: str
    score: float


@dataclass(frozen=True)
class SetValue:
    """Batch operation: set a scalar value."""

    key: str
    value: str


BatchOperation = Union[SetScore, SetValue]


class BaseStore(ABC):
    """
    Abstract base class for ordered key-value stores.

    Every method is a blocking call that borrows a connection for its own
    duration and releases it on every exit path.
    """

    @abstractmethod
    def incr_score(self, key: str, amount: float, member: str) -> float:
        """
        Add amount to a member's score, creating the member if absent.

        Returns:
            The new score
        """
        pass

    @abstractmethod
    def set_score(self, key: str, score: float, member: str) -> None:
        """Set the absolute score of a member."""
        pass

    @abstractmethod
    def get_score(self, key: str, member: str) -> float:
        """
        Get a member's score.

        Raises:
            MemberNotFoundError: member has no score
            DecodeError: the stored score is unparsable
        """
        pass

    @abstractmethod
    def rev_range(self, key: str, start: int, stop: int) -> dict[str, float]:
        """
        Get members ranked by score, highest first.

        Args:
            key: Sorted set key
            start: First rank (0-based)
            stop: Last rank, inclusive (-1 for the end)

        Returns:
            Ordered mapping of member to score
        """
        pass

    @abstractmethod
    def remove_by_score(
        self,
        key: str,
        min_score: float,
        max_score: float,
        max_exclusive: bool = False,
    ) -> int:
        """
        Remove members whose score lies in [min_score, max_score].

        Args:
            key: Sorted set key
            min_score: Lower bound (inclusive, may be -inf)
            max_score: Upper bound
            max_exclusive: Exclude max_score itself from the range

        Returns:
            Number of members removed
        """
        pass

    @abstractmethod
    def get_value(self, key: str) -> str | None:
        """Get a scalar value (None if absent)."""
        pass

    @abstractmethod
    def set_value(self, key: str, value: str) -> None:
        """Set a scalar value."""
        pass

    @abstractmethod
    def batch(self, operations: Iterable[BatchOperation]) -> None:
        """
        Apply operations as one atomic unit.

        Either every operation is applied or none is.
        """
        pass

    @abstractmethod
    def ping(self) -> bool:
        """Check that the store is reachable."""
        pass

    def close(self) -> None:
        """Release any pooled connections."""
        pass

    # Context manager support
    def __enter__(self) -> "BaseStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
