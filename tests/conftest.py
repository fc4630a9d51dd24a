"""
Pytest configuration and shared fixtures.
"""

import pytest
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from forgettable.storage.memory import InMemoryStore


# Half a second past a whole second: decay dates persist whole seconds,
# so observations made "now" stay strictly after a same-second anchor.
START = datetime(2023, 11, 14, 22, 13, 20, 500000, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    """Provide a frozen clock."""
    return FrozenClock()


@pytest.fixture
def store():
    """Provide an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def temp_directory():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
