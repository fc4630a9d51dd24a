"""
Trending favorites example for forgettable.

This example demonstrates:
1. Creating a delta in replay mode
2. Backfilling two weeks of historical observations
3. Reading normalized trending scores

Runs against Redis when REDIS_URL is set, otherwise in memory.
"""

import logging
import os
from datetime import datetime, timedelta, timezone

from forgettable import InMemoryStore, RedisStore, Table


def main():
    logging.basicConfig(level=logging.INFO)

    redis_url = os.environ.get("REDIS_URL")
    store = RedisStore.from_url(redis_url) if redis_url else InMemoryStore()

    now = datetime.now(timezone.utc)
    favorites = [
        ("art_1", now - timedelta(days=14)),
        ("art_2", now - timedelta(days=10)),
        ("art_2", now - timedelta(days=7)),
        ("art_1", now - timedelta(days=1)),
        ("art_1", now),
    ]

    with Table(store) as table:
        delta = table.create_delta("favorites", timedelta(hours=168), replay=True)
        for key, observed_at in favorites:
            delta.incr_by(key, 1.0, observed_at)

        print("\n" + "=" * 60)
        print("TRENDING FAVORITES")
        print("=" * 60)
        for key, score in delta.top():
            print(f"  {key}: {score:.4f}")


if __name__ == "__main__":
    main()
