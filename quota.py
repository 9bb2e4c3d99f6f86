"""Per-identity daily request quota kept in an expiring key-value store.

Counters live under ``rate_limit:<identity>:<YYYY-MM-DD>`` (UTC date), so a
new day starts a fresh bucket without any explicit reset. Each write refreshes
a 24 hour TTL and the store drops stale buckets on its own.

The read-then-write in :meth:`QuotaTracker.admit` is not atomic: concurrent
requests from one identity can read the same count and undercount slightly.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Mapping, Optional, Protocol

import redis

from logger import get_logger

logger = get_logger(__name__)

UNKNOWN_IDENTITY = "unknown"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


class RedisStore:
    """KeyValueStore backed by a Redis database."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._client = redis.Redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client.setex(key, ttl_seconds, value)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def quota_key(identity: str, day: date) -> str:
    """Build the bucket key for one identity on one UTC calendar day."""
    return f"rate_limit:{identity}:{day.isoformat()}"


def client_identity(headers: Mapping[str, str], header_name: str) -> str:
    """Return the caller IP from the trusted client-IP header.

    Only the first comma-separated value is used. Callers without the header
    all share the ``unknown`` bucket.
    """
    raw = headers.get(header_name.lower()) or headers.get(header_name) or ""
    first = raw.split(",")[0].strip()
    return first or UNKNOWN_IDENTITY


class QuotaTracker:
    """Admit or reject requests against a fixed daily limit per identity."""

    def __init__(
        self,
        store: KeyValueStore,
        daily_limit: int = 100,
        ttl_seconds: int = 86400,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self.store = store
        self.daily_limit = daily_limit
        self.ttl_seconds = ttl_seconds
        self.today = today

    def admit(self, identity: str) -> bool:
        """Count the request and return True, or return False once the limit is hit.

        Rejected requests are not written back, so the stored count never
        exceeds ``daily_limit`` through this path.
        """
        key = quota_key(identity, self.today())
        current = self.store.get(key)
        count = int(current) if current else 0

        if count >= self.daily_limit:
            logger.warning("Quota exhausted for %s (%d/%d)", identity, count, self.daily_limit)
            return False

        self.store.put(key, str(count + 1), self.ttl_seconds)
        logger.debug("Admitted %s (%d/%d)", identity, count + 1, self.daily_limit)
        return True
