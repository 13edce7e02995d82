# =============================================================================
# app/auth/throttle.py - Admin Code Attempt Throttle
# =============================================================================
# Limits failed admin code exchanges per client address.
#
# Contract:
# - after ADMIN_MAX_ATTEMPTS failures, further attempts are refused with
#   TooManyAttemptsError until ADMIN_LOCKOUT_MINUTES pass since the last
#   failure, whether or not the presented code is correct
# - once that window has passed the counter starts again from zero
# - a successful exchange clears the counter
#
# Counters live in an AttemptStore:
# - InMemoryAttemptStore: process-local. Lost on restart and not shared
#   between server instances, so it only holds for a single instance.
# - RedisAttemptStore: shared between instances through Redis.
# =============================================================================

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from app.exceptions import TooManyAttemptsError

logger = logging.getLogger(__name__)

# Redis key prefix for attempt counters
REDIS_KEY_PREFIX = "collab:admin-attempts:"


@dataclass
class AttemptRecord:
    """Failed attempts from one client, and when the last one happened."""
    count: int
    last_attempt_at: float


# =============================================================================
# Attempt Stores
# =============================================================================

class AttemptStore(Protocol):
    def get(self, key: str) -> AttemptRecord | None: ...

    def save(self, key: str, record: AttemptRecord, ttl_seconds: int) -> None: ...

    def delete(self, key: str) -> None: ...

    def ping(self) -> bool: ...


class InMemoryAttemptStore:
    """Attempt counters in a dict guarded by a lock."""

    def __init__(self):
        self._records: dict[str, AttemptRecord] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> AttemptRecord | None:
        with self._lock:
            record = self._records.get(key)
            return AttemptRecord(record.count, record.last_attempt_at) if record else None

    def save(self, key: str, record: AttemptRecord, ttl_seconds: int) -> None:
        with self._lock:
            self._records[key] = AttemptRecord(record.count, record.last_attempt_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def ping(self) -> bool:
        return True


class RedisAttemptStore:
    """
    Attempt counters in Redis hashes, expiring with the lockout window.

    Usage:
        store = RedisAttemptStore.from_url(settings.REDIS_URL)
    """

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisAttemptStore":
        import redis
        return cls(redis.from_url(url, decode_responses=True))

    def _key(self, key: str) -> str:
        return f"{REDIS_KEY_PREFIX}{key}"

    def get(self, key: str) -> AttemptRecord | None:
        data = self.client.hgetall(self._key(key))
        if not data:
            return None
        return AttemptRecord(count=int(data["count"]), last_attempt_at=float(data["last_attempt_at"]))

    def save(self, key: str, record: AttemptRecord, ttl_seconds: int) -> None:
        redis_key = self._key(key)
        pipe = self.client.pipeline()
        pipe.hset(redis_key, mapping={"count": record.count, "last_attempt_at": record.last_attempt_at})
        pipe.expire(redis_key, ttl_seconds)
        pipe.execute()

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))

    def ping(self) -> bool:
        return bool(self.client.ping())


# =============================================================================
# Throttle
# =============================================================================

class LoginThrottle:
    """
    Per-client failed attempt limiter for the admin code exchange.

    Args:
        store: Where counters are kept
        max_attempts: Failures allowed inside one window
        window_seconds: Lockout window, measured from the last failure
        clock: Time source in seconds (injectable for tests)
    """

    def __init__(
        self,
        store: AttemptStore,
        max_attempts: int = 5,
        window_seconds: int = 15 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.clock = clock

    def _current(self, key: str) -> AttemptRecord | None:
        record = self.store.get(key)
        if record is None:
            return None
        if self.clock() - record.last_attempt_at >= self.window_seconds:
            self.store.delete(key)
            return None
        return record

    def check(self, key: str) -> None:
        """
        Refuse the attempt if the client is locked out.

        Raises:
            TooManyAttemptsError: With the seconds left until the window ends
        """
        record = self._current(key)
        if record is None or record.count < self.max_attempts:
            return

        remaining = self.window_seconds - (self.clock() - record.last_attempt_at)
        logger.warning(f"Admin login locked out for {key} ({record.count} failed attempts)")
        raise TooManyAttemptsError(retry_after_seconds=max(1, math.ceil(remaining)))

    def record_failure(self, key: str) -> int:
        """Count a failed attempt. Returns the failures in the current window."""
        record = self._current(key)
        count = record.count + 1 if record else 1
        self.store.save(key, AttemptRecord(count=count, last_attempt_at=self.clock()), self.window_seconds)
        logger.info(f"Failed admin login from {key} ({count}/{self.max_attempts})")
        return count

    def reset(self, key: str) -> None:
        self.store.delete(key)

    def ping(self) -> bool:
        """True when the attempt store is reachable."""
        return self.store.ping()

    def attempts(self, key: str) -> int:
        record = self._current(key)
        return record.count if record else 0
