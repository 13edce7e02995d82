# =============================================================================
# tests/test_throttle.py - Admin Login Throttle Tests
# =============================================================================
# Tests for app/auth/throttle.py with the in-memory store and a mocked Redis
# client. Time is driven by the FakeClock fixture from conftest.
# =============================================================================

from unittest.mock import MagicMock

import pytest

from app.auth.throttle import (
    REDIS_KEY_PREFIX,
    AttemptRecord,
    InMemoryAttemptStore,
    LoginThrottle,
    RedisAttemptStore,
)
from app.exceptions import TooManyAttemptsError

ADDRESS = "10.0.0.1"


@pytest.fixture
def throttle(clock):
    return LoginThrottle(InMemoryAttemptStore(), max_attempts=5, window_seconds=900, clock=clock)


# =============================================================================
# LoginThrottle
# =============================================================================

class TestLoginThrottle:
    """Test ceiling, window and reset behaviour."""

    def test_allows_until_ceiling(self, throttle):
        for _ in range(4):
            throttle.check(ADDRESS)
            throttle.record_failure(ADDRESS)

        throttle.check(ADDRESS)
        assert throttle.attempts(ADDRESS) == 4

    def test_sixth_attempt_refused(self, throttle):
        for _ in range(5):
            throttle.check(ADDRESS)
            throttle.record_failure(ADDRESS)

        with pytest.raises(TooManyAttemptsError) as exc_info:
            throttle.check(ADDRESS)

        assert exc_info.value.status_code == 429
        assert exc_info.value.headers["Retry-After"] == "900"

    def test_retry_after_counts_down(self, throttle, clock):
        for _ in range(5):
            throttle.record_failure(ADDRESS)
        clock.advance(600)

        with pytest.raises(TooManyAttemptsError) as exc_info:
            throttle.check(ADDRESS)

        assert exc_info.value.details["retry_after_seconds"] == 300

    def test_window_expiry_resets(self, throttle, clock):
        for _ in range(5):
            throttle.record_failure(ADDRESS)
        clock.advance(900)

        throttle.check(ADDRESS)
        assert throttle.attempts(ADDRESS) == 0

    def test_failure_after_expiry_starts_new_window(self, throttle, clock):
        for _ in range(3):
            throttle.record_failure(ADDRESS)
        clock.advance(1000)

        assert throttle.record_failure(ADDRESS) == 1

    def test_reset_on_success(self, throttle):
        for _ in range(5):
            throttle.record_failure(ADDRESS)

        throttle.reset(ADDRESS)

        throttle.check(ADDRESS)
        assert throttle.attempts(ADDRESS) == 0

    def test_addresses_are_independent(self, throttle):
        for _ in range(5):
            throttle.record_failure(ADDRESS)

        throttle.check("10.0.0.2")


# =============================================================================
# RedisAttemptStore
# =============================================================================

class TestRedisAttemptStore:
    """Test the Redis store against a mocked client."""

    def test_get_missing(self):
        client = MagicMock()
        client.hgetall.return_value = {}

        assert RedisAttemptStore(client).get(ADDRESS) is None
        client.hgetall.assert_called_once_with(f"{REDIS_KEY_PREFIX}{ADDRESS}")

    def test_get_parses_hash(self):
        client = MagicMock()
        client.hgetall.return_value = {"count": "3", "last_attempt_at": "1700000000.5"}

        record = RedisAttemptStore(client).get(ADDRESS)

        assert record == AttemptRecord(count=3, last_attempt_at=1700000000.5)

    def test_save_sets_hash_and_expiry(self):
        client = MagicMock()
        pipe = client.pipeline.return_value

        RedisAttemptStore(client).save(ADDRESS, AttemptRecord(2, 1700000000.0), ttl_seconds=900)

        key = f"{REDIS_KEY_PREFIX}{ADDRESS}"
        pipe.hset.assert_called_once_with(key, mapping={"count": 2, "last_attempt_at": 1700000000.0})
        pipe.expire.assert_called_once_with(key, 900)
        pipe.execute.assert_called_once()

    def test_delete(self):
        client = MagicMock()

        RedisAttemptStore(client).delete(ADDRESS)

        client.delete.assert_called_once_with(f"{REDIS_KEY_PREFIX}{ADDRESS}")

    def test_ping(self):
        client = MagicMock()
        client.ping.return_value = True

        assert LoginThrottle(RedisAttemptStore(client)).ping() is True
        client.ping.assert_called_once()
