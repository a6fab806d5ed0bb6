"""Tests for sign-in rate limiting."""

import pytest

from agape.auth.rate_limiter import STORAGE_KEY, RateLimiter, format_time_remaining
from agape.config.schema import RateLimitConfig


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(storage, clock) -> RateLimiter:
    return RateLimiter(storage, RateLimitConfig(max_attempts=5, lockout_seconds=900), clock=clock)


def test_fresh_state(limiter):
    status = limiter.check()

    assert status.is_locked is False
    assert status.remaining_attempts == 5


def test_failed_attempts_count_down(limiter):
    for expected in (4, 3, 2, 1):
        status = limiter.record_failed_attempt()
        assert status.is_locked is False
        assert status.remaining_attempts == expected

    assert limiter.check().remaining_attempts == 1


def test_locks_at_max_attempts(limiter, clock):
    """Test that the fifth failure locks sign-in for the full lockout."""
    for _ in range(4):
        limiter.record_failed_attempt()

    status = limiter.record_failed_attempt()

    assert status.is_locked is True
    assert status.remaining_attempts == 0
    assert status.time_remaining == 900
    assert status.locked_until == clock.now + 900_000


def test_lock_time_remaining_rounds_up(limiter, clock):
    for _ in range(5):
        limiter.record_failed_attempt()

    clock.advance(100.2)
    status = limiter.check()

    assert status.is_locked is True
    assert status.time_remaining == 800


def test_expired_lock_resets(limiter, clock, storage):
    for _ in range(5):
        limiter.record_failed_attempt()

    clock.advance(900)
    status = limiter.check()

    assert status.is_locked is False
    assert status.remaining_attempts == 5
    assert limiter.record_failed_attempt().remaining_attempts == 4


def test_reset(limiter):
    limiter.record_failed_attempt()
    limiter.record_failed_attempt()

    limiter.reset()

    assert limiter.check().remaining_attempts == 5


def test_state_persists_across_instances(storage, clock):
    RateLimiter(storage, clock=clock).record_failed_attempt()

    assert RateLimiter(storage, clock=clock).check().remaining_attempts == 4


def test_corrupt_data_reads_as_defaults(limiter, storage):
    storage.set_item(STORAGE_KEY, "not json")

    assert limiter.check().remaining_attempts == 5


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0s"), (45, "45s"), (60, "1m 0s"), (754, "12m 34s"), (900, "15m 0s")],
)
def test_format_time_remaining(seconds, expected):
    assert format_time_remaining(seconds) == expected


def test_default_clock(storage):
    limiter = RateLimiter(storage, clock=None)

    assert limiter.check().remaining_attempts == 5
    status = limiter.record_failed_attempt()
    assert status.remaining_attempts == 4
