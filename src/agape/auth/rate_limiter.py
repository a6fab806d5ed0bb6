"""Rate limiting for sign-in attempts.

Failed attempts are counted in local storage; after ``max_attempts`` failures
sign-in is locked for ``lockout_seconds``. Times are epoch milliseconds.
"""

import json
import logging
import math
import sqlite3
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass

from agape.config.schema import RateLimitConfig
from agape.storage import LocalStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "auth_rate_limit"


@dataclass
class RateLimitData:
    """Persisted attempt counters."""

    attempts: int = 0
    locked_until: int | None = None
    last_attempt: int = 0


@dataclass
class RateLimitStatus:
    """Whether sign-in is allowed right now."""

    is_locked: bool
    remaining_attempts: int
    locked_until: int | None = None
    time_remaining: int = 0  # seconds


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    """Counts failed sign-ins and enforces the lockout."""

    def __init__(
        self,
        storage: LocalStorage,
        config: RateLimitConfig | None = None,
        clock: Callable[[], int] | None = None,
    ):
        """
        Initialize rate limiter.

        Args:
            storage: Where counters are persisted
            config: Attempt limit and lockout duration
            clock: Returns the current time in epoch milliseconds
        """
        self.storage = storage
        self.config = config or RateLimitConfig()
        self.clock = clock or _now_ms

    @property
    def lockout_ms(self) -> int:
        return self.config.lockout_seconds * 1000

    def _load(self) -> RateLimitData:
        try:
            raw = self.storage.get_item(STORAGE_KEY)
            if raw:
                return RateLimitData(**json.loads(raw))
        except (sqlite3.Error, ValueError, TypeError) as e:
            logger.error(f"Error reading rate limit data: {e}")
        return RateLimitData()

    def _save(self, data: RateLimitData) -> None:
        try:
            self.storage.set_item(STORAGE_KEY, json.dumps(asdict(data)))
        except sqlite3.Error as e:
            logger.error(f"Error saving rate limit data: {e}")

    def check(self) -> RateLimitStatus:
        """Current lock state; an expired lock is cleared."""
        data = self._load()
        now = self.clock()

        if data.locked_until and now < data.locked_until:
            return RateLimitStatus(
                is_locked=True,
                remaining_attempts=0,
                locked_until=data.locked_until,
                time_remaining=math.ceil((data.locked_until - now) / 1000),
            )

        if data.locked_until and now >= data.locked_until:
            self._save(RateLimitData())
            return RateLimitStatus(is_locked=False, remaining_attempts=self.config.max_attempts)

        return RateLimitStatus(
            is_locked=False,
            remaining_attempts=max(0, self.config.max_attempts - data.attempts),
        )

    def record_failed_attempt(self) -> RateLimitStatus:
        """Count a failed sign-in, locking once the limit is reached."""
        data = self._load()
        now = self.clock()

        data.attempts += 1
        data.last_attempt = now

        if data.attempts >= self.config.max_attempts:
            data.locked_until = now + self.lockout_ms
            self._save(data)
            logger.warning(f"Sign-in locked after {data.attempts} failed attempts")
            return RateLimitStatus(
                is_locked=True,
                remaining_attempts=0,
                locked_until=data.locked_until,
                time_remaining=self.config.lockout_seconds,
            )

        self._save(data)
        return RateLimitStatus(
            is_locked=False,
            remaining_attempts=self.config.max_attempts - data.attempts,
        )

    def reset(self) -> None:
        """Forget all failed attempts (after a successful sign-in)."""
        self._save(RateLimitData())


def format_time_remaining(seconds: int) -> str:
    """Format seconds as ``"Xm Ys"`` or ``"Ys"``."""
    minutes, remaining = divmod(seconds, 60)
    if minutes > 0:
        return f"{minutes}m {remaining}s"
    return f"{remaining}s"
