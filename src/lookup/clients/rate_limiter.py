"""Per-provider quota tracking for API clients.

Each provider client owns one `ProviderThrottle`: an immutable
`RateLimitConfig`, the mutable `RateLimitState` it guards, and the
`FifoLock` that serializes every request to that provider. Nothing here is
module-global, so two clients never share counters by accident.

Example:
    >>> throttle = ProviderThrottle("upcitemdb", RateLimitConfig(5, 90, 1000, 65))
    >>> with throttle.lock.holding(token):
    ...     throttle.apply_proactive_throttling(token)  # may sleep or raise
    ...     response = session.get(url)
    ...     throttle.record_success()
"""

import threading
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from common.logger import get_logger

from ..cancellation import CancellationToken, Clock
from ..types import ConfigurationError, LookupCancelledError, QuotaExhaustedError

logger = get_logger(__name__)

MINUTE = timedelta(minutes=1)


@dataclass(frozen=True)
class RateLimitConfig:
    """Quota for one provider.

    Attributes:
        max_requests_per_minute: Requests allowed per rolling minute window
        max_requests_per_day: Requests allowed per UTC calendar day
        min_delay_between_requests_ms: Minimum spacing between requests (0 disables)
        max_retry_pause_seconds: Longest rate-limit reset worth waiting for
    """

    max_requests_per_minute: int
    max_requests_per_day: int
    min_delay_between_requests_ms: int = 0
    max_retry_pause_seconds: int = 65

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError if any limit is out of range."""
        if self.max_requests_per_minute <= 0:
            raise ConfigurationError("max_requests_per_minute must be greater than 0")
        if self.max_requests_per_day <= 0:
            raise ConfigurationError("max_requests_per_day must be greater than 0")
        if self.min_delay_between_requests_ms < 0:
            raise ConfigurationError("min_delay_between_requests_ms must be non-negative")
        if self.max_retry_pause_seconds <= 0:
            raise ConfigurationError("max_retry_pause_seconds must be greater than 0")


@dataclass
class RateLimitState:
    """Mutable request counters for one provider."""

    last_request_time: datetime | None = None
    requests_in_current_minute: int = 0
    current_minute_start: datetime | None = None
    requests_today: int = 0
    current_day: date | None = None
    burst_cooldown_until: datetime | None = None


class FifoLock:
    """Mutual exclusion lock that grants waiters in arrival order.

    Waiting is cancellable: a cancelled waiter leaves the queue without ever
    holding the lock.
    """

    POLL_INTERVAL = 0.05

    def __init__(self):
        self._condition = threading.Condition()
        self._waiters: deque[object] = deque()
        self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    def acquire(self, cancellation: CancellationToken) -> None:
        ticket = object()
        with self._condition:
            self._waiters.append(ticket)
            try:
                while self._locked or self._waiters[0] is not ticket:
                    cancellation.raise_if_cancelled()
                    self._condition.wait(self.POLL_INTERVAL)
                cancellation.raise_if_cancelled()
            except BaseException:
                self._waiters.remove(ticket)
                self._condition.notify_all()
                raise
            self._waiters.popleft()
            self._locked = True

    def release(self) -> None:
        with self._condition:
            if not self._locked:
                raise RuntimeError("release() called on an unlocked FifoLock")
            self._locked = False
            self._condition.notify_all()

    @contextmanager
    def holding(self, cancellation: CancellationToken) -> Iterator[None]:
        self.acquire(cancellation)
        try:
            yield
        finally:
            self.release()


class ProviderThrottle:
    """Applies one provider's quota policy to its RateLimitState.

    All methods except the constructor must be called while holding `lock`.
    """

    def __init__(self, provider: str, config: RateLimitConfig, clock: Clock | None = None):
        """Initialize throttle.

        Args:
            provider: Provider name used in log messages and errors
            config: Quota for this provider
            clock: Time source (default: real UTC clock)
        """
        self.provider = provider
        self.config = config
        self.clock = clock or Clock()
        self.state = RateLimitState()
        self.lock = FifoLock()

    def _seconds_since(self, moment: datetime, now: datetime) -> float:
        # Clamp so a clock stepping backwards never yields a negative wait
        return max((now - moment).total_seconds(), 0.0)

    def _sleep(self, seconds: float, cancellation: CancellationToken) -> None:
        if seconds > 0:
            self.clock.sleep(seconds, cancellation)

    def wait_for_burst_cooldown(self, cancellation: CancellationToken) -> None:
        """Wait out a burst cooldown set by an earlier 429, if still active."""
        until = self.state.burst_cooldown_until
        if until is None:
            return
        remaining = (until - self.clock.now()).total_seconds()
        if remaining > 0:
            logger.info(
                f"{self.provider} still in burst limit cooldown, waiting {remaining:.1f} seconds"
            )
            self._sleep(remaining, cancellation)
        self.state.burst_cooldown_until = None

    def roll_windows(self) -> None:
        """Reset the minute and day counters when their window has rolled over."""
        now = self.clock.now()
        state = self.state

        if (
            state.current_minute_start is None
            or self._seconds_since(state.current_minute_start, now) >= MINUTE.total_seconds()
        ):
            state.requests_in_current_minute = 0
            state.current_minute_start = now

        today = now.date()
        if state.current_day is None or today > state.current_day:
            state.requests_today = 0
            state.current_day = today

    def apply_proactive_throttling(self, cancellation: CancellationToken) -> None:
        """Sleep as needed so the next request stays inside the quota.

        Raises:
            QuotaExhaustedError: If the daily budget is spent (never sleeps in that case)
            LookupCancelledError: If cancelled while sleeping
        """
        self.roll_windows()
        state = self.state
        config = self.config

        if state.requests_today >= config.max_requests_per_day:
            logger.error(
                f"{self.provider} daily rate limit of {config.max_requests_per_day} requests "
                "reached, cannot make more requests today"
            )
            raise QuotaExhaustedError(
                f"{self.provider} daily rate limit of {config.max_requests_per_day} requests exceeded",
                provider=self.provider,
            )

        if state.requests_in_current_minute >= config.max_requests_per_minute:
            elapsed = self._seconds_since(state.current_minute_start, self.clock.now())
            wait = MINUTE.total_seconds() - elapsed
            if wait > 0:
                logger.warning(
                    f"{self.provider} per-minute limit reached "
                    f"({state.requests_in_current_minute}/{config.max_requests_per_minute}), "
                    f"pausing {wait:.1f} seconds until next minute"
                )
                self._sleep(wait, cancellation)
            state.requests_in_current_minute = 0
            state.current_minute_start = self.clock.now()

        if state.last_request_time is not None and config.min_delay_between_requests_ms > 0:
            since_last = self._seconds_since(state.last_request_time, self.clock.now())
            min_delay = config.min_delay_between_requests_ms / 1000
            if since_last < min_delay:
                delay = min_delay - since_last
                logger.debug(f"{self.provider} enforcing minimum delay of {delay * 1000:.0f}ms")
                self._sleep(delay, cancellation)

    def record_success(self) -> None:
        """Count a request the provider answered with a 2xx status."""
        self.state.requests_in_current_minute += 1
        self.state.requests_today += 1
        self.state.last_request_time = self.clock.now()

    def seconds_until(self, reset_at: datetime) -> float:
        return (reset_at - self.clock.now()).total_seconds()

    def is_burst_reset(self, reset_at: datetime) -> bool:
        """True when a rate-limit reset is close enough to wait for."""
        return self.seconds_until(reset_at) <= self.config.max_retry_pause_seconds

    def pause_for_burst(self, reset_at: datetime, cancellation: CancellationToken) -> None:
        """Wait until `reset_at` and start a fresh minute window.

        The cooldown deadline is published before sleeping so a request that
        follows a cancelled pause still honours it.
        """
        self.state.burst_cooldown_until = reset_at
        pause = max(self.seconds_until(reset_at), 0.0)
        logger.warning(
            f"Pausing {self.provider} requests for {pause:.1f} seconds due to burst limit "
            f"(minute={self.state.requests_in_current_minute}, today={self.state.requests_today})"
        )
        try:
            self._sleep(pause, cancellation)
        except LookupCancelledError:
            logger.info(f"{self.provider} burst limit pause cancelled")
            raise
        self.state.burst_cooldown_until = None
        self.state.requests_in_current_minute = 0
        self.state.current_minute_start = self.clock.now()
        logger.info(f"{self.provider} rate limit pause complete")
