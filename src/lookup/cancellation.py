"""Cancellation tokens and the clock used for throttling waits."""

import threading
from datetime import UTC, datetime

from .types import LookupCancelledError


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and its lookup.

    Every wait inside the lookup subsystem (throttling pauses, burst
    cooldowns, lock queues) goes through a token so a cancelled caller stops
    waiting promptly.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.sleep(30)  # raises LookupCancelledError immediately
    """

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise LookupCancelledError("Lookup was cancelled")

    def sleep(self, seconds: float) -> None:
        """Sleep for up to `seconds`, waking early when cancelled.

        Raises:
            LookupCancelledError: If the token is cancelled before or during the wait
        """
        self.raise_if_cancelled()
        if seconds <= 0:
            return
        if self._event.wait(seconds):
            raise LookupCancelledError("Lookup was cancelled while waiting")


class Clock:
    """Wall clock in UTC plus cancellable sleeping.

    Tests substitute a fake clock that advances time on sleep instead of
    blocking.
    """

    def now(self) -> datetime:
        return datetime.now(UTC)

    def sleep(self, seconds: float, cancellation: CancellationToken) -> None:
        cancellation.sleep(seconds)
