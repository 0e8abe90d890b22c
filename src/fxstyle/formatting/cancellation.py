"""Cooperative cancellation shared between a running format and a cancel action."""

from __future__ import annotations

from collections.abc import Callable
import logging
import threading
import time
from typing import Final

from .errors import CANCELLED_MESSAGE

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_TTL_SECONDS: Final[float] = 600


class CancellationFlag:
    """Shared boolean signal that expires after a time-to-live.

    There is no explicit clear: a request stays active until its TTL runs out.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        key: str = "isCancelled",
    ) -> None:
        self.key = key
        self._clock = clock
        self._expires_at: float | None = None
        self._lock = threading.Lock()

    def set(self, ttl_seconds: float = DEFAULT_CANCEL_TTL_SECONDS) -> None:
        """Mark the flag as cancelled for ``ttl_seconds``.

        Raises:
            ValueError: If ``ttl_seconds`` is not positive.
        """
        if ttl_seconds <= 0:
            raise ValueError("Cancellation TTL must be > 0 seconds.")
        with self._lock:
            self._expires_at = self._clock() + ttl_seconds

    def get(self) -> bool:
        """Return True while a cancellation request is active."""
        with self._lock:
            if self._expires_at is None:
                return False
            if self._clock() >= self._expires_at:
                self._expires_at = None
                return False
            return True

    @property
    def expires_at(self) -> float | None:
        """Clock reading at which the current request expires, if any."""
        with self._lock:
            return self._expires_at


DEFAULT_CANCELLATION_FLAG = CancellationFlag()


def cancel_formatting(
    flag: CancellationFlag | None = None,
    *,
    ttl_seconds: float = DEFAULT_CANCEL_TTL_SECONDS,
) -> str:
    """Request cancellation of any running format and return a confirmation."""
    target = DEFAULT_CANCELLATION_FLAG if flag is None else flag
    target.set(ttl_seconds)
    logger.info(
        "Cancellation requested (%s) for %.0f seconds.", target.key, ttl_seconds
    )
    return CANCELLED_MESSAGE


def is_cancelled(flag: CancellationFlag | None = None) -> bool:
    """Return whether a cancellation request is active."""
    target = DEFAULT_CANCELLATION_FLAG if flag is None else flag
    return target.get()
