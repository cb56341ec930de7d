"""Retry policy and run deadline shared by the blocking calls."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Callable, Optional, TypeVar

from .exceptions import DeadlineExceededError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Deadline:
    """Absolute time budget for one pipeline run.

    The remaining budget is handed to each blocking call as its timeout.
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def check(self, operation: str) -> float:
        """Return the remaining seconds, raising if nothing is left for ``operation``."""
        left = self.remaining()
        if left <= 0.0:
            logger.error(f"Deadline exceeded before {operation}")
            raise DeadlineExceededError(f"deadline exceeded before {operation}")
        return left


def effective_timeout(default: Optional[float], deadline: Optional[Deadline], operation: str) -> Optional[float]:
    """Pick the tighter of the configured timeout and the deadline's remainder."""
    if deadline is None:
        return default
    left = deadline.check(operation)
    if default is None:
        return left
    return min(default, left)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for transport failures.

    ``max_attempts=1`` means a single try with no retry.
    """
    max_attempts: int = 1
    initial_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 8.0
    retry_on: tuple[type[BaseException], ...] = (TransportError,)

    def delay_for(self, attempt: int) -> float:
        """Delay to sleep after the given failed attempt (1-based)."""
        delay = self.initial_delay * (self.multiplier ** (attempt - 1))
        return min(delay, self.max_delay)

    def call(
        self,
        func: Callable[[], T],
        deadline: Optional[Deadline] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> T:
        """Run ``func`` until it succeeds or the attempts/deadline run out."""
        attempt = 1
        while True:
            try:
                return func()
            except self.retry_on as e:
                if attempt >= self.max_attempts:
                    raise
                delay = self.delay_for(attempt)
                if deadline is not None and deadline.remaining() <= delay:
                    logger.warning(f"Not retrying after attempt {attempt}: deadline too close")
                    raise
                logger.warning(f"Attempt {attempt}/{self.max_attempts} failed ({e}), retrying in {delay:.2f}s")
                sleep(delay)
                attempt += 1


NO_RETRY = RetryPolicy()
