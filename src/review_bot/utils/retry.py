"""Retry-with-backoff wrapper for fallible operations."""

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 5.0

# Lower-cased fragments that indicate a connectivity/timeout problem
_CONNECTIVITY_HINTS = (
    "socket hang up",
    "econnreset",
    "timeout",
    "timed out",
    "connection refused",
    "dns lookup failed",
)


def compute_delay(attempt: int, base_delay: float, exponential: bool) -> float:
    """Delay before the retry that follows ``attempt`` (1-based)."""
    if exponential:
        return base_delay * (2 ** (attempt - 1))
    return base_delay


def looks_like_connectivity_error(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _CONNECTIVITY_HINTS)


def with_retry(
    operation: Callable[[], T],
    label: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    use_exponential_backoff: bool = False,
    base_delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``operation`` until it succeeds or ``max_attempts`` is exhausted.

    Waits ``base_delay`` between attempts, or ``base_delay * 2**(attempt-1)``
    when ``use_exponential_backoff`` is set. No state is shared between calls.

    Args:
        operation: Zero-argument callable to attempt.
        label: Operation name used in log messages.
        max_attempts: Total number of attempts (at least 1).
        use_exponential_backoff: Double the delay after every failure.
        base_delay: Delay in seconds before the first retry.
        sleep: Sleep function, injectable for tests.

    Returns:
        The first successful result of ``operation``.

    Raises:
        Exception: The error from the final attempt, unchanged.
    """
    attempts = max(1, max_attempts)
    last_error: Exception | None = None

    for attempt in range(1, attempts + 1):
        try:
            logger.info("Attempting %s (attempt %d/%d)", label, attempt, attempts)
            return operation()
        except Exception as exc:
            last_error = exc
            logger.warning("Attempt %d/%d failed for %s: %s", attempt, attempts, label, exc)
            if looks_like_connectivity_error(exc):
                logger.warning("This appears to be a connectivity/timeout issue")

            if attempt < attempts:
                delay = compute_delay(attempt, base_delay, use_exponential_backoff)
                logger.info("Waiting %.1fs before retrying %s", delay, label)
                sleep(delay)

    logger.error("All %d attempts failed for %s", attempts, label)
    raise last_error
