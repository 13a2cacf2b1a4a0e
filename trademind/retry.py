"""Retry wrapper with exponential backoff for model calls."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from .errors import error_message, error_status

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUSES = {429, 500, 503}
RETRYABLE_CODES = ("429", "500", "503")
# Transport-level failures show up with these words in the message
TRANSPORT_MARKERS = ("network", "fetch", "xhr", "load failed", "connection", "timed out", "timeout")


def is_retryable(error: Any) -> bool:
    """
    Whether an error is a transient transport/service failure.

    Retryable: HTTP 429/500/503 and network failures. A numeric status
    decides on its own; otherwise the message is searched for status codes
    and transport words. Errors without status or message are fatal.
    """
    if isinstance(error, httpx.TransportError):
        return True
    status = error_status(error)
    if status is not None:
        return status in RETRYABLE_STATUSES

    message = error_message(error)
    if not message:
        return False
    if any(code in message for code in RETRYABLE_CODES):
        return True
    lowered = message.lower()
    return any(marker in lowered for marker in TRANSPORT_MARKERS)


def backoff_delay_ms(attempt: int, initial_delay_ms: int) -> int:
    """Delay before retry number attempt + 1 (attempt 0 -> initial delay)."""
    return initial_delay_ms * (2 ** attempt)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    initial_delay_ms: int = 1000,
    label: str = "Model call",
) -> T:
    """
    Run an async operation with bounded retry and exponential backoff.

    Each call is independent: there is no shared retry budget.

    Args:
        operation: Zero-argument callable returning an awaitable
        max_attempts: Total attempts including the first (1 = no retries)
        initial_delay_ms: Delay before the first retry, doubled each time
        label: Name used in log messages

    Returns:
        The operation's result

    Raises:
        The operation's last error, unchanged, when it is not retryable or
        attempts are exhausted
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(max_attempts):
        try:
            logger.debug("%s attempt %d/%d", label, attempt + 1, max_attempts)
            return await operation()
        except Exception as exc:
            if not is_retryable(exc):
                logger.error("%s failed with non-retryable error: %s", label, exc)
                raise
            if attempt == max_attempts - 1:
                logger.error("%s failed after %d attempts: %s", label, max_attempts, exc)
                raise

            delay_ms = backoff_delay_ms(attempt, initial_delay_ms)
            logger.warning(
                "%s attempt %d failed. Retrying in %dms... (%s)",
                label,
                attempt + 1,
                delay_ms,
                error_message(exc),
            )
            await asyncio.sleep(delay_ms / 1000)

    # Unreachable: the last attempt either returns or raises
    raise RuntimeError(f"{label}: retry loop exited without result")
