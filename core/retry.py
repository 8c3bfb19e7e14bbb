"""
Retry controller for storage operations that hit transient lock contention.

Only ``TransientLockError`` is retried. Every other exception propagates on
the first occurrence. The delay between attempts is either fixed (the default)
or doubles after each failed attempt, selected with ``BackoffPolicy``.
"""

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from core.exceptions import RetriesExhausted, TransientLockError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 1.0


class BackoffPolicy(str, enum.Enum):
    """Growth of the delay between attempts"""
    FIXED = "fixed"
    EXPONENTIAL = "exponential"


def compute_delay(attempt: int, base_delay: float, backoff: BackoffPolicy) -> float:
    """Delay to wait after failed attempt number ``attempt`` (1-based)."""
    if backoff == BackoffPolicy.EXPONENTIAL:
        return base_delay * (2 ** (attempt - 1))
    return base_delay


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    backoff: BackoffPolicy = BackoffPolicy.FIXED,
    operation_name: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> T:
    """
    Run ``operation`` until it succeeds, fails non-transiently, or the
    attempt bound is reached.

    Args:
        operation: Zero-argument coroutine function, called once per attempt
        max_attempts: Total number of attempts (not retries)
        base_delay: Seconds to wait after the first failed attempt
        backoff: Whether the delay stays fixed or doubles per attempt
        operation_name: Name used in log lines and in RetriesExhausted
        context: Extra context attached to RetriesExhausted

    Returns:
        The operation's result

    Raises:
        RetriesExhausted: After ``max_attempts`` transient failures
        Exception: Any non-transient error, unchanged
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    name = operation_name or getattr(operation, "__name__", str(operation))
    last_error: Optional[TransientLockError] = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()

        except TransientLockError as e:
            last_error = e
            if attempt == max_attempts:
                break

            delay = compute_delay(attempt, base_delay, backoff)
            logger.warning(
                f"Database locked during {name}, retrying in {delay:.2f}s "
                f"(Attempt {attempt}/{max_attempts})"
            )
            await asyncio.sleep(delay)

    error_context: Dict[str, Any] = dict(context or {})
    error_context["operation"] = name
    raise RetriesExhausted(
        f"Operation {name} failed after {max_attempts} attempts",
        attempts=max_attempts,
        context=error_context,
        original_exception=last_error
    )
