"""Resilient request wrapper with exponential backoff."""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from google.genai import errors

from pixel_shifter.services.errors import RequestFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Unauthorized, rate-limited, server error, service unavailable.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({401, 429, 500, 503})

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_INITIAL_DELAY = 1.0

Sleep = Callable[[float], Awaitable[None]]


async def call_with_retry(
    request: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    sleep: Optional[Sleep] = None,
    description: str = "request",
) -> T:
    """Run `request` until it succeeds or the attempt budget is spent.

    Transport exceptions and retryable API status codes are retried after a
    delay that starts at `initial_delay` and doubles after every retry. Any
    other API status fails at once. There is no sleep after the final attempt.

    Args:
        request: Zero-argument coroutine factory issuing one request.
        max_attempts: Total number of tries.
        initial_delay: Seconds to wait before the second try.
        sleep: Awaitable sleep, injectable for tests.
        description: Short label used in log lines and error messages.

    Returns:
        Whatever `request` returns on its first successful try.

    Raises:
        RequestFailedError: On a terminal status or once the budget is spent.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    sleep = sleep or asyncio.sleep
    delay = initial_delay

    for attempt in range(1, max_attempts + 1):
        try:
            return await request()
        except errors.APIError as exc:
            if exc.code not in RETRYABLE_STATUS_CODES:
                logger.error(
                    "%s failed with non-retryable status %s",
                    description,
                    exc.code,
                    extra={"attempt": attempt, "status_code": exc.code},
                )
                raise RequestFailedError(
                    f"{description} failed: API error {exc.code}",
                    status_code=exc.code,
                    attempts=attempt,
                ) from exc
            if attempt == max_attempts:
                raise RequestFailedError(
                    f"{description} failed after {attempt} attempts: API error {exc.code}",
                    status_code=exc.code,
                    attempts=attempt,
                ) from exc
            logger.warning(
                "%s returned status %s (attempt %d/%d), retrying in %.1fs",
                description,
                exc.code,
                attempt,
                max_attempts,
                delay,
                extra={"attempt": attempt, "status_code": exc.code},
            )
        except Exception as exc:
            if attempt == max_attempts:
                raise RequestFailedError(
                    f"{description} failed after {attempt} attempts: {type(exc).__name__}: {exc}",
                    attempts=attempt,
                ) from exc
            logger.warning(
                "%s raised %s (attempt %d/%d), retrying in %.1fs",
                description,
                type(exc).__name__,
                attempt,
                max_attempts,
                delay,
                extra={"attempt": attempt},
            )

        await sleep(delay)
        delay *= 2

    # Unreachable: the loop either returns or raises on the final attempt.
    raise RequestFailedError(f"{description} failed", attempts=max_attempts)
