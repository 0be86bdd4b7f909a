"""Retry utilities for model API calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRIABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def is_retriable_error(error: Exception) -> bool:
    """Check whether a model call failure is worth retrying.

    Rate limits (429), gateway errors and network timeouts are transient;
    anything else (bad request, authentication, parse errors) is not.
    """
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        return status_code in RETRIABLE_STATUS_CODES

    if isinstance(error, (asyncio.TimeoutError, ConnectionError)):
        return True

    error_str = str(error).lower()
    return (
        "429" in error_str
        or "rate limit" in error_str
        or "timeout" in error_str
        or "connection" in error_str
        or "503" in error_str
        or "502" in error_str
    )


async def with_exponential_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    **kwargs: Any,
) -> T:
    """
    Execute a coroutine function with exponential backoff retry logic.

    Args:
        func: The async function to execute
        *args: Positional arguments to pass to func
        max_retries: Maximum number of attempts (at least one attempt is made)
        initial_delay: Initial delay in seconds before first retry
        max_delay: Maximum delay in seconds between retries
        **kwargs: Keyword arguments to pass to func

    Returns:
        The result of the function call

    Raises:
        The last exception if all retries are exhausted, or the first
        non-retriable exception
    """
    attempts = max(1, max_retries)

    for attempt in range(attempts):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if not is_retriable_error(e):
                logger.debug(f"Non-retriable error: {type(e).__name__}: {e}")
                raise

            if attempt == attempts - 1:
                logger.error(f"All {attempts} retry attempts exhausted. Last error: {e}")
                raise

            delay = min(initial_delay * (2**attempt), max_delay)
            logger.warning(
                f"Attempt {attempt + 1}/{attempts} failed with {type(e).__name__}: {e}. "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)

    raise AssertionError("unreachable")
