import asyncio
from typing import Awaitable, Callable, TypeVar

from ..errors import PlaybaseError
from ..logger import get_logger

logger = get_logger()

T = TypeVar('T')

async def with_retries(operation: Callable[[], Awaitable[T]], max_attempts: int,
                       retry_delay: float, description: str) -> T:
    """
    Re-run a whole read-modify-write cycle while it fails with a retryable error.

    Terminal errors and the last retryable failure propagate unchanged.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except PlaybaseError as e:
            if not e.retryable or attempt >= max_attempts:
                raise
            logger.warning(f"{description} failed (attempt {attempt}/{max_attempts}): {e}")
            await asyncio.sleep(retry_delay * attempt)
