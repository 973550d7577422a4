import asyncio
import functools
import logging

logger = logging.getLogger("tldr.utils")

def async_retry(retries: int = 3, delay: float = 1.0, backoff: float = 2.0, exceptions: tuple = (Exception,)):
    """
    Retry an async callable when it raises one of `exceptions`.

    Args:
        retries: Extra attempts after the first one.
        delay: Seconds to wait before the first retry.
        backoff: Factor applied to the wait after every failed attempt.
        exceptions: Exception types that trigger a retry; anything else propagates at once.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            wait = delay
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    attempt += 1
                    if attempt > retries:
                        logger.error(f"{func.__name__} gave up after {attempt} attempts: {e}")
                        raise
                    logger.warning(f"{func.__name__} failed (attempt {attempt}/{retries + 1}), retrying in {wait}s: {e}")
                    await asyncio.sleep(wait)
                    wait *= backoff
        return wrapper
    return decorator
