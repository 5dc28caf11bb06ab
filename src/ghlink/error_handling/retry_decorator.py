"""
Retry decorator with exponential backoff.
"""

import time
import random
import logging
from functools import wraps
from typing import Callable, Type, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_attempts: int = 1
    base_delay: float = 0.5
    max_delay: float = 10.0
    exponential_base: float = 2.0
    jitter: bool = True
    exceptions: Optional[List[Type[Exception]]] = None

    def decorate(self, func: Callable) -> Callable:
        """Wrap ``func`` with these settings."""
        return retry(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            exponential_base=self.exponential_base,
            jitter=self.jitter,
            exceptions=self.exceptions
        )(func)


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float = 2.0,
    jitter: bool = False
) -> float:
    """
    Delay before retry number ``attempt`` (zero based).

    Args:
        attempt: Index of the attempt that just failed
        base_delay: Delay after the first failure
        max_delay: Upper bound for the delay
        exponential_base: Growth factor per attempt
        jitter: Scale the delay randomly into [50%, 100%]
    """
    delay = min(base_delay * (exponential_base ** attempt), max_delay)
    if jitter:
        delay *= (0.5 + random.random() * 0.5)
    return delay


def retry(
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: Optional[List[Type[Exception]]] = None
):
    """
    Retry decorator with exponential backoff and jitter.

    Args:
        max_attempts: Total number of attempts (1 disables retrying)
        base_delay: Base delay between retries in seconds
        max_delay: Maximum delay between retries
        exponential_base: Base for exponential backoff
        jitter: Whether to add random jitter to delays
        exceptions: Exceptions to retry on (all if None)
    """
    max_attempts = max(1, max_attempts)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if exceptions and not isinstance(e, tuple(exceptions)):
                        raise

                    if attempt == max_attempts - 1:
                        if max_attempts > 1:
                            logger.error(f"All {max_attempts} attempts failed for {func.__name__}")
                        raise

                    delay = backoff_delay(attempt, base_delay, max_delay, exponential_base, jitter)
                    logger.warning(
                        f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {e}. "
                        f"Retrying in {delay:.2f} seconds..."
                    )
                    time.sleep(delay)

        return wrapper
    return decorator
