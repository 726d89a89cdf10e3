"""
Retry with exponential backoff and jitter.

Used for transient backing-store failures (throttling, connection resets)
on the mandatory parameter path. Authorization and not-found errors are
never retryable.
"""

from __future__ import annotations

import functools
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type

logger = logging.getLogger("platform.resilience.retry")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_attempts: int = 3
    base_delay: float = 0.2
    max_delay: float = 5.0
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: tuple[Type[Exception], ...] = (Exception,)

    def delay_for(self, attempt: int) -> float:
        delay = min(
            self.base_delay * (self.exponential_base ** (attempt - 1)),
            self.max_delay,
        )
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return delay


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    *,
    max_attempts: int = 3,
    base_delay: float = 0.2,
    max_delay: float = 5.0,
    retryable_exceptions: Optional[tuple[Type[Exception], ...]] = None,
):
    """
    Decorator — retries a function with exponential backoff.

    Usage:
        @retry_with_backoff(retryable_exceptions=(BackendUnavailableError,))
        def fetch_page(token):
            return source.get_parameters_page(path, next_token=token)
    """
    if config is None:
        config = RetryConfig(
            max_attempts=max_attempts,
            base_delay=base_delay,
            max_delay=max_delay,
            retryable_exceptions=retryable_exceptions or (Exception,),
        )

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max(config.max_attempts, 1) + 1):
                try:
                    return func(*args, **kwargs)
                except config.retryable_exceptions as exc:
                    if attempt >= config.max_attempts:
                        logger.error(
                            "All %d retry attempts exhausted for %s: %s",
                            config.max_attempts,
                            func.__name__,
                            exc,
                        )
                        raise

                    delay = config.delay_for(attempt)
                    logger.warning(
                        "Retry %d/%d for %s after %.1fs: %s",
                        attempt,
                        config.max_attempts,
                        func.__name__,
                        delay,
                        exc,
                    )
                    time.sleep(delay)

        return wrapper
    return decorator
