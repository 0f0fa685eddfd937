"""
Retry policy for upstream HTTP calls.

Separates the decision of *whether* to retry (timeouts and connection
failures) from *what* is being retried. HTTP status errors are a
definitive answer from the server and propagate on the first attempt.

Usage:
    policy = RetryPolicy(max_attempts=3, backoff_base=1.0)
    response = policy.call(session.get, url, timeout=20)
"""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar('T')

RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
)


class RetryExhausted(Exception):
    """Raised when every attempt failed with a retryable error."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        super().__init__(f'Gave up after {attempts} attempts: {last_error}')
        self.attempts = attempts
        self.last_error = last_error


class RetryPolicy:
    """
    Bounded retry with exponential backoff.

    Attempt n (1-based) that fails with a retryable error is followed by a
    wait of backoff_base * 2**(n-1) seconds: 1s, 2s, 4s... for a base of 1.
    No wait follows the final attempt.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff_base: float = 1.0,
        retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError('max_attempts must be at least 1')
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.retry_on = retry_on
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Backoff after the given failed attempt (1-based)."""
        return self.backoff_base * (2 ** (attempt - 1))

    def should_retry(self, exc: BaseException) -> bool:
        # HTTPError subclasses RequestException, not Timeout/ConnectionError
        return isinstance(exc, self.retry_on)

    def call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        """
        Invoke fn until it returns, raises a non-retryable error, or the
        attempt budget runs out (RetryExhausted).
        """
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                if not self.should_retry(e):
                    raise
                last_error = e

            if attempt < self.max_attempts:
                delay = self.delay_for(attempt)
                logger.warning(
                    f'Attempt {attempt}/{self.max_attempts} failed ({last_error}), '
                    f'retrying in {delay:.1f}s'
                )
                self._sleep(delay)

        logger.error(f'All {self.max_attempts} attempts failed: {last_error}')
        raise RetryExhausted(self.max_attempts, last_error)
