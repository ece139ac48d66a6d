"""
Monolith Update - Retry Policy
Bounded retries for network-dependent operations such as metadata refresh.
"""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExhaustedRetries(Exception):
    """Every attempt failed; carries the last underlying error."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error}")


class RetryPolicy:
    """
    Invoke an operation up to ``max_attempts`` times.

    Sleeps ``delay`` seconds between attempts, never after the last one.
    Only exceptions listed in ``retry_on`` count as failed attempts; any
    other exception propagates immediately.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self._sleep = sleep

    def run(
        self,
        operation: Callable[[], T],
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        description: Optional[str] = None,
    ) -> T:
        """
        Run ``operation`` under this policy.

        Raises:
            ExhaustedRetries: if all attempts failed.
        """
        label = description or getattr(operation, "__name__", "operation")
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except retry_on as e:
                last_error = e
                if attempt < self.max_attempts:
                    logger.warning(
                        f"{label} failed (attempt {attempt}/{self.max_attempts}), "
                        f"retrying in {self.delay}s: {e}"
                    )
                    self._sleep(self.delay)
                else:
                    logger.error(f"{label} failed after {attempt} attempt(s): {e}")
        raise ExhaustedRetries(self.max_attempts, last_error)


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    delay: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """Functional form of RetryPolicy.run()."""
    return RetryPolicy(max_attempts, delay, sleep).run(operation, retry_on=retry_on)
