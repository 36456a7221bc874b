"""
Retry with backoff for asynchronous calls.

Wraps tenacity so callers describe a policy (attempts, backoff, which
errors are retryable) and the sleep function can be swapped in tests.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from resumerank.utils.logger import get_logger

logger = get_logger(__name__)

BackoffFunction = Callable[[int], float]
RetryablePredicate = Callable[[BaseException], bool]
SleepFunction = Callable[[float], Awaitable[None]]


def exponential_backoff(base_seconds: float = 2.0) -> BackoffFunction:
    """
    Backoff doubling from ``base_seconds``.

    The argument is the number of the attempt that just failed, so the
    delays run base, 2*base, 4*base, ...
    """

    def backoff(attempt_number: int) -> float:
        return base_seconds * (2 ** (attempt_number - 1))

    return backoff


class RetryPolicy:
    """
    Reusable retry policy.

    Only exceptions accepted by ``retryable`` are retried; anything else,
    and the last retryable failure, propagates unchanged.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff: Optional[BackoffFunction] = None,
        retryable: Optional[RetryablePredicate] = None,
        sleep: Optional[SleepFunction] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff = backoff or exponential_backoff()
        self.retryable = retryable or (lambda exc: False)
        self.sleep = sleep or asyncio.sleep

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.backoff(retry_state.attempt_number)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"Attempt {retry_state.attempt_number}/{self.max_attempts} failed: {exc}. "
            f"Retrying in {delay:.1f}s"
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception(self.retryable),
            sleep=self.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

    async def run(self, fn: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        """Call ``fn`` under this policy and return its result."""
        return await self._retrying()(fn, *args, **kwargs)
