"""Opt-in retry for callers that want to ride out rate limiting.

The dispatcher never retries on its own; wrap a call explicitly::

    task = await call_with_retry(lambda: client.tasks.get(task_id))
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, RetryCallState, RetryError, retry_if_exception, stop_after_attempt, wait_exponential

from .errors import OnfleetError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, OnfleetError) and exc.retryable


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning(f"retrying after {exc} (attempt={state.attempt_number})")


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    attempts: int = 5,
    min_wait: float = 0.5,
    max_wait: float = 8.0,
) -> T:
    """Run ``fn`` until it succeeds or raises a non-retryable error; re-raise the last error."""

    async for attempt in AsyncRetrying(
        retry=retry_if_exception(is_retryable),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        stop=stop_after_attempt(attempts),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            return await fn()
    raise RetryError("unreachable")
