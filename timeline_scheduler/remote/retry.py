"""Caller-side retry for remote timeline calls.

The client makes one attempt per call; callers that can afford to wait
(for example when loading a timeline) wrap the call here. Only transport
failures are retried.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from .results import RemoteErrorKind, RemoteResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_transport_failure(result: RemoteResult) -> bool:
    return result.error is not None and result.error.kind == RemoteErrorKind.TRANSPORT


async def retry_remote_call(
    call: Callable[[], Awaitable[RemoteResult[T]]],
    attempts: int = 3,
    backoff: float = 1.0,
) -> RemoteResult[T]:
    """Run ``call`` until it stops failing with a transport error.

    Args:
        call: Zero-argument callable returning an awaitable for one remote attempt
        attempts: Maximum number of attempts
        backoff: Base delay in seconds for exponential backoff

    Returns:
        The first non-transport result, or the last result once attempts run out
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=backoff, min=0, max=backoff * 8),
        retry=retry_if_result(_is_transport_failure),
        retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )

    async def _attempt() -> RemoteResult[T]:
        return await call()

    return await retrying(_attempt)
