"""Opt-in retry for API calls.

Nothing in the client or widgets retries on its own; wrap a call with
``call_with_retry`` where retrying is wanted.
"""

import logging
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from .errors import DotPassportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(error: BaseException) -> bool:
    """Transport failures, rate limiting and 5xx are worth retrying."""
    if not isinstance(error, DotPassportError):
        return False
    if error.status_code is None:
        return True
    return error.status_code == 429 or error.status_code >= 500


async def call_with_retry(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    attempts: int = 3,
    wait: wait_base = wait_exponential(multiplier=1, min=2, max=10),
    **kwargs: Any,
) -> T:
    """Await ``fn(*args, **kwargs)``, retrying transient DotPassportErrors.

    RequestCancelled and non-transient errors (400/401/403/404) propagate
    immediately. The last error is re-raised once attempts run out.

    Example:
        >>> scores = await call_with_retry(client.get_scores, address)
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait,
        retry=retry_if_exception(is_transient),
        reraise=True,
    ):
        with attempt:
            if attempt.retry_state.attempt_number > 1:
                logger.debug("Retrying %s (attempt %d)", getattr(fn, "__name__", fn), attempt.retry_state.attempt_number)
            return await fn(*args, **kwargs)
