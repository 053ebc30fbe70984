"""Transport-level retry with exponential backoff"""

import asyncio
import random
from typing import TYPE_CHECKING, Callable, Dict, Optional

import httpx
from loguru import logger

from .config import (
    BACKOFF_MULTIPLIER,
    INITIAL_BACKOFF,
    JITTER_RANGE,
    MAX_BACKOFF,
    RETRY_METHODS,
    RETRY_STATUS_CODES,
)
from .exceptions import RetryableStatusError
from .models import ErrorType

if TYPE_CHECKING:
    from .session_store import SessionHandle


async def retry_with_backoff(
    func: Callable,
    *args,
    max_retries: int = 0,
    initial_backoff: float = INITIAL_BACKOFF,
    max_backoff: float = MAX_BACKOFF,
    backoff_multiplier: float = BACKOFF_MULTIPLIER,
    **kwargs,
):
    """
    Execute an async function, retrying transient failures with backoff.

    Args:
        func: Async function to execute
        max_retries: Maximum number of retry attempts
        initial_backoff: Delay before the first retry, in seconds
        max_backoff: Upper bound for any single delay
        backoff_multiplier: Multiplier for exponential backoff
    """
    last_exception = None
    backoff = initial_backoff

    for attempt in range(max_retries + 1):
        try:
            result = await func(*args, **kwargs)
            if attempt > 0:
                logger.debug(f"Recovered after {attempt} retries")
            return result

        except Exception as e:
            last_exception = e

            if classify_error(e) == ErrorType.PERMANENT:
                raise
            if attempt >= max_retries:
                break

            sleep_time = min(backoff * random.uniform(*JITTER_RANGE), max_backoff)
            logger.warning(
                f"⚠️ Attempt {attempt + 1}/{max_retries + 1} failed: {e} "
                f"(retrying in {sleep_time:.1f}s)"
            )

            await asyncio.sleep(sleep_time)
            backoff *= backoff_multiplier

    raise last_exception


def classify_error(error: Exception) -> ErrorType:
    """Classify error for retry handling"""
    if isinstance(error, RetryableStatusError):
        return ErrorType.TRANSIENT
    elif isinstance(error, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        return ErrorType.TRANSIENT
    else:
        return ErrorType.PERMANENT


async def send_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: Dict[str, str],
    max_retries: int = 0,
    session: Optional["SessionHandle"] = None,
    **kwargs,
) -> httpx.Response:
    """
    Send one request through ``client`` with the transport retry policy.

    Only idempotent methods are retried, on transport errors and on the
    statuses in ``RETRY_STATUS_CODES``. When retries run out on a retryable
    status the last response is returned rather than raised. With a
    ``session`` the Cookie header is rebuilt from its jar for every attempt
    and each response is absorbed back into it.
    """
    method = method.upper()
    retryable = method in RETRY_METHODS

    async def attempt() -> httpx.Response:
        request_headers = dict(headers)
        if session is not None:
            cookie = session.cookie_header(url)
            if cookie:
                request_headers["Cookie"] = cookie
        response = await client.request(method, url, headers=request_headers, **kwargs)
        if session is not None:
            session.absorb(response)
        if retryable and response.status_code in RETRY_STATUS_CODES:
            raise RetryableStatusError(response)
        return response

    try:
        return await retry_with_backoff(
            attempt, max_retries=max_retries if retryable else 0
        )
    except RetryableStatusError as e:
        return e.response
