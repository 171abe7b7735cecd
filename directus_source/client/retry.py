"""Retrying HTTP fetch with exponential backoff.

Only transport failures (dropped connections, timeouts, DNS errors) are
retried. Any response, including 4xx and 5xx, is handed back to the caller.
After attempt ``n`` fails the next attempt waits ``2 ** n`` seconds, without
jitter or cap.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from directus_source.client.exceptions import TransportError

logger = logging.getLogger(__name__)


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: httpx.URL | str,
    *,
    retries: int,
    method: str = "GET",
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    stream: bool = False,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, retrying transport errors up to ``retries`` attempts.

    With ``stream=True`` the body is left unread; the caller iterates it and
    must close the response.

    Raises:
        TransportError: Every attempt failed. The last transport error is
            chained as ``__cause__``.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries),
        # multiplier * 2 ** (attempt_number - 1) == 2 ** attempt_number
        wait=wait_exponential(multiplier=2, exp_base=2),
        retry=retry_if_exception_type(httpx.TransportError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
    )

    try:
        request = client.build_request(method, url, **kwargs)
        return await retrying(client.send, request, stream=stream)
    except RetryError as e:
        last_error = e.last_attempt.exception()
        logger.error(f"{method} {url} failed after {retries} attempts: {last_error}")
        raise TransportError(
            f"{method} {url} failed after {retries} attempts: {last_error}"
        ) from last_error
