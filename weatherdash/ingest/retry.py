"""Retryable call wrapper shared by card fetchers and the chart aggregator."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from weatherdash.config.schema import RetryConfig
from weatherdash.ingest.api_client import ApiClientError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryConfig,
    sleep: SleepFn = asyncio.sleep,
    label: str = "request",
) -> T:
    """Await ``operation()``, retrying classified failures per ``policy``.

    Only error kinds listed in ``policy.retry_on`` are retried, with
    exponential backoff. The last error is re-raised once retries run out.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except ApiClientError as e:
            if not policy.should_retry(e.kind, attempt):
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s failed (%s), retrying in %.1fs (attempt %d/%d)",
                label, e.kind, delay, attempt + 1, policy.max_retries,
            )
            await sleep(delay)
            attempt += 1
