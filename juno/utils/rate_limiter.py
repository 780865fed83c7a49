"""
Retry and pacing utilities for LLM calls.

Leads are sent to the LLM one at a time with a fixed delay between them.
Each call is retried with exponential backoff when the provider reports a
rate limit.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass
class RateLimitConfig:
    """Configuration for retries and pacing."""
    max_retries: int = 3
    base_delay_seconds: float = 2.0
    backoff_multiplier: float = 2.0
    max_backoff_seconds: float = 60.0
    item_delay_seconds: float = 1.5

    @classmethod
    def from_processing_config(cls, processing) -> "RateLimitConfig":
        """Build from a ProcessingConfig section."""
        return cls(
            max_retries=processing.max_retries,
            base_delay_seconds=processing.base_delay_seconds,
            backoff_multiplier=processing.backoff_multiplier,
            max_backoff_seconds=processing.max_backoff_seconds,
            item_delay_seconds=processing.item_delay_seconds,
        )


def backoff_delay(attempt: int, config: RateLimitConfig) -> float:
    """
    Delay before retry number ``attempt`` (1-based).

    With the defaults this gives 4s, 8s and 16s.
    """
    delay = config.base_delay_seconds * (config.backoff_multiplier ** attempt)
    return min(delay, config.max_backoff_seconds)


def is_rate_limit_error(error: BaseException) -> bool:
    """Check whether an error message looks like a provider rate limit."""
    message = str(error)
    return "429" in message or "RESOURCE_EXHAUSTED" in message


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    config: Optional[RateLimitConfig] = None,
    is_retryable: Callable[[BaseException], bool] = is_rate_limit_error,
    sleep: SleepFunc = asyncio.sleep,
    on_retry: Optional[Callable[[int, float, BaseException], None]] = None,
) -> T:
    """
    Await ``func()`` and retry retryable failures with exponential backoff.

    Args:
        func: Zero-argument coroutine factory
        config: Retry configuration
        is_retryable: Predicate deciding whether a failure is retried
        sleep: Awaitable sleep, replaced in tests
        on_retry: Called with (attempt, delay, error) before each wait

    Returns:
        The result of the first successful call

    Raises:
        The last error once retries are exhausted, or any non-retryable error
    """
    config = config or RateLimitConfig()
    retries = 0

    while True:
        try:
            return await func()
        except Exception as e:
            if not is_retryable(e) or retries >= config.max_retries:
                raise
            retries += 1
            delay = backoff_delay(retries, config)
            logger.warning(f"Rate limit protection active. Retrying in {delay:g}s (attempt {retries}/{config.max_retries})")
            if on_retry:
                on_retry(retries, delay, e)
            await sleep(delay)


async def pace(config: Optional[RateLimitConfig] = None, sleep: SleepFunc = asyncio.sleep) -> None:
    """Wait the configured delay between two consecutive items."""
    config = config or RateLimitConfig()
    if config.item_delay_seconds > 0:
        await sleep(config.item_delay_seconds)
