"""Retry with capped multiplier backoff."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, TypeVar
import structlog

from ..observability.metrics import get_metrics

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass
class RetryConfig:
    max_retries: int = 3
    initial_delay: float = 0.1
    max_delay: float = 10.0
    multiplier: float = 2.0


def backoff_delays(config: RetryConfig) -> Iterator[float]:
    """Yield the delays between attempts: ``initial_delay * multiplier ** k``
    capped at ``max_delay``. Growth stops at the cap, so the sequence never
    overflows however many attempts are configured.
    """
    delay = min(config.initial_delay, config.max_delay)
    while True:
        yield delay
        if delay < config.max_delay:
            delay = min(delay * config.multiplier, config.max_delay)


def backoff_delay(config: RetryConfig, attempt: int) -> float:
    """Delay in seconds to wait after the given failed attempt (1-based)."""
    delays = backoff_delays(config)
    delay = next(delays)
    for _ in range(attempt - 1):
        delay = next(delays)
        if delay >= config.max_delay:
            break
    return delay


async def with_retry(
    operation: str,
    func: Callable[..., Awaitable[T]],
    *args,
    config: RetryConfig = None,
    **kwargs,
) -> T:
    """Execute function with retry and capped backoff.

    Every failed attempt is counted and logged; the last error is re-raised
    once ``max_retries`` attempts have failed.
    """
    config = config or RetryConfig()
    delays = backoff_delays(config)
    metrics = get_metrics()

    for attempt in range(1, config.max_retries + 1):
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            metrics.retry_attempts.labels(operation=operation, outcome="failure").inc()

            if attempt >= config.max_retries:
                logger.error("retry_exhausted", operation=operation, attempt=attempt, error=str(e))
                raise

            delay = next(delays)
            logger.warning(
                "retry_attempt",
                operation=operation,
                attempt=attempt,
                max_attempts=config.max_retries,
                delay_seconds=delay,
                error=str(e),
            )
            await asyncio.sleep(delay)
            continue

        if attempt > 1:
            metrics.retry_attempts.labels(operation=operation, outcome="success").inc()
            logger.info("retry_succeeded", operation=operation, attempt=attempt)
        return result

    raise ValueError(f"max_retries must be at least 1, got {config.max_retries}")
