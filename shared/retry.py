"""
Retry mechanism for upstream calls that may be throttled.
"""

import asyncio
from typing import Any, Optional, Callable, Awaitable, TYPE_CHECKING

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class RetryConfig:
    """Configuration for retry behavior: total attempts and a fixed wait."""

    def __init__(self, max_attempts: int = 3, base_delay: float = 0.5):
        self.max_attempts = max(1, max_attempts)
        self.base_delay = max(0.0, base_delay)


async def call_with_retry(func: Callable[..., Awaitable[Any]],
                          *args,
                          exceptions: tuple = (Exception,),
                          config: Optional[RetryConfig] = None,
                          name: Optional[str] = None,
                          metrics: Optional["MetricsCollector"] = None,
                          **kwargs) -> Any:
    """Await ``func`` and retry it while it raises one of ``exceptions``.

    Errors outside ``exceptions`` propagate on the first attempt. When all
    attempts fail the last matching exception is re-raised unchanged.
    """
    if config is None:
        config = RetryConfig()

    operation = name or getattr(func, "__name__", "operation")
    logger = get_logger(f"retry.{operation}")

    for attempt in range(1, config.max_attempts + 1):
        try:
            result = await func(*args, **kwargs)

            if attempt > 1:
                logger.info(
                    "Retry succeeded",
                    attempt=attempt,
                    function=operation
                )

            return result

        except exceptions as e:
            if metrics is not None:
                metrics.increment_counter("retry_attempts_total", operation=operation)

            if attempt == config.max_attempts:
                logger.error(
                    "All retry attempts exhausted",
                    attempt=attempt,
                    max_attempts=config.max_attempts,
                    function=operation,
                    error=str(e)
                )
                raise

            logger.warning(
                "Retry attempt failed, waiting before next attempt",
                attempt=attempt,
                delay=config.base_delay,
                function=operation,
                error=str(e)
            )

            await asyncio.sleep(config.base_delay)
