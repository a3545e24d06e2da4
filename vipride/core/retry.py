import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from vipride.core.logger import logger

T = TypeVar("T")


def exponential_backoff(attempt: int) -> float:
    """Seconds to wait after the failed attempt number `attempt` (1-based): 2, 4, 8..."""
    return float(2 ** attempt)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    backoff: Callable[[int], float] = exponential_backoff
    is_retryable: Callable[[BaseException], bool] = field(default=lambda exc: False)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    name: str = "operation",
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Runs `operation` until it succeeds, the error is not retryable, or
    `policy.max_attempts` attempts have failed. The last error is re-raised as is.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            result = await operation()
        except Exception as exc:
            logger.error(f"❌ {name}: attempt {attempt}/{policy.max_attempts} failed: {exc}")

            if not policy.is_retryable(exc):
                raise
            if attempt >= policy.max_attempts:
                logger.error(f"🛑 {name}: giving up after {attempt} attempts")
                raise

            delay = policy.backoff(attempt)
            logger.warning(f"🔁 {name}: retrying in {delay:.0f}s")
            await (sleep or asyncio.sleep)(delay)
            continue

        if attempt > 1:
            logger.info(f"✅ {name}: succeeded on attempt {attempt}")
        return result
