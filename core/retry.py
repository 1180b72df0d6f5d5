"""
Core Module - Retry Policy.

============================================================
RESPONSIBILITY
============================================================
One reusable retry/backoff policy for every data store query.

- Exponential backoff: base_delay * multiplier ** attempt, capped
- Only errors the predicate marks retryable are retried
- Sleep is injectable so tests run instantly

============================================================
USAGE
============================================================
    policy = RetryPolicy(max_attempts=3, base_delay=0.5)
    rows = await policy.run(
        lambda: store.query("responses", filters),
        description="query responses",
    )

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from .exceptions import ConfigurationError, DataStoreError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(error: BaseException) -> bool:
    """Default predicate: trust the error's own `retryable` flag."""
    return bool(getattr(error, "retryable", False))


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry configuration and executor.

    Attributes:
        max_attempts: Total attempts including the first one
        base_delay: Delay before the first retry, in seconds
        multiplier: Backoff growth factor
        max_delay: Upper bound for any single delay
        retryable: Predicate deciding whether an error is worth retrying
        sleep: Awaitable sleep, replaced in tests
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 5.0
    retryable: Callable[[BaseException], bool] = field(default=is_retryable, compare=False)
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(
                "max_attempts must be at least 1", config_key="max_attempts"
            )
        if self.base_delay < 0 or self.max_delay < 0:
            raise ConfigurationError("Retry delays must be non-negative", config_key="base_delay")
        if self.multiplier < 1:
            raise ConfigurationError("multiplier must be >= 1", config_key="multiplier")

    def delay_for(self, attempt: int) -> float:
        """Delay after the given zero-based failed attempt."""
        return min(self.base_delay * (self.multiplier ** attempt), self.max_delay)

    def schedule(self) -> List[float]:
        """Every delay the policy may wait, in order."""
        return [self.delay_for(attempt) for attempt in range(self.max_attempts - 1)]

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        description: str = "operation",
    ) -> T:
        """
        Run an async operation under this policy.

        Non-retryable errors propagate immediately. When every attempt
        fails, the last error is re-raised; a DataStoreError gets its
        `attempts` updated first.
        """
        last_error: Optional[BaseException] = None

        for attempt in range(self.max_attempts):
            try:
                return await operation()
            except Exception as e:
                last_error = e
                if not self.retryable(e):
                    raise
                if attempt + 1 >= self.max_attempts:
                    break
                wait_time = self.delay_for(attempt)
                logger.warning(
                    f"Retry {attempt + 1}/{self.max_attempts - 1} for {description} "
                    f"in {wait_time:.2f}s: {e}"
                )
                await self.sleep(wait_time)

        if isinstance(last_error, DataStoreError):
            last_error.attempts = self.max_attempts
        logger.error(f"{description} failed after {self.max_attempts} attempts: {last_error}")
        raise last_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_attempts": self.max_attempts,
            "base_delay": self.base_delay,
            "multiplier": self.multiplier,
            "max_delay": self.max_delay,
        }


__all__ = ["RetryPolicy", "is_retryable"]
