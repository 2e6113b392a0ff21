"""
Ordered fallback over interchangeable data sources.

Each source is wrapped as a ``NamedStrategy``; the executor tries them one at
a time, in order, for a bounded number of cycles and returns the first result.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .errors import AggregateFailure, ValidationError
from .metrics import strategy_attempts, strategy_failures

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class NamedStrategy(Generic[T]):
    """A labelled zero-argument coroutine factory."""
    name: str
    execute: Callable[[], Awaitable[T]]


@dataclass
class Outcome(Generic[T]):
    success: bool
    result: Optional[T] = None
    strategy_used: Optional[str] = None
    attempts: int = 0
    error: Optional[BaseException] = None
    message: Optional[str] = None

    def unwrap(self) -> T:
        """Return the result, or raise ``AggregateFailure`` with the last error."""
        if self.success:
            return self.result
        raise AggregateFailure(self.message or "All strategies failed", last_error=self.error)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "result": self.result,
            "strategyUsed": self.strategy_used,
            "attempts": self.attempts,
            "error": str(self.error) if self.error else None,
            "message": self.message,
        }


class FallbackExecutor:
    """Try strategies in order, cycling through the whole list up to ``max_cycles`` times."""

    def __init__(self, max_cycles: int = 3):
        if max_cycles < 1:
            raise ValueError("max_cycles must be at least 1")
        self.max_cycles = max_cycles

    def schedule(self, count: int) -> Iterator[Tuple[int, int]]:
        """Yield ``(cycle, index)`` pairs: each strategy once per cycle."""
        for cycle in range(self.max_cycles):
            for index in range(count):
                yield cycle, index

    async def run(self, strategies: Sequence[NamedStrategy[T]]) -> Outcome[T]:
        if not strategies:
            raise ValueError("At least one strategy is required")

        attempts = 0
        last_error: Optional[BaseException] = None

        for cycle, index in self.schedule(len(strategies)):
            strategy = strategies[index]
            attempts += 1
            strategy_attempts.labels(strategy=strategy.name).inc()
            try:
                result = await strategy.execute()
            except ValidationError:
                strategy_failures.labels(strategy=strategy.name, reason='ValidationError').inc()
                raise
            except Exception as e:
                strategy_failures.labels(strategy=strategy.name, reason=type(e).__name__).inc()
                logger.warning(
                    f"Strategy {strategy.name} failed (cycle {cycle + 1}/{self.max_cycles}): {str(e)}"
                )
                last_error = e
                continue

            if attempts > 1:
                logger.info(f"Strategy {strategy.name} succeeded after {attempts} attempts")
            return Outcome(
                success=True,
                result=result,
                strategy_used=strategy.name,
                attempts=attempts,
            )

        message = f"All strategies failed after {self.max_cycles} retry cycles"
        logger.error(f"{message}: {', '.join(s.name for s in strategies)}")
        return Outcome(
            success=False,
            attempts=attempts,
            error=last_error,
            message=message,
        )


async def execute_with_strategies(strategies: List[NamedStrategy[Any]], max_cycles: int = 3) -> Outcome[Any]:
    """Convenience wrapper around ``FallbackExecutor(max_cycles).run``."""
    return await FallbackExecutor(max_cycles).run(strategies)
