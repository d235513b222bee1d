"""Results of best-effort sub-tasks."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StepStatus(Enum):
    """Status of a sub-task."""

    OK = "ok"
    DEGRADED = "degraded"


@dataclass
class StepResult(Generic[T]):
    """
    Outcome of a sub-task whose failure must not fail the email.

    A degraded result still carries a usable value (an empty record,
    no keywords) alongside the error that caused the degradation.
    """

    status: StepStatus
    value: T | None = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status == StepStatus.OK

    @classmethod
    def ok(cls, value: T, **metadata: Any) -> "StepResult[T]":
        """Create a successful result."""
        return cls(status=StepStatus.OK, value=value, metadata=metadata)

    @classmethod
    def degraded(cls, error: str, fallback: T | None = None, **metadata: Any) -> "StepResult[T]":
        """Create a degraded result with a fallback value."""
        return cls(status=StepStatus.DEGRADED, value=fallback, error=error, metadata=metadata)


async def settle_all(*aws: Awaitable[T]) -> list[StepResult[T]]:
    """
    Run awaitables concurrently and wait for every one of them.

    One failure never cancels the others. Each outcome is returned as a
    StepResult in the order the awaitables were given.
    """
    outcomes = await asyncio.gather(*aws, return_exceptions=True)
    results: list[StepResult[T]] = []
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            logger.warning(f"Concurrent task failed: {outcome}")
            results.append(StepResult.degraded(str(outcome)))
        else:
            results.append(StepResult.ok(outcome))
    return results
