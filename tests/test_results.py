"""Tests for sub-task results."""

import asyncio

import pytest

from inbox_agent.results import StepResult, StepStatus, settle_all


class TestStepResult:
    """Tests for StepResult constructors."""

    def test_ok_creates_success_result(self) -> None:
        """Test StepResult.ok() creates a successful result."""
        result = StepResult.ok(["#bakery"], source="keywords")

        assert result.success is True
        assert result.status == StepStatus.OK
        assert result.value == ["#bakery"]
        assert result.error is None
        assert result.metadata == {"source": "keywords"}

    def test_degraded_keeps_fallback(self) -> None:
        """Test StepResult.degraded() carries the error and fallback value."""
        result = StepResult.degraded("model down", fallback={})

        assert result.success is False
        assert result.status == StepStatus.DEGRADED
        assert result.value == {}
        assert result.error == "model down"


class TestSettleAll:
    """Tests for running best-effort tasks concurrently."""

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_others(self) -> None:
        """Test that every task finishes even when one fails."""
        finished = []

        async def slow(value: str) -> str:
            await asyncio.sleep(0.01)
            finished.append(value)
            return value

        async def failing() -> str:
            raise RuntimeError("lookup failed")

        results = await settle_all(slow("a"), failing(), slow("b"))

        assert [r.success for r in results] == [True, False, True]
        assert results[0].value == "a"
        assert results[1].error == "lookup failed"
        assert results[2].value == "b"
        assert sorted(finished) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_no_tasks(self) -> None:
        """Test that nothing to run gives no results."""
        assert await settle_all() == []
