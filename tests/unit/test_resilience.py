"""Unit tests for the async resilience helpers."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from recipe_explorer.exceptions import AllStrategiesFailedError
from recipe_explorer.resilience import (
    first_completed,
    retry,
    run_with_concurrency,
    try_strategies,
    with_timeout,
)


def delayed(value, seconds, calls=None, fail=False):
    """Build a zero-argument coroutine function that settles after ``seconds``."""

    async def operation():
        if calls is not None:
            calls.append(value)
        await asyncio.sleep(seconds)
        if fail:
            raise RuntimeError(f"failed {value}")
        return value

    return operation


class TestRunWithConcurrency:
    @pytest.mark.asyncio
    async def test_failed_slot_is_none_and_others_succeed(self):
        calls = []
        operations = [
            delayed(1, 0.01, calls),
            delayed(2, 0.001, calls),
            delayed(3, 0.005, calls, fail=True),
            delayed(4, 0.002, calls),
            delayed(5, 0.0, calls),
        ]

        results = await run_with_concurrency(operations, concurrency=2)

        assert results == [1, 2, None, 4, 5]
        assert sorted(calls) == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_never_exceeds_limit(self):
        in_flight = 0
        peak = 0

        def tracked(value):
            async def operation():
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.005)
                in_flight -= 1
                return value

            return operation

        results = await run_with_concurrency([tracked(i) for i in range(7)], concurrency=3)

        assert results == list(range(7))
        assert peak == 3

    @pytest.mark.asyncio
    async def test_order_follows_input_not_completion(self):
        operations = [delayed("slow", 0.03), delayed("fast", 0.0)]

        assert await run_with_concurrency(operations, concurrency=2) == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_empty_input(self):
        assert await run_with_concurrency([], concurrency=3) == []

    @pytest.mark.asyncio
    async def test_limit_larger_than_input(self):
        assert await run_with_concurrency([delayed("a", 0)], concurrency=10) == ["a"]

    @pytest.mark.asyncio
    async def test_rejects_non_positive_limit(self):
        with pytest.raises(ValueError):
            await run_with_concurrency([delayed(1, 0)], concurrency=0)


class TestWithTimeout:
    @pytest.mark.asyncio
    async def test_fast_operation_returns_value(self):
        result = await with_timeout(delayed("meals", 0.005), 0.05, fallback="too slow")

        assert result == "meals"

    @pytest.mark.asyncio
    async def test_slow_operation_returns_fallback(self):
        result = await with_timeout(delayed("meals", 0.1), 0.01, fallback="too slow")

        assert result == "too slow"

    @pytest.mark.asyncio
    async def test_slow_operation_keeps_running(self):
        finished = asyncio.Event()

        async def slow():
            await asyncio.sleep(0.02)
            finished.set()
            return "late"

        assert await with_timeout(slow, 0.001, fallback=None) is None
        await asyncio.wait_for(finished.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_failing_operation_returns_fallback(self):
        result = await with_timeout(delayed("x", 0, fail=True), 1, fallback=[])

        assert result == []


class TestTryStrategies:
    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        first = AsyncMock(side_effect=RuntimeError("one"))
        second = AsyncMock(side_effect=RuntimeError("two"))
        third = AsyncMock(return_value="three")

        assert await try_strategies([first, second, third]) == "three"
        first.assert_awaited_once()
        second.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stops_after_success(self):
        first = AsyncMock(return_value="one")
        second = AsyncMock(return_value="two")

        assert await try_strategies([first, second]) == "one"
        second.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_failures_are_reported_in_order(self):
        strategies = [
            AsyncMock(side_effect=RuntimeError("cache miss")),
            AsyncMock(side_effect=RuntimeError("api down")),
            AsyncMock(side_effect=RuntimeError("no favorite")),
        ]

        with pytest.raises(AllStrategiesFailedError) as excinfo:
            await try_strategies(strategies)

        message = str(excinfo.value)
        assert message == "All strategies failed: cache miss, api down, no favorite"
        assert [str(e) for e in excinfo.value.errors] == ["cache miss", "api down", "no favorite"]

    @pytest.mark.asyncio
    async def test_no_strategies_fails(self):
        with pytest.raises(AllStrategiesFailedError):
            await try_strategies([])


class TestFirstCompleted:
    @pytest.mark.asyncio
    async def test_fastest_wins(self):
        operations = [delayed("slow", 0.05), delayed("fast", 0.001), delayed("medium", 0.02)]

        assert await first_completed(operations) == "fast"

    @pytest.mark.asyncio
    async def test_skips_early_failures(self):
        operations = [delayed("broken", 0.0, fail=True), delayed("ok", 0.01)]

        assert await first_completed(operations) == "ok"

    @pytest.mark.asyncio
    async def test_all_failing_raises(self):
        operations = [delayed(i, 0.0, fail=True) for i in range(3)]

        with pytest.raises(AllStrategiesFailedError) as excinfo:
            await first_completed(operations)

        assert len(excinfo.value.errors) == 3

    @pytest.mark.asyncio
    async def test_does_not_wait_for_losers(self):
        loop = asyncio.get_running_loop()
        start = loop.time()

        await first_completed([delayed("fast", 0.0), delayed("slow", 0.5)])

        assert loop.time() - start < 0.4


class TestRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_failure(self):
        operation = AsyncMock(side_effect=[ConnectionError("blip"), "meal"])

        with patch("recipe_explorer.resilience.asyncio.sleep", new_callable=AsyncMock) as sleep:
            assert await retry(operation, attempts=2, delay=1.0) == "meal"

        assert operation.await_count == 2
        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_gives_up_after_attempts(self):
        operation = AsyncMock(side_effect=ConnectionError("down"))

        with patch("recipe_explorer.resilience.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(ConnectionError, match="down"):
                await retry(operation, attempts=3, delay=0.5)

        assert operation.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self):
        operation = AsyncMock(side_effect=KeyError("bad"))

        with pytest.raises(KeyError):
            await retry(operation, attempts=5, delay=0, retry_on=(ConnectionError,))

        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            await retry(AsyncMock(), attempts=0)
