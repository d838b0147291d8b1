"""Tests for process handles."""

import asyncio

import pytest

from stateflow._vendor import Err, Ok
from stateflow.process import FanOutProcess, LeafProcess, outcome_of


class TestLeafProcess:
    @pytest.mark.asyncio
    async def test_plain_value_is_resolved_immediately(self) -> None:
        handle = LeafProcess.of("value")
        assert handle.done()
        assert await handle == "value"

    @pytest.mark.asyncio
    async def test_cancel_on_plain_value_is_noop(self) -> None:
        handle = LeafProcess.of("value")
        handle.cancel()
        handle.cancel()
        assert await handle.wait() == "value"

    @pytest.mark.asyncio
    async def test_coroutine_is_scheduled_without_waiting(self) -> None:
        started = []

        async def work():
            started.append(True)
            return 7

        handle = LeafProcess.of(work())
        await asyncio.sleep(0)
        assert started == [True]
        assert await handle == 7

    @pytest.mark.asyncio
    async def test_cancel_pending_awaitable(self) -> None:
        handle = LeafProcess.of(asyncio.sleep(10))
        handle.cancel()
        handle.cancel()
        with pytest.raises(asyncio.CancelledError):
            await handle
        assert handle.future.cancelled()

    @pytest.mark.asyncio
    async def test_cancelling_a_waiter_does_not_cancel_handle(self) -> None:
        handle = LeafProcess.of(asyncio.sleep(0.01, "late"))
        waiter = asyncio.create_task(handle.wait())
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert not handle.future.cancelled()
        assert await handle == "late"

    @pytest.mark.asyncio
    async def test_failed(self) -> None:
        handle = LeafProcess.failed(ValueError("boom"))
        with pytest.raises(ValueError, match="boom"):
            await handle

    @pytest.mark.asyncio
    async def test_handles_compare_by_identity(self) -> None:
        first = LeafProcess.of(1)
        second = LeafProcess.of(1)
        assert first != second
        assert first == first
        assert len({first, second}) == 2


class TestFanOutProcess:
    @pytest.mark.asyncio
    async def test_results_follow_child_order(self, delayed) -> None:
        children = [LeafProcess.of(delayed(1, 0.03)), LeafProcess.of(delayed(2, 0.005))]
        handle = FanOutProcess(children, list)
        assert await handle == [1, 2]

    @pytest.mark.asyncio
    async def test_no_children(self) -> None:
        handle = FanOutProcess([], tuple)
        assert handle.done()
        assert await handle == ()

    @pytest.mark.asyncio
    async def test_first_failure_fails_aggregate(self, delayed, failing) -> None:
        children = [LeafProcess.of(delayed(1, 0.05)), LeafProcess.of(failing(KeyError("k")))]
        handle = FanOutProcess(children, list)
        with pytest.raises(KeyError):
            await handle

    @pytest.mark.asyncio
    async def test_simultaneous_failures_report_lowest_index(self) -> None:
        loop = asyncio.get_running_loop()
        low, high = loop.create_future(), loop.create_future()
        handle = FanOutProcess([LeafProcess(low), LeafProcess(high)], list)
        high.set_exception(KeyError("high index"))
        low.set_exception(ValueError("low index"))
        with pytest.raises(ValueError, match="low index"):
            await handle

    @pytest.mark.asyncio
    async def test_cancelled_child_cancels_aggregate(self) -> None:
        child = asyncio.get_running_loop().create_future()
        handle = FanOutProcess([LeafProcess.of(1), LeafProcess(child)], list)
        child.cancel()
        with pytest.raises(asyncio.CancelledError):
            await handle

    @pytest.mark.asyncio
    async def test_cancel_forwards_to_children(self) -> None:
        children = [LeafProcess.of(asyncio.sleep(10)), LeafProcess.of(asyncio.sleep(10))]
        handle = FanOutProcess(children, list)
        handle.cancel()
        handle.cancel()
        assert handle.future.cancelled()
        for child in children:
            with pytest.raises(asyncio.CancelledError):
                await child
            assert child.future.cancelled()


class TestOutcomeOf:
    @pytest.mark.asyncio
    async def test_value(self) -> None:
        future = asyncio.get_running_loop().create_future()
        future.set_result(3)
        assert outcome_of(future) == Ok(3)

    @pytest.mark.asyncio
    async def test_error(self) -> None:
        error = ValueError("x")
        future = asyncio.get_running_loop().create_future()
        future.set_exception(error)
        assert outcome_of(future) == Err(error)

    @pytest.mark.asyncio
    async def test_cancelled(self) -> None:
        future = asyncio.get_running_loop().create_future()
        future.cancel()
        outcome = outcome_of(future)
        assert isinstance(outcome.err(), asyncio.CancelledError)
