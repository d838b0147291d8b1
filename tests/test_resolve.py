"""Tests for resolving nested asynchronous values."""

import asyncio
from collections import namedtuple

import pytest

from stateflow.resolve import resolve, resolve_value

Pair = namedtuple("Pair", ["left", "right"])


class TestLeaves:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, 5, "abc", b"raw"])
    async def test_plain_values_pass_through(self, value) -> None:
        assert await resolve_value(value) == value

    @pytest.mark.asyncio
    async def test_awaitable(self, delayed) -> None:
        assert await resolve_value(delayed("done", 0.001)) == "done"

    @pytest.mark.asyncio
    async def test_process_handle_is_returned_unchanged(self, delayed) -> None:
        handle = resolve(delayed(3))
        assert resolve(handle) is handle
        assert await handle == 3


class TestSequences:
    @pytest.mark.asyncio
    async def test_order_follows_input_not_completion(self, delayed) -> None:
        result = await resolve_value([delayed(1, 0.03), delayed(2, 0.005)])
        assert result == [1, 2]

    @pytest.mark.asyncio
    async def test_tuple_and_namedtuple_keep_type(self, delayed) -> None:
        assert await resolve_value((delayed(1), 2)) == (1, 2)
        assert await resolve_value(Pair(delayed("l"), delayed("r"))) == Pair("l", "r")

    @pytest.mark.asyncio
    async def test_children_are_issued_before_any_is_awaited(self) -> None:
        gate = asyncio.Event()

        async def waiter():
            await gate.wait()
            return "waited"

        async def opener():
            gate.set()
            return "opened"

        result = await asyncio.wait_for(resolve_value([waiter(), opener()]), timeout=1)
        assert result == ["waited", "opened"]

    @pytest.mark.asyncio
    async def test_empty_list(self) -> None:
        assert await resolve_value([]) == []


class TestMappings:
    @pytest.mark.asyncio
    async def test_keys_preserved_regardless_of_completion(self, delayed) -> None:
        result = await resolve_value({"x": delayed("a", 0.03), "y": delayed("b", 0.005)})
        assert result == {"x": "a", "y": "b"}
        assert list(result) == ["x", "y"]

    @pytest.mark.asyncio
    async def test_nested_structures(self, delayed) -> None:
        value = {
            "a": [delayed(1), (delayed(2), 3)],
            "b": {"c": delayed(4), "d": None},
        }
        assert await resolve_value(value) == {"a": [1, (2, 3)], "b": {"c": 4, "d": None}}


class TestNestedTransitions:
    @pytest.mark.asyncio
    async def test_generator_is_run_to_completion(self, delayed) -> None:
        def inner():
            value = yield delayed(20)
            return value + 1

        assert await resolve_value(inner()) == 21

    @pytest.mark.asyncio
    async def test_generators_inside_containers(self, delayed) -> None:
        def fetch(n):
            value = yield delayed(n, 0.001 * n)
            return value * 10

        assert await resolve_value({"one": fetch(1), "many": [fetch(2), fetch(3)]}) == {
            "one": 10,
            "many": [20, 30],
        }


class TestFailures:
    @pytest.mark.asyncio
    async def test_any_failure_fails_resolution(self, delayed, failing) -> None:
        with pytest.raises(ValueError, match="bad"):
            await resolve_value([delayed(1), {"nested": failing(ValueError("bad"))}])

    @pytest.mark.asyncio
    async def test_simultaneous_failures_report_lowest_key(self) -> None:
        loop = asyncio.get_running_loop()
        first, second = loop.create_future(), loop.create_future()
        handle = resolve({"first": first, "second": second})
        second.set_exception(KeyError("second"))
        first.set_exception(ValueError("first"))
        with pytest.raises(ValueError, match="first"):
            await handle
