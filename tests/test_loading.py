"""Tests for the load state machine and its driver."""

import asyncio

from meal_tracker.domain.errors import NetworkError
from meal_tracker.domain.results import Err, Ok, Result
from meal_tracker.services.loading import (
    Failed,
    Fetch,
    FetchFailed,
    Loaded,
    LoadDriver,
    Loading,
    LoadingSlow,
    LoadSlot,
    Requested,
    SlowThresholdPassed,
    StartSlowTimer,
    Succeeded,
    update,
)


def test_initial_state_is_loading() -> None:
    assert LoadSlot().state == Loading()


def test_request_starts_fetch_and_slow_timer() -> None:
    slot, effects = update(LoadSlot(), Requested("page-1"))

    assert slot == LoadSlot(sequence=1, state=Loading())
    assert effects == [Fetch(1, "page-1"), StartSlowTimer(1)]


def test_slow_threshold_marks_loading_slow() -> None:
    slot, _ = update(LoadSlot(), Requested("page-1"))

    slot, effects = update(slot, SlowThresholdPassed(1))

    assert slot.state == LoadingSlow()
    assert effects == []


def test_response_after_slow_threshold_loads() -> None:
    slot, _ = update(LoadSlot(), Requested("page-1"))
    slot, _ = update(slot, SlowThresholdPassed(1))

    slot, _ = update(slot, Succeeded(1, "feed"))

    assert slot.state == Loaded("feed")


def test_slow_threshold_after_response_is_inert() -> None:
    slot, _ = update(LoadSlot(), Requested("page-1"))
    slot, _ = update(slot, Succeeded(1, "feed"))

    after, effects = update(slot, SlowThresholdPassed(1))

    assert after is slot
    assert after.state == Loaded("feed")
    assert effects == []


def test_slow_threshold_after_failure_is_inert() -> None:
    slot, _ = update(LoadSlot(), Requested("page-1"))
    slot, _ = update(slot, FetchFailed(1, NetworkError("offline")))

    slot, _ = update(slot, SlowThresholdPassed(1))

    assert slot.state == Failed(NetworkError("offline"))
    assert slot.is_terminal


def test_stale_response_is_discarded() -> None:
    slot, _ = update(LoadSlot(), Requested("page-1"))
    slot, _ = update(slot, Requested("page-2"))

    slot, _ = update(slot, Succeeded(2, "second"))
    slot, _ = update(slot, Succeeded(1, "first"))
    slot, _ = update(slot, FetchFailed(1, NetworkError("late")))
    slot, _ = update(slot, SlowThresholdPassed(1))

    assert slot == LoadSlot(sequence=2, state=Loaded("second"))


def test_new_request_starts_fresh_from_loading() -> None:
    slot, _ = update(LoadSlot(), Requested("page-1"))
    slot, _ = update(slot, Succeeded(1, "first"))

    slot, _ = update(slot, Requested("page-2"))

    assert slot == LoadSlot(sequence=2, state=Loading())


def test_driver_keeps_latest_result_when_responses_arrive_out_of_order() -> None:
    async def scenario() -> tuple[LoadSlot[str], list[object]]:
        gates = {"page-1": asyncio.Event(), "page-2": asyncio.Event()}

        async def fetch(request: str) -> Result[str, NetworkError]:
            await gates[request].wait()
            return Ok(f"result of {request}")

        driver: LoadDriver[str, str] = LoadDriver(fetch, slow_threshold_seconds=60)
        states: list[object] = []
        driver.subscribe(lambda slot: states.append(slot.state))
        driver.request("page-1")
        driver.request("page-2")
        await asyncio.sleep(0)

        gates["page-2"].set()
        await asyncio.sleep(0.01)
        gates["page-1"].set()
        await driver.wait_idle()
        driver.close()
        return driver.slot, states

    slot, states = asyncio.run(scenario())

    assert slot == LoadSlot(sequence=2, state=Loaded("result of page-2"))
    assert states == [Loading(), Loading(), Loaded("result of page-2")]


def test_driver_reports_slow_then_failure() -> None:
    async def scenario() -> list[object]:
        async def fetch(request: str) -> Result[str, NetworkError]:
            await asyncio.sleep(0.05)
            return Err(NetworkError("offline"))

        driver: LoadDriver[str, str] = LoadDriver(fetch, slow_threshold_seconds=0.01)
        states: list[object] = []
        driver.subscribe(lambda slot: states.append(slot.state))
        driver.request("page-1")
        await driver.wait_idle()
        driver.close()
        return states

    states = asyncio.run(scenario())

    assert states == [Loading(), LoadingSlow(), Failed(NetworkError("offline"))]


def test_driver_timer_firing_after_response_changes_nothing() -> None:
    async def scenario() -> list[object]:
        async def fetch(request: str) -> Result[str, NetworkError]:
            return Ok("fast")

        driver: LoadDriver[str, str] = LoadDriver(fetch, slow_threshold_seconds=0.01)
        states: list[object] = []
        driver.subscribe(lambda slot: states.append(slot.state))
        driver.request("page-1")
        await driver.wait_idle()
        await asyncio.sleep(0.05)
        return states

    states = asyncio.run(scenario())

    assert states == [Loading(), Loaded("fast")]


def test_driver_turns_raising_fetch_into_failure() -> None:
    async def scenario() -> LoadSlot[str]:
        async def fetch(request: str) -> Result[str, NetworkError]:
            raise RuntimeError("response stream broke")

        driver: LoadDriver[str, str] = LoadDriver(fetch, slow_threshold_seconds=60)
        driver.request("page-1")
        await driver.wait_idle()
        driver.close()
        return driver.slot

    slot = asyncio.run(scenario())

    assert slot == LoadSlot(
        sequence=1, state=Failed(NetworkError("response stream broke"))
    )


def test_driver_holds_at_most_one_slow_timer() -> None:
    async def scenario() -> list[bool]:
        async def fetch(request: int) -> Result[int, NetworkError]:
            if request % 2:
                await asyncio.sleep(0.003)
            return Ok(request)

        driver: LoadDriver[int, int] = LoadDriver(fetch, slow_threshold_seconds=0.001)
        pending: list[bool] = []
        for page in range(50):
            driver.request(page)
            await driver.wait_idle()
            pending.append(driver._slow_timer is not None)
        driver.close()
        return pending

    pending = asyncio.run(scenario())

    assert not any(pending)
