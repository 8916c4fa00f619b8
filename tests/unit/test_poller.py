import asyncio

import pytest

from hostdiag.health import HealthState, parse_int_field
from hostdiag.poller import Poller


def _convert(output):
    return [HealthState(name="demo", healthy=True, reason=f"value {output}")]


def _make(probe, interval_seconds=60.0, **kwargs):
    kwargs.setdefault("clock", lambda: 1000.0)
    return Poller("demo", interval_seconds, probe, _convert, **kwargs)


def test_non_positive_interval_rejected():
    async def _probe():
        return 1

    with pytest.raises(ValueError):
        Poller("demo", 0, _probe, _convert)


@pytest.mark.asyncio
async def test_no_data_before_first_poll():
    async def _probe():
        return 1

    poller = _make(_probe)

    assert poller.get_latest() == ([], False)


@pytest.mark.asyncio
async def test_successful_poll_is_cached():
    async def _probe():
        return 7

    poller = _make(_probe)
    assert await poller.poll_now()

    states, ok = poller.get_latest()

    assert ok
    assert states == [HealthState(name="demo", healthy=True, reason="value 7")]
    assert poller.last_entry().output == 7


@pytest.mark.asyncio
async def test_repeated_errors_count_and_surface_unhealthy_state():
    async def _probe():
        raise RuntimeError("probe exploded")

    poller = _make(_probe)
    for _ in range(3):
        await poller.poll_now()

    states, ok = poller.get_latest()

    assert not ok
    assert len(states) == 1
    assert not states[0].healthy
    assert states[0].reason == "failed to poll demo: probe exploded"
    assert states[0].extra_info["error_type"] == "RuntimeError"
    assert parse_int_field(states[0].extra_info, "failure_count") == 3
    assert poller.last_entry().failure_count == 3


@pytest.mark.asyncio
async def test_error_after_success_keeps_ok_flag():
    outcomes = iter([1, RuntimeError("later failure")])

    async def _probe():
        outcome = next(outcomes)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    poller = _make(_probe)
    await poller.poll_now()
    await poller.poll_now()

    states, ok = poller.get_latest()

    assert ok
    assert not states[0].healthy
    assert poller.last_entry().consecutive_failures == 1


@pytest.mark.asyncio
async def test_converter_errors_are_recorded():
    async def _probe():
        return 1

    def _broken(output):
        raise KeyError("missing")

    poller = Poller("demo", 60.0, _probe, _broken)
    await poller.poll_now()

    states, ok = poller.get_latest()
    assert not ok
    assert states[0].extra_info["error_type"] == "KeyError"


@pytest.mark.asyncio
async def test_probe_timeout_is_recorded():
    async def _probe():
        await asyncio.sleep(10)

    poller = _make(_probe, probe_timeout_seconds=0.01)
    await poller.poll_now()

    states, ok = poller.get_latest()
    assert not ok
    assert states[0].extra_info["error_type"] == "TimeoutError"


@pytest.mark.asyncio
async def test_polls_never_overlap():
    release = asyncio.Event()
    running = 0
    peak = 0

    async def _probe():
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await release.wait()
        running -= 1
        return 1

    poller = _make(_probe)
    first = asyncio.create_task(poller.poll_now())
    await asyncio.sleep(0)

    assert await poller.poll_now() is False
    assert poller.get_latest() == ([], False)

    release.set()
    assert await first is True
    assert peak == 1


@pytest.mark.asyncio
async def test_background_loop_polls_on_cadence_and_stop_is_terminal():
    calls = 0

    async def _probe():
        nonlocal calls
        calls += 1
        return calls

    poller = _make(_probe, interval_seconds=0.01)
    await poller.start()
    await poller.start()
    assert poller.running

    await asyncio.sleep(0.1)
    await poller.stop()

    assert poller.stopped
    assert not poller.running
    assert calls >= 2
    observed = calls

    await poller.start()
    assert await poller.poll_now() is False
    await asyncio.sleep(0.03)
    assert calls == observed
    _, ok = poller.get_latest()
    assert ok


@pytest.mark.asyncio
async def test_stop_cancels_slow_poll(monkeypatch):
    monkeypatch.setattr("hostdiag.poller.STOP_TIMEOUT_SECONDS", 0.05)
    started = asyncio.Event()

    async def _probe():
        started.set()
        await asyncio.sleep(10)

    poller = _make(_probe)
    await poller.start()
    await started.wait()

    await asyncio.wait_for(poller.stop(), timeout=1.0)

    assert not poller.running
    assert poller.get_latest() == ([], False)
