from hostdiag.health import HealthState
from hostdiag.poller_helpers import PollerCache


def _state(name="os", healthy=True):
    return HealthState(name=name, healthy=healthy, reason="" if healthy else "bad")


def test_empty_cache():
    entry = PollerCache().snapshot()

    assert entry.states == []
    assert not entry.has_succeeded
    assert entry.failure_count == 0


def test_failures_accumulate_and_success_resets_streak():
    cache = PollerCache()

    cache.record_failure(RuntimeError("one"), _state(healthy=False), 1.0)
    entry = cache.record_failure(RuntimeError("two"), _state(healthy=False), 2.0)
    assert entry.failure_count == 2
    assert entry.consecutive_failures == 2
    assert not entry.has_succeeded

    cache.record_success({"ok": True}, [_state()], 3.0)
    entry = cache.snapshot()

    assert entry.failure_count == 2
    assert entry.consecutive_failures == 0
    assert entry.error is None
    assert entry.output == {"ok": True}
    assert entry.last_success == 3.0


def test_snapshot_is_a_copy():
    cache = PollerCache()
    cache.record_success(None, [_state()], 1.0)

    cache.snapshot().states.clear()

    assert len(cache.snapshot().states) == 1
