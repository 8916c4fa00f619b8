import pytest

from hostdiag.os_info import NAME, OsOutput, register_os_component
from hostdiag.os_info import component as component_module
from hostdiag.registry import PollerRegistry


@pytest.mark.asyncio
async def test_registered_poller_applies_configured_threshold(monkeypatch, agent_settings):
    async def _fake_output():
        return OsOutput(process_count_zombie_processes=agent_settings.zombie_process_threshold)

    monkeypatch.setattr(component_module, "get_os_output", _fake_output)
    registry = PollerRegistry()

    poller = register_os_component(registry, agent_settings)
    assert registry.get(NAME) is poller

    await poller.poll_now()
    states, ok = poller.get_latest()

    assert ok
    zombie_state = states[-1]
    assert zombie_state.name == "process_counts_by_status"
    assert not zombie_state.healthy


def test_registering_twice_reuses_poller(agent_settings):
    registry = PollerRegistry()

    assert register_os_component(registry, agent_settings) is register_os_component(registry, agent_settings)
