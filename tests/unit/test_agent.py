import asyncio

import pytest

from hostdiag import accelerator
from hostdiag.agent import build_agent
from hostdiag.os_info import OsOutput
from hostdiag.os_info import component as os_component


@pytest.mark.asyncio
async def test_build_agent_registers_every_signal(monkeypatch, agent_settings):
    async def _os_output():
        return OsOutput()

    async def _kernel_log():
        yield "[1.0] nvidia-nvswitch0: SXid (PCI:0000:00:00.0): 11004, Non-fatal, ACL"

    monkeypatch.setattr(os_component, "get_os_output", _os_output)
    monkeypatch.setattr(accelerator, "locate_executable", lambda name: None)

    agent = build_agent(agent_settings, kernel_log_source=_kernel_log)
    assert agent.registry.names() == ["accelerator", "error_sxid", "os"]

    await agent.start()
    for _ in range(100):
        states = agent.states()
        if all(ok for _, ok in states.values()):
            break
        await asyncio.sleep(0.01)
    await agent.stop()

    states = agent.states()
    assert all(ok for _, ok in states.values())
    assert len(states["os"][0]) == 5
    assert agent.sxid.tracker.snapshot().total_count >= 1
