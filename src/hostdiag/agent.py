"""
Agent wiring.

Builds the registry and every component once during start-up. Callers keep
the returned Agent and read states from ``agent.registry``.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .accelerator import register_accelerator_component
from .config import AgentSettings, get_agent_settings
from .health import HealthState
from .kernel_log import LineSource
from .os_info import register_os_component
from .registry import PollerRegistry
from .sxid.component import SxidComponent, register_sxid_component

logger = logging.getLogger(__name__)


class Agent:
    def __init__(self, registry: PollerRegistry, sxid: SxidComponent) -> None:
        self.registry = registry
        self.sxid = sxid

    async def start(self) -> None:
        await self.sxid.watcher.start()
        await self.registry.start_all()
        logger.info("Agent started with pollers: %s", ", ".join(self.registry.names()))

    async def stop(self) -> None:
        await self.sxid.watcher.stop()
        await self.registry.stop_all()
        logger.info("Agent stopped")

    def states(self) -> Dict[str, Tuple[List[HealthState], bool]]:
        return self.registry.get_all_states()


def build_agent(
    settings: Optional[AgentSettings] = None,
    *,
    kernel_log_source: Optional[LineSource] = None,
) -> Agent:
    settings = settings or get_agent_settings()
    registry = PollerRegistry()
    register_os_component(registry, settings)
    register_accelerator_component(registry, settings)
    sxid = register_sxid_component(registry, settings, source=kernel_log_source)
    return Agent(registry, sxid)


__all__ = ["Agent", "build_agent"]
