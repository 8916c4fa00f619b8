"""Registers the OS facts poller."""

from __future__ import annotations

from functools import partial
from typing import List

from ..config import AgentSettings
from ..health import HealthState
from ..poller import Poller
from ..registry import PollerRegistry
from .output import OsOutput
from .probe import get_os_output

NAME = "os"


def output_to_states(output: OsOutput, *, zombie_threshold: int) -> List[HealthState]:
    return output.states(zombie_threshold)


def register_os_component(registry: PollerRegistry, settings: AgentSettings) -> Poller:
    return registry.register(
        NAME,
        settings.poll_interval_seconds,
        get_os_output,
        partial(output_to_states, zombie_threshold=settings.zombie_process_threshold),
        probe_timeout_seconds=settings.probe_timeout_seconds,
    )


__all__ = ["NAME", "output_to_states", "register_os_component"]
