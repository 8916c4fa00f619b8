"""Agent settings resolved once from the environment."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from functools import lru_cache

from .errors import ConfigurationError
from .runtime import env_int, env_seconds, env_str

DEFAULT_POLL_INTERVAL_SECONDS = 60.0
DEFAULT_PROBE_TIMEOUT_SECONDS = 30.0
DEFAULT_DMESG_COMMAND = "dmesg --ctime --nopager --follow"
DEFAULT_KERNEL_LOG_RESTART_DELAY_SECONDS = 5.0
DEFAULT_SXID_RETAINED_RECORDS = 100


@dataclass(frozen=True)
class AgentSettings:
    poll_interval_seconds: float
    probe_timeout_seconds: float
    zombie_process_threshold: int
    dmesg_command: tuple[str, ...]
    kernel_log_restart_delay_seconds: float
    sxid_retained_records: int


@lru_cache(maxsize=1)
def get_agent_settings() -> AgentSettings:
    """Return process-wide settings; computed on first use and read-only afterwards."""
    from ..os_info.threshold import default_zombie_process_threshold

    poll_interval = env_seconds("HOSTDIAG_POLL_INTERVAL_SECONDS", or_value=DEFAULT_POLL_INTERVAL_SECONDS)
    if not poll_interval:
        raise ConfigurationError.invalid_value("HOSTDIAG_POLL_INTERVAL_SECONDS", poll_interval, "Must be positive")

    probe_timeout = env_seconds("HOSTDIAG_PROBE_TIMEOUT_SECONDS", or_value=DEFAULT_PROBE_TIMEOUT_SECONDS)

    threshold = env_int("HOSTDIAG_ZOMBIE_PROCESS_THRESHOLD")
    if threshold is None:
        threshold = default_zombie_process_threshold()
    elif threshold <= 0:
        raise ConfigurationError.invalid_value("HOSTDIAG_ZOMBIE_PROCESS_THRESHOLD", threshold, "Must be positive")

    raw_command = env_str("HOSTDIAG_DMESG_COMMAND", or_value=DEFAULT_DMESG_COMMAND)
    try:
        dmesg_command = tuple(shlex.split(raw_command or ""))
    except ValueError as exc:
        raise ConfigurationError.invalid_value("HOSTDIAG_DMESG_COMMAND", raw_command) from exc
    if not dmesg_command:
        raise ConfigurationError.invalid_value("HOSTDIAG_DMESG_COMMAND", raw_command, "Must not be empty")

    restart_delay = env_seconds(
        "HOSTDIAG_KERNEL_LOG_RESTART_DELAY_SECONDS", or_value=DEFAULT_KERNEL_LOG_RESTART_DELAY_SECONDS
    )

    retained = env_int("HOSTDIAG_SXID_RETAINED_RECORDS", or_value=DEFAULT_SXID_RETAINED_RECORDS)
    if retained is None or retained <= 0:
        raise ConfigurationError.invalid_value("HOSTDIAG_SXID_RETAINED_RECORDS", retained, "Must be positive")

    return AgentSettings(
        poll_interval_seconds=float(poll_interval),
        probe_timeout_seconds=float(probe_timeout or 0.0),
        zombie_process_threshold=int(threshold),
        dmesg_command=dmesg_command,
        kernel_log_restart_delay_seconds=float(restart_delay or 0.0),
        sxid_retained_records=int(retained),
    )


__all__ = ["AgentSettings", "get_agent_settings"]
