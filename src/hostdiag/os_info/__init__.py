"""OS facts: host, kernel, platform, uptimes and process counts."""

from .component import NAME, register_os_component
from .output import (
    STATE_NAME_HOST,
    STATE_NAME_KERNEL,
    STATE_NAME_PLATFORM,
    STATE_NAME_PROCESS_COUNTS_BY_STATUS,
    STATE_NAME_UPTIMES,
    Host,
    Kernel,
    OsOutput,
    Platform,
    Uptimes,
    parse_state_host,
    parse_state_kernel,
    parse_state_platform,
    parse_state_uptimes,
    parse_state_zombie_count,
    parse_states_to_output,
)
from .probe import get_os_output
from .threshold import default_zombie_process_threshold

__all__ = [
    "Host",
    "Kernel",
    "NAME",
    "OsOutput",
    "Platform",
    "STATE_NAME_HOST",
    "STATE_NAME_KERNEL",
    "STATE_NAME_PLATFORM",
    "STATE_NAME_PROCESS_COUNTS_BY_STATUS",
    "STATE_NAME_UPTIMES",
    "Uptimes",
    "default_zombie_process_threshold",
    "get_os_output",
    "parse_state_host",
    "parse_state_kernel",
    "parse_state_platform",
    "parse_state_uptimes",
    "parse_state_zombie_count",
    "parse_states_to_output",
    "register_os_component",
]
