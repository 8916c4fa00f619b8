"""OS facts, their grouping into health states, and typed accessors back."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Mapping, Sequence

import orjson

from ..errors import StateParseError
from ..health import HealthState, parse_int_field

STATE_NAME_HOST = "host"
STATE_KEY_HOST_ID = "id"

STATE_NAME_KERNEL = "kernel"
STATE_KEY_KERNEL_ARCH = "arch"
STATE_KEY_KERNEL_VERSION = "version"

STATE_NAME_PLATFORM = "platform"
STATE_KEY_PLATFORM_NAME = "name"
STATE_KEY_PLATFORM_FAMILY = "family"
STATE_KEY_PLATFORM_VERSION = "version"

STATE_NAME_UPTIMES = "uptimes"
STATE_KEY_UPTIMES_SECONDS = "uptime_seconds"
STATE_KEY_UPTIMES_HUMANIZED = "uptime_humanized"
STATE_KEY_UPTIMES_BOOT_TIME_UNIX_SECONDS = "boot_time_unix_seconds"
STATE_KEY_UPTIMES_BOOT_TIME_HUMANIZED = "boot_time_humanized"

STATE_NAME_PROCESS_COUNTS_BY_STATUS = "process_counts_by_status"
STATE_KEY_PROCESS_COUNT_ZOMBIE_PROCESSES = "process_count_zombie_processes"


@dataclass
class Host:
    id: str = ""


@dataclass
class Kernel:
    arch: str = ""
    version: str = ""


@dataclass
class Platform:
    name: str = ""
    family: str = ""
    version: str = ""


@dataclass
class Uptimes:
    seconds: int = 0
    seconds_humanized: str = ""
    boot_time_unix_seconds: int = 0
    boot_time_humanized: str = ""


@dataclass
class OsOutput:
    host: Host = field(default_factory=Host)
    kernel: Kernel = field(default_factory=Kernel)
    platform: Platform = field(default_factory=Platform)
    uptimes: Uptimes = field(default_factory=Uptimes)
    process_count_zombie_processes: int = 0

    def to_json(self) -> bytes:
        return orjson.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: bytes | str) -> "OsOutput":
        try:
            payload = orjson.loads(data)
        except orjson.JSONDecodeError as exc:
            raise StateParseError("os output payload is not valid JSON") from exc
        try:
            return cls(
                host=Host(**payload.get("host", {})),
                kernel=Kernel(**payload.get("kernel", {})),
                platform=Platform(**payload.get("platform", {})),
                uptimes=Uptimes(**payload.get("uptimes", {})),
                process_count_zombie_processes=int(payload.get("process_count_zombie_processes", 0)),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise StateParseError(f"invalid os output payload: {exc}") from exc

    def states(self, zombie_threshold: int) -> List[HealthState]:
        """One state per fact group plus the zombie-count verdict."""
        zombies = self.process_count_zombie_processes
        if zombies >= zombie_threshold:
            zombie_state = HealthState(
                name=STATE_NAME_PROCESS_COUNTS_BY_STATUS,
                healthy=False,
                reason=f"too many zombie processes: {zombies} (threshold: {zombie_threshold})",
                extra_info={STATE_KEY_PROCESS_COUNT_ZOMBIE_PROCESSES: str(zombies)},
            )
        else:
            zombie_state = HealthState(
                name=STATE_NAME_PROCESS_COUNTS_BY_STATUS,
                healthy=True,
                reason=f"zombie processes: {zombies} (threshold: {zombie_threshold})",
                extra_info={STATE_KEY_PROCESS_COUNT_ZOMBIE_PROCESSES: str(zombies)},
            )

        return [
            HealthState(
                name=STATE_NAME_HOST,
                healthy=True,
                reason=f"host id: {self.host.id}",
                extra_info={STATE_KEY_HOST_ID: self.host.id},
            ),
            HealthState(
                name=STATE_NAME_KERNEL,
                healthy=True,
                reason=f"arch: {self.kernel.arch}, version: {self.kernel.version}",
                extra_info={
                    STATE_KEY_KERNEL_ARCH: self.kernel.arch,
                    STATE_KEY_KERNEL_VERSION: self.kernel.version,
                },
            ),
            HealthState(
                name=STATE_NAME_PLATFORM,
                healthy=True,
                reason=f"name: {self.platform.name}, family: {self.platform.family}, version: {self.platform.version}",
                extra_info={
                    STATE_KEY_PLATFORM_NAME: self.platform.name,
                    STATE_KEY_PLATFORM_FAMILY: self.platform.family,
                    STATE_KEY_PLATFORM_VERSION: self.platform.version,
                },
            ),
            HealthState(
                name=STATE_NAME_UPTIMES,
                healthy=True,
                reason=f"uptime: {self.uptimes.seconds_humanized}, boot time: {self.uptimes.boot_time_humanized}",
                extra_info={
                    STATE_KEY_UPTIMES_SECONDS: str(self.uptimes.seconds),
                    STATE_KEY_UPTIMES_HUMANIZED: self.uptimes.seconds_humanized,
                    STATE_KEY_UPTIMES_BOOT_TIME_UNIX_SECONDS: str(self.uptimes.boot_time_unix_seconds),
                    STATE_KEY_UPTIMES_BOOT_TIME_HUMANIZED: self.uptimes.boot_time_humanized,
                },
            ),
            zombie_state,
        ]


def parse_state_host(extra_info: Mapping[str, str]) -> Host:
    return Host(id=extra_info.get(STATE_KEY_HOST_ID, ""))


def parse_state_kernel(extra_info: Mapping[str, str]) -> Kernel:
    return Kernel(
        arch=extra_info.get(STATE_KEY_KERNEL_ARCH, ""),
        version=extra_info.get(STATE_KEY_KERNEL_VERSION, ""),
    )


def parse_state_platform(extra_info: Mapping[str, str]) -> Platform:
    return Platform(
        name=extra_info.get(STATE_KEY_PLATFORM_NAME, ""),
        family=extra_info.get(STATE_KEY_PLATFORM_FAMILY, ""),
        version=extra_info.get(STATE_KEY_PLATFORM_VERSION, ""),
    )


def parse_state_uptimes(extra_info: Mapping[str, str]) -> Uptimes:
    return Uptimes(
        seconds=parse_int_field(extra_info, STATE_KEY_UPTIMES_SECONDS, default=0) or 0,
        seconds_humanized=extra_info.get(STATE_KEY_UPTIMES_HUMANIZED, ""),
        boot_time_unix_seconds=parse_int_field(extra_info, STATE_KEY_UPTIMES_BOOT_TIME_UNIX_SECONDS, default=0) or 0,
        boot_time_humanized=extra_info.get(STATE_KEY_UPTIMES_BOOT_TIME_HUMANIZED, ""),
    )


def parse_state_zombie_count(extra_info: Mapping[str, str]) -> int:
    return parse_int_field(extra_info, STATE_KEY_PROCESS_COUNT_ZOMBIE_PROCESSES, default=0) or 0


def parse_states_to_output(states: Sequence[HealthState]) -> OsOutput:
    """Rebuild an OsOutput from its states; an unknown state name is an error."""
    output = OsOutput()
    for state in states:
        info: Dict[str, str] = state.extra_info
        if state.name == STATE_NAME_HOST:
            output.host = parse_state_host(info)
        elif state.name == STATE_NAME_KERNEL:
            output.kernel = parse_state_kernel(info)
        elif state.name == STATE_NAME_PLATFORM:
            output.platform = parse_state_platform(info)
        elif state.name == STATE_NAME_UPTIMES:
            output.uptimes = parse_state_uptimes(info)
        elif state.name == STATE_NAME_PROCESS_COUNTS_BY_STATUS:
            output.process_count_zombie_processes = parse_state_zombie_count(info)
        else:
            raise StateParseError(f"unknown state name: {state.name}")
    return output
