"""
OS facts probe.

Reads host identity, kernel and platform facts, uptime and the zombie process
count. The blocking reads run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import platform
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

import psutil

from ..time_formatter import TimeFormatter
from .output import Host, Kernel, OsOutput, Platform, Uptimes

logger = logging.getLogger(__name__)

HOST_ID_PATHS = (
    Path("/sys/class/dmi/id/product_uuid"),
    Path("/etc/machine-id"),
    Path("/var/lib/dbus/machine-id"),
)


def read_host_id(paths: Iterable[Path] = HOST_ID_PATHS) -> str:
    """Return the first readable stable host identifier, or an empty string."""
    for path in paths:
        try:
            value = path.read_text().strip()
        except OSError:
            continue
        if value:
            return value
    logger.debug("No host identifier found")
    return ""


def read_platform() -> Platform:
    try:
        release = platform.freedesktop_os_release()
    except OSError:
        return Platform(name=platform.system().lower(), family="", version=platform.version())
    family = release.get("ID_LIKE", "").split()
    return Platform(
        name=release.get("ID", ""),
        family=family[0] if family else release.get("ID", ""),
        version=release.get("VERSION_ID", ""),
    )


def count_zombie_processes() -> int:
    count = 0
    for proc in psutil.process_iter(["status"]):
        if proc.info.get("status") == psutil.STATUS_ZOMBIE:
            count += 1
    return count


def build_uptimes(boot_time: float, now: Optional[float] = None) -> Uptimes:
    now = time.time() if now is None else now
    boot_seconds = int(boot_time)
    uptime_seconds = max(int(now - boot_time), 0)
    now_dt = datetime.fromtimestamp(now, tz=timezone.utc)
    boot_dt = datetime.fromtimestamp(boot_seconds, tz=timezone.utc)
    return Uptimes(
        seconds=uptime_seconds,
        seconds_humanized=TimeFormatter.humanize_relative(now_dt - timedelta(seconds=uptime_seconds), now_dt),
        boot_time_unix_seconds=boot_seconds,
        boot_time_humanized=TimeFormatter.humanize_relative(boot_dt, now_dt),
    )


def collect_os_output(
    *,
    host_id_reader: Callable[[], str] = read_host_id,
    boot_time_reader: Callable[[], float] = psutil.boot_time,
    zombie_counter: Callable[[], int] = count_zombie_processes,
) -> OsOutput:
    return OsOutput(
        host=Host(id=host_id_reader()),
        kernel=Kernel(arch=platform.machine(), version=platform.release()),
        platform=read_platform(),
        uptimes=build_uptimes(boot_time_reader()),
        process_count_zombie_processes=zombie_counter(),
    )


async def get_os_output() -> OsOutput:
    """Probe entry point for the poller."""
    return await asyncio.to_thread(collect_os_output)


__all__ = [
    "build_uptimes",
    "collect_os_output",
    "count_zombie_processes",
    "get_os_output",
    "read_host_id",
    "read_platform",
]
