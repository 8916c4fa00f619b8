"""
System reboot.

The reboot runs as a shell script through the process runner. A delayed
reboot is a separate task racing the delay against cancellation; when
cancellation wins nothing is executed.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional

from .errors import NotRootError
from .process_runner import start_process
from .process_runner_helpers import collect_lines

logger = logging.getLogger(__name__)

REBOOT_COMMAND = "sudo reboot"
SYSTEMCTL_REBOOT_COMMAND = "sudo systemctl reboot"


def _is_root() -> bool:
    return os.geteuid() == 0


async def _run_reboot(command: str) -> None:
    handle = await start_process(command, run_as_bash_script=True, merge_stderr=True)
    for line in await collect_lines(handle):
        logger.info("stdout: %s", line)
    # only reached if the reboot did not take the host down
    logger.info("successfully rebooted (command: %s)", command)


async def _delayed_reboot(command: str, delay_seconds: float, cancel_event: Optional[asyncio.Event]) -> bool:
    try:
        if cancel_event is None:
            await asyncio.sleep(delay_seconds)
        else:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay_seconds)
            logger.warning("reboot cancelled before delay expired (command: %s)", command)
            return False
    except asyncio.TimeoutError:
        pass
    except asyncio.CancelledError:
        logger.warning("aborting reboot (command: %s)", command)
        raise

    logger.info("delay expired, rebooting now (command: %s)", command)
    await _run_reboot(command)
    return True


async def reboot(
    *,
    delay_seconds: float = 0,
    use_systemctl: bool = False,
    cancel_event: Optional[asyncio.Event] = None,
) -> Optional[asyncio.Task[bool]]:
    """
    Reboot the host.

    Args:
        delay_seconds: wait this long first; the reboot then runs in a background task
        use_systemctl: run ``systemctl reboot`` instead of ``reboot``
        cancel_event: setting it before the delay expires aborts the reboot

    Returns:
        The scheduled task for a delayed reboot, None for an immediate one

    Raises:
        NotRootError: not running as root; never retried
    """
    if not _is_root():
        raise NotRootError("reboot")

    command = SYSTEMCTL_REBOOT_COMMAND if use_systemctl else REBOOT_COMMAND

    if delay_seconds <= 0:
        logger.info("rebooting immediately (command: %s)", command)
        await _run_reboot(command)
        return None

    task = asyncio.create_task(_delayed_reboot(command, delay_seconds, cancel_event), name="delayed-reboot")
    logger.info("triggering reboot after %ss delay (command: %s)", delay_seconds, command)
    return task


__all__ = ["REBOOT_COMMAND", "SYSTEMCTL_REBOOT_COMMAND", "reboot"]
