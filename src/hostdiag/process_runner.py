"""
Supervised execution of external diagnostic commands.

A started command is wrapped in a ProcessHandle which:
1. Streams standard output line by line from the moment it starts
2. Reaps the process in a background task so the exit status is observed
   exactly once, whether or not anyone is still reading output
3. Marks itself exited so a read failing on an already-closed pipe is
   reported as end of stream instead of an error
4. Terminates the whole process group when the caller gives up
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
import signal
from typing import AsyncIterator, Optional, Sequence, Union

from .errors import ProcessExitError, ProcessStartError
from .process_runner_helpers.script_file import remove_script, write_bash_script

logger = logging.getLogger(__name__)

Command = Union[str, Sequence[str]]

# Process termination timeouts (seconds)
GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS = 3.0
FORCE_KILL_TIMEOUT_SECONDS = 2.0

# Diagnostic tools can emit very long lines (e.g. full PCI dumps)
DEFAULT_STREAM_LIMIT = 1024 * 1024


def locate_executable(name: str) -> Optional[str]:
    """Return the absolute path of ``name`` on PATH, or None when not installed."""
    return shutil.which(name)


class ProcessHandle:
    """One running external command."""

    def __init__(
        self,
        command: Command,
        process: asyncio.subprocess.Process,
        *,
        script_path: Optional[str] = None,
    ) -> None:
        self.command = command
        self._process = process
        self._script_path = script_path
        self._exited = False
        self._exit_task: asyncio.Task[Optional[ProcessExitError]] = asyncio.create_task(
            self._reap(), name=f"reap-{process.pid}"
        )

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode

    @property
    def exited(self) -> bool:
        """True once the process has been reaped."""
        return self._exited

    @property
    def stdout(self) -> asyncio.StreamReader:
        if self._process.stdout is None:
            raise RuntimeError(f"stdout of {self.command!r} is not piped")
        return self._process.stdout

    async def _reap(self) -> Optional[ProcessExitError]:
        try:
            returncode = await self._process.wait()
        finally:
            self._exited = True
            if self._script_path is not None:
                remove_script(self._script_path)
        logger.debug("Process %s (%s) exited with %s", self.pid, self.command, returncode)
        if returncode != 0:
            return ProcessExitError(self.command, returncode)
        return None

    async def wait(self) -> Optional[ProcessExitError]:
        """Wait for exit; returns the exit error, or None on success.

        Cancelling the waiter does not cancel the reaper.
        """
        return await asyncio.shield(self._exit_task)

    async def read_line(self) -> Optional[str]:
        """Return the next output line without its newline, or None at end of stream."""
        try:
            raw = await self.stdout.readline()
        except OSError as exc:
            if self._exited:
                logger.debug("Output pipe of %s closed after exit: %s", self.pid, exc)
                return None
            raise
        if not raw:
            return None
        return raw.decode("utf-8", errors="replace").rstrip("\r\n")

    async def iter_lines(self) -> AsyncIterator[str]:
        while True:
            line = await self.read_line()
            if line is None:
                return
            yield line

    async def terminate(self, grace_seconds: float = GRACEFUL_SHUTDOWN_TIMEOUT_SECONDS) -> None:
        """Signal the process group to stop and wait until it has been reaped."""
        if self._process.returncode is None:
            self._signal(signal.SIGTERM)
            try:
                await asyncio.wait_for(asyncio.shield(self._exit_task), timeout=grace_seconds)
                return
            except asyncio.TimeoutError:
                logger.warning("Process %s ignored SIGTERM; killing", self.pid)
                self._signal(signal.SIGKILL)
        try:
            await asyncio.wait_for(asyncio.shield(self._exit_task), timeout=FORCE_KILL_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.error("Process %s did not exit after SIGKILL", self.pid)

    def _signal(self, signum: int) -> None:
        try:
            os.killpg(self._process.pid, signum)
        except ProcessLookupError:
            logger.debug("Process group %s already gone", self.pid)
        except PermissionError:
            self._process.send_signal(signum)


def _build_argv(command: Command) -> list[str]:
    if isinstance(command, str):
        argv = shlex.split(command)
    else:
        argv = list(command)
    if not argv:
        raise ProcessStartError(command, "empty command")
    return argv


async def start_process(
    command: Command,
    *,
    run_as_bash_script: bool = False,
    merge_stderr: bool = False,
    limit: int = DEFAULT_STREAM_LIMIT,
) -> ProcessHandle:
    """
    Launch ``command`` with the agent's working directory and environment.

    Args:
        command: argv sequence, or a string split with shell rules
        run_as_bash_script: write ``command`` to a temporary script and run it with bash
        merge_stderr: send stderr into the stdout stream instead of inheriting it
        limit: maximum length of one output line

    Raises:
        ProcessStartError: the executable could not be launched
    """
    script_path: Optional[str] = None
    if run_as_bash_script:
        if not isinstance(command, str):
            command = shlex.join(command)
        script_path = write_bash_script(command)
        argv = ["bash", script_path]
    else:
        argv = _build_argv(command)

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT if merge_stderr else None,
            limit=limit,
            start_new_session=True,
        )
    except OSError as exc:
        if script_path is not None:
            remove_script(script_path)
        raise ProcessStartError(command, str(exc)) from exc

    logger.debug("Started %s (pid %s)", command, process.pid)
    return ProcessHandle(command, process, script_path=script_path)


__all__ = [
    "Command",
    "DEFAULT_STREAM_LIMIT",
    "ProcessHandle",
    "locate_executable",
    "start_process",
]
