"""Drain a process handle and join stream end with process exit."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from ..process_runner import Command, ProcessHandle

LinePredicate = Callable[[str], bool]


async def collect_lines(handle: "ProcessHandle", *, keep: Optional[LinePredicate] = None) -> List[str]:
    """
    Read every output line, then wait for the exit status.

    The subprocess is only considered finished once both the output stream has
    ended and the exit status has been observed. If the caller is cancelled or
    reading fails, the process group is terminated before the error propagates.

    Raises:
        ProcessExitError: the command exited non-zero
    """
    lines: List[str] = []
    finished = False
    try:
        async for line in handle.iter_lines():
            if keep is None or keep(line):
                lines.append(line)
        exit_error = await handle.wait()
        finished = True
    finally:
        if not finished:
            await handle.terminate()

    if exit_error is not None:
        raise exit_error
    return lines


async def run_and_collect(
    command: "Command",
    *,
    keep: Optional[LinePredicate] = None,
    timeout: Optional[float] = None,
    run_as_bash_script: bool = False,
) -> List[str]:
    """Start ``command`` and collect its output lines, optionally within ``timeout`` seconds."""
    from ..process_runner import start_process

    handle = await start_process(command, run_as_bash_script=run_as_bash_script)
    if timeout is None:
        return await collect_lines(handle, keep=keep)
    return await asyncio.wait_for(collect_lines(handle, keep=keep), timeout=timeout)
