"""
Kernel log follower.

Reads a live line source (by default a ``dmesg --follow`` subprocess),
classifies each relevant line, and hands the record to a callback. The
source is restarted after a fixed delay whenever it ends, until stopped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncGenerator, Callable, Optional, Sequence

from .errors import ProcessStartError
from .process_runner import locate_executable, start_process
from .sxid.classifier import FaultClassifier
from .sxid.types import FaultRecord

logger = logging.getLogger(__name__)

LineSource = Callable[[], AsyncGenerator[str, None]]
RecordCallback = Callable[[FaultRecord], None]
LineFilter = Callable[[str], bool]


def command_line_source(command: Sequence[str]) -> LineSource:
    """
    Build a line source that follows ``command``'s stdout.

    A command that is not installed yields no lines.
    """
    argv = list(command)

    async def _lines() -> AsyncGenerator[str, None]:
        if locate_executable(argv[0]) is None:
            logger.warning("%s not found; kernel log source yields no data", argv[0])
            return
        handle = await start_process(argv)
        try:
            async for line in handle.iter_lines():
                yield line
            exit_error = await handle.wait()
            if exit_error is not None:
                logger.warning("Kernel log source stopped: %s", exit_error)
        finally:
            if not handle.exited:
                await handle.terminate()

    return _lines


class KernelLogWatcher:
    """Follows a kernel log source and classifies matching lines."""

    def __init__(
        self,
        source: LineSource,
        classifier: FaultClassifier,
        on_record: RecordCallback,
        *,
        line_filter: Optional[LineFilter] = None,
        restart_delay_seconds: float = 5.0,
    ) -> None:
        self.source = source
        self.classifier = classifier
        self.on_record = on_record
        self.line_filter = line_filter
        self.restart_delay_seconds = restart_delay_seconds
        self._shutdown_event = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None
        self.lines_seen = 0

    async def start(self) -> None:
        if self._task is not None:
            return
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self.run(), name="kernel-log-watcher")
        logger.info("Started kernel log watcher")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._shutdown_event.set()
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Kernel log watcher stopped")

    async def run(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                await self.consume(self.source())
            except (OSError, ProcessStartError, ValueError) as exc:
                logger.warning("Kernel log source failed: %s", exc)
            except Exception:
                logger.exception("Kernel log watcher failed; restarting source")

            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=self.restart_delay_seconds)
                break
            except asyncio.TimeoutError:
                logger.debug("Restarting kernel log source")

    async def consume(self, lines: AsyncGenerator[str, None]) -> int:
        """
        Classify every matching line from ``lines``; returns how many were classified.

        ``lines`` is closed on exit, including cancellation. A record the
        callback fails on is logged and skipped.
        """
        classified = 0
        async with contextlib.aclosing(lines):
            async for line in lines:
                self.lines_seen += 1
                if self.line_filter is not None and not self.line_filter(line):
                    continue
                record = self.classifier.classify(line)
                try:
                    self.on_record(record)
                except Exception:
                    logger.exception("Failed to handle kernel log record: %r", line[:120])
                    continue
                classified += 1
        return classified


__all__ = ["KernelLogWatcher", "LineSource", "command_line_source"]
