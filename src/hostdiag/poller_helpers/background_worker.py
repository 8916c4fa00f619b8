"""Background polling loop."""

import asyncio
import logging
import math
from typing import Awaitable, Callable, Tuple

logger = logging.getLogger(__name__)


def advance_deadline(previous_deadline: float, now: float, interval_seconds: float) -> Tuple[float, int]:
    """
    Return the next tick deadline and how many ticks were missed.

    Ticks that passed while a poll was still running are dropped, not queued.
    """
    next_deadline = previous_deadline + interval_seconds
    if next_deadline > now:
        return next_deadline, 0
    missed = math.floor((now - next_deadline) / interval_seconds) + 1
    return next_deadline + missed * interval_seconds, missed


class PollWorker:
    """Runs one poll per tick until the shutdown event is set."""

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        poll: Callable[[], Awaitable[bool]],
        shutdown_event: asyncio.Event,
    ):
        self.name = name
        self.interval_seconds = interval_seconds
        self.poll = poll
        self.shutdown_event = shutdown_event

    async def run_poll_loop(self) -> None:
        logger.debug("Poll loop for %s started", self.name)
        loop = asyncio.get_running_loop()
        deadline = loop.time()

        while not self.shutdown_event.is_set():
            await self.poll()

            deadline, missed = advance_deadline(deadline, loop.time(), self.interval_seconds)
            if missed:
                logger.debug("Poll of %s overran its interval; skipped %d tick(s)", self.name, missed)

            # Wait for next tick or shutdown signal
            try:
                await asyncio.wait_for(self.shutdown_event.wait(), timeout=max(deadline - loop.time(), 0.0))
                break
            except asyncio.TimeoutError:
                continue

        logger.debug("Poll loop for %s stopped", self.name)
