"""
Scheduled polling engine.

One Poller owns one signal: it runs the signal's probe on a fixed cadence in a
background task, converts each result into health states, and caches the
outcome so readers never trigger or wait on a probe.

State per signal:
    idle -> polling -> idle (result cached) | idle-with-error (error cached)
    any  -> stopped (no further polls; reads keep returning the last entry)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from .health import HealthState
from .poller_helpers import PollerCache, PollerCacheEntry, PollWorker

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[Any]]
Converter = Callable[[Any], Sequence[HealthState]]

STOP_TIMEOUT_SECONDS = 2.0


def _error_state(name: str, error: BaseException, failure_count: int) -> HealthState:
    detail = str(error) or type(error).__name__
    return HealthState(
        name=name,
        healthy=False,
        reason=f"failed to poll {name}: {detail}",
        extra_info={
            "error": detail,
            "error_type": type(error).__name__,
            "failure_count": str(failure_count),
        },
    )


class Poller:
    """Polls one signal and caches its latest health states."""

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        probe: Probe,
        convert: Converter,
        *,
        probe_timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"poll interval for {name!r} must be positive (got {interval_seconds})")
        self.name = name
        self.interval_seconds = interval_seconds
        self.probe = probe
        self.convert = convert
        self.probe_timeout_seconds = probe_timeout_seconds or None
        self._clock = clock
        self._cache = PollerCache()
        self._shutdown_event = asyncio.Event()
        self._worker = PollWorker(name, interval_seconds, self.poll_now, self._shutdown_event)
        self._task: Optional[asyncio.Task[None]] = None
        self._in_flight = False
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def start(self) -> None:
        """Spawn the background poll loop; the first poll runs immediately."""
        if self._stopped:
            logger.warning("Poller %s is stopped and cannot be restarted", self.name)
            return
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._worker.run_poll_loop(), name=f"poller-{self.name}")
        logger.info("Started poller %s (interval: %ss)", self.name, self.interval_seconds)

    async def stop(self) -> None:
        """Stop polling for good. Cached results stay readable."""
        if self._stopped:
            return
        self._stopped = True
        self._shutdown_event.set()
        if self._task is None:
            return
        logger.info("Stopping poller %s", self.name)
        try:
            await asyncio.wait_for(self._task, timeout=STOP_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Poller %s did not finish its poll in time; cancelled", self.name)
        except asyncio.CancelledError:
            if self._task.cancelled():
                logger.debug("Poller %s task was already cancelled", self.name)
            else:
                raise
        logger.info("Poller %s stopped", self.name)

    async def poll_now(self) -> bool:
        """
        Run one poll immediately.

        Returns:
            False when a poll is already in flight or the poller is stopped
        """
        if self._stopped or self._in_flight:
            return False
        self._in_flight = True
        try:
            await self._poll()
        finally:
            self._in_flight = False
        return True

    def get_latest(self) -> Tuple[List[HealthState], bool]:
        """
        Return the cached states without waiting on any in-flight poll.

        The flag is False until a poll has succeeded. After a failed poll the
        list holds one unhealthy state describing the failure.
        """
        entry = self._cache.snapshot()
        return entry.states, entry.has_succeeded

    def last_entry(self) -> PollerCacheEntry:
        return self._cache.snapshot()

    async def _run_probe(self) -> Any:
        if self.probe_timeout_seconds is None:
            return await self.probe()
        return await asyncio.wait_for(self.probe(), timeout=self.probe_timeout_seconds)

    async def _poll(self) -> None:
        attempted_at = self._clock()
        try:
            output = await self._run_probe()
            states = list(self.convert(output))
        except asyncio.CancelledError as exc:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            self._record_failure(exc, attempted_at)
            return
        except Exception as exc:
            self._record_failure(exc, attempted_at)
            return
        self._cache.record_success(output, states, attempted_at)
        logger.debug("Polled %s: %d state(s)", self.name, len(states))

    def _record_failure(self, error: BaseException, attempted_at: float) -> None:
        failure_count = self._cache.failure_count() + 1
        entry = self._cache.record_failure(error, _error_state(self.name, error, failure_count), attempted_at)
        logger.warning(
            "Poll of %s failed (%d consecutive, %d total): %s",
            self.name,
            entry.consecutive_failures,
            entry.failure_count,
            error,
        )


__all__ = ["Converter", "Poller", "Probe", "STOP_TIMEOUT_SECONDS"]
