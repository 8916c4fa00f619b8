"""Result cache for a single poller."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional

from ..health import HealthState


@dataclass(frozen=True)
class PollerCacheEntry:
    """Outcome of the most recent poll plus failure bookkeeping."""

    states: List[HealthState] = field(default_factory=list)
    output: Any = None
    error: Optional[BaseException] = None
    last_attempt: Optional[float] = None
    last_success: Optional[float] = None
    failure_count: int = 0
    consecutive_failures: int = 0

    @property
    def has_succeeded(self) -> bool:
        return self.last_success is not None


class PollerCache:
    """
    Lock-protected cache entry.

    Writers replace the entry under the lock; readers copy it out under the
    lock, so a reader never waits on a probe.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entry = PollerCacheEntry()

    def snapshot(self) -> PollerCacheEntry:
        with self._lock:
            entry = self._entry
        return replace(entry, states=list(entry.states))

    def record_success(self, output: Any, states: List[HealthState], timestamp: float) -> None:
        with self._lock:
            self._entry = replace(
                self._entry,
                states=list(states),
                output=output,
                error=None,
                last_attempt=timestamp,
                last_success=timestamp,
                consecutive_failures=0,
            )

    def record_failure(self, error: BaseException, state: HealthState, timestamp: float) -> PollerCacheEntry:
        with self._lock:
            self._entry = replace(
                self._entry,
                states=[state],
                output=None,
                error=error,
                last_attempt=timestamp,
                failure_count=self._entry.failure_count + 1,
                consecutive_failures=self._entry.consecutive_failures + 1,
            )
            return self._entry

    def failure_count(self) -> int:
        with self._lock:
            return self._entry.failure_count
