"""Explicit owner of every poller in the process."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Dict, List, Optional, Tuple

from .errors import PollerAlreadyRegisteredError
from .health import HealthState
from .poller import Converter, Poller, Probe

logger = logging.getLogger(__name__)


class PollerRegistry:
    """
    Holds exactly one poller per signal name.

    Built once during start-up and handed to whatever needs to read states.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pollers: Dict[str, Poller] = {}

    def register(
        self,
        name: str,
        interval_seconds: float,
        probe: Probe,
        convert: Converter,
        *,
        probe_timeout_seconds: Optional[float] = None,
    ) -> Poller:
        """
        Create the poller for ``name``, or return the existing one.

        Raises:
            PollerAlreadyRegisteredError: ``name`` is registered with a different probe
        """
        with self._lock:
            existing = self._pollers.get(name)
            if existing is not None:
                if existing.probe == probe:
                    logger.debug("Poller %s already registered; reusing it", name)
                    return existing
                raise PollerAlreadyRegisteredError(name)
            poller = Poller(
                name,
                interval_seconds,
                probe,
                convert,
                probe_timeout_seconds=probe_timeout_seconds,
            )
            self._pollers[name] = poller
            return poller

    def get(self, name: str) -> Optional[Poller]:
        with self._lock:
            return self._pollers.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._pollers)

    def _all(self) -> List[Poller]:
        with self._lock:
            return list(self._pollers.values())

    async def start_all(self) -> None:
        for poller in self._all():
            await poller.start()

    async def stop_all(self) -> None:
        await asyncio.gather(*(poller.stop() for poller in self._all()))

    def get_all_states(self) -> Dict[str, Tuple[List[HealthState], bool]]:
        return {poller.name: poller.get_latest() for poller in self._all()}


__all__ = ["PollerRegistry"]
