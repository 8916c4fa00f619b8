"""
SXid fault counters wired into the polling engine.

A KernelLogWatcher pushes classified SXid lines into a FaultTracker; the
tracker's snapshot is the probe of the ``error_sxid`` poller.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Mapping, Optional

import orjson

from ..config import AgentSettings
from ..errors import StateParseError
from ..health import HealthState, parse_int_field
from ..kernel_log import KernelLogWatcher, LineSource, command_line_source
from ..poller import Poller
from ..registry import PollerRegistry
from .classifier import SXID_MARKER, FaultClassifier, default_classifier
from .types import FaultRecord

logger = logging.getLogger(__name__)

NAME = "error_sxid"

STATE_KEY_COUNT = "count"
STATE_KEY_TOTAL_COUNT = "total_count"
STATE_KEY_FATAL_COUNT = "fatal_count"
STATE_KEY_REQUIRES_REBOOT = "requires_reboot"
STATE_KEY_DATA = "data"
STATE_KEY_ENCODING = "encoding"
STATE_VALUE_ENCODING_JSON = "json"


@dataclass(frozen=True)
class FaultSnapshot:
    records: List[FaultRecord]
    total_count: int


class FaultTracker:
    """Keeps the most recent SXid records and a lifetime count."""

    def __init__(self, max_records: int = 100) -> None:
        self._lock = threading.Lock()
        self._records: Deque[FaultRecord] = deque(maxlen=max_records)
        self._total_count = 0

    def add(self, record: FaultRecord) -> None:
        if not record.found_code():
            return
        with self._lock:
            self._records.append(record)
            self._total_count += 1
        if record.detail is not None and record.detail.fatal:
            logger.warning("Fatal SXid %s: %s", record.code, record.detail.name)
        else:
            logger.info("SXid %s observed", record.code)

    def snapshot(self) -> FaultSnapshot:
        with self._lock:
            return FaultSnapshot(records=list(self._records), total_count=self._total_count)

    async def probe(self) -> FaultSnapshot:
        return self.snapshot()


def snapshot_to_states(snapshot: FaultSnapshot) -> List[HealthState]:
    records = snapshot.records
    fatal = [record for record in records if record.detail is not None and record.detail.fatal]
    requires_reboot = any(record.detail is not None and record.detail.requires_reboot() for record in records)

    if not records:
        reason = "no sxid error found"
    else:
        reason = f"found {len(records)} sxid error(s) ({len(fatal)} fatal)"
    if requires_reboot:
        reason += "; reboot recommended"

    return [
        HealthState(
            name=NAME,
            healthy=not fatal and not requires_reboot,
            reason=reason,
            extra_info={
                STATE_KEY_COUNT: str(len(records)),
                STATE_KEY_TOTAL_COUNT: str(snapshot.total_count),
                STATE_KEY_FATAL_COUNT: str(len(fatal)),
                STATE_KEY_REQUIRES_REBOOT: "true" if requires_reboot else "false",
                STATE_KEY_DATA: orjson.dumps([record.to_payload() for record in records]).decode("utf-8"),
                STATE_KEY_ENCODING: STATE_VALUE_ENCODING_JSON,
            },
        )
    ]


def parse_state_records(extra_info: Mapping[str, str]) -> List[FaultRecord]:
    """Decode the retained records of an ``error_sxid`` state; missing data means none."""
    raw = extra_info.get(STATE_KEY_DATA)
    if not raw:
        return []
    encoding = extra_info.get(STATE_KEY_ENCODING, STATE_VALUE_ENCODING_JSON)
    if encoding != STATE_VALUE_ENCODING_JSON:
        raise StateParseError(f"unsupported sxid data encoding {encoding!r}", key=STATE_KEY_ENCODING)
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise StateParseError("sxid data is not valid JSON", key=STATE_KEY_DATA) from exc
    if not isinstance(payload, list):
        raise StateParseError("sxid data must be a JSON array", key=STATE_KEY_DATA)
    return [FaultRecord.from_payload(item) for item in payload]


def parse_state_total_count(extra_info: Mapping[str, str]) -> int:
    return parse_int_field(extra_info, STATE_KEY_TOTAL_COUNT, default=0) or 0


def is_sxid_line(line: str) -> bool:
    return SXID_MARKER in line


class SxidComponent:
    """The SXid poller together with the watcher that feeds it."""

    def __init__(self, poller: Poller, tracker: FaultTracker, watcher: KernelLogWatcher) -> None:
        self.poller = poller
        self.tracker = tracker
        self.watcher = watcher

    async def start(self) -> None:
        await self.watcher.start()
        await self.poller.start()

    async def stop(self) -> None:
        await self.watcher.stop()
        await self.poller.stop()


def register_sxid_component(
    registry: PollerRegistry,
    settings: AgentSettings,
    *,
    source: Optional[LineSource] = None,
    classifier: Optional[FaultClassifier] = None,
) -> SxidComponent:
    tracker = FaultTracker(max_records=settings.sxid_retained_records)
    watcher = KernelLogWatcher(
        source if source is not None else command_line_source(settings.dmesg_command),
        classifier if classifier is not None else default_classifier(),
        tracker.add,
        line_filter=is_sxid_line,
        restart_delay_seconds=settings.kernel_log_restart_delay_seconds,
    )
    poller = registry.register(
        NAME,
        settings.poll_interval_seconds,
        tracker.probe,
        snapshot_to_states,
        probe_timeout_seconds=settings.probe_timeout_seconds,
    )
    return SxidComponent(poller, tracker, watcher)


__all__ = [
    "FaultSnapshot",
    "FaultTracker",
    "NAME",
    "SxidComponent",
    "is_sxid_line",
    "parse_state_records",
    "parse_state_total_count",
    "register_sxid_component",
    "snapshot_to_states",
]
