"""
Kernel log line classification for NVSwitch SXid errors.

e.g.,
[111111111.111] nvidia-nvswitch3: SXid (PCI:0000:05:00.0): 12028, Non-fatal, Link 32 egress non-posted PRIV error (First)
[131453.740743] nvidia-nvswitch0: SXid (PCI:0000:00:00.0): 20034, Fatal, Link 30 LTSSM Fault Up
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Mapping, Optional

import psutil

from ..dmesg import parse_timestamp
from .catalog import CATALOG
from .types import Detail, FaultRecord, LogItem

logger = logging.getLogger(__name__)

SXID_MARKER = "SXid"
SXID_PATTERN = re.compile(r"SXid.*?: (\d+),")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def extract_sxid(line: str) -> Optional[str]:
    """Return the captured SXid code text, or None when the line has none."""
    match = SXID_PATTERN.search(line)
    if match is None:
        return None
    return match.group(1)


def extract_sxid_code(line: str) -> int:
    """Return the SXid code in ``line``; 0 when not found."""
    matched = extract_sxid(line)
    if matched is None:
        return 0
    return int(matched)


@lru_cache(maxsize=1)
def host_boot_time() -> Optional[float]:
    try:
        return psutil.boot_time()
    except (OSError, psutil.Error) as exc:
        logger.warning("Host boot time unavailable; monotonic kernel timestamps will not be resolved: %s", exc)
        return None


class FaultClassifier:
    """
    Turns a kernel log line into a FaultRecord. Never raises.

    A line without a code yields matched=None and no detail. A code missing
    from the catalog yields the matched code and no detail.
    """

    def __init__(
        self,
        catalog: Mapping[int, Detail] = CATALOG,
        *,
        boot_time: Optional[float] = None,
        clock: Clock = _utc_now,
    ) -> None:
        self.catalog = catalog
        self.boot_time = boot_time
        self._clock = clock

    def classify(self, line: str) -> FaultRecord:
        observed_at = self._clock()
        timestamp = parse_timestamp(line, boot_time=self.boot_time, now=observed_at)
        if timestamp is None:
            timestamp = observed_at

        matched = extract_sxid(line)
        detail = None
        if matched is not None:
            detail = self.catalog.get(int(matched))
            if detail is None:
                logger.debug("SXid %s is not in the catalog", matched)

        return FaultRecord(log_item=LogItem(line=line, matched=matched, time=timestamp), detail=detail)


@lru_cache(maxsize=1)
def default_classifier() -> FaultClassifier:
    return FaultClassifier(boot_time=host_boot_time())


def classify(line: str) -> FaultRecord:
    return default_classifier().classify(line)


__all__ = [
    "FaultClassifier",
    "SXID_MARKER",
    "SXID_PATTERN",
    "classify",
    "default_classifier",
    "extract_sxid",
    "extract_sxid_code",
    "host_boot_time",
]
