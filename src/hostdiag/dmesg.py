"""
Timestamp recovery for kernel log lines.

Supported prefixes:
- ``[131453.740743] ...``                seconds since boot (needs boot time)
- ``[Mon Jan  6 18:11:33 2025] ...``     ``dmesg --ctime``, local time
- ``2025-01-06T18:11:33,123456+00:00 ``  ``dmesg --time-format iso``
- ``Jan  6 18:11:33 host kernel: ...``   syslog, local time, year inferred
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

_MONOTONIC_RE = re.compile(r"^\[\s*(\d+\.\d+)\]")
_CTIME_RE = re.compile(r"^\[([A-Z][a-z]{2} [A-Z][a-z]{2} +\d{1,2} \d{2}:\d{2}:\d{2} \d{4})\]")
_ISO_RE = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:[,.]\d+)?(?:Z|[+-]\d{2}:?\d{2}))")
_SYSLOG_RE = re.compile(r"^([A-Z][a-z]{2} +\d{1,2} \d{2}:\d{2}:\d{2})\s")

_CTIME_FORMAT = "%a %b %d %H:%M:%S %Y"
_SYSLOG_FORMAT = "%Y %b %d %H:%M:%S"

# syslog lines carry no year; anything this far in the future belongs to last year
_SYSLOG_FUTURE_TOLERANCE = timedelta(days=1)


def _local_to_utc(naive: datetime) -> datetime:
    return naive.astimezone(timezone.utc)


def parse_ctime(line: str) -> Optional[datetime]:
    match = _CTIME_RE.match(line)
    if match is None:
        return None
    normalized = " ".join(match.group(1).split())
    return _local_to_utc(datetime.strptime(normalized, _CTIME_FORMAT))


def parse_monotonic(line: str, boot_time: Optional[float]) -> Optional[datetime]:
    if boot_time is None:
        return None
    match = _MONOTONIC_RE.match(line)
    if match is None:
        return None
    return datetime.fromtimestamp(boot_time + float(match.group(1)), tz=timezone.utc)


def parse_iso(line: str) -> Optional[datetime]:
    match = _ISO_RE.match(line)
    if match is None:
        return None
    return datetime.fromisoformat(match.group(1).replace(",", ".")).astimezone(timezone.utc)


def parse_syslog(line: str, now: datetime) -> Optional[datetime]:
    match = _SYSLOG_RE.match(line)
    if match is None:
        return None
    normalized = " ".join(match.group(1).split())
    local_now = now.astimezone()
    parsed = _local_to_utc(datetime.strptime(f"{local_now.year} {normalized}", _SYSLOG_FORMAT))
    if parsed - now > _SYSLOG_FUTURE_TOLERANCE:
        parsed = _local_to_utc(datetime.strptime(f"{local_now.year - 1} {normalized}", _SYSLOG_FORMAT))
    return parsed


def parse_timestamp(line: str, *, boot_time: Optional[float] = None, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Return the UTC event time encoded at the start of ``line``.

    Returns None when no supported prefix is present or the prefix does not
    describe a real calendar time.
    """
    try:
        for parsed in (parse_ctime(line), parse_iso(line), parse_monotonic(line, boot_time)):
            if parsed is not None:
                return parsed
        return parse_syslog(line, now or datetime.now(timezone.utc))
    except (ValueError, OverflowError, OSError) as exc:
        logger.debug("Unparseable kernel log timestamp in %r: %s", line[:64], exc)
        return None


__all__ = ["parse_ctime", "parse_iso", "parse_monotonic", "parse_syslog", "parse_timestamp"]
