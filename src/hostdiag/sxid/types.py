"""
Fault record types and their transport encodings.

Wire shape, shared by the JSON and YAML encodings::

    {"detail": {...} | null,
     "log_item": {"line": str, "matched": str | null, "time": RFC 3339 UTC}}
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

import orjson
import yaml

from ..errors import StateParseError
from ..repair_actions import SuggestedActions


class Severity(str, Enum):
    FATAL = "fatal"
    NON_FATAL = "non-fatal"


@dataclass(frozen=True)
class Detail:
    """Catalog entry for one fault code."""

    code: int
    name: str
    description: str
    severity: Severity
    critical_error: bool = False
    suggested_actions: Optional[SuggestedActions] = None

    @property
    def fatal(self) -> bool:
        return self.severity is Severity.FATAL

    def requires_reboot(self) -> bool:
        return self.suggested_actions is not None and self.suggested_actions.requires_reboot()

    def to_payload(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "severity": self.severity.value,
            "critical_error": self.critical_error,
            "suggested_actions": self.suggested_actions.to_payload() if self.suggested_actions else None,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Detail":
        try:
            return cls(
                code=int(payload["code"]),
                name=str(payload["name"]),
                description=str(payload.get("description") or ""),
                severity=Severity(payload["severity"]),
                critical_error=bool(payload.get("critical_error", False)),
                suggested_actions=SuggestedActions.from_payload(payload.get("suggested_actions")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StateParseError(f"invalid fault detail payload: {exc}") from exc


def format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_time(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class LogItem:
    line: str
    matched: Optional[str]
    time: datetime


@dataclass(frozen=True)
class FaultRecord:
    """One classified kernel log line."""

    log_item: LogItem
    detail: Optional[Detail] = None

    @property
    def source_line(self) -> str:
        return self.log_item.line

    @property
    def matched_pattern_group(self) -> str:
        return self.log_item.matched or ""

    @property
    def timestamp(self) -> datetime:
        return self.log_item.time

    @property
    def code(self) -> int:
        """The extracted fault code; 0 when the line carried none."""
        if not self.log_item.matched:
            return 0
        return int(self.log_item.matched)

    def found_code(self) -> bool:
        """True when the line carried a code, including an explicit 0."""
        return self.log_item.matched is not None

    def is_cataloged(self) -> bool:
        return self.detail is not None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "detail": self.detail.to_payload() if self.detail else None,
            "log_item": {
                "line": self.log_item.line,
                "matched": self.log_item.matched,
                "time": format_time(self.log_item.time),
            },
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FaultRecord":
        if not isinstance(payload, Mapping):
            raise StateParseError("fault record payload must be an object")
        item = payload.get("log_item")
        if not isinstance(item, Mapping):
            raise StateParseError("fault record payload has no log_item", key="log_item")
        try:
            log_item = LogItem(
                line=str(item["line"]),
                matched=None if item.get("matched") is None else str(item["matched"]),
                time=parse_time(item["time"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StateParseError(f"invalid log_item payload: {exc}", key="log_item") from exc
        raw_detail = payload.get("detail")
        detail = Detail.from_payload(raw_detail) if raw_detail is not None else None
        return cls(log_item=log_item, detail=detail)

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_payload())

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "FaultRecord":
        try:
            payload = orjson.loads(data)
        except orjson.JSONDecodeError as exc:
            raise StateParseError("fault record payload is not valid JSON") from exc
        return cls.from_payload(payload)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_payload(), sort_keys=False, allow_unicode=True)

    @classmethod
    def from_yaml(cls, data: Union[str, bytes]) -> "FaultRecord":
        try:
            payload = yaml.safe_load(data)
        except yaml.YAMLError as exc:
            raise StateParseError("fault record payload is not valid YAML") from exc
        return cls.from_payload(payload)


__all__ = ["Detail", "FaultRecord", "LogItem", "Severity", "format_time", "parse_time"]
