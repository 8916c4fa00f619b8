"""
Health state model and its two codecs.

A health state is "named signal -> healthy flag + reason + string detail".
It serialises to a flat string-keyed map for persistence and to JSON bytes
for transport. Numeric detail is stored as decimal text; the typed field
parsers below turn it back into numbers and ignore keys they do not know.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import orjson

from ..errors import StateParseError

JsonLike = Union[str, bytes, Dict[str, Any]]

EXTRA_INFO_PREFIX = "extra_info."
_KEY_NAME = "name"
_KEY_HEALTHY = "healthy"
_KEY_REASON = "reason"
_TRUE_TEXT = "true"
_FALSE_TEXT = "false"


@dataclass(frozen=True)
class HealthState:
    """Pass/fail plus detail for one signal."""

    name: str
    healthy: bool
    reason: str = ""
    extra_info: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.healthy and not self.reason:
            raise ValueError(f"unhealthy state {self.name!r} requires a reason")
        for key, value in self.extra_info.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(f"extra_info of {self.name!r} must map str to str (got {key!r}: {value!r})")

    def to_map(self) -> Dict[str, str]:
        """Flatten into a single string-keyed map."""
        flat = {
            _KEY_NAME: self.name,
            _KEY_HEALTHY: _TRUE_TEXT if self.healthy else _FALSE_TEXT,
            _KEY_REASON: self.reason,
        }
        for key, value in self.extra_info.items():
            flat[EXTRA_INFO_PREFIX + key] = value
        return flat

    @classmethod
    def from_map(cls, flat: Mapping[str, str]) -> "HealthState":
        """Rebuild a state from :meth:`to_map` output; unknown top-level keys are ignored."""
        if _KEY_NAME not in flat:
            raise StateParseError("health state map has no name", key=_KEY_NAME)
        extra_info = {
            key[len(EXTRA_INFO_PREFIX) :]: value for key, value in flat.items() if key.startswith(EXTRA_INFO_PREFIX)
        }
        healthy = parse_bool_field(flat, _KEY_HEALTHY)
        return _build(flat[_KEY_NAME], healthy, flat.get(_KEY_REASON, ""), extra_info)

    def to_payload(self) -> Dict[str, Any]:
        return {
            _KEY_NAME: self.name,
            _KEY_HEALTHY: self.healthy,
            _KEY_REASON: self.reason,
            "extra_info": dict(self.extra_info),
        }

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_payload())

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "HealthState":
        if not isinstance(payload, Mapping):
            raise StateParseError("health state payload must be a JSON object")
        name = payload.get(_KEY_NAME)
        if not isinstance(name, str):
            raise StateParseError("health state payload has no string name", key=_KEY_NAME)
        healthy = payload.get(_KEY_HEALTHY)
        if not isinstance(healthy, bool):
            raise StateParseError(f"health state {name!r} has non-boolean healthy flag", key=_KEY_HEALTHY)
        reason = payload.get(_KEY_REASON) or ""
        extra_info = payload.get("extra_info")
        if extra_info is None:
            extra_info = {}
        if not isinstance(extra_info, dict):
            raise StateParseError(f"health state {name!r} has non-object extra_info", key="extra_info")
        return _build(name, healthy, reason, extra_info)

    @classmethod
    def from_json(cls, payload: JsonLike) -> "HealthState":
        return cls.from_payload(_ensure_mapping(payload))


def _build(name: str, healthy: bool, reason: Any, extra_info: Mapping[Any, Any]) -> HealthState:
    try:
        return HealthState(name=name, healthy=healthy, reason=str(reason), extra_info=dict(extra_info))
    except (TypeError, ValueError) as exc:
        raise StateParseError(str(exc)) from exc


def _ensure_mapping(payload: JsonLike) -> Any:
    match payload:
        case dict():
            return payload
        case bytes():
            try:
                text_payload = payload.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise StateParseError("health state payload is not valid UTF-8") from exc
        case str():
            text_payload = payload
        case _:
            raise TypeError(f"Unsupported payload type: {type(payload)!r}")

    try:
        return orjson.loads(text_payload)
    except orjson.JSONDecodeError as exc:
        raise StateParseError("health state payload is not valid JSON") from exc


def states_to_json(states: Iterable[HealthState]) -> bytes:
    return orjson.dumps([state.to_payload() for state in states])


def states_from_json(payload: Union[str, bytes]) -> List[HealthState]:
    decoded = _ensure_mapping(payload)
    if not isinstance(decoded, list):
        raise StateParseError("health state list payload must be a JSON array")
    states = []
    for item in decoded:
        if not isinstance(item, dict):
            raise StateParseError("health state list entries must be JSON objects")
        states.append(HealthState.from_payload(item))
    return states


def parse_int_field(extra_info: Mapping[str, str], key: str, *, default: Optional[int] = None) -> Optional[int]:
    """Read a decimal integer field; a missing key yields ``default``."""
    raw = extra_info.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise StateParseError(f"field {key!r} is not an integer: {raw!r}", key=key) from exc


def parse_bool_field(extra_info: Mapping[str, str], key: str, *, default: Optional[bool] = None) -> bool:
    raw = extra_info.get(key)
    if raw is None:
        if default is None:
            raise StateParseError(f"field {key!r} is missing", key=key)
        return default
    lowered = raw.strip().lower()
    if lowered == _TRUE_TEXT:
        return True
    if lowered == _FALSE_TEXT:
        return False
    raise StateParseError(f"field {key!r} is not a boolean: {raw!r}", key=key)


__all__ = [
    "EXTRA_INFO_PREFIX",
    "HealthState",
    "parse_bool_field",
    "parse_int_field",
    "states_from_json",
    "states_to_json",
]
