"""Suggested repair actions attached to catalog entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


class RepairActionType(str, Enum):
    """Remediation tags; the agent reports them and never acts on them itself."""

    IGNORE_NO_ACTION_REQUIRED = "IGNORE_NO_ACTION_REQUIRED"
    REBOOT_SYSTEM = "REBOOT_SYSTEM"
    REPAIR_HARDWARE = "REPAIR_HARDWARE"
    CHECK_USER_APP_AND_GPU = "CHECK_USER_APP_AND_GPU"


def _dedupe(values: Iterable[Any]) -> Tuple[Any, ...]:
    seen = set()
    ordered = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return tuple(ordered)


@dataclass(frozen=True, eq=False)
class SuggestedActions:
    """
    A set of repair actions plus free-form descriptions.

    Equality ignores ordering; iteration and display keep insertion order.
    """

    repair_actions: Tuple[RepairActionType, ...] = ()
    descriptions: Tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        actions = _dedupe(RepairActionType(action) for action in self.repair_actions)
        object.__setattr__(self, "repair_actions", actions)
        object.__setattr__(self, "descriptions", tuple(self.descriptions))

    def requires_reboot(self) -> bool:
        return RepairActionType.REBOOT_SYSTEM in self.repair_actions

    def __contains__(self, action: object) -> bool:
        return action in self.repair_actions

    def __iter__(self):
        return iter(self.repair_actions)

    def __len__(self) -> int:
        return len(self.repair_actions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SuggestedActions):
            return NotImplemented
        return frozenset(self.repair_actions) == frozenset(other.repair_actions) and frozenset(
            self.descriptions
        ) == frozenset(other.descriptions)

    def __hash__(self) -> int:
        return hash((frozenset(self.repair_actions), frozenset(self.descriptions)))

    def __str__(self) -> str:
        return ", ".join(action.value for action in self.repair_actions)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "descriptions": list(self.descriptions),
            "repair_actions": [action.value for action in self.repair_actions],
        }

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> Optional["SuggestedActions"]:
        if payload is None:
            return None
        return cls(
            repair_actions=tuple(payload.get("repair_actions") or ()),
            descriptions=tuple(payload.get("descriptions") or ()),
        )


__all__ = ["RepairActionType", "SuggestedActions"]
