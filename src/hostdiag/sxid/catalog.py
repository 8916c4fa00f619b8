"""
NVSwitch SXid catalog.

Codes and wording follow the "NVSwitch SXid errors" appendix of the NVIDIA
Fabric Manager user guide. The mapping is built at import time and is
read-only afterwards.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from ..repair_actions import RepairActionType, SuggestedActions
from .types import Detail, Severity

_IGNORE = SuggestedActions(repair_actions=(RepairActionType.IGNORE_NO_ACTION_REQUIRED,))
_REBOOT = SuggestedActions(
    repair_actions=(RepairActionType.REBOOT_SYSTEM,),
    descriptions=("Reset the NVSwitch and its GPUs by rebooting the system.",),
)
_REBOOT_THEN_REPAIR = SuggestedActions(
    repair_actions=(RepairActionType.REBOOT_SYSTEM, RepairActionType.REPAIR_HARDWARE),
    descriptions=(
        "Reboot the system; if the error persists, inspect and repair the NVSwitch board.",
    ),
)


def _non_fatal(code: int, name: str, description: str) -> Detail:
    return Detail(code=code, name=name, description=description, severity=Severity.NON_FATAL, suggested_actions=_IGNORE)


def _fatal(code: int, name: str, description: str, actions: SuggestedActions = _REBOOT) -> Detail:
    return Detail(
        code=code,
        name=name,
        description=description,
        severity=Severity.FATAL,
        critical_error=True,
        suggested_actions=actions,
    )


_ENTRIES = (
    _non_fatal(11004, "Ingress invalid ACL", "A request arrived that the ingress access control list rejected."),
    _non_fatal(11012, "Single bit ECC error on ingress request", "Corrected single-bit ECC error in the ingress request buffer."),
    _non_fatal(11021, "Single bit ECC error on ingress response", "Corrected single-bit ECC error in the ingress response buffer."),
    _non_fatal(12028, "Egress non-posted PRIV error", "A non-posted privileged register access was rejected on egress."),
    _non_fatal(15008, "Route TCAM single bit ECC error", "Corrected single-bit ECC error in the routing table."),
    _non_fatal(22013, "Minion link DLREQ interrupt", "The link minion raised a data-link request interrupt."),
    _non_fatal(24001, "TCEN0 crumbstore ECC limit error", "Corrected ECC errors in the crumbstore reached the reporting limit."),
    _fatal(11013, "Ingress request buffer DBE", "Uncorrectable double-bit ECC error in the ingress request buffer."),
    _fatal(12023, "Egress DBE", "Uncorrectable double-bit ECC error on egress.", _REBOOT_THEN_REPAIR),
    _fatal(19084, "AN1 heartbeat timeout", "The NVSwitch firmware stopped answering heartbeats."),
    _fatal(20034, "LTSSM fault up", "The link training state machine faulted while the link was up.", _REBOOT_THEN_REPAIR),
    _fatal(24007, "Sourcetrack TCEN0 crumbstore DBE", "Uncorrectable double-bit ECC error in the crumbstore.", _REBOOT_THEN_REPAIR),
)

CATALOG: Mapping[int, Detail] = MappingProxyType({entry.code: entry for entry in _ENTRIES})


def get_detail(code: int) -> Optional[Detail]:
    return CATALOG.get(code)


__all__ = ["CATALOG", "get_detail"]
