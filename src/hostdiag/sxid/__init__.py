"""NVSwitch SXid kernel log classification."""

from .catalog import CATALOG, get_detail
from .classifier import FaultClassifier, classify, extract_sxid, extract_sxid_code
from .types import Detail, FaultRecord, LogItem, Severity

__all__ = [
    "CATALOG",
    "Detail",
    "FaultClassifier",
    "FaultRecord",
    "LogItem",
    "Severity",
    "classify",
    "extract_sxid",
    "extract_sxid_code",
    "get_detail",
]
