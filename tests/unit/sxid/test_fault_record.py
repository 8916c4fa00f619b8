from datetime import datetime, timezone

import orjson
import pytest
import yaml

from hostdiag.errors import StateParseError
from hostdiag.repair_actions import RepairActionType
from hostdiag.sxid import CATALOG, FaultRecord, LogItem, Severity, get_detail

OBSERVED = datetime(2025, 1, 6, 18, 11, 33, 250000, tzinfo=timezone.utc)


@pytest.fixture
def fatal_record():
    return FaultRecord(
        log_item=LogItem(
            line="nvidia-nvswitch0: SXid (PCI:0000:00:00.0): 20034, Fatal, Link 30 LTSSM Fault Up",
            matched="20034",
            time=OBSERVED,
        ),
        detail=CATALOG[20034],
    )


def test_json_payload_shape(fatal_record):
    payload = orjson.loads(fatal_record.to_json())

    assert payload["log_item"] == {
        "line": fatal_record.source_line,
        "matched": "20034",
        "time": "2025-01-06T18:11:33.250000Z",
    }
    assert payload["detail"]["code"] == 20034
    assert payload["detail"]["severity"] == "fatal"
    assert payload["detail"]["suggested_actions"]["repair_actions"] == ["REBOOT_SYSTEM", "REPAIR_HARDWARE"]


def test_json_and_yaml_decode_to_same_record(fatal_record):
    assert FaultRecord.from_json(fatal_record.to_json()) == fatal_record
    assert FaultRecord.from_yaml(fatal_record.to_yaml()) == fatal_record


def test_yaml_keeps_field_order(fatal_record):
    document = fatal_record.to_yaml()

    assert document.index("detail:") < document.index("log_item:")
    assert yaml.safe_load(document)["log_item"]["matched"] == "20034"


def test_record_without_detail():
    record = FaultRecord(log_item=LogItem(line="plain line", matched=None, time=OBSERVED))

    decoded = FaultRecord.from_json(record.to_json())

    assert decoded == record
    assert decoded.code == 0
    assert decoded.matched_pattern_group == ""


def test_naive_time_is_treated_as_utc():
    payload = {"detail": None, "log_item": {"line": "x", "matched": "11004", "time": "2025-01-06T18:11:33"}}

    record = FaultRecord.from_payload(payload)

    assert record.timestamp == datetime(2025, 1, 6, 18, 11, 33, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "payload",
    [
        b"[1, 2",
        b"[]",
        b'{"detail": null}',
        b'{"detail": null, "log_item": {"line": "x", "time": "yesterday"}}',
        b'{"detail": {"code": 1}, "log_item": {"line": "x", "time": "2025-01-06T00:00:00Z"}}',
    ],
)
def test_invalid_json_payloads(payload):
    with pytest.raises(StateParseError):
        FaultRecord.from_json(payload)


def test_invalid_yaml_payload():
    with pytest.raises(StateParseError):
        FaultRecord.from_yaml("log_item: [unclosed")


def test_catalog_contents():
    assert get_detail(1) is None
    for code, detail in CATALOG.items():
        assert detail.code == code
        assert detail.suggested_actions is not None
        if detail.severity is Severity.FATAL:
            assert detail.critical_error
            assert detail.requires_reboot()
        else:
            assert RepairActionType.IGNORE_NO_ACTION_REQUIRED in detail.suggested_actions


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        CATALOG[1] = CATALOG[20034]  # type: ignore[index]
