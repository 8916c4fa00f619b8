import pytest

from hostdiag.repair_actions import RepairActionType, SuggestedActions


@pytest.mark.parametrize(
    "actions,expected",
    [
        ((), False),
        ((RepairActionType.REBOOT_SYSTEM,), True),
        ((RepairActionType.REBOOT_SYSTEM, RepairActionType.REPAIR_HARDWARE), True),
        ((RepairActionType.REPAIR_HARDWARE,), False),
    ],
    ids=["empty", "reboot", "reboot-and-repair-hardware", "repair-hardware-only"],
)
def test_requires_reboot(actions, expected):
    assert SuggestedActions(repair_actions=actions).requires_reboot() is expected


def test_equality_ignores_order_but_display_keeps_it():
    first = SuggestedActions(repair_actions=(RepairActionType.REPAIR_HARDWARE, RepairActionType.REBOOT_SYSTEM))
    second = SuggestedActions(repair_actions=(RepairActionType.REBOOT_SYSTEM, RepairActionType.REPAIR_HARDWARE))

    assert first == second
    assert hash(first) == hash(second)
    assert str(first) == "REPAIR_HARDWARE, REBOOT_SYSTEM"
    assert list(second) == [RepairActionType.REBOOT_SYSTEM, RepairActionType.REPAIR_HARDWARE]


def test_duplicates_collapse_and_strings_coerce():
    actions = SuggestedActions(repair_actions=("REBOOT_SYSTEM", RepairActionType.REBOOT_SYSTEM))

    assert actions.repair_actions == (RepairActionType.REBOOT_SYSTEM,)
    assert len(actions) == 1
    assert RepairActionType.REBOOT_SYSTEM in actions


def test_unknown_action_rejected():
    with pytest.raises(ValueError):
        SuggestedActions(repair_actions=("FORMAT_DISK",))


def test_payload_round_trip():
    actions = SuggestedActions(
        repair_actions=(RepairActionType.REBOOT_SYSTEM,),
        descriptions=("reboot the host",),
    )

    payload = actions.to_payload()

    assert payload == {"descriptions": ["reboot the host"], "repair_actions": ["REBOOT_SYSTEM"]}
    assert SuggestedActions.from_payload(payload) == actions
    assert SuggestedActions.from_payload(None) is None
