from datetime import datetime, timedelta, timezone

import pytest

from hostdiag.time_formatter import TimeFormatter

NOW = datetime(2025, 1, 6, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "0s"),
        (59, "59s"),
        (60, "1m"),
        (61, "1m 1s"),
        (3600, "1h"),
        (3 * 86400 + 4 * 3600, "3d 4h"),
        (15 * 86400, "2w 1d"),
        (timedelta(minutes=90), "1h 30m"),
        (-5, "0s"),
        ("bogus", "unknown"),
        (float("inf"), "unknown"),
    ],
)
def test_humanize_duration(seconds, expected):
    assert TimeFormatter.humanize_duration(seconds) == expected


def test_humanize_relative():
    assert TimeFormatter.humanize_relative(NOW - timedelta(hours=2), NOW) == "2h ago"
    assert TimeFormatter.humanize_relative(NOW + timedelta(minutes=5), NOW) == "5m from now"
    assert TimeFormatter.humanize_relative(NOW, NOW) == "now"
    assert TimeFormatter.humanize_relative(NOW - timedelta(days=1), NOW, past_label="before") == "1d before"
