from types import SimpleNamespace

import pytest

from hostdiag.os_info import get_os_output, probe, threshold
from hostdiag.os_info.probe import build_uptimes, collect_os_output, count_zombie_processes, read_host_id


def test_read_host_id_uses_first_readable_file(tmp_path):
    empty = tmp_path / "empty"
    empty.write_text("\n")
    machine_id = tmp_path / "machine-id"
    machine_id.write_text("abc123\n")

    assert read_host_id([tmp_path / "missing", empty, machine_id]) == "abc123"
    assert read_host_id([tmp_path / "missing"]) == ""


def test_build_uptimes():
    uptimes = build_uptimes(boot_time=1_000.0, now=1_000.0 + 3 * 86400 + 4 * 3600)

    assert uptimes.seconds == 3 * 86400 + 4 * 3600
    assert uptimes.seconds_humanized == "3d 4h ago"
    assert uptimes.boot_time_unix_seconds == 1_000
    assert uptimes.boot_time_humanized == "3d 4h ago"


def test_build_uptimes_clamps_clock_skew():
    uptimes = build_uptimes(boot_time=2_000.0, now=1_000.0)

    assert uptimes.seconds == 0
    assert uptimes.seconds_humanized == "now"


def test_count_zombie_processes(monkeypatch):
    processes = [
        SimpleNamespace(info={"status": probe.psutil.STATUS_ZOMBIE}),
        SimpleNamespace(info={"status": probe.psutil.STATUS_RUNNING}),
        SimpleNamespace(info={"status": probe.psutil.STATUS_ZOMBIE}),
    ]
    monkeypatch.setattr(probe.psutil, "process_iter", lambda attrs: iter(processes))

    assert count_zombie_processes() == 2


def test_collect_os_output_with_injected_readers():
    output = collect_os_output(
        host_id_reader=lambda: "host-1",
        boot_time_reader=lambda: 0.0,
        zombie_counter=lambda: 4,
    )

    assert output.host.id == "host-1"
    assert output.process_count_zombie_processes == 4
    assert output.kernel.arch
    assert output.uptimes.seconds > 0


@pytest.mark.asyncio
async def test_get_os_output_runs_against_this_host():
    output = await get_os_output()

    assert output.kernel.version
    assert output.uptimes.boot_time_unix_seconds > 0
    assert output.process_count_zombie_processes >= 0


@pytest.mark.parametrize(
    "limit,expected",
    [(None, threshold.FALLBACK_ZOMBIE_PROCESS_THRESHOLD), (0, 1000), (65536, 13107), (100, 20), (3, 1)],
)
def test_zombie_threshold_from_limit(limit, expected):
    assert threshold.zombie_threshold_from_limit(limit) == expected


def test_read_fd_limit(tmp_path):
    path = tmp_path / "file-max"
    path.write_text("65536\n")
    assert threshold.read_fd_limit(path) == 65536

    path.write_text("lots")
    assert threshold.read_fd_limit(path) is None
    assert threshold.read_fd_limit(tmp_path / "missing") is None


def test_default_threshold_is_computed_once(monkeypatch):
    calls = []

    def _limit(path=threshold.FILE_MAX_PATH):
        calls.append(path)
        return 5000

    monkeypatch.setattr(threshold, "read_fd_limit", _limit)

    assert threshold.default_zombie_process_threshold() == 1000
    assert threshold.default_zombie_process_threshold() == 1000
    assert len(calls) == 1
