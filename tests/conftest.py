"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from hostdiag.config import get_agent_settings, runtime
from hostdiag.os_info.threshold import default_zombie_process_threshold
from hostdiag.sxid.classifier import default_classifier, host_boot_time


@pytest.fixture(autouse=True)
def isolate_configuration(monkeypatch):
    """Keep dotenv files on the test host and cached settings out of every test."""
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    runtime._DEFAULT_VALUES = None
    get_agent_settings.cache_clear()
    default_zombie_process_threshold.cache_clear()
    default_classifier.cache_clear()
    host_boot_time.cache_clear()
    yield
    runtime._DEFAULT_VALUES = None
    get_agent_settings.cache_clear()
    default_zombie_process_threshold.cache_clear()
    default_classifier.cache_clear()
    host_boot_time.cache_clear()


@pytest.fixture
def agent_settings():
    from hostdiag.config import AgentSettings

    return AgentSettings(
        poll_interval_seconds=0.05,
        probe_timeout_seconds=1.0,
        zombie_process_threshold=10,
        dmesg_command=("dmesg", "--follow"),
        kernel_log_restart_delay_seconds=0.01,
        sxid_retained_records=5,
    )
