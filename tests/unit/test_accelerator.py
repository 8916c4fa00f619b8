from unittest.mock import AsyncMock

import pytest

from hostdiag import accelerator
from hostdiag.accelerator import AcceleratorOutput, accelerator_states
from hostdiag.health import parse_bool_field, parse_int_field
from hostdiag.registry import PollerRegistry

LSPCI_LINES = ["01:00.0 3D controller: NVIDIA Corporation GA100 [A100 SXM4 80GB] (rev a1)"]


def _installed(*names):
    return lambda name: f"/usr/bin/{name}" if name in names else None


@pytest.mark.asyncio
async def test_list_nvidia_pcis_without_lspci(monkeypatch):
    runner = AsyncMock()
    monkeypatch.setattr(accelerator, "locate_executable", _installed())
    monkeypatch.setattr(accelerator, "run_and_collect", runner)

    assert await accelerator.list_nvidia_pcis() == []
    runner.assert_not_called()


@pytest.mark.asyncio
async def test_list_nvidia_pcis_filters_vendor(monkeypatch):
    runner = AsyncMock(return_value=LSPCI_LINES)
    monkeypatch.setattr(accelerator, "locate_executable", _installed("lspci"))
    monkeypatch.setattr(accelerator, "run_and_collect", runner)

    assert await accelerator.list_nvidia_pcis(timeout=5) == LSPCI_LINES

    args, kwargs = runner.call_args
    assert args == (["/usr/bin/lspci"],)
    assert kwargs["timeout"] == 5
    keep = kwargs["keep"]
    assert keep(LSPCI_LINES[0])
    assert not keep("00:1f.2 SATA controller: Intel Corporation")


@pytest.mark.asyncio
async def test_load_gpu_device_name(monkeypatch):
    runner = AsyncMock(return_value=["NVIDIA A100-SXM4-80GB ", "NVIDIA A100-SXM4-80GB"])
    monkeypatch.setattr(accelerator, "locate_executable", _installed("nvidia-smi"))
    monkeypatch.setattr(accelerator, "run_and_collect", runner)

    assert await accelerator.load_gpu_device_name() == "NVIDIA A100-SXM4-80GB"
    assert runner.call_args.args[0] == ["/usr/bin/nvidia-smi", "--query-gpu=name", "--format=csv,noheader"]


@pytest.mark.asyncio
async def test_load_gpu_device_name_without_smi(monkeypatch):
    monkeypatch.setattr(accelerator, "locate_executable", _installed())

    assert await accelerator.load_gpu_device_name() == ""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "installed,outputs,expected",
    [
        ((), [], False),
        (("nvidia-smi", "lspci"), [[]], False),
        (("nvidia-smi", "lspci"), [LSPCI_LINES, []], False),
        (("nvidia-smi", "lspci"), [LSPCI_LINES, ["NVIDIA H100 80GB HBM3"]], True),
    ],
)
async def test_gpus_installed(monkeypatch, installed, outputs, expected):
    monkeypatch.setattr(accelerator, "locate_executable", _installed(*installed))
    monkeypatch.setattr(accelerator, "run_and_collect", AsyncMock(side_effect=outputs))

    assert await accelerator.gpus_installed() is expected


@pytest.mark.asyncio
async def test_get_accelerator_output(monkeypatch):
    monkeypatch.setattr(accelerator, "locate_executable", _installed("nvidia-smi", "lspci"))
    monkeypatch.setattr(accelerator, "run_and_collect", AsyncMock(side_effect=[LSPCI_LINES, ["NVIDIA A100"]]))

    output = await accelerator.get_accelerator_output()

    assert output == AcceleratorOutput(smi_installed=True, pci_devices=LSPCI_LINES, product_name="NVIDIA A100")


@pytest.mark.parametrize(
    "output,reason",
    [
        (AcceleratorOutput(), "no NVIDIA GPU detected"),
        (AcceleratorOutput(pci_devices=LSPCI_LINES), "1 NVIDIA PCI device(s) found but no GPU reported by nvidia-smi"),
        (
            AcceleratorOutput(smi_installed=True, pci_devices=LSPCI_LINES, product_name="NVIDIA A100"),
            "detected NVIDIA A100 (1 NVIDIA PCI device(s))",
        ),
    ],
)
def test_accelerator_states(output, reason):
    (state,) = accelerator_states(output)

    assert state.healthy
    assert state.reason == reason
    assert parse_bool_field(state.extra_info, "smi_installed") is output.smi_installed
    assert parse_int_field(state.extra_info, "pci_device_count") == len(output.pci_devices)


@pytest.mark.asyncio
async def test_registered_poller_reports_missing_tools_as_no_data(monkeypatch, agent_settings):
    monkeypatch.setattr(accelerator, "locate_executable", _installed())
    poller = accelerator.register_accelerator_component(PollerRegistry(), agent_settings)

    await poller.poll_now()
    states, ok = poller.get_latest()

    assert ok
    assert states[0].reason == "no NVIDIA GPU detected"
