"""
NVIDIA GPU presence detection through external tools.

A missing helper executable means "no data", never an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from .health import HealthState
from .process_runner import locate_executable
from .process_runner_helpers import run_and_collect

if TYPE_CHECKING:
    from .config import AgentSettings
    from .poller import Poller
    from .registry import PollerRegistry

logger = logging.getLogger(__name__)

NAME = "accelerator"

SMI_EXECUTABLE = "nvidia-smi"
LSPCI_EXECUTABLE = "lspci"
NVIDIA_VENDOR_MARKER = "NVIDIA"

STATE_KEY_SMI_INSTALLED = "smi_installed"
STATE_KEY_PCI_DEVICE_COUNT = "pci_device_count"
STATE_KEY_PRODUCT_NAME = "product_name"


def smi_exists() -> bool:
    return locate_executable(SMI_EXECUTABLE) is not None


def _is_nvidia_device(line: str) -> bool:
    # e.g.,
    # 01:00.0 VGA compatible controller: NVIDIA Corporation Device 2684 (rev a1)
    return NVIDIA_VENDOR_MARKER in line


async def list_nvidia_pcis(*, timeout: Optional[float] = None) -> List[str]:
    """Return the ``lspci`` lines describing NVIDIA devices; empty when lspci is absent."""
    lspci_path = locate_executable(LSPCI_EXECUTABLE)
    if lspci_path is None:
        logger.debug("%s not installed; skipping PCI scan", LSPCI_EXECUTABLE)
        return []
    return await run_and_collect([lspci_path], keep=_is_nvidia_device, timeout=timeout)


async def load_gpu_device_name(*, timeout: Optional[float] = None) -> str:
    """Return the first GPU product name reported by nvidia-smi, or an empty string."""
    smi_path = locate_executable(SMI_EXECUTABLE)
    if smi_path is None:
        return ""
    lines = await run_and_collect(
        [smi_path, "--query-gpu=name", "--format=csv,noheader"],
        keep=lambda line: bool(line.strip()),
        timeout=timeout,
    )
    if not lines:
        return ""
    return lines[0].strip()


async def gpus_installed(*, timeout: Optional[float] = None) -> bool:
    """True when nvidia-smi is installed, NVIDIA PCI devices exist and a GPU name is reported."""
    if not smi_exists():
        return False
    logger.debug("nvidia-smi installed")

    pci_devices = await list_nvidia_pcis(timeout=timeout)
    if not pci_devices:
        return False
    logger.debug("nvidia PCI devices found: %d", len(pci_devices))

    name = await load_gpu_device_name(timeout=timeout)
    logger.debug("detected nvidia gpu: %s", name)
    return bool(name)


@dataclass
class AcceleratorOutput:
    smi_installed: bool = False
    pci_devices: List[str] = field(default_factory=list)
    product_name: str = ""


async def get_accelerator_output() -> AcceleratorOutput:
    installed = smi_exists()
    pci_devices = await list_nvidia_pcis()
    product_name = await load_gpu_device_name() if installed else ""
    return AcceleratorOutput(smi_installed=installed, pci_devices=pci_devices, product_name=product_name)


def accelerator_states(output: AcceleratorOutput) -> List[HealthState]:
    if output.product_name:
        reason = f"detected {output.product_name} ({len(output.pci_devices)} NVIDIA PCI device(s))"
    elif output.pci_devices:
        reason = f"{len(output.pci_devices)} NVIDIA PCI device(s) found but no GPU reported by {SMI_EXECUTABLE}"
    else:
        reason = "no NVIDIA GPU detected"
    return [
        HealthState(
            name=NAME,
            healthy=True,
            reason=reason,
            extra_info={
                STATE_KEY_SMI_INSTALLED: "true" if output.smi_installed else "false",
                STATE_KEY_PCI_DEVICE_COUNT: str(len(output.pci_devices)),
                STATE_KEY_PRODUCT_NAME: output.product_name,
            },
        )
    ]


def register_accelerator_component(registry: "PollerRegistry", settings: "AgentSettings") -> "Poller":
    return registry.register(
        NAME,
        settings.poll_interval_seconds,
        get_accelerator_output,
        accelerator_states,
        probe_timeout_seconds=settings.probe_timeout_seconds,
    )


__all__ = [
    "AcceleratorOutput",
    "NAME",
    "accelerator_states",
    "get_accelerator_output",
    "gpus_installed",
    "list_nvidia_pcis",
    "load_gpu_device_name",
    "register_accelerator_component",
    "smi_exists",
]
