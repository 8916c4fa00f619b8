"""Common error types used across the agent."""

from __future__ import annotations

from typing import Optional, Sequence, Union


class HostDiagError(RuntimeError):
    """Base class for agent errors."""


class ProcessStartError(HostDiagError):
    """Raised when an external command cannot be launched."""

    def __init__(self, command: Union[str, Sequence[str]], reason: str) -> None:
        super().__init__(f"failed to start {_render(command)!r}: {reason}")
        self.command = command
        self.reason = reason


class ProcessExitError(HostDiagError):
    """Delivered by a process handle when the command exits non-zero."""

    def __init__(self, command: Union[str, Sequence[str]], returncode: int) -> None:
        super().__init__(f"command {_render(command)!r} exited with status {returncode}")
        self.command = command
        self.returncode = returncode


class NotRootError(HostDiagError):
    """Raised when a privileged action is attempted without root."""

    def __init__(self, action: str = "operation") -> None:
        super().__init__(f"{action} must be run as sudo/root")
        self.action = action


class PollerAlreadyRegisteredError(HostDiagError):
    """Raised when a signal name is registered twice with a different probe."""

    def __init__(self, name: str) -> None:
        super().__init__(f"poller {name!r} is already registered with a different probe")
        self.name = name


class StateParseError(HostDiagError, ValueError):
    """Raised when a health state payload or one of its fields cannot be decoded."""

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


def _render(command: Union[str, Sequence[str]]) -> str:
    if isinstance(command, str):
        return command
    return " ".join(command)


__all__ = [
    "HostDiagError",
    "NotRootError",
    "PollerAlreadyRegisteredError",
    "ProcessExitError",
    "ProcessStartError",
    "StateParseError",
]
