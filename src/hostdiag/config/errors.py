"""Exception types for configuration handling."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are missing or malformed."""

    @classmethod
    def invalid_value(cls, param_name: str, value, reason: str = "") -> "ConfigurationError":
        """Create error for invalid value."""
        msg = f"Invalid value for {param_name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)

    @classmethod
    def load_failed(cls, resource: str, identifier: str = "") -> "ConfigurationError":
        """Create error for failed resource load."""
        msg = f"Failed to load {resource}"
        if identifier:
            msg += f" for {identifier}"
        return cls(msg)


__all__ = ["ConfigurationError"]
