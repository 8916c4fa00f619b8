"""Environment-backed configuration for the agent."""

from .errors import ConfigurationError
from .runtime import env_bool, env_float, env_int, env_seconds, env_str
from .settings import AgentSettings, get_agent_settings

__all__ = [
    "AgentSettings",
    "ConfigurationError",
    "env_bool",
    "env_float",
    "env_int",
    "env_seconds",
    "env_str",
    "get_agent_settings",
]
