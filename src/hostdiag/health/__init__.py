"""Canonical health state representation shared by every signal."""

from .state import (
    EXTRA_INFO_PREFIX,
    HealthState,
    parse_bool_field,
    parse_int_field,
    states_from_json,
    states_to_json,
)

__all__ = [
    "EXTRA_INFO_PREFIX",
    "HealthState",
    "parse_bool_field",
    "parse_int_field",
    "states_from_json",
    "states_to_json",
]
