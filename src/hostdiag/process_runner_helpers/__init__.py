"""Helpers for the process runner."""

from .line_collector import collect_lines, run_and_collect

__all__ = ["collect_lines", "run_and_collect"]
