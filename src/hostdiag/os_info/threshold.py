"""Zombie process threshold derived from the host's file descriptor limit."""

import logging
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

FILE_MAX_PATH = Path("/proc/sys/fs/file-max")
FALLBACK_ZOMBIE_PROCESS_THRESHOLD = 1000
FD_LIMIT_RATIO = 0.20


def read_fd_limit(path: Path = FILE_MAX_PATH) -> int | None:
    """Return the system-wide file descriptor limit, or None when not discoverable."""
    try:
        raw = path.read_text().strip()
    except OSError:
        logger.debug("File descriptor limit not readable from %s", path)
        return None
    try:
        return int(raw)
    except ValueError:
        logger.debug("File descriptor limit at %s is not an integer: %r", path, raw)
        return None


def zombie_threshold_from_limit(limit: int | None) -> int:
    if limit is None or limit <= 0:
        return FALLBACK_ZOMBIE_PROCESS_THRESHOLD
    return max(int(limit * FD_LIMIT_RATIO), 1)


@lru_cache(maxsize=1)
def default_zombie_process_threshold() -> int:
    """20% of the file descriptor limit when known, else a fixed fallback. Computed once."""
    threshold = zombie_threshold_from_limit(read_fd_limit())
    logger.debug("Zombie process threshold: %d", threshold)
    return threshold


__all__ = [
    "FALLBACK_ZOMBIE_PROCESS_THRESHOLD",
    "default_zombie_process_threshold",
    "read_fd_limit",
    "zombie_threshold_from_limit",
]
