"""Helpers backing the polling engine."""

from .background_worker import PollWorker, advance_deadline
from .cache import PollerCache, PollerCacheEntry

__all__ = ["PollWorker", "PollerCache", "PollerCacheEntry", "advance_deadline"]
