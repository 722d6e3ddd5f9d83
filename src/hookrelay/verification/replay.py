"""
Module: replay.py
Description: Recently-seen message ID cache for duplicate rejection.

Remembers verified message IDs for the timestamp tolerance window. An
older ID can no longer pass the freshness check, so the window is also
the eviction horizon.
"""

import threading
import time
from collections import OrderedDict
from typing import Callable


class RecentMessageCache:
    """
    Thread-safe, size-bounded set of message IDs with expiry.

    Attributes:
        ttl_seconds: How long an ID is remembered
        max_size: Oldest IDs are evicted first once this many are held
    """

    def __init__(self, ttl_seconds: float, max_size: int = 10000, clock: Callable[[], float] = time.time):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._seen: "OrderedDict[str, float]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._evict(self._clock())
            return len(self._seen)

    def __contains__(self, message_id: str) -> bool:
        with self._lock:
            self._evict(self._clock())
            return message_id in self._seen

    def add(self, message_id: str) -> bool:
        """
        Record a message ID.

        Returns:
            True if the ID was new, False if it was already present
        """
        with self._lock:
            now = self._clock()
            self._evict(now)
            if message_id in self._seen:
                return False
            self._seen[message_id] = now
            while len(self._seen) > self.max_size:
                self._seen.popitem(last=False)
            return True

    def _evict(self, now: float) -> None:
        horizon = now - self.ttl_seconds
        while self._seen:
            oldest_id, seen_at = next(iter(self._seen.items()))
            if seen_at > horizon:
                break
            del self._seen[oldest_id]
