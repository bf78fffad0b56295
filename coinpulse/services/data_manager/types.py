"""
Data types for the response cache.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# Returns the current time as integer epoch milliseconds
Clock = Callable[[], int]


def epoch_millis() -> int:
    """Wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class CacheEntry:
    """
    One cached response.

    Entries are never mutated; a refresh stores a new entry under the same key.
    """

    key: str
    payload: Any  # Parsed JSON body, opaque to the cache
    fetched_at_ms: int

    def age_ms(self, now_ms: int) -> int:
        """Milliseconds elapsed since the entry was stored."""
        return now_ms - self.fetched_at_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and inspection."""
        return {
            "key": self.key,
            "payload": self.payload,
            "fetched_at_ms": self.fetched_at_ms,
        }
