"""
Metrics Cache - Type Definitions.

Entries are stamped with the injected clock's timestamp. An entry
moves through three states:

    fresh  -> age < stale_after
    stale  -> stale_after <= age < ttl  (served, refreshed in background)
    expired-> age >= ttl                (treated as a miss)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class TtlClass(str, Enum):
    """Lifetime class of a cached payload."""

    CORE = "core"
    SEGMENT = "segment"
    TREND = "trend"
    HEATMAP = "heatmap"


class EntryState(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    EXPIRED = "expired"


@dataclass
class CacheEntry:
    """A cached payload with its lifetime bookkeeping."""

    key: str
    value: Any
    ttl_class: TtlClass
    created_at: float
    ttl_seconds: float
    stale_after_seconds: float
    last_accessed: float
    hit_count: int = 0

    def age_seconds(self, now: float) -> float:
        return now - self.created_at

    def state(self, now: float) -> EntryState:
        age = self.age_seconds(now)
        if age >= self.ttl_seconds:
            return EntryState.EXPIRED
        if age >= self.stale_after_seconds:
            return EntryState.STALE
        return EntryState.FRESH

    def touch(self, now: float) -> None:
        self.last_accessed = now
        self.hit_count += 1


@dataclass(frozen=True)
class CacheResult:
    """Value returned by get_or_compute together with how it was obtained."""

    key: str
    value: Any
    cache_hit: bool
    stale: bool = False


@dataclass(frozen=True)
class CacheStats:
    size: int
    max_entries: int
    hits: int
    misses: int
    stale_hits: int
    evictions: int
    expirations: int
    refreshes: int
    singleflight_joins: int
    pending: int

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage."""
        total = self.hits + self.misses
        return round(self.hits / total * 100, 2) if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "stale_hits": self.stale_hits,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "refreshes": self.refreshes,
            "singleflight_joins": self.singleflight_joins,
            "pending": self.pending,
            "hit_rate": self.hit_rate,
        }
