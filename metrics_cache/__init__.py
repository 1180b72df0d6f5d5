"""
Metrics Cache Package.

============================================================
PURPOSE
============================================================
Shields repeated analytic queries from recomputation.

- TTL per payload class, fixed-capacity LRU
- Stale-while-revalidate background refresh
- Singleflight for concurrent misses

The cache is an explicitly constructed object injected into
the orchestrator; create one per process (or per test).

============================================================
"""

from .cache import MetricsCache
from .config import CacheConfig
from .keys import build_cache_key, operation_of
from .types import CacheEntry, CacheResult, CacheStats, EntryState, TtlClass


__all__ = [
    "MetricsCache",
    "CacheConfig",
    "build_cache_key",
    "operation_of",
    "CacheEntry",
    "CacheResult",
    "CacheStats",
    "EntryState",
    "TtlClass",
]
