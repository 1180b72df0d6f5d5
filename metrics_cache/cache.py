"""
Metrics Cache - Cache Layer.

============================================================
RESPONSIBILITY
============================================================
Memoizes analytic payloads keyed by operation + filters.

- Fixed-capacity LRU with per-class TTLs
- Stale-while-revalidate: stale entries are served at once and
  refreshed by a background task the caller cannot cancel
- Singleflight: concurrent misses on one key share a single
  computation; it is cancelled only when every waiter has left
- Failed computations are never cached

============================================================
CONCURRENCY
============================================================
Designed for one asyncio event loop. The entry map is guarded
by an RLock so synchronous introspection (stats, clear) is
safe from other threads; the lock is never held across await.

============================================================
USAGE
============================================================
    cache = MetricsCache(CacheConfig(), clock=SystemClock())
    result = await cache.get_or_compute(
        build_cache_key("core_metrics", filters),
        lambda: compute_core_metrics(filters),
        TtlClass.CORE,
    )
    result.value, result.cache_hit, result.stale

============================================================
"""

import asyncio
import fnmatch
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Pattern, Set, Tuple, Union

from core.clock import ClockProtocol, SystemClock
from core.exceptions import CacheError

from .config import CacheConfig
from .keys import operation_of
from .types import CacheEntry, CacheResult, CacheStats, EntryState, TtlClass


logger = logging.getLogger(__name__)

ComputeFn = Callable[[], Awaitable[Any]]


@dataclass
class _Pending:
    """An in-flight computation shared by every caller of one key."""

    task: "asyncio.Future[Any]"
    waiters: int = 0
    background: bool = False


class MetricsCache:
    """
    TTL + LRU cache with stale-while-revalidate and singleflight.

    Constructed explicitly and passed to its users; there is no
    module-level instance.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        self.config = config or CacheConfig()
        self._clock = clock or SystemClock()
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._pending: Dict[str, _Pending] = {}
        self._background: Set["asyncio.Future[Any]"] = set()

        self._hits = 0
        self._misses = 0
        self._stale_hits = 0
        self._evictions = 0
        self._expirations = 0
        self._refreshes = 0
        self._joins = 0

        logger.info(f"MetricsCache initialized: {self.config.to_dict()}")

    # ---- Lookup ----

    def _lookup(self, key: str) -> Tuple[Optional[CacheEntry], EntryState]:
        now = self._clock.timestamp()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None, EntryState.EXPIRED

            state = entry.state(now)
            if state == EntryState.EXPIRED:
                del self._entries[key]
                self._expirations += 1
                self._misses += 1
                return None, state

            entry.touch(now)
            self._entries.move_to_end(key)
            self._hits += 1
            if state == EntryState.STALE:
                self._stale_hits += 1
            return entry, state

    def get(self, key: str) -> Optional[Any]:
        """Return a live (fresh or stale) value, or None on a miss."""
        entry, _state = self._lookup(key)
        if entry is None:
            logger.debug(f"Cache miss: {key}")
            return None
        logger.debug(f"Cache hit: {key}")
        return entry.value

    def set(self, key: str, value: Any, ttl_class: TtlClass = TtlClass.CORE) -> None:
        """
        Store a value, evicting expired then least-recently-used entries.

        Raises:
            CacheError: if ttl_class has no configured lifetime
        """
        try:
            ttl = self.config.ttl_seconds[ttl_class]
            stale_after = self.config.stale_after_seconds[ttl_class]
        except KeyError as e:
            raise CacheError(f"No lifetime configured for {ttl_class!r}", context={"key": key}) from e

        if not self.config.enabled:
            return

        now = self._clock.timestamp()
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                ttl_class=ttl_class,
                created_at=now,
                ttl_seconds=ttl,
                stale_after_seconds=stale_after,
                last_accessed=now,
            )
            self._entries.move_to_end(key)
            if len(self._entries) > self.config.max_entries:
                self._purge_expired(now)
            while len(self._entries) > self.config.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Cache evicted (LRU): {evicted}")

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if e.state(now) == EntryState.EXPIRED]
        for key in expired:
            del self._entries[key]
        self._expirations += len(expired)

    # ---- Compute ----

    async def get_or_compute(
        self,
        key: str,
        compute: ComputeFn,
        ttl_class: TtlClass = TtlClass.CORE,
    ) -> CacheResult:
        """
        Return the cached value or compute it once for all concurrent callers.

        A stale hit returns immediately and schedules a refresh. A
        failed computation propagates to every waiter and is not cached.
        """
        if not self.config.enabled:
            return CacheResult(key=key, value=await compute(), cache_hit=False)

        entry, state = self._lookup(key)
        if entry is not None:
            if state == EntryState.STALE:
                logger.debug(f"Cache stale hit: {key}, scheduling refresh")
                self._schedule_refresh(key, compute, ttl_class)
                return CacheResult(key=key, value=entry.value, cache_hit=True, stale=True)
            logger.debug(f"Cache hit: {key}")
            return CacheResult(key=key, value=entry.value, cache_hit=True)

        logger.debug(f"Cache miss: {key}")
        value = await self._join(key, compute, ttl_class)
        return CacheResult(key=key, value=value, cache_hit=False)

    async def _join(self, key: str, compute: ComputeFn, ttl_class: TtlClass) -> Any:
        pending = self._pending.get(key)
        if pending is None:
            pending = self._start(key, compute, ttl_class, background=False)
        else:
            self._joins += 1
            logger.debug(f"Joining in-flight computation: {key}")

        pending.waiters += 1
        cancelled = False
        try:
            return await asyncio.shield(pending.task)
        except asyncio.CancelledError:
            cancelled = True
            raise
        finally:
            pending.waiters -= 1
            if (
                cancelled
                and pending.waiters == 0
                and not pending.background
                and not pending.task.done()
            ):
                logger.debug(f"Last waiter left, cancelling computation: {key}")
                pending.task.cancel()

    def _start(self, key: str, compute: ComputeFn, ttl_class: TtlClass, background: bool) -> _Pending:
        task = asyncio.ensure_future(self._compute_and_store(key, compute, ttl_class))
        pending = _Pending(task=task, background=background)
        self._pending[key] = pending
        task.add_done_callback(lambda t, key=key: self._finish(key, t))
        if background:
            self._background.add(task)
        return pending

    def _schedule_refresh(self, key: str, compute: ComputeFn, ttl_class: TtlClass) -> None:
        if key in self._pending:
            return
        self._refreshes += 1
        self._start(key, compute, ttl_class, background=True)

    async def _compute_and_store(self, key: str, compute: ComputeFn, ttl_class: TtlClass) -> Any:
        value = await compute()
        try:
            self.set(key, value, ttl_class)
        except CacheError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
        return value

    def _finish(self, key: str, task: "asyncio.Future[Any]") -> None:
        pending = self._pending.get(key)
        if pending is not None and pending.task is task:
            del self._pending[key]
        self._background.discard(task)

        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            level = logging.WARNING if pending is not None and pending.background else logging.DEBUG
            logger.log(level, f"Computation for {key} failed, not cached: {error}")

    async def drain(self) -> None:
        """Wait for every background refresh to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---- Introspection ----

    def clear(self, pattern: Union[None, str, Pattern[str]] = None) -> int:
        """
        Remove entries.

        Args:
            pattern: None for everything, a glob string ("core_metrics:*")
                or a compiled regular expression searched in each key

        Returns:
            Number of entries removed
        """
        with self._lock:
            if pattern is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                if isinstance(pattern, str):
                    doomed = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
                else:
                    doomed = [key for key in self._entries if pattern.search(key) is not None]
                for key in doomed:
                    del self._entries[key]
                removed = len(doomed)

        logger.info(f"Cache cleared: {removed} entries (pattern={pattern!r})")
        return removed

    def invalidate_operation(self, operation: str) -> int:
        """Remove every entry produced by one operation."""
        with self._lock:
            doomed = [key for key in self._entries if operation_of(key) == operation]
            for key in doomed:
                del self._entries[key]
        logger.info(f"Cache invalidated {len(doomed)} entries for {operation}")
        return len(doomed)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                max_entries=self.config.max_entries,
                hits=self._hits,
                misses=self._misses,
                stale_hits=self._stale_hits,
                evictions=self._evictions,
                expirations=self._expirations,
                refreshes=self._refreshes,
                singleflight_joins=self._joins,
                pending=len(self._pending),
            )

    def get_stats(self) -> Dict[str, Any]:
        """Cache statistics, hit_rate as a percentage."""
        return self.stats().to_dict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
