"""
Data Ingestion - In-Memory Data Store.

============================================================
PURPOSE
============================================================
In-memory data store for tests and the command line tool.

FEATURES:
- Tables loaded from plain row lists
- Configurable latency
- Configurable error injection (fail the next N queries)
- Query history tracking

============================================================
"""

import asyncio
import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.exceptions import DataStoreError

from .base import BaseDataStore


logger = logging.getLogger(__name__)


# ============================================================
# FAULT CONFIGURATION
# ============================================================

@dataclass
class InMemoryStoreConfig:
    """Configuration for the in-memory store."""

    latency_seconds: float = 0.0
    """Simulated latency per query."""

    fail_next: int = 0
    """Number of upcoming queries that fail."""

    failures_retryable: bool = True
    """Whether injected failures are marked retryable."""

    apply_filters: bool = False
    """Apply equality hints to rows that carry the same keys."""


# ============================================================
# IN-MEMORY STORE
# ============================================================

class InMemoryDataStore(BaseDataStore):
    """
    Data store backed by a dict of row lists.

    Rows are deep-copied on the way out so callers can never mutate
    the stored tables.
    """

    name = "in_memory"

    def __init__(
        self,
        tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        config: Optional[InMemoryStoreConfig] = None,
    ):
        self._tables: Dict[str, List[Dict[str, Any]]] = {
            name: list(rows) for name, rows in (tables or {}).items()
        }
        self.config = config or InMemoryStoreConfig()
        self.queries: List[Dict[str, Any]] = []

    def load(self, table: str, rows: List[Dict[str, Any]]) -> None:
        self._tables[table] = list(rows)

    def fail_next(self, count: int = 1, retryable: bool = True) -> None:
        """Make the next `count` queries raise DataStoreError."""
        self.config.fail_next = count
        self.config.failures_retryable = retryable

    @property
    def query_count(self) -> int:
        return len(self.queries)

    async def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        self.queries.append({"table": table, "filters": dict(filters or {})})

        if self.config.latency_seconds:
            await asyncio.sleep(self.config.latency_seconds)

        if self.config.fail_next > 0:
            self.config.fail_next -= 1
            logger.debug(f"Injected failure for table {table}")
            raise DataStoreError(
                f"Simulated outage querying '{table}'",
                retryable=self.config.failures_retryable,
            )

        if table not in self._tables:
            raise DataStoreError(f"Unknown table '{table}'", retryable=False)

        rows = self._tables[table]
        if self.config.apply_filters and filters:
            rows = [
                row for row in rows
                if all(row.get(key, value) == value for key, value in filters.items())
            ]
        return copy.deepcopy(rows)
