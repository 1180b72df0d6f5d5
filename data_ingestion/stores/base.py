"""
Data Ingestion - Data Store Contract.

============================================================
PURPOSE
============================================================
Abstract asynchronous collaborator that returns raw survey
rows. The wire format behind it is not this package's concern.

============================================================
DESIGN PRINCIPLES
============================================================
- Returns raw rows only, no normalization
- Failures surface as DataStoreError with a retryable flag
- Implementations must be safe to call concurrently

============================================================
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BaseDataStore(ABC):
    """
    Abstract base class for survey data stores.

    Subclasses implement `query`. Any failure should be raised as
    DataStoreError; other exceptions are wrapped by the orchestrator.
    """

    name: str = "data_store"

    @abstractmethod
    async def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch raw rows from a table.

        Args:
            table: Table or collection name
            filters: Optional equality hints

        Returns:
            List of raw row dictionaries

        Raises:
            DataStoreError: On connectivity or query errors
        """
