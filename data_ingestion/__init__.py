"""
Data Ingestion Package.

This package is the boundary to the survey data store.
No business logic - only data acquisition and normalization.

Sub-packages:
- stores: Data store contract and in-memory implementation
- normalizers: Raw row shapes to canonical responses

Modules:
- types: Canonical response types
- filters: Validated query filters
"""

from data_ingestion.filters import MetricsFilters
from data_ingestion.normalizers import NormalizerConfig, ResponseNormalizer, RowShape
from data_ingestion.stores import BaseDataStore, InMemoryDataStore, InMemoryStoreConfig
from data_ingestion.types import (
    DEMOGRAPHIC_FIELDS,
    Demographics,
    NormalizationReport,
    RawResponse,
    RejectedRow,
    ScoredResponse,
)


__all__ = [
    "MetricsFilters",
    "NormalizerConfig",
    "ResponseNormalizer",
    "RowShape",
    "BaseDataStore",
    "InMemoryDataStore",
    "InMemoryStoreConfig",
    "DEMOGRAPHIC_FIELDS",
    "Demographics",
    "NormalizationReport",
    "RawResponse",
    "RejectedRow",
    "ScoredResponse",
]
