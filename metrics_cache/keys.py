"""
Metrics Cache - Keys.

A key is the operation name followed by the canonical JSON of its
parameters, so the same filters in any order map to the same key
and keys stay readable for pattern invalidation.
"""

import json
from typing import Any, Mapping, Optional


def build_cache_key(operation: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Deterministic key for an operation and its parameters."""
    canonical = json.dumps(
        dict(params or {}),
        sort_keys=True,
        default=str,
        separators=(",", ":"),
    )
    return f"{operation}:{canonical}"


def operation_of(key: str) -> str:
    return key.split(":", 1)[0]
