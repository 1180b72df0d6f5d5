"""
Metrics Cache - Configuration.

============================================================
TTL CLASSES
============================================================
Class     TTL      Stale after
CORE      5 min    2 min
SEGMENT   10 min   5 min
TREND     30 min   15 min
HEATMAP   15 min   7.5 min

A stale entry is still served, while a background refresh
replaces it. An expired entry is a miss.

============================================================
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

from dotenv import load_dotenv

from core.exceptions import ConfigurationError

from .types import TtlClass


def _default_ttls() -> Dict[TtlClass, float]:
    return {
        TtlClass.CORE: 300.0,
        TtlClass.SEGMENT: 600.0,
        TtlClass.TREND: 1800.0,
        TtlClass.HEATMAP: 900.0,
    }


def _default_stale_after() -> Dict[TtlClass, float]:
    return {
        TtlClass.CORE: 120.0,
        TtlClass.SEGMENT: 300.0,
        TtlClass.TREND: 900.0,
        TtlClass.HEATMAP: 450.0,
    }


@dataclass(frozen=True)
class CacheConfig:
    """Cache capacity and lifetimes."""

    max_entries: int = 100
    """LRU capacity."""

    ttl_seconds: Dict[TtlClass, float] = field(default_factory=_default_ttls)

    stale_after_seconds: Dict[TtlClass, float] = field(default_factory=_default_stale_after)

    enabled: bool = True
    """When disabled every call computes and nothing is stored."""

    def __post_init__(self) -> None:
        errors = self.validate()
        if errors:
            raise ConfigurationError("; ".join(errors), config_key="metrics_cache")

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Load configuration from environment variables (and a local .env)."""
        load_dotenv()
        ttls = _default_ttls()
        stale = _default_stale_after()
        for ttl_class in TtlClass:
            name = ttl_class.name
            ttls[ttl_class] = float(os.getenv(f"METRICS_CACHE_TTL_{name}", str(ttls[ttl_class])))
            stale[ttl_class] = float(
                os.getenv(f"METRICS_CACHE_STALE_{name}", str(min(stale[ttl_class], ttls[ttl_class])))
            )
        return cls(
            max_entries=int(os.getenv("METRICS_CACHE_MAX_ENTRIES", "100")),
            ttl_seconds=ttls,
            stale_after_seconds=stale,
            enabled=os.getenv("METRICS_CACHE_ENABLED", "true").lower() == "true",
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.max_entries < 1:
            errors.append("max_entries must be at least 1")
        for ttl_class in TtlClass:
            ttl = self.ttl_seconds.get(ttl_class)
            stale = self.stale_after_seconds.get(ttl_class)
            if ttl is None or stale is None:
                errors.append(f"missing lifetime for {ttl_class.value}")
                continue
            if ttl <= 0:
                errors.append(f"ttl for {ttl_class.value} must be positive")
            if not 0 <= stale <= ttl:
                errors.append(f"stale threshold for {ttl_class.value} must be within [0, ttl]")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_entries": self.max_entries,
            "enabled": self.enabled,
            "ttl_seconds": {k.value: v for k, v in self.ttl_seconds.items()},
            "stale_after_seconds": {k.value: v for k, v in self.stale_after_seconds.items()},
        }
