"""
Correlation Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for pairwise Pearson correlations.

A result always carries a data status. When the status is not
VALID the coefficient is None and `reason` explains why; a
missing coefficient is never reported as zero.

============================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# ============================================================
# ENUMS
# ============================================================


class CorrelationStrength(str, Enum):
    """Strength bucket of |r|."""

    VERY_STRONG = "VERY_STRONG"
    STRONG = "STRONG"
    MODERATE = "MODERATE"
    WEAK = "WEAK"
    VERY_WEAK = "VERY_WEAK"

    @property
    def is_strong(self) -> bool:
        return self in (CorrelationStrength.VERY_STRONG, CorrelationStrength.STRONG)


class CorrelationDirection(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class DataStatus(str, Enum):
    """Whether a coefficient could be computed."""

    VALID = "valid"
    INSUFFICIENT_DATA = "insufficient_data"
    CALCULATION_ERROR = "calculation_error"


# ============================================================
# RESULTS
# ============================================================


@dataclass(frozen=True)
class CorrelationResult:
    """
    Correlation of one variable pair.

    Invariant: coefficient is None unless data_status is VALID, and
    lies in [-1, 1] otherwise.
    """

    pair_id: str
    coefficient: Optional[float]
    strength: CorrelationStrength
    direction: CorrelationDirection
    sample_size: int
    data_status: DataStatus
    reason: Optional[str] = None
    x_variable: Optional[str] = None
    y_variable: Optional[str] = None
    dropped_records: int = 0

    @property
    def is_valid(self) -> bool:
        return self.data_status == DataStatus.VALID

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pair_id": self.pair_id,
            "x_variable": self.x_variable,
            "y_variable": self.y_variable,
            "coefficient": round(self.coefficient, 4) if self.coefficient is not None else None,
            "strength": self.strength.value,
            "direction": self.direction.value,
            "sample_size": self.sample_size,
            "data_status": self.data_status.value,
            "reason": self.reason,
            "dropped_records": self.dropped_records,
        }


@dataclass(frozen=True)
class CorrelationInsight:
    """Plain-language observation about a notable correlation."""

    pair_id: str
    kind: str
    message: str
    coefficient: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pair_id": self.pair_id,
            "kind": self.kind,
            "message": self.message,
            "coefficient": round(self.coefficient, 4),
        }


@dataclass
class CorrelationReport:
    """All configured pairs computed over one population."""

    results: List[CorrelationResult] = field(default_factory=list)
    insights: List[CorrelationInsight] = field(default_factory=list)
    total_respondents: int = 0
    average_score: Optional[float] = None

    @property
    def valid_count(self) -> int:
        return sum(1 for r in self.results if r.is_valid)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "insights": [i.to_dict() for i in self.insights],
            "stats": {
                "total_respondents": self.total_respondents,
                "average_score": round(self.average_score, 2) if self.average_score is not None else None,
                "valid_pairs": self.valid_count,
            },
        }


__all__ = [
    "CorrelationStrength",
    "CorrelationDirection",
    "DataStatus",
    "CorrelationResult",
    "CorrelationInsight",
    "CorrelationReport",
]
