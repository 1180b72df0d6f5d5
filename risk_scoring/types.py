"""
Risk Scoring - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for wellbeing risk classification.

============================================================
RISK BANDS
============================================================
The wellbeing total (0-36) maps onto four bands. A HIGHER
score means LOWER risk:

- VERY_HIGH (0-8): Restricted wellbeing, priority 4
- HIGH (9-17): Altered wellbeing, priority 3
- MODERATE (18-27): Alert, priority 2
- LOW (28-36): Acceptable, priority 1

VERY_HIGH and HIGH are flagged as high risk and require
intervention.

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


# ============================================================
# ENUMS
# ============================================================


class RiskBand(str, Enum):
    """Risk band of a wellbeing score."""

    VERY_HIGH = "VERY_HIGH"
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    LOW = "LOW"

    @classmethod
    def by_severity(cls) -> List["RiskBand"]:
        """Bands from most to least severe."""
        return [cls.VERY_HIGH, cls.HIGH, cls.MODERATE, cls.LOW]

    @property
    def label(self) -> str:
        return {
            "VERY_HIGH": "Very High (Restricted)",
            "HIGH": "High (Altered)",
            "MODERATE": "Moderate (Alert)",
            "LOW": "Low (Acceptable)",
        }[self.value]

    @property
    def priority(self) -> int:
        """Intervention priority, 4 = most urgent."""
        return {"VERY_HIGH": 4, "HIGH": 3, "MODERATE": 2, "LOW": 1}[self.value]

    @property
    def is_high_risk(self) -> bool:
        return self in (RiskBand.VERY_HIGH, RiskBand.HIGH)


# ============================================================
# CLASSIFICATION
# ============================================================


@dataclass(frozen=True)
class RiskClassification:
    """Band assigned to a single wellbeing score."""

    score: int
    band: RiskBand

    @property
    def label(self) -> str:
        return self.band.label

    @property
    def is_high_risk(self) -> bool:
        return self.band.is_high_risk

    @property
    def requires_intervention(self) -> bool:
        return self.band.is_high_risk

    @property
    def priority(self) -> int:
        return self.band.priority

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "band": self.band.value,
            "label": self.label,
            "is_high_risk": self.is_high_risk,
            "priority": self.priority,
        }


# ============================================================
# GROUP SUMMARY
# ============================================================


@dataclass(frozen=True)
class BandCount:
    """Count and share of one band within a group."""

    count: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "percentage": round(self.percentage, 1)}


@dataclass(frozen=True)
class GroupRiskSummary:
    """
    Risk distribution and descriptive statistics of a group of scores.

    Attributes:
        total: Number of scores
        distribution: Count/percentage per band (every band present)
        high_risk_count: Scores in VERY_HIGH or HIGH
        high_risk_percentage: high_risk_count / total * 100
    """

    total: int
    distribution: Dict[RiskBand, BandCount]
    high_risk_count: int
    high_risk_percentage: float
    mean: float
    median: float
    minimum: int
    maximum: int

    @property
    def score_range(self) -> int:
        return self.maximum - self.minimum

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "distribution": {band.value: c.to_dict() for band, c in self.distribution.items()},
            "high_risk_count": self.high_risk_count,
            "high_risk_percentage": round(self.high_risk_percentage, 1),
            "mean": round(self.mean, 2),
            "median": self.median,
            "min": self.minimum,
            "max": self.maximum,
            "range": self.score_range,
        }


@dataclass
class RiskBucket:
    """Latest responses of respondents falling in one band."""

    band: RiskBand
    respondents: List[Any] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.respondents)


__all__ = [
    "RiskBand",
    "RiskClassification",
    "BandCount",
    "GroupRiskSummary",
    "RiskBucket",
]
