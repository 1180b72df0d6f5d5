"""
Segmentation - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for per-segment aggregates, heatmaps and trends.

============================================================
INVARIANTS
============================================================
- A segment with fewer than the minimum members appears only
  in `excluded_segments`, always with a reason
- Invalid respondents never contribute to any aggregate
- Ranks are 1-based and contiguous

============================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from risk_scoring.types import BandCount, RiskBand


# ============================================================
# ENUMS
# ============================================================


class SampleAdequacy(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    ACCEPTABLE = "Acceptable"
    INSUFFICIENT = "Insufficient"


class TrendDirection(str, Enum):
    IMPROVING = "IMPROVING"
    WORSENING = "WORSENING"
    STABLE = "STABLE"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


# ============================================================
# VALIDATION
# ============================================================


@dataclass(frozen=True)
class ValidationFailure:
    """A respondent excluded by the validity gate."""

    respondent_id: str
    session_id: Optional[str]
    reasons: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "respondent_id": self.respondent_id,
            "session_id": self.session_id,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class ValidationReport:
    total_responses: int
    valid_responses: int
    invalid_responses: int

    @property
    def error_rate(self) -> float:
        if self.total_responses == 0:
            return 0.0
        return self.invalid_responses / self.total_responses * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_responses": self.total_responses,
            "valid_responses": self.valid_responses,
            "invalid_responses": self.invalid_responses,
            "error_rate": round(self.error_rate, 1),
        }


# ============================================================
# SEGMENT PARTS
# ============================================================


@dataclass(frozen=True)
class DemographicProfile:
    """Demographic sub-distributions of a segment."""

    age_groups: Dict[str, int]
    genders: Dict[str, int]
    shifts: Dict[str, int]
    contract_types: Dict[str, int]
    positions: Dict[str, int]
    mean_tenure_years: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "age_groups": dict(self.age_groups),
            "genders": dict(self.genders),
            "shifts": dict(self.shifts),
            "contract_types": dict(self.contract_types),
            "positions": dict(self.positions),
            "mean_tenure_years": (
                round(self.mean_tenure_years, 1) if self.mean_tenure_years is not None else None
            ),
        }


@dataclass(frozen=True)
class QualityScores:
    """Data-quality scores of a segment, percentages 0-100."""

    completeness: float
    consistency: float
    recency: float
    sample_size: int
    sample_adequacy: SampleAdequacy

    @property
    def overall(self) -> float:
        return (self.completeness + self.consistency + self.recency) / 3

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completeness": round(self.completeness, 1),
            "consistency": round(self.consistency, 1),
            "recency": round(self.recency, 1),
            "overall": round(self.overall, 1),
            "sample_size": self.sample_size,
            "sample_adequacy": self.sample_adequacy.value,
        }


@dataclass(frozen=True)
class TrendPoint:
    """One month of a trend series."""

    period: str
    respondents: int
    mean_score: float
    high_risk_percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "respondents": self.respondents,
            "mean_score": round(self.mean_score, 2),
            "high_risk_percentage": round(self.high_risk_percentage, 1),
        }


@dataclass(frozen=True)
class TrendSeries:
    """Monthly series with the direction of the latest change."""

    points: List[TrendPoint]
    direction: TrendDirection
    change_percentage: Optional[float] = None
    undated_responses: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [p.to_dict() for p in self.points],
            "direction": self.direction.value,
            "change_percentage": (
                round(self.change_percentage, 1) if self.change_percentage is not None else None
            ),
            "undated_responses": self.undated_responses,
        }


# ============================================================
# SEGMENTS
# ============================================================


@dataclass
class Segment:
    """Aggregates of one valid segment."""

    key: str
    member_count: int
    respondent_count: int
    mean_score: float
    median_score: float
    min_score: int
    max_score: int
    risk_distribution: Dict[RiskBand, BandCount]
    high_risk_count: int
    high_risk_percentage: float
    demographics: DemographicProfile
    quality: QualityScores
    trend: Optional[TrendSeries] = None
    rank: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "member_count": self.member_count,
            "respondent_count": self.respondent_count,
            "mean_score": round(self.mean_score, 2),
            "median_score": self.median_score,
            "min_score": self.min_score,
            "max_score": self.max_score,
            "distribution": {band.value: c.to_dict() for band, c in self.risk_distribution.items()},
            "high_risk_count": self.high_risk_count,
            "high_risk_percentage": round(self.high_risk_percentage, 1),
            "demographics": self.demographics.to_dict(),
            "quality": self.quality.to_dict(),
            "trend": self.trend.to_dict() if self.trend else None,
            "rank": self.rank,
        }


@dataclass(frozen=True)
class ExcludedSegment:
    key: str
    member_count: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "member_count": self.member_count, "reason": self.reason}


@dataclass(frozen=True)
class SegmentationSummary:
    segment_count: int
    excluded_count: int
    total_participants: int
    average_high_risk_percentage: float
    highest_risk_segment: Optional[str]
    lowest_risk_segment: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segment_count": self.segment_count,
            "excluded_count": self.excluded_count,
            "total_participants": self.total_participants,
            "average_high_risk_percentage": round(self.average_high_risk_percentage, 1),
            "highest_risk_segment": self.highest_risk_segment,
            "lowest_risk_segment": self.lowest_risk_segment,
        }


@dataclass
class SegmentationResult:
    """Output of one aggregation run."""

    group_by: str
    segments: List[Segment] = field(default_factory=list)
    excluded_segments: List[ExcludedSegment] = field(default_factory=list)
    validation_errors: List[ValidationFailure] = field(default_factory=list)
    summary: Optional[SegmentationSummary] = None
    validation: Optional[ValidationReport] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_by": self.group_by,
            "segments": [s.to_dict() for s in self.segments],
            "excluded_segments": [e.to_dict() for e in self.excluded_segments],
            "validation_errors": [v.to_dict() for v in self.validation_errors],
            "summary": self.summary.to_dict() if self.summary else None,
            "validation": self.validation.to_dict() if self.validation else None,
        }


# ============================================================
# HEATMAP
# ============================================================


@dataclass(frozen=True)
class HeatmapCell:
    """Answer distribution of one question within one group."""

    group: str
    total: int
    option_counts: Dict[int, int]
    option_percentages: Dict[int, float]
    risk_options: List[int]
    average_answer: float
    risk_percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group": self.group,
            "total": self.total,
            "options": [
                {
                    "value": option,
                    "count": self.option_counts[option],
                    "percentage": round(self.option_percentages[option], 1),
                    "is_risk": option in self.risk_options,
                }
                for option in sorted(self.option_counts)
            ],
            "average_answer": round(self.average_answer, 2),
            "risk_percentage": round(self.risk_percentage, 1),
        }


@dataclass(frozen=True)
class HeatmapRow:
    question: int
    polarity: str
    cells: List[HeatmapCell]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "polarity": self.polarity,
            "cells": [c.to_dict() for c in self.cells],
        }


@dataclass
class Heatmap:
    group_by: str
    groups: List[str] = field(default_factory=list)
    rows: List[HeatmapRow] = field(default_factory=list)
    excluded_groups: List[ExcludedSegment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_by": self.group_by,
            "groups": list(self.groups),
            "rows": [r.to_dict() for r in self.rows],
            "excluded_groups": [e.to_dict() for e in self.excluded_groups],
        }


__all__ = [
    "SampleAdequacy",
    "TrendDirection",
    "ValidationFailure",
    "ValidationReport",
    "DemographicProfile",
    "QualityScores",
    "TrendPoint",
    "TrendSeries",
    "Segment",
    "ExcludedSegment",
    "SegmentationSummary",
    "SegmentationResult",
    "HeatmapCell",
    "HeatmapRow",
    "Heatmap",
]
