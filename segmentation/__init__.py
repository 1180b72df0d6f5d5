"""
Segmentation Package.

============================================================
PURPOSE
============================================================
Per-segment (department, shift, gender, ...) aggregates with
data-quality scores, rankings, response heatmaps and monthly
trends.

============================================================
ANONYMITY
============================================================
Groups with fewer than 3 valid members are never aggregated;
they are listed in `excluded_segments` with the reason.

============================================================
"""

from .aggregator import SegmentationAggregator, validate_group_by
from .config import AGE_BUCKETS, GROUPABLE_FIELDS, SegmentationConfig, get_default_config
from .demographics import age_bucket, build_profile, group_value
from .heatmap import HeatmapBuilder, risk_options
from .quality import QualityScorer
from .trends import TrendAnalyzer
from .types import (
    DemographicProfile,
    ExcludedSegment,
    Heatmap,
    HeatmapCell,
    HeatmapRow,
    QualityScores,
    SampleAdequacy,
    Segment,
    SegmentationResult,
    SegmentationSummary,
    TrendDirection,
    TrendPoint,
    TrendSeries,
    ValidationFailure,
    ValidationReport,
)
from .validation import SegmentValidator


__all__ = [
    "SegmentationAggregator",
    "validate_group_by",
    "SegmentationConfig",
    "get_default_config",
    "AGE_BUCKETS",
    "GROUPABLE_FIELDS",
    "age_bucket",
    "build_profile",
    "group_value",
    "HeatmapBuilder",
    "risk_options",
    "QualityScorer",
    "TrendAnalyzer",
    "SegmentValidator",
    "DemographicProfile",
    "ExcludedSegment",
    "Heatmap",
    "HeatmapCell",
    "HeatmapRow",
    "QualityScores",
    "SampleAdequacy",
    "Segment",
    "SegmentationResult",
    "SegmentationSummary",
    "TrendDirection",
    "TrendPoint",
    "TrendSeries",
    "ValidationFailure",
    "ValidationReport",
]
