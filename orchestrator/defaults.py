"""
Orchestrator - Default Payloads.

Empty-shaped payloads returned with success=False when the data
store cannot be reached. Consumers can render them without
special-casing a failure.
"""

from typing import Any, Dict, Optional

from .models import MetricsOperation
from .schemas import (
    AtRiskPayload,
    CoreMetricsPayload,
    CorrelationStatsPayload,
    CorrelationsPayload,
    HeatmapPayload,
    SegmentationPayload,
    TrendPayload,
    TrendsPayload,
)


def default_payload(operation: MetricsOperation, group_by: Optional[str] = None) -> Dict[str, Any]:
    """Empty payload with the same shape as a successful result."""
    if operation == MetricsOperation.CORE_METRICS:
        return CoreMetricsPayload(total_responses=0, unique_respondents=0).dump()
    if operation == MetricsOperation.CORRELATIONS:
        return CorrelationsPayload(
            correlations=[],
            insights=[],
            stats=CorrelationStatsPayload(total_respondents=0, valid_pairs=0),
        ).dump()
    if operation == MetricsOperation.SEGMENTATION:
        return SegmentationPayload(
            group_by=group_by or "department",
            segments=[],
            excluded_segments=[],
        ).dump()
    if operation == MetricsOperation.TRENDS:
        return TrendsPayload(overall=TrendPayload(points=[], direction="INSUFFICIENT_DATA")).dump()
    if operation == MetricsOperation.HEATMAP:
        return HeatmapPayload(
            group_by=group_by or "department",
            groups=[],
            rows=[],
            excluded_groups=[],
        ).dump()
    if operation == MetricsOperation.AT_RISK:
        return AtRiskPayload(total_respondents=0, high_risk_respondents=0, buckets=[]).dump()
    return {}
