"""
Pydantic schemas for orchestrator output payloads.

Internal types use snake_case; every payload leaves the orchestrator
through these models and is serialized with camelCase aliases.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# =======================
# 1. SCORE
# =======================

class BreakdownItem(CamelModel):
    question: int
    raw: int
    processed: int
    polarity: str  # positive, negative

class ScorePayload(CamelModel):
    total: int
    breakdown: List[BreakdownItem]
    percentage: float

class RiskPayload(CamelModel):
    band: str  # VERY_HIGH, HIGH, MODERATE, LOW
    label: str
    is_high_risk: bool
    priority: int

class ScoreResponse(CamelModel):
    success: bool
    score: Optional[ScorePayload] = None
    risk: Optional[RiskPayload] = None
    errors: List[str] = []

# =======================
# 2. CORE METRICS
# =======================

class BandCountPayload(CamelModel):
    count: int
    percentage: float

class RiskSummaryPayload(CamelModel):
    total: int
    distribution: Dict[str, BandCountPayload]
    high_risk_count: int
    high_risk_percentage: float
    mean: float
    median: float
    min: int
    max: int
    range: int

class DistressPayload(CamelModel):
    average: float
    answer_count: int
    respondent_count: int
    wellbeing_index: float
    level: str  # EXCELLENT, GOOD, REGULAR, NEEDS_ATTENTION

class CoreMetricsPayload(CamelModel):
    total_responses: int
    unique_respondents: int
    risk: Optional[RiskSummaryPayload] = None
    distress_average: Optional[DistressPayload] = None

# =======================
# 3. CORRELATIONS
# =======================

class CorrelationPayload(CamelModel):
    variable_pair: str
    x_variable: Optional[str] = None
    y_variable: Optional[str] = None
    coefficient: Optional[float] = None
    strength: str
    direction: str
    sample_size: int
    data_status: str  # valid, insufficient_data, calculation_error
    reason: Optional[str] = None

class InsightPayload(CamelModel):
    variable_pair: str
    kind: str
    message: str
    coefficient: float

class CorrelationStatsPayload(CamelModel):
    total_respondents: int
    average_score: Optional[float] = None
    valid_pairs: int

class CorrelationsPayload(CamelModel):
    correlations: List[CorrelationPayload]
    insights: List[InsightPayload] = []
    stats: CorrelationStatsPayload

# =======================
# 4. SEGMENTATION
# =======================

class QualityPayload(CamelModel):
    completeness: float
    consistency: float
    recency: float
    overall: float
    sample_size: int
    sample_adequacy: str

class TrendPointPayload(CamelModel):
    period: str  # YYYY-MM
    respondents: int
    mean_score: float
    high_risk_percentage: float

class TrendPayload(CamelModel):
    points: List[TrendPointPayload]
    direction: str
    change_percentage: Optional[float] = None
    undated_responses: int = 0

class DemographicsPayload(CamelModel):
    age_groups: Dict[str, int]
    genders: Dict[str, int]
    shifts: Dict[str, int]
    contract_types: Dict[str, int]
    positions: Dict[str, int]
    mean_tenure_years: Optional[float] = None

class SegmentPayload(CamelModel):
    key: str
    member_count: int
    respondent_count: int
    mean_score: float
    median_score: float
    min_score: int
    max_score: int
    distribution: Dict[str, BandCountPayload]
    high_risk_count: int
    high_risk_percentage: float
    demographics: DemographicsPayload
    quality: QualityPayload
    trend: Optional[TrendPayload] = None
    rank: int

class ExcludedSegmentPayload(CamelModel):
    key: str
    reason: str
    member_count: int

class SegmentationSummaryPayload(CamelModel):
    segment_count: int
    excluded_count: int
    total_participants: int
    average_high_risk_percentage: float
    highest_risk_segment: Optional[str] = None
    lowest_risk_segment: Optional[str] = None

class ValidationReportPayload(CamelModel):
    total_responses: int
    valid_responses: int
    invalid_responses: int
    error_rate: float

class SegmentationPayload(CamelModel):
    group_by: str
    segments: List[SegmentPayload]
    excluded_segments: List[ExcludedSegmentPayload]
    summary: Optional[SegmentationSummaryPayload] = None
    validation: Optional[ValidationReportPayload] = None

# =======================
# 5. TRENDS / HEATMAP / AT-RISK
# =======================

class TrendsPayload(CamelModel):
    overall: TrendPayload

class HeatmapOptionPayload(CamelModel):
    value: int
    count: int
    percentage: float
    is_risk: bool

class HeatmapCellPayload(CamelModel):
    group: str
    total: int
    options: List[HeatmapOptionPayload]
    average_answer: float
    risk_percentage: float

class HeatmapRowPayload(CamelModel):
    question: int
    polarity: str
    cells: List[HeatmapCellPayload]

class HeatmapPayload(CamelModel):
    group_by: str
    groups: List[str]
    rows: List[HeatmapRowPayload]
    excluded_groups: List[ExcludedSegmentPayload]

class AtRiskRespondentPayload(CamelModel):
    respondent_id: str
    session_id: Optional[str] = None
    submitted_at: Optional[datetime] = None
    score: int
    band: str
    label: str
    is_high_risk: bool
    department: Optional[str] = None
    position: Optional[str] = None

class AtRiskBucketPayload(CamelModel):
    band: str
    label: str
    count: int
    respondents: List[AtRiskRespondentPayload]

class AtRiskPayload(CamelModel):
    total_respondents: int
    high_risk_respondents: int
    buckets: List[AtRiskBucketPayload]

# =======================
# 6. ENVELOPE
# =======================

class MetadataPayload(CamelModel):
    operation: str
    query_latency_ms: float
    sample_size: int
    cache_hit: bool
    cache_stale: bool
    generated_at: datetime

class DiagnosticsPayload(CamelModel):
    rejected_rows: List[Dict[str, Any]] = []
    validation_errors: List[Dict[str, Any]] = []
    excluded: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []

class MetricsResultPayload(CamelModel):
    success: bool
    operation: str
    data: Dict[str, Any]
    metadata: MetadataPayload
    diagnostics: DiagnosticsPayload
    errors: List[str] = []
