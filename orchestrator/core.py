"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
The MetricsOrchestrator is the single entry point for every
analytic operation.

Pipeline per call:
1. Validate filters
2. Fetch rows from the data store (timeout + retry)
3. Normalize rows into responses, apply filters
4. Score and classify
5. Correlate / aggregate
6. Cache write
7. Return data + metadata + diagnostics

============================================================
FAILURE POLICY
============================================================
- Invalid rows, answers or segments: dropped with a reason in
  diagnostics, the rest of the result is still returned
- Data store unreachable after retries: documented default
  payload with success=False, nothing is raised
- Anything else is a bug and propagates

============================================================
ARCHITECTURAL POSITION
============================================================
- The orchestrator has no scoring or statistics logic of its own
- The cache, data store and clock are injected, never global
- Error channels are registered explicitly

============================================================
"""

import asyncio
import copy
import json
import logging
import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, TextIO, Tuple

from core.clock import ClockProtocol, SystemClock
from core.exceptions import (
    ConfigurationError,
    DataStoreError,
    ErrorClassification,
    InsufficientDataError,
    Severity,
    ValidationError,
)
from core.retry import RetryPolicy
from correlation_engine.engine import CorrelationEngine
from data_ingestion.filters import MetricsFilters
from data_ingestion.normalizers.response_normalizer import ResponseNormalizer
from data_ingestion.stores.base import BaseDataStore
from data_ingestion.types import RawResponse, ScoredResponse
from metrics_cache.cache import MetricsCache
from metrics_cache.keys import build_cache_key
from risk_scoring.engine import RiskClassifier
from risk_scoring.types import RiskBand
from scoring_engine.distress_average import RawDistressAverage
from scoring_engine.wellbeing_score import ScoreEngine
from segmentation.aggregator import SegmentationAggregator, validate_group_by
from segmentation.heatmap import HeatmapBuilder
from segmentation.trends import TrendAnalyzer

from .defaults import default_payload
from .models import (
    Diagnostics,
    ErrorReport,
    MetricsOperation,
    MetricsResult,
    OrchestratorConfig,
    ResultMetadata,
)
from .schemas import (
    AtRiskBucketPayload,
    AtRiskPayload,
    AtRiskRespondentPayload,
    CoreMetricsPayload,
    CorrelationPayload,
    CorrelationStatsPayload,
    CorrelationsPayload,
    DistressPayload,
    HeatmapPayload,
    InsightPayload,
    RiskPayload,
    RiskSummaryPayload,
    ScorePayload,
    ScoreResponse,
    SegmentationPayload,
    TrendPayload,
    TrendsPayload,
)


logger = logging.getLogger(__name__)

ErrorChannel = Callable[[ErrorReport], Any]
Builder = Callable[[List[RawResponse], Diagnostics], Tuple[Dict[str, Any], int]]



def validate_limit(limit: Optional[int]) -> None:
    """
    Raises:
        ValidationError: unless limit is None or a positive integer
    """
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError(
            "Invalid limit",
            errors=[f"limit must be a positive integer, got {limit!r}"],
        )


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    correlation_id: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Set up structured logging.

    Args:
        level: Log level
        log_format: Output format (json or text)
        correlation_id: Correlation ID for tracing
        stream: Output stream (default: stdout)

    Returns:
        Configured logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
                "correlation_id": correlation_id or "",
            })
        )
    else:
        formatter = logging.Formatter(
            f"%(asctime)s | %(levelname)-8s | %(name)s | {correlation_id or ''} | %(message)s"
        )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("orchestrator")


# ============================================================
# COMPUTATION (CACHED UNIT)
# ============================================================

@dataclass(frozen=True)
class _Computation:
    data: Dict[str, Any]
    diagnostics: Diagnostics
    sample_size: int
    query_latency_ms: float


# ============================================================
# METRICS ORCHESTRATOR
# ============================================================

class MetricsOrchestrator:
    """
    Coordinates fetch, normalization, scoring, analytics and caching.

    ============================================================
    OPERATIONS
    ============================================================
    score_response          sync, uncached, pure
    get_core_metrics        risk distribution + distress average
    get_correlations        configured variable pairs
    get_segmentation        per-segment aggregates
    get_trends              monthly trend series
    get_heatmap             question x group answer distribution
    get_at_risk_respondents latest response per respondent by band

    ============================================================
    """

    def __init__(
        self,
        data_store: BaseDataStore,
        cache: MetricsCache,
        config: Optional[OrchestratorConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
        clock: Optional[ClockProtocol] = None,
        score_engine: Optional[ScoreEngine] = None,
        classifier: Optional[RiskClassifier] = None,
        correlation_engine: Optional[CorrelationEngine] = None,
        aggregator: Optional[SegmentationAggregator] = None,
        normalizer: Optional[ResponseNormalizer] = None,
    ):
        if data_store is None:
            raise ConfigurationError("A data store is required", config_key="data_store")
        if cache is None:
            raise ConfigurationError("A MetricsCache instance is required", config_key="cache")

        self.config = config or OrchestratorConfig()
        errors = self.config.validate()
        if errors:
            raise ConfigurationError("; ".join(errors), config_key="orchestrator")

        self._clock = clock or SystemClock()
        self._store = data_store
        self._cache = cache
        self._retry = retry_policy or self.config.retry_policy()

        self.score_engine = score_engine or ScoreEngine()
        self.classifier = classifier or RiskClassifier()
        self.correlation_engine = correlation_engine or CorrelationEngine()
        self.aggregator = aggregator or SegmentationAggregator(
            score_engine=self.score_engine,
            classifier=self.classifier,
            clock=self._clock,
        )
        self.normalizer = normalizer or ResponseNormalizer(clock=self._clock)
        self.heatmap_builder = HeatmapBuilder(self.aggregator.config, self.score_engine.config)
        self.trend_analyzer = TrendAnalyzer(self.aggregator.config)
        self._distress = RawDistressAverage()

        self._error_channels: List[ErrorChannel] = []

        logger.info(
            f"MetricsOrchestrator initialized: table={self.config.responses_table}, "
            f"retry={self._retry.to_dict()}"
        )

    @property
    def cache(self) -> MetricsCache:
        return self._cache

    # ---- Error channels ----

    def register_error_channel(self, channel: ErrorChannel) -> None:
        """Register a callback that receives an ErrorReport for every reported problem."""
        self._error_channels.append(channel)

    def unregister_error_channel(self, channel: ErrorChannel) -> None:
        if channel in self._error_channels:
            self._error_channels.remove(channel)

    def _report(self, report: ErrorReport) -> None:
        for channel in list(self._error_channels):
            try:
                channel(report)
            except Exception as e:
                # a broken channel must not break the pipeline
                logger.error(f"Error channel {channel!r} failed: {e}", exc_info=True)

    # ---- Score (uncached) ----

    def score_response(self, answers: Mapping[Any, Any]) -> Dict[str, Any]:
        """
        Score one answer set.

        Returns:
            {success, score, risk} or {success: False, errors}
        """
        issues = self.score_engine.validate(answers)
        if issues:
            return ScoreResponse(success=False, errors=[str(issue) for issue in issues]).dump()

        result = self.score_engine.score(answers)
        classification = self.classifier.classify(result.total_score)
        return ScoreResponse(
            success=True,
            score=ScorePayload(**result.to_dict()),
            risk=RiskPayload(
                band=classification.band.value,
                label=classification.label,
                is_high_risk=classification.is_high_risk,
                priority=classification.priority,
            ),
        ).dump()

    # ---- Public operations ----

    async def get_core_metrics(self, filters: Optional[Mapping[str, Any]] = None) -> MetricsResult:
        return await self._run(MetricsOperation.CORE_METRICS, filters, {}, self._build_core)

    async def get_correlations(self, filters: Optional[Mapping[str, Any]] = None) -> MetricsResult:
        return await self._run(MetricsOperation.CORRELATIONS, filters, {}, self._build_correlations)

    async def get_segmentation(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        group_by: Optional[str] = None,
    ) -> MetricsResult:
        group_by = group_by or self.config.default_group_by
        return await self._run(
            MetricsOperation.SEGMENTATION,
            filters,
            {"group_by": group_by},
            lambda responses, diagnostics: self._build_segmentation(responses, diagnostics, group_by),
            group_by=group_by,
        )

    async def get_trends(self, filters: Optional[Mapping[str, Any]] = None) -> MetricsResult:
        return await self._run(MetricsOperation.TRENDS, filters, {}, self._build_trends)

    async def get_heatmap(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        group_by: Optional[str] = None,
    ) -> MetricsResult:
        group_by = group_by or self.config.default_group_by
        return await self._run(
            MetricsOperation.HEATMAP,
            filters,
            {"group_by": group_by},
            lambda responses, diagnostics: self._build_heatmap(responses, diagnostics, group_by),
            group_by=group_by,
        )

    async def get_at_risk_respondents(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> MetricsResult:
        return await self._run(
            MetricsOperation.AT_RISK,
            filters,
            {"limit": limit},
            lambda responses, diagnostics: self._build_at_risk(responses, diagnostics, limit),
            validate=lambda: validate_limit(limit),
        )

    def get_cache_stats(self) -> Dict[str, Any]:
        return self._cache.get_stats()

    def clear_cache(self, pattern: Any = None) -> int:
        return self._cache.clear(pattern)

    # ---- Pipeline ----

    async def _run(
        self,
        operation: MetricsOperation,
        raw_filters: Optional[Mapping[str, Any]],
        params: Dict[str, Any],
        build: Builder,
        group_by: Optional[str] = None,
        validate: Optional[Callable[[], None]] = None,
    ) -> MetricsResult:
        # ---- Step 1: Validate input ----
        try:
            filters = MetricsFilters.from_mapping(raw_filters)
            if group_by is not None:
                validate_group_by(group_by)
            if validate is not None:
                validate()
        except ValidationError as e:
            logger.warning(f"{operation.value}: invalid request: {e}")
            self._report(ErrorReport.from_exception(operation.value, e))
            return self._failure(operation, e, group_by, errors=e.errors or [e.message])

        key = build_cache_key(operation.value, {**filters.to_cache_params(), **params})

        # ---- Steps 2-6: Compute through the cache ----
        try:
            cached = await self._cache.get_or_compute(
                key,
                lambda: self._compute(operation, filters, build),
                operation.ttl_class,
            )
        except DataStoreError as e:
            logger.warning(
                f"{operation.value}: data store unavailable after {e.attempts} attempts, "
                f"returning default payload: {e}"
            )
            self._report(ErrorReport.from_exception(operation.value, e))
            return self._failure(operation, e, group_by, errors=[e.message])

        # ---- Step 7: Envelope ----
        computation: _Computation = cached.value
        return MetricsResult(
            success=True,
            operation=operation.value,
            data=copy.deepcopy(computation.data),
            metadata=ResultMetadata(
                operation=operation.value,
                query_latency_ms=0.0 if cached.cache_hit else computation.query_latency_ms,
                sample_size=computation.sample_size,
                cache_hit=cached.cache_hit,
                cache_stale=cached.stale,
                generated_at=self._clock.now(),
            ),
            diagnostics=Diagnostics(**computation.diagnostics.to_dict()),
        )

    async def _compute(
        self,
        operation: MetricsOperation,
        filters: MetricsFilters,
        build: Builder,
    ) -> _Computation:
        started = time.perf_counter()
        rows = await self._fetch(filters)
        latency_ms = (time.perf_counter() - started) * 1000

        report = self.normalizer.normalize(rows)
        responses = [response for response in report.responses if filters.matches(response)]

        diagnostics = Diagnostics(rejected_rows=[row.to_dict() for row in report.rejected])
        data, sample_size = build(responses, diagnostics)

        if not diagnostics.is_clean:
            self._report(
                ErrorReport(
                    operation=operation.value,
                    error_type="PartialResult",
                    message=f"{operation.value} computed with dropped items",
                    severity=Severity.LOW,
                    classification=ErrorClassification.RECOVERABLE,
                    context={
                        "rejected_rows": len(diagnostics.rejected_rows),
                        "validation_errors": len(diagnostics.validation_errors),
                        "excluded": len(diagnostics.excluded),
                        "errors": len(diagnostics.errors),
                    },
                )
            )

        logger.info(
            f"{operation.value}: {len(rows)} rows, {len(responses)} responses after filters, "
            f"sample={sample_size}, query={latency_ms:.1f}ms"
        )
        return _Computation(
            data=data,
            diagnostics=diagnostics,
            sample_size=sample_size,
            query_latency_ms=latency_ms,
        )

    async def _fetch(self, filters: MetricsFilters) -> List[Dict[str, Any]]:
        table = self.config.responses_table
        timeout = self.config.query_timeout_seconds

        async def attempt() -> List[Dict[str, Any]]:
            try:
                rows = await asyncio.wait_for(self._store.query(table, filters.to_query()), timeout=timeout)
            except DataStoreError:
                raise
            except asyncio.TimeoutError as e:
                raise DataStoreError(
                    f"Query on '{table}' timed out after {timeout}s",
                    retryable=True,
                    original_error=e,
                ) from e
            except Exception as e:
                raise DataStoreError(
                    f"Query on '{table}' failed: {e}",
                    retryable=True,
                    original_error=e,
                ) from e

            if not isinstance(rows, list):
                raise DataStoreError(
                    f"Query on '{table}' returned {type(rows).__name__}, expected a list",
                    retryable=False,
                )
            return rows

        return await self._retry.run(attempt, description=f"query {table}")

    def _failure(
        self,
        operation: MetricsOperation,
        error: Exception,
        group_by: Optional[str],
        errors: List[str],
    ) -> MetricsResult:
        return MetricsResult(
            success=False,
            operation=operation.value,
            data=default_payload(operation, group_by),
            metadata=ResultMetadata(operation=operation.value, generated_at=self._clock.now()),
            diagnostics=Diagnostics(errors=[ErrorReport.from_exception(operation.value, error).to_dict()]),
            errors=errors,
        )

    # ---- Scoring ----

    def _score_all(self, responses: List[RawResponse], diagnostics: Diagnostics) -> List[ScoredResponse]:
        scored: List[ScoredResponse] = []
        for response in responses:
            issues = self.score_engine.validate(response.answers)
            if issues:
                diagnostics.validation_errors.append(
                    {
                        "respondent_id": response.respondent_id,
                        "session_id": response.session_id,
                        "reasons": [str(issue) for issue in issues],
                    }
                )
                continue
            score = self.score_engine.score(response.answers)
            scored.append(
                ScoredResponse(response=response, score=score, risk=self.classifier.classify(score.total_score))
            )
        return scored

    # ---- Builders ----

    def _build_core(self, responses: List[RawResponse], diagnostics: Diagnostics) -> Tuple[Dict[str, Any], int]:
        scored = self._score_all(responses, diagnostics)
        if not scored:
            error = InsufficientDataError("No valid responses for core metrics", available=0, required=1)
            diagnostics.errors.append(error.to_dict())
            return default_payload(MetricsOperation.CORE_METRICS), 0

        summary = self.classifier.summarize(item.total_score for item in scored)
        distress = self._distress.population(item.response.answers for item in scored)
        data = CoreMetricsPayload(
            total_responses=len(scored),
            unique_respondents=len({item.respondent_id for item in scored}),
            risk=RiskSummaryPayload(**summary.to_dict()),
            distress_average=DistressPayload(**distress.to_dict()),
        ).dump()
        return data, len(scored)

    def _build_correlations(
        self,
        responses: List[RawResponse],
        diagnostics: Diagnostics,
    ) -> Tuple[Dict[str, Any], int]:
        scored = self._score_all(responses, diagnostics)
        report = self.correlation_engine.correlate_registry(scored)

        for result in report.results:
            if not result.is_valid:
                diagnostics.excluded.append(
                    {"item": result.pair_id, "status": result.data_status.value, "reason": result.reason}
                )

        data = CorrelationsPayload(
            correlations=[
                CorrelationPayload(
                    variable_pair=result.pair_id,
                    x_variable=result.x_variable,
                    y_variable=result.y_variable,
                    coefficient=round(result.coefficient, 4) if result.coefficient is not None else None,
                    strength=result.strength.value,
                    direction=result.direction.value,
                    sample_size=result.sample_size,
                    data_status=result.data_status.value,
                    reason=result.reason,
                )
                for result in report.results
            ],
            insights=[
                InsightPayload(
                    variable_pair=insight.pair_id,
                    kind=insight.kind,
                    message=insight.message,
                    coefficient=round(insight.coefficient, 4),
                )
                for insight in report.insights
            ],
            stats=CorrelationStatsPayload(**report.to_dict()["stats"]),
        ).dump()
        return data, len(scored)

    def _build_segmentation(
        self,
        responses: List[RawResponse],
        diagnostics: Diagnostics,
        group_by: str,
    ) -> Tuple[Dict[str, Any], int]:
        result = self.aggregator.aggregate(responses, group_by)

        diagnostics.validation_errors.extend(failure.to_dict() for failure in result.validation_errors)
        diagnostics.excluded.extend(
            {"item": excluded.key, "member_count": excluded.member_count, "reason": excluded.reason}
            for excluded in result.excluded_segments
        )

        data = SegmentationPayload.model_validate(result.to_dict()).dump()
        return data, result.validation.valid_responses if result.validation else 0

    def _build_trends(self, responses: List[RawResponse], diagnostics: Diagnostics) -> Tuple[Dict[str, Any], int]:
        scored = self._score_all(responses, diagnostics)
        series = self.trend_analyzer.series(scored)
        data = TrendsPayload(overall=TrendPayload.model_validate(series.to_dict())).dump()
        return data, len(scored)

    def _build_heatmap(
        self,
        responses: List[RawResponse],
        diagnostics: Diagnostics,
        group_by: str,
    ) -> Tuple[Dict[str, Any], int]:
        valid, failures, _report = self.aggregator.validator.split(responses, group_by)
        heatmap = self.heatmap_builder.build(valid, group_by)

        diagnostics.validation_errors.extend(failure.to_dict() for failure in failures)
        diagnostics.excluded.extend(
            {"item": excluded.key, "member_count": excluded.member_count, "reason": excluded.reason}
            for excluded in heatmap.excluded_groups
        )

        data = HeatmapPayload.model_validate(heatmap.to_dict()).dump()
        return data, len(valid)

    def _build_at_risk(
        self,
        responses: List[RawResponse],
        diagnostics: Diagnostics,
        limit: Optional[int],
    ) -> Tuple[Dict[str, Any], int]:
        scored = self._score_all(responses, diagnostics)
        buckets = self.classifier.bucket_latest(scored)

        payload_buckets = []
        for band in RiskBand.by_severity():
            bucket = buckets[band]
            shown = bucket.respondents if limit is None else bucket.respondents[:limit]
            payload_buckets.append(
                AtRiskBucketPayload(
                    band=band.value,
                    label=band.label,
                    count=bucket.count,
                    respondents=[AtRiskRespondentPayload.model_validate(item.to_dict()) for item in shown],
                )
            )

        data = AtRiskPayload(
            total_respondents=sum(bucket.count for bucket in buckets.values()),
            high_risk_respondents=sum(bucket.count for band, bucket in buckets.items() if band.is_high_risk),
            buckets=payload_buckets,
        ).dump()
        return data, len(scored)


# ============================================================
# FACTORY
# ============================================================

def create_orchestrator(
    data_store: BaseDataStore,
    config: Optional[OrchestratorConfig] = None,
    cache: Optional[MetricsCache] = None,
    clock: Optional[ClockProtocol] = None,
) -> MetricsOrchestrator:
    """
    Build an orchestrator with a fresh cache unless one is given.
    """
    clock = clock or SystemClock()
    return MetricsOrchestrator(
        data_store=data_store,
        cache=cache if cache is not None else MetricsCache(clock=clock),
        config=config or OrchestratorConfig.from_env(),
        clock=clock,
    )
