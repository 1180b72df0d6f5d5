"""
Segmentation - Aggregator.

============================================================
PURPOSE
============================================================
Groups respondents by a demographic field and computes the
aggregates of every segment.

Pipeline:
1. Validity gate (answers + required demographics)
2. Score and classify valid responses
3. Group by the requested field
4. Exclude groups below the anonymity threshold
5. Aggregate each remaining segment (isolated per segment)
6. Rank by high-risk percentage
7. Summary and validation report

============================================================
RANKING
============================================================
High-risk percentage descending; ties go to the lower mean
score (worse wellbeing) first, then to the segment key.

============================================================
USAGE
============================================================
    aggregator = SegmentationAggregator(clock=SystemClock())
    result = aggregator.aggregate(responses, group_by="department")
    for segment in result.segments:
        print(segment.rank, segment.key, segment.high_risk_percentage)

============================================================
"""

import logging
import statistics
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from core.clock import ClockProtocol, SystemClock
from core.exceptions import CalculationError, ValidationError
from data_ingestion.types import ScoredResponse
from risk_scoring.engine import RiskClassifier
from scoring_engine.wellbeing_score import ScoreEngine

from .config import GROUPABLE_FIELDS, SegmentationConfig
from .demographics import build_profile, group_value
from .quality import QualityScorer
from .trends import TrendAnalyzer
from .types import ExcludedSegment, Segment, SegmentationResult, SegmentationSummary
from .validation import SegmentValidator


logger = logging.getLogger(__name__)


def validate_group_by(group_by: str) -> str:
    if group_by not in GROUPABLE_FIELDS:
        raise ValidationError(
            f"Cannot group by '{group_by}'",
            errors=[f"group_by must be one of {sorted(GROUPABLE_FIELDS)}"],
        )
    return group_by


class SegmentationAggregator:
    """
    Per-segment aggregation of questionnaire responses.

    Synchronous and pure apart from the injected clock, which only
    feeds the recency score.
    """

    def __init__(
        self,
        config: Optional[SegmentationConfig] = None,
        score_engine: Optional[ScoreEngine] = None,
        classifier: Optional[RiskClassifier] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        self.config = config or SegmentationConfig()
        self.score_engine = score_engine or ScoreEngine()
        self.classifier = classifier or RiskClassifier()
        self.validator = SegmentValidator(self.config, self.score_engine)
        self.quality = QualityScorer(self.config, clock or SystemClock())
        self.trends = TrendAnalyzer(self.config)

    def aggregate(self, responses: Sequence[Any], group_by: str = "department") -> SegmentationResult:
        """
        Aggregate raw responses by a demographic field.

        Raises:
            ValidationError: if group_by is not a groupable field
        """
        validate_group_by(group_by)
        result = SegmentationResult(group_by=group_by)

        # ---- Step 1: Validity gate ----
        valid, failures, report = self.validator.split(responses, group_by)
        result.validation_errors = failures
        result.validation = report

        # ---- Step 2: Score ----
        scored = [self._score(response) for response in valid]

        # ---- Step 3: Group ----
        groups: Dict[str, List[ScoredResponse]] = defaultdict(list)
        for item in scored:
            groups[group_value(item.response, group_by)].append(item)

        # ---- Step 4 & 5: Exclude small groups, aggregate the rest ----
        for key in sorted(groups):
            members = groups[key]
            if len(members) < self.config.min_segment_size:
                result.excluded_segments.append(
                    ExcludedSegment(
                        key=key,
                        member_count=len(members),
                        reason=(
                            f"insufficient participants: {len(members)} "
                            f"(minimum {self.config.min_segment_size})"
                        ),
                    )
                )
                continue

            try:
                result.segments.append(self._build_segment(key, members))
            except CalculationError as e:
                logger.error(f"Segment '{key}' failed to aggregate: {e}", exc_info=True)
                result.excluded_segments.append(
                    ExcludedSegment(key=key, member_count=len(members), reason=f"calculation error: {e.message}")
                )

        # ---- Step 6: Rank ----
        result.segments.sort(key=lambda s: (-s.high_risk_percentage, s.mean_score, s.key))
        for position, segment in enumerate(result.segments, start=1):
            segment.rank = position

        # ---- Step 7: Summary ----
        result.summary = self._summarize(result)

        logger.info(
            f"Segmented {len(responses)} responses by {group_by}: "
            f"{len(result.segments)} segments, {len(result.excluded_segments)} excluded, "
            f"{len(failures)} invalid"
        )
        return result

    def _score(self, response: Any) -> ScoredResponse:
        score = self.score_engine.score(response.answers)
        return ScoredResponse(response=response, score=score, risk=self.classifier.classify(score.total_score))

    def _build_segment(self, key: str, members: List[ScoredResponse]) -> Segment:
        """
        Aggregate one segment.

        Raises:
            CalculationError: any failure while aggregating the members
        """
        try:
            return self._aggregate_members(key, members)
        except Exception as e:
            raise CalculationError(str(e), context={"segment": key}) from e

    def _aggregate_members(self, key: str, members: List[ScoredResponse]) -> Segment:
        summary = self.classifier.summarize(item.total_score for item in members)
        responses = [item.response for item in members]
        return Segment(
            key=key,
            member_count=len(members),
            respondent_count=len({item.respondent_id for item in members}),
            mean_score=summary.mean,
            median_score=summary.median,
            min_score=summary.minimum,
            max_score=summary.maximum,
            risk_distribution=summary.distribution,
            high_risk_count=summary.high_risk_count,
            high_risk_percentage=summary.high_risk_percentage,
            demographics=build_profile(responses, self.config),
            quality=self.quality.score(responses),
            trend=self.trends.series(members),
        )

    @staticmethod
    def _summarize(result: SegmentationResult) -> SegmentationSummary:
        segments = result.segments
        return SegmentationSummary(
            segment_count=len(segments),
            excluded_count=len(result.excluded_segments),
            total_participants=sum(s.member_count for s in segments),
            average_high_risk_percentage=(
                statistics.fmean(s.high_risk_percentage for s in segments) if segments else 0.0
            ),
            highest_risk_segment=segments[0].key if segments else None,
            lowest_risk_segment=segments[-1].key if segments else None,
        )
