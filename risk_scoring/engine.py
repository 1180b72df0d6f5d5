"""
Risk Scoring - Classifier.

============================================================
PURPOSE
============================================================
The RiskClassifier maps wellbeing totals onto risk bands and
summarizes groups of scores.

It provides:
1. Single score classification
2. Group risk distribution with high-risk KPI
3. Latest-response bucketing of at-risk respondents

============================================================
DESIGN PRINCIPLES
============================================================
- Deterministic and stateless per call
- Band partition validated once, at construction
- Out-of-range input is an error, never clamped

============================================================
USAGE
============================================================
    classifier = RiskClassifier()
    classification = classifier.classify(14)
    classification.band          # RiskBand.HIGH
    classification.is_high_risk  # True

============================================================
"""

import logging
import statistics
from numbers import Integral
from typing import Any, Dict, Iterable, List, Optional

from core.exceptions import InsufficientDataError, ScoreOutOfRangeError

from .config import RiskBandConfig
from .types import BandCount, GroupRiskSummary, RiskBand, RiskBucket, RiskClassification


logger = logging.getLogger(__name__)


class RiskClassifier:
    """
    Classifies wellbeing scores into risk bands.

    Highest score maps to the lowest risk band.
    """

    def __init__(self, config: Optional[RiskBandConfig] = None):
        self.config = config or RiskBandConfig()
        self._ranges = sorted(self.config.ranges, key=lambda r: r.minimum)

    def classify(self, score: Any) -> RiskClassification:
        """
        Classify a single total score.

        Raises:
            ScoreOutOfRangeError: for non-integers or scores outside 0-36
        """
        if isinstance(score, bool) or not isinstance(score, Integral):
            raise ScoreOutOfRangeError(score, self.config.min_score, self.config.max_score)
        score = int(score)

        for band_range in self._ranges:
            if band_range.contains(score):
                return RiskClassification(score=score, band=band_range.band)

        raise ScoreOutOfRangeError(score, self.config.min_score, self.config.max_score)

    def classify_many(self, scores: Iterable[int]) -> List[RiskClassification]:
        return [self.classify(score) for score in scores]

    # ---- Group metrics ----

    def summarize(self, scores: Iterable[int]) -> GroupRiskSummary:
        """
        Build the risk distribution and statistics of a group.

        Raises:
            InsufficientDataError: if there are no scores
            ScoreOutOfRangeError: if any score is invalid
        """
        classifications = self.classify_many(scores)
        total = len(classifications)
        if total == 0:
            raise InsufficientDataError("Cannot summarize an empty group", available=0, required=1)

        counts: Dict[RiskBand, int] = {band: 0 for band in RiskBand.by_severity()}
        for classification in classifications:
            counts[classification.band] += 1

        distribution = {
            band: BandCount(count=count, percentage=count / total * 100)
            for band, count in counts.items()
        }
        high_risk_count = sum(1 for c in classifications if c.is_high_risk)
        values = [c.score for c in classifications]

        return GroupRiskSummary(
            total=total,
            distribution=distribution,
            high_risk_count=high_risk_count,
            high_risk_percentage=high_risk_count / total * 100,
            mean=statistics.fmean(values),
            median=float(statistics.median(values)),
            minimum=min(values),
            maximum=max(values),
        )

    # ---- At-risk respondents ----

    def bucket_latest(self, scored_responses: Iterable[Any]) -> Dict[RiskBand, RiskBucket]:
        """
        Bucket respondents by the band of their most recent response.

        Items need `respondent_id`, `submitted_at` and `risk` attributes.
        Within a bucket, the lowest score (worst wellbeing) comes first.
        """
        latest: Dict[str, Any] = {}
        for item in scored_responses:
            current = latest.get(item.respondent_id)
            if current is None or _sort_time(item) > _sort_time(current):
                latest[item.respondent_id] = item

        buckets = {band: RiskBucket(band=band) for band in RiskBand.by_severity()}
        for item in latest.values():
            buckets[item.risk.band].respondents.append(item)

        for bucket in buckets.values():
            bucket.respondents.sort(key=lambda i: (i.risk.score, str(i.respondent_id)))

        logger.debug(
            f"Bucketed {len(latest)} respondents: "
            + ", ".join(f"{band.value}={bucket.count}" for band, bucket in buckets.items())
        )
        return buckets


def _sort_time(item: Any) -> float:
    submitted_at = getattr(item, "submitted_at", None)
    return submitted_at.timestamp() if submitted_at is not None else float("-inf")


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def classify_score(score: int) -> RiskClassification:
    """Classify a score with the default band configuration."""
    return RiskClassifier().classify(score)
