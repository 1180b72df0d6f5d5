"""
Segmentation - Monthly Trends.

Builds a monthly series of mean wellbeing score and high-risk
share from scored responses. The direction compares the last two
months: a higher mean score is better, so a rise beyond the
threshold is IMPROVING and a fall is WORSENING.
"""

import logging
import statistics
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import SegmentationConfig
from .types import TrendDirection, TrendPoint, TrendSeries


logger = logging.getLogger(__name__)


class TrendAnalyzer:
    """Monthly trend series over scored responses."""

    def __init__(self, config: Optional[SegmentationConfig] = None):
        self.config = config or SegmentationConfig()

    def series(self, scored: Sequence[Any]) -> TrendSeries:
        by_month: Dict[str, List[Any]] = defaultdict(list)
        undated = 0
        for item in scored:
            if item.submitted_at is None:
                undated += 1
                continue
            by_month[item.submitted_at.strftime("%Y-%m")].append(item)

        points = []
        for period in sorted(by_month):
            items = by_month[period]
            high_risk = sum(1 for item in items if item.risk.is_high_risk)
            points.append(
                TrendPoint(
                    period=period,
                    respondents=len({item.respondent_id for item in items}),
                    mean_score=statistics.fmean(item.score.total_score for item in items),
                    high_risk_percentage=high_risk / len(items) * 100,
                )
            )

        direction, change = self.direction(points)
        return TrendSeries(
            points=points,
            direction=direction,
            change_percentage=change,
            undated_responses=undated,
        )

    def direction(self, points: Sequence[TrendPoint]) -> Tuple[TrendDirection, Optional[float]]:
        """Direction and percentage change between the last two points."""
        if len(points) < 2:
            return TrendDirection.INSUFFICIENT_DATA, None

        previous, latest = points[-2].mean_score, points[-1].mean_score
        if previous == 0:
            change = 0.0 if latest == 0 else 100.0
        else:
            change = (latest - previous) / previous * 100

        if change > self.config.trend_threshold_pct:
            return TrendDirection.IMPROVING, change
        if change < -self.config.trend_threshold_pct:
            return TrendDirection.WORSENING, change
        return TrendDirection.STABLE, change
