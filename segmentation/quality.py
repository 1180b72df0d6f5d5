"""
Segmentation - Data Quality.

Scores how trustworthy a segment's data is:

- completeness: members with every completeness field filled
- consistency: members whose answers are not all identical
- recency: members who answered within the trailing window
- sample adequacy: label derived from member count
"""

from datetime import timedelta
from typing import Any, Optional, Sequence

from core.clock import ClockProtocol, SystemClock

from .config import SegmentationConfig
from .types import QualityScores, SampleAdequacy


class QualityScorer:
    """Computes QualityScores for a group of responses."""

    def __init__(
        self,
        config: Optional[SegmentationConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        self.config = config or SegmentationConfig()
        self._clock = clock or SystemClock()

    def sample_adequacy(self, size: int) -> SampleAdequacy:
        if size >= self.config.excellent_sample_size:
            return SampleAdequacy.EXCELLENT
        if size >= self.config.good_sample_size:
            return SampleAdequacy.GOOD
        if size >= self.config.acceptable_sample_size:
            return SampleAdequacy.ACCEPTABLE
        return SampleAdequacy.INSUFFICIENT

    def _is_complete(self, response: Any) -> bool:
        return all(
            not self.config.is_placeholder(response.demographics.get(name))
            for name in self.config.completeness_fields
        )

    @staticmethod
    def _is_consistent(response: Any) -> bool:
        # straight-lining: the same option for every question
        return len(set(response.answers.values())) > 1

    def score(self, responses: Sequence[Any]) -> QualityScores:
        size = len(responses)
        if size == 0:
            return QualityScores(0.0, 0.0, 0.0, 0, SampleAdequacy.INSUFFICIENT)

        cutoff = self._clock.now() - timedelta(days=self.config.recency_days)
        complete = sum(1 for r in responses if self._is_complete(r))
        consistent = sum(1 for r in responses if self._is_consistent(r))
        recent = sum(1 for r in responses if r.submitted_at is not None and r.submitted_at >= cutoff)

        return QualityScores(
            completeness=complete / size * 100,
            consistency=consistent / size * 100,
            recency=recent / size * 100,
            sample_size=size,
            sample_adequacy=self.sample_adequacy(size),
        )
