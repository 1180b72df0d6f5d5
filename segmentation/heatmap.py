"""
Segmentation - Response Heatmap.

For every question and every group, counts how often each answer
option (0-3) was chosen. An option is a risk answer when it points
toward distress: 2-3 on negative questions, 0-1 on positive ones.
Groups below the anonymity threshold are excluded with a reason.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from core.constants import ANSWER_OPTIONS, QUESTION_INDICES
from scoring_engine.config import ScoringConfig
from scoring_engine.types import Polarity
from scoring_engine.wellbeing_score import coerce_answer

from .config import SegmentationConfig
from .demographics import group_value
from .types import ExcludedSegment, Heatmap, HeatmapCell, HeatmapRow


logger = logging.getLogger(__name__)


def risk_options(polarity: Polarity) -> List[int]:
    if polarity is Polarity.NEGATIVE:
        return [option for option in ANSWER_OPTIONS if option >= 2]
    return [option for option in ANSWER_OPTIONS if option <= 1]


class HeatmapBuilder:
    """Builds question x group answer distributions."""

    def __init__(
        self,
        config: Optional[SegmentationConfig] = None,
        scoring_config: Optional[ScoringConfig] = None,
    ):
        self.config = config or SegmentationConfig()
        self.scoring_config = scoring_config or ScoringConfig()

    def build(self, responses: Sequence[Any], group_by: str) -> Heatmap:
        """
        Build a heatmap from responses that already passed the validity gate.
        """
        groups: Dict[str, List[Any]] = defaultdict(list)
        for response in responses:
            key = group_value(response, group_by)
            if key is not None:
                groups[key].append(response)

        heatmap = Heatmap(group_by=group_by)
        kept: Dict[str, List[Any]] = {}
        for key in sorted(groups):
            members = groups[key]
            if len(members) < self.config.min_segment_size:
                heatmap.excluded_groups.append(
                    ExcludedSegment(
                        key=key,
                        member_count=len(members),
                        reason=(
                            f"insufficient participants: {len(members)} "
                            f"(minimum {self.config.min_segment_size})"
                        ),
                    )
                )
            else:
                kept[key] = members

        heatmap.groups = list(kept)
        for question in QUESTION_INDICES:
            polarity = self.scoring_config.polarity_of(question)
            risky = risk_options(polarity)
            cells = [self._cell(key, members, question, risky) for key, members in kept.items()]
            heatmap.rows.append(HeatmapRow(question=question, polarity=polarity.value, cells=cells))

        logger.debug(f"Heatmap by {group_by}: {len(kept)} groups, {len(heatmap.excluded_groups)} excluded")
        return heatmap

    @staticmethod
    def _cell(group: str, members: Sequence[Any], question: int, risky: List[int]) -> HeatmapCell:
        counts = {option: 0 for option in ANSWER_OPTIONS}
        values = []
        for response in members:
            value = coerce_answer(response.answers.get(question))
            if value in counts:
                counts[value] += 1
                values.append(value)

        total = len(values)
        percentages = {
            option: (count / total * 100 if total else 0.0) for option, count in counts.items()
        }
        risk_count = sum(counts[option] for option in risky)
        return HeatmapCell(
            group=group,
            total=total,
            option_counts=counts,
            option_percentages=percentages,
            risk_options=risky,
            average_answer=sum(values) / total if total else 0.0,
            risk_percentage=risk_count / total * 100 if total else 0.0,
        )
