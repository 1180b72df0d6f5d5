"""
Scoring Engine - Configuration.

The polarity split of the questionnaire. Positive items contribute
their raw answer; negative items contribute 3 - raw.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet

from core.constants import NEGATIVE_QUESTIONS, POSITIVE_QUESTIONS, QUESTION_INDICES
from core.exceptions import ConfigurationError

from .types import Polarity


@dataclass(frozen=True)
class ScoringConfig:
    """
    Question polarity configuration.

    The two sets must be disjoint and together cover questions 1..12.
    """

    positive_questions: FrozenSet[int] = POSITIVE_QUESTIONS
    negative_questions: FrozenSet[int] = NEGATIVE_QUESTIONS

    def __post_init__(self) -> None:
        overlap = self.positive_questions & self.negative_questions
        if overlap:
            raise ConfigurationError(
                f"Questions {sorted(overlap)} are both positive and negative",
                config_key="negative_questions",
            )
        covered = self.positive_questions | self.negative_questions
        if covered != frozenset(QUESTION_INDICES):
            raise ConfigurationError(
                f"Polarity sets must cover questions 1-{len(QUESTION_INDICES)} exactly, "
                f"got {sorted(covered)}",
                config_key="positive_questions",
            )

    def polarity_of(self, question: int) -> Polarity:
        if question in self.negative_questions:
            return Polarity.NEGATIVE
        return Polarity.POSITIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "positive_questions": sorted(self.positive_questions),
            "negative_questions": sorted(self.negative_questions),
        }


def get_default_config() -> ScoringConfig:
    """Get the standard GHQ-12 polarity configuration."""
    return ScoringConfig()
