"""
Scoring Engine Package.

This package turns questionnaire answers into scores.

Modules:
- wellbeing_score: 12-item validation and 0-36 wellbeing total
- distress_average: mean raw answer (0-3, lower = better)
- config: question polarity sets
- types: score contracts
"""

from .config import ScoringConfig, get_default_config
from .distress_average import RawDistressAverage
from .types import (
    AnswerIssue,
    AnswerProblem,
    DistressAverage,
    Polarity,
    QuestionBreakdown,
    ScoreResult,
    WellnessLevel,
)
from .wellbeing_score import ScoreEngine, calculate_score, coerce_answer


__all__ = [
    "ScoreEngine",
    "RawDistressAverage",
    "ScoringConfig",
    "get_default_config",
    "AnswerIssue",
    "AnswerProblem",
    "DistressAverage",
    "Polarity",
    "QuestionBreakdown",
    "ScoreResult",
    "WellnessLevel",
    "calculate_score",
    "coerce_answer",
]
