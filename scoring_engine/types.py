"""
Scoring Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for questionnaire scoring.

Two scoring conventions exist and are kept apart on purpose:

- ScoreResult: the wellbeing total (0-36, higher = better) with
  negative-polarity items inverted
- DistressAverage: the plain mean of raw answers (0-3,
  lower = better), no inversion

They are never interchangeable.

============================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from core.constants import MAX_ANSWER, MAX_TOTAL_SCORE, WELLNESS_THRESHOLDS


# ============================================================
# ENUMS
# ============================================================


class Polarity(str, Enum):
    """Direction of a questionnaire item."""

    POSITIVE = "positive"
    NEGATIVE = "negative"

    def process(self, raw: int) -> int:
        """Convert a raw answer into its wellbeing contribution."""
        if self is Polarity.NEGATIVE:
            return MAX_ANSWER - raw
        return raw


class WellnessLevel(str, Enum):
    """Wellness level of a raw distress average."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    REGULAR = "REGULAR"
    NEEDS_ATTENTION = "NEEDS_ATTENTION"

    @classmethod
    def for_average(cls, average: float) -> "WellnessLevel":
        for name, upper in WELLNESS_THRESHOLDS:
            if average <= upper:
                return cls(name)
        return cls.NEEDS_ATTENTION


class AnswerProblem(str, Enum):
    """Kinds of answer validation failures."""

    MISSING = "missing"
    NOT_INTEGER = "not_integer"
    OUT_OF_RANGE = "out_of_range"
    UNEXPECTED_QUESTION = "unexpected_question"


# ============================================================
# VALIDATION
# ============================================================


@dataclass(frozen=True)
class AnswerIssue:
    """One problem found in an answer set."""

    question: Any
    problem: AnswerProblem
    value: Any = None

    def __str__(self) -> str:
        if self.problem == AnswerProblem.MISSING:
            return f"Question {self.question}: answer is missing"
        if self.problem == AnswerProblem.NOT_INTEGER:
            return f"Question {self.question}: {self.value!r} is not an integer"
        if self.problem == AnswerProblem.OUT_OF_RANGE:
            return f"Question {self.question}: {self.value!r} is outside [0, {MAX_ANSWER}]"
        return f"Question {self.question!r}: not part of the questionnaire"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "problem": self.problem.value,
            "value": self.value,
            "message": str(self),
        }


# ============================================================
# SCORE RESULT
# ============================================================


@dataclass(frozen=True)
class QuestionBreakdown:
    """Raw and processed value of one question."""

    question: int
    raw: int
    processed: int
    polarity: Polarity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "raw": self.raw,
            "processed": self.processed,
            "polarity": self.polarity.value,
        }


@dataclass(frozen=True)
class ScoreResult:
    """
    Wellbeing score of one complete answer set.

    Invariant: total_score == sum(b.processed for b in breakdown)
    and lies in [0, 36].
    """

    total_score: int
    breakdown: Tuple[QuestionBreakdown, ...]

    @property
    def percentage(self) -> float:
        """Total as a percentage of the maximum score."""
        return self.total_score / MAX_TOTAL_SCORE * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total_score,
            "breakdown": [b.to_dict() for b in self.breakdown],
            "percentage": round(self.percentage, 2),
        }


# ============================================================
# DISTRESS AVERAGE
# ============================================================


@dataclass(frozen=True)
class DistressAverage:
    """
    Mean raw answer (0-3). Lower means better wellbeing.

    Attributes:
        average: Mean of all raw answers counted
        answer_count: Number of answers averaged
        respondent_count: Distinct respondents contributing
    """

    average: float
    answer_count: int
    respondent_count: int = 1

    @property
    def wellbeing_index(self) -> float:
        """Distress average rescaled to 0-100 where 100 is best."""
        index = (MAX_ANSWER - self.average) / MAX_ANSWER * 100
        return max(0.0, min(100.0, index))

    @property
    def level(self) -> WellnessLevel:
        return WellnessLevel.for_average(self.average)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average": round(self.average, 3),
            "answer_count": self.answer_count,
            "respondent_count": self.respondent_count,
            "wellbeing_index": round(self.wellbeing_index, 1),
            "level": self.level.value,
        }


__all__ = [
    "Polarity",
    "AnswerProblem",
    "WellnessLevel",
    "AnswerIssue",
    "QuestionBreakdown",
    "ScoreResult",
    "DistressAverage",
]
