"""
Scoring Engine - Wellbeing Score.

============================================================
RESPONSIBILITY
============================================================
Validates a 12-item answer set and computes its wellbeing total.

- Every question 1..12 must be answered with an integer 0-3
- Positive items contribute raw, negative items contribute 3 - raw
- Total is 0-36, higher = better wellbeing

============================================================
DESIGN PRINCIPLES
============================================================
- Pure: no I/O, no clock, no shared state
- Transparent score decomposition (per-question breakdown)
- Validation reports every offending question at once

============================================================
USAGE
============================================================
    engine = ScoreEngine()
    result = engine.score({1: 3, 2: 0, 3: 3, ...})
    result.total_score  # 36

============================================================
"""

import logging
from numbers import Integral, Real
from typing import Any, List, Mapping, Optional

from core.constants import MAX_ANSWER, MIN_ANSWER, QUESTION_INDICES
from core.exceptions import AnswerValidationError

from .config import ScoringConfig
from .types import AnswerIssue, AnswerProblem, QuestionBreakdown, ScoreResult


logger = logging.getLogger(__name__)


def coerce_answer(value: Any) -> Optional[int]:
    """
    Return the integer value of an answer, or None when it is not one.

    Integral floats (2.0) are accepted, booleans are not.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real) and float(value).is_integer():
        return int(value)
    return None


class ScoreEngine:
    """
    Scores questionnaire answer sets.

    The engine is stateless apart from its polarity configuration and
    is safe to share between callers.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def validate(self, answers: Mapping[Any, Any]) -> List[AnswerIssue]:
        """
        Check an answer set.

        Returns:
            Every issue found; an empty list means the set is valid.
        """
        issues: List[AnswerIssue] = []

        for question in QUESTION_INDICES:
            if question not in answers or answers[question] is None:
                issues.append(AnswerIssue(question, AnswerProblem.MISSING))
                continue
            raw = answers[question]
            value = coerce_answer(raw)
            if value is None:
                issues.append(AnswerIssue(question, AnswerProblem.NOT_INTEGER, raw))
            elif not MIN_ANSWER <= value <= MAX_ANSWER:
                issues.append(AnswerIssue(question, AnswerProblem.OUT_OF_RANGE, raw))

        expected = set(QUESTION_INDICES)
        for key in answers:
            if isinstance(key, bool) or key not in expected:
                issues.append(AnswerIssue(key, AnswerProblem.UNEXPECTED_QUESTION, answers[key]))

        return issues

    def is_valid(self, answers: Mapping[Any, Any]) -> bool:
        return not self.validate(answers)

    def score(self, answers: Mapping[Any, Any]) -> ScoreResult:
        """
        Score a complete answer set.

        Raises:
            AnswerValidationError: listing every invalid question
        """
        issues = self.validate(answers)
        if issues:
            raise AnswerValidationError(
                f"Answer set has {len(issues)} invalid question(s)",
                issues=issues,
            )

        breakdown = []
        for question in QUESTION_INDICES:
            raw = coerce_answer(answers[question])
            polarity = self.config.polarity_of(question)
            breakdown.append(
                QuestionBreakdown(
                    question=question,
                    raw=raw,
                    processed=polarity.process(raw),
                    polarity=polarity,
                )
            )

        total = sum(item.processed for item in breakdown)
        logger.debug(f"Scored answer set: total={total}")
        return ScoreResult(total_score=total, breakdown=tuple(breakdown))


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def calculate_score(answers: Mapping[Any, Any]) -> ScoreResult:
    """Score an answer set with the default configuration."""
    return ScoreEngine().score(answers)
