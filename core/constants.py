"""
Core Module - Constants.

============================================================
RESPONSIBILITY
============================================================
Defines the questionnaire constants shared across packages.

- Single source of truth for the GHQ-12 shape
- No business logic here

============================================================
"""

from typing import FrozenSet, Tuple


# ============================================================
# QUESTIONNAIRE SHAPE
# ============================================================

QUESTION_COUNT: int = 12
"""Number of items in the questionnaire."""

QUESTION_INDICES: Tuple[int, ...] = tuple(range(1, QUESTION_COUNT + 1))
"""Question indices, 1-based."""

MIN_ANSWER: int = 0
MAX_ANSWER: int = 3
"""Inclusive answer range on the 4-point Likert scale."""

ANSWER_OPTIONS: Tuple[int, ...] = tuple(range(MIN_ANSWER, MAX_ANSWER + 1))

MIN_TOTAL_SCORE: int = 0
MAX_TOTAL_SCORE: int = QUESTION_COUNT * MAX_ANSWER
"""Inclusive range of the wellbeing total score (0-36)."""


# ============================================================
# QUESTION POLARITY
# ============================================================

POSITIVE_QUESTIONS: FrozenSet[int] = frozenset({1, 3, 4, 7, 8, 12})
"""Items where a higher raw answer already means better wellbeing."""

NEGATIVE_QUESTIONS: FrozenSet[int] = frozenset({2, 5, 6, 9, 10, 11})
"""Items whose raw answer is inverted (3 - raw) before summing."""


# ============================================================
# POPULATION RULES
# ============================================================

MIN_SEGMENT_SIZE: int = 3
"""Segments below this size are excluded to protect anonymity."""

MIN_CORRELATION_SAMPLE: int = 2
"""Pearson needs at least two paired observations."""

WELLNESS_THRESHOLDS: Tuple[Tuple[str, float], ...] = (
    ("EXCELLENT", 1.0),
    ("GOOD", 1.5),
    ("REGULAR", 2.0),
)
"""Upper bounds (inclusive) of the raw distress average per wellness level."""

UNSPECIFIED: str = "Sin especificar"
"""Label used for missing demographic values in distributions."""
