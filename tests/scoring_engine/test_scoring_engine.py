"""
Tests for Scoring Engine.

============================================================
PURPOSE
============================================================
- Polarity handling and total range
- Validation reports every offending question
- Raw distress average as its own metric

============================================================
"""

import pytest

from core.constants import NEGATIVE_QUESTIONS, POSITIVE_QUESTIONS
from core.exceptions import AnswerValidationError, ConfigurationError, InsufficientDataError
from scoring_engine import (
    AnswerProblem,
    Polarity,
    RawDistressAverage,
    ScoreEngine,
    ScoringConfig,
    calculate_score,
    coerce_answer,
    DistressAverage,
    WellnessLevel,
)
from tests.helpers import expected_score, make_answers


@pytest.fixture
def engine():
    return ScoreEngine()


# ============================================================
# SCORE
# ============================================================

class TestScoreEngine:
    """Tests for ScoreEngine.score."""

    def test_best_answers_score_maximum(self, engine):
        result = engine.score(make_answers(positive=3, negative=0))
        assert result.total_score == 36
        assert result.percentage == 100.0

    def test_worst_answers_score_zero(self, engine):
        assert engine.score(make_answers(positive=0, negative=3)).total_score == 0

    def test_all_same_answer_scores_midpoint(self, engine):
        assert engine.score(make_answers(positive=0, negative=0)).total_score == 18
        assert engine.score(make_answers(positive=3, negative=3)).total_score == 18

    @pytest.mark.parametrize("positive,negative", [(1, 2), (2, 1), (1, 1), (0, 2)])
    def test_mixed_answers(self, engine, positive, negative):
        result = engine.score(make_answers(positive, negative))
        assert result.total_score == expected_score(positive, negative)

    def test_breakdown_matches_total(self, engine):
        result = engine.score(make_answers(positive=2, negative=1))
        assert len(result.breakdown) == 12
        assert sum(item.processed for item in result.breakdown) == result.total_score

        by_question = {item.question: item for item in result.breakdown}
        for question in POSITIVE_QUESTIONS:
            assert by_question[question].polarity == Polarity.POSITIVE
            assert by_question[question].processed == 2
        for question in NEGATIVE_QUESTIONS:
            assert by_question[question].polarity == Polarity.NEGATIVE
            assert by_question[question].processed == 2

    def test_integral_float_answers_accepted(self, engine):
        answers = make_answers(overrides={1: 3.0})
        assert engine.score(answers).total_score == 36

    def test_to_dict_shape(self, engine):
        data = engine.score(make_answers()).to_dict()
        assert data["total"] == 36
        assert data["percentage"] == 100.0
        assert data["breakdown"][1] == {"question": 2, "raw": 0, "processed": 3, "polarity": "negative"}

    def test_calculate_score_helper(self):
        assert calculate_score(make_answers(1, 2)).total_score == 12


# ============================================================
# VALIDATION
# ============================================================

class TestValidation:
    """Tests for answer validation."""

    def test_valid_set_has_no_issues(self, engine):
        assert engine.validate(make_answers()) == []
        assert engine.is_valid(make_answers())

    def test_every_missing_question_reported(self, engine):
        answers = make_answers()
        del answers[3]
        del answers[7]

        issues = engine.validate(answers)
        assert [(i.question, i.problem) for i in issues] == [
            (3, AnswerProblem.MISSING),
            (7, AnswerProblem.MISSING),
        ]

    def test_none_counts_as_missing(self, engine):
        issues = engine.validate(make_answers(overrides={5: None}))
        assert issues[0].problem == AnswerProblem.MISSING

    def test_out_of_range_and_non_integer(self, engine):
        issues = engine.validate(make_answers(overrides={1: 4, 2: -1, 3: "two", 4: 1.5, 5: True}))
        problems = {i.question: i.problem for i in issues}
        assert problems == {
            1: AnswerProblem.OUT_OF_RANGE,
            2: AnswerProblem.OUT_OF_RANGE,
            3: AnswerProblem.NOT_INTEGER,
            4: AnswerProblem.NOT_INTEGER,
            5: AnswerProblem.NOT_INTEGER,
        }

    def test_unexpected_question_reported(self, engine):
        issues = engine.validate(make_answers(overrides={13: 2}))
        assert len(issues) == 1
        assert issues[0].problem == AnswerProblem.UNEXPECTED_QUESTION
        assert "not part of the questionnaire" in str(issues[0])

    def test_score_raises_with_all_issues(self, engine):
        answers = make_answers(overrides={1: 9})
        del answers[12]

        with pytest.raises(AnswerValidationError) as exc_info:
            engine.score(answers)

        assert len(exc_info.value.issues) == 2
        assert exc_info.value.errors == [
            "Question 1: 9 is outside [0, 3]",
            "Question 12: answer is missing",
        ]

    def test_coerce_answer(self):
        assert coerce_answer(2) == 2
        assert coerce_answer(2.0) == 2
        assert coerce_answer(2.5) is None
        assert coerce_answer(False) is None
        assert coerce_answer("2") is None


# ============================================================
# CONFIGURATION
# ============================================================

class TestScoringConfig:
    """Tests for ScoringConfig."""

    def test_overlapping_polarity_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig(
                positive_questions=frozenset({1, 2, 3, 4, 7, 8, 12}),
                negative_questions=frozenset({2, 5, 6, 9, 10, 11}),
            )

    def test_incomplete_polarity_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig(positive_questions=frozenset({1, 3}))

    def test_polarity_of(self):
        config = ScoringConfig()
        assert config.polarity_of(1) == Polarity.POSITIVE
        assert config.polarity_of(2) == Polarity.NEGATIVE


# ============================================================
# DISTRESS AVERAGE
# ============================================================

class TestRawDistressAverage:
    """Tests for RawDistressAverage."""

    def test_average_of_raw_answers_without_inversion(self):
        result = RawDistressAverage().compute(make_answers(positive=3, negative=0))
        assert result.average == 1.5
        assert result.answer_count == 12
        assert result.wellbeing_index == 50.0

    def test_unusable_answers_skipped(self):
        result = RawDistressAverage().compute({1: 3, 2: "x", 3: 7, 4: 0})
        assert result.answer_count == 2
        assert result.average == 1.5

    def test_no_usable_answers(self):
        with pytest.raises(InsufficientDataError):
            RawDistressAverage().compute({1: "x"})

    def test_population_weights_each_answer(self):
        result = RawDistressAverage().population([{1: 3, 2: 3}, {1: 0}, {}])
        assert result.respondent_count == 2
        assert result.answer_count == 3
        assert result.average == 2.0

    def test_empty_population(self):
        with pytest.raises(InsufficientDataError):
            RawDistressAverage().population([])

    def test_wellbeing_index_bounds(self):
        assert RawDistressAverage().compute({1: 0}).wellbeing_index == 100.0
        assert RawDistressAverage().compute({1: 3}).wellbeing_index == 0.0

    @pytest.mark.parametrize(
        "average,level",
        [
            (0.0, WellnessLevel.EXCELLENT),
            (1.0, WellnessLevel.EXCELLENT),
            (1.2, WellnessLevel.GOOD),
            (1.5, WellnessLevel.GOOD),
            (2.0, WellnessLevel.REGULAR),
            (2.01, WellnessLevel.NEEDS_ATTENTION),
            (3.0, WellnessLevel.NEEDS_ATTENTION),
        ],
    )
    def test_wellness_level(self, average, level):
        assert DistressAverage(average=average, answer_count=12).level == level

    def test_level_serialized(self):
        result = RawDistressAverage().compute(make_answers(positive=3, negative=0))
        assert result.to_dict()["level"] == "GOOD"
