"""
Tests for Correlation Engine.

============================================================
PURPOSE
============================================================
- Pearson coefficient, strength and direction
- Degenerate inputs reported with a status, never a fake 0
- Pair isolation inside the registry
- Insight generation

============================================================
"""

import pytest

from core.exceptions import ConfigurationError
from correlation_engine import (
    CorrelationConfig,
    CorrelationDirection,
    CorrelationEngine,
    CorrelationStrength,
    DataStatus,
    VariableExtractor,
    VariablePair,
    finite_number,
)
from tests.helpers import make_response, make_scored


@pytest.fixture
def engine():
    return CorrelationEngine()


def scored_with(respondent_id, positive, negative, **attributes):
    return make_scored(make_response(respondent_id, positive, negative, attributes=attributes))


# ============================================================
# PEARSON
# ============================================================

class TestCorrelate:
    """Tests for CorrelationEngine.correlate."""

    def test_perfect_positive(self, engine):
        result = engine.correlate("p", [1, 2, 3], [2, 4, 6])
        assert result.coefficient == pytest.approx(1.0)
        assert result.strength == CorrelationStrength.VERY_STRONG
        assert result.direction == CorrelationDirection.POSITIVE
        assert result.data_status == DataStatus.VALID
        assert result.sample_size == 3

    def test_doubling_series(self, engine):
        result = engine.correlate("p", [1, 2, 3, 4], [2, 4, 6, 8])
        assert result.coefficient == pytest.approx(1.0)
        assert result.strength == CorrelationStrength.VERY_STRONG
        assert result.direction == CorrelationDirection.POSITIVE
        assert result.sample_size == 4

    def test_series_with_itself(self, engine):
        x = [3.5, 1.0, 7.25, 2.0, 9.0]
        assert engine.correlate("p", x, x).coefficient == 1.0

    def test_symmetric(self, engine):
        x = [36, 12, 0, 24, 30, 18]
        y = [5, 3, 1, 4, 4, 2]
        assert engine.correlate("p", x, y).coefficient == engine.correlate("p", y, x).coefficient

    def test_large_offset_keeps_precision(self, engine):
        x = [1e9 + i for i in range(1, 11)]
        y = [float(i) for i in range(1, 11)]

        result = engine.correlate("p", x, y)

        assert result.data_status == DataStatus.VALID
        assert result.coefficient == pytest.approx(1.0)

    def test_perfect_negative(self, engine):
        result = engine.correlate("p", [1, 2, 3, 4], [8, 6, 4, 2])
        assert result.coefficient == pytest.approx(-1.0)
        assert result.direction == CorrelationDirection.NEGATIVE

    def test_coefficient_stays_in_bounds(self, engine):
        x = [0.1 * i for i in range(50)]
        y = [3 * v + 7 for v in x]
        result = engine.correlate("p", x, y)
        assert -1.0 <= result.coefficient <= 1.0

    def test_uncorrelated_is_neutral(self, engine):
        result = engine.correlate("p", [1, 2, 3, 4], [1, 3, 3, 1])
        assert result.coefficient == pytest.approx(0.0)
        assert result.direction == CorrelationDirection.NEUTRAL
        assert result.strength == CorrelationStrength.VERY_WEAK

    def test_constant_series_is_insufficient(self, engine):
        result = engine.correlate("p", [5, 5, 5], [1, 2, 3])
        assert result.data_status == DataStatus.INSUFFICIENT_DATA
        assert result.coefficient is None
        assert "variance" in result.reason

    def test_too_few_points(self, engine):
        result = engine.correlate("p", [1], [2])
        assert result.data_status == DataStatus.INSUFFICIENT_DATA
        assert result.sample_size == 1

    def test_length_mismatch(self, engine):
        result = engine.correlate("p", [1, 2, 3], [1, 2])
        assert result.data_status == DataStatus.INSUFFICIENT_DATA
        assert "mismatch" in result.reason

    def test_overflow_is_calculation_error(self, engine):
        result = engine.correlate("p", [1e200, 2e200, 3e200], [1e200, 3e200, 2e200])
        assert result.data_status == DataStatus.CALCULATION_ERROR
        assert result.coefficient is None

    @pytest.mark.parametrize(
        "r,strength",
        [
            (0.85, CorrelationStrength.VERY_STRONG),
            (0.65, CorrelationStrength.STRONG),
            (-0.45, CorrelationStrength.MODERATE),
            (0.25, CorrelationStrength.WEAK),
            (0.05, CorrelationStrength.VERY_WEAK),
        ],
    )
    def test_strength_thresholds(self, engine, r, strength):
        assert engine.classify_strength(r) == strength


# ============================================================
# EXTRACTION
# ============================================================

class TestVariableExtractor:
    """Tests for VariableExtractor."""

    def test_finite_number(self):
        assert finite_number(3) == 3.0
        assert finite_number(float("nan")) is None
        assert finite_number(float("inf")) is None
        assert finite_number(True) is None
        assert finite_number("3") is None

    def test_incomplete_records_dropped_together(self):
        items = [
            scored_with("a", 3, 0, satisfaccion_laboral=4),
            scored_with("b", 1, 2),
            scored_with("c", 2, 1, satisfaccion_laboral=2),
        ]
        pair = VariablePair("p", "wellbeing_score", "satisfaccion_laboral")

        xs, ys, dropped = VariableExtractor().extract_pair(items, pair)

        assert xs == [36.0, 24.0]
        assert ys == [4.0, 2.0]
        assert dropped == 1

    def test_demographic_variables(self):
        item = make_scored(make_response("a", age=40, tenure_years=7.5))
        extractor = VariableExtractor()
        assert extractor.value(item, "age") == 40.0
        assert extractor.value(item, "tenure_years") == 7.5
        assert extractor.value(item, "distress_average") == 1.5


# ============================================================
# REGISTRY
# ============================================================

class TestRegistry:
    """Tests for correlate_registry."""

    def test_each_pair_isolated(self, engine):
        items = [
            scored_with("a", 3, 0, satisfaccion_laboral=5),
            scored_with("b", 2, 1, satisfaccion_laboral=4),
            scored_with("c", 1, 2, satisfaccion_laboral=2),
        ]

        report = engine.correlate_registry(items)
        by_id = {r.pair_id: r for r in report.results}

        assert by_id["wellbeing_vs_job_satisfaction"].data_status == DataStatus.VALID
        assert by_id["wellbeing_vs_safety_motivation"].data_status == DataStatus.INSUFFICIENT_DATA
        assert by_id["wellbeing_vs_safety_motivation"].dropped_records == 3
        assert report.total_respondents == 3
        assert report.average_score == 24.0
        assert report.valid_count == len([r for r in report.results if r.is_valid])

    def test_failing_extractor_does_not_break_other_pairs(self):
        def broken(item):
            raise RuntimeError("boom")

        engine = CorrelationEngine(extractor=VariableExtractor({"broken": broken}))
        pairs = [
            VariablePair("bad", "broken", "wellbeing_score"),
            VariablePair("good", "wellbeing_score", "age"),
        ]
        items = [
            make_scored(make_response("a", 3, 0, age=50)),
            make_scored(make_response("b", 1, 2, age=30)),
        ]

        report = engine.correlate_registry(items, pairs)

        assert report.results[0].data_status == DataStatus.CALCULATION_ERROR
        assert "boom" in report.results[0].reason
        assert report.results[1].data_status == DataStatus.VALID

    def test_insights_for_strong_and_negative(self, engine):
        items = [
            make_scored(make_response("a", 3, 0, tenure_years=1)),
            make_scored(make_response("b", 2, 1, tenure_years=5)),
            make_scored(make_response("c", 1, 2, tenure_years=10)),
        ]
        pairs = [VariablePair("tenure_vs_wellbeing", "tenure_years", "wellbeing_score")]

        report = engine.correlate_registry(items, pairs)
        kinds = [i.kind for i in report.insights]

        assert kinds == ["strong_correlation", "negative_correlation"]
        assert report.insights[1].message.startswith("As tenure_years increases")

    def test_empty_population(self, engine):
        report = engine.correlate_registry([])
        assert report.valid_count == 0
        assert report.average_score is None
        assert all(r.data_status == DataStatus.INSUFFICIENT_DATA for r in report.results)


class TestCorrelationConfig:
    """Tests for CorrelationConfig."""

    def test_duplicate_pairs_rejected(self):
        pair = VariablePair("p", "a", "b")
        with pytest.raises(ConfigurationError):
            CorrelationConfig(pairs=(pair, pair))

    def test_thresholds_must_descend(self):
        with pytest.raises(ConfigurationError):
            CorrelationConfig(strong_threshold=0.9)

    def test_pair_lookup(self):
        assert CorrelationConfig().pair("age_vs_tenure").y == "tenure_years"
        assert CorrelationConfig().pair("missing") is None
