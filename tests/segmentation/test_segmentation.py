"""
Tests for Segmentation.

============================================================
PURPOSE
============================================================
- Validity gate and anonymity threshold
- Segment aggregates and ranking
- Failure isolation per segment
- Quality scores, monthly trends and heatmap

============================================================
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from core.clock import MockClock
from core.constants import UNSPECIFIED
from core.exceptions import CalculationError, ValidationError
from risk_scoring import RiskBand
from segmentation import (
    HeatmapBuilder,
    QualityScorer,
    SampleAdequacy,
    SegmentationAggregator,
    SegmentationConfig,
    SegmentValidator,
    TrendAnalyzer,
    TrendDirection,
    age_bucket,
    build_profile,
    validate_group_by,
)
from tests.helpers import JAN_10, make_response, make_scored


@pytest.fixture
def clock():
    return MockClock(datetime(2024, 1, 20, tzinfo=timezone.utc))


@pytest.fixture
def aggregator(clock):
    return SegmentationAggregator(clock=clock)


@pytest.fixture
def population():
    return [
        make_response("o1", 3, 0, department="Ops"),
        make_response("o2", 1, 2, department="Ops"),
        make_response("o3", 0, 3, department="Ops"),
        make_response("h1", 3, 0, department="HR"),
        make_response("h2", 3, 0, department="HR"),
        make_response("h3", 2, 1, department="HR"),
        make_response("f1", 3, 0, department="Finance"),
        make_response("f2", 3, 0, department="Finance"),
        make_response("x1", 3, 0, department="Sin especificar"),
        make_response("x2", 3, 0, department="Ops", answers={1: 3}),
    ]


# ============================================================
# VALIDITY GATE
# ============================================================

class TestSegmentValidator:
    """Tests for SegmentValidator."""

    def test_valid_response(self):
        assert SegmentValidator().reasons(make_response(), "department") == []

    def test_every_reason_reported(self):
        response = make_response(position=None, department="n/a", answers={1: 9})
        reasons = SegmentValidator().reasons(response, "department")

        assert "Question 1: 9 is outside [0, 3]" in reasons
        assert "Question 2: answer is missing" in reasons
        assert "placeholder value for department: 'n/a'" in reasons
        assert "missing position" in reasons

    def test_group_field_required(self):
        reasons = SegmentValidator().reasons(make_response(shift=None), "shift")
        assert reasons == ["missing shift"]

    def test_split_report(self, population):
        valid, failures, report = SegmentValidator().split(population, "department")
        assert len(valid) == 8
        assert [f.respondent_id for f in failures] == ["x1", "x2"]
        assert report.error_rate == 20.0


# ============================================================
# AGGREGATION
# ============================================================

class TestSegmentationAggregator:
    """Tests for SegmentationAggregator.aggregate."""

    def test_small_groups_excluded_with_reason(self, aggregator, population):
        result = aggregator.aggregate(population, "department")

        assert [s.key for s in result.segments] == ["Ops", "HR"]
        assert len(result.excluded_segments) == 1
        excluded = result.excluded_segments[0]
        assert excluded.key == "Finance"
        assert excluded.member_count == 2
        assert excluded.reason == "insufficient participants: 2 (minimum 3)"

    def test_segment_aggregates(self, aggregator, population):
        result = aggregator.aggregate(population, "department")
        ops = result.segments[0]

        assert ops.member_count == 3
        assert ops.mean_score == 16.0
        assert ops.median_score == 12.0
        assert (ops.min_score, ops.max_score) == (0, 36)
        assert ops.high_risk_count == 2
        assert ops.high_risk_percentage == pytest.approx(66.666, rel=1e-3)
        assert ops.risk_distribution[RiskBand.VERY_HIGH].count == 1

    def test_ranking_by_high_risk_share(self, aggregator, population):
        result = aggregator.aggregate(population, "department")
        assert [(s.rank, s.key) for s in result.segments] == [(1, "Ops"), (2, "HR")]
        assert result.summary.highest_risk_segment == "Ops"
        assert result.summary.lowest_risk_segment == "HR"
        assert result.summary.total_participants == 6

    def test_ties_broken_by_lower_mean(self, aggregator):
        responses = [make_response(f"a{i}", 2, 1, department="A") for i in range(3)]
        responses += [make_response(f"b{i}", 1, 1, department="B") for i in range(3)]

        result = aggregator.aggregate(responses, "department")
        assert [s.key for s in result.segments] == ["B", "A"]

    def test_invalid_respondents_never_aggregated(self, aggregator, population):
        result = aggregator.aggregate(population, "department")
        assert result.validation.invalid_responses == 2
        assert {f.respondent_id for f in result.validation_errors} == {"x1", "x2"}
        assert all(s.key != "Sin especificar" for s in result.segments)

    def test_segment_failure_isolated(self, aggregator, population):
        real_score = aggregator.quality.score

        def flaky(responses):
            if responses[0].demographics.department == "Ops":
                raise RuntimeError("boom")
            return real_score(responses)

        with patch.object(aggregator.quality, "score", side_effect=flaky):
            result = aggregator.aggregate(population, "department")

        assert [s.key for s in result.segments] == ["HR"]
        reasons = {e.key: e.reason for e in result.excluded_segments}
        assert reasons["Ops"] == "calculation error: boom"
        assert result.segments[0].rank == 1

    def test_segment_failure_raised_as_calculation_error(self, aggregator, population):
        members = [aggregator._score(r) for r in population if r.demographics.department == "HR"]

        with patch.object(aggregator.quality, "score", side_effect=RuntimeError("boom")):
            with pytest.raises(CalculationError) as exc_info:
                aggregator._build_segment("HR", members)

        assert exc_info.value.context == {"segment": "HR"}
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_every_valid_response_accounted_for(self, aggregator, population):
        result = aggregator.aggregate(population, "department")

        included = sum(s.member_count for s in result.segments)
        excluded = sum(e.member_count for e in result.excluded_segments)
        assert result.validation.valid_responses == 8
        assert included + excluded == result.validation.valid_responses

    def test_accounting_holds_when_a_segment_fails(self, aggregator, population):
        with patch.object(aggregator, "_aggregate_members", side_effect=RuntimeError("boom")):
            result = aggregator.aggregate(population, "department")

        assert result.segments == []
        assert sum(e.member_count for e in result.excluded_segments) == result.validation.valid_responses

    def test_group_by_age_group(self, aggregator):
        responses = [make_response(f"y{i}", age=22) for i in range(3)]
        responses += [make_response(f"o{i}", age=None) for i in range(3)]

        result = aggregator.aggregate(responses, "age_group")

        assert [s.key for s in result.segments] == ["18-25"]
        assert len(result.validation_errors) == 3
        assert result.validation_errors[0].reasons == ["missing age_group"]

    def test_unknown_group_by_rejected(self, aggregator):
        with pytest.raises(ValidationError):
            aggregator.aggregate([], "salary")
        with pytest.raises(ValidationError):
            validate_group_by("salary")

    def test_empty_population(self, aggregator):
        result = aggregator.aggregate([], "department")
        assert result.segments == []
        assert result.summary.segment_count == 0
        assert result.summary.highest_risk_segment is None

    def test_to_dict_serializes_bands(self, aggregator, population):
        data = aggregator.aggregate(population, "department").to_dict()
        assert data["segments"][0]["distribution"]["VERY_HIGH"]["count"] == 1
        assert data["validation"]["error_rate"] == 20.0


# ============================================================
# DEMOGRAPHICS & QUALITY
# ============================================================

class TestDemographics:
    """Tests for age buckets and profiles."""

    @pytest.mark.parametrize(
        "age,bucket",
        [(18, "18-25"), (25, "18-25"), (26, "26-35"), (45, "36-45"), (60, "56+"), (None, UNSPECIFIED), (15, UNSPECIFIED)],
    )
    def test_age_bucket(self, age, bucket):
        assert age_bucket(age) == bucket

    def test_profile_counts_placeholders_as_unspecified(self):
        responses = [
            make_response("a", gender="F", tenure_years=2),
            make_response("b", gender="unknown", tenure_years=4),
            make_response("c", gender=None, tenure_years=None),
        ]
        profile = build_profile(responses, SegmentationConfig())

        assert profile.genders == {UNSPECIFIED: 2, "F": 1}
        assert profile.age_groups["26-35"] == 3
        assert profile.mean_tenure_years == 3.0


class TestQualityScorer:
    """Tests for QualityScorer."""

    def test_scores(self, clock):
        responses = [
            make_response("a"),
            make_response("b", positive=2, negative=2),
            make_response("c", gender=None, submitted_at=JAN_10 - timedelta(days=60)),
            make_response("d", submitted_at=None),
        ]

        quality = QualityScorer(clock=clock).score(responses)

        assert quality.completeness == 75.0
        assert quality.consistency == 75.0
        assert quality.recency == 50.0
        assert quality.sample_adequacy == SampleAdequacy.INSUFFICIENT

    @pytest.mark.parametrize(
        "size,adequacy",
        [(30, SampleAdequacy.EXCELLENT), (15, SampleAdequacy.GOOD), (5, SampleAdequacy.ACCEPTABLE), (4, SampleAdequacy.INSUFFICIENT)],
    )
    def test_sample_adequacy(self, size, adequacy):
        assert QualityScorer().sample_adequacy(size) == adequacy


# ============================================================
# TRENDS
# ============================================================

def scored_at(respondent_id, positive, negative, when):
    return make_scored(make_response(respondent_id, positive, negative, submitted_at=when))


FEB_10 = JAN_10 + timedelta(days=31)


class TestTrendAnalyzer:
    """Tests for TrendAnalyzer."""

    def test_improving(self):
        series = TrendAnalyzer().series([
            scored_at("a", 1, 2, JAN_10),
            scored_at("a", 3, 0, FEB_10),
        ])
        assert [p.period for p in series.points] == ["2024-01", "2024-02"]
        assert series.direction == TrendDirection.IMPROVING
        assert series.change_percentage == 200.0

    def test_worsening(self):
        series = TrendAnalyzer().series([
            scored_at("a", 3, 0, JAN_10),
            scored_at("b", 2, 1, FEB_10),
        ])
        assert series.direction == TrendDirection.WORSENING

    def test_stable(self):
        series = TrendAnalyzer().series([
            scored_at("a", 2, 1, JAN_10),
            scored_at("b", 2, 1, FEB_10),
        ])
        assert series.direction == TrendDirection.STABLE
        assert series.change_percentage == 0.0

    def test_single_month_insufficient(self):
        series = TrendAnalyzer().series([scored_at("a", 2, 1, JAN_10), scored_at("b", 2, 1, None)])
        assert series.direction == TrendDirection.INSUFFICIENT_DATA
        assert series.undated_responses == 1
        assert series.points[0].respondents == 1

    def test_high_risk_share_per_month(self):
        series = TrendAnalyzer().series([
            scored_at("a", 0, 3, JAN_10),
            scored_at("b", 3, 0, JAN_10),
        ])
        assert series.points[0].high_risk_percentage == 50.0
        assert series.points[0].mean_score == 18.0


# ============================================================
# HEATMAP
# ============================================================

class TestHeatmapBuilder:
    """Tests for HeatmapBuilder."""

    def test_option_distribution_and_risk(self, population):
        heatmap = HeatmapBuilder().build(population[:3], "department")

        assert heatmap.groups == ["Ops"]
        q1 = heatmap.rows[0].cells[0]
        assert heatmap.rows[0].polarity == "positive"
        assert q1.option_counts == {0: 1, 1: 1, 2: 0, 3: 1}
        assert q1.risk_options == [0, 1]
        assert q1.risk_percentage == pytest.approx(66.666, rel=1e-3)

        q2 = heatmap.rows[1].cells[0]
        assert heatmap.rows[1].polarity == "negative"
        assert q2.option_counts == {0: 1, 1: 0, 2: 1, 3: 1}
        assert q2.risk_options == [2, 3]
        assert q2.average_answer == pytest.approx(5 / 3)

    def test_small_groups_excluded(self, population):
        heatmap = HeatmapBuilder().build(population[:8], "department")
        assert heatmap.groups == ["HR", "Ops"]
        assert [e.key for e in heatmap.excluded_groups] == ["Finance"]
        assert len(heatmap.rows) == 12
        assert all(len(row.cells) == 2 for row in heatmap.rows)

    def test_to_dict_options(self, population):
        data = HeatmapBuilder().build(population[:3], "department").to_dict()
        options = data["rows"][0]["cells"][0]["options"]
        assert options[0] == {"value": 0, "count": 1, "percentage": 33.3, "is_risk": True}
