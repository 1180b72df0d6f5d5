"""
Tests for Risk Scoring.

============================================================
PURPOSE
============================================================
- Band boundaries are inclusive and partition 0-36
- Out-of-range and non-integer scores are rejected
- Group distribution and high-risk KPI
- Latest-response bucketing

============================================================
"""

from datetime import timedelta

import pytest

from core.exceptions import ConfigurationError, InsufficientDataError, ScoreOutOfRangeError
from risk_scoring import (
    BandRange,
    RiskBand,
    RiskBandConfig,
    RiskClassifier,
    classify_score,
)
from tests.helpers import JAN_10, make_response, make_scored


@pytest.fixture
def classifier():
    return RiskClassifier()


# ============================================================
# CLASSIFICATION
# ============================================================

class TestClassify:
    """Tests for single score classification."""

    @pytest.mark.parametrize(
        "score,band",
        [
            (0, RiskBand.VERY_HIGH),
            (8, RiskBand.VERY_HIGH),
            (9, RiskBand.HIGH),
            (17, RiskBand.HIGH),
            (18, RiskBand.MODERATE),
            (27, RiskBand.MODERATE),
            (28, RiskBand.LOW),
            (36, RiskBand.LOW),
        ],
    )
    def test_band_boundaries(self, classifier, score, band):
        assert classifier.classify(score).band == band

    def test_every_score_has_exactly_one_band(self, classifier):
        bands = [classifier.classify(score).band for score in range(0, 37)]

        assert len(bands) == 37
        # severity never increases as the score rises
        order = RiskBand.by_severity()
        assert [order.index(b) for b in bands] == sorted(order.index(b) for b in bands)
        assert {band: bands.count(band) for band in order} == {
            RiskBand.VERY_HIGH: 9,
            RiskBand.HIGH: 9,
            RiskBand.MODERATE: 10,
            RiskBand.LOW: 9,
        }

    @pytest.mark.parametrize("score", [-1, 37, 100])
    def test_out_of_range_rejected(self, classifier, score):
        with pytest.raises(ScoreOutOfRangeError) as exc_info:
            classifier.classify(score)
        assert exc_info.value.score == score

    @pytest.mark.parametrize("score", [12.5, "12", None, True])
    def test_non_integer_rejected(self, classifier, score):
        with pytest.raises(ScoreOutOfRangeError):
            classifier.classify(score)

    def test_high_risk_flags(self, classifier):
        assert classifier.classify(5).is_high_risk
        assert classifier.classify(12).requires_intervention
        assert not classifier.classify(20).is_high_risk
        assert not classifier.classify(30).is_high_risk

    def test_labels_and_priority(self, classifier):
        data = classifier.classify(3).to_dict()
        assert data == {
            "score": 3,
            "band": "VERY_HIGH",
            "label": "Very High (Restricted)",
            "is_high_risk": True,
            "priority": 4,
        }
        assert classify_score(30).label == "Low (Acceptable)"


# ============================================================
# CONFIGURATION
# ============================================================

class TestRiskBandConfig:
    """Tests for band partition validation."""

    def test_default_config_valid(self):
        assert RiskBandConfig().to_dict()["HIGH"] == {"min": 9, "max": 17}

    def test_gap_rejected(self):
        with pytest.raises(ConfigurationError, match="Gap"):
            RiskBandConfig(ranges=(
                BandRange(RiskBand.VERY_HIGH, 0, 8),
                BandRange(RiskBand.HIGH, 10, 17),
                BandRange(RiskBand.MODERATE, 18, 27),
                BandRange(RiskBand.LOW, 28, 36),
            ))

    def test_overlap_rejected(self):
        with pytest.raises(ConfigurationError, match="overlap"):
            RiskBandConfig(ranges=(
                BandRange(RiskBand.VERY_HIGH, 0, 9),
                BandRange(RiskBand.HIGH, 9, 17),
                BandRange(RiskBand.MODERATE, 18, 27),
                BandRange(RiskBand.LOW, 28, 36),
            ))

    def test_short_span_rejected(self):
        with pytest.raises(ConfigurationError):
            RiskBandConfig(ranges=(
                BandRange(RiskBand.VERY_HIGH, 0, 8),
                BandRange(RiskBand.HIGH, 9, 17),
                BandRange(RiskBand.MODERATE, 18, 27),
                BandRange(RiskBand.LOW, 28, 35),
            ))


# ============================================================
# GROUP SUMMARY
# ============================================================

class TestSummarize:
    """Tests for group risk summary."""

    def test_distribution_and_kpi(self, classifier):
        summary = classifier.summarize([4, 12, 20, 30, 36])

        assert summary.total == 5
        assert summary.distribution[RiskBand.VERY_HIGH].count == 1
        assert summary.distribution[RiskBand.LOW].count == 2
        assert summary.distribution[RiskBand.LOW].percentage == 40.0
        assert summary.high_risk_count == 2
        assert summary.high_risk_percentage == 40.0
        assert summary.mean == 20.4
        assert summary.median == 20.0
        assert summary.score_range == 32

    def test_every_band_present(self, classifier):
        summary = classifier.summarize([36])
        assert set(summary.distribution) == set(RiskBand)
        assert summary.distribution[RiskBand.HIGH].count == 0

    def test_to_dict_keys(self, classifier):
        data = classifier.summarize([10, 20]).to_dict()
        assert data["min"] == 10
        assert data["max"] == 20
        assert data["range"] == 10
        assert data["distribution"]["HIGH"] == {"count": 1, "percentage": 50.0}

    def test_empty_group(self, classifier):
        with pytest.raises(InsufficientDataError):
            classifier.summarize([])

    def test_invalid_member_rejected(self, classifier):
        with pytest.raises(ScoreOutOfRangeError):
            classifier.summarize([10, 40])


# ============================================================
# AT-RISK BUCKETS
# ============================================================

class TestBucketLatest:
    """Tests for latest-response bucketing."""

    def test_latest_response_wins(self, classifier):
        old = make_scored(make_response("r1", positive=0, negative=3, submitted_at=JAN_10))
        new = make_scored(
            make_response("r1", positive=3, negative=0, submitted_at=JAN_10 + timedelta(days=5))
        )

        buckets = classifier.bucket_latest([new, old])

        assert buckets[RiskBand.VERY_HIGH].count == 0
        assert buckets[RiskBand.LOW].respondents == [new]

    def test_worst_score_first_within_band(self, classifier):
        a = make_scored(make_response("a", positive=1, negative=2))  # 12
        b = make_scored(make_response("b", positive=1, negative=3))  # 6
        c = make_scored(make_response("c", positive=2, negative=3))  # 12

        buckets = classifier.bucket_latest([a, b, c])

        assert [i.respondent_id for i in buckets[RiskBand.VERY_HIGH].respondents] == ["b"]
        assert [i.respondent_id for i in buckets[RiskBand.HIGH].respondents] == ["a", "c"]

    def test_undated_response_loses_to_dated(self, classifier):
        undated = make_scored(make_response("r1", positive=0, negative=3, submitted_at=None))
        dated = make_scored(make_response("r1", positive=3, negative=0))

        buckets = classifier.bucket_latest([dated, undated])
        assert buckets[RiskBand.LOW].respondents == [dated]
