"""
Risk Scoring Package.

============================================================
PURPOSE
============================================================
Maps wellbeing totals (0-36) onto discrete risk bands and
summarizes the risk profile of a group.

============================================================
SCORING
============================================================
- VERY_HIGH (0-8): Restricted
- HIGH (9-17): Altered
- MODERATE (18-27): Alert
- LOW (28-36): Acceptable

VERY_HIGH and HIGH count toward the high-risk KPI.

============================================================
USAGE
============================================================
    from risk_scoring import RiskClassifier

    classifier = RiskClassifier()
    summary = classifier.summarize([5, 12, 20, 30])
    summary.high_risk_percentage  # 50.0

============================================================
"""

from .config import BandRange, RiskBandConfig, get_default_config
from .engine import RiskClassifier, classify_score
from .types import BandCount, GroupRiskSummary, RiskBand, RiskBucket, RiskClassification


__all__ = [
    "RiskClassifier",
    "classify_score",
    "BandRange",
    "RiskBandConfig",
    "get_default_config",
    "RiskBand",
    "RiskClassification",
    "BandCount",
    "GroupRiskSummary",
    "RiskBucket",
]
