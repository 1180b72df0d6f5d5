"""
Correlation Engine - Configuration.

============================================================
PURPOSE
============================================================
Thresholds and the registry of variable pairs to correlate.

Only the configured pairs are ever computed; the engine never
builds a full correlation matrix.

============================================================
THRESHOLDS
============================================================
Strength by |r|:
    >= 0.8 VERY_STRONG, >= 0.6 STRONG, >= 0.4 MODERATE,
    >= 0.2 WEAK, otherwise VERY_WEAK
Direction:
    r > 0.1 POSITIVE, r < -0.1 NEGATIVE, otherwise NEUTRAL

============================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from core.constants import MIN_CORRELATION_SAMPLE
from core.exceptions import ConfigurationError


@dataclass(frozen=True)
class VariablePair:
    """Two named variables to correlate."""

    pair_id: str
    x: str
    y: str
    label: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"pair_id": self.pair_id, "x": self.x, "y": self.y, "label": self.label}


DEFAULT_PAIRS: Tuple[VariablePair, ...] = (
    VariablePair(
        "wellbeing_vs_job_satisfaction",
        "wellbeing_score",
        "satisfaccion_laboral",
        "Wellbeing score vs job satisfaction",
    ),
    VariablePair(
        "wellbeing_vs_safety_motivation",
        "wellbeing_score",
        "motivacion_seguridad",
        "Wellbeing score vs safety motivation",
    ),
    VariablePair("age_vs_tenure", "age", "tenure_years", "Age vs company tenure"),
    VariablePair(
        "job_satisfaction_vs_management_trust",
        "satisfaccion_laboral",
        "confianza_gerencia",
        "Job satisfaction vs trust in management",
    ),
    VariablePair("tenure_vs_wellbeing", "tenure_years", "wellbeing_score", "Tenure vs wellbeing score"),
)


@dataclass(frozen=True)
class CorrelationConfig:
    """Correlation thresholds and pair registry."""

    pairs: Tuple[VariablePair, ...] = DEFAULT_PAIRS

    very_strong_threshold: float = 0.8
    strong_threshold: float = 0.6
    moderate_threshold: float = 0.4
    weak_threshold: float = 0.2

    direction_threshold: float = 0.1
    """|r| at or below this is NEUTRAL."""

    min_sample_size: int = MIN_CORRELATION_SAMPLE

    negative_insight_threshold: float = -0.5
    """r below this produces a negative-relationship insight."""

    def __post_init__(self) -> None:
        thresholds = (
            self.very_strong_threshold,
            self.strong_threshold,
            self.moderate_threshold,
            self.weak_threshold,
        )
        if list(thresholds) != sorted(thresholds, reverse=True):
            raise ConfigurationError("Strength thresholds must be descending", config_key="thresholds")
        if self.min_sample_size < MIN_CORRELATION_SAMPLE:
            raise ConfigurationError(
                f"min_sample_size must be at least {MIN_CORRELATION_SAMPLE}",
                config_key="min_sample_size",
            )
        ids = [p.pair_id for p in self.pairs]
        if len(set(ids)) != len(ids):
            raise ConfigurationError("Duplicate pair ids in registry", config_key="pairs")

    def pair(self, pair_id: str) -> Optional[VariablePair]:
        for candidate in self.pairs:
            if candidate.pair_id == pair_id:
                return candidate
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pairs": [p.to_dict() for p in self.pairs],
            "thresholds": {
                "very_strong": self.very_strong_threshold,
                "strong": self.strong_threshold,
                "moderate": self.moderate_threshold,
                "weak": self.weak_threshold,
            },
            "direction_threshold": self.direction_threshold,
            "min_sample_size": self.min_sample_size,
        }


def get_default_config() -> CorrelationConfig:
    return CorrelationConfig()
