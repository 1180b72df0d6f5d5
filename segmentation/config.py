"""
Segmentation - Configuration.

============================================================
PURPOSE
============================================================
Rules for the validity gate, anonymity threshold, quality
scoring and trend detection.

============================================================
THRESHOLD RATIONALE
============================================================
- min_segment_size 3: smaller groups could identify people
- recency window 30 days: a month of fresh responses
- sample adequacy: >=30 Excellent, >=15 Good, >=5 Acceptable
- trend threshold 5%: month-over-month change in mean score

============================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Tuple

from core.constants import MIN_SEGMENT_SIZE
from core.exceptions import ConfigurationError


GROUPABLE_FIELDS: FrozenSet[str] = frozenset(
    {"department", "position", "area", "shift", "gender", "contract_type", "age_group"}
)

AGE_BUCKETS: Tuple[Tuple[str, int, int], ...] = (
    ("18-25", 18, 25),
    ("26-35", 26, 35),
    ("36-45", 36, 45),
    ("46-55", 46, 55),
    ("56+", 56, 200),
)


@dataclass(frozen=True)
class SegmentationConfig:
    """Segmentation rules."""

    min_segment_size: int = MIN_SEGMENT_SIZE

    required_fields: Tuple[str, ...] = ("department", "position")
    """Demographic fields every valid respondent must carry, besides the group field."""

    placeholder_values: FrozenSet[str] = frozenset(
        {"sin especificar", "", "n/a", "na", "unspecified", "unknown", "sin depto", "sin cargo", "none", "null"}
    )
    """Case-insensitive values treated as missing."""

    completeness_fields: Tuple[str, ...] = ("department", "position", "age", "gender")

    recency_days: int = 30

    excellent_sample_size: int = 30
    good_sample_size: int = 15
    acceptable_sample_size: int = 5

    trend_threshold_pct: float = 5.0

    def __post_init__(self) -> None:
        if self.min_segment_size < 1:
            raise ConfigurationError("min_segment_size must be positive", config_key="min_segment_size")
        if self.recency_days < 1:
            raise ConfigurationError("recency_days must be positive", config_key="recency_days")
        if not (self.excellent_sample_size >= self.good_sample_size >= self.acceptable_sample_size):
            raise ConfigurationError("Sample size thresholds must be descending", config_key="sample_size")

    def is_placeholder(self, value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip().casefold() in self.placeholder_values

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_segment_size": self.min_segment_size,
            "required_fields": list(self.required_fields),
            "recency_days": self.recency_days,
            "sample_size_thresholds": {
                "excellent": self.excellent_sample_size,
                "good": self.good_sample_size,
                "acceptable": self.acceptable_sample_size,
            },
            "trend_threshold_pct": self.trend_threshold_pct,
        }


def get_default_config() -> SegmentationConfig:
    return SegmentationConfig()
