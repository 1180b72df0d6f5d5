"""
Risk Scoring - Configuration.

============================================================
PURPOSE
============================================================
Band ranges for the risk classifier.

============================================================
THRESHOLD PHILOSOPHY
============================================================
Ranges are inclusive on both ends and must partition the
score range 0-36 exactly: no gaps, no overlaps. A config
that violates this is rejected at construction time.

============================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from core.constants import MAX_TOTAL_SCORE, MIN_TOTAL_SCORE
from core.exceptions import ConfigurationError

from .types import RiskBand


@dataclass(frozen=True)
class BandRange:
    """Inclusive score range of one band."""

    band: RiskBand
    minimum: int
    maximum: int

    def contains(self, score: int) -> bool:
        return self.minimum <= score <= self.maximum


def _default_ranges() -> Tuple[BandRange, ...]:
    return (
        BandRange(RiskBand.VERY_HIGH, 0, 8),
        BandRange(RiskBand.HIGH, 9, 17),
        BandRange(RiskBand.MODERATE, 18, 27),
        BandRange(RiskBand.LOW, 28, 36),
    )


@dataclass(frozen=True)
class RiskBandConfig:
    """
    Band partition of the wellbeing score.

    Raises:
        ConfigurationError: if the ranges leave a gap, overlap,
            or do not span 0-36
    """

    ranges: Tuple[BandRange, ...] = field(default_factory=_default_ranges)
    min_score: int = MIN_TOTAL_SCORE
    max_score: int = MAX_TOTAL_SCORE

    def __post_init__(self) -> None:
        if not self.ranges:
            raise ConfigurationError("At least one band range is required", config_key="ranges")

        ordered = sorted(self.ranges, key=lambda r: r.minimum)
        for band_range in ordered:
            if band_range.minimum > band_range.maximum:
                raise ConfigurationError(
                    f"Band {band_range.band.value} has min > max",
                    config_key="ranges",
                )

        if ordered[0].minimum != self.min_score:
            raise ConfigurationError(
                f"Bands start at {ordered[0].minimum}, expected {self.min_score}",
                config_key="ranges",
            )
        if ordered[-1].maximum != self.max_score:
            raise ConfigurationError(
                f"Bands end at {ordered[-1].maximum}, expected {self.max_score}",
                config_key="ranges",
            )

        for previous, current in zip(ordered, ordered[1:]):
            if current.minimum <= previous.maximum:
                raise ConfigurationError(
                    f"Bands {previous.band.value} and {current.band.value} overlap",
                    config_key="ranges",
                )
            if current.minimum != previous.maximum + 1:
                raise ConfigurationError(
                    f"Gap between {previous.band.value} and {current.band.value}: "
                    f"{previous.maximum + 1}-{current.minimum - 1}",
                    config_key="ranges",
                )

        bands = [r.band for r in self.ranges]
        if len(set(bands)) != len(bands):
            raise ConfigurationError("Each band may appear only once", config_key="ranges")

    def to_dict(self) -> Dict[str, Any]:
        return {
            r.band.value: {"min": r.minimum, "max": r.maximum}
            for r in sorted(self.ranges, key=lambda r: r.minimum)
        }


def get_default_config() -> RiskBandConfig:
    """Get the standard GHQ-12 band configuration."""
    return RiskBandConfig()
