"""
Correlation Engine - Main Engine.

============================================================
PURPOSE
============================================================
Computes Pearson correlations for configured variable pairs.

    r = (n*Sxy - Sx*Sy) / sqrt((n*Sxx - Sx^2) * (n*Syy - Sy^2))

============================================================
DESIGN PRINCIPLES
============================================================
- Pure: no I/O
- Each pair is isolated; one failing pair never affects others
- Degenerate input yields a status and a reason, never a fake 0
- Coefficients are clamped to [-1, 1] against rounding overshoot

============================================================
USAGE
============================================================
    engine = CorrelationEngine()
    result = engine.correlate("x_vs_y", [1, 2, 3], [2, 4, 6])
    result.coefficient  # 1.0

    report = engine.correlate_registry(scored_responses)

============================================================
"""

import logging
import math
import statistics
from typing import Any, List, Optional, Sequence

from .config import CorrelationConfig, VariablePair
from .extractors import VariableExtractor
from .types import (
    CorrelationDirection,
    CorrelationInsight,
    CorrelationReport,
    CorrelationResult,
    CorrelationStrength,
    DataStatus,
)


logger = logging.getLogger(__name__)


class CorrelationEngine:
    """Pearson correlation over the configured pair registry."""

    def __init__(
        self,
        config: Optional[CorrelationConfig] = None,
        extractor: Optional[VariableExtractor] = None,
    ):
        self.config = config or CorrelationConfig()
        self.extractor = extractor or VariableExtractor()

    # ---- Classification ----

    def classify_strength(self, coefficient: Optional[float]) -> CorrelationStrength:
        if coefficient is None:
            return CorrelationStrength.VERY_WEAK
        magnitude = abs(coefficient)
        if magnitude >= self.config.very_strong_threshold:
            return CorrelationStrength.VERY_STRONG
        if magnitude >= self.config.strong_threshold:
            return CorrelationStrength.STRONG
        if magnitude >= self.config.moderate_threshold:
            return CorrelationStrength.MODERATE
        if magnitude >= self.config.weak_threshold:
            return CorrelationStrength.WEAK
        return CorrelationStrength.VERY_WEAK

    def classify_direction(self, coefficient: Optional[float]) -> CorrelationDirection:
        if coefficient is None:
            return CorrelationDirection.NEUTRAL
        if coefficient > self.config.direction_threshold:
            return CorrelationDirection.POSITIVE
        if coefficient < -self.config.direction_threshold:
            return CorrelationDirection.NEGATIVE
        return CorrelationDirection.NEUTRAL

    # ---- Single pair ----

    def correlate(
        self,
        pair_id: str,
        x: Sequence[float],
        y: Sequence[float],
        x_variable: Optional[str] = None,
        y_variable: Optional[str] = None,
        dropped_records: int = 0,
    ) -> CorrelationResult:
        """
        Correlate two aligned series.

        Never raises for bad data: degenerate input is reported as
        insufficient_data, numeric failures as calculation_error.
        """

        def degenerate(status: DataStatus, reason: str, n: int) -> CorrelationResult:
            logger.debug(f"Pair {pair_id}: {status.value} ({reason})")
            return CorrelationResult(
                pair_id=pair_id,
                coefficient=None,
                strength=CorrelationStrength.VERY_WEAK,
                direction=CorrelationDirection.NEUTRAL,
                sample_size=n,
                data_status=status,
                reason=reason,
                x_variable=x_variable,
                y_variable=y_variable,
                dropped_records=dropped_records,
            )

        if len(x) != len(y):
            return degenerate(
                DataStatus.INSUFFICIENT_DATA,
                f"series length mismatch: {len(x)} vs {len(y)}",
                min(len(x), len(y)),
            )

        n = len(x)
        if n < self.config.min_sample_size:
            return degenerate(
                DataStatus.INSUFFICIENT_DATA,
                f"sample size {n} below minimum {self.config.min_sample_size}",
                n,
            )

        try:
            if len(set(x)) == 1 or len(set(y)) == 1:
                return degenerate(DataStatus.INSUFFICIENT_DATA, "constant series has no variance", n)

            mean_x = math.fsum(x) / n
            mean_y = math.fsum(y) / n
            dx = [a - mean_x for a in x]
            dy = [b - mean_y for b in y]

            covariance = math.fsum(a * b for a, b in zip(dx, dy))
            variance_product = math.fsum(a * a for a in dx) * math.fsum(b * b for b in dy)

            if not (math.isfinite(covariance) and math.isfinite(variance_product)):
                return degenerate(DataStatus.CALCULATION_ERROR, "overflow in sums", n)
            if variance_product <= 0:
                return degenerate(DataStatus.INSUFFICIENT_DATA, "zero variance in denominator", n)

            coefficient = covariance / math.sqrt(variance_product)
        except (ArithmeticError, TypeError, ValueError) as e:
            return degenerate(DataStatus.CALCULATION_ERROR, f"{type(e).__name__}: {e}", n)

        if not math.isfinite(coefficient):
            return degenerate(DataStatus.CALCULATION_ERROR, "non-finite coefficient", n)

        coefficient = max(-1.0, min(1.0, coefficient))

        return CorrelationResult(
            pair_id=pair_id,
            coefficient=coefficient,
            strength=self.classify_strength(coefficient),
            direction=self.classify_direction(coefficient),
            sample_size=n,
            data_status=DataStatus.VALID,
            x_variable=x_variable,
            y_variable=y_variable,
            dropped_records=dropped_records,
        )

    def correlate_pair(self, items: Sequence[Any], pair: VariablePair) -> CorrelationResult:
        """Extract a configured pair from scored responses and correlate it."""
        try:
            xs, ys, dropped = self.extractor.extract_pair(items, pair)
        except Exception as e:
            logger.warning(f"Pair {pair.pair_id}: extraction failed: {e}")
            return CorrelationResult(
                pair_id=pair.pair_id,
                coefficient=None,
                strength=CorrelationStrength.VERY_WEAK,
                direction=CorrelationDirection.NEUTRAL,
                sample_size=0,
                data_status=DataStatus.CALCULATION_ERROR,
                reason=f"extraction failed: {e}",
                x_variable=pair.x,
                y_variable=pair.y,
            )
        return self.correlate(pair.pair_id, xs, ys, pair.x, pair.y, dropped)

    # ---- Registry ----

    def correlate_registry(
        self,
        items: Sequence[Any],
        pairs: Optional[Sequence[VariablePair]] = None,
    ) -> CorrelationReport:
        """
        Correlate every configured pair over a population.

        Args:
            items: Scored responses
            pairs: Pair registry, defaults to the configured one
        """
        items = list(items)
        pairs = list(pairs) if pairs is not None else list(self.config.pairs)
        results = [self.correlate_pair(items, pair) for pair in pairs]

        scores = [item.score.total_score for item in items]
        report = CorrelationReport(
            results=results,
            insights=self.build_insights(results),
            total_respondents=len({item.respondent_id for item in items}),
            average_score=statistics.fmean(scores) if scores else None,
        )

        logger.info(
            f"Correlated {len(pairs)} pairs over {len(items)} responses, "
            f"{report.valid_count} valid"
        )
        return report

    def build_insights(self, results: List[CorrelationResult]) -> List[CorrelationInsight]:
        insights: List[CorrelationInsight] = []
        for result in results:
            if not result.is_valid:
                continue
            r = result.coefficient
            if result.strength.is_strong:
                insights.append(
                    CorrelationInsight(
                        pair_id=result.pair_id,
                        kind="strong_correlation",
                        message=(
                            f"{result.x_variable} and {result.y_variable} show a "
                            f"{result.strength.value.lower().replace('_', ' ')} "
                            f"{result.direction.value.lower()} relationship (r={r:.2f})"
                        ),
                        coefficient=r,
                    )
                )
            if r < self.config.negative_insight_threshold:
                insights.append(
                    CorrelationInsight(
                        pair_id=result.pair_id,
                        kind="negative_correlation",
                        message=(
                            f"As {result.x_variable} increases, {result.y_variable} "
                            f"tends to decrease (r={r:.2f})"
                        ),
                        coefficient=r,
                    )
                )
        return insights
