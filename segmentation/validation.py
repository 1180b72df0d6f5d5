"""
Segmentation - Validity Gate.

A respondent enters segment aggregates only when the answer set
is complete and in range AND the required demographic fields
(department, position and the grouping field) carry real values.
Every failed check is reported, not just the first.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from scoring_engine.wellbeing_score import ScoreEngine

from .config import SegmentationConfig
from .demographics import group_value
from .types import ValidationFailure, ValidationReport


logger = logging.getLogger(__name__)


class SegmentValidator:
    """Applies the validity gate to raw responses."""

    def __init__(
        self,
        config: Optional[SegmentationConfig] = None,
        score_engine: Optional[ScoreEngine] = None,
    ):
        self.config = config or SegmentationConfig()
        self.score_engine = score_engine or ScoreEngine()

    def reasons(self, response: Any, group_by: str) -> List[str]:
        """All reasons a response fails the gate; empty when valid."""
        reasons = [str(issue) for issue in self.score_engine.validate(response.answers)]

        fields = list(self.config.required_fields)
        if group_by not in fields:
            fields.append(group_by)

        for name in fields:
            if name == group_by:
                value = group_value(response, group_by)
            else:
                value = response.demographics.get(name)
            if value is None:
                reasons.append(f"missing {name}")
            elif self.config.is_placeholder(value):
                reasons.append(f"placeholder value for {name}: {value!r}")

        return reasons

    def split(
        self,
        responses: Sequence[Any],
        group_by: str,
    ) -> Tuple[List[Any], List[ValidationFailure], ValidationReport]:
        """
        Partition responses into valid ones and failures.

        Returns:
            (valid responses, failures, validation report)
        """
        valid: List[Any] = []
        failures: List[ValidationFailure] = []
        for response in responses:
            reasons = self.reasons(response, group_by)
            if reasons:
                failures.append(
                    ValidationFailure(
                        respondent_id=response.respondent_id,
                        session_id=response.session_id,
                        reasons=reasons,
                    )
                )
            else:
                valid.append(response)

        report = ValidationReport(
            total_responses=len(responses),
            valid_responses=len(valid),
            invalid_responses=len(failures),
        )
        if failures:
            logger.info(
                f"Validity gate: {len(failures)}/{len(responses)} responses rejected "
                f"({report.error_rate:.1f}%)"
            )
        return valid, failures, report
