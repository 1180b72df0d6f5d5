"""
Scoring Engine - Raw Distress Average.

Averages raw answers (0-3) without polarity inversion. Lower values
mean better wellbeing. This is a separate metric from the wellbeing
total and is reported under its own name.
"""

import logging
from typing import Any, Iterable, Mapping

from core.constants import MAX_ANSWER, MIN_ANSWER
from core.exceptions import InsufficientDataError

from .types import DistressAverage
from .wellbeing_score import coerce_answer


logger = logging.getLogger(__name__)


class RawDistressAverage:
    """Computes distress averages for one or many answer sets."""

    @staticmethod
    def _usable(answers: Mapping[Any, Any]) -> list:
        values = []
        for raw in answers.values():
            value = coerce_answer(raw)
            if value is not None and MIN_ANSWER <= value <= MAX_ANSWER:
                values.append(value)
        return values

    def compute(self, answers: Mapping[Any, Any]) -> DistressAverage:
        """
        Average the usable answers of one set.

        Raises:
            InsufficientDataError: if no answer is usable
        """
        values = self._usable(answers)
        if not values:
            raise InsufficientDataError("No usable answers to average", available=0, required=1)
        return DistressAverage(
            average=sum(values) / len(values),
            answer_count=len(values),
            respondent_count=1,
        )

    def population(self, answer_sets: Iterable[Mapping[Any, Any]]) -> DistressAverage:
        """
        Average every usable answer across a population.

        Each answer counts once, so respondents with more answers weigh more.
        """
        total = 0
        count = 0
        respondents = 0
        for answers in answer_sets:
            values = self._usable(answers)
            if values:
                respondents += 1
                total += sum(values)
                count += len(values)

        if count == 0:
            raise InsufficientDataError("No usable answers in population", available=0, required=1)

        logger.debug(f"Distress average over {respondents} respondents, {count} answers")
        return DistressAverage(
            average=total / count,
            answer_count=count,
            respondent_count=respondents,
        )
