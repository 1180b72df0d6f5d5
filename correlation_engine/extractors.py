"""
Correlation Engine - Variable Extraction.

Turns scored responses into paired numeric series. A record
contributes to a pair only when BOTH of its values are finite
numbers, so the two series always stay aligned.
"""

import logging
import math
from numbers import Real
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from core.exceptions import InsufficientDataError
from scoring_engine.distress_average import RawDistressAverage

from .config import VariablePair


logger = logging.getLogger(__name__)

_distress = RawDistressAverage()


def _distress_average(item: Any) -> Optional[float]:
    try:
        return _distress.compute(item.response.answers).average
    except InsufficientDataError:
        return None


BUILTIN_VARIABLES: Dict[str, Callable[[Any], Any]] = {
    "wellbeing_score": lambda item: item.score.total_score,
    "distress_average": _distress_average,
}


def finite_number(value: Any) -> Optional[float]:
    """Return value as float when it is a finite real number."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


class VariableExtractor:
    """Resolves variable names against scored responses."""

    def __init__(self, variables: Optional[Dict[str, Callable[[Any], Any]]] = None):
        self._variables = dict(BUILTIN_VARIABLES)
        if variables:
            self._variables.update(variables)

    def value(self, item: Any, name: str) -> Optional[float]:
        getter = self._variables.get(name)
        raw = getter(item) if getter else item.demographics.get(name)
        return finite_number(raw)

    def extract_pair(
        self,
        items: Iterable[Any],
        pair: VariablePair,
    ) -> Tuple[List[float], List[float], int]:
        """
        Build aligned series for a pair.

        Returns:
            (x values, y values, number of records dropped)
        """
        xs: List[float] = []
        ys: List[float] = []
        dropped = 0
        for item in items:
            x = self.value(item, pair.x)
            y = self.value(item, pair.y)
            if x is None or y is None:
                dropped += 1
                continue
            xs.append(x)
            ys.append(y)

        if dropped:
            logger.debug(f"Pair {pair.pair_id}: dropped {dropped} incomplete records")
        return xs, ys, dropped
