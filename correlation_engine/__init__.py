"""
Correlation Engine Package.

============================================================
PURPOSE
============================================================
Pearson correlations between configured pairs of respondent
variables (wellbeing score, age, tenure, satisfaction, ...).

============================================================
DATA STATUS
============================================================
- valid: coefficient computed, in [-1, 1]
- insufficient_data: fewer than 2 pairs, constant series,
  zero variance or mismatched lengths
- calculation_error: the computation itself failed

============================================================
"""

from .config import DEFAULT_PAIRS, CorrelationConfig, VariablePair, get_default_config
from .engine import CorrelationEngine
from .extractors import BUILTIN_VARIABLES, VariableExtractor, finite_number
from .types import (
    CorrelationDirection,
    CorrelationInsight,
    CorrelationReport,
    CorrelationResult,
    CorrelationStrength,
    DataStatus,
)


__all__ = [
    "CorrelationEngine",
    "CorrelationConfig",
    "VariablePair",
    "DEFAULT_PAIRS",
    "get_default_config",
    "VariableExtractor",
    "BUILTIN_VARIABLES",
    "finite_number",
    "CorrelationDirection",
    "CorrelationInsight",
    "CorrelationReport",
    "CorrelationResult",
    "CorrelationStrength",
    "DataStatus",
]
