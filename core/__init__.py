"""
Core Module Package.

This package contains the shared infrastructure that all analytics
packages depend on.

Components:
- clock: Injectable time abstraction
- exceptions: Exception hierarchy
- constants: Questionnaire constants
- retry: Reusable retry/backoff policy
"""

from .clock import ClockProtocol, SystemClock, MockClock, to_iso8601, from_iso8601
from .constants import (
    QUESTION_COUNT,
    QUESTION_INDICES,
    MIN_ANSWER,
    MAX_ANSWER,
    ANSWER_OPTIONS,
    MIN_TOTAL_SCORE,
    MAX_TOTAL_SCORE,
    POSITIVE_QUESTIONS,
    NEGATIVE_QUESTIONS,
    MIN_SEGMENT_SIZE,
    MIN_CORRELATION_SAMPLE,
    WELLNESS_THRESHOLDS,
    UNSPECIFIED,
)
from .exceptions import (
    Severity,
    ErrorClassification,
    WellbeingAnalyticsError,
    ConfigurationError,
    ValidationError,
    AnswerValidationError,
    ScoreOutOfRangeError,
    FilterValidationError,
    InsufficientDataError,
    CalculationError,
    CacheError,
    DataStoreError,
)
from .retry import RetryPolicy, is_retryable


__all__ = [
    # Clock
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "to_iso8601",
    "from_iso8601",
    # Constants
    "QUESTION_COUNT",
    "QUESTION_INDICES",
    "MIN_ANSWER",
    "MAX_ANSWER",
    "ANSWER_OPTIONS",
    "MIN_TOTAL_SCORE",
    "MAX_TOTAL_SCORE",
    "POSITIVE_QUESTIONS",
    "NEGATIVE_QUESTIONS",
    "MIN_SEGMENT_SIZE",
    "MIN_CORRELATION_SAMPLE",
    "WELLNESS_THRESHOLDS",
    "UNSPECIFIED",
    # Exceptions
    "Severity",
    "ErrorClassification",
    "WellbeingAnalyticsError",
    "ConfigurationError",
    "ValidationError",
    "AnswerValidationError",
    "ScoreOutOfRangeError",
    "FilterValidationError",
    "InsufficientDataError",
    "CalculationError",
    "CacheError",
    "DataStoreError",
    # Retry
    "RetryPolicy",
    "is_retryable",
]
