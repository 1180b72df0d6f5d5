"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the exception hierarchy shared by every analytics package.

- Provides clear exception hierarchy
- Separates locally recoverable errors from call-aborting ones
- Carries structured context for diagnostics and logging

============================================================
EXCEPTION HIERARCHY
============================================================
WellbeingAnalyticsError (base)
├── ConfigurationError
├── ValidationError
│   ├── AnswerValidationError
│   ├── ScoreOutOfRangeError
│   └── FilterValidationError
├── InsufficientDataError
├── CalculationError
├── CacheError
└── DataStoreError

============================================================
RECOVERY POLICY
============================================================
- Validation / insufficient data: recovered locally, reported
  with a reason in diagnostics
- Calculation errors: isolated to the item being computed
- Data store errors: the only errors that abort a call; the
  orchestrator turns them into a defaulted failure payload

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels for error channels."""

    LOW = "low"
    """Informational, the call still produced a full result."""

    MEDIUM = "medium"
    """Part of the result was dropped or defaulted."""

    HIGH = "high"
    """The call could not produce any data."""


class ErrorClassification(Enum):
    """Classification of error recoverability."""

    RECOVERABLE = "recoverable"
    """Handled locally, reported in diagnostics."""

    TRANSIENT = "transient"
    """Temporary error, retry may succeed."""

    NON_RECOVERABLE = "non_recoverable"
    """Permanent error, requires intervention."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class WellbeingAnalyticsError(Exception):
    """
    Base exception for all analytics errors.

    All exceptions carry:
    - message: human readable reason
    - context: structured details for debugging
    - severity / classification: for error channels
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM
    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        severity: Optional[Severity] = None,
        classification: Optional[ErrorClassification] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.severity = severity or self.default_severity
        self.classification = classification or self.default_classification
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging/diagnostics."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(WellbeingAnalyticsError):
    """Invalid engine or process configuration."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, context=context, **kwargs)
        self.config_key = config_key


# ============================================================
# VALIDATION ERRORS
# ============================================================

class ValidationError(WellbeingAnalyticsError):
    """
    Input failed validation.

    `errors` lists every problem found, not just the first one.
    """

    default_severity = Severity.LOW

    def __init__(self, message: str, errors: Optional[List[str]] = None, **kwargs):
        self.errors = list(errors or [])
        context = kwargs.pop("context", {})
        if self.errors:
            context["errors"] = self.errors
        super().__init__(message, context=context, **kwargs)


class AnswerValidationError(ValidationError):
    """A questionnaire answer set is incomplete or out of range."""

    def __init__(self, message: str, issues: Optional[List[Any]] = None, **kwargs):
        self.issues = list(issues or [])
        super().__init__(
            message,
            errors=[str(issue) for issue in self.issues],
            **kwargs,
        )


class ScoreOutOfRangeError(ValidationError):
    """A total score outside the classifiable range."""

    def __init__(self, score: Any, minimum: int, maximum: int):
        super().__init__(
            f"Score {score!r} is outside [{minimum}, {maximum}]",
            context={"score": score, "minimum": minimum, "maximum": maximum},
        )
        self.score = score


class FilterValidationError(ValidationError):
    """Query filters are malformed."""


# ============================================================
# CALCULATION ERRORS
# ============================================================

class InsufficientDataError(WellbeingAnalyticsError):
    """Not enough data points to compute a statistic."""

    def __init__(
        self,
        message: str,
        available: Optional[int] = None,
        required: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if available is not None:
            context["available"] = available
        if required is not None:
            context["required"] = required
        super().__init__(message, context=context, **kwargs)
        self.available = available
        self.required = required


class CalculationError(WellbeingAnalyticsError):
    """A numeric computation produced an unusable value."""


class CacheError(WellbeingAnalyticsError):
    """Cache read or write failure. Never fatal to the caller."""

    default_severity = Severity.LOW


# ============================================================
# DATA STORE ERRORS
# ============================================================

class DataStoreError(WellbeingAnalyticsError):
    """
    The data store could not be queried.

    `retryable` tells the retry policy whether another attempt may
    succeed; `attempts` records how many were made before giving up.
    """

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        message: str,
        retryable: bool = True,
        attempts: int = 0,
        original_error: Optional[Exception] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if original_error is not None:
            context["original_error"] = f"{type(original_error).__name__}: {original_error}"
        super().__init__(message, context=context, **kwargs)
        self.retryable = retryable
        self.attempts = attempts
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["retryable"] = self.retryable
        data["attempts"] = self.attempts
        return data


__all__ = [
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
]
