"""
Orchestrator - Models.

============================================================
RESPONSIBILITY
============================================================
Configuration, operation registry and result envelopes of the
metrics orchestrator.

- OrchestratorConfig: process settings loaded from env
- MetricsOperation: operation names and their cache lifetimes
- MetricsResult: data + metadata + diagnostics of one call
- ErrorReport: structured payload sent to error channels

============================================================
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from core.exceptions import ErrorClassification, Severity, WellbeingAnalyticsError
from core.retry import RetryPolicy
from metrics_cache.types import TtlClass

from .schemas import MetricsResultPayload


# ============================================================
# OPERATIONS
# ============================================================

class MetricsOperation(str, Enum):
    """Operations served by the orchestrator."""

    SCORE = "score"
    CORE_METRICS = "core_metrics"
    CORRELATIONS = "correlations"
    SEGMENTATION = "segmentation"
    TRENDS = "trends"
    HEATMAP = "heatmap"
    AT_RISK = "at_risk_respondents"

    @property
    def ttl_class(self) -> TtlClass:
        return {
            "core_metrics": TtlClass.CORE,
            "correlations": TtlClass.CORE,
            "at_risk_respondents": TtlClass.CORE,
            "segmentation": TtlClass.SEGMENT,
            "trends": TtlClass.TREND,
            "heatmap": TtlClass.HEATMAP,
        }.get(self.value, TtlClass.CORE)


# ============================================================
# ORCHESTRATOR CONFIGURATION
# ============================================================

@dataclass
class OrchestratorConfig:
    """Configuration for the metrics orchestrator."""

    responses_table: str = "respuestas_cuestionario"
    """Data store table holding questionnaire rows."""

    query_timeout_seconds: float = 10.0
    """Timeout for a single data store query attempt."""

    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 0.5
    retry_multiplier: float = 2.0
    retry_max_delay_seconds: float = 5.0

    default_group_by: str = "department"
    """Grouping field when a caller does not pass one."""

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> "OrchestratorConfig":
        """Load configuration from environment variables (and a local .env)."""
        load_dotenv()
        return cls(
            responses_table=os.getenv("RESPONSES_TABLE", "respuestas_cuestionario"),
            query_timeout_seconds=float(os.getenv("QUERY_TIMEOUT_SECONDS", "10")),
            retry_max_attempts=int(os.getenv("RETRY_MAX_ATTEMPTS", "3")),
            retry_base_delay_seconds=float(os.getenv("RETRY_BASE_DELAY_SECONDS", "0.5")),
            retry_multiplier=float(os.getenv("RETRY_MULTIPLIER", "2.0")),
            retry_max_delay_seconds=float(os.getenv("RETRY_MAX_DELAY_SECONDS", "5.0")),
            default_group_by=os.getenv("DEFAULT_GROUP_BY", "department"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "json"),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.responses_table:
            errors.append("responses_table must not be empty")

        if self.query_timeout_seconds <= 0:
            errors.append("query_timeout_seconds must be positive")

        if self.retry_max_attempts < 1:
            errors.append("retry_max_attempts must be at least 1")

        if self.log_format not in ("json", "text"):
            errors.append("log_format must be 'json' or 'text'")

        return errors

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            base_delay=self.retry_base_delay_seconds,
            multiplier=self.retry_multiplier,
            max_delay=self.retry_max_delay_seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "responses_table": self.responses_table,
            "query_timeout_seconds": self.query_timeout_seconds,
            "retry_max_attempts": self.retry_max_attempts,
            "retry_base_delay_seconds": self.retry_base_delay_seconds,
            "retry_multiplier": self.retry_multiplier,
            "retry_max_delay_seconds": self.retry_max_delay_seconds,
            "default_group_by": self.default_group_by,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


# ============================================================
# RESULT ENVELOPE
# ============================================================

@dataclass
class ResultMetadata:
    """How a result was produced."""

    operation: str
    query_latency_ms: float = 0.0
    sample_size: int = 0
    cache_hit: bool = False
    cache_stale: bool = False
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "query_latency_ms": round(self.query_latency_ms, 3),
            "sample_size": self.sample_size,
            "cache_hit": self.cache_hit,
            "cache_stale": self.cache_stale,
            "generated_at": self.generated_at,
        }


@dataclass
class Diagnostics:
    """Everything dropped or degraded along the way, each with a reason."""

    rejected_rows: List[Dict[str, Any]] = field(default_factory=list)
    validation_errors: List[Dict[str, Any]] = field(default_factory=list)
    excluded: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.rejected_rows or self.validation_errors or self.excluded or self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rejected_rows": list(self.rejected_rows),
            "validation_errors": list(self.validation_errors),
            "excluded": list(self.excluded),
            "errors": list(self.errors),
        }


@dataclass
class MetricsResult:
    """Envelope returned by every orchestrator operation."""

    success: bool
    operation: str
    data: Dict[str, Any]
    metadata: ResultMetadata
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return MetricsResultPayload(
            success=self.success,
            operation=self.operation,
            data=self.data,
            metadata=self.metadata.to_dict(),
            diagnostics=self.diagnostics.to_dict(),
            errors=self.errors,
        ).dump()


# ============================================================
# ERROR CHANNEL PAYLOAD
# ============================================================

@dataclass(frozen=True)
class ErrorReport:
    """Structured error delivered to registered error channels."""

    operation: str
    error_type: str
    message: str
    severity: Severity
    classification: ErrorClassification
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_exception(cls, operation: str, error: Exception) -> "ErrorReport":
        if isinstance(error, WellbeingAnalyticsError):
            return cls(
                operation=operation,
                error_type=type(error).__name__,
                message=error.message,
                severity=error.severity,
                classification=error.classification,
                context=dict(error.context),
            )
        return cls(
            operation=operation,
            error_type=type(error).__name__,
            message=str(error),
            severity=Severity.HIGH,
            classification=ErrorClassification.NON_RECOVERABLE,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "error_type": self.error_type,
            "message": self.message,
            "severity": self.severity.value,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }
