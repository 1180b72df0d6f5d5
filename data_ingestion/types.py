"""
Data Ingestion - Type Definitions.

============================================================
PURPOSE
============================================================
Canonical response types produced at the data store boundary.

- Demographics: typed respondent attributes
- RawResponse: one questionnaire submission, read-only
- ScoredResponse: a RawResponse with its score and risk band
- NormalizationReport: responses plus rejected rows with reasons

============================================================
DESIGN PRINCIPLES
============================================================
- Every downstream package sees only these types
- Raw row shapes never leak past the normalizer
- No business logic

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.clock import to_iso8601
from risk_scoring.types import RiskClassification
from scoring_engine.types import ScoreResult


# =============================================================
# DEMOGRAPHICS
# =============================================================

DEMOGRAPHIC_FIELDS = (
    "department",
    "position",
    "area",
    "shift",
    "gender",
    "age",
    "tenure_years",
    "contract_type",
)


@dataclass(frozen=True)
class Demographics:
    """
    Respondent attributes.

    `attributes` holds free-form numeric variables such as
    job satisfaction scores, used by the correlation engine.
    """

    department: Optional[str] = None
    position: Optional[str] = None
    area: Optional[str] = None
    shift: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    tenure_years: Optional[float] = None
    contract_type: Optional[str] = None
    attributes: Dict[str, float] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a demographic field or a free-form attribute by name."""
        if name in DEMOGRAPHIC_FIELDS:
            value = getattr(self, name)
            return default if value is None else value
        return self.attributes.get(name, default)

    def to_dict(self) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in DEMOGRAPHIC_FIELDS}
        data["attributes"] = dict(self.attributes)
        return data


# =============================================================
# RESPONSES
# =============================================================


@dataclass(frozen=True)
class RawResponse:
    """
    One questionnaire submission.

    `answers` maps question index to the submitted value. Values are
    left as submitted when they could not be coerced, so the scoring
    engine can report them.
    """

    respondent_id: str
    answers: Dict[Any, Any]
    session_id: Optional[str] = None
    submitted_at: Optional[datetime] = None
    demographics: Demographics = field(default_factory=Demographics)

    @property
    def key(self) -> str:
        return f"{self.respondent_id}:{self.session_id or ''}"


@dataclass(frozen=True)
class ScoredResponse:
    """A response with its wellbeing score and risk classification."""

    response: RawResponse
    score: ScoreResult
    risk: RiskClassification

    @property
    def respondent_id(self) -> str:
        return self.response.respondent_id

    @property
    def submitted_at(self) -> Optional[datetime]:
        return self.response.submitted_at

    @property
    def demographics(self) -> Demographics:
        return self.response.demographics

    @property
    def total_score(self) -> int:
        return self.score.total_score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "respondent_id": self.respondent_id,
            "session_id": self.response.session_id,
            "submitted_at": to_iso8601(self.submitted_at) if self.submitted_at else None,
            "score": self.total_score,
            "band": self.risk.band.value,
            "label": self.risk.label,
            "is_high_risk": self.risk.is_high_risk,
            "department": self.demographics.department,
            "position": self.demographics.position,
        }


# =============================================================
# NORMALIZATION RESULT
# =============================================================


@dataclass(frozen=True)
class RejectedRow:
    """A raw row the normalizer could not map."""

    index: int
    reason: str
    respondent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "reason": self.reason, "respondent_id": self.respondent_id}


@dataclass
class NormalizationReport:
    """Output of one normalization pass."""

    responses: List[RawResponse] = field(default_factory=list)
    rejected: List[RejectedRow] = field(default_factory=list)
    row_count: int = 0

    @property
    def accepted_count(self) -> int:
        return len(self.responses)


__all__ = [
    "DEMOGRAPHIC_FIELDS",
    "Demographics",
    "RawResponse",
    "ScoredResponse",
    "RejectedRow",
    "NormalizationReport",
]
