"""
Shared builders for questionnaire test data.

Answers are built from two raw values: one for every positive
question and one for every negative question, so the expected
total is 6 * positive + 6 * (3 - negative).
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.constants import POSITIVE_QUESTIONS, QUESTION_INDICES
from data_ingestion.types import Demographics, RawResponse, ScoredResponse
from risk_scoring.engine import RiskClassifier
from scoring_engine.wellbeing_score import ScoreEngine


JAN_10 = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)


def make_answers(
    positive: int = 3,
    negative: int = 0,
    overrides: Optional[Dict[Any, Any]] = None,
) -> Dict[Any, Any]:
    answers: Dict[Any, Any] = {
        q: positive if q in POSITIVE_QUESTIONS else negative for q in QUESTION_INDICES
    }
    answers.update(overrides or {})
    return answers


def expected_score(positive: int, negative: int) -> int:
    return 6 * positive + 6 * (3 - negative)


def make_response(
    respondent_id: str = "r1",
    positive: int = 3,
    negative: int = 0,
    department: Optional[str] = "Operations",
    position: Optional[str] = "Operator",
    gender: Optional[str] = "F",
    shift: Optional[str] = "Day",
    age: Optional[int] = 30,
    tenure_years: Optional[float] = 4.0,
    submitted_at: Optional[datetime] = JAN_10,
    session_id: Optional[str] = None,
    answers: Optional[Dict[Any, Any]] = None,
    attributes: Optional[Dict[str, float]] = None,
) -> RawResponse:
    return RawResponse(
        respondent_id=respondent_id,
        answers=answers if answers is not None else make_answers(positive, negative),
        session_id=session_id,
        submitted_at=submitted_at,
        demographics=Demographics(
            department=department,
            position=position,
            gender=gender,
            shift=shift,
            age=age,
            tenure_years=tenure_years,
            attributes=dict(attributes or {}),
        ),
    )


def make_scored(response: RawResponse) -> ScoredResponse:
    score = ScoreEngine().score(response.answers)
    return ScoredResponse(
        response=response,
        score=score,
        risk=RiskClassifier().classify(score.total_score),
    )


def make_row(
    respondent_id: str,
    positive: int = 3,
    negative: int = 0,
    department: str = "Operations",
    position: str = "Operator",
    submitted_at: str = "2024-01-10T08:00:00Z",
    **extra: Any,
) -> Dict[str, Any]:
    """A WIDE data store row with Spanish column names."""
    row: Dict[str, Any] = {
        "usuario_id": respondent_id,
        "fecha": submitted_at,
        "departamento": department,
        "cargo": position,
        "genero": "F",
        "turno": "Day",
        "edad": 30,
    }
    for question, value in make_answers(positive, negative).items():
        row[f"q{question}"] = value
    row.update(extra)
    return row
