"""
Data Ingestion - Response Normalizer.

============================================================
RESPONSIBILITY
============================================================
Maps raw data store rows onto canonical RawResponse objects.
This is the only place that knows about row shapes.

- Detects the row shape and field aliases
- Coerces answer keys and values
- Parses timestamps, derives age and tenure from dates
- Reports every rejected row with a reason

============================================================
SUPPORTED ROW SHAPES
============================================================
LONG    one row per answer: {usuario_id, sesion_id,
        pregunta_id, respuesta, ...}; rows are grouped by
        respondent + session
NESTED  one row per submission with an answer container:
        {respondentId, answers: {1: 2, "q2": 1, ...}} or a list
WIDE    one row per submission with q1..q12 columns

Demographics may sit on the row itself or under a nested
"demographics" / "usuario" / "user" object.

============================================================
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from numbers import Integral, Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.clock import ClockProtocol, SystemClock, from_iso8601

from data_ingestion.types import Demographics, NormalizationReport, RawResponse, RejectedRow


logger = logging.getLogger(__name__)


# =============================================================
# FIELD ALIASES
# =============================================================

RESPONDENT_KEYS = ("respondent_id", "respondentId", "usuario_id", "user_id", "userId", "employee_id")
SESSION_KEYS = ("session_id", "sessionId", "sesion_id", "survey_id")
TIMESTAMP_KEYS = ("submitted_at", "submittedAt", "created_at", "fecha_respuesta", "fecha", "timestamp")
ANSWER_CONTAINER_KEYS = ("answers", "respuestas", "responses")
QUESTION_KEYS = ("question", "question_id", "pregunta_id", "pregunta")
ANSWER_KEYS = ("answer", "value", "respuesta", "valor")
NESTED_DEMOGRAPHIC_KEYS = ("demographics", "usuario", "user", "usuarios", "profile")

DEMOGRAPHIC_ALIASES: Dict[str, Tuple[str, ...]] = {
    "department": ("department", "departamento", "dept"),
    "position": ("position", "cargo", "job_title"),
    "area": ("area", "area_macro"),
    "shift": ("shift", "turno"),
    "gender": ("gender", "genero", "sexo"),
    "contract_type": ("contract_type", "tipo_contrato"),
}
AGE_KEYS = ("age", "edad")
BIRTH_DATE_KEYS = ("birth_date", "fecha_nacimiento")
TENURE_KEYS = ("tenure_years", "antiguedad", "antiguedad_empresa")
HIRE_DATE_KEYS = ("hire_date", "fecha_ingreso")

_QUESTION_KEY_PATTERN = re.compile(r"^(?:q|p|pregunta|question|item)?[_\s-]?(\d{1,2})$", re.IGNORECASE)
_WIDE_COLUMN_PATTERN = re.compile(r"^(?:q|p|pregunta_?)(\d{1,2})$", re.IGNORECASE)


class RowShape(str, Enum):
    LONG = "long"
    NESTED = "nested"
    WIDE = "wide"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NormalizerConfig:
    """Normalizer settings."""

    attribute_fields: Tuple[str, ...] = (
        "satisfaccion_laboral",
        "motivacion_seguridad",
        "confianza_gerencia",
        "job_satisfaction",
        "safety_motivation",
        "management_trust",
    )
    """Numeric row fields copied into Demographics.attributes."""


# =============================================================
# VALUE HELPERS
# =============================================================


def question_index(key: Any) -> Optional[int]:
    """Parse a question key (1, "1", "q1", "pregunta_1") into its index."""
    if isinstance(key, bool):
        return None
    if isinstance(key, Integral):
        return int(key)
    if isinstance(key, str):
        match = _QUESTION_KEY_PATTERN.match(key.strip())
        if match:
            return int(match.group(1))
    return None


def coerce_value(value: Any) -> Any:
    """Turn numeric-looking answers into ints; leave anything else as submitted."""
    if isinstance(value, bool):
        return value
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real):
        return int(value) if float(value).is_integer() else float(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            number = float(text)
        except ValueError:
            return value
        if math.isfinite(number) and number.is_integer():
            return int(number)
        return number
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, Real):
        seconds = float(value)
        if seconds > 1e12:
            seconds /= 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            return from_iso8601(value)
        except ValueError:
            return None
    return None


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _years_between(start: date, end: date) -> float:
    return (end - start).days / 365.25


# =============================================================
# NORMALIZER
# =============================================================


class ResponseNormalizer:
    """
    Normalizes raw rows of any supported shape.

    Rows are independent except in the LONG shape, where answers
    are grouped by respondent and session.
    """

    def __init__(
        self,
        config: Optional[NormalizerConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        self.config = config or NormalizerConfig()
        self._clock = clock or SystemClock()

    # ---- Shape detection ----

    @staticmethod
    def detect_shape(row: Mapping[str, Any]) -> RowShape:
        if any(key in row for key in ANSWER_CONTAINER_KEYS):
            return RowShape.NESTED
        if any(key in row for key in QUESTION_KEYS) and any(key in row for key in ANSWER_KEYS):
            return RowShape.LONG
        if any(isinstance(key, str) and _WIDE_COLUMN_PATTERN.match(key) for key in row):
            return RowShape.WIDE
        return RowShape.UNKNOWN

    # ---- Entry point ----

    def normalize(self, rows: Sequence[Any]) -> NormalizationReport:
        """
        Normalize a batch of rows.

        Returns:
            NormalizationReport with responses in first-seen order and
            rejected rows with reasons. Never raises for bad rows.
        """
        report = NormalizationReport(row_count=len(rows))
        ordered: List[Tuple[int, RawResponse]] = []
        long_groups: Dict[Tuple[str, str], List[Tuple[int, Mapping[str, Any]]]] = {}

        for index, row in enumerate(rows):
            if not isinstance(row, Mapping):
                report.rejected.append(RejectedRow(index, "row is not a mapping"))
                continue

            respondent_id = self._respondent_id(row)
            if respondent_id is None:
                report.rejected.append(RejectedRow(index, "missing respondent id"))
                continue

            shape = self.detect_shape(row)
            if shape == RowShape.LONG:
                session = self._first(row, SESSION_KEYS)
                group_key = (respondent_id, "" if session is None else str(session))
                long_groups.setdefault(group_key, []).append((index, row))
                continue

            if shape == RowShape.NESTED:
                answers = self._nested_answers(row)
            elif shape == RowShape.WIDE:
                answers = self._wide_answers(row)
            else:
                answers = {}

            if not answers:
                report.rejected.append(RejectedRow(index, "no answers found", respondent_id))
                continue

            ordered.append((index, self._build(respondent_id, row, answers, [row])))

        for (respondent_id, _session), members in long_groups.items():
            answers: Dict[Any, Any] = {}
            for _index, row in members:
                question = self._first(row, QUESTION_KEYS)
                key = question_index(question)
                answers[key if key is not None else question] = coerce_value(
                    self._first(row, ANSWER_KEYS)
                )
            first_index, first_row = members[0]
            ordered.append(
                (first_index, self._build(respondent_id, first_row, answers, [r for _, r in members]))
            )

        ordered.sort(key=lambda item: item[0])
        report.responses = [response for _, response in ordered]

        if report.rejected:
            logger.warning(
                f"Normalized {report.accepted_count} responses from {report.row_count} rows, "
                f"{len(report.rejected)} rows rejected"
            )
        else:
            logger.debug(f"Normalized {report.accepted_count} responses from {report.row_count} rows")
        return report

    # ---- Answers ----

    def _nested_answers(self, row: Mapping[str, Any]) -> Dict[Any, Any]:
        container = self._first(row, ANSWER_CONTAINER_KEYS)
        answers: Dict[Any, Any] = {}
        if isinstance(container, Mapping):
            for key, value in container.items():
                index = question_index(key)
                answers[index if index is not None else key] = coerce_value(value)
        elif isinstance(container, (list, tuple)):
            for position, item in enumerate(container, start=1):
                if isinstance(item, Mapping):
                    question = self._first(item, QUESTION_KEYS)
                    index = question_index(question) if question is not None else position
                    answers[index if index is not None else question] = coerce_value(
                        self._first(item, ANSWER_KEYS)
                    )
                else:
                    answers[position] = coerce_value(item)
        return answers

    @staticmethod
    def _wide_answers(row: Mapping[str, Any]) -> Dict[Any, Any]:
        answers: Dict[Any, Any] = {}
        for key, value in row.items():
            if not isinstance(key, str):
                continue
            match = _WIDE_COLUMN_PATTERN.match(key)
            if match:
                answers[int(match.group(1))] = coerce_value(value)
        return answers

    # ---- Building ----

    def _build(
        self,
        respondent_id: str,
        row: Mapping[str, Any],
        answers: Dict[Any, Any],
        timestamp_rows: Iterable[Mapping[str, Any]],
    ) -> RawResponse:
        session = self._first(row, SESSION_KEYS)
        timestamps = [
            ts for ts in (parse_timestamp(self._first(r, TIMESTAMP_KEYS)) for r in timestamp_rows)
            if ts is not None
        ]
        return RawResponse(
            respondent_id=respondent_id,
            session_id=None if session is None else str(session),
            answers=answers,
            submitted_at=max(timestamps) if timestamps else None,
            demographics=self._demographics(row),
        )

    def _demographics(self, row: Mapping[str, Any]) -> Demographics:
        sources = [row] + [
            row[key] for key in NESTED_DEMOGRAPHIC_KEYS if isinstance(row.get(key), Mapping)
        ]
        today = self._clock.today()

        values: Dict[str, Any] = {}
        for name, aliases in DEMOGRAPHIC_ALIASES.items():
            raw = self._first_in(sources, aliases)
            text = str(raw).strip() if raw is not None else ""
            values[name] = text or None

        age = _to_number(self._first_in(sources, AGE_KEYS))
        if age is None:
            birth = parse_timestamp(self._first_in(sources, BIRTH_DATE_KEYS))
            if birth is not None:
                age = _years_between(birth.date(), today)
        values["age"] = int(age) if age is not None and age >= 0 else None

        tenure = _to_number(self._first_in(sources, TENURE_KEYS))
        if tenure is None:
            hired = parse_timestamp(self._first_in(sources, HIRE_DATE_KEYS))
            if hired is not None:
                tenure = round(_years_between(hired.date(), today), 1)
        values["tenure_years"] = tenure if tenure is not None and tenure >= 0 else None

        attributes: Dict[str, float] = {}
        for source in sources:
            nested = source.get("attributes")
            if isinstance(nested, Mapping):
                for key, value in nested.items():
                    number = _to_number(value)
                    if number is not None:
                        attributes.setdefault(str(key), number)
        for name in self.config.attribute_fields:
            number = _to_number(self._first_in(sources, (name,)))
            if number is not None:
                attributes.setdefault(name, number)

        return Demographics(attributes=attributes, **values)

    # ---- Lookup helpers ----

    def _respondent_id(self, row: Mapping[str, Any]) -> Optional[str]:
        sources = [row] + [
            row[key] for key in NESTED_DEMOGRAPHIC_KEYS if isinstance(row.get(key), Mapping)
        ]
        value = self._first_in(sources, RESPONDENT_KEYS)
        if value is None:
            # a bare "id" only identifies the respondent on a nested user object
            value = self._first_in(sources[1:], ("id",))
        if value is None or isinstance(value, bool):
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def _first(row: Mapping[str, Any], keys: Iterable[str]) -> Any:
        for key in keys:
            value = row.get(key)
            if value is not None:
                return value
        return None

    @classmethod
    def _first_in(cls, sources: Sequence[Mapping[str, Any]], keys: Iterable[str]) -> Any:
        keys = tuple(keys)
        for source in sources:
            value = cls._first(source, keys)
            if value is not None:
                return value
        return None
