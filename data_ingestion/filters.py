"""
Data Ingestion - Query Filters.

Validated filter set shared by every orchestrated operation. The
literal values 'todos' / 'all' mean "no filter". Filters are applied
in-process after normalization; what is forwarded to the data store
is only a hint.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from core.clock import from_iso8601
from core.exceptions import FilterValidationError

from data_ingestion.types import RawResponse


WILDCARD_VALUES = frozenset({"todos", "todas", "all", "*", ""})

FILTER_ALIASES: Dict[str, str] = {
    "department": "department",
    "departamento": "department",
    "shift": "shift",
    "turno": "shift",
    "gender": "gender",
    "genero": "gender",
    "position": "position",
    "cargo": "position",
    "start_date": "start_date",
    "startDate": "start_date",
    "fechaInicio": "start_date",
    "end_date": "end_date",
    "endDate": "end_date",
    "fechaFin": "end_date",
}

_TEXT_FIELDS = ("department", "shift", "gender", "position")


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return from_iso8601(value).date()
    raise ValueError(f"unsupported date value {value!r}")


@dataclass(frozen=True)
class MetricsFilters:
    """Optional equality and date-range filters."""

    department: Optional[str] = None
    shift: Optional[str] = None
    gender: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "MetricsFilters":
        """
        Build filters from user input, accepting field aliases.

        Raises:
            FilterValidationError: listing every problem found
        """
        if raw is None:
            return cls()
        if isinstance(raw, MetricsFilters):
            return raw
        if not isinstance(raw, Mapping):
            raise FilterValidationError(
                "Filters must be a mapping",
                errors=[f"got {type(raw).__name__}"],
            )

        errors: List[str] = []
        values: Dict[str, Any] = {}

        for key, value in raw.items():
            name = FILTER_ALIASES.get(key)
            if name is None:
                errors.append(f"Unknown filter '{key}'")
                continue
            if value is None:
                continue
            if isinstance(value, str) and value.strip().lower() in WILDCARD_VALUES:
                continue

            if name in _TEXT_FIELDS:
                if not isinstance(value, str):
                    errors.append(f"Filter '{key}' must be a string")
                    continue
                values[name] = value.strip()
            else:
                try:
                    values[name] = _parse_date(value)
                except ValueError:
                    errors.append(f"Filter '{key}' is not a valid date: {value!r}")

        start, end = values.get("start_date"), values.get("end_date")
        if start and end and start > end:
            errors.append("start_date must not be after end_date")

        if errors:
            raise FilterValidationError(f"Invalid filters: {len(errors)} problem(s)", errors=errors)
        return cls(**values)

    @property
    def is_empty(self) -> bool:
        return not self.to_cache_params()

    def to_cache_params(self) -> Dict[str, Any]:
        """
        Non-empty filters, JSON friendly, for cache keys.

        Text values are casefolded to match how `matches` compares them.
        """
        return {
            name: value.casefold() if name in _TEXT_FIELDS else value
            for name, value in self.to_query().items()
        }

    def to_query(self) -> Dict[str, Any]:
        """Filter hint forwarded to the data store, original case kept."""
        params: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            params[f.name] = value.isoformat() if isinstance(value, date) else value
        return params

    def matches(self, response: RawResponse) -> bool:
        demographics = response.demographics
        for name in _TEXT_FIELDS:
            expected = getattr(self, name)
            if expected is None:
                continue
            actual = getattr(demographics, name)
            if actual is None or actual.strip().casefold() != expected.casefold():
                return False

        if self.start_date or self.end_date:
            if response.submitted_at is None:
                return False
            submitted = response.submitted_at.date()
            if self.start_date and submitted < self.start_date:
                return False
            if self.end_date and submitted > self.end_date:
                return False

        return True
