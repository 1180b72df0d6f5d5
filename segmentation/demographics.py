"""
Segmentation - Demographic Profiles.

Age bucketing, group-key resolution and the demographic
sub-distributions reported for each segment.
"""

import statistics
from collections import Counter
from typing import Any, Dict, Iterable, Optional

from core.constants import UNSPECIFIED

from .config import AGE_BUCKETS, SegmentationConfig
from .types import DemographicProfile


def age_bucket(age: Optional[int]) -> str:
    """Map an age to its bucket label; missing or out-of-table ages are unspecified."""
    if age is None:
        return UNSPECIFIED
    for label, low, high in AGE_BUCKETS:
        if low <= age <= high:
            return label
    return UNSPECIFIED


def group_value(response: Any, group_by: str) -> Optional[str]:
    """Resolve the grouping value of a response, or None if it has none."""
    demographics = response.demographics
    if group_by == "age_group":
        bucket = age_bucket(demographics.age)
        return None if bucket == UNSPECIFIED else bucket
    value = demographics.get(group_by)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _distribution(values: Iterable[Optional[str]], config: SegmentationConfig) -> Dict[str, int]:
    counts = Counter(
        UNSPECIFIED if config.is_placeholder(value) else str(value).strip()
        for value in values
    )
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def build_profile(responses: Iterable[Any], config: SegmentationConfig) -> DemographicProfile:
    """Build the demographic sub-distributions of a group of responses."""
    responses = list(responses)
    demographics = [r.demographics for r in responses]

    age_groups: Dict[str, int] = {label: 0 for label, _, _ in AGE_BUCKETS}
    age_groups[UNSPECIFIED] = 0
    for d in demographics:
        age_groups[age_bucket(d.age)] += 1

    tenures = [d.tenure_years for d in demographics if d.tenure_years is not None]

    return DemographicProfile(
        age_groups=age_groups,
        genders=_distribution((d.gender for d in demographics), config),
        shifts=_distribution((d.shift for d in demographics), config),
        contract_types=_distribution((d.contract_type for d in demographics), config),
        positions=_distribution((d.position for d in demographics), config),
        mean_tenure_years=statistics.fmean(tenures) if tenures else None,
    )
