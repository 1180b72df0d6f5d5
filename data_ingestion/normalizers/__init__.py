"""
Data Ingestion - Normalizers Package.

Normalizers convert raw data store rows into canonical responses.

Normalizers:
- response_normalizer: long, nested and wide questionnaire rows
"""

from .response_normalizer import (
    NormalizerConfig,
    ResponseNormalizer,
    RowShape,
    coerce_value,
    parse_timestamp,
    question_index,
)


__all__ = [
    "NormalizerConfig",
    "ResponseNormalizer",
    "RowShape",
    "coerce_value",
    "parse_timestamp",
    "question_index",
]
