"""Normalization layer for addresses and coverage records.

This module provides:
- normalize_text / tokenize: canonical text and comparison tokens
- NormalizedCoverageArea: Immutable coverage record with normalized variants
- NormalizedDataset: Shareable normalized dataset with a city index
- CoverageNormalizer: Service to build normalized datasets
- DatasetCache: Read-through cache around a dataset loader
"""

from .models import NormalizedCoverageArea, NormalizedDataset
from .service import CoverageNormalizer, DatasetCache
from .text import (
    STOPWORDS,
    contains_phrase,
    extract_keyword_numbers,
    normalize_text,
    split_segments,
    tokenize,
)

__all__ = [
    "CoverageNormalizer",
    "DatasetCache",
    "NormalizedCoverageArea",
    "NormalizedDataset",
    "STOPWORDS",
    "contains_phrase",
    "extract_keyword_numbers",
    "normalize_text",
    "split_segments",
    "tokenize",
]
