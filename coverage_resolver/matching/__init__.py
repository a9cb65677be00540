"""Address-to-coverage-area matching engine.

This module provides:
- CoverageResolver: Resolves free-form addresses to coverage records
- resolve: One-shot convenience wrapper
- MatchResult / MatchStrategy: Resolution outcome and the cascade step behind it
- Similarity helpers (Levenshtein, normalized similarity, Jaccard)
- Utility functions for building suggestion payloads
"""

from .city import detect_city
from .engine import CoverageResolver, resolve
from .models import CityDetection, CityMethod, MatchContext, MatchResult, MatchStrategy
from .similarity import jaccard_similarity, levenshtein_distance, string_similarity
from .strategies import CASCADE, scan_segments
from .utils import build_rationale_dict, build_suggestion_payload, serialize_coverage_areas

__all__ = [
    "CASCADE",
    "CityDetection",
    "CityMethod",
    "CoverageResolver",
    "MatchContext",
    "MatchResult",
    "MatchStrategy",
    "build_rationale_dict",
    "build_suggestion_payload",
    "detect_city",
    "jaccard_similarity",
    "levenshtein_distance",
    "resolve",
    "scan_segments",
    "serialize_coverage_areas",
    "string_similarity",
]
