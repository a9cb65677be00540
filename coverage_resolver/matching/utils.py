"""Utility functions for preparing match results for downstream consumers.

This module provides helpers for building the address-suggestion payload
returned to API and CLI callers, and a compact rationale for logs.
"""

from typing import Dict, List

from coverage_resolver.domain.models import CoverageArea

from .models import MatchResult

SUCCESS = "SUCCESS"
FAILED = "FAILED"


def build_suggestion_payload(result: MatchResult) -> Dict:
    """Build the address-suggestion payload from a match result.

    Args:
        result: MatchResult from CoverageResolver.resolve_with_details()

    Returns:
        Dict with keys:
        - status: "SUCCESS" when a record matched, "FAILED" otherwise
        - suggested_division, suggested_city, suggested_city_id
        - suggested_zone, suggested_zone_id
        - suggested_area, suggested_area_id
        - inside_dhaka_flag
        - strategy: Cascade step that produced the match
        - score: Strategy score rounded to 4 places
        Every suggested_* field and inside_dhaka_flag is None on failure.
    """
    record = result.record

    return {
        "status": SUCCESS if record else FAILED,
        "suggested_division": record.division if record else None,
        "suggested_city": record.city if record else None,
        "suggested_city_id": record.city_id if record else None,
        "suggested_zone": record.zone if record else None,
        "suggested_zone_id": record.zone_id if record else None,
        "suggested_area": record.area if record else None,
        "suggested_area_id": record.area_id if record else None,
        "inside_dhaka_flag": record.inside_dhaka_flag if record else None,
        "strategy": result.strategy.value,
        "score": round(result.score, 4),
    }


def build_rationale_dict(result: MatchResult) -> Dict:
    """Build a lightweight rationale dict for a match result.

    Useful for storing alongside an order or emitting in logs.

    Returns:
        Dict with is_match, coverage_id, strategy, match_quality, score,
        city_keys, city_segment_index and candidate_count
    """
    return {
        "is_match": result.is_match,
        "coverage_id": result.record.id if result.record else None,
        "strategy": result.strategy.value,
        "match_quality": result.match_quality,
        "score": round(result.score, 4),
        "city_keys": list(result.city_keys),
        "city_segment_index": result.city_segment_index,
        "candidate_count": result.candidate_count,
    }


def serialize_coverage_areas(records: List[CoverageArea]) -> List[Dict]:
    """Serialize catalog records (search / suggest output) to plain dicts."""
    return [record.model_dump() for record in records]
