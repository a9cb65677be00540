"""City detection: narrow the candidate set to one administrative city.

Addresses are usually written most specific first, so the city tends to be the
last comma segment. Segments are scanned right to left and the first one that
is close enough to a known city decides it. When no segment qualifies, every
city whose name appears as a whole phrase in the address is accepted.
"""

from typing import List, Optional, Sequence, Tuple

from coverage_resolver.normalization.models import NormalizedDataset
from coverage_resolver.normalization.text import contains_phrase

from .models import CityDetection, CityMethod
from .similarity import string_similarity

CITY_SIMILARITY_THRESHOLD = 0.8


def best_city_for_segment(segment: str, city_keys: Sequence[str]) -> Tuple[Optional[str], float]:
    """Return the best-scoring city key for one normalized segment.

    Ties keep the first key in ``city_keys`` order.
    """
    best_key: Optional[str] = None
    best_score = 0.0
    for key in city_keys:
        score = string_similarity(segment, key)
        if score > best_score:
            best_key, best_score = key, score
    return best_key, best_score


def detect_city(
    segments: Sequence[str],
    normalized_address: str,
    dataset: NormalizedDataset,
) -> CityDetection:
    """Detect the city an address belongs to and narrow the candidates.

    Algorithm:
    1. Scan normalized segments from last to first, scoring each against every
       distinct city key
    2. The first scanned segment whose best score reaches 0.8 decides the city
       and its index is consumed
    3. Otherwise collect every city key contained in the full address as a
       whole phrase
    4. Restrict candidates to the detected cities, or keep the whole dataset

    Args:
        segments: Normalized comma segments, left to right
        normalized_address: Normalized full address
        dataset: Normalized reference dataset

    Returns:
        CityDetection with the candidate tuple and how it was narrowed
    """
    city_keys = dataset.city_keys

    for index in range(len(segments) - 1, -1, -1):
        key, score = best_city_for_segment(segments[index], city_keys)
        if key is not None and score >= CITY_SIMILARITY_THRESHOLD:
            return CityDetection(
                candidates=dataset.city_index[key],
                city_keys=(key,),
                segment_index=index,
                method=CityMethod.SEGMENT,
            )

    contained: List[str] = [key for key in city_keys if contains_phrase(normalized_address, key)]
    if not contained:
        return CityDetection(candidates=dataset.records)

    # Keep dataset order across several matched cities
    wanted = set(contained)
    candidates = tuple(record for record in dataset.records if record.city in wanted)
    return CityDetection(
        candidates=candidates,
        city_keys=tuple(contained),
        method=CityMethod.CONTAINMENT,
    )
