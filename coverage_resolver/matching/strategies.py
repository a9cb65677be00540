"""Zone/area matching strategies.

Each strategy is a pure function of a MatchContext returning a StrategyMatch or
None. The engine runs scan_segments() first, then CASCADE in order, and stops at
the first strategy that produces a result. The thresholds and weights below are
calibration constants of the matching heuristic and are not configurable.
"""

from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

from coverage_resolver.normalization.models import NormalizedCoverageArea
from coverage_resolver.normalization.text import contains_phrase, strip_digits

from .models import MatchContext, MatchStrategy, SegmentScan, StrategyMatch
from .similarity import jaccard_similarity, string_similarity

STRICT_SIMILARITY_THRESHOLD = 0.8
BACKUP_SIMILARITY_THRESHOLD = 0.7
KEYWORD_SIMILARITY_THRESHOLD = 0.7
MIN_SEGMENT_LENGTH = 3

AREA_WEIGHT = 3.0
ZONE_WEIGHT = 2.0
CITY_WEIGHT = 1.0

Strategy = Callable[[MatchContext], Optional[StrategyMatch]]


def _prefer_inside_dhaka(
    matches: Sequence[NormalizedCoverageArea], strategy: MatchStrategy
) -> Optional[StrategyMatch]:
    """Pick the first inside-Dhaka match, else the first match overall."""
    if not matches:
        return None
    for candidate in matches:
        if candidate.inside_dhaka:
            return StrategyMatch(candidate, 1.0, strategy)
    return StrategyMatch(matches[0], 1.0, strategy)


def scan_segments(context: MatchContext) -> SegmentScan:
    """Fuzzy-match comma segments against zone and area names, right to left.

    For each segment every candidate scores max(sim(segment, zone),
    sim(segment, area)), and the best pair seen so far is tracked across the
    whole scan. As soon as that running best reaches the strict threshold it
    is returned, so the rightmost qualifying segment wins. If the scan ends
    with a best score in [0.7, 0.8) that candidate becomes the zone backup.
    """
    best: Optional[NormalizedCoverageArea] = None
    best_score = 0.0

    for index in range(len(context.segments) - 1, -1, -1):
        if index == context.skip_segment:
            continue
        segment = context.segments[index]
        if len(segment) < MIN_SEGMENT_LENGTH:
            continue

        for candidate in context.candidates:
            score = max(
                string_similarity(segment, candidate.zone),
                string_similarity(segment, candidate.area),
            )
            if score > best_score:
                best, best_score = candidate, score

        if best is not None and best_score >= STRICT_SIMILARITY_THRESHOLD:
            return SegmentScan(match=StrategyMatch(best, best_score, MatchStrategy.SEGMENT_FUZZY))

    if best is not None and BACKUP_SIMILARITY_THRESHOLD <= best_score < STRICT_SIMILARITY_THRESHOLD:
        return SegmentScan(backup=StrategyMatch(best, best_score, MatchStrategy.ZONE_BACKUP))

    return SegmentScan()


def match_zone_phrase(context: MatchContext) -> Optional[StrategyMatch]:
    """Candidates whose whole zone name appears verbatim in the address."""
    zones = {candidate.zone for candidate in context.candidates if candidate.zone}
    found = {zone for zone in zones if contains_phrase(context.normalized_address, zone)}
    if not found:
        return None

    matches = [candidate for candidate in context.candidates if candidate.zone in found]
    return _prefer_inside_dhaka(matches, MatchStrategy.ZONE_PHRASE)


def match_keyword_number_exact(context: MatchContext) -> Optional[StrategyMatch]:
    """Candidates whose zone contains an address phrase like "sector 14" exactly."""
    matches: List[NormalizedCoverageArea] = []
    for word, number in context.keyword_numbers:
        phrase = f"{word} {number}"
        for candidate in context.candidates:
            if contains_phrase(candidate.zone, phrase) and candidate not in matches:
                matches.append(candidate)

    return _prefer_inside_dhaka(matches, MatchStrategy.KEYWORD_NUMBER_EXACT)


def _anchor_keyword(zone: str) -> Optional[str]:
    """First token of a zone name once its digits are removed."""
    tokens = strip_digits(zone).split()
    return tokens[0] if tokens else None


def match_keyword_number_fuzzy(context: MatchContext) -> Optional[StrategyMatch]:
    """Match a misspelled keyword anchored by a shared number.

    "golshan 1" reaches a zone "gulshan 1" because the zone contains the number 1
    and sim("golshan", "gulshan") >= 0.7. The highest score wins; ties keep the
    first pair found.
    """
    scored: List[Tuple[NormalizedCoverageArea, float]] = []
    for word, number in context.keyword_numbers:
        for candidate in context.candidates:
            if not contains_phrase(candidate.zone, number):
                continue
            anchor = _anchor_keyword(candidate.zone)
            if anchor is None:
                continue
            score = string_similarity(word, anchor)
            if score >= KEYWORD_SIMILARITY_THRESHOLD:
                scored.append((candidate, score))

    best: Optional[Tuple[NormalizedCoverageArea, float]] = None
    for candidate, score in scored:
        if best is None or score > best[1]:
            best = (candidate, score)

    if best is None:
        return None
    return StrategyMatch(best[0], best[1], MatchStrategy.KEYWORD_NUMBER_FUZZY)


def weighted_token_score(tokens: FrozenSet[str], candidate: NormalizedCoverageArea) -> float:
    """3·J(area) + 2·J(zone) + 1·J(city) against the address token set."""
    return (
        AREA_WEIGHT * jaccard_similarity(tokens, candidate.area_tokens)
        + ZONE_WEIGHT * jaccard_similarity(tokens, candidate.zone_tokens)
        + CITY_WEIGHT * jaccard_similarity(tokens, candidate.city_tokens)
    )


def match_weighted_jaccard(context: MatchContext) -> Optional[StrategyMatch]:
    """Token-overlap fallback; the strictly highest positive score wins."""
    best: Optional[NormalizedCoverageArea] = None
    best_score = 0.0
    for candidate in context.candidates:
        score = weighted_token_score(context.tokens, candidate)
        if score > best_score:
            best, best_score = candidate, score

    if best is None:
        return None
    return StrategyMatch(best, best_score, MatchStrategy.WEIGHTED_JACCARD)


# Order matters: the first strategy to return a match ends the cascade
CASCADE: Tuple[Strategy, ...] = (
    match_zone_phrase,
    match_keyword_number_exact,
    match_keyword_number_fuzzy,
    match_weighted_jaccard,
)
