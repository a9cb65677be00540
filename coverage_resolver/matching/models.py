"""Data models for the matching engine.

This module defines the per-call state shared by the city detector and the
zone/area cascade, and the result handed back to callers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from coverage_resolver.domain.models import CoverageArea
from coverage_resolver.normalization.models import NormalizedCoverageArea


class MatchStrategy(str, Enum):
    """Which step of the cascade produced a result."""

    SEGMENT_FUZZY = "segment_fuzzy"
    ZONE_PHRASE = "zone_phrase"
    KEYWORD_NUMBER_EXACT = "keyword_number_exact"
    KEYWORD_NUMBER_FUZZY = "keyword_number_fuzzy"
    WEIGHTED_JACCARD = "weighted_jaccard"
    ZONE_BACKUP = "zone_backup"
    NONE = "none"


class CityMethod(str, Enum):
    """How the candidate set was narrowed."""

    SEGMENT = "segment"
    CONTAINMENT = "containment"
    NONE = "none"


@dataclass(frozen=True)
class StrategyMatch:
    """A candidate chosen by one cascade strategy, with its score."""

    candidate: NormalizedCoverageArea
    score: float
    strategy: MatchStrategy


@dataclass(frozen=True)
class CityDetection:
    """Output of city detection.

    Attributes:
        candidates: Records left after narrowing (the whole dataset if no city found)
        city_keys: Normalized city keys that narrowed the set
        segment_index: Index of the comma segment consumed as the city, if any
        method: Whether the city came from a segment, from containment, or not at all
    """

    candidates: Tuple[NormalizedCoverageArea, ...]
    city_keys: Tuple[str, ...] = ()
    segment_index: Optional[int] = None
    method: CityMethod = CityMethod.NONE


@dataclass(frozen=True)
class MatchContext:
    """Everything a cascade strategy needs about one address.

    Attributes:
        normalized_address: Normalized full address
        tokens: Token set of the normalized address
        segments: Normalized comma segments, left to right
        keyword_numbers: (word, number) pairs extracted from the address
        candidates: Records remaining after city detection
        skip_segment: Segment index consumed by city detection, if any
    """

    normalized_address: str
    tokens: FrozenSet[str]
    segments: Tuple[str, ...]
    keyword_numbers: Tuple[Tuple[str, str], ...]
    candidates: Tuple[NormalizedCoverageArea, ...]
    skip_segment: Optional[int] = None


@dataclass(frozen=True)
class SegmentScan:
    """Result of the segment-level fuzzy scan.

    Attributes:
        match: Definitive match when a segment reached the strict threshold
        backup: Low-confidence candidate kept as the last-resort fallback
    """

    match: Optional[StrategyMatch] = None
    backup: Optional[StrategyMatch] = None


@dataclass
class MatchResult:
    """Result of resolving one address against the coverage dataset.

    Attributes:
        record: Matched coverage record, None when nothing matched
        strategy: Cascade step that produced the record
        score: Strategy-specific score (similarity, 1.0 for exact, weighted Jaccard)
        city_keys: Normalized city keys used to narrow candidates
        city_segment_index: Comma segment consumed as the city, if any
        candidate_count: Number of candidates the cascade ran over
    """

    record: Optional[CoverageArea]
    strategy: MatchStrategy = MatchStrategy.NONE
    score: float = 0.0
    city_keys: List[str] = field(default_factory=list)
    city_segment_index: Optional[int] = None
    candidate_count: int = 0

    @property
    def is_match(self) -> bool:
        """Whether a record was found."""
        return self.record is not None

    @property
    def used_zone_backup(self) -> bool:
        return self.strategy is MatchStrategy.ZONE_BACKUP

    @property
    def match_quality(self) -> str:
        """Return a description of match quality.

        Returns:
            "exact" for phrase matches,
            "fuzzy" for similarity-based matches,
            "weak" for the Jaccard fallback and the zone backup,
            "no-match" when nothing matched
        """
        if self.strategy in (MatchStrategy.ZONE_PHRASE, MatchStrategy.KEYWORD_NUMBER_EXACT):
            return "exact"
        if self.strategy in (MatchStrategy.SEGMENT_FUZZY, MatchStrategy.KEYWORD_NUMBER_FUZZY):
            return "fuzzy"
        if self.strategy in (MatchStrategy.WEIGHTED_JACCARD, MatchStrategy.ZONE_BACKUP):
            return "weak"
        return "no-match"
