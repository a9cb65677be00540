"""Unit tests for the zone/area matching strategies."""

import pytest

from coverage_resolver.matching.models import MatchContext, MatchStrategy
from coverage_resolver.matching.strategies import (
    CASCADE,
    match_keyword_number_exact,
    match_keyword_number_fuzzy,
    match_weighted_jaccard,
    match_zone_phrase,
    scan_segments,
    weighted_token_score,
)
from coverage_resolver.normalization.models import NormalizedCoverageArea
from coverage_resolver.normalization.text import (
    extract_keyword_numbers,
    normalize_text,
    split_segments,
    tokenize,
)
from tests.helpers import make_area


def make_context(address, records, skip_segment=None):
    """Build a MatchContext over the given records without city narrowing."""
    normalized = normalize_text(address)
    return MatchContext(
        normalized_address=normalized,
        tokens=frozenset(tokenize(normalized)),
        segments=tuple(normalize_text(segment) for segment in split_segments(address)),
        keyword_numbers=tuple(extract_keyword_numbers(normalized)),
        candidates=tuple(NormalizedCoverageArea.from_record(record) for record in records),
        skip_segment=skip_segment,
    )


def test_cascade_order():
    """Strategies after the segment scan run in a fixed order."""
    assert CASCADE == (
        match_zone_phrase,
        match_keyword_number_exact,
        match_keyword_number_fuzzy,
        match_weighted_jaccard,
    )


class TestScanSegments:
    """Tests for the segment-level fuzzy scan."""

    def test_exact_segment_match(self):
        records = [make_area("Gulshan 1", zone="Gulshan")]
        scan = scan_segments(make_context("House 5, Gulshan 1", records))

        assert scan.match is not None
        assert scan.match.candidate.record.id == "gulshan-1"
        assert scan.match.score == 1.0
        assert scan.match.strategy == MatchStrategy.SEGMENT_FUZZY
        assert scan.backup is None

    def test_rightmost_qualifying_segment_wins(self):
        records = [
            make_area("Banani", zone="Banani"),
            make_area("Gulshan 1", zone="Gulshan"),
        ]
        scan = scan_segments(make_context("Banani, Gulshan 1", records))

        assert scan.match.candidate.record.id == "gulshan-1"

    def test_skips_consumed_city_segment(self):
        records = [make_area("Gulshan 1", zone="Gulshan")]

        assert scan_segments(make_context("Gulshan 1, Dhaka", records)).match is not None
        scan = scan_segments(make_context("Gulshan 1, Dhaka", records, skip_segment=0))
        assert scan.match is None

    def test_short_segments_ignored(self):
        """Segments under three characters are never compared."""
        records = [make_area("Gu", zone="Gu")]
        scan = scan_segments(make_context("Gu", records))

        assert scan.match is None
        assert scan.backup is None

    def test_near_miss_becomes_backup(self):
        """A best score in [0.7, 0.8) is remembered but not returned."""
        records = [make_area("Mohakhali DOHS", zone="Mohakhali")]
        scan = scan_segments(make_context("Mohakal", records))

        assert scan.match is None
        assert scan.backup is not None
        assert scan.backup.strategy == MatchStrategy.ZONE_BACKUP
        assert scan.backup.score == pytest.approx(7 / 9)

    def test_low_score_no_backup(self):
        records = [make_area("Mohakhali DOHS", zone="Mohakhali")]
        scan = scan_segments(make_context("Motijheel", records))

        assert scan.match is None
        assert scan.backup is None


class TestZonePhrase:
    """Tests for exact zone phrase containment."""

    def test_prefers_inside_dhaka(self):
        records = [
            make_area("Mirpur 2", zone="Mirpur", inside_dhaka=False),
            make_area("Mirpur 10", zone="Mirpur", inside_dhaka=True),
        ]
        match = match_zone_phrase(make_context("near mirpur dhaka", records))

        assert match.candidate.record.id == "mirpur-10"
        assert match.strategy == MatchStrategy.ZONE_PHRASE
        assert match.score == 1.0

    def test_first_match_without_inside_dhaka(self):
        records = [
            make_area("Mirpur 2", zone="Mirpur", inside_dhaka=False),
            make_area("Mirpur 10", zone="Mirpur", inside_dhaka=False),
        ]
        match = match_zone_phrase(make_context("near mirpur dhaka", records))

        assert match.candidate.record.id == "mirpur-2"

    def test_zone_must_be_whole_words(self):
        records = [make_area("Mirpur 2", zone="Mirpur")]

        assert match_zone_phrase(make_context("mirpurbari", records)) is None

    def test_records_without_zone_ignored(self):
        records = [make_area("Mirpur 2", zone=None)]

        assert match_zone_phrase(make_context("mirpur 2", records)) is None


class TestKeywordNumber:
    """Tests for keyword+number exact and fuzzy strategies."""

    def test_exact_phrase(self):
        records = [make_area("Sonargaon Janapath", zone="Uttara Sector 14")]
        match = match_keyword_number_exact(make_context("house 3 sector 14", records))

        assert match.candidate.record.id == "sonargaon-janapath"
        assert match.strategy == MatchStrategy.KEYWORD_NUMBER_EXACT

    def test_exact_prefers_inside_dhaka(self):
        records = [
            make_area("Tongi Sector 14", zone="Sector 14", inside_dhaka=False),
            make_area("Uttara Sector 14", zone="Uttara Sector 14", inside_dhaka=True),
        ]
        match = match_keyword_number_exact(make_context("sector 14", records))

        assert match.candidate.record.id == "uttara-sector-14"

    def test_exact_number_must_match(self):
        records = [make_area("Sonargaon Janapath", zone="Uttara Sector 14")]

        assert match_keyword_number_exact(make_context("sector 4", records)) is None

    def test_fuzzy_misspelled_keyword(self):
        records = [make_area("Gulshan Avenue", zone="Gulshan 1")]
        match = match_keyword_number_fuzzy(make_context("golshan 1", records))

        assert match.candidate.record.id == "gulshan-avenue"
        assert match.strategy == MatchStrategy.KEYWORD_NUMBER_FUZZY
        assert match.score == pytest.approx(6 / 7)

    def test_fuzzy_highest_score_wins(self):
        records = [
            make_area("Gulshan Avenue", zone="Gulshan 1"),
            make_area("Golshan Lane", zone="Golshan Road 1"),
        ]
        match = match_keyword_number_fuzzy(make_context("golshan 1", records))

        assert match.candidate.record.id == "golshan-lane"
        assert match.score == 1.0

    def test_fuzzy_requires_shared_number(self):
        records = [make_area("Gulshan Avenue", zone="Gulshan 2")]

        assert match_keyword_number_fuzzy(make_context("golshan 1", records)) is None

    def test_fuzzy_below_threshold(self):
        records = [make_area("Golapbag", zone="Golapbag 1")]

        assert match_keyword_number_fuzzy(make_context("golshan 1", records)) is None


class TestWeightedJaccard:
    """Tests for the weighted Jaccard fallback."""

    def test_weighted_score(self):
        candidate = NormalizedCoverageArea.from_record(
            make_area("Market Road", zone="Kawran Bazar")
        )
        # area {market} vs {near, market} -> 3 * 0.5
        assert weighted_token_score(frozenset({"near", "market"}), candidate) == pytest.approx(1.5)

    def test_city_and_zone_weights(self):
        candidate = NormalizedCoverageArea.from_record(
            make_area("Tongi Bazar", zone="Tongi", city="Gazipur")
        )
        # area 3 * 1/3 + zone 2 * 1/2 + city 1 * 1/2
        score = weighted_token_score(frozenset({"tongi", "gazipur"}), candidate)
        assert score == pytest.approx(1.0 + 1.0 + 0.5)

    def test_best_candidate(self):
        records = [
            make_area("Kawran Bazar", zone="Tejgaon"),
            make_area("Market Road", zone="Kawran Bazar"),
        ]
        match = match_weighted_jaccard(make_context("house road near market", records))

        assert match.candidate.record.id == "market-road"
        assert match.strategy == MatchStrategy.WEIGHTED_JACCARD
        assert match.score == pytest.approx(1.5)

    def test_tie_keeps_first(self):
        records = [
            make_area("Market Road", zone="Tejgaon", id="first"),
            make_area("Market Road", zone="Tejgaon", id="second"),
        ]
        match = match_weighted_jaccard(make_context("near market", records))

        assert match.candidate.record.id == "first"

    def test_zero_score_is_no_match(self):
        records = [make_area("Market Road", zone="Tejgaon")]

        assert match_weighted_jaccard(make_context("xy zq", records)) is None
