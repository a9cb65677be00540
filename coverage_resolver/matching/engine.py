"""Coverage area resolver: map a free-form address to one coverage record.

This module implements the resolution flow that:
1. Normalizes and tokenizes the raw address
2. Detects the city and narrows the candidate set
3. Runs the zone/area cascade until a strategy produces a result
4. Falls back to the low-confidence zone backup, or reports no match
"""

import logging
from typing import Iterable, Iterator, Optional, Sequence, Union

from coverage_resolver.domain.models import CoverageArea
from coverage_resolver.logging import get_logger
from coverage_resolver.logging.context import log_context
from coverage_resolver.normalization.models import NormalizedDataset
from coverage_resolver.normalization.service import CoverageNormalizer
from coverage_resolver.normalization.text import (
    extract_keyword_numbers,
    normalize_text,
    split_segments,
    tokenize,
)
from coverage_resolver.utils.hashing import compute_address_key

from .city import detect_city
from .models import MatchContext, MatchResult, MatchStrategy, StrategyMatch
from .strategies import CASCADE, Strategy, scan_segments

logger = get_logger(__name__, component="matching")


class CoverageResolver:
    """Resolves delivery addresses against a normalized coverage dataset.

    The resolver holds no mutable state besides its (immutable) dataset, so one
    instance can serve concurrent callers.

    Responsibilities:
    - Narrow candidates by city
    - Run the segment scan and the ordered strategy cascade
    - Keep the zone backup as the final fallback
    - Log the decision for every address
    """

    def __init__(
        self,
        dataset: NormalizedDataset,
        strategies: Sequence[Strategy] = CASCADE,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize CoverageResolver.

        Args:
            dataset: Normalized reference dataset (build once, reuse across calls)
            strategies: Cascade strategies run after the segment scan, in order
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.dataset = dataset
        self.strategies = tuple(strategies)
        self.logger = logger_instance or logger

    def resolve(self, raw_address: Optional[str]) -> Optional[CoverageArea]:
        """Return the best coverage record for an address, or None."""
        return self.resolve_with_details(raw_address).record

    def resolve_with_details(self, raw_address: Optional[str]) -> MatchResult:
        """Resolve an address and report how the decision was reached.

        Never raises for the not-found case: empty or unmatched input yields a
        MatchResult with ``record=None`` and ``strategy=MatchStrategy.NONE``.

        Args:
            raw_address: Free-form delivery address (any script mix, may be empty)

        Returns:
            MatchResult with the chosen record, strategy and score
        """
        with log_context(address_key=compute_address_key(raw_address)):
            normalized_address = normalize_text(raw_address)
            segments = tuple(normalize_text(segment) for segment in split_segments(raw_address))

            detection = detect_city(segments, normalized_address, self.dataset)
            if detection.city_keys:
                self.logger.debug(
                    "City detected",
                    extra={
                        "event": "resolution.city.detected",
                        "city_keys": list(detection.city_keys),
                        "method": detection.method.value,
                        "segment_index": detection.segment_index,
                        "candidate_count": len(detection.candidates),
                    },
                )

            context = MatchContext(
                normalized_address=normalized_address,
                tokens=frozenset(tokenize(normalized_address)),
                segments=segments,
                keyword_numbers=tuple(extract_keyword_numbers(normalized_address)),
                candidates=detection.candidates,
                skip_segment=detection.segment_index,
            )

            match = self._run_cascade(context)

            result = MatchResult(
                record=match.candidate.record if match else None,
                strategy=match.strategy if match else MatchStrategy.NONE,
                score=match.score if match else 0.0,
                city_keys=list(detection.city_keys),
                city_segment_index=detection.segment_index,
                candidate_count=len(detection.candidates),
            )
            self._log_result(result)
            return result

    def resolve_batch(self, addresses: Iterable[Optional[str]]) -> Iterator[MatchResult]:
        """Resolve many addresses, yielding one MatchResult per input in order."""
        for raw_address in addresses:
            yield self.resolve_with_details(raw_address)

    def _run_cascade(self, context: MatchContext) -> Optional[StrategyMatch]:
        scan = scan_segments(context)
        if scan.match is not None:
            return scan.match

        for strategy in self.strategies:
            match = strategy(context)
            if match is not None:
                return match
            name = getattr(strategy, "__name__", repr(strategy))
            self.logger.debug(
                f"Strategy {name} found nothing",
                extra={"event": "resolution.strategy.skipped", "strategy": name},
            )

        return scan.backup

    def _log_result(self, result: MatchResult) -> None:
        if result.is_match:
            self.logger.info(
                f"Address matched: {result.record.label}",
                extra={
                    "event": "resolution.address.matched",
                    "coverage_id": result.record.id,
                    "strategy": result.strategy.value,
                    "score": round(result.score, 4),
                    "candidate_count": result.candidate_count,
                },
            )
        else:
            self.logger.info(
                "Address did not match any coverage area",
                extra={
                    "event": "resolution.address.unmatched",
                    "candidate_count": result.candidate_count,
                },
            )


DatasetLike = Union[NormalizedDataset, Iterable[CoverageArea]]


def resolve(raw_address: Optional[str], dataset: DatasetLike) -> Optional[CoverageArea]:
    """Resolve one address against a dataset.

    Accepts an already normalized dataset (preferred, normalize once and reuse)
    or plain CoverageArea records, which are normalized for this call only.

    Example:
        >>> resolve("House 5, Road 11, Gulshan 1, Dhaka", records)
        CoverageArea(..., zone='Gulshan', area='Gulshan 1', ...)
    """
    if not isinstance(dataset, NormalizedDataset):
        dataset = CoverageNormalizer().normalize_dataset(dataset)
    return CoverageResolver(dataset).resolve(raw_address)
