"""Data models for the normalization layer.

This module defines the precomputed, immutable views of coverage records that
the matching engine compares addresses against.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, Mapping, Tuple

from coverage_resolver.domain.models import CoverageArea

from .text import normalize_text, tokenize


@dataclass(frozen=True)
class NormalizedCoverageArea:
    """A coverage record together with its normalized text variants.

    Preserves the original record for the caller while providing normalized
    names and token sets for comparisons. Instances are built once per dataset
    load and never mutated.

    Attributes:
        record: Original CoverageArea
        city: Normalized city name ("" when absent)
        zone: Normalized zone name ("" when absent)
        area: Normalized area name
        city_tokens: Token set of the normalized city
        zone_tokens: Token set of the normalized zone
        area_tokens: Token set of the normalized area
    """

    record: CoverageArea
    city: str
    zone: str
    area: str
    city_tokens: FrozenSet[str] = field(default_factory=frozenset)
    zone_tokens: FrozenSet[str] = field(default_factory=frozenset)
    area_tokens: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_record(cls, record: CoverageArea) -> "NormalizedCoverageArea":
        """Create a NormalizedCoverageArea from a CoverageArea.

        Args:
            record: Coverage record to normalize

        Returns:
            NormalizedCoverageArea with normalized names and token sets
        """
        city = normalize_text(record.city)
        zone = normalize_text(record.zone)
        area = normalize_text(record.area)

        return cls(
            record=record,
            city=city,
            zone=zone,
            area=area,
            city_tokens=frozenset(tokenize(city)),
            zone_tokens=frozenset(tokenize(zone)),
            area_tokens=frozenset(tokenize(area)),
        )

    @property
    def inside_dhaka(self) -> bool:
        """Convenience accessor for the tie-break flag."""
        return self.record.inside_dhaka_flag


@dataclass(frozen=True)
class NormalizedDataset:
    """Immutable, shareable collection of normalized coverage records.

    Attributes:
        records: All records in source order
        city_index: Normalized city key -> records of that city (first-seen order).
            Records without a city are kept in ``records`` but not indexed.
    """

    records: Tuple[NormalizedCoverageArea, ...]
    city_index: Mapping[str, Tuple[NormalizedCoverageArea, ...]]

    @classmethod
    def from_normalized(cls, records: Tuple[NormalizedCoverageArea, ...]) -> "NormalizedDataset":
        """Build the city index over already normalized records."""
        grouped: Dict[str, list] = {}
        for record in records:
            if not record.city:
                continue
            grouped.setdefault(record.city, []).append(record)

        return cls(
            records=tuple(records),
            city_index=MappingProxyType({key: tuple(group) for key, group in grouped.items()}),
        )

    @property
    def city_keys(self) -> Tuple[str, ...]:
        """Distinct normalized city names in first-seen order."""
        return tuple(self.city_index)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[NormalizedCoverageArea]:
        return iter(self.records)
