"""Coverage dataset normalization service.

This module implements the preparation step that:
1. Converts CoverageArea records into NormalizedCoverageArea views
2. Groups them by normalized city for the city detector
3. Caches the result so a dataset is normalized once and shared across calls
"""

import logging
import threading
from typing import Callable, Iterable, Optional

from coverage_resolver.domain.models import CoverageArea
from coverage_resolver.logging import get_logger

from .models import NormalizedCoverageArea, NormalizedDataset

logger = get_logger(__name__, component="normalization")

DatasetLoader = Callable[[], Iterable[CoverageArea]]


class CoverageNormalizer:
    """Normalizes coverage records into immutable matching views.

    Responsibilities:
    - Precompute normalized city, zone and area names
    - Precompute token sets used by the Jaccard fallback
    - Build the city index used by city detection
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        """Initialize CoverageNormalizer.

        Args:
            logger_instance: Logger instance (defaults to module logger)
        """
        self.logger = logger_instance or logger

    def normalize(self, record: CoverageArea) -> NormalizedCoverageArea:
        """Normalize a single coverage record."""
        return NormalizedCoverageArea.from_record(record)

    def normalize_dataset(self, records: Iterable[CoverageArea]) -> NormalizedDataset:
        """Normalize a full reference dataset.

        Args:
            records: Coverage records in the order the resolver should see them

        Returns:
            NormalizedDataset ready to be shared between resolution calls
        """
        normalized = tuple(self.normalize(record) for record in records)
        dataset = NormalizedDataset.from_normalized(normalized)

        without_city = sum(1 for record in normalized if not record.city)
        if without_city:
            self.logger.warning(
                f"{without_city} coverage records have no city",
                extra={
                    "event": "dataset.records_without_city",
                    "count": without_city,
                },
            )

        self.logger.info(
            "Normalized coverage dataset",
            extra={
                "event": "dataset.normalized",
                "record_count": len(dataset),
                "city_count": len(dataset.city_keys),
            },
        )

        return dataset


class DatasetCache:
    """Read-through cache for a normalized coverage dataset.

    The loader is called on first access (or after invalidate()) and its records
    are normalized once. Concurrent callers share the same immutable dataset.

    Example:
        >>> cache = DatasetCache(lambda: repo.list_all())
        >>> resolver = CoverageResolver(cache.get())
    """

    def __init__(
        self,
        loader: DatasetLoader,
        normalizer: Optional[CoverageNormalizer] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self._loader = loader
        self._normalizer = normalizer or CoverageNormalizer()
        self._lock = threading.Lock()
        self._dataset: Optional[NormalizedDataset] = None
        self.logger = logger_instance or logger

    @property
    def is_loaded(self) -> bool:
        """Whether a dataset is currently cached."""
        return self._dataset is not None

    def get(self) -> NormalizedDataset:
        """Return the cached dataset, loading and normalizing it if needed.

        Raises:
            Any exception from the loader is propagated and nothing is cached
        """
        dataset = self._dataset
        if dataset is not None:
            return dataset

        with self._lock:
            if self._dataset is None:
                records = list(self._loader())
                self._dataset = self._normalizer.normalize_dataset(records)
                self.logger.info(
                    "Coverage dataset loaded into cache",
                    extra={
                        "event": "dataset.cache.loaded",
                        "record_count": len(self._dataset),
                    },
                )
            return self._dataset

    def invalidate(self) -> None:
        """Drop the cached dataset so the next get() reloads it."""
        with self._lock:
            self._dataset = None
        self.logger.debug(
            "Coverage dataset cache invalidated",
            extra={"event": "dataset.cache.invalidated"},
        )
