"""Data access layer (repositories) for coverage areas.

Repositories encapsulate database operations and return CoverageArea domain
models rather than ORM models. CoverageAreaRepository is the coverage-data
collaborator of the resolver: it supplies the full reference dataset and the
catalog lookups (search, suggest, division → city → zone → area hierarchy).
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from coverage_resolver.domain.models import CoverageArea

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import CoverageAreaModel

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50
DEFAULT_SUGGEST_LIMIT = 20
MAX_SUGGEST_LIMIT = 100


def _like_pattern(term: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class CoverageAreaRepository:
    """Repository for coverage area database operations."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def list_all(self) -> List[CoverageArea]:
        """Return the full coverage dataset in a stable order.

        Rows are ordered by division, city, zone, area and id so repeated loads
        feed the resolver the same sequence and its tie-breaks stay deterministic.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(CoverageAreaModel).order_by(
                CoverageAreaModel.division,
                CoverageAreaModel.city,
                CoverageAreaModel.zone,
                CoverageAreaModel.area,
                CoverageAreaModel.id,
            )
            models = self.session.execute(stmt).scalars().all()
            return [model.to_domain() for model in models]

        except SQLAlchemyError as e:
            logger.error(f"Error listing coverage areas: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list coverage areas: {e}") from e

    def get_by_id(self, record_id: str) -> Optional[CoverageArea]:
        """Retrieve a coverage area by primary key, or None if absent.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(CoverageAreaModel, record_id)
            return model.to_domain() if model else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving coverage area {record_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve coverage area: {e}") from e

    def require(self, record_id: str) -> CoverageArea:
        """Retrieve a coverage area that must exist.

        Raises:
            RecordNotFoundError: If no row has this id
            PersistenceError: If database error occurs
        """
        record = self.get_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(f"Coverage area {record_id} not found")
        return record

    def count(self) -> int:
        """Number of coverage rows.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(func.count()).select_from(CoverageAreaModel)
            return int(self.session.execute(stmt).scalar_one())

        except SQLAlchemyError as e:
            logger.error(f"Error counting coverage areas: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count coverage areas: {e}") from e

    def count_by_division(self) -> Dict[str, int]:
        """Row counts per division, in division order. Rows without a division are left out."""
        stmt = (
            select(CoverageAreaModel.division, func.count().label("total"))
            .where(CoverageAreaModel.division.is_not(None))
            .group_by(CoverageAreaModel.division)
            .order_by(CoverageAreaModel.division)
        )
        return {row.division: int(row.total) for row in self._rows(stmt, "division counts")}

    def count_inside_dhaka(self) -> int:
        """Number of rows flagged as inside Dhaka."""
        stmt = (
            select(func.count())
            .select_from(CoverageAreaModel)
            .where(CoverageAreaModel.inside_dhaka_flag.is_(True))
        )
        return int(self._rows(stmt, "inside-Dhaka count")[0][0])

    def stats(self) -> Dict:
        """Dataset summary used to verify an import.

        Returns:
            Dict with ``total``, ``inside_dhaka``, ``outside_dhaka`` and ``by_division``
        """
        total = self.count()
        inside = self.count_inside_dhaka()
        return {
            "total": total,
            "inside_dhaka": inside,
            "outside_dhaka": total - inside,
            "by_division": self.count_by_division(),
        }

    def upsert(self, record: CoverageArea) -> CoverageArea:
        """Insert a coverage area or update the existing row.

        An existing row is found by id, or by the (city_id, zone_id, area_id)
        triple when all three ids are present. New rows get a fresh UUID when
        the record has no id.

        A row found by its triple keeps its stored id. If the record carries a
        different id, that id is not applied: the returned record shows the
        stored one and a ``persistence.upsert.id_retained`` warning is logged.

        Returns:
            Persisted CoverageArea (with its id)

        Raises:
            DataIntegrityError: If a constraint is violated
            PersistenceError: If database error occurs
        """
        try:
            existing = self._find_existing(record)

            if existing is not None:
                if record.id and record.id != existing.id:
                    logger.warning(
                        f"Coverage area {record.label} matched row {existing.id} by external ids; "
                        f"keeping stored id instead of {record.id}",
                        extra={
                            "event": "persistence.upsert.id_retained",
                            "stored_id": existing.id,
                            "given_id": record.id,
                        },
                    )
                existing.apply(record)
                self.session.flush()
                return existing.to_domain()

            model = CoverageAreaModel.from_domain(record, record.id or str(uuid.uuid4()))
            self.session.add(model)
            self.session.flush()
            return model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error upserting coverage area {record.label}: {e}", exc_info=True)
            raise DataIntegrityError(
                f"Failed to upsert coverage area due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error upserting coverage area {record.label}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert coverage area: {e}") from e

    def upsert_many(self, records: Iterable[CoverageArea]) -> List[CoverageArea]:
        """Upsert multiple coverage areas in the current transaction.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            return [self.upsert(record) for record in records]

        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Error in bulk upsert: {e}", exc_info=True)
            raise PersistenceError(f"Failed to bulk upsert coverage areas: {e}") from e

    def search(
        self,
        area: Optional[str] = None,
        city: Optional[str] = None,
        division: Optional[str] = None,
        zone: Optional[str] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> List[CoverageArea]:
        """Filter coverage areas by case-insensitive substrings, ordered by area.

        Every given filter must match (AND). With no filters the first ``limit``
        rows are returned.

        Raises:
            PersistenceError: If database error occurs
        """
        filters = []
        for column, term in (
            (CoverageAreaModel.area, area),
            (CoverageAreaModel.city, city),
            (CoverageAreaModel.division, division),
            (CoverageAreaModel.zone, zone),
        ):
            if term and term.strip():
                filters.append(column.ilike(_like_pattern(term.strip()), escape="\\"))

        try:
            stmt = (
                select(CoverageAreaModel)
                .where(*filters)
                .order_by(CoverageAreaModel.area, CoverageAreaModel.id)
                .limit(limit)
            )
            models = self.session.execute(stmt).scalars().all()

            logger.debug(
                f"Coverage search found {len(models)} areas",
                extra={"event": "catalog.search", "result_count": len(models)},
            )
            return [model.to_domain() for model in models]

        except SQLAlchemyError as e:
            logger.error(f"Error searching coverage areas: {e}", exc_info=True)
            raise PersistenceError(f"Failed to search coverage areas: {e}") from e

    def suggest(self, query: str, limit: int = DEFAULT_SUGGEST_LIMIT) -> List[CoverageArea]:
        """Autocomplete across division, city, zone and area with one query string.

        Args:
            query: Free text typed by the user (blank returns no suggestions)
            limit: Maximum suggestions, 1 to MAX_SUGGEST_LIMIT

        Raises:
            ValueError: If limit is out of range
            PersistenceError: If database error occurs
        """
        if limit < 1 or limit > MAX_SUGGEST_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_SUGGEST_LIMIT}, got {limit}")

        term = (query or "").strip()
        if not term:
            return []

        pattern = _like_pattern(term)
        try:
            stmt = (
                select(CoverageAreaModel)
                .where(
                    or_(
                        CoverageAreaModel.division.ilike(pattern, escape="\\"),
                        CoverageAreaModel.city.ilike(pattern, escape="\\"),
                        CoverageAreaModel.zone.ilike(pattern, escape="\\"),
                        CoverageAreaModel.area.ilike(pattern, escape="\\"),
                    )
                )
                .order_by(CoverageAreaModel.area, CoverageAreaModel.id)
                .limit(limit)
            )
            models = self.session.execute(stmt).scalars().all()
            return [model.to_domain() for model in models]

        except SQLAlchemyError as e:
            logger.error(f"Error suggesting coverage areas: {e}", exc_info=True)
            raise PersistenceError(f"Failed to suggest coverage areas: {e}") from e

    def get_divisions(self) -> List[str]:
        """Distinct division names, sorted."""
        stmt = (
            select(CoverageAreaModel.division)
            .where(CoverageAreaModel.division.is_not(None))
            .distinct()
            .order_by(CoverageAreaModel.division)
        )
        return [row.division for row in self._rows(stmt, "divisions")]

    def get_cities_by_division(self, division: str) -> List[Dict]:
        """Distinct cities (name and external id) of one division, sorted by name."""
        stmt = (
            select(CoverageAreaModel.city, CoverageAreaModel.city_id)
            .where(CoverageAreaModel.division == division, CoverageAreaModel.city.is_not(None))
            .distinct()
            .order_by(CoverageAreaModel.city)
        )
        return [{"city": row.city, "city_id": row.city_id} for row in self._rows(stmt, "cities")]

    def get_all_cities(self) -> List[Dict]:
        """Distinct cities of every division, sorted by name."""
        stmt = (
            select(CoverageAreaModel.city, CoverageAreaModel.city_id, CoverageAreaModel.division)
            .where(CoverageAreaModel.city.is_not(None))
            .distinct()
            .order_by(CoverageAreaModel.city)
        )
        return [
            {"city": row.city, "city_id": row.city_id, "division": row.division}
            for row in self._rows(stmt, "cities")
        ]

    def get_zones_by_city(self, city_id: int) -> List[Dict]:
        """Distinct zones (name and external id) of one city, sorted by name."""
        stmt = (
            select(CoverageAreaModel.zone, CoverageAreaModel.zone_id)
            .where(CoverageAreaModel.city_id == city_id, CoverageAreaModel.zone.is_not(None))
            .distinct()
            .order_by(CoverageAreaModel.zone)
        )
        return [{"zone": row.zone, "zone_id": row.zone_id} for row in self._rows(stmt, "zones")]

    def get_areas_by_zone(self, zone_id: int) -> List[Dict]:
        """Areas of one zone with their external id and row id, sorted by name."""
        stmt = (
            select(CoverageAreaModel.area, CoverageAreaModel.area_id, CoverageAreaModel.id)
            .where(CoverageAreaModel.zone_id == zone_id)
            .order_by(CoverageAreaModel.area)
        )
        return [
            {"area": row.area, "area_id": row.area_id, "id": row.id}
            for row in self._rows(stmt, "areas")
        ]

    def _find_existing(self, record: CoverageArea) -> Optional[CoverageAreaModel]:
        if record.id:
            existing = self.session.get(CoverageAreaModel, record.id)
            if existing is not None:
                return existing

        if record.city_id is None or record.zone_id is None or record.area_id is None:
            return None

        stmt = select(CoverageAreaModel).where(
            CoverageAreaModel.city_id == record.city_id,
            CoverageAreaModel.zone_id == record.zone_id,
            CoverageAreaModel.area_id == record.area_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def _rows(self, stmt, what: str) -> list:
        try:
            return list(self.session.execute(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {what}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve {what}: {e}") from e
