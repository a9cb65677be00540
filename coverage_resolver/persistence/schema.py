"""Database schema definition and ORM models.

This module defines the SQLAlchemy ORM model for the coverage_areas table and
the conversion methods between the ORM model and the CoverageArea domain model.
"""

import logging

from sqlalchemy import Boolean, Column, Index, Integer, String, UniqueConstraint, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from coverage_resolver.domain.models import CoverageArea
from coverage_resolver.utils.timestamps import format_timestamp

logger = logging.getLogger(__name__)

Base = declarative_base()


class CoverageAreaModel(Base):
    """ORM model for coverage_areas table.

    One row per deliverable area, carrying the external city/zone/area ids used
    by the courier integration.
    """

    __tablename__ = "coverage_areas"

    # UUID string primary key
    id = Column(String(36), primary_key=True, nullable=False)

    division = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    city_id = Column(Integer, nullable=True)
    zone = Column(String(100), nullable=True)
    zone_id = Column(Integer, nullable=True)
    area = Column(String(255), nullable=False)
    area_id = Column(Integer, nullable=True)
    inside_dhaka_flag = Column(Boolean, nullable=False, default=False)

    # Timestamps (stored as ISO 8601 UTC strings)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("city_id", "zone_id", "area_id", name="uq_coverage_areas_external_ids"),
        Index("idx_coverage_areas_city_id", "city_id"),
        Index("idx_coverage_areas_zone_id", "zone_id"),
        Index("idx_coverage_areas_division", "division"),
    )

    def to_domain(self) -> CoverageArea:
        """Convert ORM model to domain model."""
        return CoverageArea(
            id=self.id,
            division=self.division,
            city=self.city,
            city_id=self.city_id,
            zone=self.zone,
            zone_id=self.zone_id,
            area=self.area,
            area_id=self.area_id,
            inside_dhaka_flag=bool(self.inside_dhaka_flag),
        )

    @classmethod
    def from_domain(cls, record: CoverageArea, record_id: str) -> "CoverageAreaModel":
        """Create ORM model from domain model.

        Args:
            record: Domain model instance
            record_id: Primary key to store (the record's own id or a fresh one)

        Returns:
            CoverageAreaModel: ORM model instance
        """
        model = cls(id=record_id, created_at=format_timestamp())
        model.apply(record)
        return model

    def apply(self, record: CoverageArea) -> None:
        """Copy every non-key field from a domain model onto this row.

        Also touches updated_at; created_at is set once by from_domain.
        """
        self.division = record.division
        self.city = record.city
        self.city_id = record.city_id
        self.zone = record.zone
        self.zone_id = record.zone_id
        self.area = record.area
        self.area_id = record.area_id
        self.inside_dhaka_flag = record.inside_dhaka_flag
        self.updated_at = format_timestamp()


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
