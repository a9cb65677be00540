"""Core domain models for coverage areas.

This module defines the data structures used throughout the application:
- CoverageArea: one administrative delivery record (division → city → zone → area)
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CoverageArea(BaseModel):
    """Administrative coverage record supplied by the coverage dataset.

    Records are read-only to the resolver. The model is frozen so a record can be
    shared between threads and used as a dictionary key or set member.

    Only ``area`` is guaranteed to be present. ``division``, ``city`` and ``zone``
    may be missing in incomplete rows. The external numeric identifiers are carried
    through untouched and never take part in matching.
    """

    id: Optional[str] = Field(None, description="Opaque record identifier")
    division: Optional[str] = Field(None, description="Division name")
    city: Optional[str] = Field(None, description="City / district name")
    city_id: Optional[int] = Field(None, description="External city identifier")
    zone: Optional[str] = Field(None, description="Zone name")
    zone_id: Optional[int] = Field(None, description="External zone identifier")
    area: str = Field(..., description="Area name (always present)")
    area_id: Optional[int] = Field(None, description="External area identifier")
    inside_dhaka_flag: bool = Field(
        False, description="Whether the area lies inside Dhaka (tie-break preference)"
    )

    @field_validator("area")
    @classmethod
    def strip_area(cls, v: str) -> str:
        """Strip whitespace from the area name."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("id", "division", "city", "zone")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace from optional name fields, mapping blanks to None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped if stripped else None

    model_config = {
        "frozen": True,
        "json_schema_extra": {"example": {
            "id": "0b7c1f0e-4c55-4b8e-9f59-2f1f0d6f8a11",
            "division": "Dhaka",
            "city": "Dhaka",
            "city_id": 1,
            "zone": "Gulshan",
            "zone_id": 12,
            "area": "Gulshan 1",
            "area_id": 101,
            "inside_dhaka_flag": True,
        }},
    }

    @property
    def label(self) -> str:
        """Human-readable label, most specific part first."""
        parts = [self.area, self.zone, self.city, self.division]
        return ", ".join(part for part in parts if part)
