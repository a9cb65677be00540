"""Domain models for the Coverage Area Resolver."""

from .models import CoverageArea

__all__ = ["CoverageArea"]
