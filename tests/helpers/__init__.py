"""Test helper utilities for Coverage Area Resolver tests."""

from .coverage_fixtures import load_fixture_areas, make_area, make_dataset

__all__ = ["load_fixture_areas", "make_area", "make_dataset"]
