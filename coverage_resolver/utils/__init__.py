"""Utility functions shared across the resolver."""

from .hashing import compute_address_key, hash_string
from .timestamps import format_timestamp, utc_now

__all__ = [
    "compute_address_key",
    "format_timestamp",
    "hash_string",
    "utc_now",
]
