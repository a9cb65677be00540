"""Hashing utilities for log correlation.

Delivery addresses are personal data, so logs refer to them by a short,
deterministic key instead of the raw text.
"""

import hashlib
from typing import Optional

ADDRESS_KEY_LENGTH = 16


def compute_address_key(raw_address: Optional[str]) -> str:
    """Compute a short correlation key for a raw address.

    The key is a truncated SHA256 of the whitespace-collapsed, lowercased address,
    so trivially different spellings of the same input share a key.

    Args:
        raw_address: Address exactly as supplied by the caller

    Returns:
        Hexadecimal string of ADDRESS_KEY_LENGTH characters

    Example:
        >>> compute_address_key("House 5, Gulshan 1") == compute_address_key("house 5,  gulshan 1 ")
        True
    """
    canonical = " ".join((raw_address or "").lower().split())
    return hash_string(canonical)[:ADDRESS_KEY_LENGTH]


def hash_string(value: str) -> str:
    """Compute SHA256 hash of a string value.

    Args:
        value: String to hash

    Returns:
        Hexadecimal string representation of SHA256 hash (64 characters)
    """
    hash_obj = hashlib.sha256(value.encode("utf-8"))
    return hash_obj.hexdigest()
