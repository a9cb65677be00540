"""Text normalization and tokenization utilities for address matching.

Addresses arrive in a mix of Latin and Bengali script with arbitrary
punctuation. These helpers reduce raw strings to a canonical form so the
matching engine can compare addresses and coverage names character for
character.
"""

from typing import List, Optional, Tuple

import regex

# Anything that is not a letter, a mark attached to a letter, or a digit
_NON_WORD_PATTERN = regex.compile(r"[^\p{L}\p{M}\p{N}]+")
_WHITESPACE_PATTERN = regex.compile(r"\s+")
_DIGITS_PATTERN = regex.compile(r"\p{N}+")

# "gulshan 1", "sector14", "মিরপুর ১০"
_KEYWORD_NUMBER_PATTERN = regex.compile(r"(\p{L}[\p{L}\p{M}]*) ?(\p{N}+)")

STOPWORDS = frozenset({"road", "rd", "house", "flat", "h", "r", "no"})

MIN_TOKEN_LENGTH = 3


def normalize_text(text: Optional[str]) -> str:
    """Normalize text for address comparison.

    Normalization steps:
    - Convert to lowercase
    - Replace every run of non-letter, non-digit characters with a space
    - Collapse whitespace and trim

    Letters of any script are kept, including Bengali vowel signs, so
    ``normalize_text(normalize_text(s)) == normalize_text(s)`` always holds.

    Args:
        text: Text to normalize (None and empty strings are allowed)

    Returns:
        Normalized text, empty string for empty input

    Example:
        >>> normalize_text("  House #5, Road-11; GULSHAN-1  ")
        'house 5 road 11 gulshan 1'
    """
    if not text:
        return ""

    normalized = text.lower()
    normalized = _NON_WORD_PATTERN.sub(" ", normalized)
    normalized = _WHITESPACE_PATTERN.sub(" ", normalized).strip()

    return normalized


def is_number(token: str) -> bool:
    """Return True if the token is made up entirely of digits (any script)."""
    return bool(token) and _DIGITS_PATTERN.fullmatch(token) is not None


def tokenize(normalized: str) -> List[str]:
    """Split normalized text into comparison tokens.

    A token is kept when it is at least three characters long or purely numeric,
    and is not a stopword.

    Args:
        normalized: Output of normalize_text()

    Returns:
        Tokens in their original order

    Example:
        >>> tokenize("house 5 road 11 gulshan 1")
        ['5', '11', 'gulshan', '1']
    """
    tokens = []
    for token in normalized.split():
        if token in STOPWORDS:
            continue
        if len(token) >= MIN_TOKEN_LENGTH or is_number(token):
            tokens.append(token)
    return tokens


def split_segments(raw_address: Optional[str]) -> List[str]:
    """Split a raw address on commas into trimmed segments, preserving order."""
    if not raw_address:
        return []
    return [segment.strip() for segment in raw_address.split(",")]


def extract_keyword_numbers(normalized: str) -> List[Tuple[str, str]]:
    """Extract (word, number) pairs such as ("gulshan", "1") or ("sector", "14").

    Args:
        normalized: Output of normalize_text()

    Returns:
        Pairs in order of appearance
    """
    return [(match.group(1), match.group(2)) for match in _KEYWORD_NUMBER_PATTERN.finditer(normalized)]


def strip_digits(normalized: str) -> str:
    """Remove every digit from normalized text and re-collapse whitespace."""
    return _WHITESPACE_PATTERN.sub(" ", _DIGITS_PATTERN.sub(" ", normalized)).strip()


def contains_phrase(haystack: str, phrase: str) -> bool:
    """Word-boundary gated containment on normalized text.

    ``contains_phrase("near gulshan 1 dhaka", "gulshan 1")`` is True, while
    ``contains_phrase("gulshanpur", "gulshan")`` is False.
    """
    if not phrase or not haystack:
        return False
    return f" {phrase} " in f" {haystack} "
