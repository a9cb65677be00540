"""String and token-set similarity measures used by the matching cascade."""

from typing import AbstractSet


def levenshtein_distance(a: str, b: str) -> int:
    """Calculate the Levenshtein distance between two strings.

    Uses a single rolling row sized to the shorter string, so memory is
    O(min(len(a), len(b))).

    Args:
        a: First string
        b: Second string

    Returns:
        Minimum number of single-character insertions, deletions or
        substitutions needed to turn ``a`` into ``b``
    """
    if len(a) < len(b):
        a, b = b, a

    if not b:
        return len(a)

    previous_row = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current_row = [i]
        for j, char_b in enumerate(b, start=1):
            insertions = previous_row[j] + 1
            deletions = current_row[j - 1] + 1
            substitutions = previous_row[j - 1] + (char_a != char_b)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def string_similarity(a: str, b: str) -> float:
    """Normalized edit similarity in [0, 1].

    ``1 - distance / max(len(a), len(b))``. Two empty strings are identical
    (1.0); an empty string against a non-empty one scores 0.0.

    Example:
        >>> round(string_similarity("golshan", "gulshan"), 3)
        0.857
    """
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0

    longest = max(len(a), len(b))
    return 1.0 - levenshtein_distance(a, b) / longest


def jaccard_similarity(first: AbstractSet[str], second: AbstractSet[str]) -> float:
    """Intersection-over-union of two token sets, 0.0 when either set is empty."""
    if not first or not second:
        return 0.0

    return len(first & second) / len(first | second)
