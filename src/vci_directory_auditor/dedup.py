"""
Duplicate detection for directory fields.
"""

from typing import Iterable


def get_duplicates(items: Iterable[str]) -> list[str]:
    """
    Get the values that occur more than once.

    Each duplicated value is reported once, in the order its second
    occurrence was seen. Comparison is exact and case-sensitive.

    Args:
        items: Values to scan

    Returns:
        List of duplicated values without repeats

    Examples:
        >>> get_duplicates(["a", "b", "a", "a"])
        ['a']
    """
    seen: set[str] = set()
    reported: set[str] = set()
    duplicates: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
        elif item not in reported:
            reported.add(item)
            duplicates.append(item)
    return duplicates
