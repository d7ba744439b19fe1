"""Validate identifiers that end up in URLs and SKUs."""

from __future__ import annotations

import re

# SKUs, SKU prefixes and the like are used verbatim in request paths
RESTRICTED_STRING_PATTERN = re.compile(r"^[a-zA-Z\-_]{1,50}$")


def restricted_string_is_valid(value: str | None) -> bool:
    """Return True if ``value`` only holds letters, hyphens and underscores."""
    if not value:
        return False
    return RESTRICTED_STRING_PATTERN.fullmatch(value) is not None


def find_duplicates(values: list[str], *, case_sensitive: bool = False) -> list[str]:
    """Return the entries of ``values`` that appear more than once, in first-seen order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for value in values:
        key = value if case_sensitive else value.lower()
        if key in seen and value not in duplicates:
            duplicates.append(value)
        seen.add(key)
    return duplicates
