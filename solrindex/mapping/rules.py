"""Pure extraction helpers for domain facets.

Prefix selection, text normalization, numeric parsing and the bucket
tables that turn measurements into named ranges. Nothing here touches
records or documents.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def ucfirst(text: str) -> str:
    """Uppercase the first character only, leaving the rest untouched."""
    return text[:1].upper() + text[1:]


def normalize(text: str) -> str:
    """Trim and capitalize a value."""
    # Leading blanks are trimmed before capitalizing: " lion" -> "Lion".
    return ucfirst(text.strip()).strip()


def has_prefix(value: str, prefix: str) -> bool:
    """Return True if value starts with prefix (case-sensitive)."""
    return value.startswith(prefix)


def strip_prefix(value: str, prefix: str) -> str:
    """Remove a leading prefix, if present."""
    return value[len(prefix) :] if value.startswith(prefix) else value


def matching(values: Iterable[str], prefix: str) -> list[str]:
    """Return values starting with prefix, with the prefix removed."""
    return [strip_prefix(v, prefix) for v in values if has_prefix(v, prefix)]


def not_matching(values: Iterable[str], prefix: str) -> list[str]:
    """Return values not starting with prefix."""
    return [v for v in values if not has_prefix(v, prefix)]


def truncate_at_paren(text: str) -> str:
    """Cut text before its first ``(``, unless the text starts with one."""
    position = text.find("(")
    if position > 0:
        return text[:position].strip()
    return text


def strip_units(text: str, units: Iterable[str]) -> str:
    """Remove every occurrence of each unit token, then trim."""
    for unit in units:
        text = text.replace(unit, "").strip()
    return text.strip()


def parse_number(text: str) -> float | None:
    """Parse a plain decimal number, or return None.

    Accepts optional sign, decimals and exponent; rejects empty text,
    ``nan``, ``inf`` and thousands separators.
    """
    candidate = text.strip()
    if not _NUMERIC_RE.match(candidate):
        return None
    return float(candidate)


# ---------------------------------------------------------------------------
# Buckets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Bucket:
    """A named numeric range.

    Args:
        label: Facet value for the range.
        low: Lower bound.
        high: Upper bound, or None for unbounded.
        low_inclusive: Whether ``low`` belongs to the range.
        high_inclusive: Whether ``high`` belongs to the range.
    """

    label: str
    low: float
    high: float | None = None
    low_inclusive: bool = True
    high_inclusive: bool = True

    def contains(self, value: float) -> bool:
        """Return True if value falls inside the range."""
        above = value >= self.low if self.low_inclusive else value > self.low
        if not above:
            return False
        if self.high is None:
            return True
        return value <= self.high if self.high_inclusive else value < self.high


def bucket_for(value: float, table: Iterable[Bucket]) -> str | None:
    """Return the label of the first bucket containing value, or None."""
    for bucket in table:
        if bucket.contains(value):
            return bucket.label
    return None


HEIGHT_BUCKETS: tuple[Bucket, ...] = (
    Bucket("1-9 mm", 0, 9),
    Bucket("10-19 mm", 10, 19),
    Bucket("20-29 mm", 20, 29),
    Bucket("30-49 mm", 30, 49),
    Bucket("50-55 mm", 50, 55),
    Bucket("> 55mm", 55, None, low_inclusive=False),
)

WIDTH_BUCKETS: tuple[Bucket, ...] = (
    Bucket("4-9 mm", 4, 9),
    Bucket("10-14 mm", 10, 14),
    Bucket("15-19 mm", 15, 19),
    Bucket("20-24 mm", 20, 24),
    Bucket("25-29 mm", 25, 29),
    Bucket("30-34 mm", 30, 34),
    Bucket("> 34mm", 34, None, low_inclusive=False),
)

WEIGHT_BUCKETS: tuple[Bucket, ...] = (
    Bucket("1-9 g", 1, 9),
    Bucket("10-19 g", 10, 19),
    Bucket("20-29 g", 20, 29),
    Bucket("30-39 g", 30, 39),
    Bucket("40-49 g", 40, 49),
    Bucket("50-59 g", 50, 59),
    Bucket("60-80 g", 60, 80),
    # Values between 80 and 81 have no bucket.
    Bucket("> 80 g", 81, None),
)

THICKNESS_BUCKETS: tuple[Bucket, ...] = (
    Bucket("2-4 mm", 2, 4),
    Bucket("5-6 mm", 5, 6),
    Bucket("7-9 mm", 7, 9),
    # 10 itself has no bucket.
    Bucket("> 9 mm", 10, None, low_inclusive=False),
)
