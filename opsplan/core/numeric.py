"""
OpsPlan - Numeric Primitives
============================

Single division primitive used by every calculator, plus the comma-list
splitter used for id lists stored as text (people, machines, machine types).

    safe_divide(n, d) = n / d   if d > 0
                      = 0       otherwise

A non-positive denominator never produces NaN or Infinity.
"""

from __future__ import annotations

from typing import List, Optional


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 when the denominator is not strictly positive."""
    if denominator > 0:
        return numerator / denominator
    return 0.0


def split_csv_ids(text: Optional[str]) -> List[str]:
    """Split a comma-separated id list, trimming blanks and dropping empties."""
    if not text:
        return []
    return [part.strip() for part in str(text).split(",") if part.strip()]
