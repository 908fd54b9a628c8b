"""
Category index (precomputed lookup table)
=========================================

SIRE groups events by category with a simple index: a map from category to
the list of record positions that carry it.

Example:
- `by_category["TORNADO"]` gives the positions of every tornado record.

Why keep insertion order?
- Python dicts remember insertion order, so categories come out in the order
  they first appear in the input. That makes aggregation output (and therefore
  any rank ties later on) reproducible for the same input file.
"""

from __future__ import annotations
from typing import Dict, List, Sequence


def build_category_index(records: Sequence) -> Dict[str, List[int]]:
    """Map each category (exact string, case-sensitive) to record positions."""
    by_category: Dict[str, List[int]] = {}
    for i, r in enumerate(records):
        by_category.setdefault(r.category, []).append(i)
    return by_category
