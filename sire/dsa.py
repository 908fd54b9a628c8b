"""
DSA utilities
=============

Small, explicit algorithm primitives used by the ranking code.

Included:
- Stable merge sort (O(n log n)), stable in BOTH directions
- First-index rank lookup over a sorted list (one pass, O(n))
"""

from __future__ import annotations
from typing import Callable, Dict, Hashable, List, Sequence, TypeVar

T = TypeVar("T")


def merge_sort(arr: Sequence[T], key: Callable[[T], object] = lambda x: x, reverse: bool = False) -> List[T]:
    """Stable merge sort.

    Equal keys keep their input order even when `reverse=True`.
    """
    if len(arr) <= 1:
        return list(arr)
    mid = len(arr) // 2
    left = merge_sort(arr[:mid], key=key, reverse=reverse)
    right = merge_sort(arr[mid:], key=key, reverse=reverse)
    return _merge(left, right, key=key, reverse=reverse)


def _merge(left: List[T], right: List[T], key: Callable[[T], object], reverse: bool) -> List[T]:
    out: List[T] = []
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = key(left[i]), key(right[j])
        # take from the right only when it strictly wins
        take_right = (b > a) if reverse else (b < a)
        if take_right:
            out.append(right[j]); j += 1
        else:
            out.append(left[i]); i += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out


def first_index_ranks(sorted_keys: Sequence[Hashable]) -> Dict[Hashable, int]:
    """Map each key to the 1-based position where it FIRST appears.

    Example: keys [9, 7, 7, 2] -> {9: 1, 7: 2, 2: 4}
    """
    first: Dict[Hashable, int] = {}
    for pos, k in enumerate(sorted_keys, start=1):
        if k not in first:
            first[k] = pos
    return first
