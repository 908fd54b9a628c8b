"""
Ranking and scoring (the heart of SIRE)
=======================================

Three pure steps, each returning a NEW list:

1) filter_min_count -> drop categories with too few events
2) score            -> per-metric descending rank + composite score
3) top_worst        -> lowest composite scores first, truncated to N

Ranking rule (exact and reproducible):
    Sort rows by the metric value, largest first. A row's rank is the 1-based
    position where its value FIRST appears in that order. Equal values share
    that first position, so values [10, 8, 8, 3] get ranks [1, 2, 2, 4].

Implementation: sort once per metric, build a value -> first position table
with `first_index_ranks`, then look every row up in O(1).
"""

from __future__ import annotations
import math
from typing import Iterable, List, Sequence, Tuple, Union

from .dsa import first_index_ranks, merge_sort
from .models import AggregatedRow, MetricSpec, RankedRow

MetricLike = Union[MetricSpec, Tuple[str, str], str]

TIE_BREAKS = ("stable", "category")


def as_metric(m: MetricLike) -> MetricSpec:
    """Accept a MetricSpec, a (field, statistic) pair, or a bare field (mean)."""
    if isinstance(m, MetricSpec):
        return m
    if isinstance(m, tuple):
        return MetricSpec(*m)
    return MetricSpec(str(m))


def _desc_key(v: float) -> Tuple[int, float]:
    # NaN sorts after every number and equals every other NaN
    if math.isnan(v):
        return (1, 0.0)
    return (0, -v)


def descending_ranks(values: Sequence[float]) -> List[int]:
    """Rank values largest-first; ties share the first position they occupy."""
    keys = [_desc_key(float(v)) for v in values]
    lookup = first_index_ranks(merge_sort(keys))
    return [lookup[k] for k in keys]


def filter_min_count(rows: Iterable[AggregatedRow], min_count: int = 10) -> List[AggregatedRow]:
    """Keep rows with count >= min_count (order preserved)."""
    return [r for r in rows if r.count >= min_count]


def score(rows: Sequence[AggregatedRow], metrics: Iterable[MetricLike]) -> List[RankedRow]:
    """Attach one rank per metric and the composite (sum of ranks) to each row.

    Output keeps the input row order.
    """
    specs = [as_metric(m) for m in metrics]
    if not specs:
        raise ValueError("score() needs at least one metric")
    if len({m.name for m in specs}) != len(specs):
        raise ValueError("score() metrics must be distinct")
    rows = list(rows)

    per_metric = [descending_ranks([r.value(m) for r in rows]) for m in specs]

    out: List[RankedRow] = []
    for i, r in enumerate(rows):
        scores = {m.score_name: ranks[i] for m, ranks in zip(specs, per_metric)}
        out.append(RankedRow(row=r, scores=scores, composite_score=sum(scores.values())))
    return out


def top_worst(rows: Sequence[RankedRow], n: int, tie_break: str = "stable") -> List[RankedRow]:
    """Return the n rows with the lowest composite score (worst first).

    tie_break:
    - "stable":   equal composites keep their incoming order
    - "category": equal composites are ordered by category name
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    if tie_break not in TIE_BREAKS:
        raise ValueError(f"tie_break must be one of {TIE_BREAKS}, got {tie_break!r}")
    if tie_break == "category":
        ordered = merge_sort(rows, key=lambda r: (r.composite_score, r.category))
    else:
        ordered = merge_sort(rows, key=lambda r: r.composite_score)
    return ordered[:n]
