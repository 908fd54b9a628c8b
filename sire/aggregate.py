"""
Aggregator (records -> one row per category)
============================================

For every category this computes:
- count: number of records
- total: sum of each requested field (damage already normalized to US$)
- mean: total / count

Records only need two things: a `category` attribute and a `value(name)`
method. Both `StormEvent` and `RawRecord` qualify.
"""

from __future__ import annotations
from typing import Iterable, List, Sequence, Union

from .indices import build_category_index
from .models import AggregatedRow, MetricSpec


def _field_names(metrics: Iterable[Union[str, MetricSpec]]) -> List[str]:
    names: List[str] = []
    for m in metrics:
        name = m.field if isinstance(m, MetricSpec) else str(m)
        if name not in names:
            names.append(name)
    return names


def aggregate(records: Sequence, metrics: Iterable[Union[str, MetricSpec]]) -> List[AggregatedRow]:
    """Group records by category and summarise the requested fields.

    Output order = first appearance of each category in `records`.
    """
    records = list(records)
    fields = _field_names(metrics)
    out: List[AggregatedRow] = []
    for category, positions in build_category_index(records).items():
        count = len(positions)
        totals = {f: 0.0 for f in fields}
        for i in positions:
            r = records[i]
            for f in fields:
                totals[f] += r.value(f)
        # count >= 1 here: a category only exists if some record carried it
        means = {f: totals[f] / count for f in fields}
        out.append(AggregatedRow(category=category, count=count, totals=totals, means=means))
    return out
