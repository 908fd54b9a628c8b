"""
Core engine (SIRE)
==================

SIRE works like a tiny offline "ranking engine":

1) Load dataset -> list of StormEvent records (immutable)
2) Aggregate    -> one row per event type (count, totals, means)
3) Threshold    -> drop event types with fewer than `min_count` events
4) Score        -> per-metric descending rank + composite score
5) Select       -> the N worst event types (lowest composite first)

Two analyses ship ready-made:
- HEALTH:   mean fatalities + mean injuries, top 5
- ECONOMIC: mean property damage + mean crop damage (US$), top 6

Every step is a pure function (see `scoring.py`); the engine only keeps the
last result of each analysis around for export and reporting.
"""

from __future__ import annotations
import csv
import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .aggregate import aggregate
from .models import AggregatedRow, MetricSpec, RankedRow
from .scoring import filter_min_count, score, top_worst

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Analysis:
    """One ranking recipe: which metrics, which threshold, how many to show."""
    name: str
    metrics: Tuple[MetricSpec, ...]
    min_count: int = 10
    top_n: int = 5

    def with_overrides(self, min_count: Optional[int] = None, top_n: Optional[int] = None) -> "Analysis":
        return replace(
            self,
            min_count=self.min_count if min_count is None else min_count,
            top_n=self.top_n if top_n is None else top_n,
        )


HEALTH = Analysis(
    name="health",
    metrics=(MetricSpec("fatalities", "mean"), MetricSpec("injuries", "mean")),
    min_count=10,
    top_n=5,
)
ECONOMIC = Analysis(
    name="economic",
    metrics=(MetricSpec("property_damage", "mean"), MetricSpec("crop_damage", "mean")),
    min_count=10,
    top_n=6,
)
ANALYSES: Dict[str, Analysis] = {a.name: a for a in (HEALTH, ECONOMIC)}


def get_analysis(name: str) -> Analysis:
    key = name.lower().strip()
    if key not in ANALYSES:
        raise ValueError(f"analysis must be one of: {', '.join(ANALYSES)}")
    return ANALYSES[key]


@dataclass
class AnalysisResult:
    """Every intermediate table of one pipeline run."""
    analysis: Analysis
    aggregated: List[AggregatedRow]
    filtered: List[AggregatedRow]
    ranked: List[RankedRow]
    top: List[RankedRow]


def run_analysis(events: Sequence, analysis: Analysis, tie_break: str = "stable") -> AnalysisResult:
    """aggregate -> filter -> score -> top_worst, for one analysis."""
    aggregated = aggregate(events, analysis.metrics)
    filtered = filter_min_count(aggregated, analysis.min_count)
    ranked = score(filtered, analysis.metrics)
    top = top_worst(ranked, analysis.top_n, tie_break=tie_break)
    return AnalysisResult(analysis=analysis, aggregated=aggregated, filtered=filtered, ranked=ranked, top=top)


def row_to_dict(r: RankedRow) -> Dict[str, Any]:
    """Flatten a RankedRow into one record (category, count, totals, means, scores)."""
    out: Dict[str, Any] = {"category": r.category, "count": r.count}
    for f, v in r.row.totals.items():
        out[f"{f}_total"] = v
    for f, v in r.row.means.items():
        out[f"{f}_mean"] = v
    out.update(r.scores)
    out["composite_score"] = r.composite_score
    return out


def export_columns(analysis: Analysis) -> List[str]:
    """Column names of `row_to_dict` output for one analysis (same order)."""
    fields: List[str] = []
    for m in analysis.metrics:
        if m.field not in fields:
            fields.append(m.field)
    cols = ["category", "count"]
    cols += [f"{f}_total" for f in fields]
    cols += [f"{f}_mean" for f in fields]
    cols += [m.score_name for m in analysis.metrics]
    cols.append("composite_score")
    return cols


def to_frame(rows: Sequence[RankedRow]) -> pd.DataFrame:
    """RankedRows as a DataFrame (for plotting / notebooks)."""
    return pd.DataFrame([row_to_dict(r) for r in rows])


@dataclass
class SIRE:
    """Storm Impact Ranking Engine.

    The engine stores:
    - events: all StormEvent records
    - results: last AnalysisResult per analysis name

    Running an analysis never changes `events`.
    """
    events: List[Any]
    dataset_path: Optional[str] = None
    # Stores CLI commands (for reproducibility in reports)
    command_log: List[str] = field(default_factory=list)
    results: Dict[str, AnalysisResult] = field(default_factory=dict)

    def categories(self) -> List[str]:
        """Distinct categories in first-occurrence order."""
        seen: Dict[str, None] = {}
        for e in self.events:
            seen.setdefault(e.category, None)
        return list(seen)

    def analyze(
        self,
        analysis: Analysis,
        *,
        min_count: Optional[int] = None,
        top_n: Optional[int] = None,
        tie_break: str = "stable",
    ) -> AnalysisResult:
        """Run one analysis over all events and remember the result."""
        analysis = analysis.with_overrides(min_count=min_count, top_n=top_n)
        res = run_analysis(self.events, analysis, tie_break=tie_break)
        logger.info(
            "%s: %d categories, %d with >= %d events, top %d selected",
            analysis.name, len(res.aggregated), len(res.filtered), analysis.min_count, len(res.top),
        )
        if not res.filtered:
            logger.warning("%s: no category reaches min_count=%d", analysis.name, analysis.min_count)
        self.results[analysis.name] = res
        return res

    def result(self, name: str) -> AnalysisResult:
        key = name.lower().strip()
        if key not in self.results:
            raise KeyError(f"No result for analysis {name!r}; run it first")
        return self.results[key]

    # ---------------- Export ----------------
    def export_csv(self, path: str, name: str) -> None:
        """Export the ranked rows of a stored result to CSV."""
        res = self.result(name)
        rows = [row_to_dict(r) for r in res.ranked]
        # header is written even when nothing passed the threshold
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=export_columns(res.analysis))
            w.writeheader()
            w.writerows(rows)

    def export_json(self, path: str, name: str) -> None:
        """Export the ranked rows of a stored result to JSON."""
        rows = [row_to_dict(r) for r in self.result(name).ranked]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(rows, f, ensure_ascii=False, indent=2)
