"""
Data model
==========

SIRE works with four kinds of objects, all immutable (`frozen=True`):

- `StormEvent` / `RawRecord`: one observed event (input side).
- `AggregatedRow`: one row per event category (count, totals, means).
- `RankedRow`: an AggregatedRow plus its per-metric ranks and composite score.

`MetricSpec` names which aggregated value a ranking looks at, e.g.
`MetricSpec("fatalities", "mean")`.

Every pipeline stage builds new objects instead of editing old ones, so the
same input always gives the same output. Mapping fields (values, totals,
means, scores) take part in `==` but not in `hash()`, so rows can still be
put in sets and used as dict keys.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .magnitude import normalize

STATISTICS = ("total", "mean", "count")


@dataclass(frozen=True)
class RawRecord:
    """Generic event record: a category label plus named numeric values."""
    category: str
    values: Mapping[str, float] = field(default_factory=dict, hash=False)

    def value(self, name: str) -> float:
        return float(self.values[name])


@dataclass(frozen=True)
class StormEvent:
    """One row of the NOAA storm database.

    Damage fields are stored raw (base + magnitude code); `value()` returns
    them normalized to US$.
    """
    event_id: int
    event_type: str
    fatalities: float = 0.0
    injuries: float = 0.0
    property_damage: float = 0.0
    property_damage_exp: str = ""
    crop_damage: float = 0.0
    crop_damage_exp: str = ""

    @property
    def category(self) -> str:
        return self.event_type

    def value(self, name: str) -> float:
        """Return the numeric value of a field, with damage normalized."""
        if name == "fatalities":
            return float(self.fatalities)
        if name == "injuries":
            return float(self.injuries)
        if name == "property_damage":
            return normalize(self.property_damage, self.property_damage_exp)
        if name == "crop_damage":
            return normalize(self.crop_damage, self.crop_damage_exp)
        if name == "property_damage_base":
            return float(self.property_damage)
        if name == "crop_damage_base":
            return float(self.crop_damage)
        raise KeyError(f"Unknown storm event field: {name!r}")


@dataclass(frozen=True)
class MetricSpec:
    """One ranking column: an aggregated statistic of a record field.

    Higher values always mean a worse outcome (rank 1 = worst).
    """
    field: str
    statistic: str = "mean"

    def __post_init__(self) -> None:
        if self.statistic not in STATISTICS:
            raise ValueError(f"statistic must be one of {STATISTICS}, got {self.statistic!r}")

    @property
    def name(self) -> str:
        return f"{self.field}_{self.statistic}"

    @property
    def score_name(self) -> str:
        return f"{self.name}_score"


@dataclass(frozen=True)
class AggregatedRow:
    """Per-category summary. `count` is always >= 1."""
    category: str
    count: int
    totals: Dict[str, float] = field(hash=False)
    means: Dict[str, float] = field(hash=False)

    def value(self, metric: MetricSpec) -> float:
        if metric.statistic == "count":
            return float(self.count)
        if metric.statistic == "total":
            return self.totals[metric.field]
        return self.means[metric.field]


@dataclass(frozen=True)
class RankedRow:
    """AggregatedRow plus one rank per metric and their sum."""
    row: AggregatedRow
    scores: Dict[str, int] = field(hash=False)
    composite_score: int

    @property
    def category(self) -> str:
        return self.row.category

    @property
    def count(self) -> int:
        return self.row.count
