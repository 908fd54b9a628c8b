from __future__ import annotations

from typing import List

import pytest

from sire.models import RawRecord, StormEvent


def make_events(event_type: str, n: int, start_id: int = 0, **fields) -> List[StormEvent]:
    return [StormEvent(event_id=start_id + i, event_type=event_type, **fields) for i in range(n)]


@pytest.fixture
def spec_records() -> List[RawRecord]:
    return [
        RawRecord("A", {"x": 5}),
        RawRecord("A", {"x": 3}),
        RawRecord("B", {"x": 10}),
    ]


@pytest.fixture
def storm_events() -> List[StormEvent]:
    """Four event types; HAIL is too rare to pass the default threshold."""
    events: List[StormEvent] = []
    events += make_events("TORNADO", 12, 0, fatalities=2.0, injuries=10.0,
                          property_damage=5.0, property_damage_exp="M")
    events += make_events("HEAT", 10, 100, fatalities=3.0, injuries=2.0,
                          crop_damage=1.0, crop_damage_exp="K")
    events += make_events("FLOOD", 15, 200, fatalities=0.5, injuries=1.0,
                          property_damage=2.0, property_damage_exp="B",
                          crop_damage=3.0, crop_damage_exp="m")
    events += make_events("HAIL", 9, 300, fatalities=50.0, injuries=50.0,
                          property_damage=9.0, property_damage_exp="B")
    return events


@pytest.fixture
def storm_csv(tmp_path):
    """A tiny storm database export with the original column names."""
    path = tmp_path / "storm.csv"
    lines = ["STATE__,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP,REFNUM"]
    for i in range(10):
        lines.append(f"1,TORNADO,1,4,25,K,0,,{i + 1}")
    for i in range(10):
        lines.append(f"1,FLOOD,0,0,2,5,1,M,{i + 11}")
    lines.append("1,  HAIL ,,,1,?,,,21")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
