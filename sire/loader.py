"""
Dataset loader (storm database export -> StormEvent list)
=========================================================

This module reads the NOAA Storm Database export (the classic
`repdata_data_StormData.csv.bz2`, a plain `.csv`, or an `.xlsx` copy) and
converts each row into a `StormEvent`.

Key ideas:
- We try multiple possible column names because exports vary
  (`EVTYPE` vs "Event Type", upper vs lower case, ...).
- Everything is read as text first, so magnitude codes like "5" or "K" are
  never turned into floats by pandas' type inference.
- Blank numbers become 0.0 and blank magnitude codes become "".
- The loader returns a list of immutable records; SIRE never edits the file.
"""

from __future__ import annotations
import logging
import math
import re
from typing import List, Optional

import pandas as pd

from .models import StormEvent

logger = logging.getLogger(__name__)

# field -> accepted column names (first match wins)
COLUMNS = {
    "event_type": ("EVTYPE", "Event Type", "EVENT_TYPE"),
    "fatalities": ("FATALITIES", "Deaths", "DEATHS"),
    "injuries": ("INJURIES", "Injuries"),
    "property_damage": ("PROPDMG", "Property Damage"),
    "property_damage_exp": ("PROPDMGEXP", "Property Damage Exp"),
    "crop_damage": ("CROPDMG", "Crop Damage"),
    "crop_damage_exp": ("CROPDMGEXP", "Crop Damage Exp"),
}
OPTIONAL_ID_COLUMNS = ("REFNUM", "EVENT_ID", "Event Id")


def _to_float(x) -> float:
    """Convert a cell to float, returning 0.0 if missing/invalid."""
    if x is None or pd.isna(x): return 0.0
    try: v = float(x)
    except (TypeError, ValueError): return 0.0
    return v if math.isfinite(v) else 0.0

def _to_int(x) -> Optional[int]:
    if x is None or pd.isna(x): return None
    try: return int(float(x))
    except (TypeError, ValueError): return None

def _to_str(x) -> str:
    if x is None or pd.isna(x): return ""
    return str(x).strip()

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _find_col(df: pd.DataFrame, *names: str) -> Optional[str]:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    return None

def _col(df: pd.DataFrame, *names: str) -> str:
    found = _find_col(df, *names)
    if found is None:
        raise KeyError(f"Missing required column. Tried={names}. Available={list(df.columns)}")
    return found


def read_table(path: str) -> pd.DataFrame:
    """Read the raw export as an all-text DataFrame.

    `.xlsx` goes through openpyxl; anything else is treated as CSV with the
    compression (bz2, gz, zip, ...) inferred from the file name.
    """
    if str(path).lower().endswith((".xlsx", ".xlsm")):
        df = pd.read_excel(path, engine="openpyxl", dtype=str, keep_default_na=False)
    else:
        wanted = {_norm(n) for names in COLUMNS.values() for n in names}
        wanted |= {_norm(n) for n in OPTIONAL_ID_COLUMNS}
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            usecols=lambda c: _norm(c) in wanted,
            compression="infer",
        )
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    return df


def events_from_frame(df: pd.DataFrame) -> List[StormEvent]:
    """Convert an already-read table into StormEvent records."""
    cols = {name: _col(df, *aliases) for name, aliases in COLUMNS.items()}
    id_col = _find_col(df, *OPTIONAL_ID_COLUMNS)

    ids = df[id_col].tolist() if id_col else [None] * len(df)
    columns = {name: df[c].tolist() for name, c in cols.items()}

    events: List[StormEvent] = []
    for i in range(len(df)):
        ref = _to_int(ids[i])
        events.append(StormEvent(
            event_id=ref if ref is not None else i,
            event_type=_to_str(columns["event_type"][i]),
            fatalities=_to_float(columns["fatalities"][i]),
            injuries=_to_float(columns["injuries"][i]),
            property_damage=_to_float(columns["property_damage"][i]),
            property_damage_exp=_to_str(columns["property_damage_exp"][i]),
            crop_damage=_to_float(columns["crop_damage"][i]),
            crop_damage_exp=_to_str(columns["crop_damage_exp"][i]),
        ))
    return events


def load_storm_data(path: str) -> List[StormEvent]:
    """Load a storm database export into a list of StormEvent records."""
    logger.info("Reading storm data from %s", path)
    events = events_from_frame(read_table(path))
    logger.info("Loaded %d storm events", len(events))
    return events
