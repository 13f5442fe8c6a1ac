"""
hotspots/features.py
--------------------
Zone and temporal labels for each incident.

Every function here is row-wise: a label depends only on the incident's
own attributes, never on other incidents. Functions return a new frame
and leave their input untouched.
"""

import pandas as pd

from hotspots.constants import (
    HOUR_BINS,
    HOUR_LABELS,
    SEASON_BY_MONTH,
    TARGET_STREETS,
    UNKNOWN,
    WEEKEND_DAYS,
)


# ── Zone ──────────────────────────────────────────────────────────

def assign_zone(street) -> str:
    """Map a raw street name to Causeway, Canal, Nashua or Other."""
    if street is None or pd.isna(street):
        return "Other"
    name = str(street).upper().strip()
    for keyword, zone in TARGET_STREETS.items():
        if keyword in name:
            return zone
    return "Other"


def add_zone(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["zone"] = df["street"].map(assign_zone)
    return df


# ── Season / hour band ────────────────────────────────────────────

def season_for_month(month) -> str:
    """Winter/Spring/Summer/Fall for months 1–12, 'Unknown' otherwise."""
    try:
        return SEASON_BY_MONTH.get(int(month), UNKNOWN)
    except (TypeError, ValueError):
        return UNKNOWN


def hour_bands(hours: pd.Series) -> pd.Series:
    """
    Bucket hours into bands using right-closed bins, so 4 is still
    Late Night and 5 is the first Morning hour. Hours outside 0–24
    (or missing) are labelled 'Unknown'.
    """
    numeric = pd.to_numeric(hours, errors="coerce")
    bands = pd.cut(numeric, bins=HOUR_BINS, labels=HOUR_LABELS, right=True)
    return bands.astype(object).where(bands.notna(), UNKNOWN)


# ── Combined ──────────────────────────────────────────────────────

def add_temporal_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Attach day_of_week, is_weekend, season and hour_band.

    Expects a parsed 'occurred_on_date' timestamp plus 'month' and 'hour'
    columns, as produced by cleaning.prepare_incidents().
    """
    df = df.copy()
    dates = pd.to_datetime(df["occurred_on_date"])

    df["day_of_week"] = dates.dt.day_name()
    df["is_weekend"]  = df["day_of_week"].isin(WEEKEND_DAYS)
    df["season"]      = df["month"].map(season_for_month)
    df["hour_band"]   = hour_bands(df["hour"])

    # NaT dates give NaN day names; keep the label column string-typed
    df["day_of_week"] = df["day_of_week"].fillna(UNKNOWN)
    return df


def weekday_order() -> list[str]:
    """Monday..Sunday, for ordering summary tables."""
    return list(pd.date_range("2024-01-01", periods=7, freq="D").day_name())


def busiest(labels: pd.Series) -> str:
    """Most frequent label; ties go to the first in sorted order."""
    counts = labels.value_counts()
    if counts.empty:
        return UNKNOWN
    top = counts[counts == counts.max()].index
    return str(sorted(top)[0])
