"""
hotspots/classifier.py
----------------------
Flags hotspot incidents: those whose density is at or above the 75th
percentile of all densities.

The percentile uses numpy's 'linear' method (interpolation between
order statistics), so the threshold is reproducible for a given density
vector. With ties at the threshold slightly more than a quarter of the
incidents can be flagged.
"""

import numpy as np
import pandas as pd

from hotspots.constants import HOTSPOT_QUANTILE, ZONES


def hotspot_threshold(density, quantile: float = HOTSPOT_QUANTILE) -> float:
    values = np.asarray(density, dtype=float)
    if values.size == 0:
        raise ValueError("cannot compute a hotspot threshold for zero incidents")
    return float(np.quantile(values, quantile, method="linear"))


def flag_hotspots(df: pd.DataFrame, quantile: float = HOTSPOT_QUANTILE) -> pd.DataFrame:
    """
    Return a copy of df with 'is_hotspot' and 'hotspot_threshold'.

    If the best model's predictions are present ('best_pred'), also add
    'is_predicted_hotspot' using the same observed-density threshold.
    """
    df = df.copy()
    threshold = hotspot_threshold(df["density"], quantile)
    df["hotspot_threshold"] = threshold
    df["is_hotspot"] = df["density"] >= threshold
    if "best_pred" in df.columns:
        df["is_predicted_hotspot"] = df["best_pred"] >= threshold
    return df


def hotspot_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Incidents, hotspots and mean density per zone, in ZONES order."""
    summary = (
        df.groupby("zone")
        .agg(
            incidents=("density", "size"),
            hotspots=("is_hotspot", "sum"),
            mean_density=("density", "mean"),
            max_density=("density", "max"),
        )
        .reindex(pd.Index(list(ZONES), name="zone"))
        .dropna(subset=["incidents"])
        .reset_index()
    )
    summary["incidents"] = summary["incidents"].astype(int)
    summary["hotspots"]  = summary["hotspots"].astype(int)
    summary["max_density"] = summary["max_density"].astype(int)
    summary["hotspot_share"] = (summary["hotspots"] / summary["incidents"]).round(3)
    summary["mean_density"]  = summary["mean_density"].round(2)
    return summary
