"""
hotspots/density.py
-------------------
Local incident density: for every incident, the number of *other*
incidents within a fixed radius of it.

Distances are plain Euclidean distances on (longitude, latitude) in
coordinate degrees, not geodesic metres. The study area is a few
hundred metres across, so the distortion is small and consistent.

The pairwise distance matrix is O(n²) in memory and time. That is fine
for the few hundred incidents around one venue this is built for; it is
computed once and re-thresholded for each candidate radius.

Radius choice:
  radius_sensitivity() reports how the density distribution changes
  across CANDIDATE_RADII, but the operating radius is DENSITY_RADIUS
  (0.002°, ~200 m), a fixed calibration choice. Nothing here picks a
  radius by optimising a metric.
"""

import numpy as np
import pandas as pd
from scipy.spatial.distance import cdist

from hotspots.constants import (
    CANDIDATE_RADII,
    DENSITY_RADIUS,
    SPATIAL_FEATURES,
)
from hotspots.helpers import degrees_to_metres


def pairwise_distances(df: pd.DataFrame) -> np.ndarray:
    """n x n matrix of raw-degree distances between incidents."""
    coords = df[SPATIAL_FEATURES].to_numpy(dtype=float)
    return cdist(coords, coords, metric="euclidean")


def density_counts(distances: np.ndarray, radius: float) -> np.ndarray:
    """
    Count neighbours within `radius` (inclusive) for each row of a
    square distance matrix. An incident never counts itself, but other
    incidents at the exact same location do.
    """
    if radius < 0:
        raise ValueError(f"radius must be non-negative, got {radius}")
    within = distances <= radius
    np.fill_diagonal(within, False)
    return within.sum(axis=1).astype(int)


def compute_density(
    df: pd.DataFrame,
    radius: float = DENSITY_RADIUS,
    distances: np.ndarray | None = None,
) -> np.ndarray:
    if distances is None:
        distances = pairwise_distances(df)
    return density_counts(distances, radius)


def density_by_radius(
    df: pd.DataFrame,
    radii=CANDIDATE_RADII,
    distances: np.ndarray | None = None,
) -> dict[float, np.ndarray]:
    if distances is None:
        distances = pairwise_distances(df)
    return {r: density_counts(distances, r) for r in radii}


def radius_sensitivity(
    df: pd.DataFrame,
    radii=CANDIDATE_RADII,
    selected: float = DENSITY_RADIUS,
    distances: np.ndarray | None = None,
) -> pd.DataFrame:
    """
    Summarise the density distribution for each candidate radius.

    Pass `distances` from pairwise_distances() to reuse a matrix that
    has already been built for the same incidents.

    Returns:
        One row per radius with radius, radius_m, mean_density,
        min_density, max_density, std_density and an is_selected flag
        marking the operating radius `selected`.
    """
    rows = []
    for radius, density in density_by_radius(df, radii, distances).items():
        empty = len(density) == 0
        rows.append({
            "radius":       radius,
            "radius_m":     degrees_to_metres(radius),
            "mean_density": float("nan") if empty else float(density.mean()),
            "min_density":  0 if empty else int(density.min()),
            "max_density":  0 if empty else int(density.max()),
            "std_density":  float("nan") if empty else float(density.std()),
            "is_selected":  bool(np.isclose(radius, selected)),
        })
    return pd.DataFrame(rows)


def attach_density(
    df: pd.DataFrame,
    radius: float = DENSITY_RADIUS,
    distances: np.ndarray | None = None,
) -> pd.DataFrame:
    """Return a copy of df with integer 'density' and the 'density_radius' used."""
    df = df.copy()
    df["density"] = compute_density(df, radius, distances)
    df["density_radius"] = radius
    return df
