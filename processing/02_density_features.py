"""
02_density_features.py
----------------------
Adds temporal labels (day of week, weekend flag, season, hour band) and
local incident density to the cleaned incidents, and reports how the
density distribution changes across the candidate radii.

The operating radius is fixed at 0.002° (~200 m). The sensitivity table
is there to show the effect of that choice, not to select a radius.

Outputs:
    data/processed/incidents_features.csv
    data/processed/radius_sensitivity.csv

Run from project root:
    python processing/02_density_features.py [--radius 0.002]
"""

import argparse
import os

import pandas as pd

from hotspots.constants import CANDIDATE_RADII, DENSITY_RADIUS
from hotspots.density import pairwise_distances, radius_sensitivity
from hotspots.pipeline import AnalysisConfig, check_pipeline_columns, enrich

# ── Paths ─────────────────────────────────────────────────────────
CLEAN_PATH    = os.path.join("data", "processed", "incidents_clean.csv")
OUT_FEATURES  = os.path.join("data", "processed", "incidents_features.csv")
OUT_RADII     = os.path.join("data", "processed", "radius_sensitivity.csv")


def load_clean() -> pd.DataFrame:
    if not os.path.exists(CLEAN_PATH):
        raise FileNotFoundError(
            f"{CLEAN_PATH} not found. Run 01_clean_incidents.py first."
        )
    return pd.read_csv(CLEAN_PATH, parse_dates=["occurred_on_date"])


def main(argv=None):
    parser = argparse.ArgumentParser(description="Derive temporal features and density")
    parser.add_argument("--radius", type=float, default=DENSITY_RADIUS,
                        help="Operating density radius in degrees (default: %(default)s)")
    args = parser.parse_args(argv)

    print("02_density_features.py")
    print("=" * 50)

    print("Loading cleaned incidents...")
    incidents = load_clean()
    print(f"  {len(incidents):,} incidents")

    config = AnalysisConfig(radius=args.radius)

    # One distance matrix serves every candidate radius and the operating one
    check_pipeline_columns(incidents)
    distances = pairwise_distances(incidents)

    print(f"\n── Radius sensitivity ───────────────────────")
    radii = radius_sensitivity(
        incidents, CANDIDATE_RADII, selected=config.radius, distances=distances
    )
    for _, row in radii.iterrows():
        marker = "  ← operating radius" if row["is_selected"] else ""
        print(
            f"  {row['radius']:.3f}° (~{int(row['radius_m'])} m): "
            f"mean={row['mean_density']:.2f} min={int(row['min_density'])} "
            f"max={int(row['max_density'])}{marker}"
        )

    print(f"\n── Features ─────────────────────────────────")
    df = enrich(incidents, config, distances)
    print(f"  Weekend incidents: {int(df['is_weekend'].sum()):,}")
    print(f"  Seasons:           {df['season'].value_counts().to_dict()}")
    print(f"  Hour bands:        {df['hour_band'].value_counts().to_dict()}")
    print(f"  Density at {config.radius}°: mean={df['density'].mean():.2f} "
          f"max={int(df['density'].max())}")

    os.makedirs(os.path.dirname(OUT_FEATURES), exist_ok=True)
    df.to_csv(OUT_FEATURES, index=False)
    print(f"\n✓ Features written to {OUT_FEATURES}")
    radii.to_csv(OUT_RADII, index=False)
    print(f"✓ Radius sensitivity written to {OUT_RADII}")


if __name__ == "__main__":
    main()
