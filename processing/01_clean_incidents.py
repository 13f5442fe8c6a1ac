"""
01_clean_incidents.py
---------------------
Reads raw Boston Police crime incident CSVs, keeps assault incidents on
Causeway, Canal and Nashua Streets for 2019–2022, repairs timestamps
and coordinates, and writes data/processed/incidents_clean.csv.

Raw files expected at:
    data/raw/**/*crime*.csv   (recursive glob, any subfolder depth)

This matches the Analyze Boston download layout where each year is a
separate file, e.g. crime-incident-reports-2019.csv

Run from project root:
    python processing/01_clean_incidents.py [--seed 42] [--correct-all]

--correct-all re-places every incident at its zone anchor as soon as
any incident falls outside the Boston bounding box. By default only the
invalid incidents are re-placed.
"""

import argparse
import glob
import os
import warnings

import pandas as pd

from hotspots.cleaning import prepare_incidents
from hotspots.constants import RANDOM_STATE, YEAR_RANGE, ZONES

# ── Paths ─────────────────────────────────────────────────────────
RAW_DIR     = os.path.join("data", "raw")
OUTPUT_PATH = os.path.join("data", "processed", "incidents_clean.csv")


# ── Helpers ───────────────────────────────────────────────────────

def find_crime_files(raw_dir: str) -> list:
    pattern = os.path.join(raw_dir, "**", "*crime*.csv")
    files = glob.glob(pattern, recursive=True)
    if not files:
        raise FileNotFoundError(
            f"No crime incident CSV files found under {raw_dir}.\n"
            "Expected files matching: data/raw/**/*crime*.csv\n"
            "Download from: https://data.boston.gov/dataset/crime-incident-reports-august-2015-to-date-source-new-system"
        )
    return files


def load_all(files: list) -> pd.DataFrame:
    frames = []
    for fp in sorted(files):
        try:
            frames.append(pd.read_csv(fp, low_memory=False))
        except Exception as e:
            print(f"  WARNING: could not read {fp}: {e}")

    if not frames:
        raise RuntimeError("No files loaded successfully.")

    return pd.concat(frames, ignore_index=True)


def validate(df: pd.DataFrame):
    print(f"\n── Validation ───────────────────────────────")
    print(f"  Total incidents:  {len(df):,}")
    if df.empty:
        print("  WARNING - no incidents matched the street/offense/year filter.")
        return
    print(f"  Date range:       {df['occurred_on_date'].min():%Y-%m-%d} to {df['occurred_on_date'].max():%Y-%m-%d}")
    print(f"  Date source:      {df['date_source'].iloc[0]}")
    print(f"  Corrected coords: {int(df['coords_corrected'].sum()):,}")

    out_of_window = ~df["year"].between(*YEAR_RANGE)
    if out_of_window.any():
        print(f"  WARNING - {int(out_of_window.sum()):,} incidents outside {YEAR_RANGE}")

    print(f"\n  Incidents per zone:")
    for zone, count in df["zone"].value_counts().reindex(list(ZONES), fill_value=0).items():
        print(f"    {zone}: {count:,}")


# ── Main ──────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Clean raw Boston assault incidents")
    parser.add_argument("--seed", type=int, default=RANDOM_STATE,
                        help="Seed for coordinate jitter (default: %(default)s)")
    parser.add_argument("--correct-all", action="store_true",
                        help="Re-place every incident when any coordinate is invalid")
    args = parser.parse_args(argv)

    print("01_clean_incidents.py")
    print("=" * 50)

    print(f"Searching for crime incident files in {RAW_DIR}...")
    files = find_crime_files(RAW_DIR)
    print(f"Found {len(files)} files")

    print("Loading and concatenating...")
    raw = load_all(files)
    print(f"  {len(raw):,} raw rows loaded")

    print("Filtering and cleaning...")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        clean_df = prepare_incidents(raw, seed=args.seed, correct_all=args.correct_all)
    for w in caught:
        print(f"  WARNING: {w.message}")
    print(f"  {len(clean_df):,} assault incidents after cleaning")

    validate(clean_df)

    os.makedirs(os.path.dirname(OUTPUT_PATH), exist_ok=True)
    clean_df.to_csv(OUTPUT_PATH, index=False)
    print(f"\n✓ Written to {OUTPUT_PATH}")


if __name__ == "__main__":
    main()
