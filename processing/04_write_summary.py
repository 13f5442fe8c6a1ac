"""
04_write_summary.py
-------------------
Builds the per-zone hotspot table and the plain-text analysis summary
from the outputs of scripts 02 and 03.

Outputs:
    data/processed/hotspot_summary.csv    — incidents, hotspots, density per zone
    data/processed/analysis_summary.txt   — temporal/spatial patterns, model
                                            ranking, hotspots, recommendations,
                                            limitations

Run from project root:
    python processing/04_write_summary.py
"""

import os

import pandas as pd

from hotspots.classifier import hotspot_summary
from hotspots.report import build_summary

PROCESSED = os.path.join("data", "processed")

INPUTS = {
    "incidents":      "incidents_scored.csv",
    "radius_summary": "radius_sensitivity.csv",
    "evaluation":     "model_evaluation.csv",
    "cv_folds":       "knn_cv_folds.csv",
}

OUT_ZONES   = os.path.join(PROCESSED, "hotspot_summary.csv")
OUT_SUMMARY = os.path.join(PROCESSED, "analysis_summary.txt")


def load_inputs() -> dict:
    tables = {}
    for key, filename in INPUTS.items():
        path = os.path.join(PROCESSED, filename)
        if not os.path.exists(path):
            raise FileNotFoundError(
                f"{path} not found. Run 02_density_features.py and "
                "03_train_models.py first."
            )
        tables[key] = pd.read_csv(path)
    return tables


def main():
    print("04_write_summary.py")
    print("=" * 50)

    print("Loading pipeline outputs...")
    tables = load_inputs()
    print(f"  {len(tables['incidents']):,} scored incidents")

    os.makedirs(PROCESSED, exist_ok=True)

    print("  Building hotspot_summary.csv...")
    zones = hotspot_summary(tables["incidents"])
    zones.to_csv(OUT_ZONES, index=False)
    print(f"    ✓ {len(zones)} zones")

    print("  Building analysis_summary.txt...")
    text = build_summary(
        tables["incidents"],
        tables["radius_summary"],
        tables["evaluation"],
        tables["cv_folds"],
    )
    with open(OUT_SUMMARY, "w", encoding="utf-8") as fh:
        fh.write(text)
    print(f"    ✓ {len(text.splitlines())} lines")

    print(f"\n✓ Summary outputs written to {PROCESSED}")


if __name__ == "__main__":
    main()
