"""
03_train_models.py
------------------
Predicts local incident density from location and hour and compares
six models on a held-out test partition:

  kNN (k=5) on longitude/latitude, Linear, Decision Tree and Polynomial
  (degree-2 coordinates + linear hour) regressions, and two kNN +
  Polynomial ensembles (mean, and 0.7 / 0.3 weighted).

The 80/20 split, the 5-fold kNN cross-validation on the training
partition, and the decision tree are all seeded from --seed, so a rerun
with the same seed reproduces the same split, folds and errors.

The lowest test MSE wins; its predictions fill best_pred / best_resid
and drive the predicted-hotspot flag. Hotspots are incidents at or above
the 75th percentile of observed density.

Outputs:
    data/processed/incidents_scored.csv
    data/processed/model_evaluation.csv
    data/processed/knn_cv_folds.csv

Run from project root:
    python processing/03_train_models.py [--seed 42]
"""

import argparse
import os

import pandas as pd

from hotspots.constants import RANDOM_STATE
from hotspots.pipeline import AnalysisConfig, fit_and_score
from hotspots.models import evaluation_table

# ── Paths ─────────────────────────────────────────────────────────
FEATURES_PATH = os.path.join("data", "processed", "incidents_features.csv")
OUT_SCORED    = os.path.join("data", "processed", "incidents_scored.csv")
OUT_EVAL      = os.path.join("data", "processed", "model_evaluation.csv")
OUT_CV        = os.path.join("data", "processed", "knn_cv_folds.csv")


def load_features() -> pd.DataFrame:
    if not os.path.exists(FEATURES_PATH):
        raise FileNotFoundError(
            f"{FEATURES_PATH} not found. Run 02_density_features.py first."
        )
    return pd.read_csv(FEATURES_PATH, parse_dates=["occurred_on_date"])


def main(argv=None):
    parser = argparse.ArgumentParser(description="Train and rank density models")
    parser.add_argument("--seed", type=int, default=RANDOM_STATE,
                        help="Seed for split, folds and tree (default: %(default)s)")
    args = parser.parse_args(argv)

    print("03_train_models.py")
    print("=" * 50)

    print("Loading incident features...")
    df = load_features()
    print(f"  {len(df):,} incidents")

    config = AnalysisConfig(seed=args.seed)
    scored, cv, ranked = fit_and_score(df, config)

    n_test = int((scored["split"] == "test").sum())
    print(f"\n── Split ────────────────────────────────────")
    print(f"  Training rows: {len(scored) - n_test:,}")
    print(f"  Test rows:     {n_test:,}")

    print(f"\n── kNN {len(cv.fold_mse)}-fold CV (training partition) ───────")
    for fold, mse in enumerate(cv.fold_mse, start=1):
        print(f"    Fold {fold}: MSE={mse:.3f}")
    print(f"  CV MSE: {cv.mean:.3f} ± {cv.std:.3f}")

    print(f"\n── Held-out test performance ────────────────")
    evaluation = evaluation_table(ranked)
    for _, row in evaluation.iterrows():
        print(f"  {int(row['rank'])}. {row['model']:<20} MSE={row['mse']:.3f}  RMSE={row['rmse']:.3f}")
    print(f"  Best model: {ranked[0].kind.value}")

    print(f"\n── Hotspots ─────────────────────────────────")
    print(f"  Threshold (75th pct density): {scored['hotspot_threshold'].iloc[0]:.2f}")
    print(f"  Hotspot incidents:            {int(scored['is_hotspot'].sum()):,}")
    print(f"  Predicted hotspots:           {int(scored['is_predicted_hotspot'].sum()):,}")

    os.makedirs(os.path.dirname(OUT_SCORED), exist_ok=True)
    scored.to_csv(OUT_SCORED, index=False)
    evaluation.to_csv(OUT_EVAL, index=False)
    cv.to_frame().to_csv(OUT_CV, index=False)

    print(
        f"\n✓ Scored incidents written to {OUT_SCORED}\n"
        f"✓ Model evaluation written to {OUT_EVAL}\n"
        f"✓ kNN CV folds written to {OUT_CV}"
    )


if __name__ == "__main__":
    main()
