"""
hotspots/pipeline.py
--------------------
Composes the analytical stages over a prepared incident table:

    temporal features → density → train/test split
      → kNN cross-validation → model fitting and ranking
      → per-incident scoring → hotspot flags

Each stage returns a new DataFrame; nothing is mutated in place, so the
stages can also be called and tested on their own. All randomness (the
split, the fold shuffling, the decision tree) is driven by
AnalysisConfig.seed.

Typical use:
    from hotspots.cleaning import prepare_incidents
    from hotspots.pipeline import AnalysisConfig, run_analysis

    incidents = prepare_incidents(raw_df)
    result = run_analysis(incidents, AnalysisConfig(seed=7))
    result.best_kind, result.evaluation_table()
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from hotspots.classifier import flag_hotspots, hotspot_summary
from hotspots.constants import (
    CANDIDATE_RADII,
    CV_FOLDS,
    DENSITY_RADIUS,
    ENSEMBLE_WEIGHTS,
    HOTSPOT_QUANTILE,
    KNN_NEIGHBOURS,
    RANDOM_STATE,
    TEST_SIZE,
)
from hotspots.density import attach_density, pairwise_distances, radius_sensitivity
from hotspots.exceptions import SchemaError
from hotspots.features import add_temporal_features, add_zone
from hotspots.helpers import check_required_columns
from hotspots.models import (
    CrossValidationSummary,
    ModelKind,
    ModelResult,
    cross_validate_knn,
    evaluation_table,
    score_incidents,
    split_incidents,
    train_and_evaluate,
)
from hotspots.report import summary_from_result

PIPELINE_COLUMNS = [
    "occurred_on_date",
    "street",
    "longitude",
    "latitude",
    "hour",
    "month",
]


@dataclass(frozen=True)
class AnalysisConfig:
    seed: int = RANDOM_STATE
    radius: float = DENSITY_RADIUS
    candidate_radii: tuple = CANDIDATE_RADII
    test_size: float = TEST_SIZE
    n_neighbours: int = KNN_NEIGHBOURS
    cv_folds: int = CV_FOLDS
    ensemble_weights: tuple = ENSEMBLE_WEIGHTS
    hotspot_quantile: float = HOTSPOT_QUANTILE


@dataclass(frozen=True, eq=False)
class AnalysisResult:
    incidents: pd.DataFrame
    radius_summary: pd.DataFrame
    cv: CrossValidationSummary
    ranked: list
    config: AnalysisConfig

    @property
    def best(self) -> ModelResult:
        return self.ranked[0]

    @property
    def best_kind(self) -> ModelKind:
        return self.best.kind

    @property
    def hotspot_threshold(self) -> float:
        return float(self.incidents["hotspot_threshold"].iloc[0])

    @property
    def hotspot_count(self) -> int:
        return int(self.incidents["is_hotspot"].sum())

    def evaluation_table(self) -> pd.DataFrame:
        return evaluation_table(self.ranked)

    def hotspot_summary(self) -> pd.DataFrame:
        return hotspot_summary(self.incidents)

    def summary(self) -> str:
        return summary_from_result(self)


def check_pipeline_columns(incidents: pd.DataFrame) -> None:
    missing = check_required_columns(incidents, PIPELINE_COLUMNS)
    if missing:
        raise SchemaError(f"Incident table is missing columns: {missing}")


def enrich(
    incidents: pd.DataFrame,
    config: AnalysisConfig = AnalysisConfig(),
    distances: np.ndarray | None = None,
) -> pd.DataFrame:
    """
    Zone, temporal labels and density at the operating radius.

    `distances` is an optional pairwise_distances() matrix for the same
    incidents, reused instead of being rebuilt.
    """
    check_pipeline_columns(incidents)

    df = incidents
    if "zone" not in df.columns:
        df = add_zone(df)
    df = add_temporal_features(df)
    return attach_density(df, config.radius, distances)


def fit_and_score(
    df: pd.DataFrame,
    config: AnalysisConfig = AnalysisConfig(),
) -> tuple[pd.DataFrame, CrossValidationSummary, list]:
    """
    Split an enriched table, cross-validate kNN, fit and rank all
    models, then score and flag every incident.

    Returns:
        (scored incidents, kNN CV summary, results ranked by test MSE)
    """
    train, test = split_incidents(df, config.test_size, config.seed)
    cv = cross_validate_knn(train, config.n_neighbours, config.cv_folds, config.seed)
    fitted, ranked = train_and_evaluate(
        train, test,
        n_neighbours=config.n_neighbours,
        random_state=config.seed,
        weights=config.ensemble_weights,
    )

    scored = score_incidents(
        df, fitted, ranked[0].kind, test.index, config.ensemble_weights
    )
    scored = flag_hotspots(scored, config.hotspot_quantile)
    return scored, cv, ranked


def run_analysis(
    incidents: pd.DataFrame,
    config: AnalysisConfig = AnalysisConfig(),
) -> AnalysisResult:
    check_pipeline_columns(incidents)
    distances = pairwise_distances(incidents)

    df = enrich(incidents, config, distances)
    radius_summary = radius_sensitivity(
        df, config.candidate_radii, selected=config.radius, distances=distances
    )
    scored, cv, ranked = fit_and_score(df, config)

    return AnalysisResult(
        incidents=scored,
        radius_summary=radius_summary,
        cv=cv,
        ranked=ranked,
        config=config,
    )
