"""
hotspots/models.py
------------------
Predicts local incident density from location (and hour) with four
fitted regressors and two ensembles, then ranks them on a held-out
test partition.

Models, in evaluation order:
  kNN                  KNeighborsRegressor on (longitude, latitude), k=5
  Linear               OLS on (longitude, latitude, hour)
  Decision Tree        DecisionTreeRegressor on the same three predictors
  Polynomial           OLS on degree-2 expansion of (longitude, latitude)
                       plus a linear hour term
  Ensemble (mean)      (kNN + Polynomial) / 2
  Ensemble (weighted)  0.7 * kNN + 0.3 * Polynomial

Ranking is by test MSE, ascending. Python's sort is stable, so on an
exact MSE tie the model evaluated first keeps the better rank.

Degenerate inputs (a predictor with zero variance, a rank-deficient
design matrix, fewer rows than neighbours or folds, non-finite values)
raise ModelDegeneracyError instead of producing a fit whose NaN or
meaningless predictions would slip into the ranking.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_squared_error
from sklearn.model_selection import KFold, cross_val_score, train_test_split
from sklearn.neighbors import KNeighborsRegressor
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import PolynomialFeatures
from sklearn.tree import DecisionTreeRegressor

from hotspots.constants import (
    CV_FOLDS,
    ENSEMBLE_WEIGHTS,
    KNN_NEIGHBOURS,
    MODEL_FEATURES,
    RANDOM_STATE,
    SPATIAL_FEATURES,
    TARGET,
    TEST_SIZE,
)
from hotspots.exceptions import ModelDegeneracyError


# ── Model kinds ───────────────────────────────────────────────────

class ModelKind(Enum):
    KNN               = "kNN"
    LINEAR            = "Linear"
    DECISION_TREE     = "Decision Tree"
    POLYNOMIAL        = "Polynomial"
    ENSEMBLE_MEAN     = "Ensemble (mean)"
    ENSEMBLE_WEIGHTED = "Ensemble (weighted)"

    @property
    def slug(self) -> str:
        """Short name used in column names, e.g. pred_knn."""
        return _SLUGS[self]

    @property
    def is_ensemble(self) -> bool:
        return self in (ModelKind.ENSEMBLE_MEAN, ModelKind.ENSEMBLE_WEIGHTED)


_SLUGS = {
    ModelKind.KNN:               "knn",
    ModelKind.LINEAR:            "linear",
    ModelKind.DECISION_TREE:     "tree",
    ModelKind.POLYNOMIAL:        "poly",
    ModelKind.ENSEMBLE_MEAN:     "ensemble_mean",
    ModelKind.ENSEMBLE_WEIGHTED: "ensemble_weighted",
}

FITTED_KINDS = [k for k in ModelKind if not k.is_ensemble]


@dataclass(frozen=True, eq=False)
class ModelResult:
    """Held-out performance of one model, with its test-set predictions."""
    kind: ModelKind
    predictions: np.ndarray = field(repr=False)
    mse: float
    rmse: float


@dataclass(frozen=True)
class CrossValidationSummary:
    fold_mse: tuple
    mean: float
    std: float

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "fold": range(1, len(self.fold_mse) + 1),
            "mse":  list(self.fold_mse),
        })


def features_for(kind: ModelKind) -> list[str]:
    return SPATIAL_FEATURES if kind is ModelKind.KNN else MODEL_FEATURES


def build_estimator(
    kind: ModelKind,
    n_neighbours: int = KNN_NEIGHBOURS,
    random_state: int = RANDOM_STATE,
):
    """Unfitted scikit-learn estimator for a fitted (non-ensemble) kind."""
    if kind is ModelKind.KNN:
        return KNeighborsRegressor(n_neighbors=n_neighbours)
    if kind is ModelKind.LINEAR:
        return LinearRegression()
    if kind is ModelKind.DECISION_TREE:
        return DecisionTreeRegressor(random_state=random_state)
    if kind is ModelKind.POLYNOMIAL:
        # Columns arrive as (longitude, latitude, hour)
        expand = ColumnTransformer([
            ("coords", PolynomialFeatures(degree=2, include_bias=False), [0, 1]),
            ("hour",   "passthrough", [2]),
        ])
        return make_pipeline(expand, LinearRegression())
    raise ValueError(f"{kind.value} is an ensemble and has no estimator")


# ── Degeneracy checks ─────────────────────────────────────────────

def _design_matrix(kind: ModelKind, X: np.ndarray) -> np.ndarray:
    if kind is ModelKind.POLYNOMIAL:
        coords = PolynomialFeatures(degree=2, include_bias=False).fit_transform(X[:, :2])
        return np.column_stack([coords, X[:, 2]])
    return X


def check_design(kind: ModelKind, X: np.ndarray, n_neighbours: int = KNN_NEIGHBOURS) -> None:
    """
    Raise ModelDegeneracyError if `kind` cannot be fitted sensibly on X.

    For the least-squares models the rank test runs on standardised,
    centred columns plus an intercept, so it detects exact collinearity
    rather than the poor scaling of raw degree coordinates.
    """
    name = kind.value
    cols = features_for(kind)

    if len(X) == 0:
        raise ModelDegeneracyError(name, "no training rows")
    if not np.isfinite(X).all():
        raise ModelDegeneracyError(name, "non-finite predictor values")

    flat = [c for c, spread in zip(cols, np.ptp(X, axis=0)) if spread == 0]
    if flat:
        raise ModelDegeneracyError(name, f"zero variance in predictors {flat}")

    if kind is ModelKind.KNN and len(X) < n_neighbours:
        raise ModelDegeneracyError(
            name, f"{len(X)} training rows is fewer than k={n_neighbours}"
        )

    if kind in (ModelKind.LINEAR, ModelKind.POLYNOMIAL):
        design = _design_matrix(kind, X)
        centred = design - design.mean(axis=0)
        scale = centred.std(axis=0)
        if (scale == 0).any():
            raise ModelDegeneracyError(name, "constant column in design matrix")
        full = np.column_stack([np.ones(len(design)), centred / scale])
        if np.linalg.matrix_rank(full) < full.shape[1]:
            raise ModelDegeneracyError(
                name,
                f"singular design matrix ({full.shape[1]} columns, "
                f"rank {np.linalg.matrix_rank(full)})",
            )


def _check_target(y: np.ndarray) -> None:
    if not np.isfinite(y).all():
        raise ModelDegeneracyError(TARGET, "non-finite target values")


def _check_predictions(kind: ModelKind, predictions: np.ndarray) -> None:
    if not np.isfinite(predictions).all():
        raise ModelDegeneracyError(kind.value, "produced non-finite predictions")


# ── Split & cross-validation ──────────────────────────────────────

def split_incidents(
    df: pd.DataFrame,
    test_size: float = TEST_SIZE,
    random_state: int = RANDOM_STATE,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Uniform random train/test split without replacement."""
    if len(df) < 2:
        raise ModelDegeneracyError("split", f"cannot split {len(df)} incidents")
    train, test = train_test_split(df, test_size=test_size, random_state=random_state)
    return train, test


def cross_validate_knn(
    train: pd.DataFrame,
    n_neighbours: int = KNN_NEIGHBOURS,
    n_folds: int = CV_FOLDS,
    random_state: int = RANDOM_STATE,
) -> CrossValidationSummary:
    """
    Shuffled k-fold MSE of the kNN regressor on the training partition
    only. The test partition is never touched here.
    """
    X = train[SPATIAL_FEATURES].to_numpy(dtype=float)
    y = train[TARGET].to_numpy(dtype=float)
    _check_target(y)

    n = len(X)
    if n < n_folds:
        raise ModelDegeneracyError(
            ModelKind.KNN.value, f"{n} training rows cannot fill {n_folds} folds"
        )
    smallest_fold_train = n - math.ceil(n / n_folds)
    if smallest_fold_train < n_neighbours:
        raise ModelDegeneracyError(
            ModelKind.KNN.value,
            f"fold training sets of {smallest_fold_train} rows are fewer than k={n_neighbours}",
        )
    check_design(ModelKind.KNN, X, n_neighbours)

    cv = KFold(n_splits=n_folds, shuffle=True, random_state=random_state)
    scores = cross_val_score(
        KNeighborsRegressor(n_neighbors=n_neighbours),
        X, y,
        cv=cv,
        scoring="neg_mean_squared_error",
    )
    fold_mse = -scores
    if not np.isfinite(fold_mse).all():
        raise ModelDegeneracyError(ModelKind.KNN.value, "cross-validation produced non-finite MSE")

    return CrossValidationSummary(
        fold_mse=tuple(float(v) for v in fold_mse),
        mean=float(np.mean(fold_mse)),
        std=float(np.std(fold_mse)),
    )


# ── Fitting & prediction ──────────────────────────────────────────

def fit_models(
    train: pd.DataFrame,
    n_neighbours: int = KNN_NEIGHBOURS,
    random_state: int = RANDOM_STATE,
) -> dict:
    """Fit kNN, Linear, Decision Tree and Polynomial on the training rows."""
    y = train[TARGET].to_numpy(dtype=float)
    _check_target(y)

    fitted = {}
    for kind in FITTED_KINDS:
        X = train[features_for(kind)].to_numpy(dtype=float)
        check_design(kind, X, n_neighbours)
        estimator = build_estimator(kind, n_neighbours, random_state)
        estimator.fit(X, y)
        fitted[kind] = estimator
    return fitted


def predict_all(
    fitted: dict,
    df: pd.DataFrame,
    weights: tuple = ENSEMBLE_WEIGHTS,
) -> dict:
    """
    Predictions from every fitted model plus the two ensembles, keyed
    by ModelKind in evaluation order.
    """
    predictions = {}
    for kind in FITTED_KINDS:
        preds = fitted[kind].predict(df[features_for(kind)].to_numpy(dtype=float))
        _check_predictions(kind, preds)
        predictions[kind] = preds

    knn  = predictions[ModelKind.KNN]
    poly = predictions[ModelKind.POLYNOMIAL]
    w_knn, w_poly = weights
    predictions[ModelKind.ENSEMBLE_MEAN]     = (knn + poly) / 2
    predictions[ModelKind.ENSEMBLE_WEIGHTED] = w_knn * knn + w_poly * poly
    return predictions


# ── Evaluation & ranking ──────────────────────────────────────────

def evaluate(predictions: dict, y_true) -> list[ModelResult]:
    """MSE and RMSE for each model, in evaluation order."""
    y_true = np.asarray(y_true, dtype=float)
    results = []
    for kind in ModelKind:
        if kind not in predictions:
            continue
        preds = np.asarray(predictions[kind], dtype=float)
        _check_predictions(kind, preds)
        mse = float(mean_squared_error(y_true, preds))
        results.append(ModelResult(kind, preds, mse, math.sqrt(mse)))
    return results


def rank_results(results: list[ModelResult]) -> list[ModelResult]:
    return sorted(results, key=lambda r: r.mse)


def evaluation_table(ranked: list[ModelResult]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "rank":    i,
            "model":   r.kind.value,
            "mse":     r.mse,
            "rmse":    r.rmse,
            "is_best": i == 1,
        }
        for i, r in enumerate(ranked, start=1)
    ])


def train_and_evaluate(
    train: pd.DataFrame,
    test: pd.DataFrame,
    n_neighbours: int = KNN_NEIGHBOURS,
    random_state: int = RANDOM_STATE,
    weights: tuple = ENSEMBLE_WEIGHTS,
) -> tuple[dict, list[ModelResult]]:
    """
    Fit on train, score on test.

    Returns:
        (fitted estimators keyed by ModelKind, results ranked by MSE)
    """
    fitted = fit_models(train, n_neighbours, random_state)
    predictions = predict_all(fitted, test, weights)
    results = evaluate(predictions, test[TARGET])
    return fitted, rank_results(results)


# ── Scoring the full incident table ───────────────────────────────

def score_incidents(
    df: pd.DataFrame,
    fitted: dict,
    best: ModelKind,
    test_index,
    weights: tuple = ENSEMBLE_WEIGHTS,
) -> pd.DataFrame:
    """
    Return a copy of df with a 'split' label, pred_<model> and
    resid_<model> (actual minus predicted) for every model, and the
    best model's prediction and residual as best_pred / best_resid.
    """
    df = df.copy()
    df["split"] = np.where(df.index.isin(test_index), "test", "train")

    predictions = predict_all(fitted, df, weights)
    actual = df[TARGET].to_numpy(dtype=float)
    for kind, preds in predictions.items():
        df[f"pred_{kind.slug}"]  = preds
        df[f"resid_{kind.slug}"] = actual - preds

    df["best_model"] = best.value
    df["best_pred"]  = predictions[best]
    df["best_resid"] = actual - predictions[best]
    return df
