"""
hotspots/report.py
------------------
Plain-text analysis summary.

Works from the tables the pipeline produces (scored incidents, radius
sensitivity, ranked evaluation, kNN fold errors), so it can run either on
a fresh AnalysisResult or on the CSVs from processing/03_train_models.py.

The structure is fixed (temporal patterns, spatial patterns, modelling
effectiveness, hotspots, recommendations, limitations); only the values
change between runs. Layout and rendering to other formats are left to
whoever consumes the text.
"""

import pandas as pd

from hotspots.classifier import hotspot_summary
from hotspots.features import busiest, weekday_order
from hotspots.helpers import (
    degrees_to_metres,
    fmt_count,
    fmt_float,
    fmt_pct,
    share,
)

RULE = "─" * 60


def _section(title: str, lines: list[str]) -> list[str]:
    return ["", title.upper(), RULE, *lines]


def _temporal(df: pd.DataFrame) -> list[str]:
    by_day = df["day_of_week"].value_counts().reindex(weekday_order(), fill_value=0)
    day_line = ", ".join(f"{day[:3]} {int(n)}" for day, n in by_day.items())
    return [
        f"Busiest day:        {busiest(df['day_of_week'])}",
        f"Busiest hour band:  {busiest(df['hour_band'])}",
        f"Busiest season:     {busiest(df['season'])}",
        f"Weekend share:      {fmt_pct(share(df['is_weekend']), 1)} of incidents",
        f"By day:             {day_line}",
    ]


def _spatial(df: pd.DataFrame, radius_summary: pd.DataFrame) -> list[str]:
    radius = float(df["density_radius"].iloc[0])
    lines = [
        f"Operating radius:   {radius}° (~{degrees_to_metres(radius)} m)",
        f"Mean density:       {df['density'].mean():.2f} "
        f"(min {int(df['density'].min())}, max {int(df['density'].max())})",
        "Incidents by zone:",
    ]
    for _, row in hotspot_summary(df).iterrows():
        lines.append(
            f"  {row['zone']:<10} {fmt_count(row['incidents']):>6} incidents, "
            f"mean density {row['mean_density']:.2f}"
        )
    lines.append("Radius sensitivity:")
    for _, row in radius_summary.iterrows():
        marker = "  <- selected" if row["is_selected"] else ""
        lines.append(
            f"  {row['radius']:.3f}° (~{int(row['radius_m'])} m): "
            f"mean {row['mean_density']:.2f}, max {int(row['max_density'])}{marker}"
        )
    return lines


def _modelling(evaluation: pd.DataFrame, cv_folds: pd.DataFrame) -> list[str]:
    fold_mse = cv_folds["mse"]
    lines = [
        f"kNN {len(fold_mse)}-fold CV MSE: "
        f"{fmt_float(fold_mse.mean())} ± {fmt_float(fold_mse.std(ddof=0))}",
        "Held-out test error (ranked by MSE):",
    ]
    for _, row in evaluation.sort_values("rank").iterrows():
        lines.append(
            f"  {int(row['rank'])}. {row['model']:<20} "
            f"MSE {fmt_float(row['mse']):>10}  RMSE {fmt_float(row['rmse']):>8}"
        )
    lines.append(f"Best model: {best_model_name(evaluation)}")
    return lines


def _hotspots(df: pd.DataFrame) -> list[str]:
    lines = [
        f"Threshold (75th percentile density): {df['hotspot_threshold'].iloc[0]:.2f}",
        f"Hotspot incidents:  {fmt_count(df['is_hotspot'].sum())} of {fmt_count(len(df))} "
        f"({fmt_pct(share(df['is_hotspot']), 1)})",
    ]
    if "is_predicted_hotspot" in df.columns:
        agree = share(df["is_predicted_hotspot"] == df["is_hotspot"])
        lines.append(
            f"Best model agrees with observed hotspot flag on {fmt_pct(agree, 1)} of incidents"
        )
    return lines


def _recommendations(df: pd.DataFrame, best: str) -> list[str]:
    zones = hotspot_summary(df).sort_values("hotspots", ascending=False, kind="stable")
    top_zone = zones["zone"].iloc[0] if not zones.empty else "the study area"
    return [
        f"- Concentrate patrol presence on {top_zone}, which holds the most hotspot incidents.",
        f"- Schedule coverage for {busiest(df['day_of_week'])} during the "
        f"{busiest(df['hour_band'])} band.",
        f"- Use the {best} model's predicted density to rank locations "
        "when planning deployments.",
    ]


def _limitations(df: pd.DataFrame) -> list[str]:
    lines = [
        "- Density uses straight-line distance in coordinate degrees, not metres.",
        "- The operating radius is a fixed calibration, not an optimised choice.",
        f"- Models are trained on {fmt_count(len(df))} incidents; small samples make "
        "test error sensitive to the random split.",
    ]
    if "coords_corrected" in df.columns and df["coords_corrected"].any():
        lines.append(
            f"- {fmt_count(df['coords_corrected'].sum())} incidents had synthetic "
            "coordinates placed near their zone anchor."
        )
    date_source = df["date_source"].iloc[0] if "date_source" in df.columns else None
    if date_source in ("year-month", "synthetic"):
        lines.append(
            f"- Occurrence dates were reconstructed ({date_source}); day-of-week "
            "patterns are unreliable."
        )
    return lines


def best_model_name(evaluation: pd.DataFrame) -> str:
    return str(evaluation.sort_values("rank")["model"].iloc[0])


def build_summary(
    incidents: pd.DataFrame,
    radius_summary: pd.DataFrame,
    evaluation: pd.DataFrame,
    cv_folds: pd.DataFrame,
    title: str = "Assault Density Analysis",
) -> str:
    """
    Args:
        incidents:      Scored incidents with density, temporal labels and
                        hotspot flags (AnalysisResult.incidents).
        radius_summary: Output of density.radius_sensitivity().
        evaluation:     Ranked table from models.evaluation_table().
        cv_folds:       Per-fold kNN MSE (CrossValidationSummary.to_frame()).

    Returns:
        The summary as a single newline-terminated string.
    """
    if incidents.empty:
        raise ValueError("cannot summarise an empty incident table")

    lines = [title, "=" * len(title)]
    lines += _section("Temporal patterns", _temporal(incidents))
    lines += _section("Spatial patterns", _spatial(incidents, radius_summary))
    lines += _section("Modelling effectiveness", _modelling(evaluation, cv_folds))
    lines += _section("Hotspots", _hotspots(incidents))
    lines += _section("Recommendations", _recommendations(incidents, best_model_name(evaluation)))
    lines += _section("Limitations", _limitations(incidents))
    return "\n".join(lines) + "\n"


def summary_from_result(result, title: str = "Assault Density Analysis") -> str:
    """build_summary() for an in-memory pipeline.AnalysisResult."""
    return build_summary(
        result.incidents,
        result.radius_summary,
        result.evaluation_table(),
        result.cv.to_frame(),
        title=title,
    )
