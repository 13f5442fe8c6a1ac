"""
hotspots/cleaning.py
--------------------
Turns a raw Boston crime extract into the incident table the analytical
core expects: standardised column names, parsed timestamps, assault
incidents on the three study streets for 2019–2022, and coordinates
inside the Boston bounding box.

Data-quality problems that can be worked around are reported with
warnings.warn() rather than raised, so a messy extract still produces
an analysis. Missing required columns are the one fatal condition.

Typical use:
    from hotspots.cleaning import prepare_incidents
    incidents = prepare_incidents(raw_df, seed=42)
"""

import warnings

import numpy as np
import pandas as pd

from hotspots.constants import (
    BOSTON_LAT_RANGE,
    BOSTON_LON_RANGE,
    COLUMN_RENAME,
    DATE_FORMATS,
    DATE_PARSE_THRESHOLD,
    JITTER_DEGREES,
    OFFENSE_KEYWORD,
    RANDOM_STATE,
    REQUIRED_COLUMNS,
    SYNTHETIC_DATE_START,
    TARGET_STREETS,
    YEAR_RANGE,
    ZONE_ANCHORS,
)
from hotspots.exceptions import SchemaError
from hotspots.features import add_zone, assign_zone
from hotspots.helpers import check_required_columns


# ── Schema ────────────────────────────────────────────────────────

def standardise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lowercase snake_case headers; Lat/Long become latitude/longitude."""
    df = df.copy()
    df.columns = [str(c).strip().lower().replace(" ", "_") for c in df.columns]
    return df.rename(columns=COLUMN_RENAME)


def require_columns(df: pd.DataFrame, required: list[str] = REQUIRED_COLUMNS) -> None:
    missing = check_required_columns(df, required)
    if missing:
        raise SchemaError(
            f"Incident table is missing required columns: {missing}. "
            f"Found: {list(df.columns)}"
        )


# ── Dates ─────────────────────────────────────────────────────────

# Trailing UTC offset after a clock time: Z, UTC, +00, -0400, -04:00
_UTC_OFFSET = r"(\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?)\s*(?:Z|UTC|[+-]\d{2}(?::?\d{2})?)$"


def _wall_clock(raw: pd.Series) -> pd.Series:
    """Drop a trailing UTC offset, keeping the local clock time as recorded."""
    text = raw.astype("string").str.strip()
    return text.str.replace(_UTC_OFFSET, r"\1", regex=True)


def _parse_with(raw: pd.Series, fmt: str) -> pd.Series:
    return pd.to_datetime(raw, format=fmt, errors="coerce")


def _year_month_dates(df: pd.DataFrame) -> pd.Series:
    """First-of-month dates built from the YEAR and MONTH columns."""
    if "year" not in df.columns or "month" not in df.columns:
        return pd.Series(pd.NaT, index=df.index, dtype="datetime64[ns]")
    parts = pd.DataFrame({
        "year":  pd.to_numeric(df["year"],  errors="coerce"),
        "month": pd.to_numeric(df["month"], errors="coerce"),
        "day":   1,
    }, index=df.index)
    return pd.to_datetime(parts, errors="coerce")


def _sequential_dates(index: pd.Index) -> pd.Series:
    dates = pd.date_range(SYNTHETIC_DATE_START, periods=len(index), freq="D")
    return pd.Series(dates, index=index)


def _fill_gaps(parsed: pd.Series, df: pd.DataFrame) -> pd.Series:
    parsed = parsed.fillna(_year_month_dates(df))
    still_missing = parsed.isna()
    if still_missing.any():
        parsed = parsed.where(~still_missing, _sequential_dates(df.index))
    return parsed


def parse_occurrence_dates(
    df: pd.DataFrame,
    column: str = "occurred_on_date",
    threshold: float = DATE_PARSE_THRESHOLD,
) -> tuple[pd.Series, str]:
    """
    Parse the occurrence timestamp column without ever aborting.

    Method:
      1. Try each format in DATE_FORMATS, then ISO-8601. The first one
         that parses more than `threshold` of the rows is accepted; the
         few rows it could not parse are filled from YEAR/MONTH.
      2. If no format qualifies, use first-of-month dates from YEAR/MONTH.
      3. If those also cover `threshold` or less, use synthetic
         sequential daily dates.

    Steps 2 and 3, and any gap filling in step 1, emit a UserWarning.

    Returns:
        (parsed timestamps aligned to df.index, name of the method used)
    """
    raw = df[column]
    if len(raw) == 0:
        return pd.Series(pd.NaT, index=df.index, dtype="datetime64[ns]"), "empty"

    if pd.api.types.is_datetime64_any_dtype(raw):
        parsed = raw.dt.tz_localize(None) if raw.dt.tz is not None else raw
        return _fill_gaps(parsed, df), "datetime"

    local = _wall_clock(raw)
    for fmt in [*DATE_FORMATS, "ISO8601"]:
        parsed = _parse_with(local, fmt)
        rate = parsed.notna().mean()
        if rate > threshold:
            n_missing = int(parsed.isna().sum())
            if n_missing:
                warnings.warn(
                    f"{n_missing:,} of {len(parsed):,} timestamps did not match "
                    f"'{fmt}'; filled from YEAR/MONTH.",
                    UserWarning,
                )
                parsed = _fill_gaps(parsed, df)
            return parsed, fmt

    warnings.warn(
        f"No known date format parsed more than {threshold:.0%} of "
        f"'{column}'. Falling back to first-of-month dates from YEAR/MONTH.",
        UserWarning,
    )
    coarse = _year_month_dates(df)
    if coarse.notna().mean() > threshold:
        return _fill_gaps(coarse, df), "year-month"

    warnings.warn(
        "YEAR/MONTH could not be used either. Falling back to synthetic "
        f"sequential dates from {SYNTHETIC_DATE_START}; day-of-week and "
        "season features will not reflect real occurrence times.",
        UserWarning,
    )
    return _sequential_dates(df.index), "synthetic"


def fill_time_fields(df: pd.DataFrame) -> pd.DataFrame:
    """
    Ensure integer hour, month and year columns.

    Missing columns, or missing values inside them, are derived from the
    parsed 'occurred_on_date'.
    """
    df = df.copy()
    dates = pd.to_datetime(df["occurred_on_date"])

    if "hour" not in df.columns:
        warnings.warn("No HOUR column; deriving hour from occurred_on_date.", UserWarning)

    for col in ("hour", "month", "year"):
        derived = getattr(dates.dt, col)
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").fillna(derived)
        else:
            df[col] = derived
        df[col] = df[col].astype(int)
    return df


# ── Filtering ─────────────────────────────────────────────────────

def filter_assaults(df: pd.DataFrame) -> pd.DataFrame:
    """Assault offences on the study streets within YEAR_RANGE."""
    offense = df["offense_description"].fillna("").astype(str).str.upper()
    street  = df["street"].fillna("").astype(str).str.upper().str.strip()
    year    = pd.to_numeric(df["year"], errors="coerce")

    street_pattern = "|".join(TARGET_STREETS)
    mask = (
        offense.str.contains(OFFENSE_KEYWORD, regex=False) &
        street.str.contains(street_pattern, regex=True) &
        year.between(*YEAR_RANGE)
    )
    return df.loc[mask].copy()


# ── Coordinates ───────────────────────────────────────────────────

def in_bounding_box(df: pd.DataFrame) -> pd.Series:
    lon_lo, lon_hi = BOSTON_LON_RANGE
    lat_lo, lat_hi = BOSTON_LAT_RANGE
    return (
        (df["longitude"] > lon_lo) & (df["longitude"] < lon_hi) &
        (df["latitude"]  > lat_lo) & (df["latitude"]  < lat_hi)
    )


def correct_coordinates(
    df: pd.DataFrame,
    seed: int = RANDOM_STATE,
    correct_all: bool = False,
) -> pd.DataFrame:
    """
    Drop rows with missing coordinates and re-place rows outside the
    Boston bounding box.

    A re-placed incident gets its zone's anchor point plus uniform jitter
    of up to JITTER_DEGREES on each axis, drawn from a generator seeded
    with `seed`.

    Args:
        df:          Incident table with latitude, longitude and street.
        seed:        Seed for the jitter.
        correct_all: When True and any row is invalid, every row is
                     re-placed (the legacy behaviour). Default False
                     corrects only the invalid rows.

    Returns:
        New DataFrame with a boolean 'coords_corrected' column.
    """
    df = df.copy()
    df["latitude"]  = pd.to_numeric(df["latitude"],  errors="coerce")
    df["longitude"] = pd.to_numeric(df["longitude"], errors="coerce")

    n_before = len(df)
    df = df.dropna(subset=["latitude", "longitude"])
    n_dropped = n_before - len(df)
    if n_dropped:
        warnings.warn(
            f"Dropped {n_dropped:,} incidents with no coordinates.",
            UserWarning,
        )

    df["coords_corrected"] = False
    invalid = ~in_bounding_box(df)
    if not invalid.any():
        return df

    targets = pd.Series(True, index=df.index) if correct_all else invalid
    zones = df.loc[targets, "street"].map(assign_zone)
    anchors = np.array([ZONE_ANCHORS[z] for z in zones], dtype=float).reshape(-1, 2)

    rng = np.random.default_rng(seed)
    jitter = rng.uniform(-JITTER_DEGREES, JITTER_DEGREES, size=anchors.shape)

    df.loc[targets, "latitude"]  = anchors[:, 0] + jitter[:, 0]
    df.loc[targets, "longitude"] = anchors[:, 1] + jitter[:, 1]
    df.loc[targets, "coords_corrected"] = True

    warnings.warn(
        f"{int(invalid.sum()):,} incidents fell outside the Boston bounding box; "
        f"re-placed {int(targets.sum()):,} incidents at zone anchors with jitter.",
        UserWarning,
    )
    return df


# ── Orchestration ─────────────────────────────────────────────────

def prepare_incidents(
    raw: pd.DataFrame,
    seed: int = RANDOM_STATE,
    correct_all: bool = False,
) -> pd.DataFrame:
    """
    Standardise, filter and validate a raw crime extract.

    Returns a new DataFrame with one row per assault incident, an
    'incident_id' equal to its row position, a 'zone' label, parsed
    'occurred_on_date', integer hour/month/year and valid coordinates.
    The date parsing method used is recorded in a constant
    'date_source' column so it survives a round trip through CSV.

    Raises:
        SchemaError: if any of REQUIRED_COLUMNS is absent.
    """
    df = standardise_columns(raw)
    require_columns(df)

    df = filter_assaults(df)

    dates, method = parse_occurrence_dates(df)
    df["occurred_on_date"] = dates
    df = fill_time_fields(df)

    df = add_zone(df)
    df = correct_coordinates(df, seed=seed, correct_all=correct_all)

    df = df.reset_index(drop=True)
    df.insert(0, "incident_id", np.arange(len(df)))
    df["date_source"] = method
    return df
