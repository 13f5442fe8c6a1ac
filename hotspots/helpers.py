"""
hotspots/helpers.py
-------------------
Small general-purpose helper functions used across the core and the
processing scripts. Pure pandas, no side effects.

Import example:
    from hotspots.helpers import check_required_columns, fmt_pct
"""

import pandas as pd

from hotspots.constants import METRES_PER_DEGREE


# ── Validation helpers ────────────────────────────────────────────

def check_required_columns(
    df: pd.DataFrame,
    required: list[str],
) -> list[str]:
    """
    Check that all required columns are present.

    Returns a list of missing column names (empty list if all present)
    so callers can build a clear error message.

    Args:
        df:       DataFrame to check.
        required: List of expected column names.

    Returns:
        List of missing column names, in the order they were required.
    """
    return [c for c in required if c not in df.columns]


def share(mask: pd.Series) -> float:
    """Fraction of True values in a boolean Series; 0.0 when empty."""
    if len(mask) == 0:
        return 0.0
    return float(mask.mean())


# ── Unit helpers ──────────────────────────────────────────────────

def degrees_to_metres(radius: float) -> int:
    """Approximate metres for a radius in coordinate degrees."""
    return int(round(radius * METRES_PER_DEGREE))


# ── Formatting helpers ────────────────────────────────────────────

def fmt_pct(value: float, decimals: int = 0) -> str:
    """
    Format a fraction as a percentage string.

    Args:
        value:    Fraction between 0 and 1 (e.g. 0.25 for 25%).
        decimals: Number of decimal places.

    Returns:
        Formatted string e.g. '25%', '12.5%'.
    """
    return f"{value * 100:.{decimals}f}%"


def fmt_count(value: float | int) -> str:
    """Format a number with thousands separator."""
    return f"{int(value):,}"


def fmt_float(value: float, decimals: int = 3) -> str:
    """Format an error metric to a fixed number of decimal places."""
    return f"{value:.{decimals}f}"
