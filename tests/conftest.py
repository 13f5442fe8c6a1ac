"""
tests/conftest.py
-----------------
Synthetic incident tables shared by the test modules.

Nothing here reads from data/; every fixture is generated from a fixed
seed so the tests run without the Boston download.
"""

import importlib.util
import os

import numpy as np
import pandas as pd
import pytest

from hotspots.constants import ZONE_ANCHORS
from hotspots.pipeline import AnalysisConfig, enrich

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Box around the three study streets, well inside the Boston bounding box
ZONE_LON_RANGE = (-71.0660, -71.0570)
ZONE_LAT_RANGE = (42.3610, 42.3700)

STREETS = ["CAUSEWAY ST", "CANAL ST", "NASHUA ST"]


# ── Builders ──────────────────────────────────────────────────────

def make_incidents(n: int = 500, seed: int = 0) -> pd.DataFrame:
    """Prepared incidents scattered uniformly over the study box."""
    rng = np.random.default_rng(seed)
    days  = rng.integers(0, 4 * 365, size=n)
    hours = rng.integers(0, 24, size=n)
    dates = (
        pd.Timestamp("2019-01-01")
        + pd.to_timedelta(days, unit="D")
        + pd.to_timedelta(hours, unit="h")
    )
    return pd.DataFrame({
        "occurred_on_date":    dates,
        "street":              rng.choice(STREETS, size=n),
        "offense_description": "ASSAULT - SIMPLE",
        "longitude":           rng.uniform(*ZONE_LON_RANGE, size=n),
        "latitude":            rng.uniform(*ZONE_LAT_RANGE, size=n),
        "hour":                hours,
        "month":               dates.month,
        "year":                dates.year,
    })


def make_raw_extract(n: int = 300, seed: int = 1) -> pd.DataFrame:
    """
    A raw extract in the Analyze Boston column layout.

    Contains n valid assault incidents clustered around the zone anchors,
    plus rows the cleaning stage must discard or repair:
      - non-assault offences and an off-street assault (filtered out)
      - an assault from 2018 (outside the year window)
      - one assault with (0, 0) coordinates (re-placed at its anchor)
      - one assault with no coordinates (dropped)
    """
    rng = np.random.default_rng(seed)
    streets = rng.choice(STREETS, size=n)
    anchors = np.array([
        ZONE_ANCHORS[s.split()[0].title()] for s in streets
    ])
    dates = (
        pd.Timestamp("2019-01-01")
        + pd.to_timedelta(rng.integers(0, 4 * 365, size=n), unit="D")
        + pd.to_timedelta(rng.integers(0, 24 * 60, size=n), unit="min")
    )

    valid = pd.DataFrame({
        "INCIDENT_NUMBER":     [f"I{seed}{i:06d}" for i in range(n)],
        "OFFENSE_DESCRIPTION": rng.choice(
            ["ASSAULT - SIMPLE", "ASSAULT - AGGRAVATED", "Assault & Battery"], size=n
        ),
        "STREET":              streets,
        "OCCURRED_ON_DATE":    dates.strftime("%Y-%m-%d %H:%M:%S"),
        "YEAR":                dates.year,
        "MONTH":               dates.month,
        "HOUR":                dates.hour,
        "Lat":                 anchors[:, 0] + rng.normal(0, 0.0015, size=n),
        "Long":                anchors[:, 1] + rng.normal(0, 0.0015, size=n),
    })

    noise = pd.DataFrame([
        ["X1", "LARCENY THEFT FROM BUILDING", "CAUSEWAY ST", "2020-05-01 12:00:00", 2020, 5, 12, 42.366, -71.061],
        ["X2", "VANDALISM",                   "CANAL ST",    "2021-07-04 22:00:00", 2021, 7, 22, 42.363, -71.059],
        ["X3", "ASSAULT - SIMPLE",            "WASHINGTON ST", "2020-02-02 02:00:00", 2020, 2, 2, 42.350, -71.060],
        ["X4", "ASSAULT - SIMPLE",            "NASHUA ST",   "2018-06-01 09:00:00", 2018, 6, 9, 42.368, -71.064],
        ["X5", "ASSAULT - AGGRAVATED",        "CANAL ST",    "2021-03-03 03:00:00", 2021, 3, 3, 0.0, 0.0],
        ["X6", "ASSAULT - SIMPLE",            "CAUSEWAY ST", "2022-09-09 19:00:00", 2022, 9, 19, np.nan, np.nan],
    ], columns=valid.columns)

    return pd.concat([valid, noise], ignore_index=True)


def load_script(filename: str):
    """Import a numbered processing script as a module."""
    path = os.path.join(ROOT, "processing", filename)
    name = "script_" + os.path.splitext(filename)[0]
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# ── Fixtures ──────────────────────────────────────────────────────

@pytest.fixture
def incidents() -> pd.DataFrame:
    return make_incidents()


@pytest.fixture
def enriched(incidents) -> pd.DataFrame:
    return enrich(incidents, AnalysisConfig())


@pytest.fixture
def raw_extract() -> pd.DataFrame:
    return make_raw_extract()
