"""
tests/test_features.py
----------------------
Zone and temporal labels.

Run with:
    pytest tests/test_features.py -v
"""

import numpy as np
import pandas as pd
import pytest

from hotspots.constants import HOUR_LABELS, SEASONS, UNKNOWN
from hotspots.features import (
    add_temporal_features,
    add_zone,
    assign_zone,
    busiest,
    hour_bands,
    season_for_month,
    weekday_order,
)


def week_frame() -> pd.DataFrame:
    # 2024-01-01 is a Monday
    dates = pd.date_range("2024-01-01 10:00", periods=7, freq="D")
    return pd.DataFrame({
        "occurred_on_date": dates,
        "month": dates.month,
        "hour":  dates.hour,
    })


# ══════════════════════════════════════════════════════════════════
# Zone
# ══════════════════════════════════════════════════════════════════

class TestZone:

    @pytest.mark.parametrize("street,zone", [
        ("CAUSEWAY ST",     "Causeway"),
        ("causeway street", "Causeway"),
        (" CANAL ST ",      "Canal"),
        ("NASHUA ST",       "Nashua"),
        ("WASHINGTON ST",   "Other"),
        (None,              "Other"),
        (np.nan,            "Other"),
    ])
    def test_assign_zone(self, street, zone):
        assert assign_zone(street) == zone, f"{street!r} should map to {zone}"

    def test_add_zone_returns_copy(self):
        df = pd.DataFrame({"street": ["CANAL ST", "ATLANTIC AVE"]})
        out = add_zone(df)
        assert list(out["zone"]) == ["Canal", "Other"]
        assert "zone" not in df.columns, "add_zone mutated its input."


# ══════════════════════════════════════════════════════════════════
# Day of week / weekend
# ══════════════════════════════════════════════════════════════════

class TestWeekend:

    def test_weekend_flag_exhaustive(self):
        out = add_temporal_features(week_frame())
        assert list(out["day_of_week"]) == weekday_order()
        for day, flag in zip(out["day_of_week"], out["is_weekend"]):
            assert flag == (day in ("Saturday", "Sunday")), (
                f"{day}: is_weekend={flag}"
            )

    def test_weekday_order(self):
        assert weekday_order() == [
            "Monday", "Tuesday", "Wednesday", "Thursday",
            "Friday", "Saturday", "Sunday",
        ]

    def test_missing_date_is_unknown_weekday(self):
        df = pd.DataFrame({
            "occurred_on_date": [pd.Timestamp("2024-01-06"), pd.NaT],
            "month": [1, 1],
            "hour":  [10, 10],
        })
        out = add_temporal_features(df)
        assert list(out["day_of_week"]) == ["Saturday", UNKNOWN]
        assert list(out["is_weekend"]) == [True, False]


# ══════════════════════════════════════════════════════════════════
# Season
# ══════════════════════════════════════════════════════════════════

class TestSeason:

    def test_total_over_valid_months(self):
        labels = [season_for_month(m) for m in range(1, 13)]
        assert UNKNOWN not in labels, f"Valid months produced Unknown: {labels}"
        for season in SEASONS:
            assert labels.count(season) == 3, f"{season} should cover exactly 3 months"

    @pytest.mark.parametrize("month,season", [
        (12, "Winter"), (1, "Winter"), (3, "Spring"),
        (6, "Summer"), (9, "Fall"), (11, "Fall"),
    ])
    def test_mapping(self, month, season):
        assert season_for_month(month) == season

    @pytest.mark.parametrize("month", [0, 13, -1, None, np.nan, "June"])
    def test_unmapped_month_is_unknown(self, month):
        assert season_for_month(month) == UNKNOWN


# ══════════════════════════════════════════════════════════════════
# Hour band
# ══════════════════════════════════════════════════════════════════

class TestHourBand:

    @pytest.mark.parametrize("hour,band", [
        (0,  "Late Night"),
        (4,  "Late Night"),
        (5,  "Morning"),
        (11, "Morning"),
        (12, "Afternoon"),
        (16, "Afternoon"),
        (17, "Evening"),
        (22, "Evening"),
        (23, "Night"),
        (24, "Night"),
    ])
    def test_boundaries(self, hour, band):
        assert hour_bands(pd.Series([hour])).iloc[0] == band, (
            f"hour {hour} should fall in {band} (bins are right-closed)"
        )

    @pytest.mark.parametrize("hour", [-1, 25, np.nan])
    def test_out_of_range_is_unknown(self, hour):
        assert hour_bands(pd.Series([hour])).iloc[0] == UNKNOWN

    def test_every_hour_has_a_band(self):
        bands = hour_bands(pd.Series(range(24)))
        assert set(bands) == set(HOUR_LABELS)


# ══════════════════════════════════════════════════════════════════
# Combined
# ══════════════════════════════════════════════════════════════════

class TestAddTemporalFeatures:

    def test_columns_added_without_mutation(self, incidents):
        before = incidents.copy()
        out = add_temporal_features(incidents)
        for col in ["day_of_week", "is_weekend", "season", "hour_band"]:
            assert col in out.columns, f"{col} missing from temporal features"
            assert col not in incidents.columns, f"{col} leaked into the input frame"
        pd.testing.assert_frame_equal(incidents, before)

    def test_row_wise(self, incidents):
        full = add_temporal_features(incidents)
        part = add_temporal_features(incidents.iloc[:50])
        pd.testing.assert_frame_equal(full.iloc[:50], part)


class TestBusiest:

    def test_mode(self):
        assert busiest(pd.Series(["Fall", "Fall", "Winter"])) == "Fall"

    def test_tie_goes_to_sorted_first(self):
        assert busiest(pd.Series(["Tuesday", "Monday", "Tuesday", "Monday"])) == "Monday"

    def test_empty(self):
        assert busiest(pd.Series([], dtype=object)) == UNKNOWN
