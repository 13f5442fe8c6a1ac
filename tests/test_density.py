"""
tests/test_density.py
---------------------
Pairwise-distance density and radius sensitivity.

Run with:
    pytest tests/test_density.py -v
"""

import numpy as np
import pandas as pd
import pytest

from hotspots.constants import CANDIDATE_RADII, DENSITY_RADIUS
from hotspots.density import (
    attach_density,
    compute_density,
    density_by_radius,
    density_counts,
    pairwise_distances,
    radius_sensitivity,
)


def points(coords) -> pd.DataFrame:
    return pd.DataFrame(coords, columns=["longitude", "latitude"])


# ══════════════════════════════════════════════════════════════════
# Counting
# ══════════════════════════════════════════════════════════════════

class TestDensityCounts:

    def test_hand_worked_example(self):
        df = points([(0.0, 0.0), (0.001, 0.0), (0.005, 0.0)])
        assert list(compute_density(df, 0.002)) == [1, 1, 0]

    def test_self_never_counted(self):
        assert list(compute_density(points([(-71.06, 42.36)]), 1.0)) == [0], (
            "A lone incident must have density 0 whatever the radius."
        )

    def test_colocated_incidents_count_each_other(self):
        df = points([(-71.06, 42.36)] * 3)
        assert list(compute_density(df, 0.0)) == [2, 2, 2], (
            "Other incidents at distance 0 are neighbours; only self is excluded."
        )

    def test_radius_is_inclusive(self):
        df = points([(0.0, 0.0), (3.0, 4.0)])
        assert list(compute_density(df, 5.0)) == [1, 1]
        assert list(compute_density(df, 4.999)) == [0, 0]

    def test_negative_radius_rejected(self):
        with pytest.raises(ValueError):
            density_counts(np.zeros((2, 2)), -0.001)

    def test_counts_symmetric(self, incidents):
        density = compute_density(incidents, DENSITY_RADIUS)
        assert density.sum() % 2 == 0, "Each neighbour pair should be counted from both ends."

    def test_non_negative_integers(self, incidents):
        density = compute_density(incidents)
        assert len(density) == len(incidents)
        assert density.dtype.kind == "i"
        assert (density >= 0).all()

    def test_distances_in_raw_degrees(self):
        d = pairwise_distances(points([(0.0, 0.0), (0.003, 0.004)]))
        assert d.shape == (2, 2)
        assert d[0, 1] == pytest.approx(0.005)


# ══════════════════════════════════════════════════════════════════
# Radius sensitivity
# ══════════════════════════════════════════════════════════════════

class TestRadiusSensitivity:

    def test_monotonic_in_radius(self, incidents):
        by_radius = density_by_radius(incidents, CANDIDATE_RADII)
        radii = sorted(by_radius)
        for small, large in zip(radii, radii[1:]):
            assert (by_radius[small] <= by_radius[large]).all(), (
                f"density at {small} exceeds density at {large} for some incident"
            )

    def test_table(self, incidents):
        table = radius_sensitivity(incidents)
        assert list(table["radius"]) == list(CANDIDATE_RADII)
        assert list(table["radius_m"]) == [100, 200, 300, 400]
        assert table["is_selected"].sum() == 1
        assert table.loc[table["is_selected"], "radius"].iloc[0] == DENSITY_RADIUS
        assert table["mean_density"].is_monotonic_increasing

    def test_matches_compute_density(self, incidents):
        table = radius_sensitivity(incidents).set_index("radius")
        density = compute_density(incidents, 0.003)
        assert table.loc[0.003, "mean_density"] == pytest.approx(density.mean())
        assert table.loc[0.003, "max_density"] == density.max()

    def test_selected_radius_is_configurable(self, incidents):
        table = radius_sensitivity(incidents, selected=0.004)
        assert list(table["is_selected"]) == [False, False, False, True]

    def test_precomputed_distances_reused(self, incidents):
        distances = pairwise_distances(incidents)
        pd.testing.assert_frame_equal(
            radius_sensitivity(incidents, distances=distances),
            radius_sensitivity(incidents),
        )


class TestAttachDensity:

    def test_copy_with_radius_recorded(self, incidents):
        out = attach_density(incidents, 0.003)
        assert "density" not in incidents.columns, "attach_density mutated its input."
        assert (out["density_radius"] == 0.003).all()
        assert np.array_equal(out["density"], compute_density(incidents, 0.003))

    def test_reproducible(self, incidents):
        a = attach_density(incidents)
        b = attach_density(incidents.copy())
        assert a["density"].mean() == pytest.approx(b["density"].mean(), abs=1e-12)
        assert np.array_equal(a["density"], b["density"])

    def test_precomputed_distances_reused(self, incidents):
        distances = pairwise_distances(incidents)
        pd.testing.assert_frame_equal(
            attach_density(incidents, 0.003, distances), attach_density(incidents, 0.003)
        )
        assert np.array_equal(
            compute_density(incidents, DENSITY_RADIUS, distances),
            compute_density(incidents, DENSITY_RADIUS),
        )
