"""Tests for the Kepler solver and heliocentric position engine."""
import math
from datetime import timedelta

import numpy as np
import pytest

from orrery.core.config import SCENE_CFG
from orrery.core.kepler import (
    heliocentric_position,
    julian_centuries,
    norm360,
    query_millis,
    satellite_relative_position,
    solve_kepler,
)
from orrery.data.bodies import EARTH, THE_MOON

from conftest import J2000, J2000_MS

AU = SCENE_CFG.au_km


# ── Solver ───────────────────────────────────────────────────────────

class TestSolveKepler:

    @pytest.mark.parametrize("e", [0.0, 0.0167, 0.2, 0.5, 0.85])
    def test_residual_below_tolerance(self, e):
        for M in np.linspace(0.0, 2.0 * math.pi, 37):
            E = solve_kepler(float(M), e)
            assert abs(E - e * math.sin(E) - M) < 1e-6

    def test_circular_orbit_returns_mean_anomaly(self):
        assert solve_kepler(1.234, 0.0) == pytest.approx(1.234)

    @pytest.mark.parametrize("e", [-0.1, 1.0, 1.5])
    def test_rejects_invalid_eccentricity(self, e):
        with pytest.raises(ValueError):
            solve_kepler(0.5, e)

    def test_iteration_cap_returns_best_effort(self):
        E = solve_kepler(0.3, 0.5, max_iterations=1)
        assert math.isfinite(E)


# ── Helpers ──────────────────────────────────────────────────────────

class TestTimeHelpers:

    def test_norm360_wraps_negative(self):
        assert norm360(-2.5) == pytest.approx(357.5)
        assert norm360(725.0) == pytest.approx(5.0)

    def test_julian_centuries_zero_at_j2000(self):
        assert julian_centuries(J2000_MS) == pytest.approx(0.0, abs=1e-12)

    def test_query_rounds_to_whole_second(self):
        assert query_millis(J2000_MS + 400.0) == J2000_MS
        assert query_millis(J2000_MS + 600.0) == J2000_MS + 1000.0
        assert query_millis(J2000) == J2000_MS


# ── Heliocentric positions ───────────────────────────────────────────

class TestHeliocentricPosition:

    def test_earth_at_j2000_matches_hand_computed_reference(self):
        # M = L - long_peri = 357.52689 deg, single Kepler solve, no rates
        position = heliocentric_position(EARTH.elements, J2000) / AU
        assert position[0] == pytest.approx(-0.17721, abs=1e-3)
        assert position[1] == pytest.approx(0.96721, abs=1e-3)
        assert position[2] == pytest.approx(0.0, abs=1e-5)
        assert np.linalg.norm(position) == pytest.approx(0.98331, abs=1e-4)

    def test_datetime_and_millis_agree(self):
        np.testing.assert_allclose(
            heliocentric_position(EARTH.elements, J2000),
            heliocentric_position(EARTH.elements, J2000_MS),
        )

    def test_sub_second_jitter_is_quantized_away(self):
        np.testing.assert_array_equal(
            heliocentric_position(EARTH.elements, J2000_MS + 100.0),
            heliocentric_position(EARTH.elements, J2000_MS + 300.0),
        )

    def test_earth_distance_stays_within_bounds_over_a_year(self):
        start = J2000 + timedelta(days=365 * 24)
        for day in range(0, 366, 5):
            distance = np.linalg.norm(heliocentric_position(EARTH.elements, start + timedelta(days=day)))
            assert 0.98 < distance / AU < 1.02

    def test_naive_datetime_read_as_utc(self):
        np.testing.assert_allclose(
            heliocentric_position(EARTH.elements, J2000.replace(tzinfo=None)),
            heliocentric_position(EARTH.elements, J2000),
        )


class TestSatelliteRelativePosition:

    def test_moon_distance_within_perigee_and_apogee(self):
        orbit = THE_MOON.orbit
        a, e = orbit.semi_major_axis_km, orbit.eccentricity
        for day in range(0, 60, 3):
            offset = satellite_relative_position(orbit, J2000 + timedelta(days=day))
            assert a * (1 - e) - 1.0 <= np.linalg.norm(offset) <= a * (1 + e) + 1.0

    def test_moon_moves_over_a_day(self):
        orbit = THE_MOON.orbit
        first = satellite_relative_position(orbit, J2000)
        second = satellite_relative_position(orbit, J2000 + timedelta(days=1))
        assert np.linalg.norm(second - first) > 10_000.0
