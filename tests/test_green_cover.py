"""
Tests for the green cover projection.
"""
from dataclasses import replace

import numpy as np
import pytest

from pyarcarbon.green_cover import (
    CROWN_AREA_PER_STEM_M2,
    calculate_green_cover,
    canopy_fraction,
    derive_final_green_cover,
    green_cover_schedule,
)
from pyarcarbon.validation import validate_project_inputs


CANOPY_CASES = [
    pytest.param(1600, 0.85, 1.0, id="closed_canopy"),
    pytest.param(500, 0.8, 500 * 0.8 * CROWN_AREA_PER_STEM_M2 / 10000, id="open_canopy"),
    pytest.param(100, 1.0, 0.08, id="sparse_planting"),
]


class TestCanopyHeuristic:
    """Tests for the canopy closure heuristic."""

    @pytest.mark.parametrize("density,survival,expected", CANOPY_CASES)
    def test_canopy_fraction(self, density, survival, expected):
        assert canopy_fraction(density, survival) == pytest.approx(expected)

    def test_project_share_of_reference_area(self):
        # 10 ha closed canopy inside a 200 ha landscape adds 5 points
        assert derive_final_green_cover(20, 10, 200, 1600, 0.85) == pytest.approx(25.0)

    def test_final_capped_at_100(self):
        assert derive_final_green_cover(90, 50, 60, 1600, 0.9) == pytest.approx(100.0)


class TestGreenCoverSchedule:
    """Tests for the per-year interpolation."""

    def test_linear_interpolation(self):
        values = green_cover_schedule(20.0, 40.0, 4)
        np.testing.assert_allclose(values, [25.0, 30.0, 35.0, 40.0])

    def test_single_year(self):
        np.testing.assert_allclose(green_cover_schedule(0.0, 60.0, 1), [60.0])

    def test_clamped_to_percent_range(self):
        values = green_cover_schedule(0.0, 150.0, 3)
        assert values.max() == pytest.approx(100.0)
        assert values.min() >= 0.0

    def test_decreasing_target(self):
        values = green_cover_schedule(50.0, 30.0, 2)
        np.testing.assert_allclose(values, [40.0, 30.0])


class TestCalculateGreenCover:
    """Tests for green cover of validated project inputs."""

    def test_defaults(self, scenario_a_inputs):
        summary = calculate_green_cover(validate_project_inputs(scenario_a_inputs))
        assert summary.initial == 0.0
        assert summary.final == pytest.approx(100.0)
        assert summary.absolute_increase == pytest.approx(100.0)
        assert summary.area_added_hectares == pytest.approx(8.5)
        assert len(summary.yearly) == 10

    def test_target_overrides_heuristic(self, scenario_a_inputs):
        inputs = replace(scenario_a_inputs, initial_green_cover_percentage=15,
                         target_green_cover_percentage=35)
        summary = calculate_green_cover(validate_project_inputs(inputs))
        assert summary.final == pytest.approx(35.0)
        assert summary.absolute_increase == pytest.approx(20.0)
        assert summary.yearly[0] == pytest.approx(17.0)
        assert summary.yearly[-1] == pytest.approx(35.0)

    def test_reference_area(self, scenario_a_inputs):
        inputs = replace(scenario_a_inputs, initial_green_cover_percentage=30,
                         total_geographical_area=1000)
        summary = calculate_green_cover(validate_project_inputs(inputs))
        assert summary.final == pytest.approx(31.0)
