"""
Tests for the sequestration engine.

Covers the schedule identities for a spread of valid inputs and the literal
scenarios in expected_values.yaml.
"""
import json
from dataclasses import replace

import pytest

from pyarcarbon.credits import CreditSummary
from pyarcarbon.engine import (
    SequestrationEngine,
    calculate_sequestration,
    check_credit_balance,
    check_schedule_invariants,
    compute_schedule,
)
from pyarcarbon.exceptions import (
    InternalConsistencyError,
    InvalidInputError,
    UnknownCategoryError,
)
from pyarcarbon.inputs import ProjectInputs
from pyarcarbon.results import AnnualRow
from pyarcarbon.species import SpeciesCode
from pyarcarbon.utils import C_TO_CO2E
from pyarcarbon.validation import validate_project_inputs


# =============================================================================
# Parametrized Test Data
# =============================================================================

VALID_INPUT_CASES = [
    pytest.param(dict(project_area=10, species="teak_moderate", project_duration=10),
                 id="teak_short"),
    pytest.param(dict(project_area=1, species="eucalyptus_fast", project_duration=5),
                 id="eucalyptus_before_maturity"),
    pytest.param(dict(project_area=250, species="native_mixed_slow", project_duration=40,
                      survival_rate=0.5, site_quality="Low", avg_rainfall="Low",
                      soil_type="Degraded"), id="native_poor_site_long"),
    pytest.param(dict(project_area=3.5, species="pine_moderate", project_duration=30,
                      survival_rate=0.6, soil_type="Sandy", rsr=0), id="pine_zero_rsr"),
    pytest.param(dict(project_area=0.4, species="acacia_fast", project_duration=1,
                      survival_rate=1.0, planting_density=2500), id="acacia_single_year"),
    pytest.param(dict(project_area=50, species="oak_slow", project_duration=25,
                      site_quality="High", avg_rainfall="High", soil_type="Alluvial",
                      wood_density=0.7, bef=1.6, rsr=0.3, carbon_fraction=0.5),
                 id="oak_custom_factors"),
    pytest.param(dict(project_area=12, species="eucalyptus_fast", project_duration=20,
                      avg_rainfall="High", soil_type="Clay", survival_rate=0.55),
                 id="eucalyptus_clay_wet"),
]


@pytest.fixture(params=VALID_INPUT_CASES)
def valid_inputs(request):
    return ProjectInputs(**request.param)


# =============================================================================
# Universal Properties
# =============================================================================

class TestScheduleProperties:
    """Identities that hold for every valid input."""

    def test_schedule_length(self, valid_inputs):
        schedule = compute_schedule(valid_inputs)
        assert len(schedule) == valid_inputs.project_duration

    def test_ages_strictly_ascending(self, valid_inputs):
        schedule = compute_schedule(valid_inputs)
        assert [row.age for row in schedule] == list(range(1, valid_inputs.project_duration + 1))

    def test_cumulative_co2e_non_decreasing(self, valid_inputs):
        schedule = compute_schedule(valid_inputs)
        assert schedule[0].cumulative_co2e >= 0
        for earlier, later in zip(schedule, schedule[1:]):
            assert later.cumulative_co2e >= earlier.cumulative_co2e

    def test_below_ground_ratio(self, valid_inputs):
        rsr = validate_project_inputs(valid_inputs).rsr
        for row in compute_schedule(valid_inputs):
            assert row.below_ground_biomass_per_ha == pytest.approx(
                rsr * row.above_ground_biomass_per_ha, rel=1e-9, abs=1e-12
            )

    def test_co2e_identity(self, valid_inputs):
        carbon_fraction = validate_project_inputs(valid_inputs).carbon_fraction
        for row in compute_schedule(valid_inputs):
            total = row.above_ground_biomass_per_ha + row.below_ground_biomass_per_ha
            assert row.co2e_per_ha == pytest.approx(
                carbon_fraction * total * 44 / 12, rel=1e-9, abs=1e-12
            )

    def test_incremental_sums_to_cumulative(self, valid_inputs):
        schedule = compute_schedule(valid_inputs)
        assert sum(row.incremental_co2e for row in schedule) == pytest.approx(
            schedule[-1].cumulative_co2e
        )

    def test_cumulative_is_stock_times_area(self, valid_inputs):
        for row in compute_schedule(valid_inputs):
            assert row.cumulative_co2e == pytest.approx(row.co2e_per_ha * valid_inputs.project_area)

    def test_credit_balance(self, valid_inputs):
        credits = calculate_sequestration(valid_inputs).credits
        deducted = credits.buffer_deducted + credits.non_additionality_deducted
        assert credits.issuable_vers + deducted <= credits.total_vers * (1 + 1e-12)
        assert credits.issuable_vers >= 0

    def test_idempotent(self, valid_inputs):
        first = calculate_sequestration(valid_inputs)
        second = calculate_sequestration(valid_inputs)
        assert first == second
        assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())

    def test_zero_carbon_fraction_with_full_survival(self, valid_inputs):
        inputs = replace(valid_inputs, survival_rate=1.0, carbon_fraction=0.0)
        bundle = calculate_sequestration(inputs)
        assert all(row.co2e_per_ha == 0 for row in bundle.schedule)
        assert bundle.credits.issuable_vers == 0


class TestEdgeCases:
    """Duration, survival and ratio edge cases."""

    def test_duration_shorter_than_maturity_truncates(self):
        schedule = compute_schedule(ProjectInputs(project_area=1, species="oak_slow",
                                                  project_duration=3))
        assert len(schedule) == 3
        assert schedule[-1].age == 3

    def test_full_survival_keeps_every_stem(self):
        schedule = compute_schedule(ProjectInputs(project_area=1, species="teak_moderate",
                                                  project_duration=8, survival_rate=1.0))
        assert all(row.surviving_stems_per_ha == pytest.approx(1600) for row in schedule)

    def test_zero_rsr_keeps_below_ground_column(self):
        schedule = compute_schedule(ProjectInputs(project_area=1, species="teak_moderate",
                                                  project_duration=4, rsr=0))
        assert all(row.below_ground_biomass_per_ha == 0 for row in schedule)
        assert all(row.total_biomass_per_ha == row.above_ground_biomass_per_ha for row in schedule)

    def test_linear_species_plateaus_after_maturity(self, linear_species_inputs):
        schedule = compute_schedule(linear_species_inputs)
        assert schedule[24].cumulative_co2e == pytest.approx(schedule[19].cumulative_co2e)
        assert schedule[29].incremental_co2e == pytest.approx(0.0)

    def test_engine_instance_and_module_functions_agree(self, scenario_a_inputs):
        engine = SequestrationEngine()
        assert engine.compute_schedule(scenario_a_inputs) == compute_schedule(scenario_a_inputs)

    @pytest.mark.parametrize("species", list(SpeciesCode), ids=lambda s: s.value)
    def test_survival_floor_keeps_cumulative_non_decreasing(self, species):
        schedule = compute_schedule(ProjectInputs(project_area=1, species=species,
                                                  project_duration=40, survival_rate=0.5))
        cumulative = [row.cumulative_co2e for row in schedule]
        assert all(later >= earlier for earlier, later in zip(cumulative, cumulative[1:]))


# =============================================================================
# Literal Scenarios
# =============================================================================

class TestScenarios:
    """Literal scenarios from expected_values.yaml."""

    def test_scenario_a(self, scenario_a_inputs, expected_values):
        expected = expected_values["scenario_a"]["expected"]
        bundle = calculate_sequestration(scenario_a_inputs)
        final = bundle.final_row

        assert len(bundle.schedule) == expected["schedule_length"]
        assert expected["cumulative_co2e_min"] <= final.cumulative_co2e <= expected["cumulative_co2e_max"]
        assert final.cumulative_co2e == pytest.approx(expected["final_cumulative_co2e"],
                                                      rel=expected["tolerance"])
        assert final.co2e_per_ha == pytest.approx(expected["final_co2e_per_ha"],
                                                  rel=expected["tolerance"])
        assert final.surviving_stems_per_ha == pytest.approx(expected["final_surviving_stems_per_ha"])
        assert bundle.totals.final_cumulative_co2e == final.cumulative_co2e
        assert bundle.totals.mean_annual_sequestration == pytest.approx(final.cumulative_co2e / 10)

    def test_scenario_b_exceeds_scenario_a(self, scenario_a_inputs, expected_values):
        overrides = expected_values["scenario_b"]["overrides"]
        scenario_a = compute_schedule(scenario_a_inputs)[-1].cumulative_co2e
        scenario_b = compute_schedule(replace(scenario_a_inputs, **overrides))[-1].cumulative_co2e
        assert scenario_b > scenario_a
        product = expected_values["scenario_b"]["expected"]["modifier_product"]
        assert scenario_b == pytest.approx(scenario_a * product / 0.9)

    def test_scenario_c(self, expected_values):
        scenario = expected_values["scenario_c"]
        schedule = compute_schedule(ProjectInputs(**scenario["inputs"]))
        assert len(schedule) == scenario["expected"]["schedule_length"]
        assert schedule[-1].cumulative_co2e > schedule[0].cumulative_co2e

    def test_scenario_d_negative_area(self, scenario_a_inputs):
        with pytest.raises(InvalidInputError) as exc_info:
            compute_schedule(replace(scenario_a_inputs, project_area=-1))
        report = exc_info.value.to_report()
        assert report.kind == "InvalidInput"
        assert report.form_field == "projectArea"
        assert report.reason == "must be positive"

    def test_scenario_e_unknown_species(self, scenario_a_inputs):
        with pytest.raises(UnknownCategoryError) as exc_info:
            calculate_sequestration(replace(scenario_a_inputs, species="unobtanium"))
        report = exc_info.value.to_report()
        assert report.kind == "UnknownCategory"
        assert report.field == "species"


# =============================================================================
# Result Bundle Assembly
# =============================================================================

class TestResultBundle:
    """Tests for the post-processed bundle."""

    def test_default_credit_parameters(self, scenario_a_inputs):
        credits = calculate_sequestration(scenario_a_inputs).credits
        assert credits.buffer_fraction == pytest.approx(0.20)
        assert credits.non_additionality_fraction == pytest.approx(0.10)
        assert credits.carbon_price == pytest.approx(5.0)
        assert credits.issuable_vers == pytest.approx(0.7 * credits.total_vers)

    def test_green_cover_column(self, scenario_a_inputs):
        bundle = calculate_sequestration(scenario_a_inputs)
        cover = [row.green_cover_percentage for row in bundle.schedule]
        assert cover == pytest.approx([10.0 * year for year in range(1, 11)])
        assert bundle.green_cover.final == pytest.approx(100.0)

    def test_cost_analysis_only_with_project_cost(self, scenario_a_inputs):
        assert calculate_sequestration(scenario_a_inputs).cost_analysis is None
        bundle = calculate_sequestration(replace(scenario_a_inputs, project_cost=100000))
        assert bundle.cost_analysis.cost_per_hectare == pytest.approx(10000)
        assert bundle.cost_analysis.cost_per_tonne == pytest.approx(
            100000 / bundle.totals.final_cumulative_co2e
        )

    def test_bundle_carries_validated_inputs(self, scenario_a_inputs):
        bundle = calculate_sequestration(scenario_a_inputs)
        assert bundle.inputs.species is SpeciesCode.TEAK_MODERATE


# =============================================================================
# Consistency Checks
# =============================================================================

def _row(age, ag, rsr=0.25, cf=0.47, area=1.0, cumulative=None):
    bg = rsr * ag
    carbon = cf * (ag + bg)
    co2e = carbon * C_TO_CO2E
    return AnnualRow(
        age=age, volume_per_ha=0.0, surviving_stems_per_ha=1000.0,
        above_ground_biomass_per_ha=ag, below_ground_biomass_per_ha=bg,
        total_biomass_per_ha=ag + bg, carbon_stock_per_ha=carbon, co2e_per_ha=co2e,
        incremental_co2e=0.0,
        cumulative_co2e=co2e * area if cumulative is None else cumulative,
    )


class TestConsistencyChecks:
    """Tests for check_schedule_invariants."""

    @pytest.fixture
    def inputs(self):
        return validate_project_inputs(ProjectInputs(
            project_area=1, species="teak_moderate", project_duration=2, rsr=0.25
        ))

    def test_consistent_schedule_passes(self, inputs):
        check_schedule_invariants(inputs, (_row(1, 5.0), _row(2, 8.0)))

    def test_wrong_length(self, inputs):
        with pytest.raises(InternalConsistencyError) as exc_info:
            check_schedule_invariants(inputs, (_row(1, 5.0),))
        assert exc_info.value.invariant == "schedule_length"

    def test_decreasing_cumulative(self, inputs):
        with pytest.raises(InternalConsistencyError) as exc_info:
            check_schedule_invariants(inputs, (_row(1, 8.0), _row(2, 5.0)))
        assert exc_info.value.invariant == "cumulative_monotonic"

    def test_wrong_below_ground_ratio(self, inputs):
        with pytest.raises(InternalConsistencyError) as exc_info:
            check_schedule_invariants(inputs, (_row(1, 5.0), _row(2, 8.0, rsr=0.5)))
        assert exc_info.value.invariant == "below_ground_ratio"
        assert exc_info.value.to_report().kind == "InternalConsistency"


class TestScheduleGuard:
    """Tests that a broken conversion is caught before results are returned."""

    @pytest.fixture
    def negative_co2e(self, monkeypatch):
        monkeypatch.setattr("pyarcarbon.engine.carbon_to_co2e", lambda carbon: -carbon * C_TO_CO2E)

    def test_compute_schedule_checks_rows(self, negative_co2e, scenario_a_inputs):
        with pytest.raises(InternalConsistencyError) as exc_info:
            compute_schedule(scenario_a_inputs)
        assert exc_info.value.invariant == "cumulative_monotonic"

    def test_calculate_checks_rows_before_credits(self, negative_co2e, scenario_a_inputs):
        with pytest.raises(InternalConsistencyError) as exc_info:
            calculate_sequestration(scenario_a_inputs)
        assert exc_info.value.invariant == "cumulative_monotonic"

    def test_unbalanced_credits(self):
        credits = CreditSummary(
            total_vers=100.0, buffer_fraction=0.2, non_additionality_fraction=0.1,
            carbon_price=5.0, buffer_deducted=20.0, non_additionality_deducted=10.0,
            issuable_vers=90.0, estimated_revenue=450.0,
        )
        with pytest.raises(InternalConsistencyError) as exc_info:
            check_credit_balance(credits)
        assert exc_info.value.invariant == "credit_balance"

    def test_balanced_credits(self, scenario_a_inputs):
        check_credit_balance(calculate_sequestration(scenario_a_inputs).credits)
