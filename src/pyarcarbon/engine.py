"""
Sequestration engine.

Runs the growth model over the project duration and derives the carbon
pools of every year:

    bg = rsr * ag
    carbon = carbon_fraction * (ag + bg)
    co2e_per_ha = carbon * 44 / 12
    incremental_co2e = (co2e_per_ha[y] - co2e_per_ha[y - 1]) * project_area
    cumulative_co2e = co2e_per_ha[y] * project_area

``co2e_per_ha`` is a stock, so the cumulative column is the standing stock
over the whole area. Rows are produced in ascending age and never depend on
later rows; the engine holds no state between calls.
"""
import math
from typing import Optional, Tuple

from .cost_analysis import calculate_cost_analysis
from .credits import CreditSummary, credits_for_project
from .exceptions import InternalConsistencyError
from .green_cover import GreenCoverSummary, calculate_green_cover
from .growth import GrowthModel
from .inputs import ProjectInputs
from .logging_config import get_logger, log_schedule_summary
from .results import AnnualRow, ResultBundle, ScheduleTotals
from .site_modifiers import get_site_modifiers
from .species import get_species_record
from .utils import carbon_to_co2e
from .validation import validate_project_inputs

__all__ = [
    'SequestrationEngine',
    'compute_schedule',
    'calculate_sequestration',
    'check_schedule_invariants',
    'check_credit_balance',
]

logger = get_logger(__name__)

# Relative tolerance of the post-computation identity checks
CONSISTENCY_TOLERANCE = 1e-9


class SequestrationEngine:
    """Computes sequestration schedules and result bundles for A/R projects."""

    def compute_schedule(self, inputs: ProjectInputs) -> Tuple[AnnualRow, ...]:
        """Year-by-year schedule for a project.

        Args:
            inputs: Project inputs (validated here)

        Returns:
            Tuple of AnnualRow for ages 1..project_duration

        Raises:
            InvalidInputError: If a numeric input is missing or out of range
            UnknownCategoryError: If a categorical input is not known
            InternalConsistencyError: If a schedule invariant fails
        """
        validated = validate_project_inputs(inputs)
        schedule, _ = self._run(validated)
        check_schedule_invariants(validated, schedule)
        return schedule

    def calculate(self, inputs: ProjectInputs) -> ResultBundle:
        """Schedule plus green cover, credit and cost post-processing.

        Raises:
            InvalidInputError: If a numeric input is missing or out of range
            UnknownCategoryError: If a categorical input is not known
            InternalConsistencyError: If a schedule invariant fails
        """
        validated = validate_project_inputs(inputs)
        schedule, green_cover = self._run(validated)
        check_schedule_invariants(validated, schedule)
        totals = ScheduleTotals.from_schedule(schedule)
        credits = credits_for_project(validated, totals.final_cumulative_co2e)

        cost_analysis = None
        if validated.project_cost is not None:
            cost_analysis = calculate_cost_analysis(
                validated.project_cost, validated.project_area, totals.final_cumulative_co2e
            )

        check_credit_balance(credits)
        log_schedule_summary(
            logger, validated.species.value, validated.project_duration,
            totals.final_cumulative_co2e, credits.issuable_vers
        )
        return ResultBundle(
            inputs=validated,
            schedule=schedule,
            totals=totals,
            green_cover=green_cover,
            credits=credits,
            cost_analysis=cost_analysis,
        )

    def _run(self, inputs: ProjectInputs) -> Tuple[Tuple[AnnualRow, ...], GreenCoverSummary]:
        record = get_species_record(inputs.species)
        modifiers = get_site_modifiers(
            inputs.site_quality, inputs.avg_rainfall, inputs.soil_type, species=record
        )
        model = GrowthModel(record, modifiers, inputs.survival_rate,
                            inputs.wood_density, inputs.bef)
        green_cover = calculate_green_cover(inputs)

        logger.debug(
            f"Computing {inputs.project_duration}-year schedule for {record.code.value} "
            f"on {inputs.project_area} ha (modifier product {modifiers.product:.3f})"
        )

        rows = []
        previous_co2e_per_ha = 0.0
        for age in range(1, inputs.project_duration + 1):
            state = model.state_at(age, inputs.planting_density)
            above = state.above_ground_biomass_per_ha
            below = inputs.rsr * above
            total = above + below
            carbon = inputs.carbon_fraction * total
            co2e_per_ha = carbon_to_co2e(carbon)

            rows.append(AnnualRow(
                age=age,
                volume_per_ha=state.volume_per_ha,
                surviving_stems_per_ha=state.surviving_stems_per_ha,
                above_ground_biomass_per_ha=above,
                below_ground_biomass_per_ha=below,
                total_biomass_per_ha=total,
                carbon_stock_per_ha=carbon,
                co2e_per_ha=co2e_per_ha,
                incremental_co2e=(co2e_per_ha - previous_co2e_per_ha) * inputs.project_area,
                cumulative_co2e=co2e_per_ha * inputs.project_area,
                green_cover_percentage=green_cover.yearly[age - 1],
            ))
            previous_co2e_per_ha = co2e_per_ha

        return tuple(rows), green_cover


def _close(actual: float, expected: float) -> bool:
    return math.isclose(actual, expected, rel_tol=CONSISTENCY_TOLERANCE, abs_tol=1e-12)


def check_schedule_invariants(inputs: ProjectInputs, schedule: Tuple[AnnualRow, ...],
                              credits: Optional[CreditSummary] = None) -> None:
    """Re-check the schedule identities after computation.

    Args:
        inputs: Validated inputs the schedule was computed from
        schedule: Computed schedule
        credits: Credit accounting of the schedule, if available

    Raises:
        InternalConsistencyError: If any identity does not hold
    """
    if len(schedule) != inputs.project_duration:
        raise InternalConsistencyError(
            'schedule_length', f"{len(schedule)} rows for {inputs.project_duration} years"
        )

    previous = 0.0
    for row in schedule:
        if row.carbon_stock_per_ha < 0:
            raise InternalConsistencyError(
                'carbon_stock_non_negative', f"age {row.age}: {row.carbon_stock_per_ha}"
            )
        if row.cumulative_co2e < previous:
            raise InternalConsistencyError(
                'cumulative_monotonic',
                f"age {row.age}: {row.cumulative_co2e} < {previous}"
            )
        if not _close(row.below_ground_biomass_per_ha, inputs.rsr * row.above_ground_biomass_per_ha):
            raise InternalConsistencyError(
                'below_ground_ratio', f"age {row.age}: bg != rsr x ag"
            )
        expected_co2e = carbon_to_co2e(inputs.carbon_fraction * row.total_biomass_per_ha)
        if not _close(row.co2e_per_ha, expected_co2e):
            raise InternalConsistencyError(
                'co2e_identity', f"age {row.age}: {row.co2e_per_ha} != {expected_co2e}"
            )
        previous = row.cumulative_co2e

    if credits is not None:
        check_credit_balance(credits)


def check_credit_balance(credits: CreditSummary) -> None:
    """Issuable credits plus both deductions must not exceed the total.

    Raises:
        InternalConsistencyError: If the credit books do not balance
    """
    deducted = credits.issuable_vers + credits.buffer_deducted + credits.non_additionality_deducted
    if credits.issuable_vers < 0 or deducted > credits.total_vers * (1 + CONSISTENCY_TOLERANCE):
        raise InternalConsistencyError(
            'credit_balance',
            f"issuable {credits.issuable_vers} + deductions exceed total {credits.total_vers}"
        )


_default_engine = SequestrationEngine()


def compute_schedule(inputs: ProjectInputs) -> Tuple[AnnualRow, ...]:
    """Year-by-year sequestration schedule for a project."""
    return _default_engine.compute_schedule(inputs)


def calculate_sequestration(inputs: ProjectInputs) -> ResultBundle:
    """Full result bundle (schedule, totals, green cover, credits, costs)."""
    return _default_engine.calculate(inputs)
