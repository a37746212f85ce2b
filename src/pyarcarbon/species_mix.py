"""
Multi-species projects.

The project area is split between species in proportion to their tree
counts; each species then runs through the engine on its share of the area
at density = trees / area. Yearly rows are aggregated into an all-species
schedule: per-hectare pools are area-weighted means, project totals are sums.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd

from .cost_analysis import calculate_cost_analysis
from .credits import credits_for_project
from .engine import calculate_sequestration
from .exceptions import InvalidInputError, validate_non_negative
from .green_cover import calculate_green_cover
from .inputs import ProjectInputs
from .logging_config import get_logger, log_schedule_summary
from .results import AnnualRow, ResultBundle, ScheduleTotals
from .species import SpeciesCode
from .validation import validate_project_inputs

__all__ = [
    'SpeciesMixEntry',
    'SpeciesShare',
    'SpeciesMixResult',
    'calculate_species_mix',
]

logger = get_logger(__name__)

_AREA_WEIGHTED = (
    'volume_per_ha',
    'surviving_stems_per_ha',
    'above_ground_biomass_per_ha',
    'below_ground_biomass_per_ha',
    'total_biomass_per_ha',
    'carbon_stock_per_ha',
    'co2e_per_ha',
)


@dataclass(frozen=True)
class SpeciesMixEntry:
    """One species of a mixed planting.

    Factors left as None fall back to the common project inputs (and from
    there to the species table). ``survival_rate`` is a fraction.
    """
    species: Union[SpeciesCode, str]
    number_of_trees: float
    wood_density: Optional[float] = None
    bef: Optional[float] = None
    rsr: Optional[float] = None
    carbon_fraction: Optional[float] = None
    survival_rate: Optional[float] = None


@dataclass(frozen=True)
class SpeciesShare:
    """Result of one species within a mix."""
    species: SpeciesCode
    number_of_trees: float
    trees_ratio: float
    area: float
    planting_density: float
    result: ResultBundle


@dataclass(frozen=True)
class SpeciesMixResult:
    """Per-species results and the aggregated all-species bundle."""
    species_results: Tuple[SpeciesShare, ...]
    total: ResultBundle

    def to_dataframe(self) -> pd.DataFrame:
        """Long-format schedule: one row per species and year plus 'All Species' rows."""
        frames = []
        for share in self.species_results:
            frame = share.result.to_dataframe()
            frame.insert(0, 'species', share.species.value)
            frames.append(frame)
        total = self.total.to_dataframe()
        total.insert(0, 'species', 'All Species')
        frames.append(total)
        return pd.concat(frames, ignore_index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'species': [
                {
                    'species': share.species.value,
                    'number_of_trees': share.number_of_trees,
                    'trees_ratio': share.trees_ratio,
                    'area': share.area,
                    'planting_density': share.planting_density,
                    'result': share.result.to_dict(),
                }
                for share in self.species_results
            ],
            'total': self.total.to_dict(),
        }


def _aggregate_rows(shares: List[SpeciesShare], total_area: float,
                    green_cover: Tuple[float, ...]) -> Tuple[AnnualRow, ...]:
    duration = len(shares[0].result.schedule)
    rows = []
    for index in range(duration):
        year_rows = [(share.area, share.result.schedule[index]) for share in shares]
        weighted = {
            name: sum(area * getattr(row, name) for area, row in year_rows) / total_area
            for name in _AREA_WEIGHTED
        }
        rows.append(AnnualRow(
            age=index + 1,
            incremental_co2e=sum(row.incremental_co2e for _, row in year_rows),
            cumulative_co2e=sum(row.cumulative_co2e for _, row in year_rows),
            green_cover_percentage=green_cover[index],
            **weighted,
        ))
    return tuple(rows)


def calculate_species_mix(common_inputs: ProjectInputs,
                          entries: Iterable[SpeciesMixEntry]) -> SpeciesMixResult:
    """Run a mixed planting through the engine.

    Args:
        common_inputs: Project-wide inputs (area, duration, site, credits, cost).
            Its ``species`` and ``planting_density`` are replaced per entry.
        entries: Species of the mix with their tree counts

    Returns:
        SpeciesMixResult

    Raises:
        InvalidInputError: If the mix is empty or holds no trees, or any input is invalid
        UnknownCategoryError: If a species or site category is unknown
    """
    entries = list(entries)
    if not entries:
        raise InvalidInputError('species_mix', "must contain at least one species")
    for entry in entries:
        validate_non_negative(entry.number_of_trees, 'number_of_trees')
    total_trees = sum(entry.number_of_trees for entry in entries)
    if total_trees <= 0:
        raise InvalidInputError('number_of_trees', "must sum to a positive number", total_trees)

    planted = [entry for entry in entries if entry.number_of_trees > 0]
    common = validate_project_inputs(replace(common_inputs, species=planted[0].species))
    common = replace(common, planting_density=total_trees / common.project_area)

    shares = []
    for entry in planted:
        ratio = entry.number_of_trees / total_trees
        area = common.project_area * ratio
        density = entry.number_of_trees / area
        # Species defaults are resolved per entry, so the unvalidated common factors apply
        changes = {
            'species': entry.species,
            'project_area': area,
            'planting_density': density,
            'wood_density': common_inputs.wood_density,
            'bef': common_inputs.bef,
            'rsr': common_inputs.rsr,
            'project_cost': None,
            'total_geographical_area': None,
        }
        changes.update({
            name: getattr(entry, name)
            for name in ('wood_density', 'bef', 'rsr', 'carbon_fraction', 'survival_rate')
            if getattr(entry, name) is not None
        })
        result = calculate_sequestration(replace(common, **changes))
        shares.append(SpeciesShare(
            species=result.inputs.species,
            number_of_trees=entry.number_of_trees,
            trees_ratio=ratio,
            area=area,
            planting_density=density,
            result=result,
        ))

    # Tree-weighted survival drives the green cover of the whole planting
    survival = sum(share.trees_ratio * share.result.inputs.survival_rate for share in shares)
    green_cover = calculate_green_cover(replace(common, survival_rate=survival))

    schedule = _aggregate_rows(shares, common.project_area, green_cover.yearly)
    totals = ScheduleTotals.from_schedule(schedule)
    credits = credits_for_project(common, totals.final_cumulative_co2e)
    cost_analysis = None
    if common.project_cost is not None:
        cost_analysis = calculate_cost_analysis(
            common.project_cost, common.project_area, totals.final_cumulative_co2e
        )

    log_schedule_summary(
        logger, f"mix of {len(shares)} species", common.project_duration,
        totals.final_cumulative_co2e, credits.issuable_vers
    )
    total = ResultBundle(
        inputs=replace(common, survival_rate=survival),
        schedule=schedule,
        totals=totals,
        green_cover=green_cover,
        credits=credits,
        cost_analysis=cost_analysis,
    )
    return SpeciesMixResult(species_results=tuple(shares), total=total)
