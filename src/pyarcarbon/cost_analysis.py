"""
Project cost analysis against the sequestration result.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .exceptions import validate_positive

__all__ = ['COST_BREAKDOWN_SHARES', 'CostAnalysis', 'calculate_cost_analysis']

# Fixed share of total cost attributed to each project phase
COST_BREAKDOWN_SHARES = {
    'establishment': 0.4,
    'maintenance': 0.3,
    'monitoring': 0.2,
    'other': 0.1,
}


@dataclass(frozen=True)
class CostAnalysis:
    """Cost indicators of a project.

    Attributes:
        total_project_cost: Total project cost (currency units)
        cost_per_tonne: Cost per tCO2e sequestered, None without sequestration
        cost_per_hectare: Cost per planted hectare
        cost_per_hectare_per_tonne: Cost per hectare divided by total tCO2e,
            None without sequestration
        breakdown: Cost attributed to each project phase
    """
    total_project_cost: float
    cost_per_tonne: Optional[float]
    cost_per_hectare: float
    cost_per_hectare_per_tonne: Optional[float]
    breakdown: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_project_cost': self.total_project_cost,
            'cost_per_tonne': self.cost_per_tonne,
            'cost_per_hectare': self.cost_per_hectare,
            'cost_per_hectare_per_tonne': self.cost_per_hectare_per_tonne,
            'breakdown': dict(self.breakdown),
        }


def calculate_cost_analysis(project_cost: float, project_area: float,
                            total_sequestration: float) -> CostAnalysis:
    """Compute cost indicators for a project.

    Args:
        project_cost: Total project cost
        project_area: Planted area (ha)
        total_sequestration: Final cumulative sequestration (tCO2e)

    Returns:
        CostAnalysis

    Raises:
        InvalidInputError: If cost or area is not positive
    """
    validate_positive(project_cost, 'project_cost')
    validate_positive(project_area, 'project_area')

    cost_per_hectare = project_cost / project_area
    if total_sequestration > 0:
        cost_per_tonne = project_cost / total_sequestration
        cost_per_hectare_per_tonne = cost_per_hectare / total_sequestration
    else:
        cost_per_tonne = None
        cost_per_hectare_per_tonne = None

    return CostAnalysis(
        total_project_cost=project_cost,
        cost_per_tonne=cost_per_tonne,
        cost_per_hectare=cost_per_hectare,
        cost_per_hectare_per_tonne=cost_per_hectare_per_tonne,
        breakdown={phase: project_cost * share for phase, share in COST_BREAKDOWN_SHARES.items()},
    )
