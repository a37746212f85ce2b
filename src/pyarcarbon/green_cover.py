"""
Green cover projection.

Green cover is expressed as a percentage (0-100) of the total geographical
area the project sits in. Without an explicit target, the final value comes
from a canopy closure heuristic: each surviving stem shades a fixed crown
area, so the planted area contributes

    canopy_fraction = min(1, planting_density * survival_rate * CROWN_AREA_PER_STEM_M2 / 10000)

of its own extent, scaled by project_area / total_geographical_area.
Per-year values are interpolated linearly from the initial value at year 0.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .inputs import ProjectInputs
from .utils import M2_PER_HECTARE

__all__ = [
    'CROWN_AREA_PER_STEM_M2',
    'GreenCoverSummary',
    'canopy_fraction',
    'derive_final_green_cover',
    'green_cover_schedule',
    'calculate_green_cover',
]

# Mean crown projection area of a surviving planted stem at canopy closure
CROWN_AREA_PER_STEM_M2 = 8.0


@dataclass(frozen=True)
class GreenCoverSummary:
    """Green cover before and after the project.

    Attributes:
        initial: Green cover at year 0 (%)
        final: Green cover at the end of the project (%)
        absolute_increase: final - initial (percentage points)
        area_added_hectares: Planted area expected to survive (ha)
        yearly: Green cover for years 1..duration (%)
    """
    initial: float
    final: float
    absolute_increase: float
    area_added_hectares: float
    yearly: Tuple[float, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'initial': self.initial,
            'final': self.final,
            'absolute_increase': self.absolute_increase,
            'area_added_hectares': self.area_added_hectares,
        }


def canopy_fraction(planting_density: float, survival_rate: float) -> float:
    """Share of the planted area under canopy once the crowns close."""
    crown_area = planting_density * survival_rate * CROWN_AREA_PER_STEM_M2
    return min(1.0, crown_area / M2_PER_HECTARE)


def derive_final_green_cover(initial: float, project_area: float, total_geographical_area: float,
                             planting_density: float, survival_rate: float) -> float:
    """Final green cover (%) from the canopy closure heuristic."""
    contribution = canopy_fraction(planting_density, survival_rate) * 100.0
    contribution *= project_area / total_geographical_area
    return min(100.0, initial + contribution)


def green_cover_schedule(initial: float, final: float, duration: int) -> np.ndarray:
    """Linear interpolation from ``initial`` (year 0) to ``final`` (year ``duration``).

    Returns:
        Array of length ``duration`` for years 1..duration, clamped to [0, 100]
    """
    values = np.linspace(initial, final, duration + 1)[1:]
    return np.clip(values, 0.0, 100.0)


def calculate_green_cover(inputs: ProjectInputs,
                          total_geographical_area: Optional[float] = None) -> GreenCoverSummary:
    """Project green cover for validated inputs.

    Args:
        inputs: Validated project inputs
        total_geographical_area: Override for the reference area; defaults to
            the input value, then to the project area

    Returns:
        GreenCoverSummary including the per-year values
    """
    initial = inputs.initial_green_cover_percentage or 0.0
    total_area = total_geographical_area or inputs.total_geographical_area or inputs.project_area

    if inputs.target_green_cover_percentage is not None:
        final = inputs.target_green_cover_percentage
    else:
        final = derive_final_green_cover(
            initial, inputs.project_area, total_area,
            inputs.planting_density, inputs.survival_rate
        )

    yearly = green_cover_schedule(initial, final, inputs.project_duration)
    return GreenCoverSummary(
        initial=initial,
        final=final,
        absolute_increase=final - initial,
        area_added_hectares=inputs.project_area * inputs.survival_rate,
        yearly=tuple(float(value) for value in yearly),
    )
