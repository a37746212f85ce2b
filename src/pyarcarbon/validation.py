"""
Parameter validation for project inputs.

Validation runs before any schedule exists and fails fast on the first
offending field. A validated ``ProjectInputs`` has its categorical fields
resolved to enum members and its species defaults filled in.
"""
from dataclasses import replace
from typing import Any, Dict, Optional

from .exceptions import (
    InvalidInputError,
    validate_non_negative,
    validate_positive,
    validate_proportion,
    validate_range,
)
from .inputs import ProjectInputs, RiskFactors, parse_number
from .logging_config import get_logger, log_validation_failure
from .mortality import MIN_SURVIVAL_RATE
from .species import (
    RainfallClass,
    SiteQuality,
    SoilType,
    SpeciesRecord,
    get_species_record,
)

__all__ = ['ParameterValidator', 'validate_project_inputs']

logger = get_logger(__name__)


class ParameterValidator:
    """Validates project parameters field by field."""

    @staticmethod
    def _number(value: Any, field: str) -> float:
        if value is None:
            raise InvalidInputError(field, "is required")
        return parse_number(value, field)

    @staticmethod
    def _optional(value: Any, field: str) -> Optional[float]:
        if value is None:
            return None
        return parse_number(value, field)

    @staticmethod
    def validate_project_dimensions(project_area: Any, project_duration: Any,
                                    planting_density: Any) -> Dict[str, Any]:
        """Validate area, duration and density.

        Returns:
            Dict with 'project_area', 'project_duration' (int) and 'planting_density'
        """
        area = validate_positive(ParameterValidator._number(project_area, 'project_area'),
                                 'project_area')
        duration = ParameterValidator._number(project_duration, 'project_duration')
        if not duration.is_integer():
            raise InvalidInputError('project_duration', "must be a whole number of years",
                                    project_duration)
        validate_positive(duration, 'project_duration')
        density = validate_positive(
            ParameterValidator._number(planting_density, 'planting_density'),
            'planting_density'
        )
        return {
            'project_area': area,
            'project_duration': int(duration),
            'planting_density': density,
        }

    @staticmethod
    def validate_site_parameters(site_quality: Any, avg_rainfall: Any,
                                 soil_type: Any) -> Dict[str, Any]:
        """Resolve the categorical site inputs to enum members.

        Raises:
            UnknownCategoryError: If a value is not in its enumeration
        """
        return {
            'site_quality': SiteQuality.from_string(site_quality),
            'avg_rainfall': RainfallClass.from_string(avg_rainfall),
            'soil_type': SoilType.from_string(soil_type),
        }

    @staticmethod
    def validate_biomass_factors(record: SpeciesRecord, wood_density: Any, bef: Any,
                                 rsr: Any, carbon_fraction: Any,
                                 survival_rate: Any) -> Dict[str, float]:
        """Validate biomass conversion factors, filling species defaults.

        Args:
            record: Species table row supplying the defaults
            wood_density: Basic wood density (t/m3) or None
            bef: Biomass expansion factor or None
            rsr: Root-to-shoot ratio or None
            carbon_fraction: Carbon fraction of dry biomass
            survival_rate: Fraction of stems surviving to maturity

        Returns:
            Dict of validated factors
        """
        wood_density = record.wood_density if wood_density is None else wood_density
        bef = record.bef if bef is None else bef
        rsr = record.rsr if rsr is None else rsr

        wood_density = validate_positive(ParameterValidator._number(wood_density, 'wood_density'),
                                         'wood_density')
        bef = ParameterValidator._number(bef, 'bef')
        if bef < 1:
            raise InvalidInputError('bef', "must be at least 1", bef)
        rsr = validate_non_negative(ParameterValidator._number(rsr, 'rsr'), 'rsr')
        carbon_fraction = validate_proportion(
            ParameterValidator._number(carbon_fraction, 'carbon_fraction'), 'carbon_fraction'
        )
        survival_rate = validate_range(
            ParameterValidator._number(survival_rate, 'survival_rate'),
            MIN_SURVIVAL_RATE, 1.0, 'survival_rate'
        )
        return {
            'wood_density': wood_density,
            'bef': bef,
            'rsr': rsr,
            'carbon_fraction': carbon_fraction,
            'survival_rate': survival_rate,
        }

    @staticmethod
    def validate_green_cover_parameters(project_area: float, initial: Any, target: Any,
                                        total_geographical_area: Any) -> Dict[str, Optional[float]]:
        """Validate green cover percentages (0-100) and the reference area."""
        initial = ParameterValidator._optional(initial, 'initial_green_cover_percentage')
        if initial is not None:
            validate_range(initial, 0, 100, 'initial_green_cover_percentage')
        target = ParameterValidator._optional(target, 'target_green_cover_percentage')
        if target is not None:
            validate_range(target, 0, 100, 'target_green_cover_percentage')
        total_area = ParameterValidator._optional(total_geographical_area, 'total_geographical_area')
        if total_area is not None:
            validate_positive(total_area, 'total_geographical_area')
            if total_area < project_area:
                raise InvalidInputError('total_geographical_area',
                                        "must not be smaller than project_area", total_area)
        return {
            'initial_green_cover_percentage': initial,
            'target_green_cover_percentage': target,
            'total_geographical_area': total_area,
        }

    @staticmethod
    def validate_credit_parameters(carbon_price: Any, buffer_fraction: Any,
                                   non_additionality_fraction: Any, baseline_removals: Any,
                                   risk_factors: Optional[RiskFactors]) -> Dict[str, Any]:
        """Validate credit accounting parameters (all rates as fractions)."""
        price = ParameterValidator._optional(carbon_price, 'carbon_price_per_tonne')
        if price is not None:
            validate_non_negative(price, 'carbon_price_per_tonne')
        buffer_fraction = ParameterValidator._optional(buffer_fraction, 'buffer_fraction')
        if buffer_fraction is not None:
            validate_proportion(buffer_fraction, 'buffer_fraction')
        non_add = ParameterValidator._optional(non_additionality_fraction,
                                               'non_additionality_fraction')
        if non_add is not None:
            validate_proportion(non_add, 'non_additionality_fraction')
        baseline = ParameterValidator._optional(baseline_removals,
                                                'baseline_removals_per_hectare_year')
        if baseline is not None:
            validate_non_negative(baseline, 'baseline_removals_per_hectare_year')
        if risk_factors is not None:
            for name in ('fire', 'insect', 'disease'):
                validate_proportion(parse_number(getattr(risk_factors, name), 'risk_factors'),
                                    'risk_factors')
            if risk_factors.total > 1:
                raise InvalidInputError('risk_factors', "must not sum to more than 1",
                                        risk_factors.total)
        return {
            'carbon_price_per_tonne': price,
            'buffer_fraction': buffer_fraction,
            'non_additionality_fraction': non_add,
            'baseline_removals_per_hectare_year': baseline,
            'risk_factors': risk_factors,
        }

    @staticmethod
    def validate_project_cost(project_cost: Any) -> Optional[float]:
        cost = ParameterValidator._optional(project_cost, 'project_cost')
        if cost is not None:
            validate_positive(cost, 'project_cost')
        return cost


def validate_project_inputs(inputs: ProjectInputs) -> ProjectInputs:
    """Validate project inputs and return the resolved record.

    Validating an already validated record returns an equal record.

    Args:
        inputs: Raw project inputs

    Returns:
        New ProjectInputs with enum members and species defaults filled in

    Raises:
        InvalidInputError: If a numeric field is missing, non-positive or out of range
        UnknownCategoryError: If a categorical field is not in its enumeration
    """
    try:
        resolved = ParameterValidator.validate_project_dimensions(
            inputs.project_area, inputs.project_duration, inputs.planting_density
        )
        record = get_species_record(inputs.species)
        resolved['species'] = record.code
        resolved.update(ParameterValidator.validate_site_parameters(
            inputs.site_quality, inputs.avg_rainfall, inputs.soil_type
        ))
        resolved.update(ParameterValidator.validate_biomass_factors(
            record, inputs.wood_density, inputs.bef, inputs.rsr,
            inputs.carbon_fraction, inputs.survival_rate
        ))
        resolved.update(ParameterValidator.validate_green_cover_parameters(
            resolved['project_area'], inputs.initial_green_cover_percentage,
            inputs.target_green_cover_percentage, inputs.total_geographical_area
        ))
        resolved.update(ParameterValidator.validate_credit_parameters(
            inputs.carbon_price_per_tonne, inputs.buffer_fraction,
            inputs.non_additionality_fraction, inputs.baseline_removals_per_hectare_year,
            inputs.risk_factors
        ))
        resolved['project_cost'] = ParameterValidator.validate_project_cost(inputs.project_cost)
    except InvalidInputError as e:
        log_validation_failure(logger, e.field, e.reason)
        raise

    return replace(inputs, **resolved)
