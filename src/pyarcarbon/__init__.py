"""
PyARCarbon: Carbon sequestration estimates for afforestation/reforestation projects

Computes a year-by-year schedule of biomass, carbon stock and CO2e for an
A/R project, then projects green cover and carbon credits (VERs) after
buffer and non-additionality deductions.

Quick Start:
    >>> from pyarcarbon import ProjectInputs, calculate_sequestration
    >>> inputs = ProjectInputs(project_area=10, species='teak_moderate', project_duration=10)
    >>> bundle = calculate_sequestration(inputs)
    >>> print(bundle.totals.final_cumulative_co2e)
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__author__ = "PyARCarbon Development Team"

# =============================================================================
# Core API
# =============================================================================
from .inputs import ProjectInputs, RiskFactors
from .engine import (
    SequestrationEngine,
    compute_schedule,
    calculate_sequestration,
)
from .results import AnnualRow, ResultBundle, ScheduleTotals

# =============================================================================
# Species and Site Classification
# =============================================================================
from .species import (
    SpeciesCode,
    SiteQuality,
    RainfallClass,
    SoilType,
    SpeciesRecord,
    get_species_code,
    get_species_record,
    validate_species_code,
    available_species,
)
from .site_modifiers import SiteModifiers, get_site_modifiers

# =============================================================================
# Growth and Mortality
# =============================================================================
from .growth import GrowthModel, above_ground_biomass_per_ha
from .mortality import MortalityModel, effective_survival

# =============================================================================
# Post-processors
# =============================================================================
from .green_cover import GreenCoverSummary, calculate_green_cover
from .credits import CreditSummary, calculate_credits
from .cost_analysis import CostAnalysis, calculate_cost_analysis

# =============================================================================
# Species Mix
# =============================================================================
from .species_mix import SpeciesMixEntry, SpeciesMixResult, calculate_species_mix
from .species_io import load_species_mix, write_species_template

# =============================================================================
# Configuration Loading
# =============================================================================
from .config_loader import get_config_loader, load_project_file

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    ErrorReport,
    ARCarbonError,
    ConfigurationError,
    InvalidInputError,
    UnknownCategoryError,
    InternalConsistencyError,
    DataError,
    InvalidDataError,
)

# =============================================================================
# Entry Point
# =============================================================================
from .main import main

# =============================================================================
# Public API Definition
# =============================================================================
__all__ = [
    # Package Metadata
    "__version__",
    "__author__",
    # Core API
    "ProjectInputs",
    "RiskFactors",
    "SequestrationEngine",
    "compute_schedule",
    "calculate_sequestration",
    "AnnualRow",
    "ResultBundle",
    "ScheduleTotals",
    # Species and Site Classification
    "SpeciesCode",
    "SiteQuality",
    "RainfallClass",
    "SoilType",
    "SpeciesRecord",
    "get_species_code",
    "get_species_record",
    "validate_species_code",
    "available_species",
    "SiteModifiers",
    "get_site_modifiers",
    # Growth and Mortality
    "GrowthModel",
    "above_ground_biomass_per_ha",
    "MortalityModel",
    "effective_survival",
    # Post-processors
    "GreenCoverSummary",
    "calculate_green_cover",
    "CreditSummary",
    "calculate_credits",
    "CostAnalysis",
    "calculate_cost_analysis",
    # Species Mix
    "SpeciesMixEntry",
    "SpeciesMixResult",
    "calculate_species_mix",
    "load_species_mix",
    "write_species_template",
    # Configuration Loading
    "get_config_loader",
    "load_project_file",
    # Exceptions
    "ErrorReport",
    "ARCarbonError",
    "ConfigurationError",
    "InvalidInputError",
    "UnknownCategoryError",
    "InternalConsistencyError",
    "DataError",
    "InvalidDataError",
    # Entry Point
    "main",
]
