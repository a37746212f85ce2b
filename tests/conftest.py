"""
Shared pytest fixtures for pyarcarbon tests.

This module provides commonly used project inputs and reference values,
reducing code duplication across test files.
"""
from pathlib import Path

import matplotlib
import pytest
import yaml

from pyarcarbon.inputs import ProjectInputs

matplotlib.use("Agg")

EXPECTED_VALUES_FILE = Path(__file__).parent / "expected_values.yaml"


# =============================================================================
# Reference Values
# =============================================================================

@pytest.fixture(scope="session")
def expected_values():
    """Literal scenario inputs and expected outputs.

    Session-scoped so the YAML file is read only once per test run.
    """
    with open(EXPECTED_VALUES_FILE, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Project Fixtures
# =============================================================================

@pytest.fixture
def scenario_a_inputs(expected_values):
    """Teak on a medium site: 10 ha, 1600 stems/ha, 10 years, 85 % survival."""
    return ProjectInputs(**expected_values["scenario_a"]["inputs"])


@pytest.fixture
def minimal_inputs():
    """Only the required fields; everything else takes documented defaults."""
    return ProjectInputs(project_area=5, species="teak_moderate", project_duration=12)


@pytest.fixture
def linear_species_inputs():
    """Native mixed planting (linear curve) over a duration past maturity."""
    return ProjectInputs(
        project_area=20,
        species="native_mixed_slow",
        project_duration=30,
        survival_rate=0.5,
    )


@pytest.fixture
def form_payload():
    """UI form payload with camelCase keys and whole-number percents."""
    return {
        "projectArea": "10",
        "plantingDensity": 1600,
        "species": "teak_moderate",
        "projectDuration": 10,
        "woodDensity": 0.5,
        "bef": 1.5,
        "rsr": 0.25,
        "carbonFraction": 0.47,
        "siteQuality": "Medium",
        "avgRainfall": "Medium",
        "soilType": "Loam",
        "survivalRate": 85,
        "bufferPercentage": 20,
        "nonAdditionalityPercentage": 10,
        "initialGreenCoverPercentage": 12.5,
        "carbonPricePerTonne": 5,
        "projectCost": "",
    }


@pytest.fixture
def species_mix_csv(tmp_path):
    """Species mix file in the template layout."""
    path = tmp_path / "mix.csv"
    path.write_text(
        "Species,Number of Trees,Wood Density (tdm/m3),BEF,Root-Shoot Ratio,"
        "Carbon Fraction,Survival Rate (%)\n"
        "pine_moderate,400,0.42,1.3,0.25,0.47,85\n"
        "eucalyptus_fast,400,,,,,90\n"
        "oak_slow,200,0.65,1.4,0.25,0.47,80\n",
        encoding="utf-8",
    )
    return path
