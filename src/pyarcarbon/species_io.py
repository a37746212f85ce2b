"""
Species mix files.

A species mix is a table with one row per species. CSV and JSON (a list of
row objects) are supported; column names follow the downloadable template.
"""
from pathlib import Path
from typing import List, Union

import pandas as pd

from .exceptions import DataError, InvalidDataError
from .inputs import parse_number, percent_to_fraction
from .logging_config import get_logger
from .species_mix import SpeciesMixEntry

__all__ = [
    'TEMPLATE_COLUMNS',
    'species_template_dataframe',
    'write_species_template',
    'load_species_mix',
    'species_mix_from_dataframe',
]

logger = get_logger(__name__)

SPECIES_COLUMN = 'Species'
TREES_COLUMN = 'Number of Trees'

# Optional template columns mapped to SpeciesMixEntry fields
FACTOR_COLUMNS = {
    'Wood Density (tdm/m3)': 'wood_density',
    'BEF': 'bef',
    'Root-Shoot Ratio': 'rsr',
    'Carbon Fraction': 'carbon_fraction',
}
SURVIVAL_COLUMN = 'Survival Rate (%)'

TEMPLATE_COLUMNS = [SPECIES_COLUMN, TREES_COLUMN, *FACTOR_COLUMNS, SURVIVAL_COLUMN]

# Header spellings accepted in addition to the template ones
COLUMN_ALIASES = {
    'Species Name': SPECIES_COLUMN,
    'Wood Density (tdm/m³)': 'Wood Density (tdm/m3)',
}

_TEMPLATE_ROWS = [
    ['pine_moderate', 400, 0.42, 1.3, 0.25, 0.47, 85],
    ['eucalyptus_fast', 400, 0.55, 1.3, 0.24, 0.47, 90],
    ['oak_slow', 200, 0.65, 1.4, 0.25, 0.47, 80],
    ['native_mixed_slow', 600, 0.5, 1.4, 0.25, 0.47, 85],
]


def species_template_dataframe() -> pd.DataFrame:
    """Example species mix in the template layout."""
    return pd.DataFrame(_TEMPLATE_ROWS, columns=TEMPLATE_COLUMNS)


def write_species_template(filepath: Union[str, Path]) -> str:
    """Write the species mix template as CSV.

    Returns:
        Path to the written file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    species_template_dataframe().to_csv(path, index=False)
    return str(path)


def _optional_value(row: pd.Series, column: str):
    if column not in row.index:
        return None
    value = row[column]
    if pd.isna(value) or (isinstance(value, str) and not value.strip()):
        return None
    return parse_number(value, column)


def species_mix_from_dataframe(df: pd.DataFrame) -> List[SpeciesMixEntry]:
    """Convert a species mix table into entries.

    Raises:
        InvalidDataError: If required columns are missing or the table is empty
        InvalidInputError: If a cell is not numeric
    """
    df = df.rename(columns=lambda column: COLUMN_ALIASES.get(str(column).strip(), str(column).strip()))
    missing = [column for column in (SPECIES_COLUMN, TREES_COLUMN) if column not in df.columns]
    if missing:
        raise InvalidDataError("species mix", f"missing required columns: {missing}")
    df = df.dropna(how='all')
    if df.empty:
        raise InvalidDataError("species mix", "no species rows found")

    entries = []
    for _, row in df.iterrows():
        survival = _optional_value(row, SURVIVAL_COLUMN)
        if survival is not None:
            survival = percent_to_fraction(survival, 'survival_rate')
        factors = {field: _optional_value(row, column) for column, field in FACTOR_COLUMNS.items()}
        entries.append(SpeciesMixEntry(
            species=str(row[SPECIES_COLUMN]).strip(),
            number_of_trees=parse_number(row[TREES_COLUMN], 'number_of_trees'),
            survival_rate=survival,
            **factors,
        ))
    return entries


def load_species_mix(filepath: Union[str, Path]) -> List[SpeciesMixEntry]:
    """Load a species mix from a CSV or JSON file.

    Args:
        filepath: Path to a .csv or .json file

    Returns:
        List of SpeciesMixEntry

    Raises:
        DataError: If the file is missing or its format is not supported
        InvalidDataError: If the file cannot be parsed
    """
    path = Path(filepath)
    if not path.exists():
        raise DataError(f"Species mix file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == '.csv':
            df = pd.read_csv(path)
        elif suffix == '.json':
            df = pd.read_json(path, orient='records')
        else:
            raise DataError(f"Unsupported species mix format: {suffix}. Use .csv or .json")
    except (ValueError, pd.errors.ParserError) as e:
        raise InvalidDataError(f"species mix file {path.name}", str(e)) from e

    entries = species_mix_from_dataframe(df)
    logger.debug(f"Loaded {len(entries)} species from {path}")
    return entries
