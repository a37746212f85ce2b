"""
Result records handed to the presentation layer.

The engine produces immutable records only; tabular views (pandas) and
file export are conveniences on top of them.
"""
import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import pandas as pd

from .cost_analysis import CostAnalysis
from .credits import CreditSummary
from .exceptions import DataError
from .green_cover import GreenCoverSummary
from .inputs import ProjectInputs

__all__ = [
    'AnnualRow',
    'ScheduleTotals',
    'ResultBundle',
    'EXPORT_FORMATS',
]

EXPORT_FORMATS = {'csv': '.csv', 'json': '.json', 'excel': '.xlsx'}


@dataclass(frozen=True)
class AnnualRow:
    """One year of the sequestration schedule.

    Per-hectare pools are in tonnes of dry matter (biomass), tonnes of carbon
    (carbon stock) or tCO2e. ``incremental_co2e`` and ``cumulative_co2e`` are
    project totals (tCO2e over the whole area).
    """
    age: int
    volume_per_ha: float
    surviving_stems_per_ha: float
    above_ground_biomass_per_ha: float
    below_ground_biomass_per_ha: float
    total_biomass_per_ha: float
    carbon_stock_per_ha: float
    co2e_per_ha: float
    incremental_co2e: float
    cumulative_co2e: float
    green_cover_percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScheduleTotals:
    """Whole-project totals of a schedule.

    Attributes:
        final_cumulative_co2e: Cumulative sequestration in the last year (tCO2e)
        mean_annual_sequestration: final_cumulative_co2e / duration (tCO2e/yr)
    """
    final_cumulative_co2e: float
    mean_annual_sequestration: float

    @classmethod
    def from_schedule(cls, schedule: Tuple[AnnualRow, ...]) -> "ScheduleTotals":
        if not schedule:
            return cls(0.0, 0.0)
        final = schedule[-1].cumulative_co2e
        return cls(final_cumulative_co2e=final, mean_annual_sequestration=final / len(schedule))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ResultBundle:
    """Complete result of a sequestration run."""
    inputs: ProjectInputs
    schedule: Tuple[AnnualRow, ...]
    totals: ScheduleTotals
    green_cover: GreenCoverSummary
    credits: CreditSummary
    cost_analysis: Optional[CostAnalysis] = None

    @property
    def final_row(self) -> AnnualRow:
        return self.schedule[-1]

    def to_dict(self) -> Dict[str, Any]:
        """Nested plain-data representation (JSON serializable)."""
        return {
            'inputs': self.inputs.to_dict(),
            'schedule': [row.to_dict() for row in self.schedule],
            'totals': self.totals.to_dict(),
            'green_cover': self.green_cover.to_dict(),
            'credits': self.credits.to_dict(),
            'cost_analysis': self.cost_analysis.to_dict() if self.cost_analysis else None,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Schedule as a DataFrame with one row per year."""
        columns = list(AnnualRow.__dataclass_fields__)
        return pd.DataFrame([row.to_dict() for row in self.schedule], columns=columns)

    def summary_dataframe(self) -> pd.DataFrame:
        """Key/value table of the totals, green cover, credit and cost panels."""
        records = []
        for section, values in (('totals', self.totals.to_dict()),
                                ('green_cover', self.green_cover.to_dict()),
                                ('credits', self.credits.to_dict())):
            records.extend({'section': section, 'metric': key, 'value': value}
                           for key, value in values.items())
        if self.cost_analysis is not None:
            for key, value in self.cost_analysis.to_dict().items():
                if key == 'breakdown':
                    records.extend({'section': 'cost_breakdown', 'metric': phase, 'value': amount}
                                   for phase, amount in value.items())
                else:
                    records.append({'section': 'cost_analysis', 'metric': key, 'value': value})
        return pd.DataFrame(records, columns=['section', 'metric', 'value'])

    def export(self, filepath: Union[str, Path], format: str = 'csv') -> str:
        """Export the result to a file.

        Args:
            filepath: Output file path (extension added if not present)
            format: Export format ('csv', 'json', 'excel')

        Returns:
            Path to the exported file

        Raises:
            DataError: If the format is not supported
        """
        if format not in EXPORT_FORMATS:
            raise DataError(f"Unsupported format: {format}. Use 'csv', 'json', or 'excel'")

        path = Path(filepath)
        if path.suffix.lower() not in EXPORT_FORMATS.values():
            path = path.with_suffix(EXPORT_FORMATS[format])
        path.parent.mkdir(parents=True, exist_ok=True)

        if format == 'csv':
            self.to_dataframe().to_csv(path, index=False)
        elif format == 'json':
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2)
        else:
            with pd.ExcelWriter(path) as writer:
                self.to_dataframe().to_excel(writer, index=False, sheet_name='Schedule')
                self.summary_dataframe().to_excel(writer, index=False, sheet_name='Summary')

        return str(path)
