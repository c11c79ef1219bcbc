"""Volume bands and cost forecasts derived from a CostBreakdown.

Because every cost component is linear, a volume scenario is applied as a
single multiplier on the recurring figures; setup cost is never scaled.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .models import CostBreakdown

DEFAULT_MONTHLY_GROWTH = 0.05
FORECAST_MONTHS = 12


@dataclass(frozen=True)
class VolumeBand:
    label: str
    multiplier: float


VOLUME_BANDS: Tuple[VolumeBand, ...] = (
    VolumeBand("Low (10th percentile)", 0.5),
    VolumeBand("Medium (50th percentile)", 1.0),
    VolumeBand("High (90th percentile)", 1.8),
)


@dataclass(frozen=True)
class BandProjection:
    label: str
    multiplier: float
    monthly_credits: float
    annual_credits: float
    setup_costs: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "label": self.label,
            "multiplier": self.multiplier,
            "monthly_credits": self.monthly_credits,
            "annual_credits": self.annual_credits,
            "setup_costs": self.setup_costs,
        }


def project_band(breakdown: CostBreakdown, band: VolumeBand) -> BandProjection:
    return BandProjection(
        label=band.label,
        multiplier=band.multiplier,
        monthly_credits=breakdown.monthly_credits * band.multiplier,
        annual_credits=breakdown.annual_credits * band.multiplier,
        setup_costs=breakdown.setup_costs,
    )


def project_bands(breakdown: CostBreakdown, bands: Tuple[VolumeBand, ...] = VOLUME_BANDS) -> List[BandProjection]:
    return [project_band(breakdown, band) for band in bands]


def forecast_monthly(
    monthly_credits: float,
    months: int = FORECAST_MONTHS,
    growth_rate: float = DEFAULT_MONTHLY_GROWTH,
    multiplier: float = 1.0,
) -> List[float]:
    """
    Month-by-month credits with linear growth.

    Month ``i`` (0-based) costs ``monthly_credits * multiplier * (1 + i * growth_rate)``.
    """
    base = monthly_credits * multiplier
    return [base * (1 + index * growth_rate) for index in range(max(months, 0))]
