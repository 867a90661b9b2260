"""
Per-trial sales and construction cost forecasts for the office and residential projects
"""
from dataclasses import dataclass, field
from typing import Dict, Mapping

import numpy as np

from scenario_engine.distributions import NormalSpec, TriangularSpec, sample, distribution_mean
from scenario_engine.exceptions import InvalidDistributionParameters
from scenario_engine.outlook import OutlookCategory

# Gap between realized and previously stated office sales, by macro outlook
DEFAULT_OFFICE_GAP_PARAMS: Dict[OutlookCategory, NormalSpec] = {
    OutlookCategory.PESSIMISTIC: NormalSpec(mean=-10_897_290, stddev=4_846_559),
    OutlookCategory.NEUTRAL: NormalSpec(mean=1_318_240, stddev=4_699_856),
    OutlookCategory.OPTIMISTIC: NormalSpec(mean=8_807_820, stddev=5_718_097),
}

DEFAULT_OFFICE_SALES_BASELINE = 65_153_540

DEFAULT_RESIDENTIAL_SALES = TriangularSpec(low=20_000_000, mode=42_300_000, high=130_000_000)

# +/-10% around an expected 20M build cost
DEFAULT_RESIDENTIAL_COST = TriangularSpec(low=18_000_000, mode=20_000_000, high=22_000_000)


@dataclass(frozen=True)
class Trial:
    """One Monte Carlo sample path through the sales and cost model"""
    index: int
    outlook: OutlookCategory
    office_total_sales: float
    residential_total_sales: float
    residential_construction_cost: float


@dataclass(frozen=True)
class SalesAssumptions:
    """Distribution parameters feeding the sales forecast"""
    office_gap_params: Mapping[OutlookCategory, NormalSpec] = field(
        default_factory=lambda: dict(DEFAULT_OFFICE_GAP_PARAMS)
    )
    office_sales_baseline: float = DEFAULT_OFFICE_SALES_BASELINE
    office_gap_draws: int = 1
    residential_sales: TriangularSpec = DEFAULT_RESIDENTIAL_SALES
    residential_cost: TriangularSpec = DEFAULT_RESIDENTIAL_COST

    def validate(self) -> None:
        missing = [c.name for c in OutlookCategory if c not in self.office_gap_params]
        if missing:
            raise InvalidDistributionParameters(f"Missing office gap parameters for: {missing}")
        for spec in self.office_gap_params.values():
            spec.validate()
        self.residential_sales.validate()
        self.residential_cost.validate()
        if self.office_gap_draws < 1:
            raise InvalidDistributionParameters(
                f"office_gap_draws must be >= 1, got {self.office_gap_draws}"
            )


class SalesForecaster:
    """Produces Trial records from the sales assumptions"""

    def __init__(self, assumptions: SalesAssumptions):
        assumptions.validate()
        self.assumptions = assumptions

    def office_total_sales(self, outlook: OutlookCategory, rng: np.random.Generator) -> float:
        """Stated baseline plus the mean of the sampled sales gaps for the outlook"""
        gap_spec = self.assumptions.office_gap_params[outlook]
        gaps = sample(gap_spec, self.assumptions.office_gap_draws, rng)
        return float(gaps.mean()) + self.assumptions.office_sales_baseline

    def residential_total_sales(self, rng: np.random.Generator) -> float:
        return float(sample(self.assumptions.residential_sales, 1, rng)[0])

    def residential_construction_cost(self, rng: np.random.Generator) -> float:
        return float(sample(self.assumptions.residential_cost, 1, rng)[0])

    def forecast_trial(
        self,
        index: int,
        outlook: OutlookCategory,
        rng: np.random.Generator
    ) -> Trial:
        """
        Sample one trial.

        The outlook is run-scoped and supplied by the caller; it is never
        resampled here.

        Args:
            index: Trial index within the run
            outlook: Macro outlook shared by every trial in the run
            rng: Generator dedicated to this trial

        Returns:
            Immutable Trial record
        """
        return Trial(
            index=index,
            outlook=outlook,
            office_total_sales=self.office_total_sales(outlook, rng),
            residential_total_sales=self.residential_total_sales(rng),
            residential_construction_cost=self.residential_construction_cost(rng),
        )

    def expected_office_sales(self, outlook: OutlookCategory) -> float:
        return self.assumptions.office_gap_params[outlook].mean + self.assumptions.office_sales_baseline

    def expected_residential_sales(self) -> float:
        return distribution_mean(self.assumptions.residential_sales)
