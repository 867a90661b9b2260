"""
Run configuration for the loan project simulation
"""
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from utils.logger import setup_logger
from scenario_engine.cash_flows import BorrowerSchedule, LoanTerms
from scenario_engine.distributions import NormalSpec, TriangularSpec
from scenario_engine.exceptions import InvalidRunSeed, InvalidTrialCount
from scenario_engine.npv_calculator import DEFAULT_BORROWER_DISCOUNT_RATE, DEFAULT_LENDER_DISCOUNT_RATE
from scenario_engine.outlook import DEFAULT_OUTLOOK_WEIGHTS, OutlookCategory, outlook_probabilities, parse_outlook
from scenario_engine.sales_forecast import (
    DEFAULT_OFFICE_GAP_PARAMS,
    DEFAULT_OFFICE_SALES_BASELINE,
    DEFAULT_RESIDENTIAL_COST,
    DEFAULT_RESIDENTIAL_SALES,
    SalesAssumptions,
)
from scenario_engine.sensitivity_matrix import DEFAULT_ACCEPTANCE_PROBABILITIES, DEFAULT_CANDIDATE_RATES

logger = setup_logger(__name__)

CONFIG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'config')
DEFAULT_CONFIG_FILE = os.path.join(CONFIG_DIR, 'simulation.yaml')


@dataclass(frozen=True)
class SimulationConfig:
    """Everything needed to reproduce a simulation run"""
    trial_count: int = 10_000
    rng_seed: int = 42
    office_outlook_weights: Mapping[OutlookCategory, float] = field(
        default_factory=lambda: dict(DEFAULT_OUTLOOK_WEIGHTS)
    )
    office_gap_params_by_category: Mapping[OutlookCategory, NormalSpec] = field(
        default_factory=lambda: dict(DEFAULT_OFFICE_GAP_PARAMS)
    )
    office_sales_baseline: float = DEFAULT_OFFICE_SALES_BASELINE
    residential_sales_triangle: TriangularSpec = DEFAULT_RESIDENTIAL_SALES
    residential_cost_triangle: TriangularSpec = DEFAULT_RESIDENTIAL_COST
    loan_principal: float = 38_375_000
    # None means principal plus simple interest at the stated rate
    loan_obligation: Optional[float] = None
    borrower_discount_rate: float = DEFAULT_BORROWER_DISCOUNT_RATE
    lender_discount_rate: float = DEFAULT_LENDER_DISCOUNT_RATE

    # Pinning the outlook skips the run-level draw
    office_outlook: Optional[OutlookCategory] = None
    office_gap_draws: int = 1
    loan_stated_rate: float = 0.07
    loan_duration_years: float = 3
    borrower_schedule: BorrowerSchedule = field(default_factory=BorrowerSchedule)
    welch: bool = True

    def loan_terms(self) -> LoanTerms:
        return LoanTerms(
            principal=self.loan_principal,
            stated_rate=self.loan_stated_rate,
            duration_years=self.loan_duration_years,
            obligation_override=self.loan_obligation,
        )

    def sales_assumptions(self) -> SalesAssumptions:
        return SalesAssumptions(
            office_gap_params=self.office_gap_params_by_category,
            office_sales_baseline=self.office_sales_baseline,
            office_gap_draws=self.office_gap_draws,
            residential_sales=self.residential_sales_triangle,
            residential_cost=self.residential_cost_triangle,
        )

    def validate(self) -> None:
        """
        Fail fast on configuration errors, before any sampling.

        Raises:
            InvalidTrialCount: trial_count is not a positive integer
            InvalidRunSeed: rng_seed is not a non-negative integer
            InvalidDistributionParameters: bad triangle, stddev or weights
            ValueError: bad loan terms or discount rates
        """
        if isinstance(self.trial_count, bool) or not isinstance(self.trial_count, int) \
                or self.trial_count <= 0:
            raise InvalidTrialCount(f"trial_count must be a positive integer, got {self.trial_count!r}")
        if isinstance(self.rng_seed, bool) or not isinstance(self.rng_seed, int) or self.rng_seed < 0:
            raise InvalidRunSeed(f"rng_seed must be a non-negative integer, got {self.rng_seed!r}")

        outlook_probabilities(self.office_outlook_weights)
        self.sales_assumptions().validate()
        self.loan_terms().validate()

        for name in ('borrower_discount_rate', 'lender_discount_rate'):
            rate = getattr(self, name)
            if rate <= -1:
                raise ValueError(f"{name} must be > -1, got {rate}")

    def with_overrides(self, **changes) -> 'SimulationConfig':
        """Copy with selected fields replaced (None values are ignored)"""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SimulationConfig':
        """
        Build a config from plain YAML-style data.

        Distribution parameters are nested mappings, outlook categories are
        given by name (pessimistic / neutral / optimistic).
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown simulation config keys: {sorted(unknown)}")

        kwargs: Dict[str, Any] = dict(data)

        if 'office_outlook_weights' in kwargs:
            kwargs['office_outlook_weights'] = {
                parse_outlook(k): float(v) for k, v in kwargs['office_outlook_weights'].items()
            }
        if 'office_gap_params_by_category' in kwargs:
            kwargs['office_gap_params_by_category'] = {
                parse_outlook(k): NormalSpec(**v)
                for k, v in kwargs['office_gap_params_by_category'].items()
            }
        for key in ('residential_sales_triangle', 'residential_cost_triangle'):
            if key in kwargs:
                kwargs[key] = TriangularSpec(**kwargs[key])
        if kwargs.get('office_outlook') is not None:
            kwargs['office_outlook'] = parse_outlook(kwargs['office_outlook'])
        if 'borrower_schedule' in kwargs:
            kwargs['borrower_schedule'] = BorrowerSchedule(**kwargs['borrower_schedule'])

        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, filepath: str) -> 'SimulationConfig':
        with open(filepath, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data.get('simulation', data))


def load_simulation_config(filepath: Optional[str] = None) -> SimulationConfig:
    """
    Load run assumptions from YAML.

    Falls back to the built-in defaults when the default file is missing;
    an explicitly requested file must exist.
    """
    if filepath is None:
        filepath = DEFAULT_CONFIG_FILE
        if not os.path.exists(filepath):
            logger.warning(f"No simulation config at {filepath}, using built-in defaults")
            return SimulationConfig()

    config = SimulationConfig.from_yaml(filepath)
    logger.info(f"Loaded simulation config from {filepath}")
    return config


def load_sensitivity_grid(filepath: Optional[str] = None) -> Tuple[List[float], List[float]]:
    """Candidate rates and acceptance probabilities from the 'sensitivity' section"""
    filepath = filepath or DEFAULT_CONFIG_FILE
    grid: Dict[str, Any] = {}
    if os.path.exists(filepath):
        with open(filepath, 'r') as f:
            grid = (yaml.safe_load(f) or {}).get('sensitivity') or {}
    else:
        logger.warning(f"No sensitivity grid at {filepath}, using built-in defaults")

    rates = [float(r) for r in grid.get('rates', DEFAULT_CANDIDATE_RATES)]
    probabilities = [
        float(p) for p in grid.get('acceptance_probabilities', DEFAULT_ACCEPTANCE_PROBABILITIES)
    ]
    return rates, probabilities
