"""
Scenario Engine Module
Sales sampling, loan cash flows, NPV, project comparison and rate sensitivity
"""
from scenario_engine.cash_flows import (
    BorrowerSchedule, CashFlowAssembler, CashFlowVector, LoanTerms, Project, Stakeholder, lender_terminal
)
from scenario_engine.comparison import (
    NPVSummary, TTestResult, compare, negative_outcome_proportion, negative_outcome_ratio, summarize
)
from scenario_engine.distributions import NormalSpec, TriangularSpec, sample
from scenario_engine.exceptions import (
    DegenerateSampleError, InvalidDistributionParameters, InvalidRunSeed, InvalidTrialCount, NumericOverflowError,
    SimulationError
)
from scenario_engine.npv_calculator import NPVCalculator, calculate_npv, present_value
from scenario_engine.outlook import OutlookCategory, draw_outlook
from scenario_engine.sales_forecast import SalesAssumptions, SalesForecaster, Trial
from scenario_engine.sensitivity_matrix import (
    SensitivityMatrix, SensitivityPoint, SensitivityTable, run_sensitivity
)
from scenario_engine.simulation import SimulationResult, run_simulation
from scenario_engine.simulation_config import SimulationConfig, load_simulation_config

__all__ = [
    'BorrowerSchedule',
    'CashFlowAssembler',
    'CashFlowVector',
    'LoanTerms',
    'Project',
    'Stakeholder',
    'lender_terminal',
    'NPVSummary',
    'TTestResult',
    'compare',
    'negative_outcome_proportion',
    'negative_outcome_ratio',
    'summarize',
    'NormalSpec',
    'TriangularSpec',
    'sample',
    'DegenerateSampleError',
    'InvalidDistributionParameters',
    'InvalidRunSeed',
    'InvalidTrialCount',
    'NumericOverflowError',
    'SimulationError',
    'NPVCalculator',
    'calculate_npv',
    'present_value',
    'OutlookCategory',
    'draw_outlook',
    'SalesAssumptions',
    'SalesForecaster',
    'Trial',
    'SensitivityMatrix',
    'SensitivityPoint',
    'SensitivityTable',
    'run_sensitivity',
    'SimulationResult',
    'run_simulation',
    'SimulationConfig',
    'load_simulation_config'
]
