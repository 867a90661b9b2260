"""
Monte Carlo run orchestration: trials -> cash flows -> NPVs -> comparison
"""
import concurrent.futures
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from utils.logger import setup_logger, LogContext
from scenario_engine.cash_flows import CashFlowAssembler, Project, Stakeholder
from scenario_engine.comparison import NPVSummary, TTestResult, compare, summarize
from scenario_engine.exceptions import DegenerateSampleError
from scenario_engine.npv_calculator import NPVCalculator
from scenario_engine.outlook import OutlookCategory, draw_outlook
from scenario_engine.sales_forecast import SalesForecaster, Trial
from scenario_engine.simulation_config import SimulationConfig

logger = setup_logger(__name__)

# Seed stream families under the run seed
TRIAL_STREAM = 0
OUTLOOK_STREAM = 1

CELLS: Tuple[Tuple[Stakeholder, Project], ...] = tuple(
    (stakeholder, project) for stakeholder in Stakeholder for project in Project
)


def trial_rng(rng_seed: int, trial_index: int) -> np.random.Generator:
    """Independent generator for one trial, fixed by run seed and trial index"""
    return np.random.default_rng(
        np.random.SeedSequence(rng_seed, spawn_key=(TRIAL_STREAM, trial_index))
    )


def resolve_outlook(config: SimulationConfig) -> OutlookCategory:
    """The run's single macro outlook: pinned in config, or drawn once from its own stream"""
    if config.office_outlook is not None:
        return config.office_outlook
    rng = np.random.default_rng(np.random.SeedSequence(config.rng_seed, spawn_key=(OUTLOOK_STREAM,)))
    return draw_outlook(rng, config.office_outlook_weights)


@dataclass(frozen=True)
class TrialOutcome:
    trial: Trial
    npvs: Tuple[float, ...]  # ordered as CELLS


class TrialRunner:
    """Runs individual trials against immutable run-wide collaborators"""

    def __init__(self, config: SimulationConfig, outlook: OutlookCategory):
        self.rng_seed = config.rng_seed
        self.outlook = outlook
        self.forecaster = SalesForecaster(config.sales_assumptions())
        self.assembler = CashFlowAssembler(config.loan_terms(), config.borrower_schedule)
        self.calculator = NPVCalculator(config.borrower_discount_rate, config.lender_discount_rate)

    def run_trial(self, index: int) -> TrialOutcome:
        trial = self.forecaster.forecast_trial(index, self.outlook, trial_rng(self.rng_seed, index))
        vectors = self.assembler.assemble(trial)
        npvs = tuple(self.calculator.calculate_vector_npv(vectors[cell]) for cell in CELLS)
        return TrialOutcome(trial=trial, npvs=npvs)

    def run_chunk(self, indices: Sequence[int]) -> List[TrialOutcome]:
        return [self.run_trial(i) for i in indices]


def _partition(trial_count: int, chunks: int) -> List[range]:
    """Contiguous index ranges covering 0..trial_count-1"""
    chunks = max(1, min(chunks, trial_count))
    bounds = np.linspace(0, trial_count, chunks + 1).astype(int)
    return [range(lo, hi) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]


@dataclass(frozen=True, eq=False)
class SimulationResult:
    config: SimulationConfig
    outlook: OutlookCategory
    trials: Tuple[Trial, ...]
    npvs: Dict[Tuple[Stakeholder, Project], np.ndarray]
    summaries: Dict[Tuple[Stakeholder, Project], Optional[NPVSummary]]
    comparisons: Dict[Stakeholder, Optional[TTestResult]]

    def npv_sample(self, stakeholder: Stakeholder, project: Project) -> np.ndarray:
        return self.npvs[(stakeholder, project)]

    def summary(self, stakeholder: Stakeholder, project: Project) -> Optional[NPVSummary]:
        return self.summaries[(stakeholder, project)]

    def comparison(self, stakeholder: Stakeholder) -> Optional[TTestResult]:
        return self.comparisons[stakeholder]

    def trials_frame(self) -> pd.DataFrame:
        """One row per trial with sampled inputs and all four NPVs"""
        df = pd.DataFrame([
            {
                'trial': t.index,
                'outlook': t.outlook.name.lower(),
                'office_total_sales': t.office_total_sales,
                'residential_total_sales': t.residential_total_sales,
                'residential_construction_cost': t.residential_construction_cost,
            }
            for t in self.trials
        ])
        for stakeholder, project in CELLS:
            df[f'{stakeholder.value}_{project.value}_npv'] = self.npvs[(stakeholder, project)]
        return df

    def summary_frame(self) -> pd.DataFrame:
        """Summary statistics indexed by (stakeholder, project); empty rows mean insufficient data"""
        rows = []
        for stakeholder, project in CELLS:
            summary = self.summaries[(stakeholder, project)]
            row = {'stakeholder': stakeholder.value, 'project': project.value}
            if summary is not None:
                row.update(summary.to_dict())
            rows.append(row)
        return pd.DataFrame(rows).set_index(['stakeholder', 'project'])

    def comparison_frame(self) -> pd.DataFrame:
        """Office vs residential t-test per stakeholder"""
        rows = []
        for stakeholder in Stakeholder:
            result = self.comparisons[stakeholder]
            row = {'stakeholder': stakeholder.value}
            if result is not None:
                row.update(result.to_dict())
            rows.append(row)
        return pd.DataFrame(rows).set_index('stakeholder')


def _summarize_or_none(npvs: np.ndarray, label: str) -> Optional[NPVSummary]:
    try:
        return summarize(npvs)
    except DegenerateSampleError as e:
        logger.warning(f"Insufficient data for {label} summary: {e}")
        return None


def _compare_or_none(office: np.ndarray, residential: np.ndarray, equal_var: bool,
                     label: str) -> Optional[TTestResult]:
    try:
        return compare(office, residential, equal_var=equal_var)
    except DegenerateSampleError as e:
        logger.warning(f"Insufficient data for {label} office vs residential t-test: {e}")
        return None


def run_simulation(
    config: Optional[SimulationConfig] = None,
    max_workers: Optional[int] = None
) -> SimulationResult:
    """
    Run the full Monte Carlo simulation.

    Args:
        config: Run configuration (defaults if not provided)
        max_workers: Thread count; None or 1 runs sequentially. Results do
            not depend on this value.

    Returns:
        SimulationResult with NPV samples, summaries and t-tests
    """
    if config is None:
        config = SimulationConfig()
    config.validate()

    outlook = resolve_outlook(config)
    runner = TrialRunner(config, outlook)

    with LogContext(logger, f"simulation of {config.trial_count:,} trials (seed {config.rng_seed})"):
        logger.info(f"Office outlook for this run: {outlook.name.lower()}")

        if max_workers is None or max_workers <= 1:
            outcomes = runner.run_chunk(range(config.trial_count))
        else:
            chunks = _partition(config.trial_count, max_workers * 4)
            with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
                # map() yields chunk results in submission order
                outcomes = [o for chunk in executor.map(runner.run_chunk, chunks) for o in chunk]

    trials = tuple(o.trial for o in outcomes)
    matrix = np.array([o.npvs for o in outcomes], dtype=float).reshape(len(outcomes), len(CELLS))
    npvs = {cell: matrix[:, i].copy() for i, cell in enumerate(CELLS)}

    summaries = {
        cell: _summarize_or_none(npvs[cell], f"{cell[0].value}/{cell[1].value}")
        for cell in CELLS
    }
    comparisons = {
        stakeholder: _compare_or_none(
            npvs[(stakeholder, Project.OFFICE)],
            npvs[(stakeholder, Project.RESIDENTIAL)],
            equal_var=not config.welch,
            label=stakeholder.value,
        )
        for stakeholder in Stakeholder
    }

    for cell, summary in summaries.items():
        if summary is not None:
            logger.info(
                f"{cell[0].value}/{cell[1].value}: mean NPV ${summary.mean/1e6:.2f}M, "
                f"std ${summary.std/1e6:.2f}M, P(NPV<0) {summary.negative_proportion:.1%}"
            )

    return SimulationResult(
        config=config,
        outlook=outlook,
        trials=trials,
        npvs=npvs,
        summaries=summaries,
        comparisons=comparisons,
    )
