"""
Loan terms and 5-period cash flow assembly for borrower and lender
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from scenario_engine.sales_forecast import Trial

# Years from loan origination for each of the 5 periods
CASH_FLOW_OFFSETS: Tuple[float, ...] = (0.0, 0.25, 1.0, 2.0, 3.0)


class Stakeholder(str, Enum):
    BORROWER = 'borrower'
    LENDER = 'lender'


class Project(str, Enum):
    OFFICE = 'office'
    RESIDENTIAL = 'residential'


@dataclass(frozen=True)
class LoanTerms:
    """
    Bullet-repayment loan.

    The obligation is principal plus simple interest over the term unless
    an explicit amount is given.
    """
    principal: float = 38_375_000
    stated_rate: float = 0.07
    duration_years: float = 3
    obligation_override: Optional[float] = None

    @property
    def interest(self) -> float:
        return self.principal * self.stated_rate * self.duration_years

    @property
    def obligation(self) -> float:
        if self.obligation_override is not None:
            return self.obligation_override
        return self.principal + self.interest

    def validate(self) -> None:
        for name in ('principal', 'stated_rate', 'duration_years'):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"Loan {name} must be finite and >= 0, got {value}")
        if not math.isfinite(self.obligation) or self.obligation < 0:
            raise ValueError(f"Loan obligation must be finite and >= 0, got {self.obligation}")


@dataclass(frozen=True)
class BorrowerSchedule:
    """Fixed borrower flows for periods 0, 0.25, 1 and 2"""
    origination: float = 37_875_000
    office_quarter: float = -24_375_000
    # Residential quarter flow before the sampled construction cost is subtracted
    residential_quarter_base: float = -4_375_000
    year_one: float = -9_000_000
    year_two: float = -12_500_000


@dataclass(frozen=True)
class CashFlowVector:
    stakeholder: Stakeholder
    project: Project
    amounts: Tuple[float, ...]
    offsets: Tuple[float, ...] = CASH_FLOW_OFFSETS

    def __post_init__(self):
        if len(self.amounts) != len(CASH_FLOW_OFFSETS):
            raise ValueError(
                f"Cash flow vector needs {len(CASH_FLOW_OFFSETS)} amounts, got {len(self.amounts)}"
            )
        if tuple(self.offsets) != CASH_FLOW_OFFSETS:
            raise ValueError(f"Cash flow offsets are fixed at {CASH_FLOW_OFFSETS}")

    @property
    def terminal(self) -> float:
        return self.amounts[-1]


def lender_terminal(sales: float, obligation: float) -> float:
    """
    Lender's maturity cash flow under the recourse clause.

    The lender has first claim on sale proceeds up to the obligation:
    full obligation when sales cover it, all of the sales when they only
    partly cover it, nothing when sales are not positive.
    """
    return min(max(sales, 0.0), obligation)


class CashFlowAssembler:
    """Builds the borrower and lender cash flow vectors for a trial"""

    def __init__(self, loan: LoanTerms, schedule: Optional[BorrowerSchedule] = None):
        loan.validate()
        self.loan = loan
        self.schedule = schedule or BorrowerSchedule()

    def project_sales(self, trial: Trial, project: Project) -> float:
        if project is Project.OFFICE:
            return trial.office_total_sales
        return trial.residential_total_sales

    def borrower_vector(self, trial: Trial, project: Project) -> CashFlowVector:
        s = self.schedule
        if project is Project.OFFICE:
            quarter = s.office_quarter
        else:
            quarter = s.residential_quarter_base - trial.residential_construction_cost

        terminal = self.project_sales(trial, project) - self.loan.obligation
        return CashFlowVector(
            stakeholder=Stakeholder.BORROWER,
            project=project,
            amounts=(s.origination, quarter, s.year_one, s.year_two, terminal),
        )

    def lender_vector(self, trial: Trial, project: Project) -> CashFlowVector:
        terminal = lender_terminal(self.project_sales(trial, project), self.loan.obligation)
        return CashFlowVector(
            stakeholder=Stakeholder.LENDER,
            project=project,
            amounts=(-self.loan.principal, 0.0, 0.0, 0.0, terminal),
        )

    def assemble(self, trial: Trial) -> Dict[Tuple[Stakeholder, Project], CashFlowVector]:
        """All four (stakeholder, project) vectors for one trial"""
        vectors = {}
        for project in Project:
            vectors[(Stakeholder.BORROWER, project)] = self.borrower_vector(trial, project)
            vectors[(Stakeholder.LENDER, project)] = self.lender_vector(trial, project)
        return vectors
