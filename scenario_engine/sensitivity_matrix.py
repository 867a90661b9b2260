"""
Sensitivity analysis: candidate loan rate x borrower acceptance probability
"""
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import pandas as pd

from utils.logger import setup_logger
from scenario_engine.exceptions import NumericOverflowError

logger = setup_logger(__name__)

DEFAULT_CANDIDATE_RATES = [0.07, 0.08, 0.09, 0.10]
DEFAULT_ACCEPTANCE_PROBABILITIES = [1.0, 0.75, 0.5, 0.25]


@dataclass(frozen=True)
class SensitivityPoint:
    candidate_rate: float
    acceptance_probability: float
    future_value: float
    expected_value: float


@dataclass(frozen=True)
class SensitivityTable:
    principal: float
    duration: float
    points: Tuple[SensitivityPoint, ...]
    best_rate: float

    @property
    def best_point(self) -> SensitivityPoint:
        return next(p for p in self.points if p.candidate_rate == self.best_rate)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per candidate rate, in input order"""
        df = pd.DataFrame([
            {
                'candidate_rate': p.candidate_rate,
                'acceptance_probability': p.acceptance_probability,
                'future_value': p.future_value,
                'expected_value': p.expected_value,
            }
            for p in self.points
        ])
        df['is_best'] = df['candidate_rate'] == self.best_rate
        return df


class SensitivityMatrix:
    """Expected terminal loan value across a grid of rates and acceptance odds"""

    def future_value(self, principal: float, rate: float, duration: float) -> float:
        """
        Compound principal over the loan term.

        Raises:
            NumericOverflowError: result is not a finite float
        """
        try:
            value = principal * (1 + rate) ** duration
        except OverflowError as e:
            raise NumericOverflowError(
                f"Future value overflow at rate={rate}, duration={duration}"
            ) from e
        if not math.isfinite(value):
            raise NumericOverflowError(
                f"Future value overflow at rate={rate}, duration={duration}: {value}"
            )
        return value

    def evaluate(
        self,
        principal: float,
        duration: float,
        rates: Sequence[float],
        probabilities: Sequence[float]
    ) -> SensitivityTable:
        """
        Evaluate every (rate, probability) pair and pick the maximizing rate.

        Args:
            principal: Loan principal
            duration: Loan term in years
            rates: Candidate annual rates
            probabilities: Borrower acceptance probability for each rate (by index)

        Returns:
            SensitivityTable with the points and the best rate (ties go to the lowest rate)
        """
        if len(rates) != len(probabilities):
            raise ValueError(
                f"Got {len(rates)} rates but {len(probabilities)} acceptance probabilities"
            )
        if not rates:
            raise ValueError("At least one candidate rate is required")
        if duration < 0:
            raise ValueError(f"Loan duration must be >= 0, got {duration}")

        points: List[SensitivityPoint] = []
        for rate, probability in zip(rates, probabilities):
            if not math.isfinite(rate) or rate <= -1:
                raise ValueError(f"Candidate rate must be finite and > -1, got {rate}")
            if not 0 <= probability <= 1:
                raise ValueError(f"Acceptance probability must be in [0, 1], got {probability}")
            fv = self.future_value(principal, rate, duration)
            points.append(SensitivityPoint(
                candidate_rate=rate,
                acceptance_probability=probability,
                future_value=fv,
                expected_value=fv * probability,
            ))

        best = max(points, key=lambda p: (p.expected_value, -p.candidate_rate))

        logger.info(
            f"Evaluated {len(points)} candidate rates: best {best.candidate_rate*100:.2f}% "
            f"(expected ${best.expected_value/1e6:.2f}M)"
        )
        return SensitivityTable(
            principal=principal,
            duration=duration,
            points=tuple(points),
            best_rate=best.candidate_rate,
        )


# Convenience function
def run_sensitivity(
    principal: float,
    duration: float,
    rates: Sequence[float] = DEFAULT_CANDIDATE_RATES,
    probabilities: Sequence[float] = DEFAULT_ACCEPTANCE_PROBABILITIES
) -> SensitivityTable:
    """Quick sensitivity table generation"""
    return SensitivityMatrix().evaluate(principal, duration, list(rates), list(probabilities))
