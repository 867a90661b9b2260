"""
Core discounting / NPV engine for 5-period loan cash flows
"""
import math
from typing import Dict, Sequence

import numpy as np
import pandas as pd

from utils.logger import setup_logger
from scenario_engine.cash_flows import CASH_FLOW_OFFSETS, CashFlowVector, Stakeholder

logger = setup_logger(__name__)

DEFAULT_BORROWER_DISCOUNT_RATE = 0.07
DEFAULT_LENDER_DISCOUNT_RATE = 0.06


def _check_rate(discount_rate: float) -> None:
    if not math.isfinite(discount_rate) or discount_rate <= -1:
        raise ValueError(f"Discount rate must be finite and > -1, got {discount_rate}")


def discount_factors(
    discount_rate: float,
    offsets: Sequence[float] = CASH_FLOW_OFFSETS
) -> np.ndarray:
    """(1 + rate) ** -offset for each period; exactly 1.0 at offset 0"""
    _check_rate(discount_rate)
    return np.array([(1 + discount_rate) ** -t if t else 1.0 for t in offsets])


def present_value(
    amounts: Sequence[float],
    discount_rate: float,
    offsets: Sequence[float] = CASH_FLOW_OFFSETS
) -> float:
    """
    Discounted sum of a cash flow vector.

    Args:
        amounts: Signed cash flows, one per offset
        discount_rate: Annual discount rate (e.g., 0.07 for 7%)
        offsets: Years from origination for each amount

    Returns:
        Net present value
    """
    if len(amounts) != len(offsets):
        raise ValueError(f"Got {len(amounts)} amounts for {len(offsets)} offsets")
    factors = discount_factors(discount_rate, offsets)
    return float(np.dot(np.asarray(amounts, dtype=float), factors))


class NPVCalculator:
    """Discounts borrower and lender cash flows at stakeholder-specific rates"""

    def __init__(
        self,
        borrower_rate: float = DEFAULT_BORROWER_DISCOUNT_RATE,
        lender_rate: float = DEFAULT_LENDER_DISCOUNT_RATE
    ):
        _check_rate(borrower_rate)
        _check_rate(lender_rate)
        self.rates: Dict[Stakeholder, float] = {
            Stakeholder.BORROWER: borrower_rate,
            Stakeholder.LENDER: lender_rate,
        }

    def rate_for(self, stakeholder: Stakeholder) -> float:
        return self.rates[stakeholder]

    def calculate_vector_npv(self, vector: CashFlowVector) -> float:
        """NPV of a vector at its stakeholder's discount rate"""
        return present_value(vector.amounts, self.rate_for(vector.stakeholder), vector.offsets)

    def discount_schedule(self, vector: CashFlowVector) -> pd.DataFrame:
        """
        Period-by-period discounting table for one vector.

        Returns:
            DataFrame with offset, cash flow, discount factor and present value
        """
        rate = self.rate_for(vector.stakeholder)
        df = pd.DataFrame({
            'period': range(len(vector.offsets)),
            'years_from_origination': vector.offsets,
            'cash_flow': vector.amounts,
        })
        df['discount_factor'] = discount_factors(rate, vector.offsets)
        df['present_value'] = df['cash_flow'] * df['discount_factor']
        return df

    def breakeven_terminal_flow(self, vector: CashFlowVector) -> float:
        """
        Terminal cash flow at which the vector's NPV is exactly zero.

        For the borrower, adding the obligation gives the break-even sales.
        """
        rate = self.rate_for(vector.stakeholder)
        factors = discount_factors(rate, vector.offsets)
        pv_before_terminal = float(np.dot(np.asarray(vector.amounts[:-1], dtype=float), factors[:-1]))
        breakeven = -pv_before_terminal / factors[-1]
        logger.debug(
            f"Break-even terminal flow for {vector.stakeholder.value}/{vector.project.value}: "
            f"${breakeven/1e6:.2f}M at {rate*100:.1f}%"
        )
        return breakeven


# Convenience function
def calculate_npv(amounts: Sequence[float], discount_rate: float) -> float:
    """Quick NPV of a 5-period vector on the standard offsets"""
    return present_value(amounts, discount_rate)
