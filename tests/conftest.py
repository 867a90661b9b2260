# tests/conftest.py
"""
Pytest configuration and shared fixtures for all tests
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Project root on the path so the flat packages import without installation
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from scenario_engine.cash_flows import CashFlowAssembler, LoanTerms
from scenario_engine.outlook import OutlookCategory
from scenario_engine.simulation_config import SimulationConfig


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def loan():
    return LoanTerms()


@pytest.fixture
def assembler(loan):
    return CashFlowAssembler(loan)


@pytest.fixture
def small_config():
    """Fast run with a pinned outlook"""
    return SimulationConfig(trial_count=400, rng_seed=7, office_outlook=OutlookCategory.NEUTRAL)
