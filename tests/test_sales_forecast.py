import numpy as np
import pytest

from scenario_engine.distributions import NormalSpec
from scenario_engine.exceptions import InvalidDistributionParameters
from scenario_engine.outlook import OutlookCategory
from scenario_engine.sales_forecast import (
    DEFAULT_OFFICE_GAP_PARAMS, DEFAULT_OFFICE_SALES_BASELINE, SalesAssumptions, SalesForecaster
)


def test_trial_carries_the_supplied_outlook(rng):
    forecaster = SalesForecaster(SalesAssumptions())
    trial = forecaster.forecast_trial(3, OutlookCategory.OPTIMISTIC, rng)
    assert trial.index == 3
    assert trial.outlook is OutlookCategory.OPTIMISTIC


def test_residential_values_within_triangles(rng):
    forecaster = SalesForecaster(SalesAssumptions())
    for i in range(2_000):
        trial = forecaster.forecast_trial(i, OutlookCategory.NEUTRAL, rng)
        assert 20_000_000 <= trial.residential_total_sales <= 130_000_000
        assert 18_000_000 <= trial.residential_construction_cost <= 22_000_000


@pytest.mark.parametrize('outlook', list(OutlookCategory))
def test_office_sales_centre_on_baseline_plus_gap(outlook, rng):
    forecaster = SalesForecaster(SalesAssumptions())
    sales = np.array([forecaster.office_total_sales(outlook, rng) for _ in range(5_000)])
    gap = DEFAULT_OFFICE_GAP_PARAMS[outlook]
    standard_error = gap.stddev / np.sqrt(sales.size)
    assert sales.mean() == pytest.approx(DEFAULT_OFFICE_SALES_BASELINE + gap.mean, abs=5 * standard_error)
    assert forecaster.expected_office_sales(outlook) == DEFAULT_OFFICE_SALES_BASELINE + gap.mean


def test_averaging_gap_draws_narrows_office_spread():
    single = SalesForecaster(SalesAssumptions(office_gap_draws=1))
    averaged = SalesForecaster(SalesAssumptions(office_gap_draws=16))
    rng_a = np.random.default_rng(5)
    rng_b = np.random.default_rng(5)
    spread_single = np.std([single.office_total_sales(OutlookCategory.NEUTRAL, rng_a) for _ in range(2_000)])
    spread_avg = np.std([averaged.office_total_sales(OutlookCategory.NEUTRAL, rng_b) for _ in range(2_000)])
    assert spread_avg < spread_single / 2


def test_missing_gap_category_rejected():
    params = {OutlookCategory.NEUTRAL: NormalSpec(mean=0, stddev=1)}
    with pytest.raises(InvalidDistributionParameters):
        SalesForecaster(SalesAssumptions(office_gap_params=params))


def test_zero_gap_draws_rejected():
    with pytest.raises(InvalidDistributionParameters):
        SalesForecaster(SalesAssumptions(office_gap_draws=0))
