import numpy as np
import pytest

from scenario_engine.cash_flows import Project, Stakeholder
from scenario_engine.distributions import TriangularSpec
from scenario_engine.exceptions import InvalidDistributionParameters, InvalidRunSeed, InvalidTrialCount
from scenario_engine.npv_calculator import present_value
from scenario_engine.outlook import OutlookCategory
from scenario_engine.simulation import _partition, resolve_outlook, run_simulation, trial_rng
from scenario_engine.simulation_config import SimulationConfig


def test_repeat_runs_are_identical(small_config):
    first = run_simulation(small_config)
    second = run_simulation(small_config)
    assert first.summaries == second.summaries
    assert first.comparisons == second.comparisons
    for cell, npvs in first.npvs.items():
        assert np.array_equal(npvs, second.npvs[cell])


@pytest.mark.parametrize('workers', [2, 3, 8])
def test_worker_count_does_not_change_results(small_config, workers):
    sequential = run_simulation(small_config)
    parallel = run_simulation(small_config, max_workers=workers)
    assert parallel.summaries == sequential.summaries
    assert parallel.trials == sequential.trials
    for cell, npvs in sequential.npvs.items():
        assert np.array_equal(npvs, parallel.npvs[cell])


def test_trial_streams_are_independent_of_order():
    late_first = trial_rng(11, 5).random()
    trial_rng(11, 0).random()
    assert trial_rng(11, 5).random() == late_first
    assert trial_rng(11, 5).random() != trial_rng(11, 6).random()


def test_partition_covers_every_trial_once():
    chunks = _partition(103, 8)
    assert [i for chunk in chunks for i in chunk] == list(range(103))
    assert _partition(3, 16) == [range(0, 1), range(1, 2), range(2, 3)]


def test_outlook_is_shared_by_all_trials():
    result = run_simulation(SimulationConfig(trial_count=200, rng_seed=3))
    assert {t.outlook for t in result.trials} == {result.outlook}


def test_pinned_outlook_is_used(small_config):
    result = run_simulation(small_config)
    assert result.outlook is OutlookCategory.NEUTRAL


def test_drawn_outlook_depends_only_on_seed():
    config = SimulationConfig(trial_count=10, rng_seed=17)
    assert resolve_outlook(config) is resolve_outlook(config)
    assert resolve_outlook(config) is resolve_outlook(config.with_overrides(trial_count=500))
    drawn = {resolve_outlook(SimulationConfig(rng_seed=seed)) for seed in range(40)}
    assert len(drawn) > 1


def test_sampled_inputs_stay_in_bounds(small_config):
    for trial in run_simulation(small_config).trials:
        assert 20_000_000 <= trial.residential_total_sales <= 130_000_000
        assert 18_000_000 <= trial.residential_construction_cost <= 22_000_000


def test_lender_npv_reflects_recourse_clamp(small_config):
    result = run_simulation(small_config)
    loan = small_config.loan_terms()
    floor = -loan.principal
    ceiling = -loan.principal + loan.obligation / 1.06 ** 3
    for project in Project:
        npvs = result.npv_sample(Stakeholder.LENDER, project)
        assert np.all(npvs >= floor - 1e-6)
        assert np.all(npvs <= ceiling + 1e-6)


@pytest.mark.parametrize('trial_count', [1_000, 16_000])
def test_borrower_office_mean_converges(trial_count):
    config = SimulationConfig(trial_count=trial_count, rng_seed=21, office_outlook=OutlookCategory.NEUTRAL)
    result = run_simulation(config)

    gap = config.office_gap_params_by_category[OutlookCategory.NEUTRAL]
    expected_sales = config.office_sales_baseline + gap.mean
    schedule = config.borrower_schedule
    expected_npv = present_value(
        (schedule.origination, schedule.office_quarter, schedule.year_one, schedule.year_two,
         expected_sales - config.loan_terms().obligation),
        config.borrower_discount_rate,
    )
    npv_stddev = gap.stddev / (1 + config.borrower_discount_rate) ** 3

    sample_mean = result.summary(Stakeholder.BORROWER, Project.OFFICE).mean
    assert sample_mean == pytest.approx(expected_npv, abs=5 * npv_stddev / np.sqrt(trial_count))


def test_comparisons_reported_per_stakeholder():
    # Pessimistic office sales fall short of the obligation often enough to vary the lender NPV
    config = SimulationConfig(trial_count=400, rng_seed=7, office_outlook=OutlookCategory.PESSIMISTIC)
    result = run_simulation(config)
    for stakeholder in Stakeholder:
        comparison = result.comparison(stakeholder)
        assert comparison is not None
        assert 0.0 <= comparison.p_value <= 1.0
        assert comparison.mean_a == pytest.approx(result.summary(stakeholder, Project.OFFICE).mean)


def test_constant_lender_office_sample_skips_lender_ttest():
    config = SimulationConfig(trial_count=2_000, rng_seed=1, office_outlook=OutlookCategory.OPTIMISTIC)
    result = run_simulation(config)
    lender_office = result.npv_sample(Stakeholder.LENDER, Project.OFFICE)
    assert np.ptp(lender_office) == 0
    assert result.comparison(Stakeholder.LENDER) is None
    assert result.comparison(Stakeholder.BORROWER) is not None
    assert result.summary(Stakeholder.LENDER, Project.OFFICE).std == 0.0


def test_single_trial_reports_insufficient_data():
    result = run_simulation(SimulationConfig(trial_count=1, rng_seed=1))
    assert all(summary is None for summary in result.summaries.values())
    assert all(comparison is None for comparison in result.comparisons.values())
    assert len(result.trials) == 1


def test_frames(small_config):
    result = run_simulation(small_config)

    trials = result.trials_frame()
    assert len(trials) == small_config.trial_count
    assert {'borrower_office_npv', 'borrower_residential_npv',
            'lender_office_npv', 'lender_residential_npv'} <= set(trials.columns)
    assert (trials['outlook'] == 'neutral').all()

    summary = result.summary_frame()
    assert len(summary) == 4
    assert summary.loc[('borrower', 'office'), 'count'] == small_config.trial_count

    comparison = result.comparison_frame()
    assert list(comparison.index) == ['borrower', 'lender']
    assert comparison.loc['borrower', 'method'] == 'welch'


@pytest.mark.parametrize('trial_count', [0, -5, 2.5, True])
def test_invalid_trial_count_is_fatal(trial_count):
    with pytest.raises(InvalidTrialCount):
        run_simulation(SimulationConfig(trial_count=trial_count))


def test_invalid_triangle_aborts_before_sampling(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("sampling should not start")

    monkeypatch.setattr('scenario_engine.simulation.TrialRunner.run_trial', fail)
    config = SimulationConfig(
        trial_count=10,
        residential_cost_triangle=TriangularSpec(low=22_000_000, mode=20_000_000, high=18_000_000),
    )
    with pytest.raises(InvalidDistributionParameters):
        run_simulation(config)


def test_negative_seed_is_fatal_before_sampling():
    with pytest.raises(InvalidRunSeed):
        run_simulation(SimulationConfig(trial_count=10, rng_seed=-3))
