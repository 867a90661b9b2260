import numpy as np
import pytest

from scenario_engine.exceptions import InvalidDistributionParameters
from scenario_engine.outlook import (
    DEFAULT_OUTLOOK_WEIGHTS, OutlookCategory, draw_outlook, outlook_probabilities, parse_outlook
)


def test_default_probabilities_follow_weights():
    probabilities = outlook_probabilities()
    assert probabilities[OutlookCategory.PESSIMISTIC] == pytest.approx(12 / 32)
    assert probabilities[OutlookCategory.NEUTRAL] == pytest.approx(9 / 32)
    assert probabilities[OutlookCategory.OPTIMISTIC] == pytest.approx(11 / 32)


def test_draw_frequencies_approach_weights():
    rng = np.random.default_rng(2024)
    draws = [draw_outlook(rng) for _ in range(16_000)]
    total = sum(DEFAULT_OUTLOOK_WEIGHTS.values())
    for category, weight in DEFAULT_OUTLOOK_WEIGHTS.items():
        assert draws.count(category) / len(draws) == pytest.approx(weight / total, abs=0.02)


def test_zero_weight_category_never_drawn():
    rng = np.random.default_rng(1)
    weights = {OutlookCategory.PESSIMISTIC: 0, OutlookCategory.NEUTRAL: 1, OutlookCategory.OPTIMISTIC: 0}
    assert {draw_outlook(rng, weights) for _ in range(50)} == {OutlookCategory.NEUTRAL}


@pytest.mark.parametrize('weights', [
    {OutlookCategory.NEUTRAL: -1, OutlookCategory.OPTIMISTIC: 2},
    {OutlookCategory.NEUTRAL: 0, OutlookCategory.OPTIMISTIC: 0},
])
def test_invalid_weights_rejected(weights):
    with pytest.raises(InvalidDistributionParameters):
        outlook_probabilities(weights)


@pytest.mark.parametrize('value,expected', [
    ('pessimistic', OutlookCategory.PESSIMISTIC),
    ('Optimistic', OutlookCategory.OPTIMISTIC),
    (0, OutlookCategory.NEUTRAL),
    (-1, OutlookCategory.PESSIMISTIC),
])
def test_parse_outlook(value, expected):
    assert parse_outlook(value) is expected


def test_parse_outlook_unknown_name():
    with pytest.raises(ValueError):
        parse_outlook('bullish')
