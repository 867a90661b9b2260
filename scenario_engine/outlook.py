"""
Economic outlook selection for the office sales forecast
"""
from enum import IntEnum
from typing import Dict, Mapping, Optional

import numpy as np

from scenario_engine.exceptions import InvalidDistributionParameters


class OutlookCategory(IntEnum):
    """Macro outlook persisting over the loan term"""
    PESSIMISTIC = -1
    NEUTRAL = 0
    OPTIMISTIC = 1


DEFAULT_OUTLOOK_WEIGHTS: Dict[OutlookCategory, float] = {
    OutlookCategory.PESSIMISTIC: 12,
    OutlookCategory.NEUTRAL: 9,
    OutlookCategory.OPTIMISTIC: 11,
}


def parse_outlook(value) -> OutlookCategory:
    """Accept an OutlookCategory, its integer code, or its name (case-insensitive)"""
    if isinstance(value, OutlookCategory):
        return value
    if isinstance(value, str):
        try:
            return OutlookCategory[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown outlook category: {value!r}") from None
    return OutlookCategory(int(value))


def outlook_probabilities(
    weights: Optional[Mapping[OutlookCategory, float]] = None
) -> Dict[OutlookCategory, float]:
    """
    Normalize selection weights into probabilities.

    Raises:
        InvalidDistributionParameters: negative weight or non-positive total
    """
    if weights is None:
        weights = DEFAULT_OUTLOOK_WEIGHTS

    normalized = {parse_outlook(k): float(v) for k, v in weights.items()}
    if any(w < 0 for w in normalized.values()):
        raise InvalidDistributionParameters(f"Outlook weights must be >= 0, got {normalized}")

    total = sum(normalized.values())
    if total <= 0:
        raise InvalidDistributionParameters("Outlook weights must sum to a positive value")

    return {category: w / total for category, w in normalized.items()}


def draw_outlook(
    rng: np.random.Generator,
    weights: Optional[Mapping[OutlookCategory, float]] = None
) -> OutlookCategory:
    """Draw a single outlook category by weighted selection"""
    probabilities = outlook_probabilities(weights)
    categories = sorted(probabilities)
    index = rng.choice(len(categories), p=[probabilities[c] for c in categories])
    return categories[int(index)]
