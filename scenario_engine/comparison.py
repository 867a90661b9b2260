"""
Summary statistics and significance testing over trial-level NPVs
"""
from dataclasses import dataclass, asdict
from typing import Dict, Any, Sequence

import numpy as np
from scipy import stats

from utils.logger import setup_logger
from scenario_engine.exceptions import DegenerateSampleError

logger = setup_logger(__name__)


@dataclass(frozen=True)
class NPVSummary:
    count: int
    mean: float
    std: float
    min: float
    p05: float
    median: float
    p95: float
    max: float
    negative_ratio: float
    negative_proportion: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TTestResult:
    statistic: float
    p_value: float
    method: str
    mean_a: float
    mean_b: float

    @property
    def mean_difference(self) -> float:
        return self.mean_a - self.mean_b

    def is_significant(self, alpha: float = 0.05) -> bool:
        return self.p_value < alpha

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['mean_difference'] = self.mean_difference
        return result


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float).ravel()


def negative_outcome_ratio(npvs: Sequence[float]) -> float:
    """
    Odds of a loss: count(NPV < 0) / count(NPV >= 0).

    Returns inf when no outcome is non-negative.
    """
    values = _as_array(npvs)
    if values.size == 0:
        raise DegenerateSampleError("Cannot compute negative outcome ratio of an empty sample")
    negatives = int(np.count_nonzero(values < 0))
    non_negatives = values.size - negatives
    if non_negatives == 0:
        return float('inf')
    return negatives / non_negatives


def negative_outcome_proportion(npvs: Sequence[float]) -> float:
    """Share of the sample with a loss: count(NPV < 0) / count(all)"""
    values = _as_array(npvs)
    if values.size == 0:
        raise DegenerateSampleError("Cannot compute negative outcome proportion of an empty sample")
    return int(np.count_nonzero(values < 0)) / values.size


def summarize(npvs: Sequence[float]) -> NPVSummary:
    """
    Descriptive statistics for one (stakeholder, project) NPV sample.

    Raises:
        DegenerateSampleError: fewer than 2 values
    """
    values = _as_array(npvs)
    if values.size < 2:
        raise DegenerateSampleError(f"Need at least 2 NPVs to summarize, got {values.size}")

    p05, median, p95 = np.percentile(values, [5, 50, 95])
    return NPVSummary(
        count=int(values.size),
        mean=float(values.mean()),
        std=float(values.std(ddof=1)),
        min=float(values.min()),
        p05=float(p05),
        median=float(median),
        p95=float(p95),
        max=float(values.max()),
        negative_ratio=negative_outcome_ratio(values),
        negative_proportion=negative_outcome_proportion(values),
    )


def compare(
    sample_a: Sequence[float],
    sample_b: Sequence[float],
    equal_var: bool = False
) -> TTestResult:
    """
    Two-sample t-test between NPV distributions.

    Args:
        sample_a: NPVs of the first project
        sample_b: NPVs of the second project
        equal_var: False for Welch's test (default), True for pooled variance

    Raises:
        DegenerateSampleError: a sample has fewer than 2 values, or either sample
            has zero variance
    """
    a = _as_array(sample_a)
    b = _as_array(sample_b)

    if a.size < 2 or b.size < 2:
        raise DegenerateSampleError(
            f"t-test needs at least 2 values per sample, got {a.size} and {b.size}"
        )
    if np.ptp(a) == 0 or np.ptp(b) == 0:
        raise DegenerateSampleError("t-test undefined: a sample has zero variance")

    statistic, p_value = stats.ttest_ind(a, b, equal_var=equal_var)

    method = 'pooled' if equal_var else 'welch'
    logger.debug(f"{method} t-test: t={float(statistic):.4f}, p={float(p_value):.4g}")

    return TTestResult(
        statistic=float(statistic),
        p_value=float(p_value),
        method=method,
        mean_a=float(a.mean()),
        mean_b=float(b.mean()),
    )
