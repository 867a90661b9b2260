"""
Parametric distribution sampling for scenario inputs
"""
import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from scenario_engine.exceptions import InvalidDistributionParameters


@dataclass(frozen=True)
class NormalSpec:
    """Untruncated normal distribution"""
    mean: float
    stddev: float

    def validate(self) -> None:
        if not (math.isfinite(self.mean) and math.isfinite(self.stddev)):
            raise InvalidDistributionParameters(
                f"Normal parameters must be finite: mean={self.mean}, stddev={self.stddev}"
            )
        if self.stddev < 0:
            raise InvalidDistributionParameters(f"Normal stddev must be >= 0, got {self.stddev}")


@dataclass(frozen=True)
class TriangularSpec:
    """Triangular distribution on [low, high] with peak density at mode"""
    low: float
    mode: float
    high: float

    def validate(self) -> None:
        if not all(math.isfinite(v) for v in (self.low, self.mode, self.high)):
            raise InvalidDistributionParameters(
                f"Triangular parameters must be finite: {self.low}, {self.mode}, {self.high}"
            )
        if not self.low <= self.mode <= self.high:
            raise InvalidDistributionParameters(
                f"Triangular requires low <= mode <= high, got "
                f"low={self.low}, mode={self.mode}, high={self.high}"
            )


DistributionSpec = Union[NormalSpec, TriangularSpec]


def sample(spec: DistributionSpec, n: int, rng: np.random.Generator) -> np.ndarray:
    """
    Draw n independent samples from a distribution.

    Args:
        spec: NormalSpec or TriangularSpec
        n: Number of samples
        rng: Generator to draw from (its state advances)

    Returns:
        1-D float array of length n
    """
    if n < 0:
        raise ValueError(f"Sample count must be >= 0, got {n}")

    spec.validate()

    if isinstance(spec, NormalSpec):
        return rng.normal(spec.mean, spec.stddev, size=n)

    if isinstance(spec, TriangularSpec):
        # numpy rejects low == high, the distribution is a point mass there
        if spec.low == spec.high:
            return np.full(n, float(spec.low))
        return rng.triangular(spec.low, spec.mode, spec.high, size=n)

    raise TypeError(f"Unsupported distribution spec: {type(spec).__name__}")


def distribution_mean(spec: DistributionSpec) -> float:
    """Analytic mean of a distribution spec"""
    if isinstance(spec, NormalSpec):
        return spec.mean
    return (spec.low + spec.mode + spec.high) / 3
