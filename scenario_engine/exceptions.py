"""
Error taxonomy for the simulation engine
"""


class SimulationError(Exception):
    """Base class for all simulation engine errors"""


class InvalidDistributionParameters(SimulationError, ValueError):
    """Distribution bounds out of order, negative stddev, or bad weights"""


class InvalidTrialCount(SimulationError, ValueError):
    """Trial count must be a positive integer"""


class DegenerateSampleError(SimulationError):
    """
    Sample too small or too uniform for the requested statistic.

    Recoverable: callers may report "insufficient data" instead of
    aborting the run.
    """


class NumericOverflowError(SimulationError, ArithmeticError):
    """A computed value left the representable float range"""


class InvalidRunSeed(SimulationError, ValueError):
    """RNG seed must be a non-negative integer"""
