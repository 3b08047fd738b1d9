"""
Statistics Kernel.

Small, pure numeric helpers shared by the data quality and drift analyzers.

CONVENTIONS:
- Standard deviation is the POPULATION form (divide by N, not N-1).
- mean() of an empty sequence is NaN, not an exception. Callers decide
  what an empty column means; both analyzers guard before calling.
- Every integer score the engine reports goes through round_half_up(),
  so 96.5 becomes 97 (Python's round() would give 96).
"""

import math
from typing import Sequence


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, or NaN for an empty sequence."""
    if not values:
        return math.nan
    return sum(values) / len(values)


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation, or NaN for an empty sequence."""
    m = mean(values)
    if math.isnan(m):
        return math.nan
    return math.sqrt(sum((v - m) ** 2 for v in values) / len(values))


def z_score(value: float, mean_value: float, std: float) -> float:
    """Distance from the mean in standard deviations."""
    return (value - mean_value) / std


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves going up (towards +infinity)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    """Round a 0-100 score to the nearest integer, halves up."""
    return int(round_half_up(value))
