"""Small numeric reductions shared by the scoring components."""

import math
from typing import Optional, Sequence


def mean(values: Sequence[float]) -> Optional[float]:
    """Arithmetic mean, None for an empty sequence."""
    if not values:
        return None
    return sum(values) / len(values)


def median(values: Sequence[float]) -> float:
    """
    Median of a sequence (0.0 when empty).

    Even-length sequences average the two middle values.
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def pstdev(values: Sequence[float]) -> float:
    """Population standard deviation (0.0 for fewer than two values)."""
    if len(values) < 2:
        return 0.0
    avg = sum(values) / len(values)
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def coefficient_of_variation_pct(values: Sequence[float]) -> float:
    """Standard deviation as a percentage of the mean (0.0 when undefined)."""
    avg = mean(values)
    if avg is None or avg <= 0:
        return 0.0
    return pstdev(values) / avg * 100


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round with halves going up, the way scores are presented.

    Python's round() uses banker's rounding, which would turn 72.5 into 72.
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    """Round a score to the nearest integer, halves up."""
    return int(round_half_up(value))
