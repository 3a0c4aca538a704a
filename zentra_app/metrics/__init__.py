"""Trade-window statistics and behavior detectors"""

from .behavior import (
    count_disciplined_pauses,
    count_impulsive_reentries,
    detect_clusters,
    has_emotional_volatility,
    has_revenge_trade,
    has_stable_risk,
)
from .primitives import (
    BasicMetrics,
    DayMetrics,
    RiskSpike,
    calculate_basic_metrics,
    calculate_day_metrics,
    count_risk_breaches,
    detect_risk_spike,
    group_by_day,
)

__all__ = [
    "BasicMetrics",
    "DayMetrics",
    "RiskSpike",
    "calculate_basic_metrics",
    "calculate_day_metrics",
    "count_risk_breaches",
    "detect_risk_spike",
    "group_by_day",
    "count_disciplined_pauses",
    "count_impulsive_reentries",
    "detect_clusters",
    "has_emotional_volatility",
    "has_revenge_trade",
    "has_stable_risk",
]
