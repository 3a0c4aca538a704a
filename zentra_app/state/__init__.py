"""
Psychological state classification and its change-point history.
"""

from .classifier import NO_DATA_RECOMMENDATION, classify_state
from .history import SlidingWindows, analyze_state_history
from .models import (
    Indicator,
    IndicatorSeverity,
    PsychologicalState,
    RiskLevel,
    StateAnalysis,
    StateHistory,
    StateHistoryPoint,
    StateTrigger,
)

__all__ = [
    "NO_DATA_RECOMMENDATION",
    "classify_state",
    "SlidingWindows",
    "analyze_state_history",
    "Indicator",
    "IndicatorSeverity",
    "PsychologicalState",
    "RiskLevel",
    "StateAnalysis",
    "StateHistory",
    "StateHistoryPoint",
    "StateTrigger",
]
