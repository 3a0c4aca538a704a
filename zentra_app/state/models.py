"""
Psychological state data models.

This module defines the state vocabulary shared by the classifier, the
sliding-window history and the forecast/insight analyses, together with the
immutable result records they produce.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class PsychologicalState(str, Enum):
    """Mutually exclusive trader states, in classification priority order."""
    OVEREXTENDED = "OVEREXTENDED"
    AGGRESSIVE = "AGGRESSIVE"
    HESITANT = "HESITANT"
    STABLE = "STABLE"


class RiskLevel(str, Enum):
    """Forecast risk bands."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class IndicatorSeverity(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    WARNING = "warning"
    CRITICAL = "critical"


class StateTrigger(str, Enum):
    """What a trade looked like when it moved the state timeline."""
    PROFITABLE_TRADE = "Profitable trade"
    LOSING_TRADE = "Losing trade"
    EARLY_EXIT = "Early exit"
    STOP_LOSS_HIT = "Stop loss hit"
    TRADE_EXECUTION = "Trade execution"


@dataclass(frozen=True)
class Indicator:
    """Human-readable evidence for a classified state."""
    category: str
    message: str
    severity: IndicatorSeverity
    value: Optional[Union[int, float]] = None


@dataclass(frozen=True)
class StateAnalysis:
    """Result of classifying a trade window against a plan."""
    state: PsychologicalState
    confidence: int                                 # 10-95, <= 40 for windows under 5 trades
    plan_adherence: int                             # 0-100
    analyzed_trade_count: int
    indicators: tuple[Indicator, ...] = field(default_factory=tuple)
    recommendations: tuple[str, ...] = field(default_factory=tuple)
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class StateHistoryPoint:
    """A change point on the state timeline."""
    timestamp: datetime
    state: PsychologicalState
    confidence: int
    trigger: StateTrigger
    trade_id: Optional[str] = None
    profit_loss: float = 0.0
    risk_percent_used: Optional[float] = None


@dataclass(frozen=True)
class StateHistorySummary:
    total_changes: int = 0
    most_common_state: PsychologicalState = PsychologicalState.STABLE
    average_confidence: int = 50
    volatility: float = 0.0


@dataclass(frozen=True)
class StateHistory:
    """Change-point timeline with its summary."""
    history: tuple[StateHistoryPoint, ...] = field(default_factory=tuple)
    summary: StateHistorySummary = field(default_factory=StateHistorySummary)
