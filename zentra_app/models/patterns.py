"""Result records for the improvement detector and the breathwork trigger"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Improvement:
    """A behavioral improvement the detector can report, lower priority wins"""
    id: str
    priority: int
    message: str
    description: str


@dataclass(frozen=True)
class PerformanceWindow:
    has_improvement: bool = False
    message: Optional[str] = None
    description: Optional[str] = None
    trades_analyzed: int = 0
    improvements: tuple[Improvement, ...] = field(default_factory=tuple)


class TriggerType(str, Enum):
    HIGH_VOLATILITY = "high_volatility"
    LOW_BATTERY = "low_battery"
    IMPULSIVE_TRADES = "impulsive_trades"
    BATTERY_DROP = "battery_drop"


class UrgencyLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class BreathworkTrigger:
    type: TriggerType
    value: float
    threshold: float
    message: str


@dataclass(frozen=True)
class Urgency:
    level: UrgencyLevel = UrgencyLevel.NONE
    score: int = 0
    factors: tuple[TriggerType, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BreathworkExercise:
    name: str
    duration: str
    pattern: str
    description: str


@dataclass(frozen=True)
class BreathworkSuggestion:
    should_suggest: bool
    urgency: Urgency
    triggers: tuple[BreathworkTrigger, ...]
    message: str
    exercise: Optional[BreathworkExercise] = None
