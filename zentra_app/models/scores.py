"""Result records for the behavioral scoring suite and its daily snapshots"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from ..data.models import Trade


class Criterion(str, Enum):
    """Per-trade plan control criteria"""
    ALLOWED_SESSION = "allowedSession"
    PROPER_SL_TP = "properSlTp"
    CORRECT_POSITION_SIZE = "correctPositionSize"
    NOTES = "notes"
    TIMING = "timing"


class DeviationCause(str, Enum):
    LOW_BATTERY = "low_battery"
    HIGH_FREQUENCY = "high_frequency"
    IMPULSIVE_TIMING = "impulsive_timing"
    POSITION_SIZING = "position_sizing"
    SESSION_VIOLATION = "session_violation"
    AFTER_WINS = "after_wins"
    AFTER_LOSSES = "after_losses"


class BatteryStatus(str, Enum):
    OPTIMAL = "optimal"
    STRAINED = "strained"
    HIGH_RISK = "high_risk"


class BatteryRiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    ELEVATED = "elevated"
    CRITICAL = "critical"


class HeatmapColor(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    GREY = "grey"


class InsightTone(str, Enum):
    POSITIVE = "positive"
    WARNING = "warning"
    NEUTRAL = "neutral"


class TrendState(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DETERIORATING = "deteriorating"


@dataclass(frozen=True)
class CriterionResult:
    criterion: Criterion
    points: int
    passed: bool


@dataclass(frozen=True)
class TradeScore:
    """Plan control score (0-100) of a single trade"""
    trade: Trade
    score: int
    breakdown: tuple[CriterionResult, ...]

    @property
    def trade_id(self) -> Optional[str]:
        return self.trade.trade_id

    @property
    def entry_time(self) -> datetime:
        return self.trade.entry_time

    def failed(self, criterion: Criterion) -> bool:
        return any(c.criterion == criterion and not c.passed for c in self.breakdown)


@dataclass(frozen=True)
class DeviationAttribution:
    primary_cause: Optional[DeviationCause] = None
    message: Optional[str] = None
    patterns: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PlanControlResult:
    percentage: int
    trades_analyzed: int
    message: str
    trade_scores: tuple[TradeScore, ...] = field(default_factory=tuple)
    deviation_attribution: Optional[DeviationAttribution] = None


@dataclass(frozen=True)
class BatteryFactor:
    """A single drain or recharge applied to the mental battery"""
    type: str
    impact: int
    message: str
    trade_index: Optional[int] = None
    count: Optional[int] = None


@dataclass(frozen=True)
class BehavioralInterpretation:
    risk_level: BatteryRiskLevel
    patterns: tuple[str, ...]
    recommendation: str


@dataclass(frozen=True)
class MentalBatteryResult:
    battery: int                                    # 0-100
    status: BatteryStatus
    message: str
    interpretation: Optional[BehavioralInterpretation] = None
    drain_factors: tuple[BatteryFactor, ...] = field(default_factory=tuple)
    recharge_factors: tuple[BatteryFactor, ...] = field(default_factory=tuple)
    trades_analyzed: int = 0


@dataclass(frozen=True)
class RadarTraits:
    """Six behavioral traits, each 0-100"""
    discipline: int = 0
    impulse_control: int = 100
    aggression: int = 0
    hesitation: int = 0
    consistency: int = 100
    emotional_volatility: int = 0


@dataclass(frozen=True)
class RadarResult:
    traits: RadarTraits
    trades_analyzed: int
    message: str


@dataclass(frozen=True)
class TimeWindow:
    """A fixed 3-hour slice of the UTC day"""
    id: str
    label: str
    start_hour: int
    end_hour: int

    def contains(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


@dataclass(frozen=True)
class WindowMetrics:
    win_loss: int
    plan_compliance: int
    impulsiveness: int
    hesitation: int
    risk_deviation: int
    volatility: int
    frequency: int


@dataclass(frozen=True)
class HeatmapWindow:
    window: TimeWindow
    score: Optional[int]                            # None for windows without trades
    color: HeatmapColor
    trade_count: int
    metrics: Optional[WindowMetrics]
    message: str


@dataclass(frozen=True)
class HeatmapInsight:
    type: InsightTone = InsightTone.NEUTRAL
    message: Optional[str] = None
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class BehaviorHeatmap:
    windows: tuple[HeatmapWindow, ...]
    total_trades: int
    insight: HeatmapInsight = field(default_factory=HeatmapInsight)

    @property
    def active_windows(self) -> list[HeatmapWindow]:
        return [w for w in self.windows if w.score is not None and w.trade_count > 0]


@dataclass(frozen=True)
class DailyMetrics:
    avg_plan_compliance: int
    behavioral_volatility: int
    risk_consistency: int
    emotional_trade_frequency: int
    battery_stability: int


@dataclass(frozen=True)
class DailyScore:
    """Stability score for one calendar day"""
    date: date
    score: int
    metrics: DailyMetrics
    trade_count: int


@dataclass(frozen=True)
class TrendSummary:
    average_score: int = 0
    trend_direction: TrendState = TrendState.STABLE
    days_with_data: int = 0
    total_days: int = 0
    message: Optional[str] = None


@dataclass(frozen=True)
class ConsistencyTrend:
    trend: tuple[DailyScore, ...] = field(default_factory=tuple)
    summary: TrendSummary = field(default_factory=TrendSummary)


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


@dataclass(frozen=True)
class BehaviorHeatmapSnapshot:
    """Per-day heatmap record handed to the persistence layer"""
    date: date
    windows: tuple[HeatmapWindow, ...]
    insight: HeatmapInsight
    total_trades: int

    def to_dict(self) -> dict[str, Any]:
        return _serialize(asdict(self))


@dataclass(frozen=True)
class StabilitySnapshot:
    """Per-day stability record handed to the persistence layer"""
    date: date
    score: int
    metrics: DailyMetrics
    trade_count: int

    def to_dict(self) -> dict[str, Any]:
        return _serialize(asdict(self))
