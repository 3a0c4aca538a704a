"""Result records for session forecasts, period insights and dashboard statistics"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Union

from ..data.models import Session
from ..state.models import PsychologicalState, RiskLevel


class ForecastLabel(str, Enum):
    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"


class InsightType(str, Enum):
    POSITIVE = "POSITIVE"
    CONSTRUCTIVE = "CONSTRUCTIVE"


class TrendDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    STABLE = "STABLE"


class AlertType(str, Enum):
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    INFO = "INFO"


class AlertPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class SessionForecast:
    """Bias forecast for one trading session"""
    session: Session
    predicted_bias: str
    risk_level: RiskLevel
    forecast: ForecastLabel
    recommendations: tuple[str, ...]
    based_on_state: PsychologicalState = PsychologicalState.STABLE


@dataclass(frozen=True)
class InsightMetric:
    label: str
    value: Union[int, float, str]


@dataclass(frozen=True)
class PerformanceInsight:
    type: InsightType
    title: str
    description: str
    metric: InsightMetric


@dataclass(frozen=True)
class PerformanceStats:
    win_rate: int = 0                               # Percent
    avg_risk_reward: float = 0.0
    plan_adherence: int = 0
    trades_this_week: int = 0


@dataclass(frozen=True)
class PerformanceSnapshot:
    """Period-scoped insights, always holding a positive and a constructive insight"""
    period: str
    insights: tuple[PerformanceInsight, ...]
    stats: PerformanceStats
    recommendations: tuple[str, ...]

    def insights_of(self, insight_type: InsightType) -> list[PerformanceInsight]:
        return [i for i in self.insights if i.type == insight_type]


@dataclass(frozen=True)
class SummaryStats:
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0                           # Percent, 2 decimals
    total_profit_loss: float = 0.0
    average_risk_reward: float = 0.0
    best_trade: float = 0.0
    worst_trade: float = 0.0


@dataclass(frozen=True)
class RiskMetrics:
    average_risk_per_trade: float = 0.0
    max_drawdown: float = 0.0
    sharpe_ratio: float = 0.0


@dataclass(frozen=True)
class SessionPerformance:
    session: Session
    trades: int
    profit_loss: float
    win_rate: float


@dataclass(frozen=True)
class DailyProfitLoss:
    date: date
    profit_loss: float


@dataclass(frozen=True)
class PerformanceTrends:
    pnl_trend: TrendDirection = TrendDirection.STABLE
    win_rate_trend: TrendDirection = TrendDirection.STABLE
    risk_trend: TrendDirection = TrendDirection.STABLE


@dataclass(frozen=True)
class Alert:
    type: AlertType
    message: str
    priority: AlertPriority


@dataclass(frozen=True)
class DashboardStats:
    """Dashboard figures for a trade window"""
    summary: SummaryStats
    risk_metrics: RiskMetrics
    session_performance: tuple[SessionPerformance, ...] = field(default_factory=tuple)
    daily_pnl: tuple[DailyProfitLoss, ...] = field(default_factory=tuple)
    trends: PerformanceTrends = field(default_factory=PerformanceTrends)
    alerts: tuple[Alert, ...] = field(default_factory=tuple)
    state: Optional[PsychologicalState] = None
