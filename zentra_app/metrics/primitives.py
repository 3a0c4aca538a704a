"""
Aggregate statistics over a bounded trade window.

Every aggregate over a nullable trade field (risk used, R:R achieved, target
achieved) is computed only over trades where that field is present. A
missing value is never folded in as zero.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from ..config.defaults import DEFAULT_CONFIG, ClassifierParams
from ..data.models import Trade, TradingPlan
from ..utils.stats import mean, median
from ..utils.time import day_key, to_utc

PARAMS: ClassifierParams = DEFAULT_CONFIG.classifier


@dataclass(frozen=True)
class BasicMetrics:
    """Outcome and execution statistics for a trade window."""
    win_rate: float = 0.0
    avg_risk_used: float = 0.0
    avg_rr: float = 0.0
    median_target_pct: float = 0.0
    near_target_hits: int = 0
    early_exits: int = 0
    trades_with_risk: int = 0
    trades_with_target: int = 0


@dataclass(frozen=True)
class DayMetrics:
    """Per-calendar-day plan compliance counts."""
    days_with_trades: int
    exceeded_days: int
    outside_session_days: int


@dataclass(frozen=True)
class RiskSpike:
    """Result of the recent risk spike check."""
    risk_spike: bool
    last3_breaches: int
    threshold: float


def most_recent_first(trades: Iterable[Trade]) -> list[Trade]:
    return sorted(trades, key=lambda t: to_utc(t.entry_time), reverse=True)


def chronological(trades: Iterable[Trade]) -> list[Trade]:
    return sorted(trades, key=lambda t: to_utc(t.entry_time))


def risk_values(trades: Iterable[Trade]) -> list[float]:
    return [t.risk_percent_used for t in trades if t.risk_percent_used is not None]


def rr_values(trades: Iterable[Trade]) -> list[float]:
    return [t.risk_reward_achieved for t in trades if t.risk_reward_achieved is not None]


def target_values(trades: Iterable[Trade]) -> list[float]:
    return [t.target_percent_achieved for t in trades if t.target_percent_achieved is not None]


def calculate_win_rate(trades: Sequence[Trade]) -> float:
    """Share of trades closed in profit (0.0 for no trades)."""
    if not trades:
        return 0.0
    return sum(1 for t in trades if t.is_win) / len(trades)


def average_risk_used(trades: Iterable[Trade]) -> Optional[float]:
    """Mean risk used over trades that recorded it, None if none did."""
    return mean(risk_values(trades))


def average_rr(trades: Iterable[Trade]) -> Optional[float]:
    """Mean R:R achieved over trades that recorded it, None if none did."""
    return mean(rr_values(trades))


def median_target_pct(trades: Iterable[Trade]) -> float:
    return median(target_values(trades))


def is_early_exit(trade: Trade, params: ClassifierParams = PARAMS) -> bool:
    """Flagged as early, or a winner closed between 30% and 80% of target."""
    if trade.exited_early:
        return True
    pct = trade.target_percent_achieved
    low, high = params.early_exit_target_band
    return trade.is_win and pct is not None and low <= pct <= high


def count_early_exits(trades: Iterable[Trade], params: ClassifierParams = PARAMS) -> int:
    return sum(1 for t in trades if is_early_exit(t, params))


def count_near_target_hits(trades: Iterable[Trade], params: ClassifierParams = PARAMS) -> int:
    return sum(1 for pct in target_values(trades) if pct >= params.near_target_pct)


def calculate_basic_metrics(trades: Sequence[Trade], params: ClassifierParams = PARAMS) -> BasicMetrics:
    """
    Calculate outcome statistics for a trade window.

    Args:
        trades: Trade window (any order)
        params: Classifier thresholds

    Returns:
        BasicMetrics; averages default to 0.0 when no trade carries the field
    """
    if not trades:
        return BasicMetrics()

    risks = risk_values(trades)
    targets = target_values(trades)

    return BasicMetrics(
        win_rate=calculate_win_rate(trades),
        avg_risk_used=mean(risks) or 0.0,
        avg_rr=average_rr(trades) or 0.0,
        median_target_pct=median(targets),
        near_target_hits=count_near_target_hits(trades, params),
        early_exits=count_early_exits(trades, params),
        trades_with_risk=len(risks),
        trades_with_target=len(targets),
    )


def group_by_day(trades: Iterable[Trade]) -> dict[date, list[Trade]]:
    """Bucket trades by the UTC calendar date of their entry."""
    grouped: dict[date, list[Trade]] = defaultdict(list)
    for trade in trades:
        grouped[day_key(trade.entry_time)].append(trade)
    return dict(grouped)


def calculate_day_metrics(trades: Sequence[Trade], plan: TradingPlan) -> DayMetrics:
    """
    Count days that broke the daily cap or strayed outside preferred sessions.

    A plan cap of 0 means no cap. An empty preferred-session set means no
    session restriction, so no day is counted as outside.
    """
    by_day = group_by_day(trades)

    exceeded_days = 0
    if plan.max_trades_per_day > 0:
        exceeded_days = sum(1 for day_trades in by_day.values() if len(day_trades) > plan.max_trades_per_day)

    outside_session_days = sum(
        1 for day_trades in by_day.values()
        if any(not plan.allows_session(t.session) for t in day_trades)
    )

    return DayMetrics(
        days_with_trades=len(by_day) or 1,
        exceeded_days=exceeded_days,
        outside_session_days=outside_session_days,
    )


def count_risk_breaches(trades: Iterable[Trade], plan_risk: float,
                        multiplier: float = PARAMS.risk_breach_multiplier) -> int:
    """Trades whose recorded risk exceeds plan risk by the breach multiplier."""
    return sum(1 for risk in risk_values(trades) if risk > plan_risk * multiplier)


def detect_risk_spike(trades: Sequence[Trade], plan_risk: float, params: ClassifierParams = PARAMS) -> RiskSpike:
    """
    Check for sustained risk elevation in the most recent trades.

    A spike is at least 2 of the last 3 trades exceeding
    max(planRisk * 1.3, recentAvgRisk * 1.3).
    """
    if not trades:
        return RiskSpike(risk_spike=False, last3_breaches=0, threshold=0.0)

    ordered = most_recent_first(trades)
    recent_avg = average_risk_used(ordered)
    if recent_avg is None:
        recent_avg = plan_risk

    threshold = max(plan_risk * params.risk_spike_multiplier, recent_avg * params.risk_spike_multiplier)
    breaches = sum(1 for risk in risk_values(ordered[:params.risk_spike_lookback]) if risk > threshold)

    return RiskSpike(
        risk_spike=breaches >= params.risk_spike_min_breaches,
        last3_breaches=breaches,
        threshold=threshold,
    )
