"""
Daily psychological stability scores and their trend over a day range.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..config.defaults import DEFAULT_CONFIG, BehaviorParams
from ..data.models import Trade, TradingPlan, effective_plan_risk
from ..logging import get_scoring_logger, log_score_result
from ..metrics.behavior import count_drain_events, count_emotional_trades
from ..metrics.primitives import group_by_day, risk_values
from ..models.scores import (
    ConsistencyTrend,
    DailyMetrics,
    DailyScore,
    StabilitySnapshot,
    TrendState,
    TrendSummary,
)
from ..utils.stats import clamp, coefficient_of_variation_pct, mean, round_score
from ..utils.time import get_reference_time, to_utc
from .plan_control import calculate_plan_control
from .radar import calculate_psychological_radar

logger = get_scoring_logger(__name__)

PARAMS: BehaviorParams = DEFAULT_CONFIG.behavior

TREND_THRESHOLD = 5
MIN_TREND_DAYS = 3


def risk_consistency(trades: Sequence[Trade]) -> float:
    """100 minus the coefficient of variation of risk used; 100 without risk data."""
    risks = risk_values(trades)
    if not risks:
        return 100.0
    return clamp(100 - coefficient_of_variation_pct(risks))


def emotional_trade_frequency(trades: Sequence[Trade], plan_risk: float, params: BehaviorParams = PARAMS) -> float:
    """Share of trades (0-100) that were impulsive re-entries or revenge trades."""
    if not trades:
        return 0.0
    return count_emotional_trades(trades, plan_risk, params) / len(trades) * 100


def battery_stability(trades: Sequence[Trade], plan_risk: float, params: BehaviorParams = PARAMS) -> float:
    """100 minus drain events as a share of two per trade."""
    if not trades:
        return 100.0
    drains = count_drain_events(trades, plan_risk, params)
    return clamp(100 - drains / (len(trades) * 2) * 100)


def calculate_daily_score(trades: Sequence[Trade], plan: Optional[TradingPlan],
                          params: BehaviorParams = PARAMS) -> Optional[tuple[int, DailyMetrics]]:
    """
    Stability score of one day's trades.

    Args:
        trades: Trades entered on the day
        plan: Active trading plan

    Returns:
        (score 0-100, rounded metrics), or None for a day without trades
    """
    if not trades:
        return None

    plan_risk = effective_plan_risk(plan)

    compliance = calculate_plan_control(trades, plan, params).percentage
    volatility = calculate_psychological_radar(trades, plan, params).traits.emotional_volatility
    consistency = risk_consistency(trades)
    emotional = emotional_trade_frequency(trades, plan_risk, params)
    stability = battery_stability(trades, plan_risk, params)

    score = (
        compliance * 0.35
        + (100 - volatility) * 0.25
        + consistency * 0.20
        + (100 - emotional) * 0.15
        + stability * 0.05
    )

    metrics = DailyMetrics(
        avg_plan_compliance=compliance,
        behavioral_volatility=volatility,
        risk_consistency=round_score(consistency),
        emotional_trade_frequency=round_score(emotional),
        battery_stability=round_score(stability),
    )
    return round_score(clamp(score)), metrics


def trend_direction(scores: Sequence[int]) -> TrendState:
    """Compare the older half of the daily scores with the newer half."""
    if len(scores) < MIN_TREND_DAYS:
        return TrendState.STABLE

    mid = len(scores) // 2
    difference = mean(scores[mid:]) - mean(scores[:mid])

    if difference > TREND_THRESHOLD:
        return TrendState.IMPROVING
    if difference < -TREND_THRESHOLD:
        return TrendState.DETERIORATING
    return TrendState.STABLE


def trend_message(direction: TrendState, average_score: int) -> str:
    if direction == TrendState.IMPROVING:
        return "Your psychological consistency is improving"
    if direction == TrendState.DETERIORATING:
        return "Your psychological consistency is declining - review recent behavior"
    if average_score >= 70:
        return "Stable and disciplined trading pattern"
    return "Consistency is stable but has room for improvement"


def calculate_consistency_trend(trades: Sequence[Trade], plan: Optional[TradingPlan],
                                days: Optional[int] = 7, now: Optional[datetime] = None,
                                params: BehaviorParams = PARAMS) -> ConsistencyTrend:
    """
    Daily stability scores over the last `days` days and their direction.

    Args:
        trades: Trades in any order
        plan: Active trading plan
        days: Look-back in days from `now`; None uses every trade
        now: Reference time, defaults to wall-clock time

    Returns:
        ConsistencyTrend with one point per day that had trades, oldest first
    """
    if not trades:
        return ConsistencyTrend()

    if days is not None:
        start = get_reference_time(now) - timedelta(days=days)
        trades = [t for t in trades if to_utc(t.entry_time) >= start]

    trend = []
    for day, day_trades in sorted(group_by_day(trades).items()):
        daily = calculate_daily_score(day_trades, plan, params)
        if daily is not None:
            score, metrics = daily
            trend.append(DailyScore(date=day, score=score, metrics=metrics, trade_count=len(day_trades)))

    scores = [point.score for point in trend]
    average = round_score(mean(scores)) if scores else 0
    direction = trend_direction(scores)

    summary = TrendSummary(
        average_score=average,
        trend_direction=direction,
        days_with_data=len(trend),
        total_days=days if days is not None else len(trend),
        message=trend_message(direction, average),
    )

    log_score_result(logger, "consistency_trend", average, direction.value, len(trades),
                     {"days_with_data": len(trend)})

    return ConsistencyTrend(trend=tuple(trend), summary=summary)


def build_stability_snapshot(trades: Sequence[Trade], plan: Optional[TradingPlan], day: date,
                             params: BehaviorParams = PARAMS) -> Optional[StabilitySnapshot]:
    """Per-day stability record of one day's trades, None when the day had no trades."""
    day_trades = group_by_day(trades).get(day, [])
    daily = calculate_daily_score(day_trades, plan, params)
    if daily is None:
        return None

    score, metrics = daily
    return StabilitySnapshot(date=day, score=score, metrics=metrics, trade_count=len(day_trades))
