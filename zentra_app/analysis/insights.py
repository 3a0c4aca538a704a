"""
Period performance insights.

Summarizes a reporting period (week, month, quarter, year) and generates one
positive and one constructive insight for it.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

import structlog

from ..config.defaults import DEFAULT_CONFIG, ForecastParams
from ..data.models import Trade, TradingPlan
from ..metrics.primitives import average_rr, calculate_win_rate, count_risk_breaches
from ..models.analysis import (
    InsightMetric,
    InsightType,
    PerformanceInsight,
    PerformanceSnapshot,
    PerformanceStats,
)
from ..utils.stats import round_half_up, round_score
from ..utils.time import get_reference_time, period_start, to_utc

logger = structlog.get_logger(__name__)

PARAMS: ForecastParams = DEFAULT_CONFIG.forecast


def filter_period(trades: Sequence[Trade], period: str, now: Optional[datetime] = None) -> list[Trade]:
    """Trades entered on or after the start of the period."""
    start = period_start(period, now)
    return [t for t in trades if to_utc(t.entry_time) >= start]


def _no_data_snapshot(period: str) -> PerformanceSnapshot:
    return PerformanceSnapshot(
        period=period,
        insights=(PerformanceInsight(
            type=InsightType.CONSTRUCTIVE,
            title="Add data to unlock insights",
            description="Record trades and set a plan to generate meaningful feedback",
            metric=InsightMetric("Trades analyzed", 0),
        ),),
        stats=PerformanceStats(),
        recommendations=("Start with a small set of trades (5-10) to calibrate",),
    )


def _count_early_exits(trades: Sequence[Trade], params: ForecastParams) -> int:
    return sum(
        1 for t in trades
        if t.exited_early or (t.target_percent_achieved is not None
                              and t.target_percent_achieved < params.early_exit_target_pct)
    )


def _positive_insight(stats: PerformanceStats, total: int, params: ForecastParams) -> PerformanceInsight:
    if stats.plan_adherence >= params.strong_adherence:
        return PerformanceInsight(
            InsightType.POSITIVE, "Strong plan adherence",
            "You are trading within your rules. Keep it up.",
            InsightMetric("Plan adherence", f"{stats.plan_adherence}%"),
        )
    if stats.win_rate >= params.solid_win_rate:
        return PerformanceInsight(
            InsightType.POSITIVE, "Solid win rate",
            "Your recent outcomes are favorable without overtrading.",
            InsightMetric("Win rate", f"{stats.win_rate}%"),
        )
    return PerformanceInsight(
        InsightType.POSITIVE, "Consistent practice",
        "Consistency builds edge. Keep logging trades and reviewing.",
        InsightMetric("Trades analyzed", total),
    )


def _constructive_insight(stats: PerformanceStats, early_exit_ratio: float,
                          params: ForecastParams) -> PerformanceInsight:
    if early_exit_ratio >= params.early_exit_ratio:
        return PerformanceInsight(
            InsightType.CONSTRUCTIVE, "Exiting too early",
            "Consider scaling out or letting winners reach planned targets.",
            InsightMetric("Early exits", f"{round_score(early_exit_ratio * 100)}%"),
        )
    if stats.plan_adherence < params.weak_adherence:
        return PerformanceInsight(
            InsightType.CONSTRUCTIVE, "Improve plan adherence",
            "Stick to sessions and daily trade limits before optimizing entries.",
            InsightMetric("Plan adherence", f"{stats.plan_adherence}%"),
        )
    return PerformanceInsight(
        InsightType.CONSTRUCTIVE, "Refine exits",
        "Define rules for taking profits to reduce second-guessing.",
        InsightMetric("Avg R:R", stats.avg_risk_reward),
    )


def analyze_performance_insights(trades: Sequence[Trade], plan: Optional[TradingPlan], period: str = "MONTH",
                                 now: Optional[datetime] = None,
                                 params: ForecastParams = PARAMS) -> PerformanceSnapshot:
    """
    Build the performance snapshot for a reporting period.

    Args:
        trades: Trader's trades in any order; filtered to the period here
        plan: Active trading plan
        period: WEEK, MONTH, QUARTER or YEAR
        now: Reference time for the period and the weekly count
        params: Insight thresholds

    Returns:
        PerformanceSnapshot with stats, insights and recommendations
    """
    period = (period or "MONTH").upper()
    reference = get_reference_time(now)
    period_trades = filter_period(trades, period, reference)

    if not period_trades or plan is None:
        return _no_data_snapshot(period)

    total = len(period_trades)
    breach_ratio = count_risk_breaches(period_trades, plan.risk_percent_per_trade,
                                       params.insight_breach_multiplier) / total
    outside_ratio = sum(1 for t in period_trades if not plan.allows_session(t.session)) / total
    avg_rr = average_rr(period_trades)
    week_start = reference - timedelta(days=7)

    stats = PerformanceStats(
        win_rate=round_score(calculate_win_rate(period_trades) * 100),
        avg_risk_reward=round_half_up(avg_rr, 2) if avg_rr is not None else 0.0,
        plan_adherence=round_score(((1 - breach_ratio) + (1 - outside_ratio)) / 2 * 100),
        trades_this_week=sum(1 for t in period_trades if to_utc(t.entry_time) >= week_start),
    )

    early_exit_ratio = _count_early_exits(period_trades, params) / total
    insights = (
        _positive_insight(stats, total, params),
        _constructive_insight(stats, early_exit_ratio, params),
    )

    logger.debug("Performance insights computed", period=period, trades=total,
                 win_rate=stats.win_rate, plan_adherence=stats.plan_adherence)

    return PerformanceSnapshot(
        period=period,
        insights=insights,
        stats=stats,
        recommendations=tuple(i.description for i in insights if i.type == InsightType.CONSTRUCTIVE),
    )
