"""Dashboard statistics over a window of recent trades."""

from collections import defaultdict
from typing import Optional, Sequence

import structlog

from ..data.models import Trade
from ..metrics.primitives import average_risk_used, average_rr, calculate_win_rate, chronological, group_by_day
from ..models.analysis import (
    Alert,
    AlertPriority,
    AlertType,
    DailyProfitLoss,
    DashboardStats,
    PerformanceTrends,
    RiskMetrics,
    SessionPerformance,
    SummaryStats,
    TrendDirection,
)
from ..state.models import PsychologicalState, StateAnalysis
from ..utils.stats import mean, pstdev, round_half_up

logger = structlog.get_logger(__name__)

RECENT_FORM_TRADES = 5


def _money(value: float) -> float:
    return round_half_up(value, 2)


def calculate_summary_stats(trades: Sequence[Trade]) -> SummaryStats:
    if not trades:
        return SummaryStats()

    profits = [t.profit_loss for t in trades]
    avg_rr = average_rr(trades)

    return SummaryStats(
        total_trades=len(trades),
        winning_trades=sum(1 for t in trades if t.is_win),
        losing_trades=sum(1 for t in trades if t.is_loss),
        win_rate=_money(calculate_win_rate(trades) * 100),
        total_profit_loss=_money(sum(profits)),
        average_risk_reward=_money(avg_rr) if avg_rr is not None else 0.0,
        best_trade=_money(max(profits)),
        worst_trade=_money(min(profits)),
    )


def calculate_risk_metrics(trades: Sequence[Trade]) -> RiskMetrics:
    """
    Average risk, maximum drawdown of cumulative P/L and a simplified Sharpe ratio.

    The Sharpe ratio is mean P/L over its population standard deviation,
    with no risk-free rate.
    """
    if not trades:
        return RiskMetrics()

    peak = 0.0
    running = 0.0
    max_drawdown = 0.0
    for trade in chronological(trades):
        running += trade.profit_loss
        peak = max(peak, running)
        max_drawdown = max(max_drawdown, peak - running)

    returns = [t.profit_loss for t in trades]
    std = pstdev(returns)
    sharpe = mean(returns) / std if std > 0 else 0.0
    avg_risk = average_risk_used(trades)

    return RiskMetrics(
        average_risk_per_trade=_money(avg_risk) if avg_risk is not None else 0.0,
        max_drawdown=_money(max_drawdown),
        sharpe_ratio=_money(sharpe),
    )


def calculate_session_performance(trades: Sequence[Trade]) -> list[SessionPerformance]:
    """Trade count, P/L and win rate per session, in order of first appearance."""
    by_session: dict = defaultdict(list)
    for trade in chronological(trades):
        by_session[trade.session].append(trade)

    return [
        SessionPerformance(
            session=session,
            trades=len(session_trades),
            profit_loss=_money(sum(t.profit_loss for t in session_trades)),
            win_rate=_money(calculate_win_rate(session_trades) * 100),
        )
        for session, session_trades in by_session.items()
    ]


def calculate_daily_pnl(trades: Sequence[Trade]) -> list[DailyProfitLoss]:
    """Net P/L per UTC calendar day, oldest first."""
    return [
        DailyProfitLoss(date=day, profit_loss=_money(sum(t.profit_loss for t in day_trades)))
        for day, day_trades in sorted(group_by_day(trades).items())
    ]


def _direction(first: float, second: float) -> TrendDirection:
    if second > first:
        return TrendDirection.UP
    if second < first:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def calculate_trends(trades: Sequence[Trade]) -> PerformanceTrends:
    """Compare the older half of the trades with the newer half."""
    if len(trades) < 2:
        return PerformanceTrends()

    ordered = chronological(trades)
    mid = len(ordered) // 2
    first, second = ordered[:mid], ordered[mid:]

    return PerformanceTrends(
        pnl_trend=_direction(sum(t.profit_loss for t in first), sum(t.profit_loss for t in second)),
        win_rate_trend=_direction(calculate_win_rate(first), calculate_win_rate(second)),
        risk_trend=_direction(average_risk_used(first) or 0.0, average_risk_used(second) or 0.0),
    )


STATE_ALERTS = {
    PsychologicalState.AGGRESSIVE: Alert(
        AlertType.WARNING, "Aggressive behavior detected - reduce risk to plan level", AlertPriority.HIGH),
    PsychologicalState.HESITANT: Alert(
        AlertType.INFO, "Hesitancy detected - define clear exit rules and trust them", AlertPriority.MEDIUM),
    PsychologicalState.OVEREXTENDED: Alert(
        AlertType.WARNING, "Overextended - respect daily trade cap and session plan", AlertPriority.HIGH),
}


def generate_alerts(trades: Sequence[Trade], state: Optional[StateAnalysis] = None) -> list[Alert]:
    """Rule-based alerts on win rate, risk level, recent form and current state."""
    if not trades:
        return []

    alerts = []
    win_rate = calculate_win_rate(trades)
    recent_win_rate = calculate_win_rate(chronological(trades)[-RECENT_FORM_TRADES:])

    if win_rate >= 0.7:
        alerts.append(Alert(AlertType.SUCCESS, "Excellent win rate achieved", AlertPriority.MEDIUM))
    elif win_rate <= 0.3:
        alerts.append(Alert(AlertType.WARNING, "Low win rate - review trading strategy", AlertPriority.HIGH))

    avg_risk = average_risk_used(trades)
    if avg_risk is not None:
        if avg_risk > 3:
            alerts.append(Alert(AlertType.WARNING, "Risk per trade above recommended level", AlertPriority.HIGH))
        elif avg_risk < 1:
            alerts.append(Alert(AlertType.INFO, "Consider increasing position sizes gradually", AlertPriority.LOW))

    if recent_win_rate > win_rate + 0.2:
        alerts.append(Alert(AlertType.SUCCESS, "Recent performance showing improvement", AlertPriority.MEDIUM))
    elif recent_win_rate < win_rate - 0.2:
        alerts.append(Alert(AlertType.WARNING, "Recent performance declining", AlertPriority.HIGH))

    if state is not None and state.state in STATE_ALERTS:
        alerts.append(STATE_ALERTS[state.state])

    return alerts


def calculate_dashboard_stats(trades: Sequence[Trade], state: Optional[StateAnalysis] = None) -> DashboardStats:
    """
    Compute every dashboard figure for a trade window.

    Args:
        trades: Trade window, usually the same recent trades the state was classified on
        state: Current state analysis used for state alerts

    Returns:
        DashboardStats
    """
    stats = DashboardStats(
        summary=calculate_summary_stats(trades),
        risk_metrics=calculate_risk_metrics(trades),
        session_performance=tuple(calculate_session_performance(trades)),
        daily_pnl=tuple(calculate_daily_pnl(trades)),
        trends=calculate_trends(trades),
        alerts=tuple(generate_alerts(trades, state)),
        state=state.state if state is not None else None,
    )

    logger.debug("Dashboard stats computed", trades=len(trades), alerts=len(stats.alerts))
    return stats
