"""
Behavior heatmap over eight 3-hour windows of the UTC day.

Each window with trades gets a weighted discipline score built from its
win/loss balance, plan compliance and five behavior penalties, a traffic
light color and a short reason. A single insight is then derived across
the active windows.
"""

from datetime import date
from typing import Optional, Sequence

from ..config.defaults import DEFAULT_CONFIG, BehaviorParams
from ..data.models import Trade, TradingPlan, effective_plan_risk
from ..logging import get_scoring_logger, log_score_result
from ..metrics.behavior import count_impulsive_reentries, is_low_target_win, is_oversized, is_undersized
from ..metrics.primitives import risk_values
from ..models.scores import (
    BehaviorHeatmap,
    BehaviorHeatmapSnapshot,
    HeatmapColor,
    HeatmapInsight,
    HeatmapWindow,
    InsightTone,
    TimeWindow,
    WindowMetrics,
)
from ..utils.stats import clamp, pstdev, round_score
from ..utils.time import to_utc
from .plan_control import score_trades

logger = get_scoring_logger(__name__)

PARAMS: BehaviorParams = DEFAULT_CONFIG.behavior

TIME_WINDOWS: tuple[TimeWindow, ...] = (
    TimeWindow("00-03", "12 AM - 3 AM", 0, 3),
    TimeWindow("03-06", "3 AM - 6 AM", 3, 6),
    TimeWindow("06-09", "6 AM - 9 AM", 6, 9),
    TimeWindow("09-12", "9 AM - 12 PM", 9, 12),
    TimeWindow("12-15", "12 PM - 3 PM", 12, 15),
    TimeWindow("15-18", "3 PM - 6 PM", 15, 18),
    TimeWindow("18-21", "6 PM - 9 PM", 18, 21),
    TimeWindow("21-24", "9 PM - 12 AM", 21, 24),
)

# Component weights of the window score
SCORE_WEIGHTS = {
    "win_loss": 0.20,
    "plan_compliance": 0.30,
    "impulsiveness": 0.15,
    "hesitation": 0.15,
    "risk_deviation": 0.10,
    "volatility": 0.05,
    "frequency": 0.05,
}

GREEN_FLOOR = 70
YELLOW_FLOOR = 40


def get_time_window(trade: Trade) -> TimeWindow:
    """Window containing the trade's UTC entry hour."""
    hour = to_utc(trade.entry_time).hour
    return next(w for w in TIME_WINDOWS if w.contains(hour))


def win_loss_expectancy(trades: Sequence[Trade]) -> float:
    """(wins - losses) / n * 50 + 50, so all wins is 100 and all losses is 0."""
    if not trades:
        return 50.0
    wins = sum(1 for t in trades if t.is_win)
    losses = sum(1 for t in trades if t.is_loss)
    return clamp((wins - losses) / len(trades) * 50 + 50)


def window_plan_compliance(trades: Sequence[Trade], plan: Optional[TradingPlan],
                           params: BehaviorParams = PARAMS) -> int:
    if not trades:
        return 50
    scores = score_trades(trades, plan, params)
    return round_score(sum(s.score for s in scores) / len(scores))


def impulsiveness_penalty(trades: Sequence[Trade], params: BehaviorParams = PARAMS) -> int:
    return min(count_impulsive_reentries(trades, params) * 15, 100)


def hesitation_penalty(trades: Sequence[Trade], params: BehaviorParams = PARAMS) -> int:
    hesitant = sum(1 for t in trades if t.exited_early or is_low_target_win(t, params))
    return min(hesitant * 10, 100)


def risk_deviation_penalty(trades: Sequence[Trade], plan_risk: float) -> int:
    """Risk standard deviation relative to plan risk; a deviation of 2x plan risk is the maximum."""
    risks = risk_values(trades)
    if not risks or not plan_risk:
        return 0
    return round_score(min(pstdev(risks) / plan_risk * 50, 100))


def volatility_penalty(trades: Sequence[Trade], plan_risk: float, params: BehaviorParams = PARAMS) -> int:
    """20 when the window mixes oversized and undersized trades."""
    if len(trades) < 2 or not plan_risk:
        return 0
    oversized = any(is_oversized(t, plan_risk, params.oversize_multiplier) for t in trades)
    undersized = any(is_undersized(t, plan_risk, params) for t in trades)
    return 20 if oversized and undersized else 0


def frequency_penalty(trades: Sequence[Trade]) -> int:
    """5 points per trade beyond three, capped at 25."""
    if len(trades) <= 3:
        return 0
    return min((len(trades) - 3) * 5, 25)


def calculate_window_score(trades: Sequence[Trade], plan: Optional[TradingPlan],
                           params: BehaviorParams = PARAMS) -> tuple[int, WindowMetrics]:
    """
    Weighted discipline score of one window's trades.

    Args:
        trades: Trades entered in the window
        plan: Active trading plan

    Returns:
        (score 0-100, rounded component metrics)
    """
    plan_risk = effective_plan_risk(plan)

    win_loss = win_loss_expectancy(trades)
    compliance = window_plan_compliance(trades, plan, params)
    impulsiveness = impulsiveness_penalty(trades, params)
    hesitation = hesitation_penalty(trades, params)
    risk_deviation = risk_deviation_penalty(trades, plan_risk)
    volatility = volatility_penalty(trades, plan_risk, params)
    frequency = frequency_penalty(trades)

    score = (
        win_loss * SCORE_WEIGHTS["win_loss"]
        + compliance * SCORE_WEIGHTS["plan_compliance"]
        + (100 - impulsiveness) * SCORE_WEIGHTS["impulsiveness"]
        + (100 - hesitation) * SCORE_WEIGHTS["hesitation"]
        + (100 - risk_deviation) * SCORE_WEIGHTS["risk_deviation"]
        + (100 - volatility) * SCORE_WEIGHTS["volatility"]
        + (100 - frequency) * SCORE_WEIGHTS["frequency"]
    )

    metrics = WindowMetrics(
        win_loss=round_score(win_loss),
        plan_compliance=compliance,
        impulsiveness=impulsiveness,
        hesitation=hesitation,
        risk_deviation=risk_deviation,
        volatility=volatility,
        frequency=frequency,
    )
    return round_score(clamp(score)), metrics


def color_for_score(score: int) -> HeatmapColor:
    if score >= GREEN_FLOOR:
        return HeatmapColor.GREEN
    if score >= YELLOW_FLOOR:
        return HeatmapColor.YELLOW
    return HeatmapColor.RED


def window_message(color: HeatmapColor, metrics: WindowMetrics) -> str:
    """Name up to two issues behind a yellow or red window."""
    if color == HeatmapColor.GREEN:
        return "Disciplined trading in this window"

    issues = [
        label for label, present in (
            ("Impulsiveness", metrics.impulsiveness > 0),
            ("Hesitation", metrics.hesitation > 0),
            ("Overtrading", metrics.frequency > 0),
            ("Volatility", metrics.volatility > 0),
            ("Risk Consistency", metrics.risk_deviation > 10),
            ("Plan Compliance", metrics.plan_compliance < 85),
        ) if present
    ] or ["Plan Consistency"]

    issue_text = " & ".join(issues[:2])
    if color == HeatmapColor.YELLOW:
        return f"Mixed behavior - Watch: {issue_text}"
    return f"Emotional trading detected - {issue_text}"


def _empty_window(window: TimeWindow) -> HeatmapWindow:
    return HeatmapWindow(window=window, score=None, color=HeatmapColor.GREY, trade_count=0,
                         metrics=None, message="No trades in this window")


def calculate_behavior_heatmap(trades: Sequence[Trade], plan: Optional[TradingPlan],
                               params: BehaviorParams = PARAMS) -> BehaviorHeatmap:
    """Score every time window; windows without trades are grey with no score."""
    by_window: dict[str, list[Trade]] = {w.id: [] for w in TIME_WINDOWS}
    for trade in trades:
        by_window[get_time_window(trade).id].append(trade)

    windows = []
    for window in TIME_WINDOWS:
        window_trades = by_window[window.id]
        if not window_trades:
            windows.append(_empty_window(window))
            continue

        score, metrics = calculate_window_score(window_trades, plan, params)
        color = color_for_score(score)
        windows.append(HeatmapWindow(
            window=window,
            score=score,
            color=color,
            trade_count=len(window_trades),
            metrics=metrics,
            message=window_message(color, metrics),
        ))
        logger.debug("Heatmap window scored", window=window.id, score=score, trades=len(window_trades))

    return BehaviorHeatmap(windows=tuple(windows), total_trades=len(trades))


def derive_heatmap_insight(windows: Sequence[HeatmapWindow]) -> HeatmapInsight:
    """
    Pick the single most telling pattern across active windows.

    Rules are checked in order: peak activity with poor discipline, best
    discipline at low activity, several red windows, mostly green, a large
    best/worst gap, and a neutral fallback.
    """
    active = [w for w in windows if w.score is not None and w.trade_count > 0]
    if not active:
        return HeatmapInsight(message="Insufficient data to derive behavioral insights")

    by_score = sorted(active, key=lambda w: w.score, reverse=True)
    best, worst = by_score[0], by_score[-1]
    busiest = sorted(active, key=lambda w: w.trade_count, reverse=True)[0]

    busy_and_poor = any(w.trade_count >= 3 and w.score < 50 for w in active)
    quiet_and_good = any(w.trade_count <= 2 and w.score >= 70 for w in active)
    red = sum(1 for w in active if w.color == HeatmapColor.RED)
    green = sum(1 for w in active if w.color == HeatmapColor.GREEN)

    if busy_and_poor and busiest.score < 50:
        return HeatmapInsight(
            InsightTone.WARNING,
            f"Highest activity period ({busiest.window.label}) correlates with lower discipline scores",
            "Consider reducing trade frequency during peak activity windows",
        )
    if quiet_and_good and best.trade_count <= 2:
        return HeatmapInsight(
            InsightTone.POSITIVE,
            f"Best discipline ({best.score}%) occurs during {best.window.label} with fewer trades",
            "Lower trade frequency appears to improve decision quality",
        )
    if red >= 2:
        return HeatmapInsight(
            InsightTone.WARNING,
            f"Emotional trading detected in {red} time windows - patterns need attention",
            "Review trades during red-flagged periods for common triggers",
        )
    if green >= len(active) / 2:
        return HeatmapInsight(
            InsightTone.POSITIVE,
            "Disciplined trading across most active time windows",
            "Maintain current approach - consistency is strong",
        )
    if worst.score < 40 and best.score > 70:
        return HeatmapInsight(
            InsightTone.WARNING,
            f"Large behavior gap: {best.window.label} ({best.score}%) vs "
            f"{worst.window.label} ({worst.score}%)",
            f"Consider avoiding {worst.window.label} or applying stricter rules during that time",
        )
    return HeatmapInsight(
        InsightTone.NEUTRAL,
        "Mixed behavioral patterns across time windows",
        "Focus on improving consistency across all trading periods",
    )


def calculate_behavior_heatmap_with_insight(trades: Sequence[Trade], plan: Optional[TradingPlan],
                                            params: BehaviorParams = PARAMS) -> BehaviorHeatmap:
    """
    Heatmap of all time windows plus the derived insight.

    Args:
        trades: Trades to place on the heatmap, any order
        plan: Active trading plan

    Returns:
        BehaviorHeatmap with eight windows and one insight
    """
    heatmap = calculate_behavior_heatmap(trades, plan, params)
    insight = derive_heatmap_insight(heatmap.windows)

    log_score_result(logger, "behavior_heatmap", None, insight.type.value, len(trades),
                     {"active_windows": len(heatmap.active_windows)})

    return BehaviorHeatmap(windows=heatmap.windows, total_trades=heatmap.total_trades, insight=insight)


def build_heatmap_snapshot(heatmap: BehaviorHeatmap, day: date) -> BehaviorHeatmapSnapshot:
    """Per-day record of a heatmap for the persistence layer."""
    return BehaviorHeatmapSnapshot(
        date=day,
        windows=heatmap.windows,
        insight=heatmap.insight,
        total_trades=heatmap.total_trades,
    )
