"""
Improvement detector.

Six boolean checks over the last few trades, reported in fixed priority
order. The highest-priority passing check becomes the headline message.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import structlog

from ..config.defaults import DEFAULT_CONFIG, BehaviorParams
from ..data.models import Trade, TradingPlan, effective_plan_risk
from ..metrics.behavior import consecutive_pairs, count_impulsive_reentries, gap_hours, has_revenge_trade, has_stable_risk
from ..models.patterns import Improvement, PerformanceWindow

logger = structlog.get_logger(__name__)

PARAMS: BehaviorParams = DEFAULT_CONFIG.behavior

IMPROVEMENTS: tuple[Improvement, ...] = (
    Improvement(
        "avoided_revenge", 1,
        "You treated losses as information, not a signal to act. By stepping back instead of chasing "
        "recovery, you maintained emotional balance and allowed discipline to guide your next decision.",
        "No revenge trades detected after losses",
    ),
    Improvement(
        "stable_risk", 2,
        "You respected your predefined risk limits across all trades, keeping position sizing and exposure "
        "consistent. This kind of risk discipline allows your edge to play out over time without "
        "unnecessary drawdowns.",
        "All trades within planned risk parameters",
    ),
    Improvement(
        "no_impulsive", 3,
        "Trades were spaced with intention, allowing enough time between decisions to reset mentally. This "
        "helped prevent emotionally driven re-entries and kept execution aligned with logic rather than "
        "impulse.",
        "No impulsive re-entries detected",
    ),
    Improvement(
        "improved_plan_control", 4,
        "Your recent executions show stronger alignment with your trading plan compared to previous "
        "sessions. This suggests growing consistency between what you intend to do and what you actually "
        "execute in the market.",
        "Plan compliance improved vs previous trades",
    ),
    Improvement(
        "no_hesitation", 5,
        "When trades moved in your favour, you allowed them the space to develop instead of exiting early. "
        "This reflects increased comfort with open profit and reduced fear of giving gains back.",
        "No early exits on winning trades",
    ),
    Improvement(
        "consistent_timing", 6,
        "Your trade timing remained well-paced, avoiding clusters of back-to-back executions. This rhythm "
        "supports clearer thinking, lowers mental fatigue, and reduces the likelihood of overtrading.",
        "Trades spaced 1-4 hours apart",
    ),
)


@dataclass(frozen=True)
class ImprovementContext:
    """Inputs shared by the improvement checks"""
    trades: Sequence[Trade]
    plan_risk: float
    current_plan_control: float
    previous_plan_control: Optional[float]
    params: BehaviorParams


def avoided_revenge(ctx: ImprovementContext) -> bool:
    if len(ctx.trades) < 2:
        return True
    return not has_revenge_trade(ctx.trades, ctx.plan_risk, ctx.params)


def stable_risk(ctx: ImprovementContext) -> bool:
    return has_stable_risk(ctx.trades, ctx.plan_risk, ctx.params)


def no_impulsive_entries(ctx: ImprovementContext) -> bool:
    return count_impulsive_reentries(ctx.trades, ctx.params) == 0


def improved_plan_control(ctx: ImprovementContext) -> bool:
    if ctx.previous_plan_control is None:
        return False
    return ctx.current_plan_control > ctx.previous_plan_control


def no_hesitation(ctx: ImprovementContext) -> bool:
    return not any(t.exited_early for t in ctx.trades)


def consistent_timing(ctx: ImprovementContext) -> bool:
    """Every gap between consecutive trades within 1-4 hours."""
    low, high = ctx.params.improvement_timing_hours
    return all(low <= gap_hours(prev, curr) <= high for prev, curr in consecutive_pairs(ctx.trades))


IMPROVEMENT_CHECKS: dict[str, Callable[[ImprovementContext], bool]] = {
    "avoided_revenge": avoided_revenge,
    "stable_risk": stable_risk,
    "no_impulsive": no_impulsive_entries,
    "improved_plan_control": improved_plan_control,
    "no_hesitation": no_hesitation,
    "consistent_timing": consistent_timing,
}


def detect_improvements(ctx: ImprovementContext) -> list[Improvement]:
    """Every passing improvement, highest priority first."""
    detected = [i for i in IMPROVEMENTS if IMPROVEMENT_CHECKS[i.id](ctx)]
    return sorted(detected, key=lambda i: i.priority)


def get_performance_window(trades: Sequence[Trade], plan: Optional[TradingPlan], current_plan_control: float,
                           previous_plan_control: Optional[float] = None,
                           params: BehaviorParams = PARAMS) -> PerformanceWindow:
    """
    Detect behavioral improvements in the latest trades.

    Args:
        trades: The last (up to 5) trades, any order
        plan: Active trading plan
        current_plan_control: Plan control % of these trades
        previous_plan_control: Plan control % of the window before, if any

    Returns:
        PerformanceWindow headed by the highest-priority improvement
    """
    if not trades:
        return PerformanceWindow()

    ctx = ImprovementContext(
        trades=trades,
        plan_risk=effective_plan_risk(plan),
        current_plan_control=current_plan_control,
        previous_plan_control=previous_plan_control,
        params=params,
    )
    improvements = detect_improvements(ctx)
    top = improvements[0] if improvements else None

    logger.info("Improvements detected", count=len(improvements), top=top.id if top else None,
                trades=len(trades))

    return PerformanceWindow(
        has_improvement=top is not None,
        message=top.message if top else None,
        description=top.description if top else None,
        trades_analyzed=len(trades),
        improvements=tuple(improvements),
    )
