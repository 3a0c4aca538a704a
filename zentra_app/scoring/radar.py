"""
Psychological radar: six behavioral traits scored over the last five trades.
"""

from typing import Optional, Sequence

from ..config.defaults import DEFAULT_CONFIG, BehaviorParams
from ..data.models import Trade, TradingPlan, effective_plan_risk
from ..logging import get_scoring_logger, log_score_result
from ..metrics.behavior import (
    count_impulsive_reentries,
    has_long_gap,
    has_revenge_trade,
    has_steady_spacing,
    is_high_risk,
    is_low_target_win,
    is_oversized,
)
from ..metrics.primitives import average_risk_used, most_recent_first, risk_values
from ..models.scores import RadarResult, RadarTraits
from ..utils.stats import clamp, coefficient_of_variation_pct, round_score
from .plan_control import calculate_plan_control

logger = get_scoring_logger(__name__)

PARAMS: BehaviorParams = DEFAULT_CONFIG.behavior


def calculate_discipline(trades: Sequence[Trade], plan: Optional[TradingPlan], plan_control_percent: float,
                         params: BehaviorParams = PARAMS) -> int:
    """Plan control, +10 with no oversized trade, +5 with no session violation."""
    plan_risk = effective_plan_risk(plan)
    score = plan_control_percent

    if not any(is_oversized(t, plan_risk, params.oversize_multiplier) for t in trades):
        score += 10
    if plan is None or all(plan.allows_session(t.session) for t in trades):
        score += 5

    return min(100, round_score(score))


def calculate_impulse_control(trades: Sequence[Trade], params: BehaviorParams = PARAMS) -> int:
    """100 minus 20 points per impulsive re-entry."""
    impulsive = count_impulsive_reentries(trades, params)
    return max(0, round_score(100 - impulsive / params.recent_trades * 100))


def calculate_aggression(trades: Sequence[Trade], plan: Optional[TradingPlan],
                         params: BehaviorParams = PARAMS) -> int:
    """Average risk relative to plan (1x = 50), +20 for any trade over 1.5x, +15 for a revenge trade."""
    if not trades:
        return 0

    plan_risk = effective_plan_risk(plan)
    avg_risk = average_risk_used(trades)
    score = avg_risk / plan_risk * 50 if avg_risk is not None else 0.0

    if any(is_high_risk(t, plan_risk, params) for t in trades):
        score += 20
    if has_revenge_trade(trades, plan_risk, params):
        score += 15

    return min(100, round_score(score))


def calculate_hesitation(trades: Sequence[Trade], params: BehaviorParams = PARAMS) -> int:
    """20 points per early exit, +20 for a low-target win, +15 for a gap over 4 hours."""
    if not trades:
        return 0

    early_exits = sum(1 for t in trades if t.exited_early)
    score = early_exits / params.recent_trades * 100

    if any(is_low_target_win(t, params) for t in trades):
        score += 20
    if has_long_gap(trades, params):
        score += 15

    return min(100, round_score(score))


def calculate_consistency(trades: Sequence[Trade], plan: Optional[TradingPlan],
                          params: BehaviorParams = PARAMS) -> int:
    """100 minus risk variability %, +10 when all trades are in preferred sessions, +5 for steady spacing."""
    if not trades:
        return 100

    score = 100 - coefficient_of_variation_pct(risk_values(trades))

    if plan is None or all(plan.allows_session(t.session) for t in trades):
        score += 10
    if len(trades) > 1 and has_steady_spacing(trades, params.stable_timing_hours):
        score += 5

    return round_score(clamp(score))


def calculate_emotional_volatility(aggression: float, hesitation: float) -> int:
    """Half the aggression/hesitation gap, +20 when both exceed 60."""
    volatility = abs(aggression - hesitation) / 2
    if aggression > 60 and hesitation > 60:
        volatility += 20
    return min(100, round_score(volatility))


def radar_message(traits: RadarTraits) -> str:
    if traits.discipline >= 70 and traits.impulse_control >= 70 and traits.emotional_volatility < 30:
        return "Psychological profile shows strong discipline and control"
    if traits.aggression > 70:
        return "High aggression detected - consider reviewing risk management"
    if traits.impulse_control < 50:
        return "Low impulse control - practice patience between trades"
    if traits.emotional_volatility > 60:
        return "Emotional volatility detected - consider taking a break"
    return "Balanced psychological state with areas for improvement"


def calculate_psychological_radar(trades: Sequence[Trade], plan: Optional[TradingPlan],
                                  params: BehaviorParams = PARAMS) -> RadarResult:
    """
    Score the six radar traits.

    Args:
        trades: Trades in any order; the 5 most recent are used
        plan: Active trading plan

    Returns:
        RadarResult with traits in 0-100
    """
    if not trades:
        return RadarResult(traits=RadarTraits(), trades_analyzed=0, message="No trades to analyze")

    recent = most_recent_first(trades)[:params.recent_trades]
    plan_control = calculate_plan_control(recent, plan, params).percentage

    aggression = calculate_aggression(recent, plan, params)
    hesitation = calculate_hesitation(recent, params)
    traits = RadarTraits(
        discipline=calculate_discipline(recent, plan, plan_control, params),
        impulse_control=calculate_impulse_control(recent, params),
        aggression=aggression,
        hesitation=hesitation,
        consistency=calculate_consistency(recent, plan, params),
        emotional_volatility=calculate_emotional_volatility(aggression, hesitation),
    )

    log_score_result(logger, "psychological_radar", None, None, len(recent), {
        "discipline": traits.discipline,
        "impulse_control": traits.impulse_control,
        "aggression": traits.aggression,
        "hesitation": traits.hesitation,
        "consistency": traits.consistency,
        "emotional_volatility": traits.emotional_volatility,
    })

    return RadarResult(traits=traits, trades_analyzed=len(recent), message=radar_message(traits))
