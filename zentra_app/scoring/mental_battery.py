"""
Mental battery scoring.

The battery starts each day full and is drained by the day's stress
behaviors (impulsive re-entries, oversized trades, clusters, large losses,
mixed impulsive/hesitant behavior) and recharged by disciplined ones.
"""

from typing import Optional, Sequence

from ..config.defaults import DEFAULT_CONFIG, BatteryParams, BehaviorParams
from ..data.models import Trade, TradingPlan, effective_plan_risk
from ..logging import get_scoring_logger, log_score_result
from ..metrics.behavior import (
    count_disciplined_pauses,
    detect_clusters,
    has_emotional_volatility,
    has_stable_risk,
    is_impulsive_reentry,
    is_large_loss,
    is_oversized,
)
from ..metrics.primitives import chronological
from ..models.scores import (
    BatteryFactor,
    BatteryRiskLevel,
    BatteryStatus,
    BehavioralInterpretation,
    MentalBatteryResult,
)
from ..utils.stats import clamp, round_score

logger = get_scoring_logger(__name__)

PARAMS: BatteryParams = DEFAULT_CONFIG.battery
BEHAVIOR: BehaviorParams = DEFAULT_CONFIG.behavior

STATUS_MESSAGES = {
    BatteryStatus.OPTIMAL: "Mental state is optimal for trading",
    BatteryStatus.STRAINED: "Mental energy is strained - consider taking a break",
    BatteryStatus.HIGH_RISK: "High-risk emotional state - strongly recommend pausing trading",
}

# Risk bands, highest floor first: (floor, level, patterns, recommendation)
INTERPRETATION_BANDS = (
    (80, BatteryRiskLevel.LOW, (
        "Decision quality is typically strong at this level",
        "Impulse control remains high",
    ), "Good state for trading - maintain current discipline"),
    (50, BatteryRiskLevel.MODERATE, (
        "Impulsive trades increase by ~40% in this range",
        "Plan adherence may start to slip",
    ), "Consider reducing position sizes or trade frequency"),
    (30, BatteryRiskLevel.ELEVATED, (
        "Impulsive trades increase 2-3x below 50%",
        "Risk of revenge trading rises significantly",
        "Plan adherence typically drops by 25-40%",
    ), "Strongly consider taking a break before next trade"),
    (0, BatteryRiskLevel.CRITICAL, (
        "Decision quality is severely compromised",
        "Revenge trading likelihood is very high",
        "Most significant losses occur at this battery level",
    ), "Stop trading - take extended break to recover"),
)

DRAIN_PATTERNS = {
    "impulsive_reentry": "Impulsive re-entries detected - patience is wearing thin",
    "large_loss": "Large losses affecting emotional state - revenge trade risk elevated",
    "clustered_trades": "Trade clustering suggests urgency-driven decisions",
    "emotional_volatility": "Emotional swings detected - decision consistency at risk",
}


def battery_status(battery: float, params: BatteryParams = PARAMS) -> BatteryStatus:
    if battery >= params.optimal_level:
        return BatteryStatus.OPTIMAL
    if battery >= params.strained_level:
        return BatteryStatus.STRAINED
    return BatteryStatus.HIGH_RISK


def interpret_battery(battery: float, drain_factors: Sequence[BatteryFactor]) -> BehavioralInterpretation:
    """Psychological reading of a battery level, extended by the drains that produced it."""
    _, risk_level, patterns, recommendation = next(
        band for band in INTERPRETATION_BANDS if battery >= band[0]
    )

    drain_types = {f.type for f in drain_factors}
    extra = [message for drain, message in DRAIN_PATTERNS.items() if drain in drain_types]

    return BehavioralInterpretation(
        risk_level=risk_level,
        patterns=tuple(patterns) + tuple(extra),
        recommendation=recommendation,
    )


def _drain_factors(ordered: list[Trade], plan_risk: float, params: BatteryParams,
                   behavior: BehaviorParams) -> list[BatteryFactor]:
    factors = []

    for i in range(1, len(ordered)):
        if is_impulsive_reentry(ordered[i], ordered[i - 1], behavior):
            factors.append(BatteryFactor("impulsive_reentry", -params.impulsive_drain,
                                         f"Impulsive re-entry on trade {i + 1}", trade_index=i))

    for i, trade in enumerate(ordered):
        if is_oversized(trade, plan_risk, behavior.oversize_multiplier):
            factors.append(BatteryFactor(
                "oversized_trade", -params.oversized_drain,
                f"Oversized trade {i + 1} ({trade.risk_percent_used:.1f}% vs {plan_risk}% plan)",
                trade_index=i,
            ))

    clusters = detect_clusters(ordered, behavior, params.max_clusters)
    if clusters > 0:
        factors.append(BatteryFactor("clustered_trades", -clusters * params.cluster_drain,
                                     f"{clusters} trade cluster(s) detected", count=clusters))

    for i, trade in enumerate(ordered):
        if is_large_loss(trade, plan_risk, behavior):
            factors.append(BatteryFactor("large_loss", -params.large_loss_drain,
                                         f"Large loss on trade {i + 1}", trade_index=i))

    if has_emotional_volatility(ordered, behavior):
        factors.append(BatteryFactor("emotional_volatility", -params.volatility_drain,
                                     "Mixed impulsive and hesitant behavior detected"))

    return factors


def _recharge_factors(ordered: list[Trade], plan_risk: float, plan_control: float,
                      params: BatteryParams, behavior: BehaviorParams) -> list[BatteryFactor]:
    factors = []

    pauses = count_disciplined_pauses(ordered, behavior, params.max_pauses)
    if pauses > 0:
        factors.append(BatteryFactor("disciplined_pauses", pauses * params.pause_recharge,
                                     f"{pauses} disciplined pause(s) taken", count=pauses))

    if plan_control >= params.compliance_threshold:
        factors.append(BatteryFactor("high_plan_compliance", params.compliance_recharge,
                                     f"High plan compliance ({plan_control:.0f}%)"))

    if has_stable_risk(ordered, plan_risk, behavior):
        factors.append(BatteryFactor("stable_risk", params.stable_risk_recharge,
                                     "Stable risk management across all trades"))

    return factors


def calculate_mental_battery(today_trades: Sequence[Trade], plan: Optional[TradingPlan],
                             plan_control_percent: float = 0, params: BatteryParams = PARAMS,
                             behavior: BehaviorParams = BEHAVIOR) -> MentalBatteryResult:
    """
    Calculate the mental battery from today's trades.

    Args:
        today_trades: Trades entered today, any order
        plan: Active trading plan
        plan_control_percent: Current plan control score, for the compliance recharge
        params: Drain and recharge amounts
        behavior: Behavior detector thresholds

    Returns:
        MentalBatteryResult with level (0-100), status, interpretation and factors
    """
    if not today_trades:
        return MentalBatteryResult(
            battery=100,
            status=BatteryStatus.OPTIMAL,
            message="No activity today",
        )

    plan_risk = effective_plan_risk(plan)
    ordered = chronological(today_trades)

    drains = _drain_factors(ordered, plan_risk, params, behavior)
    recharges = _recharge_factors(ordered, plan_risk, plan_control_percent, params, behavior)

    battery = clamp(100 + sum(f.impact for f in drains) + sum(f.impact for f in recharges))
    status = battery_status(battery, params)
    interpretation = interpret_battery(battery, drains)

    result = MentalBatteryResult(
        battery=round_score(battery),
        status=status,
        message=STATUS_MESSAGES[status],
        interpretation=interpretation,
        drain_factors=tuple(drains),
        recharge_factors=tuple(recharges),
        trades_analyzed=len(ordered),
    )

    log_score_result(logger, "mental_battery", result.battery, status.value, len(ordered),
                     {"drains": len(drains), "recharges": len(recharges),
                      "risk_level": interpretation.risk_level.value})
    return result
