"""
Plan control scoring with deviation attribution.

Each recent trade earns points for the plan rules it respected; the plan
control percentage is their mean. Trades scoring below 70 are deviations,
and the attribution ranks the behavioral causes most often behind them.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import structlog

from ..config.defaults import DEFAULT_CONFIG, BehaviorParams
from ..data.models import Trade, TradingPlan, allows_session, effective_plan_risk, effective_target_rr
from ..metrics.behavior import gap_minutes, is_correct_size
from ..metrics.primitives import chronological, most_recent_first
from ..models.scores import (
    Criterion,
    CriterionResult,
    DeviationAttribution,
    DeviationCause,
    PlanControlResult,
    TradeScore,
)
from ..utils.stats import round_score
from ..utils.time import to_utc

logger = structlog.get_logger(__name__)

PARAMS: BehaviorParams = DEFAULT_CONFIG.behavior

CRITERION_POINTS = {
    Criterion.ALLOWED_SESSION: 20,
    Criterion.PROPER_SL_TP: 30,
    Criterion.CORRECT_POSITION_SIZE: 25,
    Criterion.NOTES: 10,
    Criterion.TIMING: 15,
}

NO_TRADES_MESSAGE = "No trades to analyze"


def has_proper_sl_tp(trade: Trade, target_rr: float, near_target_pct: float = 80.0) -> bool:
    """Stop respected with target nearly reached, or the achieved R:R met the plan."""
    pct = trade.target_percent_achieved
    if not trade.stop_loss_hit and pct is not None and pct >= near_target_pct:
        return True
    rr = trade.risk_reward_achieved
    return rr is not None and rr >= target_rr


def has_timing_discipline(trade: Trade, previous: Optional[Trade], params: BehaviorParams = PARAMS) -> bool:
    """At least 30 minutes since the previous exit. The first trade always passes."""
    if previous is None:
        return True
    return gap_minutes(previous, trade) >= params.impulsive_gap_minutes


def calculate_trade_score(trade: Trade, plan: Optional[TradingPlan], previous: Optional[Trade] = None,
                          params: BehaviorParams = PARAMS) -> TradeScore:
    """
    Score one trade against the plan.

    Args:
        trade: Trade to score
        plan: Active plan; a missing plan allows every session and uses 1% risk / 1R target
        previous: Chronologically previous trade, for the timing rule
        params: Behavior thresholds

    Returns:
        TradeScore with per-criterion breakdown
    """
    checks = {
        Criterion.ALLOWED_SESSION: allows_session(plan, trade.session),
        Criterion.PROPER_SL_TP: has_proper_sl_tp(trade, effective_target_rr(plan)),
        Criterion.CORRECT_POSITION_SIZE: is_correct_size(trade, effective_plan_risk(plan), params),
        Criterion.NOTES: trade.has_notes,
        Criterion.TIMING: has_timing_discipline(trade, previous, params),
    }

    breakdown = tuple(
        CriterionResult(criterion, CRITERION_POINTS[criterion] if passed else 0, passed)
        for criterion, passed in checks.items()
    )
    return TradeScore(trade=trade, score=sum(c.points for c in breakdown), breakdown=breakdown)


def score_trades(trades: Sequence[Trade], plan: Optional[TradingPlan],
                 params: BehaviorParams = PARAMS) -> list[TradeScore]:
    """Score trades in chronological order, each against its predecessor."""
    ordered = chronological(trades)
    return [
        calculate_trade_score(trade, plan, ordered[i - 1] if i > 0 else None, params)
        for i, trade in enumerate(ordered)
    ]


def plan_control_message(percentage: int) -> str:
    if percentage >= 80:
        return ("You executed with strong alignment to your trading plan. Decisions were deliberate, "
                "risk was respected, and emotion stayed secondary to process. This is a high-control "
                "state, so protect it.")
    if percentage >= 60:
        return ("You followed your plan for the most part, but certain moments showed hesitation or "
                "premature decision-making. This often reflects doubt rather than poor analysis. "
                "Strengthen trust in your process and allow trades to play out as designed.")
    if percentage >= 40:
        return ("Your execution consistency is unstable. Several trades deviated from your plan during "
                "moments of uncertainty or emotional pressure. Focus on slowing decision-making and "
                "tightening pre-trade criteria.")
    return ("Your plan was frequently overridden by impulse or emotion. Stress, urgency, or outcome-focus "
            "likely took control. Step back, reduce exposure, and rebuild discipline before increasing "
            "activity.")


def calculate_plan_control(trades: Sequence[Trade], plan: Optional[TradingPlan],
                           params: BehaviorParams = PARAMS) -> PlanControlResult:
    """
    Plan control percentage over the 5 most recent trades.

    Args:
        trades: Trades in any order
        plan: Active trading plan

    Returns:
        PlanControlResult (0% with no trades)
    """
    if not trades:
        return PlanControlResult(percentage=0, trades_analyzed=0, message=NO_TRADES_MESSAGE)

    recent = most_recent_first(trades)[:params.recent_trades]
    scores = score_trades(recent, plan, params)
    percentage = round_score(sum(s.score for s in scores) / len(scores))

    logger.debug("Plan control computed", percentage=percentage, trades=len(scores))

    return PlanControlResult(
        percentage=percentage,
        trades_analyzed=len(scores),
        message=plan_control_message(percentage),
        trade_scores=tuple(scores),
    )


@dataclass(frozen=True)
class DeviationCounts:
    """Occurrence counts the attribution rules weigh"""
    deviations: int
    battery_level: Optional[float]
    high_frequency: int
    timing: int
    position_size: int
    session: int
    after_wins: int
    after_losses: int


@dataclass(frozen=True)
class CauseRule:
    cause: DeviationCause
    weight: Callable[[DeviationCounts], float]      # 0 means the rule does not apply
    message: str


def _at_least_two(count: int, factor: float = 1.0) -> float:
    return count * factor if count >= 2 else 0


CAUSE_RULES: tuple[CauseRule, ...] = (
    CauseRule(
        DeviationCause.LOW_BATTERY,
        lambda c: 3 if c.battery_level is not None and c.battery_level < 50 else 0,
        "Most plan deviations occurred when mental battery was low",
    ),
    CauseRule(
        DeviationCause.HIGH_FREQUENCY,
        lambda c: c.high_frequency * 2,
        "Plan deviations cluster during high-frequency trading periods",
    ),
    CauseRule(
        DeviationCause.IMPULSIVE_TIMING,
        lambda c: _at_least_two(c.timing),
        "Impulsive re-entries are the main deviation pattern",
    ),
    CauseRule(
        DeviationCause.POSITION_SIZING,
        lambda c: _at_least_two(c.position_size),
        "Position sizing deviations are frequent - risk management slipping",
    ),
    CauseRule(
        DeviationCause.SESSION_VIOLATION,
        lambda c: _at_least_two(c.session),
        "Trading outside preferred sessions leads to more rule breaks",
    ),
    CauseRule(
        DeviationCause.AFTER_WINS,
        lambda c: _at_least_two(c.after_wins),
        "Plan deviations increase after consecutive wins - overconfidence risk",
    ),
    CauseRule(
        DeviationCause.AFTER_LOSSES,
        lambda c: _at_least_two(c.after_losses, 1.5),
        "Plan deviations follow losses - possible revenge trading pattern",
    ),
)


def _previous_closed(trade: Trade, trades: Sequence[Trade]) -> Optional[Trade]:
    """Most recent trade that had closed before this one was entered."""
    closed = [t for t in trades if to_utc(t.exit_time) < to_utc(trade.entry_time)]
    return max(closed, key=lambda t: to_utc(t.entry_time)) if closed else None


def count_deviations(trade_scores: Sequence[TradeScore], battery_level: Optional[float] = None,
                     params: BehaviorParams = PARAMS) -> DeviationCounts:
    """Tally failed criteria and sequencing patterns among deviating trades."""
    trades = [s.trade for s in trade_scores]
    deviations = sorted((s for s in trade_scores if s.score < params.deviation_score),
                        key=lambda s: to_utc(s.entry_time))

    high_frequency = sum(
        1 for prev, curr in zip(deviations, deviations[1:])
        if gap_minutes(prev.trade, curr.trade) < params.impulsive_gap_minutes
    )

    after_wins = after_losses = 0
    for deviation in deviations[1:]:
        previous = _previous_closed(deviation.trade, trades)
        if previous is not None and previous.is_win:
            after_wins += 1
        elif previous is not None and previous.is_loss:
            after_losses += 1

    return DeviationCounts(
        deviations=len(deviations),
        battery_level=battery_level,
        high_frequency=high_frequency,
        timing=sum(1 for s in deviations if s.failed(Criterion.TIMING)),
        position_size=sum(1 for s in deviations if s.failed(Criterion.CORRECT_POSITION_SIZE)),
        session=sum(1 for s in deviations if s.failed(Criterion.ALLOWED_SESSION)),
        after_wins=after_wins,
        after_losses=after_losses,
    )


def analyze_deviation_attribution(trade_scores: Sequence[TradeScore], battery_level: Optional[float] = None,
                                  params: BehaviorParams = PARAMS) -> DeviationAttribution:
    """
    Rank the likely causes of plan deviations.

    Args:
        trade_scores: Scored trades of the plan control window
        battery_level: Current mental battery, enables the low-battery cause
        params: Behavior thresholds

    Returns:
        DeviationAttribution with the top cause and up to 3 cause messages
    """
    counts = count_deviations(trade_scores, battery_level, params)

    if counts.deviations == 0:
        return DeviationAttribution(message="No significant plan deviations detected")

    weighted = [(rule.weight(counts), rule) for rule in CAUSE_RULES]
    # sorted() is stable, so equal weights keep rule order
    ranked = sorted((item for item in weighted if item[0] > 0), key=lambda item: item[0], reverse=True)

    if not ranked:
        return DeviationAttribution(
            message=f"{counts.deviations} plan deviation(s) detected - review trade discipline"
        )

    primary = ranked[0][1]
    logger.debug("Deviation attribution", primary_cause=primary.cause.value, deviations=counts.deviations)

    return DeviationAttribution(
        primary_cause=primary.cause,
        message=primary.message,
        patterns=tuple(rule.message for _, rule in ranked[:3]),
    )


def calculate_plan_control_with_attribution(trades: Sequence[Trade], plan: Optional[TradingPlan],
                                            battery_level: Optional[float] = None,
                                            params: BehaviorParams = PARAMS) -> PlanControlResult:
    """Plan control percentage plus the attribution of its deviations."""
    result = calculate_plan_control(trades, plan, params)

    if result.trades_analyzed == 0:
        attribution = DeviationAttribution(message=NO_TRADES_MESSAGE)
    else:
        attribution = analyze_deviation_attribution(result.trade_scores, battery_level, params)

    return PlanControlResult(
        percentage=result.percentage,
        trades_analyzed=result.trades_analyzed,
        message=result.message,
        trade_scores=result.trade_scores,
        deviation_attribution=attribution,
    )
