"""
Trade-sequence behavior detectors shared by the scoring suite.

Detectors that compare consecutive trades sort their input by entry time
first, so callers may pass trades in any order. Gaps are measured from the
previous trade's exit to the next trade's entry.
"""

from typing import Iterable, Optional, Sequence

from ..config.defaults import DEFAULT_CONFIG, BehaviorParams
from ..data.models import Trade
from ..utils.time import hours_between, minutes_between
from .primitives import chronological

PARAMS: BehaviorParams = DEFAULT_CONFIG.behavior


def consecutive_pairs(trades: Iterable[Trade]) -> list[tuple[Trade, Trade]]:
    """(previous, current) pairs in chronological order."""
    ordered = chronological(trades)
    return list(zip(ordered, ordered[1:]))


def gap_minutes(previous: Trade, trade: Trade) -> float:
    """Minutes from the previous exit to this entry (negative when overlapping)."""
    return minutes_between(previous.exit_time, trade.entry_time)


def gap_hours(previous: Trade, trade: Trade) -> float:
    return hours_between(previous.exit_time, trade.entry_time)


def is_impulsive_reentry(trade: Trade, previous: Optional[Trade], params: BehaviorParams = PARAMS) -> bool:
    """Entered within 30 minutes of the previous exit. Overlapping trades do not count."""
    if previous is None:
        return False
    gap = gap_minutes(previous, trade)
    return 0 <= gap < params.impulsive_gap_minutes


def count_impulsive_reentries(trades: Iterable[Trade], params: BehaviorParams = PARAMS) -> int:
    return sum(1 for prev, curr in consecutive_pairs(trades) if is_impulsive_reentry(curr, prev, params))


def is_oversized(trade: Trade, plan_risk: float, multiplier: float = PARAMS.oversize_multiplier) -> bool:
    risk = trade.risk_percent_used
    return risk is not None and risk > plan_risk * multiplier


def is_high_risk(trade: Trade, plan_risk: float, params: BehaviorParams = PARAMS) -> bool:
    return is_oversized(trade, plan_risk, params.high_risk_multiplier)


def is_undersized(trade: Trade, plan_risk: float, params: BehaviorParams = PARAMS) -> bool:
    risk = trade.risk_percent_used
    return risk is not None and risk < plan_risk * params.undersize_multiplier


def is_large_loss(trade: Trade, plan_risk: float, params: BehaviorParams = PARAMS) -> bool:
    return trade.profit_loss < -params.large_loss_multiplier * plan_risk


def is_correct_size(trade: Trade, plan_risk: float, params: BehaviorParams = PARAMS) -> bool:
    """Risk used within plus or minus 10% of plan risk. Unknown risk never qualifies."""
    risk = trade.risk_percent_used
    if risk is None or not plan_risk:
        return False
    return plan_risk * (1 - params.position_tolerance) <= risk <= plan_risk * (1 + params.position_tolerance)


def has_stable_risk(trades: Sequence[Trade], plan_risk: float, params: BehaviorParams = PARAMS) -> bool:
    """Every trade sized within tolerance of the plan."""
    if not trades or not plan_risk:
        return False
    return all(is_correct_size(t, plan_risk, params) for t in trades)


def is_revenge_trade(trade: Trade, previous: Optional[Trade], plan_risk: float,
                     params: BehaviorParams = PARAMS) -> bool:
    """An oversized trade immediately following a loss."""
    return previous is not None and previous.is_loss and is_oversized(trade, plan_risk, params.oversize_multiplier)


def has_revenge_trade(trades: Iterable[Trade], plan_risk: float, params: BehaviorParams = PARAMS) -> bool:
    return any(is_revenge_trade(curr, prev, plan_risk, params) for prev, curr in consecutive_pairs(trades))


def is_low_target_win(trade: Trade, params: BehaviorParams = PARAMS) -> bool:
    """Winner closed below 60% of target."""
    pct = trade.target_percent_achieved
    return trade.is_win and pct is not None and pct < params.hesitation_target_pct


def shows_hesitation(trade: Trade, params: BehaviorParams = PARAMS) -> bool:
    """Early exit, or any close below 60% of target."""
    pct = trade.target_percent_achieved
    return trade.exited_early or (pct is not None and pct < params.hesitation_target_pct)


def detect_clusters(trades: Sequence[Trade], params: BehaviorParams = PARAMS, max_clusters: int = 2) -> int:
    """
    Count windows of 3+ entries within 2 hours.

    Each trade may start a window, so overlapping clusters are counted
    separately. Counting stops at max_clusters.
    """
    if len(trades) < params.cluster_size:
        return 0

    ordered = chronological(trades)
    clusters = 0

    for i in range(len(ordered) - (params.cluster_size - 1)):
        in_window = 1
        for later in ordered[i + 1:]:
            if hours_between(ordered[i].entry_time, later.entry_time) <= params.cluster_window_hours:
                in_window += 1
            else:
                break

        if in_window >= params.cluster_size:
            clusters += 1
            if clusters >= max_clusters:
                break

    return clusters


def count_disciplined_pauses(trades: Sequence[Trade], params: BehaviorParams = PARAMS, max_pauses: int = 3) -> int:
    """Gaps of 2+ hours between consecutive trades, capped at max_pauses."""
    pauses = 0
    for prev, curr in consecutive_pairs(trades):
        if gap_hours(prev, curr) >= params.disciplined_pause_hours:
            pauses += 1
            if pauses >= max_pauses:
                break
    return pauses


def has_emotional_volatility(trades: Sequence[Trade], params: BehaviorParams = PARAMS) -> bool:
    """Impulsive re-entries and hesitant exits in the same set of trades."""
    if len(trades) < 2:
        return False
    hesitant = any(shows_hesitation(t, params) for t in trades)
    return hesitant and count_impulsive_reentries(trades, params) > 0


def has_long_gap(trades: Iterable[Trade], params: BehaviorParams = PARAMS) -> bool:
    """Any gap longer than 4 hours between consecutive trades."""
    return any(gap_hours(prev, curr) > params.long_gap_hours for prev, curr in consecutive_pairs(trades))


def has_steady_spacing(trades: Iterable[Trade], bounds: tuple) -> bool:
    """Every gap between consecutive trades falls within [low, high] hours."""
    low, high = bounds
    return all(low <= gap_hours(prev, curr) <= high for prev, curr in consecutive_pairs(trades))


def count_emotional_trades(trades: Sequence[Trade], plan_risk: float, params: BehaviorParams = PARAMS) -> int:
    """Impulsive re-entries plus revenge trades, each trade counted at most once."""
    count = 0
    for prev, curr in consecutive_pairs(trades):
        if is_impulsive_reentry(curr, prev, params) or is_revenge_trade(curr, prev, plan_risk, params):
            count += 1
    return count


def count_drain_events(trades: Sequence[Trade], plan_risk: float, params: BehaviorParams = PARAMS) -> int:
    """Impulsive re-entries, oversized trades and large losses in a set of trades."""
    events = count_impulsive_reentries(trades, params)
    events += sum(1 for t in trades if is_oversized(t, plan_risk, params.oversize_multiplier))
    events += sum(1 for t in trades if is_large_loss(t, plan_risk, params))
    return events
