"""
Temporal state history.

Re-runs the stateless classifier over sliding windows of a trade sequence
and keeps only the change points: a new state label, or a confidence move
larger than the configured jump.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

import structlog

from ..config.defaults import DEFAULT_CONFIG, HistoryParams
from ..data.models import Trade, TradingPlan
from ..metrics.primitives import chronological
from ..utils.stats import mean, pstdev, round_half_up, round_score
from .classifier import classify_state
from .models import (
    PsychologicalState,
    StateAnalysis,
    StateHistory,
    StateHistoryPoint,
    StateHistorySummary,
    StateTrigger,
)

logger = structlog.get_logger(__name__)

PARAMS: HistoryParams = DEFAULT_CONFIG.history


class SlidingWindows:
    """
    Lazy, restartable sequence of (index, window) pairs.

    Window i holds trades[max(0, i - size + 1)..i] of the chronologically
    sorted input. Each iteration starts from the first trade again.
    """

    def __init__(self, trades: Sequence[Trade], size: int = PARAMS.window_size):
        self._trades = chronological(trades)
        self._size = size

    def __len__(self) -> int:
        return len(self._trades)

    def __iter__(self) -> Iterator[tuple[int, list[Trade]]]:
        for i in range(len(self._trades)):
            yield i, self._trades[max(0, i - self._size + 1):i + 1]


def state_trigger(trade: Trade) -> StateTrigger:
    """Label describing the trade that produced a history point."""
    if trade.is_win:
        return StateTrigger.PROFITABLE_TRADE
    if trade.is_loss:
        return StateTrigger.LOSING_TRADE
    if trade.exited_early:
        return StateTrigger.EARLY_EXIT
    if trade.stop_loss_hit:
        return StateTrigger.STOP_LOSS_HIT
    return StateTrigger.TRADE_EXECUTION


def _is_change_point(previous: Optional[StateAnalysis], current: StateAnalysis, params: HistoryParams) -> bool:
    if previous is None:
        return True
    return (previous.state != current.state
            or abs(previous.confidence - current.confidence) > params.confidence_jump)


def summarize_history(points: Sequence[StateHistoryPoint]) -> StateHistorySummary:
    """Change count, most frequent state, mean confidence and confidence volatility."""
    if not points:
        return StateHistorySummary()

    # Counter keeps first-seen order, so ties go to the earliest state
    most_common = Counter(p.state for p in points).most_common(1)[0][0]
    confidences = [p.confidence for p in points]

    return StateHistorySummary(
        total_changes=len(points),
        most_common_state=most_common,
        average_confidence=round_score(mean(confidences)),
        volatility=round_half_up(pstdev(confidences) / 100, 2),
    )


def analyze_state_history(trades: Sequence[Trade], plan: Optional[TradingPlan], limit: int = 50,
                          params: HistoryParams = PARAMS) -> StateHistory:
    """
    Build the state change timeline for a trade sequence.

    Args:
        trades: Trades in any order
        plan: Active trading plan
        limit: Maximum number of points to emit
        params: Window size and confidence jump

    Returns:
        StateHistory with change points (oldest first) and summary
    """
    if not trades or plan is None:
        return StateHistory(summary=StateHistorySummary(most_common_state=PsychologicalState.STABLE))

    points: list[StateHistoryPoint] = []
    last: Optional[StateAnalysis] = None

    for _, window in SlidingWindows(trades, params.window_size):
        if len(points) >= limit:
            break

        trade = window[-1]
        analysis = classify_state(window, plan, now=trade.entry_time)

        if _is_change_point(last, analysis, params):
            points.append(StateHistoryPoint(
                timestamp=trade.entry_time,
                state=analysis.state,
                confidence=analysis.confidence,
                trigger=state_trigger(trade),
                trade_id=trade.trade_id,
                profit_loss=trade.profit_loss,
                risk_percent_used=trade.risk_percent_used,
            ))
            last = analysis

    summary = summarize_history(points)
    logger.debug("State history built", trades=len(trades), points=len(points),
                 most_common=summary.most_common_state.value)

    return StateHistory(history=tuple(points), summary=summary)
