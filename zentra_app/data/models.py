"""
Canonical data models for trade records and trading plans.

This module defines immutable data structures for the trader's logged trades
and their declared plan. Both are read-only inputs to the analytics core.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Session(str, Enum):
    """Trading sessions a trade can be attributed to."""
    LONDON = "LONDON"
    NY = "NY"
    ASIA = "ASIA"


class StopLossDiscipline(str, Enum):
    """How strictly the trader commits to stop losses."""
    ALWAYS = "ALWAYS"
    FLEXIBLE = "FLEXIBLE"


@dataclass(frozen=True)
class Trade:
    """A single closed position."""
    entry_time: datetime                            # Treated as UTC
    exit_time: datetime                             # exit_time >= entry_time
    profit_loss: float                              # Signed P/L
    session: Session

    # Nullable measurements: None means unknown and is excluded from aggregates
    risk_percent_used: Optional[float] = None
    risk_reward_achieved: Optional[float] = None
    target_percent_achieved: Optional[float] = None  # May be negative

    stop_loss_hit: bool = False
    exited_early: bool = False
    notes: str = ""
    trade_id: Optional[str] = None

    @property
    def is_win(self) -> bool:
        return self.profit_loss > 0

    @property
    def is_loss(self) -> bool:
        return self.profit_loss < 0

    @property
    def has_notes(self) -> bool:
        return bool(self.notes and self.notes.strip())


@dataclass(frozen=True)
class TradingPlan:
    """The trader's self-declared rules. One active plan per trader."""
    max_trades_per_day: int                         # 0 means no daily cap
    risk_percent_per_trade: float                   # 0-100
    target_risk_reward_ratio: float
    preferred_sessions: frozenset[Session] = field(default_factory=frozenset)
    stop_loss_discipline: StopLossDiscipline = StopLossDiscipline.ALWAYS

    def allows_session(self, session: Session) -> bool:
        """An empty preferred set means no session restriction."""
        if not self.preferred_sessions:
            return True
        return session in self.preferred_sessions

    @property
    def has_session_rules(self) -> bool:
        return bool(self.preferred_sessions)


def effective_plan_risk(plan: Optional[TradingPlan]) -> float:
    """Plan risk used by the scoring suite; a missing or zero risk falls back to 1%."""
    if plan is None or not plan.risk_percent_per_trade:
        return 1.0
    return plan.risk_percent_per_trade


def effective_target_rr(plan: Optional[TradingPlan]) -> float:
    """Plan R:R target used by the scoring suite; missing or zero falls back to 1."""
    if plan is None or not plan.target_risk_reward_ratio:
        return 1.0
    return plan.target_risk_reward_ratio


def allows_session(plan: Optional[TradingPlan], session: Session) -> bool:
    """Session check tolerant of a missing plan."""
    return plan is None or plan.allows_session(session)
