"""Trade and plan records, payload parsing and static content tables."""

from .models import (
    Session,
    StopLossDiscipline,
    Trade,
    TradingPlan,
    allows_session,
    effective_plan_risk,
    effective_target_rr,
)
from .parsers import parse_plan, parse_trade, parse_trades

__all__ = [
    "Session",
    "StopLossDiscipline",
    "Trade",
    "TradingPlan",
    "allows_session",
    "effective_plan_risk",
    "effective_target_rr",
    "parse_plan",
    "parse_trade",
    "parse_trades",
]
