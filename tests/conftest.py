"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import pytest

from zentra_app.data.models import Session, StopLossDiscipline, Trade, TradingPlan

# Monday 2024-03-04, 00:00 UTC
BASE_TIME = datetime(2024, 3, 4, 0, 0, 0, tzinfo=timezone.utc)


def build_trade(
    hours: float = 9.0,
    duration_minutes: float = 30.0,
    profit_loss: float = 10.0,
    session: Session = Session.LONDON,
    risk: Optional[float] = 1.0,
    rr: Optional[float] = None,
    target: Optional[float] = None,
    stop_loss_hit: bool = False,
    exited_early: bool = False,
    notes: str = "",
    trade_id: Optional[str] = None,
    start: datetime = BASE_TIME,
) -> Trade:
    """Trade entered `hours` after `start`, closed `duration_minutes` later."""
    entry = start + timedelta(hours=hours)
    return Trade(
        entry_time=entry,
        exit_time=entry + timedelta(minutes=duration_minutes),
        profit_loss=profit_loss,
        session=session,
        risk_percent_used=risk,
        risk_reward_achieved=rr,
        target_percent_achieved=target,
        stop_loss_hit=stop_loss_hit,
        exited_early=exited_early,
        notes=notes,
        trade_id=trade_id,
    )


def build_plan(
    max_trades: int = 3,
    risk: float = 1.0,
    target_rr: float = 2.0,
    sessions: tuple = (Session.LONDON, Session.NY),
    discipline: StopLossDiscipline = StopLossDiscipline.ALWAYS,
) -> TradingPlan:
    return TradingPlan(
        max_trades_per_day=max_trades,
        risk_percent_per_trade=risk,
        target_risk_reward_ratio=target_rr,
        preferred_sessions=frozenset(sessions),
        stop_loss_discipline=discipline,
    )


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    """Factory for trades placed relative to the base time."""
    return build_trade


@pytest.fixture
def make_plan() -> Callable[..., TradingPlan]:
    """Factory for trading plans (1% risk, 2R target, LONDON/NY, 3 trades/day by default)."""
    return build_plan


@pytest.fixture
def plan() -> TradingPlan:
    return build_plan()


@pytest.fixture
def disciplined_trades() -> list[Trade]:
    """Five plan-compliant winners spaced two hours apart on one day."""
    return [
        build_trade(hours=8 + i * 2, risk=1.0, rr=2.2, target=95, notes="Setup per plan", trade_id=f"d{i}")
        for i in range(5)
    ]


@pytest.fixture
def raw_trade() -> dict[str, Any]:
    """Trade payload as stored (camelCase)."""
    return {
        "_id": "t-001",
        "entryTime": "2024-03-04T09:00:00Z",
        "exitTime": "2024-03-04T09:45:00Z",
        "profitLoss": 42.5,
        "session": "LONDON",
        "riskPercentUsed": 1.0,
        "riskRewardAchieved": 2.1,
        "targetPercentAchieved": 90,
        "stopLossHit": False,
        "exitedEarly": False,
        "notes": "Clean breakout",
    }


@pytest.fixture
def raw_plan() -> dict[str, Any]:
    """Plan payload as stored (camelCase)."""
    return {
        "maxTradesPerDay": 3,
        "riskPercentPerTrade": 1.0,
        "targetRiskRewardRatio": 2.0,
        "preferredSessions": ["LONDON", "NY"],
        "stopLossDiscipline": "ALWAYS",
    }
