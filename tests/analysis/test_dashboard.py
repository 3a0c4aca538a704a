"""Tests for dashboard statistics"""

from datetime import date

import pytest

from zentra_app.analysis.dashboard import (
    calculate_daily_pnl,
    calculate_dashboard_stats,
    calculate_risk_metrics,
    calculate_session_performance,
    calculate_summary_stats,
    calculate_trends,
    generate_alerts,
)
from zentra_app.data.models import Session
from zentra_app.models.analysis import AlertType, TrendDirection
from zentra_app.state.models import PsychologicalState, StateAnalysis


class TestSummaryStats:
    """Outcome summary"""

    def test_empty(self):
        stats = calculate_summary_stats([])
        assert stats.total_trades == 0
        assert stats.win_rate == 0.0

    def test_summary(self, make_trade):
        trades = [make_trade(hours=0, profit_loss=30, rr=2.0), make_trade(hours=1, profit_loss=-10, rr=None),
                  make_trade(hours=2, profit_loss=20, rr=1.0)]
        stats = calculate_summary_stats(trades)
        assert stats.total_trades == 3
        assert stats.winning_trades == 2
        assert stats.losing_trades == 1
        assert stats.win_rate == pytest.approx(66.67)
        assert stats.total_profit_loss == 40
        assert stats.average_risk_reward == pytest.approx(1.5)
        assert stats.best_trade == 30
        assert stats.worst_trade == -10


class TestRiskMetrics:
    """Drawdown and Sharpe"""

    def test_drawdown_follows_chronology(self, make_trade):
        # Chronological P/L: +10, -30, +5 -> peak 10, trough -20
        trades = [make_trade(hours=2, profit_loss=5), make_trade(hours=0, profit_loss=10),
                  make_trade(hours=1, profit_loss=-30)]
        assert calculate_risk_metrics(trades).max_drawdown == 30

    def test_sharpe_zero_without_variance(self, make_trade):
        trades = [make_trade(hours=h, profit_loss=10) for h in range(3)]
        assert calculate_risk_metrics(trades).sharpe_ratio == 0.0

    def test_average_risk_without_data(self, make_trade):
        trades = [make_trade(hours=0, risk=None)]
        assert calculate_risk_metrics(trades).average_risk_per_trade == 0.0


class TestBreakdowns:
    """Per-session and per-day breakdowns"""

    def test_session_performance(self, make_trade):
        trades = [make_trade(hours=0, session=Session.LONDON, profit_loss=10),
                  make_trade(hours=1, session=Session.NY, profit_loss=-5),
                  make_trade(hours=2, session=Session.LONDON, profit_loss=-4)]
        performance = {p.session: p for p in calculate_session_performance(trades)}
        assert performance[Session.LONDON].trades == 2
        assert performance[Session.LONDON].profit_loss == 6
        assert performance[Session.LONDON].win_rate == 50.0
        assert performance[Session.NY].win_rate == 0.0

    def test_daily_pnl_sorted(self, make_trade):
        trades = [make_trade(hours=30, profit_loss=5), make_trade(hours=2, profit_loss=-3),
                  make_trade(hours=5, profit_loss=4)]
        daily = calculate_daily_pnl(trades)
        assert [d.date for d in daily] == [date(2024, 3, 4), date(2024, 3, 5)]
        assert daily[0].profit_loss == 1


class TestTrends:
    """Older half versus newer half"""

    def test_single_trade_is_stable(self, make_trade):
        assert calculate_trends([make_trade()]).pnl_trend == TrendDirection.STABLE

    def test_improving(self, make_trade):
        trades = [make_trade(hours=0, profit_loss=-5, risk=2.0), make_trade(hours=1, profit_loss=-5, risk=2.0),
                  make_trade(hours=2, profit_loss=5, risk=1.0), make_trade(hours=3, profit_loss=5, risk=1.0)]
        trends = calculate_trends(trades)
        assert trends.pnl_trend == TrendDirection.UP
        assert trends.win_rate_trend == TrendDirection.UP
        assert trends.risk_trend == TrendDirection.DOWN


class TestAlerts:
    """Rule-based alerts"""

    def test_no_trades_no_alerts(self):
        assert generate_alerts([]) == []

    def test_high_win_rate(self, make_trade):
        trades = [make_trade(hours=h, profit_loss=5) for h in range(4)]
        messages = [a.message for a in generate_alerts(trades)]
        assert "Excellent win rate achieved" in messages

    def test_missing_risk_skips_risk_alerts(self, make_trade):
        trades = [make_trade(hours=h, profit_loss=5, risk=None) for h in range(4)]
        messages = [a.message for a in generate_alerts(trades)]
        assert "Consider increasing position sizes gradually" not in messages
        assert "Risk per trade above recommended level" not in messages

    def test_recent_decline(self, make_trade):
        trades = [make_trade(hours=h, profit_loss=5, risk=1.5) for h in range(6)]
        trades += [make_trade(hours=10 + h, profit_loss=-5, risk=1.5) for h in range(4)]
        messages = [a.message for a in generate_alerts(trades)]
        assert "Recent performance declining" in messages

    def test_state_alert(self, make_trade):
        state = StateAnalysis(state=PsychologicalState.AGGRESSIVE, confidence=70, plan_adherence=60,
                              analyzed_trade_count=3)
        alerts = generate_alerts([make_trade(risk=1.5)], state)
        assert alerts[-1].message == "Aggressive behavior detected - reduce risk to plan level"
        assert alerts[-1].type == AlertType.WARNING


class TestDashboardStats:
    """Assembled dashboard"""

    def test_carries_state(self, disciplined_trades):
        state = StateAnalysis(state=PsychologicalState.STABLE, confidence=70, plan_adherence=90,
                              analyzed_trade_count=5)
        stats = calculate_dashboard_stats(disciplined_trades, state)
        assert stats.state == PsychologicalState.STABLE
        assert stats.summary.total_trades == 5
        assert len(stats.daily_pnl) == 1
