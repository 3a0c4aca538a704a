"""Tests for trade-window aggregate statistics"""

from datetime import date

import pytest

from zentra_app.data.models import Session
from zentra_app.metrics.primitives import (
    average_risk_used,
    average_rr,
    calculate_basic_metrics,
    calculate_day_metrics,
    calculate_win_rate,
    chronological,
    count_early_exits,
    count_risk_breaches,
    detect_risk_spike,
    group_by_day,
    median_target_pct,
    most_recent_first,
)


class TestNullExclusion:
    """Aggregates over nullable fields skip missing values"""

    def test_average_risk_ignores_missing(self, make_trade):
        """Risks [2.0, None, 1.5, None, 2.5] average to 2.0, not 1.2"""
        trades = [make_trade(hours=i, risk=r) for i, r in enumerate([2.0, None, 1.5, None, 2.5])]
        assert average_risk_used(trades) == pytest.approx(2.0)

    def test_average_risk_none_when_no_data(self, make_trade):
        trades = [make_trade(hours=i, risk=None) for i in range(3)]
        assert average_risk_used(trades) is None

    def test_average_rr_ignores_missing(self, make_trade):
        trades = [make_trade(hours=0, rr=1.0), make_trade(hours=1, rr=None), make_trade(hours=2, rr=2.0)]
        assert average_rr(trades) == pytest.approx(1.5)

    def test_median_target_ignores_missing(self, make_trade):
        trades = [make_trade(hours=0, target=40), make_trade(hours=1, target=None),
                  make_trade(hours=2, target=90), make_trade(hours=3, target=70)]
        assert median_target_pct(trades) == 70.0

    def test_median_target_even_count(self, make_trade):
        trades = [make_trade(hours=0, target=60), make_trade(hours=1, target=80)]
        assert median_target_pct(trades) == 70.0

    def test_risk_breaches_skip_missing(self, make_trade):
        trades = [make_trade(hours=0, risk=None), make_trade(hours=1, risk=1.6), make_trade(hours=2, risk=1.4)]
        assert count_risk_breaches(trades, plan_risk=1.0) == 1


class TestOrdering:
    """Sorting helpers"""

    def test_most_recent_first(self, make_trade):
        trades = [make_trade(hours=1, trade_id="a"), make_trade(hours=3, trade_id="b"),
                  make_trade(hours=2, trade_id="c")]
        assert [t.trade_id for t in most_recent_first(trades)] == ["b", "c", "a"]

    def test_chronological(self, make_trade):
        trades = [make_trade(hours=3, trade_id="b"), make_trade(hours=1, trade_id="a")]
        assert [t.trade_id for t in chronological(trades)] == ["a", "b"]


class TestBasicMetrics:
    """Outcome statistics"""

    def test_empty_window(self):
        metrics = calculate_basic_metrics([])
        assert metrics.win_rate == 0.0
        assert metrics.trades_with_risk == 0

    def test_win_rate_ignores_breakeven_as_win(self, make_trade):
        trades = [make_trade(hours=0, profit_loss=5), make_trade(hours=1, profit_loss=0),
                  make_trade(hours=2, profit_loss=-5), make_trade(hours=3, profit_loss=1)]
        assert calculate_win_rate(trades) == 0.5

    def test_early_exit_band(self, make_trade):
        """Flagged exits count, as do winners closed between 30% and 80% of target"""
        trades = [
            make_trade(hours=0, exited_early=True, profit_loss=-5),
            make_trade(hours=1, target=50, profit_loss=5),
            make_trade(hours=2, target=80, profit_loss=5),
            make_trade(hours=3, target=90, profit_loss=5),
            make_trade(hours=4, target=50, profit_loss=-5),
            make_trade(hours=5, target=20, profit_loss=5),
        ]
        assert count_early_exits(trades) == 3

    def test_counts_fields_present(self, make_trade):
        trades = [make_trade(hours=0, risk=1.0, target=85), make_trade(hours=1, risk=None, target=None)]
        metrics = calculate_basic_metrics(trades)
        assert metrics.trades_with_risk == 1
        assert metrics.trades_with_target == 1
        assert metrics.near_target_hits == 1


class TestDayMetrics:
    """Per-day plan compliance counts"""

    def test_group_by_utc_day(self, make_trade):
        trades = [make_trade(hours=1), make_trade(hours=23), make_trade(hours=25)]
        grouped = group_by_day(trades)
        assert sorted(grouped) == [date(2024, 3, 4), date(2024, 3, 5)]
        assert len(grouped[date(2024, 3, 4)]) == 2

    def test_exceeded_and_outside_days(self, make_trade, make_plan):
        plan = make_plan(max_trades=2)
        trades = [make_trade(hours=h) for h in (8, 9, 10)]
        trades.append(make_trade(hours=33, session=Session.ASIA))
        metrics = calculate_day_metrics(trades, plan)
        assert metrics.days_with_trades == 2
        assert metrics.exceeded_days == 1
        assert metrics.outside_session_days == 1

    def test_zero_cap_means_no_cap(self, make_trade, make_plan):
        plan = make_plan(max_trades=0)
        trades = [make_trade(hours=h) for h in range(8, 14)]
        assert calculate_day_metrics(trades, plan).exceeded_days == 0

    def test_no_preferred_sessions_means_none_outside(self, make_trade, make_plan):
        plan = make_plan(sessions=())
        trades = [make_trade(hours=8, session=Session.ASIA)]
        assert calculate_day_metrics(trades, plan).outside_session_days == 0


class TestRiskSpike:
    """Sustained risk elevation in the last three trades"""

    def test_spike_detected(self, make_trade):
        trades = [make_trade(hours=i, risk=1.0) for i in range(7)]
        trades += [make_trade(hours=8, risk=2.6), make_trade(hours=9, risk=2.5), make_trade(hours=10, risk=1.0)]
        spike = detect_risk_spike(trades, plan_risk=1.5)
        assert spike.risk_spike is True
        assert spike.last3_breaches == 2

    def test_no_spike_when_older_trades_elevated(self, make_trade):
        trades = [make_trade(hours=0, risk=3.0), make_trade(hours=1, risk=3.0)]
        trades += [make_trade(hours=2 + i, risk=1.0) for i in range(3)]
        assert detect_risk_spike(trades, plan_risk=1.0).risk_spike is False

    def test_threshold_falls_back_to_plan_without_risk_data(self, make_trade):
        trades = [make_trade(hours=i, risk=None) for i in range(3)]
        spike = detect_risk_spike(trades, plan_risk=2.0)
        assert spike.threshold == pytest.approx(2.6)
        assert spike.risk_spike is False

    def test_empty(self):
        assert detect_risk_spike([], plan_risk=1.0).risk_spike is False
