"""Tests for period performance insights"""

from datetime import datetime, timezone

import pytest

from zentra_app.analysis.insights import analyze_performance_insights, filter_period
from zentra_app.data.models import Session
from zentra_app.models.analysis import InsightType

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


class TestPeriodFilter:
    """Look-back ranges"""

    def test_week_excludes_older_trades(self, make_trade):
        trades = [make_trade(hours=0), make_trade(hours=-24 * 10)]
        assert len(filter_period(trades, "WEEK", NOW)) == 1

    def test_month_includes_ten_days(self, make_trade):
        trades = [make_trade(hours=0), make_trade(hours=-24 * 10)]
        assert len(filter_period(trades, "MONTH", NOW)) == 2


class TestNoData:
    """Snapshot without trades or plan"""

    def test_no_trades(self, plan):
        snapshot = analyze_performance_insights([], plan, "MONTH", now=NOW)
        assert snapshot.recommendations == ("Start with a small set of trades (5-10) to calibrate",)
        assert snapshot.stats.win_rate == 0
        assert snapshot.insights[0].title == "Add data to unlock insights"

    def test_no_plan(self, disciplined_trades):
        snapshot = analyze_performance_insights(disciplined_trades, None, "MONTH", now=NOW)
        assert snapshot.insights[0].type == InsightType.CONSTRUCTIVE


class TestInsights:
    """One positive and one constructive insight per period"""

    def test_always_one_of_each(self, disciplined_trades, plan):
        snapshot = analyze_performance_insights(disciplined_trades, plan, "MONTH", now=NOW)
        assert len(snapshot.insights_of(InsightType.POSITIVE)) == 1
        assert len(snapshot.insights_of(InsightType.CONSTRUCTIVE)) == 1

    def test_strong_adherence(self, disciplined_trades, plan):
        snapshot = analyze_performance_insights(disciplined_trades, plan, "MONTH", now=NOW)
        assert snapshot.stats.plan_adherence == 100
        assert snapshot.stats.win_rate == 100
        assert snapshot.stats.avg_risk_reward == pytest.approx(2.2)
        assert snapshot.insights_of(InsightType.POSITIVE)[0].title == "Strong plan adherence"
        assert snapshot.insights_of(InsightType.CONSTRUCTIVE)[0].title == "Refine exits"

    def test_early_exits_flagged(self, make_trade, plan):
        trades = [make_trade(hours=h, target=40) for h in (9, 12, 15)]
        snapshot = analyze_performance_insights(trades, plan, "MONTH", now=NOW)
        constructive = snapshot.insights_of(InsightType.CONSTRUCTIVE)[0]
        assert constructive.title == "Exiting too early"
        assert constructive.metric.value == "100%"
        assert snapshot.recommendations == (constructive.description,)

    def test_weak_adherence(self, make_trade, plan):
        trades = [make_trade(hours=h, session=Session.ASIA, risk=2.0, profit_loss=-5, target=90)
                  for h in (9, 12, 15)]
        snapshot = analyze_performance_insights(trades, plan, "MONTH", now=NOW)
        assert snapshot.stats.plan_adherence == 0
        assert snapshot.insights_of(InsightType.POSITIVE)[0].title == "Consistent practice"
        assert snapshot.insights_of(InsightType.CONSTRUCTIVE)[0].title == "Improve plan adherence"

    def test_trades_this_week(self, make_trade, plan):
        trades = [make_trade(hours=0), make_trade(hours=-24 * 10)]
        snapshot = analyze_performance_insights(trades, plan, "MONTH", now=NOW)
        assert snapshot.stats.trades_this_week == 1
