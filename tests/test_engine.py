"""Tests for the BehaviorAnalyticsEngine facade."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from zentra_app.data.models import Session
from zentra_app.engine import BehaviorAnalyticsEngine
from zentra_app.errors import ConfigurationError, MalformedDataError
from zentra_app.models.scores import BatteryStatus

# Evening of the disciplined trading day
NOW = datetime(2024, 3, 4, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path: Path) -> BehaviorAnalyticsEngine:
    """Engine running on built-in defaults."""
    return BehaviorAnalyticsEngine(config_dir=tmp_path)


class TestEngineSetup:
    """Settings resolution"""

    def test_defaults(self, engine):
        assert engine.engine_settings.state_window == 10
        assert engine.engine_settings.trend_days == 7

    def test_overrides(self, tmp_path):
        engine = BehaviorAnalyticsEngine(config_dir=tmp_path, overrides={"engine": {"state_window": 3}})
        assert engine.engine_settings.state_window == 3

    def test_settings_file(self, tmp_path):
        (tmp_path / "settings.yaml").write_text("engine:\n  insights_period: WEEK\n")
        assert BehaviorAnalyticsEngine(config_dir=tmp_path).engine_settings.insights_period == "WEEK"

    def test_invalid_overrides(self, tmp_path):
        with pytest.raises(ConfigurationError):
            BehaviorAnalyticsEngine(config_dir=tmp_path, overrides={"engine": {"trend_days": -1}})


class TestStateAnalysis:

    def test_state_window(self, tmp_path, disciplined_trades, plan):
        engine = BehaviorAnalyticsEngine(config_dir=tmp_path, overrides={"engine": {"state_window": 3}})
        assert engine.analyze_state(disciplined_trades, plan, NOW).analyzed_trade_count == 3

    def test_forecast_echoes_current_state(self, engine, disciplined_trades, plan):
        state = engine.analyze_state(disciplined_trades, plan, NOW)
        forecast = engine.session_forecast(disciplined_trades, Session.LONDON, plan, NOW)
        assert forecast.based_on_state == state.state

    def test_state_history(self, engine, disciplined_trades, plan):
        assert len(engine.state_history(disciplined_trades, plan).history) >= 1

    def test_state_history_zero_limit(self, engine, disciplined_trades, plan):
        assert len(engine.state_history(disciplined_trades, plan, limit=0).history) == 0

    def test_insights_default_period(self, engine, disciplined_trades, plan):
        snapshot = engine.performance_insights(disciplined_trades, plan, now=NOW)
        assert snapshot.period == "MONTH"
        assert snapshot.stats.win_rate == 100

    def test_dashboard(self, engine, disciplined_trades, plan):
        stats = engine.dashboard(disciplined_trades, plan, NOW)
        assert stats.summary.total_trades == 5
        assert stats.state is not None


class TestScoring:
    """Scorers composed the way features combine"""

    def test_battery_uses_today_only(self, engine, disciplined_trades, plan):
        assert engine.mental_battery(disciplined_trades, plan, NOW).battery == 100
        tomorrow = engine.mental_battery(disciplined_trades, plan, NOW + timedelta(days=1))
        assert tomorrow.message == "No activity today"
        assert tomorrow.status == BatteryStatus.OPTIMAL

    def test_plan_control_with_attribution(self, engine, disciplined_trades, plan):
        result = engine.plan_control(disciplined_trades, plan, NOW)
        assert result.percentage == 100
        assert result.deviation_attribution.message == "No significant plan deviations detected"

    def test_radar(self, engine, disciplined_trades, plan):
        assert engine.radar(disciplined_trades, plan).trades_analyzed == 5

    def test_heatmap_look_back(self, engine, make_trade, disciplined_trades, plan):
        old = make_trade(hours=-24 * 40)
        heatmap = engine.heatmap(disciplined_trades + [old], plan, NOW)
        assert heatmap.total_trades == 5

    def test_heatmap_snapshot_dated_today(self, engine, disciplined_trades, plan):
        snapshot = engine.heatmap_snapshot(disciplined_trades, plan, NOW)
        assert snapshot.date == NOW.date()

    def test_consistency_trend_ranges(self, engine, make_trade, disciplined_trades, plan):
        trades = disciplined_trades + [make_trade(hours=-24 * 20)]
        assert engine.consistency_trend(trades, plan, now=NOW).summary.days_with_data == 1
        assert engine.consistency_trend(trades, plan, days="all", now=NOW).summary.days_with_data == 2
        assert engine.consistency_trend(trades, plan, days=30, now=NOW).summary.total_days == 30

    @pytest.mark.parametrize("days", ["ALL", " All "])
    def test_consistency_trend_all_ignores_case(self, engine, make_trade, disciplined_trades, plan, days):
        trades = disciplined_trades + [make_trade(hours=-24 * 20)]
        assert engine.consistency_trend(trades, plan, days=days, now=NOW).summary.days_with_data == 2

    @pytest.mark.parametrize("days", ["fortnight", 0, -3])
    def test_consistency_trend_rejects_bad_days(self, engine, disciplined_trades, plan, days):
        with pytest.raises(MalformedDataError) as exc_info:
            engine.consistency_trend(disciplined_trades, plan, days=days, now=NOW)
        assert exc_info.value.field == "days"

    def test_stability_snapshot(self, engine, disciplined_trades, plan):
        assert engine.stability_snapshot(disciplined_trades, plan, NOW).trade_count == 5
        assert engine.stability_snapshot(disciplined_trades, plan, NOW + timedelta(days=1)) is None


class TestPatterns:

    def test_calm_day_needs_no_breathwork(self, engine, disciplined_trades, plan):
        suggestion = engine.breathwork(disciplined_trades, plan, session_start_battery=100, now=NOW)
        assert suggestion.should_suggest is False

    def test_performance_window_compares_previous_trades(self, engine, make_trade, disciplined_trades, plan):
        earlier = [make_trade(hours=-24 + i) for i in range(5)]
        window = engine.performance_window(earlier + disciplined_trades, plan)
        assert window.trades_analyzed == 5
        assert "improved_plan_control" in [i.id for i in window.improvements]

    def test_daily_quote(self, engine):
        assert engine.daily_quote("user-1", NOW) == engine.daily_quote("user-1", NOW)
