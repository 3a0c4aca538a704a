"""Tests for the sliding-window state history"""

from zentra_app.data.models import Session
from zentra_app.state.history import SlidingWindows, analyze_state_history, state_trigger, summarize_history
from zentra_app.state.models import PsychologicalState, StateTrigger


class TestSlidingWindows:
    """Lazy restartable (index, window) sequence"""

    def test_windows_grow_then_slide(self, make_trade):
        trades = [make_trade(hours=h, trade_id=str(h)) for h in (3, 1, 2, 4)]
        windows = [(i, [t.trade_id for t in w]) for i, w in SlidingWindows(trades, size=2)]
        assert windows == [(0, ["1"]), (1, ["1", "2"]), (2, ["2", "3"]), (3, ["3", "4"])]

    def test_restartable(self, make_trade):
        windows = SlidingWindows([make_trade(hours=h) for h in range(3)], size=5)
        assert list(windows) == list(windows)
        assert len(windows) == 3


class TestTriggers:
    """Trade labels on history points"""

    def test_labels(self, make_trade):
        assert state_trigger(make_trade(profit_loss=5)) == StateTrigger.PROFITABLE_TRADE
        assert state_trigger(make_trade(profit_loss=-5)) == StateTrigger.LOSING_TRADE
        assert state_trigger(make_trade(profit_loss=0, exited_early=True)) == StateTrigger.EARLY_EXIT
        assert state_trigger(make_trade(profit_loss=0, stop_loss_hit=True)) == StateTrigger.STOP_LOSS_HIT
        assert state_trigger(make_trade(profit_loss=0)) == StateTrigger.TRADE_EXECUTION
        assert StateTrigger.PROFITABLE_TRADE.value == "Profitable trade"


class TestAnalyzeStateHistory:
    """Change-point timeline"""

    def test_empty_input(self, plan):
        history = analyze_state_history([], plan)
        assert history.history == ()
        assert history.summary.total_changes == 0
        assert history.summary.most_common_state == PsychologicalState.STABLE

    def test_missing_plan(self, disciplined_trades):
        assert analyze_state_history(disciplined_trades, None).history == ()

    def test_first_window_always_emitted(self, make_trade, make_plan):
        plan = make_plan(max_trades=0)
        trades = [make_trade(hours=24 * i + 9, target=95, trade_id=f"t{i}") for i in range(3)]
        history = analyze_state_history(trades, plan)
        assert history.history[0].trade_id == "t0"
        assert history.history[0].state == PsychologicalState.STABLE
        assert history.history[0].timestamp == trades[0].entry_time

    def test_state_change_emits_point(self, make_trade, make_plan):
        plan = make_plan(max_trades=0)
        calm = [make_trade(hours=24 * i + 9, target=95) for i in range(5)]
        outside = [make_trade(hours=24 * (i + 5) + 9, session=Session.ASIA, target=95, trade_id=f"a{i}")
                   for i in range(3)]
        history = analyze_state_history(calm + outside, plan)

        states = [p.state for p in history.history]
        assert PsychologicalState.OVEREXTENDED in states
        changed = next(p for p in history.history if p.state == PsychologicalState.OVEREXTENDED)
        assert changed.trade_id.startswith("a")

    def test_consecutive_points_differ(self, make_trade, make_plan):
        plan = make_plan(max_trades=0)
        trades = [make_trade(hours=24 * i + 9, target=95) for i in range(12)]
        history = analyze_state_history(trades, plan)
        for previous, current in zip(history.history, history.history[1:]):
            assert (previous.state != current.state
                    or abs(previous.confidence - current.confidence) > 15)

    def test_limit(self, make_trade, make_plan):
        plan = make_plan(max_trades=0)
        trades = [make_trade(hours=24 * i + 9, session=Session.ASIA if i % 2 else Session.LONDON)
                  for i in range(12)]
        assert len(analyze_state_history(trades, plan, limit=1).history) == 1


class TestSummary:
    """History summary"""

    def test_summary_of_points(self, make_trade, make_plan):
        plan = make_plan(max_trades=0)
        trades = [make_trade(hours=24 * i + 9, target=95) for i in range(3)]
        history = analyze_state_history(trades, plan)
        summary = summarize_history(history.history)
        assert summary.total_changes == len(history.history)
        assert 10 <= summary.average_confidence <= 95
        assert summary.volatility >= 0
