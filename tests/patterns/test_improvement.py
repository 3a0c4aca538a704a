"""Tests for the improvement detector"""

from zentra_app.patterns.improvement import IMPROVEMENTS, get_performance_window


class TestPerformanceWindow:
    """Highest-priority improvement becomes the headline"""

    def test_no_trades(self, plan):
        window = get_performance_window([], plan, current_plan_control=0)
        assert window.has_improvement is False
        assert window.message is None
        assert window.trades_analyzed == 0

    def test_priorities_are_unique(self):
        assert sorted(i.priority for i in IMPROVEMENTS) == [1, 2, 3, 4, 5, 6]

    def test_avoided_revenge_outranks_stable_risk(self, disciplined_trades, plan):
        window = get_performance_window(disciplined_trades, plan, current_plan_control=100)
        assert window.has_improvement is True
        assert [i.id for i in window.improvements] == [
            "avoided_revenge", "stable_risk", "no_impulsive", "no_hesitation", "consistent_timing",
        ]
        assert window.message.startswith("You treated losses as information")
        assert window.description == "No revenge trades detected after losses"
        assert window.trades_analyzed == 5

    def test_improved_plan_control(self, disciplined_trades, plan):
        window = get_performance_window(disciplined_trades, plan, current_plan_control=100,
                                        previous_plan_control=60)
        assert "improved_plan_control" in [i.id for i in window.improvements]

    def test_unchanged_plan_control_is_not_improvement(self, disciplined_trades, plan):
        window = get_performance_window(disciplined_trades, plan, current_plan_control=80,
                                        previous_plan_control=80)
        assert "improved_plan_control" not in [i.id for i in window.improvements]

    def test_revenge_trade_falls_through(self, make_trade, plan):
        trades = [make_trade(hours=0, profit_loss=-5), make_trade(hours=3, risk=2.0)]
        window = get_performance_window(trades, plan, current_plan_control=50)
        ids = [i.id for i in window.improvements]
        assert "avoided_revenge" not in ids
        assert "stable_risk" not in ids
        assert ids[0] == "no_impulsive"
        assert window.description == "No impulsive re-entries detected"

    def test_single_trade_avoided_revenge(self, make_trade, plan):
        window = get_performance_window([make_trade(risk=3.0, exited_early=True)], plan, current_plan_control=40)
        assert window.improvements[0].id == "avoided_revenge"

    def test_nothing_to_praise(self, make_trade, plan):
        trades = [
            make_trade(hours=9.0, profit_loss=-5, exited_early=True),
            make_trade(hours=9.75, risk=2.0, exited_early=True),
        ]
        window = get_performance_window(trades, plan, current_plan_control=20, previous_plan_control=40)
        assert window.has_improvement is False
        assert window.improvements == ()
        assert window.message is None
        assert window.trades_analyzed == 2
