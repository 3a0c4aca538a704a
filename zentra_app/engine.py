"""
Behavioral analytics engine facade.

Composes the pure analytics components the way features combine: the
mental battery feeds on plan control, plan-control attribution feeds on
the battery, and breathwork feeds on the battery and radar volatility.
The engine performs no I/O; the caller fetches trades and plans and
persists any returned snapshots.
"""

from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import structlog

from .analysis.dashboard import calculate_dashboard_stats
from .analysis.forecast import analyze_session_forecast
from .analysis.insights import analyze_performance_insights
from .config.defaults import EngineSettings
from .config.loader import ConfigLoader
from .data.models import Session, Trade, TradingPlan
from .data.quotes import DailyQuote, get_daily_quote
from .errors import MalformedDataError
from .logging import configure_logging
from .metrics.primitives import most_recent_first
from .models.analysis import DashboardStats, PerformanceSnapshot, SessionForecast
from .models.patterns import BreathworkSuggestion, PerformanceWindow
from .models.scores import (
    BehaviorHeatmap,
    BehaviorHeatmapSnapshot,
    ConsistencyTrend,
    MentalBatteryResult,
    PlanControlResult,
    RadarResult,
    StabilitySnapshot,
)
from .patterns.breathwork import should_suggest_breathwork
from .patterns.improvement import get_performance_window
from .scoring.consistency import build_stability_snapshot, calculate_consistency_trend
from .scoring.heatmap import build_heatmap_snapshot, calculate_behavior_heatmap_with_insight
from .scoring.mental_battery import calculate_mental_battery
from .scoring.plan_control import calculate_plan_control, calculate_plan_control_with_attribution
from .scoring.radar import calculate_psychological_radar
from .state.classifier import classify_state
from .state.history import analyze_state_history
from .state.models import StateAnalysis, StateHistory
from .utils.time import day_key, get_reference_time, to_utc

logger = structlog.get_logger(__name__)

ALL_DAYS = "all"


def _parse_day_span(days: Union[int, str]) -> Optional[int]:
    """Day count for the trend, None meaning every trade."""
    if isinstance(days, str) and days.strip().lower() == ALL_DAYS:
        return None
    try:
        span = int(days)
    except (TypeError, ValueError) as e:
        raise MalformedDataError(f"days must be a positive integer or \"all\", got {days!r}",
                                 field="days", raw_value=days) from e
    if span <= 0:
        raise MalformedDataError(f"days must be a positive integer or \"all\", got {days!r}",
                                 field="days", raw_value=days)
    return span


class BehaviorAnalyticsEngine:
    """
    Entry point for the trader behavioral analytics core.

    Every method takes the trader's trades (any order) and active plan and
    returns an immutable result record. Time-dependent methods accept an
    optional `now` so results are reproducible.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None,
                 overrides: Optional[dict[str, Any]] = None, setup_logging: bool = False) -> None:
        """
        Initialize the engine.

        Args:
            config_dir: Directory holding settings.yaml (defaults to the project config/)
            overrides: Settings overriding settings.yaml and defaults
            setup_logging: Configure structlog from the logging settings
        """
        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir is not None else None)
        self.settings = self.config_loader.load_settings(overrides)

        if setup_logging:
            configure_logging(level=self.settings.logging.level, format_json=self.settings.logging.format_json)

        self.logger = logger
        self.logger.info("Behavior analytics engine initialized", **asdict(self.settings.engine))

    @property
    def engine_settings(self) -> EngineSettings:
        return self.settings.engine

    def _today(self, trades: Sequence[Trade], now: Optional[datetime]) -> list[Trade]:
        today = get_reference_time(now).date()
        return [t for t in trades if day_key(t.entry_time) == today]

    # State analysis

    def analyze_state(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                      now: Optional[datetime] = None) -> StateAnalysis:
        recent = most_recent_first(trades)[:self.engine_settings.state_window]
        return classify_state(recent, plan, now)

    def state_history(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                      limit: Optional[int] = None) -> StateHistory:
        return analyze_state_history(trades, plan, self.engine_settings.history_limit if limit is None else limit)

    def session_forecast(self, trades: Sequence[Trade], session: Session, plan: Optional[TradingPlan],
                         now: Optional[datetime] = None) -> SessionForecast:
        """Forecast a session, echoing the trader's current state."""
        state = self.analyze_state(trades, plan, now)
        return analyze_session_forecast(trades, session, plan, state, self.engine_settings.forecast_window)

    def performance_insights(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                             period: Optional[str] = None, now: Optional[datetime] = None) -> PerformanceSnapshot:
        return analyze_performance_insights(trades, plan, period or self.engine_settings.insights_period, now)

    def dashboard(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                  now: Optional[datetime] = None) -> DashboardStats:
        """Dashboard statistics over the state window, with state alerts."""
        recent = most_recent_first(trades)[:self.engine_settings.state_window]
        state = classify_state(recent, plan, now)
        return calculate_dashboard_stats(recent, state)

    # Scoring suite

    def mental_battery(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                       now: Optional[datetime] = None) -> MentalBatteryResult:
        """Battery of today's trades, recharged by the current plan control."""
        plan_control = calculate_plan_control(trades, plan).percentage
        return calculate_mental_battery(self._today(trades, now), plan, plan_control)

    def plan_control(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                     now: Optional[datetime] = None) -> PlanControlResult:
        """Plan control with deviation attribution informed by today's battery."""
        battery = self.mental_battery(trades, plan, now).battery
        return calculate_plan_control_with_attribution(trades, plan, battery)

    def radar(self, trades: Sequence[Trade], plan: Optional[TradingPlan]) -> RadarResult:
        return calculate_psychological_radar(trades, plan)

    def heatmap(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                now: Optional[datetime] = None) -> BehaviorHeatmap:
        """Heatmap of trades entered within the look-back period."""
        reference = get_reference_time(now)
        lookback = self.engine_settings.heatmap_lookback_days
        recent = [t for t in trades if (reference - to_utc(t.entry_time)).days < lookback]
        return calculate_behavior_heatmap_with_insight(recent, plan)

    def heatmap_snapshot(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                         now: Optional[datetime] = None) -> BehaviorHeatmapSnapshot:
        heatmap = self.heatmap(trades, plan, now)
        return build_heatmap_snapshot(heatmap, get_reference_time(now).date())

    def consistency_trend(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                          days: Optional[Union[int, str]] = None,
                          now: Optional[datetime] = None) -> ConsistencyTrend:
        """
        Daily stability trend.

        Args:
            days: Number of days, "all" for every trade, None for the configured default
        """
        if days is None:
            days = self.engine_settings.trend_days
        span = _parse_day_span(days)
        return calculate_consistency_trend(trades, plan, span, now)

    def stability_snapshot(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                           now: Optional[datetime] = None) -> Optional[StabilitySnapshot]:
        """Today's stability record, None before the first trade of the day."""
        return build_stability_snapshot(trades, plan, get_reference_time(now).date())

    # Pattern matchers

    def breathwork(self, trades: Sequence[Trade], plan: Optional[TradingPlan],
                   session_start_battery: Optional[float] = None,
                   now: Optional[datetime] = None) -> BreathworkSuggestion:
        battery = self.mental_battery(trades, plan, now).battery
        volatility = self.radar(trades, plan).traits.emotional_volatility
        return should_suggest_breathwork(battery, volatility, self._today(trades, now),
                                         session_start_battery, now)

    def performance_window(self, trades: Sequence[Trade], plan: Optional[TradingPlan]) -> PerformanceWindow:
        """Improvements of the latest trades versus the window before them."""
        size = self.engine_settings.recent_window
        ordered = most_recent_first(trades)
        current, previous = ordered[:size], ordered[size:size * 2]

        current_control = calculate_plan_control(current, plan).percentage
        previous_control = calculate_plan_control(previous, plan).percentage if previous else None

        return get_performance_window(current, plan, current_control, previous_control)

    def daily_quote(self, user_id: str, now: Optional[datetime] = None) -> DailyQuote:
        return get_daily_quote(user_id, now)
