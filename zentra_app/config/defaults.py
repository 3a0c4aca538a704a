"""Default rule tables and operational settings for the analytics engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ClassifierParams:
    """Psychological state classification thresholds."""
    window_size: int = 10                           # Most recent trades analyzed

    # Risk handling
    risk_breach_multiplier: float = 1.5             # Breach = risk > plan * 1.5
    risk_spike_multiplier: float = 1.3              # Spike threshold vs plan and recent avg
    risk_spike_lookback: int = 3                    # Trades inspected for a spike
    risk_spike_min_breaches: int = 2

    # State thresholds
    overextended_ratio: float = 0.33                # Exceeded or outside-session day share
    aggressive_breach_ratio: float = 0.25
    aggressive_avg_risk_multiplier: float = 1.25
    hesitant_early_exit_ratio: float = 0.4
    hesitant_median_target_pct: float = 60.0
    hesitant_max_win_rate: float = 0.6
    near_target_pct: float = 80.0                   # Exit counts as reaching target
    early_exit_target_band: tuple = (30.0, 80.0)    # Profitable exit in this band is early
    stable_near_target_ratio: float = 0.6

    # Plan adherence weights
    weight_risk: float = 0.40
    weight_session: float = 0.25
    weight_trade_count: float = 0.25
    weight_target: float = 0.10

    # Confidence
    confidence_adherence_weight: float = 0.5
    confidence_sample_weight: float = 0.3
    confidence_signal_weight: float = 0.2
    confidence_target_anchor: float = 0.6
    min_confidence: int = 10
    max_confidence: int = 95
    small_sample_size: int = 5
    small_sample_confidence_cap: int = 40


@dataclass(frozen=True)
class HistoryParams:
    """Sliding-window state history parameters."""
    window_size: int = 5
    confidence_jump: int = 15                       # Re-emit when confidence moves more than this


@dataclass(frozen=True)
class ForecastParams:
    """Session forecast and period insight heuristics."""
    loss_streak_length: int = 3
    risk_escalation_multiplier: float = 1.25
    session_drift_ratio: float = 0.2
    insight_breach_multiplier: float = 1.5
    strong_adherence: int = 70
    solid_win_rate: int = 60
    early_exit_ratio: float = 0.3
    early_exit_target_pct: float = 50.0
    weak_adherence: int = 60


@dataclass(frozen=True)
class BehaviorParams:
    """Trade-sequence behavior detectors shared by the scoring suite."""
    recent_trades: int = 5                          # Window for plan control, radar, improvement
    impulsive_gap_minutes: float = 30.0             # Re-entry sooner than this is impulsive
    disciplined_pause_hours: float = 2.0
    cluster_window_hours: float = 2.0
    cluster_size: int = 3
    oversize_multiplier: float = 1.3
    high_risk_multiplier: float = 1.5
    large_loss_multiplier: float = 2.0              # Loss below -planRisk * this is large
    position_tolerance: float = 0.10                # Correct size = plan risk +/- 10%
    undersize_multiplier: float = 0.7
    hesitation_target_pct: float = 60.0
    long_gap_hours: float = 4.0
    stable_timing_hours: tuple = (0.5, 6.0)
    improvement_timing_hours: tuple = (1.0, 4.0)
    deviation_score: int = 70                       # Trade scores below this are deviations


@dataclass(frozen=True)
class BatteryParams:
    """Mental battery drain and recharge amounts."""
    impulsive_drain: int = 15
    oversized_drain: int = 10
    cluster_drain: int = 8
    max_clusters: int = 2
    large_loss_drain: int = 20
    volatility_drain: int = 12
    pause_recharge: int = 5
    max_pauses: int = 3
    compliance_recharge: int = 8
    compliance_threshold: int = 80
    stable_risk_recharge: int = 5
    optimal_level: int = 80
    strained_level: int = 50


@dataclass(frozen=True)
class BreathworkParams:
    """Breathwork trigger thresholds and urgency bands."""
    volatility_trigger: int = 70
    severe_volatility: int = 80
    battery_trigger: int = 40
    critical_battery: int = 30
    impulsive_trades_trigger: int = 3
    battery_drop_trigger: int = 30
    high_urgency: int = 70
    medium_urgency: int = 40


@dataclass(frozen=True)
class DefaultConfig:
    """Complete rule table configuration."""
    classifier: ClassifierParams
    history: HistoryParams
    forecast: ForecastParams
    behavior: BehaviorParams
    battery: BatteryParams
    breathwork: BreathworkParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        classifier=ClassifierParams(),
        history=HistoryParams(),
        forecast=ForecastParams(),
        behavior=BehaviorParams(),
        battery=BatteryParams(),
        breathwork=BreathworkParams(),
    )


DEFAULT_CONFIG = get_default_config()


@dataclass(frozen=True)
class EngineSettings:
    """Operational knobs for the engine facade (which trades get fetched and passed)."""
    state_window: int = 10
    history_limit: int = 50
    forecast_window: int = 20
    recent_window: int = 5
    heatmap_lookback_days: int = 30
    trend_days: int = 7
    insights_period: str = "MONTH"


@dataclass(frozen=True)
class LoggingSettings:
    """Logging output settings."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class Settings:
    """Complete operational settings."""
    engine: EngineSettings
    logging: LoggingSettings


def get_default_settings() -> Settings:
    """Get the default settings instance."""
    return Settings(
        engine=EngineSettings(),
        logging=LoggingSettings(),
    )
