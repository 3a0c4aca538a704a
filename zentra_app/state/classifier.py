"""
Psychological state classification.

Classifies the most recent trades against the trader's plan into one of four
states using a priority-ordered rule cascade, and derives a plan adherence
score and a confidence value for the classification.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

import structlog

from ..config.defaults import DEFAULT_CONFIG, ClassifierParams
from ..data.models import Trade, TradingPlan
from ..metrics.primitives import (
    BasicMetrics,
    DayMetrics,
    RiskSpike,
    average_risk_used,
    calculate_basic_metrics,
    calculate_day_metrics,
    count_risk_breaches,
    detect_risk_spike,
    most_recent_first,
)
from ..utils.stats import round_half_up, round_score
from ..utils.time import get_reference_time
from .models import Indicator, IndicatorSeverity, PsychologicalState, StateAnalysis

logger = structlog.get_logger(__name__)

PARAMS: ClassifierParams = DEFAULT_CONFIG.classifier

NO_DATA_RECOMMENDATION = "Record trades and set a trading plan to enable analysis"


@dataclass(frozen=True)
class WindowSignals:
    """Everything the state rules inspect for one trade window."""
    total_trades: int
    plan_risk: float
    has_session_rules: bool
    basic: BasicMetrics
    day: DayMetrics
    spike: RiskSpike
    risk_breaches: int
    avg_risk_used: Optional[float]              # None when no trade recorded risk

    @property
    def exceeded_ratio(self) -> float:
        return self.day.exceeded_days / self.day.days_with_trades

    @property
    def outside_session_ratio(self) -> float:
        return self.day.outside_session_days / self.day.days_with_trades

    @property
    def has_targets(self) -> bool:
        return self.basic.trades_with_target > 0


def extract_signals(trades: Sequence[Trade], plan: TradingPlan, params: ClassifierParams = PARAMS) -> WindowSignals:
    """Compute the primitives for a trade window (any order)."""
    plan_risk = plan.risk_percent_per_trade
    return WindowSignals(
        total_trades=len(trades),
        plan_risk=plan_risk,
        has_session_rules=plan.has_session_rules,
        basic=calculate_basic_metrics(trades, params),
        day=calculate_day_metrics(trades, plan),
        spike=detect_risk_spike(trades, plan_risk, params),
        risk_breaches=count_risk_breaches(trades, plan_risk, params.risk_breach_multiplier),
        avg_risk_used=average_risk_used(trades),
    )


def calculate_plan_adherence(signals: WindowSignals, params: ClassifierParams = PARAMS) -> int:
    """
    Weighted plan adherence score (0-100).

    Components that cannot be computed are dropped and the remaining weights
    renormalized: risk discipline needs recorded risk, session adherence needs
    preferred sessions, target progress needs recorded target percentages.

    Args:
        signals: Window primitives
        params: Classifier weights

    Returns:
        Adherence score, 50 when no component is computable
    """
    components: list[tuple[float, float]] = []

    if signals.basic.trades_with_risk > 0:
        components.append((1 - signals.risk_breaches / signals.basic.trades_with_risk, params.weight_risk))

    if signals.has_session_rules:
        components.append((1 - signals.outside_session_ratio, params.weight_session))

    components.append((1 - signals.exceeded_ratio, params.weight_trade_count))

    if signals.has_targets:
        near_ratio = min(1.0, signals.basic.near_target_hits / signals.basic.trades_with_target)
        components.append((near_ratio, params.weight_target))

    weight_sum = sum(weight for _, weight in components)
    if not weight_sum:
        return 50

    adherence = sum(value * weight for value, weight in components) / weight_sum
    return round_score(adherence * 100)


def calculate_confidence(signals: WindowSignals, plan_adherence: int, params: ClassifierParams = PARAMS) -> int:
    """
    Confidence (10-95) in the classification.

    Blends plan adherence, sample size and the strongest deviation signal.
    Windows under 5 trades are capped at 40.
    """
    sample_factor = min(signals.total_trades, params.window_size) / params.window_size

    strengths = [abs(signals.basic.win_rate - 0.5) * 2]
    if signals.avg_risk_used is not None and signals.plan_risk:
        strengths.append(abs(signals.avg_risk_used / signals.plan_risk - 1))
    if signals.has_targets:
        strengths.append(abs(signals.basic.median_target_pct / 100 - params.confidence_target_anchor))
    signal_strength = max(strengths)

    confidence = round_score(100 * (
        params.confidence_adherence_weight * plan_adherence / 100
        + params.confidence_sample_weight * sample_factor
        + params.confidence_signal_weight * signal_strength
    ))
    confidence = max(params.min_confidence, min(params.max_confidence, confidence))

    if signals.total_trades < params.small_sample_size:
        confidence = min(confidence, params.small_sample_confidence_cap)

    return confidence


# Rule predicates

def _is_overextended(s: WindowSignals, params: ClassifierParams) -> bool:
    return s.exceeded_ratio >= params.overextended_ratio or s.outside_session_ratio >= params.overextended_ratio


def _has_elevated_avg_risk(s: WindowSignals, params: ClassifierParams) -> bool:
    return s.avg_risk_used is not None and s.avg_risk_used > s.plan_risk * params.aggressive_avg_risk_multiplier


def _is_aggressive(s: WindowSignals, params: ClassifierParams) -> bool:
    breach_ratio = s.risk_breaches / max(1, s.total_trades)
    return s.spike.risk_spike or breach_ratio >= params.aggressive_breach_ratio or _has_elevated_avg_risk(s, params)


def _has_low_median_target(s: WindowSignals, params: ClassifierParams) -> bool:
    return s.has_targets and s.basic.median_target_pct < params.hesitant_median_target_pct


def _is_hesitant(s: WindowSignals, params: ClassifierParams) -> bool:
    early_ratio = s.basic.early_exits / max(1, s.total_trades)
    return early_ratio >= params.hesitant_early_exit_ratio or (
        _has_low_median_target(s, params) and s.basic.win_rate <= params.hesitant_max_win_rate
    )


# Indicator tables

def _overextended_indicators(s: WindowSignals, params: ClassifierParams) -> list[Indicator]:
    indicators = [Indicator("discipline", "Trading beyond plan boundaries", IndicatorSeverity.WARNING)]
    if s.day.exceeded_days > 0:
        indicators.append(Indicator("frequency", "Exceeded max trades/day", IndicatorSeverity.WARNING,
                                    s.day.exceeded_days))
    if s.day.outside_session_days > 0:
        indicators.append(Indicator("session", "Outside preferred sessions (days)", IndicatorSeverity.WARNING,
                                    s.day.outside_session_days))
    return indicators


def _aggressive_indicators(s: WindowSignals, params: ClassifierParams) -> list[Indicator]:
    indicators = []
    if s.spike.risk_spike:
        indicators.append(Indicator("risk", "Sustained risk elevation (2 of last 3)", IndicatorSeverity.CRITICAL,
                                    s.spike.last3_breaches))
    if s.risk_breaches > 0:
        indicators.append(Indicator("risk", "Risk > 1.5× plan detected", IndicatorSeverity.CRITICAL,
                                    s.risk_breaches))
    if _has_elevated_avg_risk(s, params):
        indicators.append(Indicator("risk", "Average risk above plan by 25%+", IndicatorSeverity.WARNING,
                                    round_half_up(s.avg_risk_used, 2)))
    return indicators


def _hesitant_indicators(s: WindowSignals, params: ClassifierParams) -> list[Indicator]:
    indicators = []
    if s.basic.early_exits > 0:
        indicators.append(Indicator("execution", "Frequent early exits", IndicatorSeverity.WARNING,
                                    s.basic.early_exits))
    if _has_low_median_target(s, params):
        indicators.append(Indicator("targets", "Median target % below 60", IndicatorSeverity.NEUTRAL,
                                    round_score(s.basic.median_target_pct)))
    return indicators


def _stable_indicators(s: WindowSignals, params: ClassifierParams) -> list[Indicator]:
    indicators = [Indicator("plan", "Trading within plan parameters", IndicatorSeverity.POSITIVE)]
    if s.basic.near_target_hits / max(1, s.total_trades) >= params.stable_near_target_ratio:
        indicators.append(Indicator("targets", "Exits near targets", IndicatorSeverity.POSITIVE,
                                    s.basic.near_target_hits))
    return indicators


@dataclass(frozen=True)
class StateRule:
    """One step of the classification cascade."""
    state: PsychologicalState
    matches: Callable[[WindowSignals, ClassifierParams], bool]
    indicators: Callable[[WindowSignals, ClassifierParams], list[Indicator]]
    recommendation: str


STATE_RULES: tuple[StateRule, ...] = (
    StateRule(
        PsychologicalState.OVEREXTENDED, _is_overextended, _overextended_indicators,
        "Respect daily trade cap and stick to planned sessions",
    ),
    StateRule(
        PsychologicalState.AGGRESSIVE, _is_aggressive, _aggressive_indicators,
        "Reduce position size to plan level and enforce stop discipline",
    ),
    StateRule(
        PsychologicalState.HESITANT, _is_hesitant, _hesitant_indicators,
        "Define target rules; practice holding winners and scaling out",
    ),
    StateRule(
        PsychologicalState.STABLE, lambda s, p: True, _stable_indicators,
        "Maintain discipline; continue tracking adherence",
    ),
)


def match_state_rule(signals: WindowSignals, params: ClassifierParams = PARAMS) -> StateRule:
    """First rule in priority order whose predicate holds. STABLE always matches."""
    return next(rule for rule in STATE_RULES if rule.matches(signals, params))


def no_data_analysis(now: Optional[datetime] = None) -> StateAnalysis:
    """Default analysis when there is no plan or no trades."""
    return StateAnalysis(
        state=PsychologicalState.STABLE,
        confidence=50,
        plan_adherence=50,
        analyzed_trade_count=0,
        indicators=(Indicator("data", "Insufficient data to analyze state", IndicatorSeverity.NEUTRAL),),
        recommendations=(NO_DATA_RECOMMENDATION,),
        last_updated=get_reference_time(now),
    )


def classify_state(trades: Sequence[Trade], plan: Optional[TradingPlan],
                   now: Optional[datetime] = None, params: ClassifierParams = PARAMS) -> StateAnalysis:
    """
    Classify the trader's psychological state from recent trades.

    Args:
        trades: Trades in any order; the most recent 10 are analyzed
        plan: Active trading plan, None when the trader has not set one
        now: Timestamp recorded on the analysis
        params: Classifier thresholds

    Returns:
        StateAnalysis with state, confidence, adherence and presentation data
    """
    if not trades or plan is None:
        logger.debug("No trades or plan, returning default state", trade_count=len(trades))
        return no_data_analysis(now)

    window = most_recent_first(trades)[:params.window_size]
    signals = extract_signals(window, plan, params)

    plan_adherence = calculate_plan_adherence(signals, params)
    rule = match_state_rule(signals, params)
    confidence = calculate_confidence(signals, plan_adherence, params)

    logger.debug(
        "State classified",
        state=rule.state.value,
        confidence=confidence,
        plan_adherence=plan_adherence,
        trades=signals.total_trades,
        risk_breaches=signals.risk_breaches,
        risk_spike=signals.spike.risk_spike,
        exceeded_days=signals.day.exceeded_days,
        outside_session_days=signals.day.outside_session_days,
    )

    return StateAnalysis(
        state=rule.state,
        confidence=confidence,
        plan_adherence=plan_adherence,
        analyzed_trade_count=signals.total_trades,
        indicators=tuple(rule.indicators(signals, params)),
        recommendations=(rule.recommendation,),
        last_updated=get_reference_time(now),
    )
