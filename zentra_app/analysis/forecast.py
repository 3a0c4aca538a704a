"""
Session bias forecast.

Looks at the most recent trades of one session and flags the biases most
likely to show up next time the trader works that session.
"""

from typing import Optional, Sequence

import structlog

from ..config.defaults import DEFAULT_CONFIG, ForecastParams
from ..data.models import Session, Trade, TradingPlan
from ..metrics.primitives import average_risk_used, most_recent_first
from ..models.analysis import ForecastLabel, SessionForecast
from ..state.models import PsychologicalState, RiskLevel, StateAnalysis

logger = structlog.get_logger(__name__)

PARAMS: ForecastParams = DEFAULT_CONFIG.forecast

NEUTRAL_BIAS = "NEUTRAL"
REVENGE_BIAS = "Revenge trading risk"
RISK_ESCALATION_BIAS = "Risk escalation tendency"
SESSION_DRIFT_BIAS = "Session drift"


def _forecast_label(risk_level: RiskLevel) -> ForecastLabel:
    if risk_level == RiskLevel.HIGH:
        return ForecastLabel.NEGATIVE
    if risk_level == RiskLevel.LOW:
        return ForecastLabel.POSITIVE
    return ForecastLabel.NEUTRAL


def analyze_session_forecast(trades: Sequence[Trade], session: Session, plan: Optional[TradingPlan],
                             current_state: Optional[StateAnalysis] = None, window: int = 20,
                             params: ForecastParams = PARAMS) -> SessionForecast:
    """
    Forecast the bias risk for a session.

    Bias flags accumulate independently; the reported bias is the first one
    raised, while every flag contributes its recommendation.

    Args:
        trades: Trader's trades in any order; only the given session is used
        session: Session to forecast
        plan: Active trading plan
        current_state: Latest state analysis, echoed in the result
        window: Number of most recent session trades inspected
        params: Forecast heuristics

    Returns:
        SessionForecast (NEUTRAL/MEDIUM with a logging prompt when there is no data)
    """
    based_on = current_state.state if current_state is not None else PsychologicalState.STABLE
    session_trades = most_recent_first(t for t in trades if t.session == session)[:window]

    if not session_trades or plan is None:
        return SessionForecast(
            session=session,
            predicted_bias=NEUTRAL_BIAS,
            risk_level=RiskLevel.MEDIUM,
            forecast=ForecastLabel.NEUTRAL,
            recommendations=("Log more trades in this session to improve forecast",),
            based_on_state=based_on,
        )

    total = len(session_trades)
    plan_risk = plan.risk_percent_per_trade
    avg_risk = average_risk_used(session_trades)
    if avg_risk is None:
        avg_risk = plan_risk
    outside = sum(1 for t in session_trades if not plan.allows_session(t.session))

    biases: list[str] = []
    risk_level = RiskLevel.MEDIUM
    recommendations: list[str] = []

    recent = session_trades[:params.loss_streak_length]
    if total >= params.loss_streak_length and all(t.profit_loss <= 0 for t in recent):
        biases.append(REVENGE_BIAS)
        risk_level = RiskLevel.HIGH
        recommendations.append("Consider pausing before new entries; reset after losses")

    if avg_risk > plan_risk * params.risk_escalation_multiplier:
        biases.append(RISK_ESCALATION_BIAS)
        risk_level = RiskLevel.HIGH
        recommendations.append("Reduce risk per trade to plan level")

    if outside / total >= params.session_drift_ratio:
        biases.append(SESSION_DRIFT_BIAS)
        recommendations.append("Trade only in preferred sessions for this period")

    if not biases:
        recommendations.append("Proceed per plan; monitor emotions after first outcome")

    forecast = SessionForecast(
        session=session,
        predicted_bias=biases[0] if biases else NEUTRAL_BIAS,
        risk_level=risk_level,
        forecast=_forecast_label(risk_level),
        recommendations=tuple(recommendations),
        based_on_state=based_on,
    )

    logger.debug("Session forecast computed", session=session.value, trades=total,
                 bias=forecast.predicted_bias, risk_level=risk_level.value)
    return forecast
