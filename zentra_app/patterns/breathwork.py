"""
Breathwork suggestion trigger.

Suggests a breathing exercise when any stress trigger fires, scores the
urgency of the suggestion and picks the exercise matching the trigger mix.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

import structlog

from ..config.defaults import DEFAULT_CONFIG, BehaviorParams, BreathworkParams
from ..data.models import Trade
from ..metrics.behavior import count_impulsive_reentries
from ..models.patterns import (
    BreathworkExercise,
    BreathworkSuggestion,
    BreathworkTrigger,
    TriggerType,
    Urgency,
    UrgencyLevel,
)
from ..utils.time import get_reference_time, to_utc

logger = structlog.get_logger(__name__)

PARAMS: BreathworkParams = DEFAULT_CONFIG.breathwork
BEHAVIOR: BehaviorParams = DEFAULT_CONFIG.behavior

TRAILING_WINDOW = timedelta(hours=1)

SEVERE_TRIGGERS = frozenset({TriggerType.LOW_BATTERY, TriggerType.HIGH_VOLATILITY, TriggerType.BATTERY_DROP})

BOX_BREATHING = BreathworkExercise("Box Breathing", "4 minutes", "4-4-4-4", "Inhale 4s, Hold 4s, Exhale 4s, Hold 4s")
ENERGIZING_BREATH = BreathworkExercise("Energizing Breath", "3 minutes", "4-7-8", "Inhale 4s, Hold 7s, Exhale 8s")
CALMING_BREATH = BreathworkExercise("Calming Breath", "2 minutes", "4-4-6", "Inhale 4s, Hold 4s, Exhale 6s")

URGENCY_MESSAGES = {
    UrgencyLevel.HIGH: "Immediate breathwork strongly recommended - multiple stress indicators detected",
    UrgencyLevel.MEDIUM: "Breathwork recommended now to help reset your mental state",
    UrgencyLevel.LOW: "A breathing exercise may help maintain focus",
}

CALM_MESSAGE = "Mental state is within acceptable range"


def count_recent_impulsive_trades(trades: Sequence[Trade], now: Optional[datetime] = None,
                                  behavior: BehaviorParams = BEHAVIOR) -> int:
    """Impulsive re-entries among trades entered in the hour before `now`."""
    reference = get_reference_time(now)
    cutoff = reference - TRAILING_WINDOW
    recent = [t for t in trades if cutoff <= to_utc(t.entry_time) <= reference]
    if len(recent) < 2:
        return 0
    return count_impulsive_reentries(recent, behavior)


def battery_drop(session_start_battery: Optional[float], mental_battery: float) -> float:
    """Battery lost since the session started, 0 when the start level is unknown."""
    if session_start_battery is None:
        return 0
    return max(0, session_start_battery - mental_battery)


def collect_triggers(mental_battery: float, emotional_volatility: float, impulsive_count: int, drop: float,
                     params: BreathworkParams = PARAMS) -> list[BreathworkTrigger]:
    triggers = []

    if emotional_volatility > params.volatility_trigger:
        triggers.append(BreathworkTrigger(TriggerType.HIGH_VOLATILITY, emotional_volatility,
                                          params.volatility_trigger, "High emotional volatility detected"))
    if mental_battery < params.battery_trigger:
        triggers.append(BreathworkTrigger(TriggerType.LOW_BATTERY, mental_battery,
                                          params.battery_trigger, "Mental battery is critically low"))
    if impulsive_count >= params.impulsive_trades_trigger:
        triggers.append(BreathworkTrigger(TriggerType.IMPULSIVE_TRADES, impulsive_count,
                                          params.impulsive_trades_trigger,
                                          f"{impulsive_count} impulsive trades in the last hour"))
    if drop > params.battery_drop_trigger:
        triggers.append(BreathworkTrigger(TriggerType.BATTERY_DROP, drop, params.battery_drop_trigger,
                                          f"Mental battery dropped {drop:g}% during this session"))

    return triggers


def calculate_urgency(triggers: Sequence[BreathworkTrigger], mental_battery: float, emotional_volatility: float,
                      params: BreathworkParams = PARAMS) -> Urgency:
    """
    Urgency of a suggestion.

    20 points per trigger, plus severity bonuses for a very low battery or
    very high volatility, plus 20 when two or more severe triggers compound.
    """
    if not triggers:
        return Urgency()

    score = len(triggers) * 20

    if mental_battery < params.critical_battery:
        score += 30
    elif mental_battery < params.battery_trigger:
        score += 15

    if emotional_volatility > params.severe_volatility:
        score += 25
    elif emotional_volatility > params.volatility_trigger:
        score += 10

    if sum(1 for t in triggers if t.type in SEVERE_TRIGGERS) >= 2:
        score += 20

    if score >= params.high_urgency:
        level = UrgencyLevel.HIGH
    elif score >= params.medium_urgency:
        level = UrgencyLevel.MEDIUM
    else:
        level = UrgencyLevel.LOW

    return Urgency(level=level, score=min(100, score), factors=tuple(t.type for t in triggers))


def recommend_exercise(triggers: Sequence[BreathworkTrigger]) -> BreathworkExercise:
    fired = {t.type for t in triggers}
    if TriggerType.HIGH_VOLATILITY in fired or TriggerType.IMPULSIVE_TRADES in fired:
        return BOX_BREATHING
    if TriggerType.LOW_BATTERY in fired:
        return ENERGIZING_BREATH
    return CALMING_BREATH


def should_suggest_breathwork(mental_battery: float, emotional_volatility: float,
                              today_trades: Optional[Sequence[Trade]] = None,
                              session_start_battery: Optional[float] = None,
                              now: Optional[datetime] = None,
                              params: BreathworkParams = PARAMS,
                              behavior: BehaviorParams = BEHAVIOR) -> BreathworkSuggestion:
    """
    Decide whether to suggest a breathing exercise.

    Args:
        mental_battery: Current mental battery (0-100)
        emotional_volatility: Current radar emotional volatility (0-100)
        today_trades: Today's trades, for the trailing-hour impulsive count
        session_start_battery: Battery at session start; None disables the drop trigger
        now: Reference time for the trailing hour

    Returns:
        BreathworkSuggestion with triggers, urgency and exercise
    """
    impulsive = count_recent_impulsive_trades(today_trades or [], now, behavior)
    drop = battery_drop(session_start_battery, mental_battery)

    triggers = collect_triggers(mental_battery, emotional_volatility, impulsive, drop, params)
    urgency = calculate_urgency(triggers, mental_battery, emotional_volatility, params)
    suggest = bool(triggers)

    logger.info("Breathwork evaluated", should_suggest=suggest, triggers=[t.type.value for t in triggers],
                urgency=urgency.level.value, battery=mental_battery, volatility=emotional_volatility)

    return BreathworkSuggestion(
        should_suggest=suggest,
        urgency=urgency,
        triggers=tuple(triggers),
        message=URGENCY_MESSAGES[urgency.level] if suggest else CALM_MESSAGE,
        exercise=recommend_exercise(triggers) if suggest else None,
    )
