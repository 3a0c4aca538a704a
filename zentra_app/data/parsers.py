"""
Parsers converting raw trade and plan payloads into canonical records.

Import collaborators and API handlers hand over plain dictionaries (camelCase
as stored, or snake_case). Parsing is the validation boundary: records that
reach the analytics core are structurally complete.
"""

import math
from datetime import UTC, datetime
from typing import Any, Iterable, Optional

import structlog

from ..errors import MalformedDataError, MissingDataError, TemporalDataError
from ..utils.time import to_utc
from .models import Session, StopLossDiscipline, Trade, TradingPlan

logger = structlog.get_logger(__name__)

TRADE_FIELDS = {
    "entry_time": "entryTime",
    "exit_time": "exitTime",
    "profit_loss": "profitLoss",
    "session": "session",
    "risk_percent_used": "riskPercentUsed",
    "risk_reward_achieved": "riskRewardAchieved",
    "target_percent_achieved": "targetPercentAchieved",
    "stop_loss_hit": "stopLossHit",
    "exited_early": "exitedEarly",
    "notes": "notes",
    "trade_id": "_id",
}

PLAN_FIELDS = {
    "max_trades_per_day": "maxTradesPerDay",
    "risk_percent_per_trade": "riskPercentPerTrade",
    "target_risk_reward_ratio": "targetRiskRewardRatio",
    "preferred_sessions": "preferredSessions",
    "stop_loss_discipline": "stopLossDiscipline",
}


def _lookup(raw: dict[str, Any], name: str, aliases: dict[str, str]) -> Any:
    """Fetch a field by snake_case name, falling back to its camelCase alias."""
    if name in raw:
        return raw[name]
    return raw.get(aliases[name])


def _require(raw: dict[str, Any], name: str, aliases: dict[str, str], record_type: str) -> Any:
    value = _lookup(raw, name, aliases)
    if value is None:
        raise MissingDataError(
            f"Missing required {record_type} field: {aliases[name]}",
            field=name,
            record_type=record_type
        )
    return value


def parse_timestamp(value: Any, field: str) -> datetime:
    """Parse an ISO8601 string, epoch milliseconds or datetime into UTC."""
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000.0, tz=UTC)
    if isinstance(value, str):
        try:
            return to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError as e:
            raise MalformedDataError(
                f"Invalid timestamp for {field}: {e}",
                field=field,
                raw_value=value,
                expected_format="ISO8601"
            ) from e
    raise MalformedDataError(
        f"Invalid timestamp for {field}",
        field=field,
        raw_value=value,
        expected_format="ISO8601 string or epoch milliseconds"
    )


def _parse_number(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise MalformedDataError(f"{field} must be numeric", field=field, raw_value=value)
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedDataError(f"{field} must be numeric", field=field, raw_value=value) from e
    if not math.isfinite(result):
        raise MalformedDataError(f"{field} must be a finite number", field=field, raw_value=value)
    return result


def _parse_optional_number(value: Any, field: str) -> Optional[float]:
    if value is None:
        return None
    return _parse_number(value, field)


def _parse_bool(value: Any, field: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise MalformedDataError(f"{field} must be a boolean", field=field, raw_value=value)
    return value


def _parse_session(value: Any, field: str = "session") -> Session:
    try:
        return Session(str(value).upper())
    except ValueError as e:
        raise MalformedDataError(
            f"Unknown session: {value}",
            field=field,
            raw_value=value,
            expected_format="LONDON, NY or ASIA"
        ) from e


def parse_trade(raw: dict[str, Any]) -> Trade:
    """
    Convert a raw trade payload into a Trade.

    Args:
        raw: Trade dictionary with camelCase or snake_case keys

    Returns:
        Validated Trade record

    Raises:
        MissingDataError: If a required field is absent
        MalformedDataError: If a field has the wrong type or value
        TemporalDataError: If the exit precedes the entry
    """
    entry_time = parse_timestamp(_require(raw, "entry_time", TRADE_FIELDS, "trade"), "entryTime")
    exit_time = parse_timestamp(_require(raw, "exit_time", TRADE_FIELDS, "trade"), "exitTime")

    if exit_time < entry_time:
        raise TemporalDataError(
            "Trade exitTime precedes entryTime",
            entry_time=entry_time,
            exit_time=exit_time
        )

    risk_used = _parse_optional_number(_lookup(raw, "risk_percent_used", TRADE_FIELDS), "riskPercentUsed")
    if risk_used is not None and risk_used < 0:
        raise MalformedDataError("riskPercentUsed must be >= 0", field="risk_percent_used", raw_value=risk_used)

    notes = _lookup(raw, "notes", TRADE_FIELDS) or ""
    trade_id = _lookup(raw, "trade_id", TRADE_FIELDS)

    return Trade(
        entry_time=entry_time,
        exit_time=exit_time,
        profit_loss=_parse_number(_require(raw, "profit_loss", TRADE_FIELDS, "trade"), "profitLoss"),
        session=_parse_session(_require(raw, "session", TRADE_FIELDS, "trade")),
        risk_percent_used=risk_used,
        risk_reward_achieved=_parse_optional_number(
            _lookup(raw, "risk_reward_achieved", TRADE_FIELDS), "riskRewardAchieved"
        ),
        target_percent_achieved=_parse_optional_number(
            _lookup(raw, "target_percent_achieved", TRADE_FIELDS), "targetPercentAchieved"
        ),
        stop_loss_hit=_parse_bool(_lookup(raw, "stop_loss_hit", TRADE_FIELDS), "stopLossHit"),
        exited_early=_parse_bool(_lookup(raw, "exited_early", TRADE_FIELDS), "exitedEarly"),
        notes=str(notes),
        trade_id=str(trade_id) if trade_id is not None else None,
    )


def parse_trades(raws: Iterable[dict[str, Any]]) -> list[Trade]:
    """Parse a batch of trade payloads, failing on the first invalid record."""
    trades = [parse_trade(raw) for raw in raws]
    logger.debug("Parsed trade batch", count=len(trades))
    return trades


def parse_plan(raw: dict[str, Any]) -> TradingPlan:
    """
    Convert a raw plan payload into a TradingPlan.

    Raises:
        MissingDataError: If a required field is absent
        MalformedDataError: If a field has the wrong type or is out of range
    """
    max_trades = _require(raw, "max_trades_per_day", PLAN_FIELDS, "plan")
    if isinstance(max_trades, bool) or not isinstance(max_trades, int) or max_trades < 0:
        raise MalformedDataError(
            "maxTradesPerDay must be a non-negative integer",
            field="max_trades_per_day",
            raw_value=max_trades
        )

    risk = _parse_number(_require(raw, "risk_percent_per_trade", PLAN_FIELDS, "plan"), "riskPercentPerTrade")
    if not 0 <= risk <= 100:
        raise MalformedDataError(
            "riskPercentPerTrade must be between 0 and 100",
            field="risk_percent_per_trade",
            raw_value=risk
        )

    target_rr = _parse_number(_require(raw, "target_risk_reward_ratio", PLAN_FIELDS, "plan"), "targetRiskRewardRatio")
    if target_rr < 0:
        raise MalformedDataError(
            "targetRiskRewardRatio must be >= 0",
            field="target_risk_reward_ratio",
            raw_value=target_rr
        )

    sessions_raw = _lookup(raw, "preferred_sessions", PLAN_FIELDS) or []
    if isinstance(sessions_raw, str) or not isinstance(sessions_raw, (list, tuple, set, frozenset)):
        raise MalformedDataError(
            "preferredSessions must be a list",
            field="preferred_sessions",
            raw_value=sessions_raw
        )

    discipline_raw = _require(raw, "stop_loss_discipline", PLAN_FIELDS, "plan")
    try:
        discipline = StopLossDiscipline(str(discipline_raw).upper())
    except ValueError as e:
        raise MalformedDataError(
            f"Unknown stopLossDiscipline: {discipline_raw}",
            field="stop_loss_discipline",
            raw_value=discipline_raw,
            expected_format="ALWAYS or FLEXIBLE"
        ) from e

    return TradingPlan(
        max_trades_per_day=max_trades,
        risk_percent_per_trade=risk,
        target_risk_reward_ratio=target_rr,
        preferred_sessions=frozenset(_parse_session(s, "preferred_sessions") for s in sessions_raw),
        stop_loss_discipline=discipline,
    )
