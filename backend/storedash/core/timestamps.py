"""
Timestamp normalization for backend records.

Records arrive with timestamps in whatever shape the writer used: native
datetimes, backend timestamp objects, ``{seconds, nanoseconds}`` maps,
epoch numbers or ISO-8601 strings.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from storedash.core.logging import get_logger

logger = get_logger(__name__)

_CONVERTER_METHODS = ("to_datetime", "ToDatetime", "toDate")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MonotonicClock:
    """
    UTC clock whose readings strictly increase.

    Two writes in the same microsecond, or a wall clock stepping
    backwards, still get distinct ordered timestamps.
    """

    def __init__(self) -> None:
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        current = utcnow()
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _from_mapping(value: dict) -> Optional[datetime]:
    seconds = value.get("seconds", value.get("_seconds"))
    if seconds is None:
        return None
    nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
    return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Convert a timestamp-like value to an aware datetime.

    Raises ValueError or TypeError when the value is not understood.
    """
    if isinstance(value, datetime):
        return _aware(value)

    for method in _CONVERTER_METHODS:
        converter = getattr(value, method, None)
        if callable(converter):
            converted = converter()
            if not isinstance(converted, datetime):
                raise TypeError(f"{method}() returned {type(converted).__name__}")
            return _aware(converted)

    if isinstance(value, dict):
        parsed = _from_mapping(value)
        if parsed is None:
            raise ValueError("timestamp mapping has no seconds field")
        return parsed

    if isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")

    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return _aware(datetime.fromisoformat(text))

    raise TypeError(f"unsupported timestamp type {type(value).__name__}")


def coerce_datetime(value: Any, *, field: str = "timestamp") -> datetime:
    """
    Like parse_timestamp, but never raises.

    Unparseable values fall back to the current time and are logged.
    """
    if value is None:
        logger.warning("Missing timestamp, using current time", field=field)
        return utcnow()
    try:
        return parse_timestamp(value)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        logger.warning(
            "Invalid timestamp, using current time",
            field=field,
            value=repr(value),
            error=str(e),
        )
        return utcnow()
