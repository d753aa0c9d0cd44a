"""NEXUS Query — Timestamp normalizer.

One contract for every temporal value that crosses the query layer:

- outbound: any store representation (aware/naive ``datetime``, ``date``,
  ISO string, epoch seconds) becomes ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC,
  or ``YYYY-MM-DD`` for date-only columns;
- inbound: canonical strings from range filters become comparable
  ``datetime``/``date`` bounds.

Naive datetimes are taken to be UTC (SQLite and ``timestamp without time
zone`` columns hand them back that way).
"""
from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

from nexus_query.core.errors import QueryValidationError

_DATETIME = TypeAdapter(datetime)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_iso(text: str) -> datetime:
    try:
        return _DATETIME.validate_python(text.strip())
    except ValidationError:
        raise QueryValidationError(f"Invalid timestamp: {text!r}") from None


def to_datetime(value: Any) -> datetime:
    """Coerce a temporal value to an aware UTC datetime."""
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        if len(value.strip()) == 10:
            return datetime.combine(to_date(value), time.min, tzinfo=timezone.utc)
        return _as_utc(_parse_iso(value))
    raise QueryValidationError(f"Unsupported temporal value of type {type(value).__name__}")


def to_date(value: Any) -> date:
    """Coerce a temporal value to a calendar date (UTC for instants)."""
    if isinstance(value, datetime):
        return _as_utc(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value.strip()) == 10:
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise QueryValidationError(f"Invalid date: {value!r}") from None
    return to_datetime(value).date()


def to_iso_utc(value: Any) -> str | None:
    """Canonical UTC ISO-8601 string, or None for a null value."""
    if value is None:
        return None
    dt = to_datetime(value)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_iso_date(value: Any) -> str | None:
    """``YYYY-MM-DD`` for date-only columns, or None for a null value."""
    if value is None:
        return None
    return to_date(value).isoformat()
