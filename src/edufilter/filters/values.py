"""Value normalization shared by the filter state and the evaluator."""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Optional, Union

import pandas as pd

DateBound = Union[date, datetime]

COLLECTION_TYPES = (list, tuple, set, frozenset)


def is_vacuous(value: Any) -> bool:
    """True when a value carries no constraint and must not be stored."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, COLLECTION_TYPES):
        return len(value) == 0
    return False


def is_missing(value: Any) -> bool:
    """True for None and pandas missing markers (NaN, NaT, NA)."""
    if value is None:
        return True
    return pd.api.types.is_scalar(value) and bool(pd.isna(value))


def as_values(value: Any) -> list:
    """Spread a collection into a list; wrap a scalar."""
    if isinstance(value, COLLECTION_TYPES):
        return list(value)
    return [value]


def to_number(value: Any) -> Optional[float]:
    """Read a value as a float, or None if it is not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalize an entity timestamp to a naive UTC datetime.

    Accepts datetimes, dates, pandas Timestamps and ISO 8601 strings
    (including a trailing 'Z'). Anything else yields None.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return _naive_utc(value.to_pydatetime())
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _naive_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def parse_bound(value: Any) -> DateBound:
    """
    Normalize a date-range bound.

    Date-only values stay dates so they compare by calendar day; anything with
    a time component becomes a naive UTC datetime.

    Raises:
        ValueError: If the value is not a date, datetime or ISO string.
    """
    if isinstance(value, pd.Timestamp):
        return _naive_utc(value.to_pydatetime())
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        parsed = parse_timestamp(text)
        if parsed is not None:
            return parsed
    raise ValueError(f"Not a date: {value!r}")


def to_json_value(value: Any) -> Any:
    """Convert a state value into something json.dumps accepts."""
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
