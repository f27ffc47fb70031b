"""
Datetime helpers for rows coming from and going to Supabase.
All datetimes are timezone-aware UTC.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Union


def utc_now() -> datetime:
    """Current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def parse_iso_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO timestamp (as returned by PostgREST) to an aware datetime.
    Accepts both the 'Z' suffix and '+00:00' offsets, and passes through
    datetimes and None unchanged apart from forcing UTC on naive values.

    Raises:
        ValueError: If the string cannot be parsed
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    else:
        normalized = value.replace("Z", "+00:00")
        try:
            dt = datetime.fromisoformat(normalized)
        except ValueError as e:
            raise ValueError(f"Invalid datetime string: {value}") from e

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_row_timestamps(row: Dict[str, Any], fields: Iterable[str] = ("created_at",)) -> Dict[str, Any]:
    """Return a copy of ``row`` with the given timestamp columns parsed."""
    row = dict(row)
    for field in fields:
        if row.get(field):
            row[field] = parse_iso_datetime(row[field])
    return row
