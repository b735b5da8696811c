"""
JobTrail Backend — Timestamp Canonicalization
===============================================

What:  Parsing, formatting and arithmetic for sync timestamps.
How:   Every timestamp entering the system is parsed to a timezone-aware UTC
       datetime truncated to millisecond precision; every timestamp leaving it
       is rendered as YYYY-MM-DDTHH:MM:SS.mmmZ (the format JavaScript's
       Date.toISOString() produces).

Invariant:
    Stored values are exactly the values that were emitted, so a client that
    echoes a record back unchanged compares equal (and is discarded by LWW)
    instead of appearing newer because of sub-millisecond digits.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Smallest step by which a server-side mutation advances updated_at.
TICK = timedelta(milliseconds=1)


def truncate_to_millis(value: datetime) -> datetime:
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalizes a datetime read back from the store to aware UTC.

    SQLite returns naive datetimes for DateTime(timezone=True) columns; the
    values were written as UTC, so the zone is reattached rather than converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: object) -> datetime:
    """
    Parses an ISO-8601 string (or aware datetime) into canonical UTC.

    Raises:
        ValueError: not a string/datetime, not ISO-8601, missing an offset,
            or not representable once converted to UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("timestamp is empty")
        if text[-1] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except (ValueError, OverflowError):
            raise ValueError(f"'{value}' is not an ISO-8601 timestamp") from None
    else:
        raise ValueError("timestamp must be an ISO-8601 string")

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise ValueError(f"'{value}' has no UTC offset; send e.g. 2024-01-01T00:00:00.000Z")
    try:
        utc = parsed.astimezone(timezone.utc)
    except OverflowError:
        # e.g. 0001-01-01T00:00:00+01:00 falls before datetime.min in UTC
        raise ValueError(f"'{value}' is outside the supported date range") from None
    return truncate_to_millis(utc)


def format_timestamp(value: datetime) -> str:
    utc = as_utc(value)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return truncate_to_millis(datetime.now(timezone.utc))


def advance(previous: Optional[datetime], proposed: Optional[datetime] = None) -> datetime:
    """
    Returns an updated_at strictly greater than ``previous``.

    ``proposed`` (or the current time) is used when it is already later;
    otherwise the value is ``previous`` plus one millisecond. A stored record
    stamped by a client with a fast clock still moves forward on every
    server-side mutation.
    """
    candidate = proposed or utc_now()
    previous = as_utc(previous)
    if previous is not None and candidate <= previous:
        return previous + TICK
    return candidate
