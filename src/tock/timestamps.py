#!/usr/bin/env python3
"""
Parsing and formatting of session timestamps.

Timestamps are stored as UTC text (``YYYY-MM-DDTHH:MM:SSZ``) so stored values
sort lexicographically in time order and range queries compare like with like.
User input and display use local wall-clock time.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import AmbiguousTimeError, ConfigError, InvalidDatetimeError

USER_INPUT_FORMAT = "%d.%m.%Y %H:%M"
DISPLAY_FORMAT = "%d.%m.%Y %H:%M"
EXPORT_FORMAT = "%Y-%m-%d %H:%M:%S"
STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """
    Resolve an IANA timezone name.

    Parameters
    ----------
    name : Optional[str]
        Timezone name such as ``Europe/Berlin``.

    Returns
    -------
    Optional[tzinfo]
        Zone object, or None to use the system local zone.

    Examples
    --------
    >>> resolve_timezone(None) is None
    True
    >>> str(resolve_timezone("UTC"))
    'UTC'
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown timezone: {name}") from exc


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    """
    Return the current instant as an aware local datetime.
    """
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    if tz is None:
        return value.astimezone()
    return value.astimezone(tz)


def localize(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Attach the local timezone to a naive wall-clock datetime.

    Parameters
    ----------
    value : datetime
        Naive local datetime.
    tz : Optional[tzinfo], optional
        Zone to use; the system local zone when None.

    Returns
    -------
    datetime
        Aware datetime.

    Raises
    ------
    AmbiguousTimeError
        If the wall-clock time occurs twice or not at all in the zone.

    Examples
    --------
    >>> localize(datetime(2024, 3, 1, 9, 30), timezone.utc).isoformat()
    '2024-03-01T09:30:00+00:00'
    """
    naive = value.replace(tzinfo=None)
    if tz is None:
        first = naive.replace(fold=0).astimezone()
        second = naive.replace(fold=1).astimezone()
    else:
        first = naive.replace(tzinfo=tz, fold=0)
        second = naive.replace(tzinfo=tz, fold=1)
    if first.utcoffset() != second.utcoffset():
        raise AmbiguousTimeError(
            f"Ambiguous local time: {naive.strftime(DISPLAY_FORMAT)}"
        )
    return first.replace(fold=0)


def parse_user_datetime(value: str, tz: Optional[tzinfo] = None) -> datetime:
    """
    Parse a ``DD.MM.YYYY HH:MM`` datetime entered by the user.

    Parameters
    ----------
    value : str
        Datetime input in local time.
    tz : Optional[tzinfo], optional
        Zone to interpret the input in; the system local zone when None.

    Returns
    -------
    datetime
        Aware datetime.

    Examples
    --------
    >>> parse_user_datetime("05.02.2024 14:30", timezone.utc).isoformat()
    '2024-02-05T14:30:00+00:00'
    """
    text = (value or "").strip()
    try:
        parsed = datetime.strptime(text, USER_INPUT_FORMAT)
    except ValueError as exc:
        raise InvalidDatetimeError(
            "Invalid datetime format. Use DD.MM.YYYY HH:MM"
        ) from exc
    return localize(parsed, tz)


def normalize_to_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to UTC with tzinfo; naive values are taken as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_storage_timestamp(value: datetime) -> str:
    """
    Format timestamps for storage.

    Parameters
    ----------
    value : datetime
        Datetime to format.

    Returns
    -------
    str
        ISO timestamp in UTC.

    Examples
    --------
    >>> from datetime import timedelta
    >>> berlin = timezone(timedelta(hours=1))
    >>> format_storage_timestamp(datetime(2024, 1, 1, 9, 0, tzinfo=berlin))
    '2024-01-01T08:00:00Z'
    """
    return normalize_to_utc(value).strftime(STORAGE_FORMAT)


def parse_storage_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse stored timestamps.

    Parameters
    ----------
    value : Optional[str]
        Stored timestamp string.

    Returns
    -------
    Optional[datetime]
        Parsed aware datetime, or None.

    Examples
    --------
    >>> parse_storage_timestamp("2024-01-01T08:00:00Z").isoformat()
    '2024-01-01T08:00:00+00:00'
    >>> parse_storage_timestamp("2024-01-01T09:00:00+01:00").hour
    9
    >>> parse_storage_timestamp(None) is None
    True
    """
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_display_timestamp(value: datetime, tz: Optional[tzinfo] = None) -> str:
    return to_local(value, tz).strftime(DISPLAY_FORMAT)


def format_export_timestamp(value: datetime, tz: Optional[tzinfo] = None) -> str:
    return to_local(value, tz).strftime(EXPORT_FORMAT)


def hours_between(start: datetime, end: datetime) -> float:
    """
    Return the length of an interval in hours.

    Examples
    --------
    >>> hours_between(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10, 30))
    1.5
    """
    return (end - start).total_seconds() / 3600.0
