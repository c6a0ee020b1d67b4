#!/usr/bin/env python3
"""
Calendar buckets for day/week/month/year reports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import TockError, ValidationError
from .store import SessionStore
from .timestamps import local_now, localize, to_local

log = logging.getLogger(__name__)


class Period(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class Bucket:
    """
    Half-open calendar window ``[start, end)``.

    Attributes
    ----------
    label : str
        Human-readable name of the window.
    start : datetime
        Window start, local midnight at the start of the unit.
    end : datetime
        Window end; the current instant for the in-progress unit.
    """

    label: str
    start: datetime
    end: datetime


@dataclass
class PeriodStats:
    """
    Hours per topic within one bucket.
    """

    label: str
    topics: List[Tuple[str, float]] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(hours for _, hours in self.topics)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """
    Move a (year, month) pair by a number of months.

    Parameters
    ----------
    year : int
        Calendar year.
    month : int
        Month, 1-12.
    delta : int
        Months to move; negative moves back.

    Returns
    -------
    Tuple[int, int]
        Resulting (year, month).

    Examples
    --------
    >>> shift_month(2024, 1, -1)
    (2023, 12)
    >>> shift_month(2024, 3, -14)
    (2023, 1)
    >>> shift_month(2023, 12, 1)
    (2024, 1)
    """
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def unit_start(day: date, period: Period, offset: int = 0) -> date:
    """
    Return the first day of the unit ``offset`` units away from ``day``'s unit.

    Examples
    --------
    >>> unit_start(date(2024, 1, 17), Period.WEEK)
    datetime.date(2024, 1, 15)
    >>> unit_start(date(2024, 1, 17), Period.MONTH, -1)
    datetime.date(2023, 12, 1)
    >>> unit_start(date(2024, 1, 17), Period.YEAR, -2)
    datetime.date(2022, 1, 1)
    """
    if period is Period.DAY:
        return day + timedelta(days=offset)
    if period is Period.WEEK:
        monday = day - timedelta(days=day.weekday())
        return monday + timedelta(weeks=offset)
    if period is Period.MONTH:
        year, month = shift_month(day.year, day.month, offset)
        return date(year, month, 1)
    if period is Period.YEAR:
        return date(day.year + offset, 1, 1)
    raise ValueError(f"Unsupported period: {period}")


def bucket_label(period: Period, index: int, first_day: date, last_day: date) -> str:
    """
    Build the label for a bucket.

    Parameters
    ----------
    period : Period
        Bucket granularity.
    index : int
        Bucket index, 0 for the current unit.
    first_day : date
        First calendar day in the bucket.
    last_day : date
        Last calendar day in the bucket.

    Returns
    -------
    str
        Bucket label.

    Examples
    --------
    >>> bucket_label(Period.DAY, 1, date(2024, 1, 16), date(2024, 1, 16))
    'Yesterday'
    >>> bucket_label(Period.WEEK, 1, date(2024, 1, 8), date(2024, 1, 14))
    'Week 02 (08.01 - 14.01.2024)'
    >>> bucket_label(Period.YEAR, 3, date(2021, 1, 1), date(2021, 12, 31))
    '2021'
    """
    if period is Period.DAY:
        if index == 0:
            return "Today"
        if index == 1:
            return "Yesterday"
        return first_day.strftime("%A, %d.%m.%Y")
    if period is Period.WEEK:
        week = first_day.isocalendar()[1]
        return f"Week {week:02d} ({first_day:%d.%m} - {last_day:%d.%m.%Y})"
    if period is Period.MONTH:
        return first_day.strftime("%B %Y")
    return str(first_day.year)


def compute_buckets(
    period: Period,
    count: int,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[Bucket]:
    """
    Compute consecutive calendar buckets ending now, most recent first.

    Parameters
    ----------
    period : Period
        Bucket granularity.
    count : int
        Number of buckets.
    now : Optional[datetime], optional
        Reference instant (defaults to the current time).
    tz : Optional[tzinfo], optional
        Local zone for calendar boundaries; system local zone when None.

    Returns
    -------
    List[Bucket]
        Bucket 0 covers the current unit up to ``now``; later buckets cover
        whole earlier units.

    Raises
    ------
    AmbiguousTimeError
        If a boundary falls on an ambiguous or nonexistent local time.
    ValidationError
        If the oldest bucket would start before year 1.
    """
    if count < 0:
        raise ValueError("Bucket count must not be negative.")
    period = Period(period)
    current = to_local(now, tz) if now is not None else local_now(tz)
    today = current.date()
    if count:
        try:
            oldest = unit_start(today, period, 1 - count)
            localize(datetime.combine(oldest, time.min), tz).astimezone(timezone.utc)
        except TockError:
            raise
        except (ValueError, OverflowError) as exc:
            raise ValidationError("Period count reaches before year 1") from exc
    buckets: List[Bucket] = []
    for index in range(count):
        first_day = unit_start(today, period, -index)
        start = localize(datetime.combine(first_day, time.min), tz)
        if index == 0:
            end = current
            last_day = today
        else:
            next_day = unit_start(today, period, -index + 1)
            end = localize(datetime.combine(next_day, time.min), tz)
            last_day = next_day - timedelta(days=1)
        label = bucket_label(period, index, first_day, last_day)
        log.debug("Bucket %s: [%s, %s)", label, start.isoformat(), end.isoformat())
        buckets.append(Bucket(label=label, start=start, end=end))
    return buckets


def collect_period_stats(
    store: SessionStore,
    period: Period,
    count: int,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[PeriodStats]:
    """
    Aggregate hours per topic for each bucket.
    """
    return [
        PeriodStats(label=bucket.label, topics=store.period_stats(bucket.start, bucket.end))
        for bucket in compute_buckets(period, count, now=now, tz=tz)
    ]


def grand_totals(stats: List[PeriodStats]) -> List[Tuple[str, float]]:
    """
    Sum hours per topic across buckets, most hours first.

    Examples
    --------
    >>> grand_totals([
    ...     PeriodStats("a", [("x", 1.0), ("y", 2.0)]),
    ...     PeriodStats("b", [("x", 2.5)]),
    ... ])
    [('x', 3.5), ('y', 2.0)]
    """
    totals: Dict[str, float] = {}
    for period in stats:
        for topic, hours in period.topics:
            totals[topic] = totals.get(topic, 0.0) + hours
    return sorted(totals.items(), key=lambda item: (-item[1], item[0]))
