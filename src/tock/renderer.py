#!/usr/bin/env python3
"""
Plain-text rendering of sessions and period reports.

Functions return lists of lines; callers decide where to print them.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import List, Optional, Sequence

from .periods import PeriodStats, grand_totals
from .store import Session
from .timestamps import format_display_timestamp, hours_between, local_now

ID_WIDTH = 5
TEXT_WIDTH = 20
HOURS_WIDTH = 10
STATS_RULE = "─" * 30
GRAND_RULE = "═" * 33


def format_hours(hours: float) -> str:
    """
    Format hours with two decimals.

    Examples
    --------
    >>> format_hours(1.5)
    '1.50h'
    """
    return f"{hours:.2f}h"


def format_active_session(session: Session, now: Optional[datetime] = None) -> str:
    """
    Describe the active session and how long it has been running.
    """
    current = now or local_now()
    return f"Active: {session.topic} ({format_hours(hours_between(session.start, current))})"


def format_sessions(
    sessions: Sequence[Session],
    *,
    show_id: bool,
    tz: Optional[tzinfo] = None,
) -> List[str]:
    """
    Render sessions as an aligned table.

    Parameters
    ----------
    sessions : Sequence[Session]
        Sessions to render, in display order.
    show_id : bool
        Include the ID column; active sessions are only listed in this view.
    tz : Optional[tzinfo], optional
        Display timezone; system local zone when None.

    Returns
    -------
    List[str]
        Table lines, header first.
    """
    if show_id:
        header = (
            f"{'ID':<{ID_WIDTH}} {'Topic':<{TEXT_WIDTH}} {'Start':<{TEXT_WIDTH}} "
            f"{'End':<{TEXT_WIDTH}} {'Hours':>{HOURS_WIDTH}}"
        )
        rule_width = 80
    else:
        header = (
            f"{'Topic':<{TEXT_WIDTH}} {'Start':<{TEXT_WIDTH}} "
            f"{'End':<{TEXT_WIDTH}} {'Hours':>{HOURS_WIDTH}}"
        )
        rule_width = 75
    lines = [header, "─" * rule_width]
    for session in sessions:
        start = format_display_timestamp(session.start, tz)
        if session.end is not None:
            end = format_display_timestamp(session.end, tz)
            hours = format_hours(hours_between(session.start, session.end))
        elif show_id:
            end = "ACTIVE"
            hours = "-"
        else:
            continue
        row = (
            f"{session.topic:<{TEXT_WIDTH}} {start:<{TEXT_WIDTH}} "
            f"{end:<{TEXT_WIDTH}} {hours:>{HOURS_WIDTH}}"
        )
        if show_id:
            row = f"{session.id:<{ID_WIDTH}} {row}"
        lines.append(row)
    return lines


def _topic_lines(stats: PeriodStats) -> List[str]:
    lines = [f"  {topic:<{TEXT_WIDTH}} {hours:>8.2f}h" for topic, hours in stats.topics]
    lines.append(f"  {STATS_RULE}")
    lines.append(f"  {'Total':<{TEXT_WIDTH}} {stats.total:>8.2f}h")
    return lines


def format_period_stats(stats: Sequence[PeriodStats]) -> List[str]:
    """
    Render per-bucket topic hours, with grand totals for multiple buckets.

    Examples
    --------
    >>> for line in format_period_stats([PeriodStats("Today", [("A", 2.0)])]):
    ...     print(line)
    Today
      A                        2.00h
      ──────────────────────────────
      Total                    2.00h
    """
    lines: List[str] = []
    for index, period in enumerate(stats):
        if index:
            lines.append("")
        lines.append(period.label)
        lines.extend(_topic_lines(period))
    if len(stats) > 1:
        lines.append("")
        lines.append(GRAND_RULE)
        combined = PeriodStats("Grand Total:", grand_totals(list(stats)))
        lines.append(combined.label)
        lines.extend(_topic_lines(combined))
    return lines
