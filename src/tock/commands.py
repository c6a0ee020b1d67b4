#!/usr/bin/env python3
"""
Handlers for tock subcommands.

Each handler prints its output and returns an exit code. Failures are raised
as ``TockError`` subclasses for the CLI layer to report.
"""

from __future__ import annotations

import csv
import logging
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Callable, Optional

from .errors import NotFoundError, SessionConflictError, StorageError, ValidationError
from .periods import Period, collect_period_stats
from .renderer import (
    format_active_session,
    format_hours,
    format_period_stats,
    format_sessions,
)
from .store import SessionStore
from .timestamps import (
    format_export_timestamp,
    hours_between,
    local_now,
    parse_user_datetime,
)

log = logging.getLogger(__name__)

EXPORT_HEADER = ["start", "end", "duration (hours)", "topic"]
RESET_CONFIRMATION = "confirm"


def _print_lines(lines) -> None:
    for line in lines:
        print(line)


def run_start(
    store: SessionStore,
    topic: Optional[str],
    *,
    default_topic: str = "default",
    now: Optional[datetime] = None,
) -> int:
    """
    Start tracking a new session.
    """
    if store.get_active_session() is not None:
        raise SessionConflictError(
            "Session already active! Stop it first with 'tock stop'"
        )
    store.start_session(topic or default_topic, now=now)
    if topic:
        print(f"Started: {topic}")
    else:
        print("Started tracking")
    return 0


def run_stop(
    store: SessionStore,
    topic: Optional[str] = None,
    *,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Stop the active session.

    Parameters
    ----------
    store : SessionStore
        Session storage.
    topic : Optional[str], optional
        When given, only stop the active session if its topic matches.
    tz : Optional[tzinfo], optional
        Display timezone.
    now : Optional[datetime], optional
        Stop time (defaults to the current time).

    Returns
    -------
    int
        Exit code.
    """
    active = store.get_active_session()
    if active is None:
        raise SessionConflictError("No active session to stop")
    if topic is not None and topic != active.topic:
        raise SessionConflictError(
            f"No active session for topic '{topic}' (active: '{active.topic}')"
        )
    store.stop_session(active.id, now=now)
    print("Stopped tracking")
    stopped = store.get_session(active.id)
    if stopped is not None:
        _print_lines(format_sessions([stopped], show_id=False, tz=tz))
    return 0


def run_show(
    store: SessionStore,
    count: int,
    period: Optional[Period] = None,
    *,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Show recent sessions, or hours per topic for recent periods.
    """
    current = now or local_now(tz)
    active = store.get_active_session()
    if active is not None:
        print(format_active_session(active, current))
        print()
    if period is None:
        _print_lines(format_sessions(store.get_sessions(count), show_id=False, tz=tz))
        return 0
    stats = collect_period_stats(store, period, count, now=current, tz=tz)
    _print_lines(format_period_stats(stats))
    return 0


def run_list(store: SessionStore, count: int, *, tz: Optional[tzinfo] = None) -> int:
    """
    List recent sessions with their ids.
    """
    _print_lines(format_sessions(store.get_sessions(count), show_id=True, tz=tz))
    return 0


def run_add(
    store: SessionStore,
    topic: str,
    start: str,
    end: str,
    *,
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Add a finished session with explicit start and end times.
    """
    start_dt = parse_user_datetime(start, tz)
    end_dt = parse_user_datetime(end, tz)
    if end_dt <= start_dt:
        raise ValidationError("End time must be after start time")
    store.insert_session(topic, start_dt, end_dt)
    print(f"Added: {topic} ({format_hours(hours_between(start_dt, end_dt))})")
    return 0


def run_edit(
    store: SessionStore,
    session_id: int,
    *,
    topic: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Change the topic, start, or end of a session.

    Parameters
    ----------
    store : SessionStore
        Session storage.
    session_id : int
        Session to edit.
    topic, start, end : Optional[str]
        New values; start and end use ``DD.MM.YYYY HH:MM``.
    tz : Optional[tzinfo], optional
        Zone to interpret datetimes in.

    Returns
    -------
    int
        Exit code.
    """
    session = store.get_session(session_id)
    if session is None:
        raise NotFoundError(session_id)
    if topic is None and start is None and end is None:
        raise ValidationError("Nothing to edit: pass --topic, --start, or --end")
    start_dt = parse_user_datetime(start, tz) if start is not None else None
    end_dt = parse_user_datetime(end, tz) if end is not None else None
    new_start = start_dt or session.start
    new_end = end_dt or session.end
    if new_end is not None and new_end <= new_start:
        raise ValidationError("End time must be after start time")
    if topic is not None:
        store.update_session_topic(session_id, topic)
    if start_dt is not None:
        store.update_session_start(session_id, start_dt)
    if end_dt is not None:
        store.update_session_end(session_id, end_dt)
    print(f"Updated session {session_id}")
    return 0


def run_delete(store: SessionStore, session_id: int) -> int:
    if not store.delete_session(session_id):
        raise NotFoundError(session_id)
    print(f"Deleted session {session_id}")
    return 0


def export_filename(now: datetime) -> str:
    """
    Build the export filename for a timestamp.

    Examples
    --------
    >>> export_filename(datetime(2024, 5, 6, 7, 8, 9))
    'tock_export_20240506_070809.csv'
    """
    return f"tock_export_{now:%Y%m%d_%H%M%S}.csv"


def run_export(
    store: SessionStore,
    directory: Optional[Path] = None,
    *,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Write all closed sessions to a timestamped CSV file.

    Parameters
    ----------
    store : SessionStore
        Session storage.
    directory : Optional[Path], optional
        Output directory (defaults to the working directory).
    tz : Optional[tzinfo], optional
        Timezone for exported timestamps.
    now : Optional[datetime], optional
        Time used in the filename.

    Returns
    -------
    int
        Exit code.
    """
    sessions = store.get_all_sessions_for_export()
    target_dir = directory or Path.cwd()
    path = target_dir / export_filename(now or local_now(tz))
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(EXPORT_HEADER)
            for session in sessions:
                if session.end is None:
                    continue
                writer.writerow(
                    [
                        format_export_timestamp(session.start, tz),
                        format_export_timestamp(session.end, tz),
                        f"{hours_between(session.start, session.end):.2f}",
                        session.topic,
                    ]
                )
    except OSError as exc:
        raise StorageError(f"Cannot write export file {path}: {exc}") from exc
    log.debug("Exported %s session(s) to %s", len(sessions), path)
    print(f"Exported to: {path}")
    return 0


def run_reset(
    store: SessionStore,
    *,
    assume_yes: bool = False,
    input_func: Callable[[str], str] = input,
) -> int:
    """
    Delete every session after confirmation.

    Parameters
    ----------
    store : SessionStore
        Session storage.
    assume_yes : bool, optional
        Skip the confirmation prompt.
    input_func : Callable[[str], str], optional
        Prompt function (default: input).

    Returns
    -------
    int
        Exit code; cancelling is not an error.
    """
    if not assume_yes:
        print("WARNING: This will delete ALL your time tracking data!")
        print("This action cannot be undone.")
        try:
            answer = input_func(f"Type '{RESET_CONFIRMATION}' to proceed: ")
        except EOFError:
            answer = ""
        if answer.strip() != RESET_CONFIRMATION:
            print("Reset cancelled")
            return 0
    deleted = store.delete_all_sessions()
    log.debug("Reset removed %s session(s)", deleted)
    print("All data cleared")
    return 0
