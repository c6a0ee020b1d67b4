"""
Tests for plain-text rendering.
"""

from __future__ import annotations

import doctest
from datetime import datetime, timezone

import pytest

import tock.renderer as renderer
from tock.periods import PeriodStats
from tock.store import Session

UTC = timezone.utc


def _session(session_id, topic, start, end):
    return Session(id=session_id, topic=topic, start=start, end=end)


@pytest.mark.unit
def test_format_sessions_with_ids_marks_active():
    """
    Ensure the ID view lists active sessions as ACTIVE.

    Returns
    -------
    None
        This test asserts the list table.
    """
    sessions = [
        _session(2, "open", datetime(2024, 1, 2, 9, 0, tzinfo=UTC), None),
        _session(
            1,
            "done",
            datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
            datetime(2024, 1, 1, 10, 45, tzinfo=UTC),
        ),
    ]

    lines = renderer.format_sessions(sessions, show_id=True, tz=UTC)

    assert lines[0].split() == ["ID", "Topic", "Start", "End", "Hours"]
    assert lines[1] == "─" * 80
    assert lines[2].split() == ["2", "open", "02.01.2024", "09:00", "ACTIVE", "-"]
    assert lines[3].split() == [
        "1",
        "done",
        "01.01.2024",
        "09:00",
        "01.01.2024",
        "10:45",
        "1.75h",
    ]


@pytest.mark.unit
def test_format_sessions_without_ids_skips_active():
    """
    Ensure the summary view omits active sessions.

    Returns
    -------
    None
        This test asserts the show table.
    """
    sessions = [
        _session(2, "open", datetime(2024, 1, 2, 9, 0, tzinfo=UTC), None),
        _session(
            1,
            "done",
            datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
            datetime(2024, 1, 1, 11, 0, tzinfo=UTC),
        ),
    ]

    lines = renderer.format_sessions(sessions, show_id=False, tz=UTC)

    assert len(lines) == 3
    assert lines[0].split() == ["Topic", "Start", "End", "Hours"]
    assert lines[2].startswith("done ")
    assert lines[2].endswith("2.00h")


@pytest.mark.unit
def test_format_active_session():
    """
    Ensure the active banner shows elapsed hours.

    Returns
    -------
    None
        This test asserts the active-session banner.
    """
    session = _session(1, "deep work", datetime(2024, 1, 1, 9, 0, tzinfo=UTC), None)

    line = renderer.format_active_session(session, datetime(2024, 1, 1, 9, 30, tzinfo=UTC))

    assert line == "Active: deep work (0.50h)"


@pytest.mark.unit
def test_format_period_stats_adds_grand_total():
    """
    Ensure multiple buckets get a grand total ordered by hours.

    Returns
    -------
    None
        This test asserts period report rendering.
    """
    stats = [
        PeriodStats("Today", [("A", 2.0), ("B", 1.5)]),
        PeriodStats("Yesterday", [("B", 3.0)]),
    ]

    lines = renderer.format_period_stats(stats)

    assert lines[0] == "Today"
    assert lines[1].split() == ["A", "2.00h"]
    assert lines[4].split() == ["Total", "3.50h"]
    assert lines[5] == ""
    assert lines[6] == "Yesterday"
    grand = lines[lines.index("Grand Total:") + 1 :]
    assert [line.split() for line in grand] == [
        ["B", "4.50h"],
        ["A", "2.00h"],
        ["─" * 30],
        ["Total", "6.50h"],
    ]


@pytest.mark.unit
def test_format_period_stats_single_bucket_has_no_grand_total():
    """
    Ensure a single bucket is rendered without a grand total.

    Returns
    -------
    None
        This test asserts single-bucket rendering.
    """
    lines = renderer.format_period_stats([PeriodStats("2024", [])])

    assert "Grand Total:" not in lines
    assert lines[-1].split() == ["Total", "0.00h"]


@pytest.mark.unit
def test_renderer_doctest_examples():
    """
    Run doctest examples embedded in renderer helpers.

    Returns
    -------
    None
        This test asserts doctest coverage for rendering helpers.
    """
    results = doctest.testmod(renderer)
    assert results.failed == 0


@pytest.mark.unit
def test_format_period_stats_empty_bucket_totals_zero():
    """
    Ensure a bucket without sessions renders a zero total.

    Returns
    -------
    None
        This test asserts the empty bucket total.
    """
    empty = PeriodStats("Today")

    lines = renderer.format_period_stats([empty])

    assert empty.total == 0
    assert lines[-1].split() == ["Total", "0.00h"]
