"""
Tests for timestamp parsing and formatting.
"""

from __future__ import annotations

import doctest
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

import tock.timestamps as timestamps
from tock.errors import AmbiguousTimeError, ConfigError, InvalidDatetimeError


@pytest.mark.parametrize(
    "value",
    ["2024-01-05 10:00", "5.1.24 10:00", "31.02.2024 10:00", "", "05.01.2024"],
)
@pytest.mark.unit
def test_parse_user_datetime_rejects_bad_input(value):
    """
    Ensure malformed datetimes raise a validation error.

    Returns
    -------
    None
        This test asserts input validation.
    """
    with pytest.raises(InvalidDatetimeError):
        timestamps.parse_user_datetime(value, timezone.utc)


@pytest.mark.unit
def test_parse_user_datetime_uses_local_zone():
    """
    Ensure user input is interpreted in the configured zone.

    Returns
    -------
    None
        This test asserts timezone handling.
    """
    berlin = ZoneInfo("Europe/Berlin")
    parsed = timestamps.parse_user_datetime(" 15.07.2024 09:30 ", berlin)

    assert parsed.utcoffset() == timedelta(hours=2)
    assert timestamps.format_storage_timestamp(parsed) == "2024-07-15T07:30:00Z"


@pytest.mark.parametrize(
    "wall_time",
    [
        datetime(2024, 10, 27, 2, 30),
        datetime(2024, 3, 31, 2, 30),
    ],
)
@pytest.mark.unit
def test_localize_rejects_ambiguous_and_missing_times(wall_time):
    """
    Ensure DST fall-back and spring-forward wall times are fatal.

    Returns
    -------
    None
        This test asserts ambiguity detection.
    """
    with pytest.raises(AmbiguousTimeError):
        timestamps.localize(wall_time, ZoneInfo("Europe/Berlin"))


@pytest.mark.unit
def test_storage_timestamps_sort_in_time_order():
    """
    Ensure stored text sorts by instant, not by local wall time.

    Returns
    -------
    None
        This test asserts storage ordering.
    """
    earlier = datetime(2024, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=5)))
    later = datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc)

    stored = [
        timestamps.format_storage_timestamp(later),
        timestamps.format_storage_timestamp(earlier),
    ]

    assert sorted(stored) == [stored[1], stored[0]]
    assert timestamps.parse_storage_timestamp(stored[1]) == earlier


@pytest.mark.unit
def test_format_local_timestamps():
    """
    Ensure display and export formats use local wall time.

    Returns
    -------
    None
        This test asserts output formats.
    """
    value = datetime(2024, 2, 3, 22, 15, 5, tzinfo=timezone.utc)
    tz = timezone(timedelta(hours=3))

    assert timestamps.format_display_timestamp(value, tz) == "04.02.2024 01:15"
    assert timestamps.format_export_timestamp(value, tz) == "2024-02-04 01:15:05"


@pytest.mark.unit
def test_resolve_timezone_rejects_unknown_names():
    """
    Ensure unknown timezone names raise a config error.

    Returns
    -------
    None
        This test asserts timezone validation.
    """
    with pytest.raises(ConfigError):
        timestamps.resolve_timezone("Mars/Olympus_Mons")


@pytest.mark.unit
def test_timestamps_doctest_examples():
    """
    Run doctest examples embedded in timestamp helpers.

    Returns
    -------
    None
        This test asserts doctest coverage for timestamp helpers.
    """
    results = doctest.testmod(timestamps)
    assert results.failed == 0
