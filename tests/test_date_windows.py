"""Date window calculation tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from watchwave.date_windows import (
    DateWindow,
    airing_today_window,
    format_day,
    now_playing_window,
    on_the_air_window,
    upcoming_window,
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_now_playing_covers_last_thirty_days() -> None:
    # February 2024 has 29 days, so whole-day arithmetic lands on the 14th.
    assert now_playing_window(NOW) == DateWindow(start="2024-02-14", end="2024-03-15")


def test_upcoming_has_no_upper_bound() -> None:
    assert upcoming_window(NOW) == DateWindow(start="2024-03-15", end=None)


def test_airing_today_bounds_are_the_same_day() -> None:
    window = airing_today_window(NOW)
    assert window.start == window.end == "2024-03-15"


def test_on_the_air_covers_next_thirty_days() -> None:
    assert on_the_air_window(NOW) == DateWindow(start="2024-03-15", end="2024-04-14")


def test_windows_use_whole_days_not_calendar_months() -> None:
    end_of_january = datetime(2024, 1, 31, 8, 0, tzinfo=timezone.utc)
    assert on_the_air_window(end_of_january).end == "2024-03-01"
    assert now_playing_window(datetime(2024, 3, 31, tzinfo=timezone.utc)).start == "2024-03-01"


def test_aware_datetimes_are_converted_to_utc() -> None:
    eastern = timezone(timedelta(hours=-5))
    late_evening = datetime(2024, 3, 15, 23, 30, tzinfo=eastern)
    assert format_day(late_evening) == "2024-03-16"
    assert airing_today_window(late_evening).start == "2024-03-16"


def test_naive_datetimes_are_taken_as_utc() -> None:
    assert format_day(datetime(2024, 3, 15, 23, 59)) == "2024-03-15"
