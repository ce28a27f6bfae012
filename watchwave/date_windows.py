"""Release and air date windows for time-bounded categories."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

WINDOW_DAYS = 30


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Inclusive date range formatted the way TMDB expects (``YYYY-MM-DD``)."""

    start: str
    end: str | None = None


def format_day(moment: datetime) -> str:
    """Return the UTC calendar day of ``moment``.

    Naive datetimes are assumed to already be in UTC.
    """

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%d")


def now_playing_window(now: datetime) -> DateWindow:
    """Movies released during the last thirty days."""

    return DateWindow(
        start=format_day(now - timedelta(days=WINDOW_DAYS)),
        end=format_day(now),
    )


def upcoming_window(now: datetime) -> DateWindow:
    """Movies releasing from today onwards; the range is open ended."""

    return DateWindow(start=format_day(now), end=None)


def airing_today_window(now: datetime) -> DateWindow:
    today = format_day(now)
    return DateWindow(start=today, end=today)


def on_the_air_window(now: datetime) -> DateWindow:
    """Episodes airing between today and thirty days from now."""

    return DateWindow(
        start=format_day(now),
        end=format_day(now + timedelta(days=WINDOW_DAYS)),
    )
