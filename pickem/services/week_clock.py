"""
Week clock - derives the betting week from a reference instant.

A week runs from Tuesday 00:01 local time to the following Tuesday 00:01.
Betting closes on the Thursday at 17:00 and picks are revealed on the
Friday at 12:00. The week id is built from the opening Tuesday's date.
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from pickem.models.week import WeekInfo

TUESDAY = 1  # date.weekday()

WEEK_START = time(0, 1)
BETTING_CLOSE = time(17, 0)
PICKS_REVEAL = time(12, 0)


def week_start_date(reference: datetime, tz: ZoneInfo) -> date:
    """Local date of the Tuesday that opened the week containing `reference`."""
    local = reference.astimezone(tz)
    days_back = (local.weekday() - TUESDAY) % 7
    if days_back == 0 and local.time() < WEEK_START:
        # Tuesday 00:00-00:01 still belongs to the previous week
        days_back = 7
    return local.date() - timedelta(days=days_back)


def _at(day: date, at: time, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, at, tzinfo=tz).astimezone(timezone.utc)


def get_week_info(reference: datetime, tz_name: str = "America/New_York") -> WeekInfo:
    """
    Return the week id and deadlines for `reference`.

    Pure: the same instant always yields the same result. Naive datetimes
    are taken as UTC.
    """
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    tz = ZoneInfo(tz_name)
    tuesday = week_start_date(reference, tz)

    return WeekInfo(
        week_id=f"week-{tuesday.year}-{tuesday.month}-{tuesday.day}",
        betting_window_start=_at(tuesday, WEEK_START, tz),
        betting_window_end=_at(tuesday + timedelta(days=2), BETTING_CLOSE, tz),
        picks_reveal_time=_at(tuesday + timedelta(days=3), PICKS_REVEAL, tz),
        week_end=_at(tuesday + timedelta(days=7), WEEK_START, tz),
    )
