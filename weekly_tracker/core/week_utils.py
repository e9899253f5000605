"""Week-boundary helpers and the weekly submission gate.

Weeks run Monday through Sunday. All helpers operate on local calendar
dates; ``can_submit`` resolves "local" through ``settings.timezone`` when it
is given an aware ``now``.
"""

from datetime import date, datetime, time, timedelta
from typing import List, NamedTuple, Optional, Union
from zoneinfo import ZoneInfo

from weekly_tracker.config import settings

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
DAY_NAMES_SHORT = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_NAMES_SHORT = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class SubmitCheck(NamedTuple):
    """Result of the submission gate."""

    allowed: bool
    reason: str


def _as_date(value: Union[date, datetime]) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def week_start(value: Union[date, datetime]) -> date:
    """Return the Monday on or before the given date."""
    d = _as_date(value)
    return d - timedelta(days=d.weekday())


def week_dates(start: date) -> List[date]:
    """Return the seven dates Monday..Sunday beginning at ``start``."""
    start = _as_date(start)
    return [start + timedelta(days=i) for i in range(7)]


def format_iso(value: Union[date, datetime]) -> str:
    """Format as YYYY-MM-DD from local calendar fields."""
    d = _as_date(value)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_iso(value: str) -> date:
    return date.fromisoformat(value)


def format_display(value: Union[date, datetime]) -> str:
    """Short month name and day, e.g. 'Jan 26'."""
    d = _as_date(value)
    return f"{MONTH_NAMES_SHORT[d.month - 1]} {d.day}"


def week_range_string(start: date) -> str:
    """Readable week range, e.g. 'Jan 26 - Feb 1, 2026' or 'Jan 6-12, 2025'."""
    start = _as_date(start)
    end = start + timedelta(days=6)
    start_month = MONTH_NAMES_SHORT[start.month - 1]
    end_month = MONTH_NAMES_SHORT[end.month - 1]
    if start_month == end_month:
        return f"{start_month} {start.day}-{end.day}, {end.year}"
    return f"{start_month} {start.day} - {end_month} {end.day}, {end.year}"


def submission_opens_at(
    start: date,
    weekday: Optional[int] = None,
    hour: Optional[int] = None,
) -> datetime:
    """Naive local datetime at which submission for the week opens."""
    if weekday is None:
        weekday = settings.submit_weekday
    if hour is None:
        hour = settings.submit_hour
    opening_day = week_start(start) + timedelta(days=weekday)
    return datetime.combine(opening_day, time(hour, 0))


def _format_opening(opening: datetime) -> str:
    hour12 = opening.hour % 12 or 12
    meridiem = "AM" if opening.hour < 12 else "PM"
    return (
        f"{DAY_NAMES[opening.weekday()]}, {format_display(opening)}, "
        f"{hour12}:{opening.minute:02d} {meridiem}"
    )


def can_submit(start: date, now: datetime) -> SubmitCheck:
    """Decide whether the week starting at ``start`` may be submitted at ``now``.

    The gate is a single fixed instant per week and stays open once reached.
    A naive ``now`` is taken to already be local time; an aware one is
    compared against the opening instant in ``settings.timezone``.
    """
    opening = submission_opens_at(start)
    if now.tzinfo is not None:
        opening_instant = opening.replace(tzinfo=ZoneInfo(settings.timezone))
    else:
        opening_instant = opening

    if now >= opening_instant:
        return SubmitCheck(allowed=True, reason="")
    return SubmitCheck(allowed=False, reason=f"Submission opens {_format_opening(opening)}")


def local_now() -> datetime:
    """Current aware time in the configured timezone."""
    return datetime.now(ZoneInfo(settings.timezone))


def local_today() -> date:
    return local_now().date()
