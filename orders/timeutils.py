"""
Calendar helpers for the point of sale.

Business days are counted in the POS time zone, which is always passed in
explicitly. Nothing here touches the process-wide active time zone.
"""
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from django.utils import timezone

from .conf import pos_setting


def pos_timezone():
    return ZoneInfo(pos_setting('TIME_ZONE'))


def local_now(tz):
    return timezone.now().astimezone(tz)


def local_date(value, tz):
    """Calendar date of an aware datetime as seen in ``tz``"""
    return value.astimezone(tz).date()


def local_today(tz):
    return local_now(tz).date()


def day_start(day, tz):
    return datetime.combine(day, time.min, tzinfo=tz)


def date_bounds(start_day, end_day, tz):
    """
    Half-open ``[start, end)`` datetime interval covering every local day
    from ``start_day`` to ``end_day`` inclusive.
    """
    return day_start(start_day, tz), day_start(end_day + timedelta(days=1), tz)


def week_days(day):
    """The Monday to Sunday week containing ``day``"""
    monday = day - timedelta(days=day.weekday())
    return [monday + timedelta(days=offset) for offset in range(7)]


DATE_RANGE_PRESETS = (
    'today', 'yesterday', 'this_week', 'last_week',
    'this_month', 'last_month', 'this_year',
)


def preset_dates(preset, today):
    """
    Resolve a named date range to ``(first_day, last_day)``.
    Unknown presets fall back to the current month.
    """
    if preset == 'today':
        return today, today
    if preset == 'yesterday':
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if preset == 'this_week':
        days = week_days(today)
        return days[0], days[-1]
    if preset == 'last_week':
        days = week_days(today - timedelta(days=7))
        return days[0], days[-1]
    if preset == 'last_month':
        last_of_previous = today.replace(day=1) - timedelta(days=1)
        return last_of_previous.replace(day=1), last_of_previous
    if preset == 'this_year':
        return today.replace(month=1, day=1), today.replace(month=12, day=31)

    first = today.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    return first, next_month - timedelta(days=1)
