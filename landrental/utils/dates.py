# Date helpers shared by models and routes
import calendar
from datetime import datetime, timezone


def to_iso(value):
    """ISO-8601 string for a datetime (or None)"""
    if value is None:
        return None
    return value.isoformat()


def to_naive_utc(value):
    """Normalise an aware datetime to naive UTC, the form stored in the database"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def add_months(value, months):
    """
    Shift a datetime by whole calendar months.

    The day is clamped to the last day of the target month, so
    Jan 31 + 1 month is Feb 28 (or 29).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def days_between(start, end):
    """Whole days from start to end, rounded up (negative when end is earlier)"""
    seconds = (end - start).total_seconds()
    days, remainder = divmod(seconds, 86400)
    return int(days) + (1 if remainder > 0 else 0)
