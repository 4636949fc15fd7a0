"""Relative-time phrasing, due-date phrasing and date validators."""

import math
from datetime import datetime, time, timedelta
from typing import Optional

from tango_crm.clock import SYSTEM_CLOCK, Clock

from .normalizer import (
    DateInput,
    combine_date_and_time,
    format_display,
    parse_utc,
    resolve_zone,
    to_user_zone,
)

_HOUR_MS = 60 * 60 * 1000
_DAY_MS = 24 * _HOUR_MS


def relative_time(value: DateInput, clock: Optional[Clock] = None) -> str:
    """
    "in 3 days", "5 hours ago", "Just now" or "Soon" relative to the clock.
    Empty string when value is missing or unparseable.
    """
    instant = parse_utc(value)
    if instant is None:
        return ""
    now = (clock or SYSTEM_CLOCK).now()
    diff_ms = (instant - now) / timedelta(milliseconds=1)
    diff_hours = math.floor(diff_ms / _HOUR_MS)
    diff_days = math.floor(diff_ms / _DAY_MS)

    if diff_ms < 0:
        if diff_days < -1:
            return f"{abs(diff_days)} days ago"
        if diff_hours < -1:
            return f"{abs(diff_hours)} hours ago"
        return "Just now"
    if diff_days > 1:
        return f"in {diff_days} days"
    if diff_hours > 1:
        return f"in {diff_hours} hours"
    return "Soon"


def format_with_relative_time(
    value: DateInput,
    user_timezone: Optional[str] = "UTC",
    clock: Optional[Clock] = None,
) -> str:
    """'Mar 5, 2025 2:30 PM (in 3 days)' in the user's zone."""
    if parse_utc(value) is None:
        return "Invalid date"
    return f"{format_display(value, user_timezone)} ({relative_time(value, clock)})"


def is_today(value: DateInput, user_timezone: Optional[str] = "UTC", clock: Optional[Clock] = None) -> bool:
    """True when value falls on the current calendar day in the user's zone."""
    local = to_user_zone(value, user_timezone)
    if local is None:
        return False
    return local.date() == _today(user_timezone, clock)


def is_past(value: DateInput, clock: Optional[Clock] = None) -> bool:
    instant = parse_utc(value)
    return instant is not None and instant < (clock or SYSTEM_CLOCK).now()


def is_future(value: DateInput, clock: Optional[Clock] = None) -> bool:
    instant = parse_utc(value)
    return instant is not None and instant > (clock or SYSTEM_CLOCK).now()


def due_date_relative_time(
    value: DateInput,
    user_timezone: Optional[str] = "UTC",
    clock: Optional[Clock] = None,
) -> str:
    """
    "Due today", "Due tomorrow", "Due in N days", "Overdue by 1 day" or
    "Overdue by N days". Both the due instant and now are truncated to calendar
    days in the user's zone before differencing, so the same day is never overdue.
    """
    days = _days_until(value, user_timezone, clock)
    if days is None:
        return ""
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    if days == -1:
        return "Overdue by 1 day"
    if days > 1:
        return f"Due in {days} days"
    return f"Overdue by {abs(days)} days"


def is_overdue(value: DateInput, user_timezone: Optional[str] = "UTC", clock: Optional[Clock] = None) -> bool:
    """True when the due day is strictly before today in the user's zone."""
    days = _days_until(value, user_timezone, clock)
    return days is not None and days < 0


def validate_date_range(start: DateInput, end: DateInput) -> bool:
    """True if either bound is absent, else end >= start. Unparseable bounds fail."""
    if not start or not end:
        return True
    start_dt = parse_utc(start)
    end_dt = parse_utc(end)
    if start_dt is None or end_dt is None:
        return False
    return end_dt >= start_dt


def validate_future_date(
    value: DateInput,
    user_timezone: Optional[str] = "UTC",
    clock: Optional[Clock] = None,
) -> bool:
    """True if absent, else value is at or after the start of the current day."""
    if not value:
        return True
    instant = parse_utc(value)
    if instant is None:
        return False
    zone = resolve_zone(user_timezone)
    start_of_day = datetime.combine(_today(user_timezone, clock), time.min, tzinfo=zone)
    return instant >= start_of_day


def validate_event_dates(
    start_date: str,
    end_date: str,
    start_time: str,
    end_time: str,
    user_timezone: Optional[str] = "UTC",
) -> tuple[bool, list[str]]:
    """Check a start/end date+time pair from an event form. Returns (is_valid, errors)."""
    errors: list[str] = []
    if not start_date:
        errors.append("Start date is required")
    if not end_date:
        errors.append("End date is required")
    if not start_time:
        errors.append("Start time is required")
    if not end_time:
        errors.append("End time is required")
    if errors:
        return False, errors

    start = combine_date_and_time(start_date, start_time, user_timezone)
    end = combine_date_and_time(end_date, end_time, user_timezone)
    if start is None:
        errors.append("Invalid start date/time")
    if end is None:
        errors.append("Invalid end date/time")
    if errors:
        return False, errors

    if not validate_date_range(start, end):
        errors.append("End date/time must be after start date/time")
    return not errors, errors


def validate_deadline(deadline: Optional[str], clock: Optional[Clock] = None) -> tuple[bool, list[str]]:
    """A deadline must be present, parseable and not in the past."""
    if not deadline:
        return False, ["Deadline is required"]
    if parse_utc(deadline) is None:
        return False, ["Invalid deadline date"]
    if is_past(deadline, clock):
        return False, ["Deadline cannot be in the past"]
    return True, []


def _today(user_timezone: Optional[str], clock: Optional[Clock]):
    return (clock or SYSTEM_CLOCK).now().astimezone(resolve_zone(user_timezone)).date()


def _days_until(value: DateInput, user_timezone: Optional[str], clock: Optional[Clock]) -> Optional[int]:
    if not value:
        return None
    local = to_user_zone(value, user_timezone)
    if local is None:
        return None
    return (local.date() - _today(user_timezone, clock)).days
