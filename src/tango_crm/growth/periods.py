"""
Reporting windows for growth analysis.

Calendar windows (month, quarter, year) are framed in the reporting timezone:
each starts at local midnight on its first day and ends at the last microsecond
of its last day. Custom windows are taken as given, with the previous window of
equal duration ending one millisecond before the current one starts.
"""

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from tango_crm.clock import SYSTEM_CLOCK, Clock
from tango_crm.dates.normalizer import resolve_zone
from tango_crm.errors import InvalidDateRangeError
from tango_crm.models.growth import PeriodWindow

CALENDAR_PERIODS = ("month", "quarter", "year")
PERIOD_TYPES = (*CALENDAR_PERIODS, "custom")

# Months per cadence step
_STEP_MONTHS = {"month": 1, "quarter": 3, "year": 12}


def period_label(period_type: str) -> str:
    """Noun used in growth messages: month, quarter, year, otherwise "period"."""
    return period_type if period_type in CALENDAR_PERIODS else "period"


def validate_window(start: datetime, end: datetime) -> None:
    """Raise InvalidDateRangeError unless start < end."""
    if start >= end:
        raise InvalidDateRangeError(
            f"Start date must be before end date ({start.isoformat()} >= {end.isoformat()})"
        )


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _calendar_window(period_type: str, year: int, month: int, zone) -> tuple[datetime, datetime]:
    """Window of the given cadence whose first month is (year, month)."""
    last_year, last_month = _shift_month(year, month, _STEP_MONTHS[period_type] - 1)
    last_day = calendar.monthrange(last_year, last_month)[1]
    start = datetime.combine(date(year, month, 1), time.min, tzinfo=zone)
    end = datetime.combine(date(last_year, last_month, last_day), time.max, tzinfo=zone)
    return start, end


def _first_month(period_type: str, local: datetime) -> tuple[int, int]:
    if period_type == "month":
        return local.year, local.month
    if period_type == "quarter":
        return local.year, (local.month - 1) // 3 * 3 + 1
    return local.year, 1


def calendar_windows(
    period_type: str,
    clock: Optional[Clock] = None,
    tz: Optional[str] = "UTC",
    offset: int = 0,
) -> PeriodWindow:
    """
    The calendar period containing now (shifted back `offset` steps) and the
    period immediately before it.
    """
    if period_type not in CALENDAR_PERIODS:
        raise ValueError(f"Invalid period type: {period_type}")
    zone = resolve_zone(tz)
    local = (clock or SYSTEM_CLOCK).now().astimezone(zone)
    step = _STEP_MONTHS[period_type]
    year, month = _shift_month(*_first_month(period_type, local), -offset * step)
    prev_year, prev_month = _shift_month(year, month, -step)

    current_start, current_end = _calendar_window(period_type, year, month, zone)
    previous_start, previous_end = _calendar_window(period_type, prev_year, prev_month, zone)
    return PeriodWindow(
        current_start=current_start,
        current_end=current_end,
        previous_start=previous_start,
        previous_end=previous_end,
    )


def custom_windows(start: datetime, end: datetime) -> PeriodWindow:
    """Caller's window plus the equal-length window that ends 1 ms before it."""
    start = _aware(start)
    end = _aware(end)
    validate_window(start, end)
    duration = end - start
    previous_end = start - timedelta(milliseconds=1)
    return PeriodWindow(
        current_start=start,
        current_end=end,
        previous_start=previous_end - duration,
        previous_end=previous_end,
    )


def period_windows(
    period_type: str,
    clock: Optional[Clock] = None,
    tz: Optional[str] = "UTC",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> PeriodWindow:
    """Windows for any period type. Custom periods require both start and end."""
    if period_type == "custom":
        if start is None or end is None:
            raise ValueError("Custom period requires both start and end dates")
        return custom_windows(start, end)
    return calendar_windows(period_type, clock, tz)


def trend_windows(
    period_type: str,
    periods: int,
    clock: Optional[Clock] = None,
    tz: Optional[str] = "UTC",
) -> list[PeriodWindow]:
    """`periods` consecutive calendar windows, index 0 being the present period."""
    if periods < 1:
        raise ValueError("periods must be at least 1")
    return [calendar_windows(period_type, clock, tz, offset=i) for i in range(periods)]


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
