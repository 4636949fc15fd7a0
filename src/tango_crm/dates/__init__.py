"""Timezone-aware date normalization, phrasing and validation."""

from .normalizer import (
    combine_date_and_time,
    format_datetime_for_input,
    format_display,
    format_for_input,
    format_in_user_zone,
    format_time_for_input,
    format_utc,
    parse_datetime,
    parse_utc,
    resolve_zone,
    to_user_zone,
    to_utc,
)
from .relative import (
    due_date_relative_time,
    format_with_relative_time,
    is_future,
    is_overdue,
    is_past,
    is_today,
    relative_time,
    validate_date_range,
    validate_deadline,
    validate_event_dates,
    validate_future_date,
)

__all__ = [
    "combine_date_and_time",
    "due_date_relative_time",
    "format_datetime_for_input",
    "format_display",
    "format_for_input",
    "format_in_user_zone",
    "format_time_for_input",
    "format_utc",
    "format_with_relative_time",
    "is_future",
    "is_overdue",
    "is_past",
    "is_today",
    "parse_datetime",
    "parse_utc",
    "relative_time",
    "resolve_zone",
    "to_user_zone",
    "to_utc",
    "validate_date_range",
    "validate_deadline",
    "validate_event_dates",
    "validate_future_date",
]
