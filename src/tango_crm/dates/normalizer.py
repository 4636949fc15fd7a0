"""
Conversion between user-local wall-clock input and canonical UTC timestamps.

Stored timestamps are always UTC ISO-8601 strings in the same shape JavaScript's
Date.toISOString() produces (millisecond precision, trailing Z). Local input is
converted through the user's IANA timezone, except bare dates, which are pinned
to UTC midnight.
"""

import logging
import re
from datetime import date, datetime, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DateInput = Union[str, datetime, date, None]

BARE_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Fallback formats tried after ISO-8601
DATE_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%b %d, %Y %I:%M %p",
    "%b %d, %Y",
    "%B %d, %Y",
)


def resolve_zone(name: Optional[str]) -> tzinfo:
    """IANA zone for name; unknown or empty names fall back to UTC."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to UTC", name)
        return timezone.utc


def format_utc(value: datetime) -> str:
    """UTC ISO string with millisecond precision and a Z suffix. Naive input is UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_datetime(value: DateInput) -> Optional[datetime]:
    """
    Parse a timestamp string (ISO-8601 first, then DATE_FORMATS). Returns naive
    datetimes for input without an offset. None when empty or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = value.strip()
    if not text:
        return None
    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_utc(value: DateInput) -> Optional[datetime]:
    """Parse a stored timestamp as an aware UTC datetime. Naive values are UTC."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_utc(local_input: DateInput, user_timezone: Optional[str] = "UTC") -> Optional[str]:
    """
    Convert user-local input into a canonical UTC timestamp string for storage.

    - None/empty -> None
    - ISO string with "T" and a "Z" or "+" offset -> returned unchanged
    - Bare YYYY-MM-DD -> "{date}T00:00:00.000Z" (UTC midnight, timezone ignored)
    - Anything else is parsed; naive values are read as wall-clock time in
      user_timezone. Unparseable input -> None.
    """
    if local_input is None:
        return None
    if isinstance(local_input, datetime):
        return format_utc(_localize(local_input, user_timezone))
    if isinstance(local_input, date):
        return f"{local_input.isoformat()}T00:00:00.000Z"

    text = local_input.strip()
    if not text:
        return None
    if "T" in text and ("Z" in text or "+" in text):
        return text
    if BARE_DATE.match(text):
        return f"{text}T00:00:00.000Z"

    parsed = parse_datetime(text)
    if parsed is None:
        logger.debug("Unparseable date input %r", local_input)
        return None
    return format_utc(_localize(parsed, user_timezone))


def to_user_zone(utc_timestamp: DateInput, user_timezone: Optional[str] = "UTC") -> Optional[datetime]:
    """Stored UTC timestamp as an aware datetime in the user's zone, for display only."""
    instant = parse_utc(utc_timestamp)
    if instant is None:
        return None
    return instant.astimezone(resolve_zone(user_timezone))


def combine_date_and_time(
    date_str: Optional[str],
    time_str: Optional[str],
    user_timezone: Optional[str] = "UTC",
) -> Optional[datetime]:
    """
    Combine a local date ("2025-03-09") and time ("02:30") into a UTC instant.
    The offset is the zone's offset on that specific date, so DST transitions
    resolve correctly. Returns None on missing parts or parse failure.
    """
    if not date_str or not time_str:
        return None
    combined = f"{date_str.strip()}T{time_str.strip()}"
    try:
        naive = datetime.fromisoformat(combined)
    except ValueError:
        return None
    if naive.tzinfo is not None:
        return None
    offset = _offset_string(naive.replace(tzinfo=resolve_zone(user_timezone)))
    try:
        return datetime.fromisoformat(f"{combined}{offset}").astimezone(timezone.utc)
    except ValueError:
        return None


def format_in_user_zone(
    value: DateInput,
    user_timezone: Optional[str] = "UTC",
    pattern: str = "%b %d, %Y %I:%M %p",
) -> str:
    """strftime in the user's zone; "Invalid date" when value does not parse."""
    local = to_user_zone(value, user_timezone)
    if local is None:
        return "Invalid date"
    return local.strftime(pattern)


def format_display(value: DateInput, user_timezone: Optional[str] = "UTC") -> str:
    """'Mar 5, 2025 2:30 PM' in the user's zone, without zero padding."""
    local = to_user_zone(value, user_timezone)
    if local is None:
        return "Invalid date"
    hour = local.hour % 12 or 12
    return f"{local:%b} {local.day}, {local.year} {hour}:{local:%M} {local:%p}"


def format_for_input(value: DateInput, user_timezone: Optional[str] = "UTC") -> str:
    """YYYY-MM-DD in the user's zone, for date inputs."""
    local = to_user_zone(value, user_timezone)
    return local.strftime("%Y-%m-%d") if local else ""


def format_datetime_for_input(value: DateInput, user_timezone: Optional[str] = "UTC") -> str:
    """YYYY-MM-DDTHH:MM in the user's zone, for datetime-local inputs."""
    local = to_user_zone(value, user_timezone)
    return local.strftime("%Y-%m-%dT%H:%M") if local else ""


def format_time_for_input(value: DateInput, user_timezone: Optional[str] = "UTC") -> str:
    """HH:MM in the user's zone."""
    local = to_user_zone(value, user_timezone)
    return local.strftime("%H:%M") if local else ""


def _localize(value: datetime, user_timezone: Optional[str]) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=resolve_zone(user_timezone))
    return value


def _offset_string(value: datetime) -> str:
    """'+05:30' / '-04:00' style offset of an aware datetime."""
    raw = value.strftime("%z") or "+0000"
    return f"{raw[:3]}:{raw[3:5]}"
