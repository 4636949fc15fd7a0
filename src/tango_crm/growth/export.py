"""CSV and JSON export of growth results."""

import csv
import json
from datetime import datetime, timezone
from io import StringIO
from typing import Iterable, Optional

from tango_crm.models.growth import GrowthRateResult

CSV_HEADERS = (
    "Period Type",
    "Growth Rate (%)",
    "Absolute Change ($)",
    "Current Period ($)",
    "Previous Period ($)",
    "Is Positive Growth",
    "Message",
    "Start Date",
    "End Date",
)


def _number(value: float) -> str:
    """100.0 -> '100', 12.5 -> '12.5'."""
    return str(int(value)) if float(value).is_integer() else str(value)


def _utc_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date().isoformat()


def to_csv(results: Iterable[GrowthRateResult]) -> str:
    """Every cell quoted; dates are the UTC calendar date of the window bounds."""
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for r in results:
        writer.writerow(
            [
                r.period_type,
                _number(r.growth_rate),
                _number(r.absolute_change),
                _number(r.current_period),
                _number(r.previous_period),
                "true" if r.is_positive_growth else "false",
                r.message,
                _utc_date(r.start_date),
                _utc_date(r.end_date),
            ]
        )
    return buffer.getvalue().rstrip("\n")


def to_json(results: Iterable[GrowthRateResult]) -> str:
    """JSON array with camelCase keys, indented 2; absent window dates are omitted."""
    data = [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in results]
    return json.dumps(data, indent=2)
