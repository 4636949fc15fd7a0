"""Unit tests for growth export."""

import json

from tango_crm.clock import FixedClock
from tango_crm.growth import calculate_growth_rate_from_values, calendar_windows, to_csv, to_json

HEADER = (
    '"Period Type","Growth Rate (%)","Absolute Change ($)","Current Period ($)",'
    '"Previous Period ($)","Is Positive Growth","Message","Start Date","End Date"'
)


class TestToCsv:
    """Tests for to_csv."""

    def test_header_and_row(self, clock: FixedClock) -> None:
        """Every cell is quoted; whole numbers have no decimals."""
        result = calculate_growth_rate_from_values(150, 100, "month", window=calendar_windows("month", clock))
        lines = to_csv([result]).split("\n")
        assert lines[0] == HEADER
        assert lines[1] == (
            '"month","50","50","150","100","true",'
            '"50.00% growth compared to previous month","2025-03-01","2025-03-31"'
        )

    def test_fractional_and_missing_dates(self) -> None:
        """Fractions keep their digits; absent windows leave dates blank."""
        result = calculate_growth_rate_from_values(1, 3, "quarter")
        lines = to_csv([result]).split("\n")
        assert lines[1] == (
            '"quarter","-66.67","-2","1","3","false",'
            '"66.67% decline compared to previous quarter","",""'
        )

    def test_empty(self) -> None:
        """No results gives only the header."""
        assert to_csv([]) == HEADER


class TestToJson:
    """Tests for to_json."""

    def test_camel_case_keys(self, clock: FixedClock) -> None:
        """Keys are camelCase and window dates are included when known."""
        result = calculate_growth_rate_from_values(150, 100, "month", window=calendar_windows("month", clock))
        data = json.loads(to_json([result]))
        assert data[0]["growthRate"] == 50.0
        assert data[0]["isPositiveGrowth"] is True
        assert data[0]["periodType"] == "month"
        assert data[0]["startDate"].startswith("2025-03-01T00:00:00")
        assert "previousEndDate" in data[0]

    def test_missing_dates_omitted(self) -> None:
        """Results without a window carry no date keys."""
        data = json.loads(to_json([calculate_growth_rate_from_values(0, 0, "year")]))
        assert "startDate" not in data[0]
        assert data[0]["message"] == "No revenue data available for both periods"
