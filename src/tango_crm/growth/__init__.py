"""Revenue growth-rate calculation, reporting windows and export."""

from .calculator import (
    RevenueGrowthCalculator,
    calculate_growth_rate_from_values,
    error_result,
    format_growth_message,
    round_half_up,
)
from .export import to_csv, to_json
from .periods import (
    calendar_windows,
    custom_windows,
    period_label,
    period_windows,
    trend_windows,
    validate_window,
)

__all__ = [
    "RevenueGrowthCalculator",
    "calculate_growth_rate_from_values",
    "calendar_windows",
    "custom_windows",
    "error_result",
    "format_growth_message",
    "period_label",
    "period_windows",
    "round_half_up",
    "to_csv",
    "to_json",
    "trend_windows",
    "validate_window",
]
