"""Revenue growth-rate calculation over owner/niche revenue windows."""

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from tango_crm.clock import SYSTEM_CLOCK, Clock
from tango_crm.config import Settings
from tango_crm.mapping.tables import REVENUE_STATUSES
from tango_crm.models.growth import GrowthRateResult, PeriodWindow
from tango_crm.store.base import Store

from .periods import CALENDAR_PERIODS, PERIOD_TYPES, period_label, period_windows, trend_windows, validate_window

logger = logging.getLogger(__name__)

OPPORTUNITIES = "opportunities"
DEFAULT_PRECISION = 2


def round_half_up(value: float, precision: int) -> float:
    """Round like a ledger: 0.125 -> 0.13 at precision 2."""
    quantum = Decimal(1).scaleb(-precision)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_growth_message(growth_rate: float, period_type: str, is_positive_growth: bool) -> str:
    label = period_label(period_type)
    if growth_rate == 0:
        return f"No change compared to previous {label}"
    if growth_rate == 100 and period_type != "custom":
        return f"New revenue generated (no previous {label} data)"
    direction = "growth" if is_positive_growth else "decline"
    return f"{abs(growth_rate):.2f}% {direction} compared to previous {label}"


def calculate_growth_rate_from_values(
    current: float,
    previous: float,
    period_type: str,
    precision: int = DEFAULT_PRECISION,
    window: Optional[PeriodWindow] = None,
) -> GrowthRateResult:
    """
    Growth of current over previous revenue.

    Both zero gives 0% and no growth; a zero previous period with revenue now
    gives 100% growth; otherwise (current - previous) / previous * 100, rounded
    half-up to `precision` places. Negative amounts raise ValueError.
    """
    if current < 0 or previous < 0:
        raise ValueError(f"Revenue cannot be negative (current={current}, previous={previous})")
    if period_type not in PERIOD_TYPES:
        raise ValueError(f"Invalid period type: {period_type}")

    dates = _window_dates(window)
    if current == 0 and previous == 0:
        return GrowthRateResult(
            growth_rate=0,
            absolute_change=0,
            current_period=0,
            previous_period=0,
            period_type=period_type,
            is_positive_growth=False,
            message="No revenue data available for both periods",
            **dates,
        )
    if previous == 0:
        return GrowthRateResult(
            growth_rate=100,
            absolute_change=round_half_up(current, 2),
            current_period=round_half_up(current, 2),
            previous_period=0,
            period_type=period_type,
            is_positive_growth=True,
            message="New revenue generated (no previous period data)",
            **dates,
        )

    absolute_change = current - previous
    growth_rate = absolute_change / previous * 100
    rate = round_half_up(growth_rate, precision)
    if rate == 0:
        # Too small to show at this precision; no "-0.00% decline"
        rate = growth_rate = 0.0
    is_positive = rate >= 0
    return GrowthRateResult(
        growth_rate=rate,
        absolute_change=round_half_up(absolute_change, 2),
        current_period=round_half_up(current, 2),
        previous_period=round_half_up(previous, 2),
        period_type=period_type,
        is_positive_growth=is_positive,
        message=format_growth_message(growth_rate, period_type, is_positive),
        **dates,
    )


def error_result(period_type: str, description: str) -> GrowthRateResult:
    """All-zero result carrying the failure description."""
    return GrowthRateResult(
        growth_rate=0,
        absolute_change=0,
        current_period=0,
        previous_period=0,
        period_type=period_type,
        is_positive_growth=False,
        message=f"Error: {description}",
    )


def _window_dates(window: Optional[PeriodWindow]) -> dict:
    if window is None:
        return {}
    return {
        "start_date": window.current_start,
        "end_date": window.current_end,
        "previous_start_date": window.previous_start,
        "previous_end_date": window.previous_end,
    }


class RevenueGrowthCalculator:
    """
    Sums realized revenue per owner and niche from the store and compares
    consecutive windows. Store failures during aggregation come back as an
    error result; invalid arguments raise.
    """

    def __init__(
        self,
        store: Store,
        clock: Optional[Clock] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.clock = clock or SYSTEM_CLOCK
        self.settings = settings or Settings()

    def fetch_revenue_for_period(
        self,
        user_id: str,
        niche: str,
        start: datetime,
        end: datetime,
    ) -> float:
        """Sum of value over the owner's revenue-status opportunities created within [start, end]."""
        statuses = REVENUE_STATUSES.get(niche, frozenset({"won"}))
        records = self.store.get(
            OPPORTUNITIES,
            {
                "user_id": user_id,
                "niche": niche,
                "status__in": sorted(statuses),
                "created_at__gte": start,
                "created_at__lte": end,
            },
        )
        return sum(float(r.get("value") or 0) for r in records)

    def _compare(
        self,
        user_id: str,
        niche: str,
        window: PeriodWindow,
        period_type: str,
        precision: Optional[int],
    ) -> GrowthRateResult:
        try:
            current = self.fetch_revenue_for_period(user_id, niche, window.current_start, window.current_end)
            previous = self.fetch_revenue_for_period(user_id, niche, window.previous_start, window.previous_end)
        except Exception as e:
            logger.exception("Revenue aggregation failed for user %s (%s)", user_id, niche)
            return error_result(period_type, str(e))
        return calculate_growth_rate_from_values(
            current,
            previous,
            period_type,
            precision=self.settings.growth_precision if precision is None else precision,
            window=window,
        )

    def calculate_growth_rate(
        self,
        user_id: str,
        niche: str,
        period_type: str = "month",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        precision: Optional[int] = None,
    ) -> GrowthRateResult:
        """
        Growth of the present month/quarter/year over the previous one, or of a
        custom [start, end] window over the equal-length window before it.
        """
        if period_type not in PERIOD_TYPES:
            raise ValueError(f"Invalid period type: {period_type}")
        window = period_windows(
            period_type,
            clock=self.clock,
            tz=self.settings.reporting_timezone,
            start=start,
            end=end,
        )
        return self._compare(user_id, niche, window, period_type, precision)

    def calculate_custom_period_growth_rate(
        self,
        user_id: str,
        niche: str,
        current_start: datetime,
        current_end: datetime,
        previous_start: datetime,
        previous_end: datetime,
        precision: Optional[int] = None,
    ) -> GrowthRateResult:
        """Growth between two explicit windows. Raises InvalidDateRangeError on inverted bounds."""
        validate_window(current_start, current_end)
        validate_window(previous_start, previous_end)
        window = PeriodWindow(
            current_start=current_start,
            current_end=current_end,
            previous_start=previous_start,
            previous_end=previous_end,
        )
        return self._compare(user_id, niche, window, "custom", precision)

    def calculate_trend_analysis(
        self,
        user_id: str,
        niche: str,
        periods: int = 6,
        period_type: str = "month",
    ) -> list[GrowthRateResult]:
        """One result per calendar period going back in time; index 0 is the present period."""
        if period_type not in CALENDAR_PERIODS:
            raise ValueError(f"Trend analysis needs a calendar period type, got: {period_type}")
        windows = trend_windows(period_type, periods, clock=self.clock, tz=self.settings.reporting_timezone)
        return [
            self.calculate_custom_period_growth_rate(
                user_id,
                niche,
                w.current_start,
                w.current_end,
                w.previous_start,
                w.previous_end,
            )
            for w in windows
        ]
