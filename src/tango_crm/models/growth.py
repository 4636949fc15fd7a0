"""Growth-rate result and reporting window models."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

PeriodType = Literal["month", "quarter", "year", "custom"]


class PeriodWindow(BaseModel):
    """A current window and the immediately preceding window of equal cadence."""

    current_start: datetime
    current_end: datetime
    previous_start: datetime
    previous_end: datetime


class GrowthRateResult(BaseModel):
    """
    Revenue growth between two windows. Computed on demand, never persisted.
    Serializes with camelCase keys (growthRate, isPositiveGrowth, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    growth_rate: float
    absolute_change: float
    current_period: float
    previous_period: float
    period_type: PeriodType
    is_positive_growth: bool
    message: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    previous_start_date: Optional[datetime] = None
    previous_end_date: Optional[datetime] = None
