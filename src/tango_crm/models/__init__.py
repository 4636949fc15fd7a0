"""Data models for opportunities, clients, activities and growth results."""

from tango_crm.models.activity import Activity, FieldChange
from tango_crm.models.client import Client
from tango_crm.models.growth import GrowthRateResult, PeriodWindow
from tango_crm.models.opportunity import (
    CustomFields,
    Opportunity,
    OpportunityCreate,
    OpportunityUpdate,
)

__all__ = [
    "Activity",
    "Client",
    "CustomFields",
    "FieldChange",
    "GrowthRateResult",
    "Opportunity",
    "OpportunityCreate",
    "OpportunityUpdate",
    "PeriodWindow",
]
