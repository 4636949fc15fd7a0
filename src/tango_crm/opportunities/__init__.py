"""Opportunity service and its best-effort side effects."""

from tango_crm.opportunities.activity import detect_changes, record_activity
from tango_crm.opportunities.clients import SideEffectOutcome, sync_won_client
from tango_crm.opportunities.service import OpportunityService, WriteResult

__all__ = [
    "OpportunityService",
    "SideEffectOutcome",
    "WriteResult",
    "detect_changes",
    "record_activity",
    "sync_won_client",
]
