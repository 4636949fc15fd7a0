"""Created/updated activity entries for opportunities."""

import logging
from typing import Any, Mapping, Optional

from tango_crm.clock import SYSTEM_CLOCK, Clock
from tango_crm.dates.normalizer import format_utc
from tango_crm.models.activity import Activity, FieldChange
from tango_crm.store.base import Store

from .clients import SideEffectOutcome

logger = logging.getLogger(__name__)

ACTIVITIES = "opportunity_activities"
TRACKED_FIELDS = ("title", "value", "status", "notes", "expected_close_date", "probability")


def detect_changes(old: Mapping[str, Any], new: Mapping[str, Any]) -> list[FieldChange]:
    """Tracked fields whose value differs between two versions of a record."""
    return [
        FieldChange(field=field, old_value=old.get(field), new_value=new.get(field))
        for field in TRACKED_FIELDS
        if old.get(field) != new.get(field)
    ]


def created_activity(opportunity: Mapping[str, Any], now: str) -> Activity:
    return Activity(
        opportunity_id=opportunity["id"],
        user_id=opportunity["user_id"],
        type="created",
        description=f'Opportunity "{opportunity.get("title")}" was created',
        metadata={
            "title": opportunity.get("title"),
            "value": opportunity.get("value"),
            "status": opportunity.get("status"),
            "niche": opportunity.get("niche"),
            "type": "opportunity_created",
        },
        created_at=now,
    )


def updated_activity(opportunity: Mapping[str, Any], changes: list[FieldChange], now: str) -> Activity:
    fields = ", ".join(c.field for c in changes)
    return Activity(
        opportunity_id=opportunity["id"],
        user_id=opportunity["user_id"],
        type="updated",
        description=f'Opportunity "{opportunity.get("title")}" was updated ({fields})',
        metadata={
            "title": opportunity.get("title"),
            "value": opportunity.get("value"),
            "status": opportunity.get("status"),
            "changes": [c.model_dump() for c in changes],
            "type": "opportunity_updated",
        },
        created_at=now,
    )


def record_activity(
    store: Store,
    opportunity: Mapping[str, Any],
    previous: Optional[Mapping[str, Any]] = None,
    clock: Optional[Clock] = None,
) -> SideEffectOutcome:
    """
    Record a "created" entry (no previous version) or an "updated" entry listing
    the changed tracked fields. An update with no tracked changes is skipped.
    """
    name = "activity"
    try:
        now = format_utc((clock or SYSTEM_CLOCK).now())
        if previous is None:
            activity = created_activity(opportunity, now)
        else:
            changes = detect_changes(previous, opportunity)
            if not changes:
                return SideEffectOutcome(name, "skipped", "no tracked field changed")
            activity = updated_activity(opportunity, changes, now)
        stored = store.insert(ACTIVITIES, activity.model_dump(exclude_none=True))
        return SideEffectOutcome(name, "created", f"{activity.type} activity {stored.get('id')}")
    except Exception as e:
        logger.warning("Recording activity for opportunity %s failed: %s", opportunity.get("id"), e)
        return SideEffectOutcome(name, "failed", error=str(e))
