"""Owner-scoped create/update/read/delete of opportunities."""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional

from tango_crm.clock import SYSTEM_CLOCK, Clock
from tango_crm.config import Settings
from tango_crm.dates.normalizer import format_utc, to_utc
from tango_crm.errors import RecordNotFoundError
from tango_crm.mapping.notes import merge_notes
from tango_crm.mapping.rules import map_niche_to_type, map_stage_to_status
from tango_crm.models.opportunity import DATE_FIELDS, Opportunity, OpportunityCreate, OpportunityUpdate
from tango_crm.store.base import Store

from .activity import record_activity
from .clients import SideEffectOutcome, sync_won_client

logger = logging.getLogger(__name__)

OPPORTUNITIES = "opportunities"

# Columns that may not be cleared to null by an update
_NON_NULLABLE = frozenset({"title", "value", "status", "niche", "probability", "tags", "custom_fields"})


@dataclass
class WriteResult:
    """Primary write result plus the outcomes of the best-effort steps that followed it."""

    opportunity: Opportunity
    side_effects: list[SideEffectOutcome] = field(default_factory=list)

    @property
    def failed_side_effects(self) -> list[SideEffectOutcome]:
        return [s for s in self.side_effects if not s.ok]


def _to_opportunity(record: dict) -> Opportunity:
    """
    Model for a stored record. Legacy rows may carry a stage id such as "paid"
    as their status; it is read as the canonical status and left as-is in the store.
    """
    status = map_stage_to_status(record.get("status"), record.get("niche"))
    return Opportunity.model_validate({**record, "status": status})


class OpportunityService:
    """
    Applies the mapper and date normalizer to every write so stored records only
    carry canonical statuses, derived types and UTC timestamps. Store failures on
    the primary write propagate; client sync and activity recording never fail a
    write and report through WriteResult.side_effects instead.
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

    def _now(self) -> str:
        return format_utc(self.clock.now())

    def create(
        self,
        user_id: str,
        data: OpportunityCreate,
        user_timezone: Optional[str] = None,
    ) -> WriteResult:
        """Map, normalize and insert a new opportunity."""
        tz = user_timezone or self.settings.default_timezone
        niche = data.niche or "creator"
        now = self._now()
        dates = {name: to_utc(getattr(data, name), tz) for name in DATE_FIELDS}

        opportunity = Opportunity(
            id=uuid.uuid4().hex,
            user_id=user_id,
            client_id=data.client_id,
            title=data.title,
            description=data.description,
            value=data.value or 0,
            status=map_stage_to_status(data.status, niche),
            type=map_niche_to_type(niche),
            niche=niche,
            probability=(
                data.probability if data.probability is not None else self.settings.default_probability
            ),
            user_timezone=tz,
            notes=data.notes,
            tags=data.tags,
            custom_fields=data.custom_fields,
            created_at=now,
            updated_at=now,
            **dates,
        )
        stored = self.store.insert(OPPORTUNITIES, opportunity.to_record())
        logger.info("Created opportunity %s (%s, %s)", stored["id"], niche, stored["status"])

        side_effects: list[SideEffectOutcome] = []
        if stored["status"] == "won":
            side_effects.append(sync_won_client(self.store, user_id, stored, self.clock))
        side_effects.append(record_activity(self.store, stored, clock=self.clock))
        return WriteResult(_to_opportunity(stored), side_effects)

    def update(
        self,
        user_id: str,
        opportunity_id: str,
        data: OpportunityUpdate,
        user_timezone: Optional[str] = None,
    ) -> WriteResult:
        """
        Apply only the fields set on data. Raises RecordNotFoundError when the
        owner has no such opportunity.
        """
        existing = self.store.get_one(OPPORTUNITIES, opportunity_id, owner_id=user_id)
        if existing is None:
            raise RecordNotFoundError(OPPORTUNITIES, opportunity_id)

        provided = data.provided()
        tz = user_timezone or existing.get("user_timezone") or self.settings.default_timezone
        niche = provided.get("niche") or existing.get("niche")

        patch: dict = {}
        for name, value in provided.items():
            if value is None and name in _NON_NULLABLE:
                continue
            if name in DATE_FIELDS:
                patch[name] = to_utc(value, tz)
            elif name == "status":
                patch[name] = map_stage_to_status(value, niche)
            elif name == "notes":
                patch[name] = merge_notes(existing.get("notes"), value, self.clock)
            else:
                patch[name] = value
        if "niche" in patch:
            patch["type"] = map_niche_to_type(patch["niche"])
        if user_timezone:
            patch["user_timezone"] = tz
        patch["updated_at"] = self._now()

        # Validate the merged record before writing it
        _to_opportunity({**existing, **patch})
        stored = self.store.update(OPPORTUNITIES, opportunity_id, patch, owner_id=user_id)
        logger.info("Updated opportunity %s (%s)", opportunity_id, ", ".join(sorted(patch)))

        side_effects: list[SideEffectOutcome] = []
        if patch.get("status") == "won":
            side_effects.append(sync_won_client(self.store, user_id, stored, self.clock))
        side_effects.append(record_activity(self.store, stored, previous=existing, clock=self.clock))
        return WriteResult(_to_opportunity(stored), side_effects)

    def get(self, user_id: str, opportunity_id: str) -> Optional[Opportunity]:
        """Single opportunity owned by user_id, or None."""
        record = self.store.get_one(OPPORTUNITIES, opportunity_id, owner_id=user_id)
        return _to_opportunity(record) if record else None

    def list(self, user_id: str, niche: Optional[str] = None) -> list[Opportunity]:
        """Owner's opportunities, newest first, optionally restricted to one niche."""
        filters: dict = {"user_id": user_id}
        if niche:
            filters["niche"] = niche
        records = self.store.get(OPPORTUNITIES, filters)
        records.sort(key=lambda r: r.get("created_at") or "", reverse=True)
        return [_to_opportunity(r) for r in records]

    def delete(self, user_id: str, opportunity_id: str) -> None:
        """Raises RecordNotFoundError when the owner has no such opportunity."""
        self.store.delete(OPPORTUNITIES, opportunity_id, owner_id=user_id)
        logger.info("Deleted opportunity %s", opportunity_id)
