"""Promote the counterparty of a won opportunity to a client."""

import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional

from tango_crm.clock import SYSTEM_CLOCK, Clock
from tango_crm.dates.normalizer import format_utc
from tango_crm.mapping.rules import resolve_counterparty_name
from tango_crm.store.base import Store

logger = logging.getLogger(__name__)

CLIENTS = "clients"
FROM_OPPORTUNITY_TAG = "from-opportunity"

OutcomeStatus = Literal["updated", "created", "skipped", "failed"]


@dataclass
class SideEffectOutcome:
    """Result of a best-effort step that ran after the primary write."""

    name: str
    status: OutcomeStatus
    detail: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


def client_notes(title: str, niche: Optional[str], custom_fields: Mapping[str, Any], opp_type: Optional[str]) -> str:
    """Provenance note stored on a client created from a won opportunity."""
    if niche == "podcaster":
        kind = custom_fields.get("type") or opp_type or "podcast"
        notes = f"Created from won {kind} opportunity: {title}"
        guest = custom_fields.get("guestOrSponsorName")
        if guest:
            notes += f" ({guest})"
        return notes
    return f"Created from won opportunity: {title}"


def sync_won_client(
    store: Store,
    user_id: str,
    opportunity: Mapping[str, Any],
    clock: Optional[Clock] = None,
) -> SideEffectOutcome:
    """
    Mark the client behind a won opportunity as status "client".

    With a client_id the referenced client is updated. Otherwise a counterparty
    name is resolved from custom_fields and a same-named client for the owner is
    updated, or a new one is created. The lookup and insert are separate calls,
    so two concurrent wins for a new name can create two clients.

    Never raises: failures are logged and returned in the outcome.
    """
    name = "won_client_sync"
    try:
        now = format_utc((clock or SYSTEM_CLOCK).now())
        client_id = opportunity.get("client_id")
        if client_id:
            store.update(CLIENTS, client_id, {"status": "client", "updated_at": now}, owner_id=user_id)
            logger.info("Marked client %s as client", client_id)
            return SideEffectOutcome(name, "updated", f"client {client_id}")

        niche = opportunity.get("niche")
        custom_fields = opportunity.get("custom_fields") or {}
        client_name = resolve_counterparty_name(niche, custom_fields)
        if not client_name:
            return SideEffectOutcome(name, "skipped", "no client_id or counterparty name")

        existing = store.get(CLIENTS, {"user_id": user_id, "name": client_name})
        if existing:
            existing_id = existing[0]["id"]
            store.update(CLIENTS, existing_id, {"status": "client", "updated_at": now}, owner_id=user_id)
            logger.info("Marked existing client %s (%s) as client", existing_id, client_name)
            return SideEffectOutcome(name, "updated", f"client {existing_id}")

        created = store.insert(
            CLIENTS,
            {
                "user_id": user_id,
                "name": client_name,
                "email": custom_fields.get("contactEmail"),
                "company": custom_fields.get("companyName"),
                "status": "client",
                "notes": client_notes(
                    opportunity.get("title") or "",
                    niche,
                    custom_fields,
                    opportunity.get("type"),
                ),
                "tags": [FROM_OPPORTUNITY_TAG],
                "niche": niche or "creator",
                "created_at": now,
                "updated_at": now,
            },
        )
        logger.info("Created client %s from won opportunity", created.get("id"))
        return SideEffectOutcome(name, "created", f"client {created.get('id')}")
    except Exception as e:
        logger.warning("Won client sync failed for opportunity %s: %s", opportunity.get("id"), e)
        return SideEffectOutcome(name, "failed", error=str(e))
