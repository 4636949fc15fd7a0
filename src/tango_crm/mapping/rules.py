"""Stage/status/type mapping rules. None of these raise on unknown input."""

from typing import Any, Mapping, Optional

from tango_crm.models.opportunity import CANONICAL_STATUSES, CustomFields, OpportunityCreate

from .tables import (
    COUNTERPARTY_NAME_KEYS,
    DEFAULT_COUNTERPARTY_NAME_KEYS,
    DIRECT_STATUS_MAP,
    NICHE_STAGE_MAP,
    NICHE_STAGES,
    NICHE_TYPE_MAP,
    NICHE_VALUE_FIELDS,
    STATUS_TO_STAGE_MAP,
)

DEFAULT_STATUS = "prospecting"
DEFAULT_TYPE = "other"
DEFAULT_STAGE_ID = "outreach"
DEFAULT_TITLE = "New Opportunity"


def map_stage_to_status(stage_id_or_status: Optional[str], niche: Optional[str] = None) -> str:
    """
    Resolve a canonical status from a canonical value, a global alias or a
    niche pipeline stage id, in that order. Anything else is "prospecting".
    """
    if not stage_id_or_status:
        return DEFAULT_STATUS
    if stage_id_or_status in CANONICAL_STATUSES:
        return stage_id_or_status
    if stage_id_or_status in DIRECT_STATUS_MAP:
        return DIRECT_STATUS_MAP[stage_id_or_status]
    if niche and niche in NICHE_STAGE_MAP:
        mapped = NICHE_STAGE_MAP[niche].get(stage_id_or_status)
        if mapped:
            return mapped
    return DEFAULT_STATUS


def map_niche_to_type(niche: Optional[str]) -> str:
    return NICHE_TYPE_MAP.get(niche or "", DEFAULT_TYPE)


def map_status_to_stage_id(status: Optional[str], niche: Optional[str]) -> str:
    """Default pipeline column for a stored status; "outreach" when unknown."""
    return STATUS_TO_STAGE_MAP.get(niche or "", {}).get(status or "", DEFAULT_STAGE_ID)


def niche_stages(niche: Optional[str]) -> tuple[tuple[str, str], ...]:
    """Ordered (stage_id, label) pipeline; unknown niches get the creator pipeline."""
    return NICHE_STAGES.get(niche or "", NICHE_STAGES["creator"])


def resolve_counterparty_name(
    niche: Optional[str],
    custom_fields: Optional[Mapping[str, Any] | CustomFields],
) -> Optional[str]:
    """First non-empty name among the niche's preferred custom field keys."""
    if custom_fields is None:
        return None
    if isinstance(custom_fields, CustomFields):
        custom_fields = custom_fields.as_dict()
    keys = COUNTERPARTY_NAME_KEYS.get(niche or "", DEFAULT_COUNTERPARTY_NAME_KEYS)
    for key in keys:
        value = custom_fields.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def map_form_data(
    form: Mapping[str, Any],
    niche: Optional[str],
    default_probability: int = 50,
) -> OpportunityCreate:
    """Build a create payload from a niche-specific opportunity form."""
    value_key = NICHE_VALUE_FIELDS.get(niche or "")
    if value_key:
        value = form.get(value_key) or 0
    else:
        value = next((form[k] for k in NICHE_VALUE_FIELDS.values() if form.get(k)), 0)

    title = (
        form.get("clientName")
        or form.get("campaignName")
        or form.get("guestOrSponsorName")
        or DEFAULT_TITLE
    )

    known = set(CustomFields.model_fields)
    custom = {k: v for k, v in form.items() if k in known and v not in (None, "")}

    return OpportunityCreate(
        title=title,
        value=float(value),
        status=map_stage_to_status(form.get("status"), niche),
        niche=niche if niche in NICHE_TYPE_MAP else None,
        probability=default_probability if form.get("probability") is None else form["probability"],
        expected_close_date=form.get("expected_close_date"),
        description=form.get("description") or None,
        notes=form.get("notes"),
        tags=list(form.get("tags") or []),
        custom_fields=CustomFields(**custom),
    )
