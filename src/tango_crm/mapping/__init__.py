"""Opportunity Mapper: stage, status and type vocabulary plus notes merge."""

from .notes import merge_notes, parse_notes
from .rules import (
    map_form_data,
    map_niche_to_type,
    map_stage_to_status,
    map_status_to_stage_id,
    niche_stages,
    resolve_counterparty_name,
)
from .tables import (
    DIRECT_STATUS_MAP,
    NICHE_STAGE_MAP,
    NICHE_STAGES,
    NICHE_TYPE_MAP,
    REVENUE_STATUSES,
    STATUS_TO_STAGE_MAP,
)

__all__ = [
    "DIRECT_STATUS_MAP",
    "NICHE_STAGE_MAP",
    "NICHE_STAGES",
    "NICHE_TYPE_MAP",
    "REVENUE_STATUSES",
    "STATUS_TO_STAGE_MAP",
    "map_form_data",
    "map_niche_to_type",
    "map_stage_to_status",
    "map_status_to_stage_id",
    "merge_notes",
    "niche_stages",
    "parse_notes",
    "resolve_counterparty_name",
]
