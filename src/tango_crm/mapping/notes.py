"""Append-only merge of opportunity notes on update."""

import json
import logging
from typing import Optional

from tango_crm.clock import SYSTEM_CLOCK, Clock
from tango_crm.dates.normalizer import format_utc

logger = logging.getLogger(__name__)

NOTES_SEPARATOR = "\n\n---\n\n"


def parse_notes(raw: str) -> dict:
    """Notes as a JSON object; anything else is wrapped as {"notes": raw}."""
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return {"notes": raw}
    if not isinstance(parsed, dict):
        return {"notes": raw}
    return parsed


def merge_notes(
    existing: Optional[str],
    incoming: Optional[str],
    clock: Optional[Clock] = None,
) -> Optional[str]:
    """
    Merge incoming notes into existing notes without discarding prior content.

    With no existing notes the incoming value is returned as given. Otherwise
    both sides are read as JSON objects and shallow-merged, "lastUpdated" is
    stamped and one entry is appended to "noteHistory". When the existing notes
    have content but no history yet, that content is seeded as the first entry.
    """
    if incoming is None:
        return existing
    if not existing:
        return incoming

    try:
        now = format_utc((clock or SYSTEM_CLOCK).now())
        old = parse_notes(existing)
        new = parse_notes(incoming)

        history = old.get("noteHistory")
        if not isinstance(history, list):
            history = []
            if old.get("notes") is not None:
                history.append(
                    {
                        "timestamp": old.get("lastUpdated"),
                        "notes": old["notes"],
                        "stageId": old.get("stageId"),
                        "niche": old.get("niche"),
                    }
                )
        history = [*history, _history_entry(old, new, incoming, now)]

        merged = {**old, **new, "lastUpdated": now, "noteHistory": history}
        return json.dumps(merged)
    except Exception as e:
        logger.warning("Notes merge failed, concatenating instead: %s", e)
        return f"{existing}{NOTES_SEPARATOR}{incoming}"


def _history_entry(old: dict, new: dict, raw_incoming: str, now: str) -> dict:
    notes = new.get("notes")
    stage_id = new.get("stageId")
    niche = new.get("niche")
    return {
        "timestamp": now,
        "notes": raw_incoming if notes is None else notes,
        "stageId": old.get("stageId") if stage_id is None else stage_id,
        "niche": old.get("niche") if niche is None else niche,
    }
