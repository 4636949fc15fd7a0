"""Fixed lookup tables for stage, status, type and per-niche vocabulary."""

from types import MappingProxyType
from typing import Mapping

# Niche-independent aliases -> canonical status
DIRECT_STATUS_MAP: Mapping[str, str] = MappingProxyType(
    {
        "new": "prospecting",
        "prospecting": "prospecting",
        "qualification": "qualification",
        "proposal": "proposal",
        "negotiation": "negotiation",
        "won": "won",
        "lost": "lost",
        "inquiry": "prospecting",
        "qualified": "qualification",
        "proposal_sent": "proposal",
        "negotiating": "negotiation",
        "published": "won",
        "paid": "won",
        "completed": "won",
        "active": "won",
        "declined": "lost",
        "expired": "lost",
    }
)

# Pipeline stage id -> canonical status, per niche
NICHE_STAGE_MAP: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "creator": MappingProxyType(
            {
                "outreach": "prospecting",
                "awaiting": "qualification",
                "conversation": "qualification",
                "negotiation": "negotiation",
                "contract": "proposal",
                "progress": "proposal",
                "delivered": "won",
                "paid": "won",
                "archived": "lost",
            }
        ),
        "coach": MappingProxyType(
            {
                "new-lead": "prospecting",
                "discovery-scheduled": "prospecting",
                "discovery-completed": "qualification",
                "proposal": "proposal",
                "follow-up": "proposal",
                "negotiation": "negotiation",
                "signed": "negotiation",
                "paid": "won",
                "active": "won",
                "completed": "won",
                "archived": "lost",
            }
        ),
        "podcaster": MappingProxyType(
            {
                "outreach": "prospecting",
                "awaiting": "prospecting",
                "conversation": "qualification",
                "negotiation": "negotiation",
                "agreement": "proposal",
                "scheduled": "proposal",
                "recorded": "won",
                "published": "won",
                "paid": "won",
                "archived": "lost",
            }
        ),
        "freelancer": MappingProxyType(
            {
                "new-inquiry": "prospecting",
                "discovery": "qualification",
                "proposal": "proposal",
                "follow-up": "proposal",
                "negotiation": "negotiation",
                "contract": "negotiation",
                "progress": "won",
                "delivered": "won",
                "paid": "won",
                "archived": "lost",
            }
        ),
    }
)

NICHE_TYPE_MAP: Mapping[str, str] = MappingProxyType(
    {
        "creator": "brand_deal",
        "coach": "coaching",
        "podcaster": "sponsorship",
        "freelancer": "consulting",
    }
)

# Canonical status -> default pipeline column, per niche
STATUS_TO_STAGE_MAP: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "creator": MappingProxyType(
            {
                "prospecting": "outreach",
                "qualification": "awaiting",
                "proposal": "contract",
                "negotiation": "negotiation",
                "won": "paid",
                "lost": "archived",
            }
        ),
        "coach": MappingProxyType(
            {
                "prospecting": "new-lead",
                "qualification": "discovery-scheduled",
                "proposal": "proposal",
                "negotiation": "negotiation",
                "won": "paid",
                "lost": "archived",
            }
        ),
        "podcaster": MappingProxyType(
            {
                "prospecting": "outreach",
                "qualification": "conversation",
                "proposal": "agreement",
                "negotiation": "negotiation",
                "won": "published",
                "lost": "archived",
            }
        ),
        "freelancer": MappingProxyType(
            {
                "prospecting": "new-inquiry",
                "qualification": "discovery",
                "proposal": "proposal",
                "negotiation": "contract",
                "won": "delivered",
                "lost": "archived",
            }
        ),
    }
)

# Ordered (stage_id, label) pipeline, per niche
NICHE_STAGES: Mapping[str, tuple[tuple[str, str], ...]] = MappingProxyType(
    {
        "creator": (
            ("outreach", "Outreach / Pitched"),
            ("awaiting", "Awaiting Response"),
            ("conversation", "In Conversation"),
            ("negotiation", "Negotiation"),
            ("contract", "Contract Signed"),
            ("progress", "Content in Progress"),
            ("delivered", "Delivered"),
            ("paid", "Paid"),
            ("archived", "Archived / Lost"),
        ),
        "coach": (
            ("new-lead", "New Lead"),
            ("discovery-scheduled", "Discovery Call Scheduled"),
            ("discovery-completed", "Discovery Call Completed"),
            ("proposal", "Proposal Sent"),
            ("follow-up", "Follow-Up"),
            ("negotiation", "Negotiation"),
            ("signed", "Signed Client"),
            ("paid", "Paid"),
            ("active", "Active Program"),
            ("completed", "Completed"),
            ("archived", "Archived / Lost"),
        ),
        "podcaster": (
            ("outreach", "Guest/Sponsor Outreach"),
            ("awaiting", "Awaiting Response"),
            ("conversation", "In Conversation"),
            ("negotiation", "Negotiation"),
            ("agreement", "Agreement in Place"),
            ("scheduled", "Scheduled"),
            ("recorded", "Recorded"),
            ("published", "Published"),
            ("paid", "Paid"),
            ("archived", "Archived / Lost"),
        ),
        "freelancer": (
            ("new-inquiry", "New Inquiry"),
            ("discovery", "Discovery Call"),
            ("proposal", "Proposal Sent"),
            ("follow-up", "Follow-Up"),
            ("negotiation", "In Negotiation"),
            ("contract", "Contract Signed"),
            ("progress", "Project In Progress"),
            ("delivered", "Delivered"),
            ("paid", "Paid"),
            ("archived", "Archived / Lost"),
        ),
    }
)

# Form key holding the deal amount, per niche
NICHE_VALUE_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "creator": "dealValue",
        "coach": "proposedValue",
        "podcaster": "sponsorshipValue",
        "freelancer": "projectValue",
    }
)

# custom_fields keys tried in order when naming the counterparty
COUNTERPARTY_NAME_KEYS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "creator": ("brandName", "clientName"),
        "coach": ("clientName", "brandName"),
        "podcaster": ("guestOrSponsorName", "brandName", "clientName", "companyName"),
        "freelancer": ("companyName", "clientName", "brandName"),
    }
)
DEFAULT_COUNTERPARTY_NAME_KEYS: tuple[str, ...] = ("brandName", "clientName", "companyName")

# Statuses counted as realized revenue. Coach keeps legacy "paid" rows.
REVENUE_STATUSES: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "creator": frozenset({"won"}),
        "coach": frozenset({"won", "paid"}),
        "podcaster": frozenset({"won"}),
        "freelancer": frozenset({"won"}),
    }
)
