"""Canonical opportunity record and its create/update payloads."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Status = Literal["prospecting", "qualification", "proposal", "negotiation", "won", "lost"]
OpportunityType = Literal[
    "brand_deal", "sponsorship", "consulting", "coaching", "content_creation", "other"
]
Niche = Literal["creator", "coach", "podcaster", "freelancer"]

CANONICAL_STATUSES: tuple[str, ...] = (
    "prospecting",
    "qualification",
    "proposal",
    "negotiation",
    "won",
    "lost",
)
NICHES: tuple[str, ...] = ("creator", "coach", "podcaster", "freelancer")

DATE_FIELDS: tuple[str, ...] = (
    "expected_close_date",
    "actual_close_date",
    "follow_up_date",
    "discovery_call_date",
    "scheduled_date",
)


class CustomFields(BaseModel):
    """
    Niche-specific contact and counterparty attributes not modeled as columns.
    Known keys are validated as strings; any other key is kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    contactName: Optional[str] = None
    contactEmail: Optional[str] = None
    contactPhone: Optional[str] = None
    brandName: Optional[str] = None
    companyName: Optional[str] = None
    guestOrSponsorName: Optional[str] = None
    clientName: Optional[str] = None
    type: Optional[str] = None

    def as_dict(self) -> dict:
        """Plain dict without unset keys, as persisted in the custom_fields column."""
        return self.model_dump(exclude_none=True)


class Opportunity(BaseModel):
    """Canonical sales-pipeline record. Timestamps are UTC ISO-8601 strings."""

    id: str = Field(..., description="Opaque id, generated at creation")
    user_id: str = Field(..., description="Owning user")
    client_id: Optional[str] = None

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    value: float = Field(default=0, ge=0)

    status: Status = "prospecting"
    type: OpportunityType = "other"
    niche: Niche = "creator"
    probability: int = Field(default=50, ge=0, le=100)

    expected_close_date: Optional[str] = None
    actual_close_date: Optional[str] = None
    follow_up_date: Optional[str] = None
    discovery_call_date: Optional[str] = None
    scheduled_date: Optional[str] = None
    user_timezone: str = "UTC"

    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    custom_fields: CustomFields = Field(default_factory=CustomFields)

    created_at: str
    updated_at: str

    def to_record(self) -> dict:
        """Flat dict for the store; custom fields without empty keys."""
        data = self.model_dump(mode="json", exclude={"custom_fields"})
        data["custom_fields"] = self.custom_fields.as_dict()
        return data


class OpportunityCreate(BaseModel):
    """
    Raw form input for a new opportunity. `status` may be any UI stage id or alias;
    it is mapped into the canonical set before storage.
    """

    title: str = Field(..., min_length=1)
    client_id: Optional[str] = None
    description: Optional[str] = None
    value: Optional[float] = Field(default=None, ge=0)
    status: Optional[str] = None
    niche: Optional[Niche] = None
    probability: Optional[int] = Field(default=None, ge=0, le=100)

    expected_close_date: Optional[str] = None
    actual_close_date: Optional[str] = None
    follow_up_date: Optional[str] = None
    discovery_call_date: Optional[str] = None
    scheduled_date: Optional[str] = None

    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    custom_fields: CustomFields = Field(default_factory=CustomFields)


class OpportunityUpdate(BaseModel):
    """Partial update; only fields explicitly provided are applied."""

    title: Optional[str] = Field(default=None, min_length=1)
    client_id: Optional[str] = None
    description: Optional[str] = None
    value: Optional[float] = Field(default=None, ge=0)
    status: Optional[str] = None
    niche: Optional[Niche] = None
    probability: Optional[int] = Field(default=None, ge=0, le=100)

    expected_close_date: Optional[str] = None
    actual_close_date: Optional[str] = None
    follow_up_date: Optional[str] = None
    discovery_call_date: Optional[str] = None
    scheduled_date: Optional[str] = None

    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    custom_fields: Optional[CustomFields] = None

    def provided(self) -> dict:
        """Fields the caller set explicitly, with custom fields as a plain dict."""
        data = {name: getattr(self, name) for name in self.model_fields_set}
        if "custom_fields" in data and data["custom_fields"] is not None:
            data["custom_fields"] = data["custom_fields"].as_dict()
        return data
