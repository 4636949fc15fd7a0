"""Counterparty (client) record."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

ClientStatus = Literal["lead", "client", "guest", "inactive"]


class Client(BaseModel):
    """Contact or company an opportunity is negotiated with."""

    id: str
    user_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    status: ClientStatus = "lead"
    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    niche: str = "creator"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
