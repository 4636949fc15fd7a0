"""Opportunity activity trail entries."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

ActivityType = Literal["created", "updated"]


class FieldChange(BaseModel):
    """One tracked field that differs between the stored and updated record."""

    field: str
    old_value: Any = None
    new_value: Any = None


class Activity(BaseModel):
    """Entry recorded when an opportunity is created or updated."""

    id: Optional[str] = None
    opportunity_id: str
    user_id: str
    type: ActivityType
    description: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: str
