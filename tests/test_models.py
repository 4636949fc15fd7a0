"""Unit tests for data models."""

import pytest
from pydantic import ValidationError

from tango_crm.models import Client, CustomFields, GrowthRateResult, Opportunity, OpportunityCreate, OpportunityUpdate


def _make_opportunity(**kwargs) -> Opportunity:
    data = {
        "id": "opp-1",
        "user_id": "user-1",
        "title": "Deal",
        "created_at": "2025-03-15T12:00:00.000Z",
        "updated_at": "2025-03-15T12:00:00.000Z",
    }
    data.update(kwargs)
    return Opportunity(**data)


class TestOpportunity:
    """Tests for Opportunity model."""

    def test_minimal_defaults(self) -> None:
        """Only id, owner, title and timestamps are required."""
        opp = _make_opportunity()
        assert opp.status == "prospecting"
        assert opp.type == "other"
        assert opp.niche == "creator"
        assert opp.probability == 50
        assert opp.tags == []

    @pytest.mark.parametrize(
        "field,value",
        [("status", "paid"), ("niche", "agency"), ("probability", 101), ("value", -5), ("title", "")],
    )
    def test_rejects_invalid(self, field: str, value) -> None:
        """Non-canonical statuses and out-of-range numbers fail validation."""
        with pytest.raises(ValidationError):
            _make_opportunity(**{field: value})

    def test_to_record_flattens_custom_fields(self) -> None:
        """Unset custom fields are dropped; extra keys are kept."""
        opp = _make_opportunity(custom_fields={"brandName": "Acme", "campaignName": "Spring"})
        record = opp.to_record()
        assert record["custom_fields"] == {"brandName": "Acme", "campaignName": "Spring"}
        assert record["id"] == "opp-1"


class TestPayloads:
    """Tests for create/update payloads."""

    def test_create_accepts_stage_ids(self) -> None:
        """Create status is free text until mapped."""
        data = OpportunityCreate(title="Deal", status="discovery-completed")
        assert data.status == "discovery-completed"

    def test_update_provided_only_set_fields(self) -> None:
        """provided() returns explicitly set fields, including explicit None."""
        data = OpportunityUpdate(value=10, description=None, custom_fields=CustomFields(clientName="Jane"))
        assert data.provided() == {"value": 10.0, "description": None, "custom_fields": {"clientName": "Jane"}}
        assert OpportunityUpdate().provided() == {}


class TestOtherModels:
    """Tests for Client and GrowthRateResult."""

    def test_client_defaults(self) -> None:
        """New clients start as leads in the creator niche."""
        client = Client(id="c-1", user_id="user-1", name="Acme")
        assert client.status == "lead"
        assert client.niche == "creator"

    def test_growth_result_aliases(self) -> None:
        """Growth results accept and emit camelCase."""
        result = GrowthRateResult(
            growthRate=5,
            absoluteChange=1,
            currentPeriod=21,
            previousPeriod=20,
            periodType="month",
            isPositiveGrowth=True,
            message="5.00% growth compared to previous month",
        )
        assert result.growth_rate == 5
        dumped = result.model_dump(by_alias=True, exclude_none=True)
        assert dumped["isPositiveGrowth"] is True
        assert "startDate" not in dumped
