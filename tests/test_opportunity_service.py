"""Integration tests for OpportunityService over SQLiteStore."""

import json
from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from tango_crm.clock import FixedClock
from tango_crm.config import Settings
from tango_crm.errors import RecordNotFoundError, StoreError
from tango_crm.growth import RevenueGrowthCalculator
from tango_crm.models import CustomFields, OpportunityCreate, OpportunityUpdate
from tango_crm.opportunities import OpportunityService
from tango_crm.store import SQLiteStore

NY = "America/New_York"


class _FailingStore(SQLiteStore):
    """SQLite store whose inserts into one collection always fail."""

    def __init__(self, db_path: Path, failing_collection: str):
        super().__init__(db_path)
        self.failing_collection = failing_collection

    def insert(self, collection: str, record: dict) -> dict:
        if collection == self.failing_collection:
            raise StoreError(f"{collection} unavailable")
        return super().insert(collection, record)


def _make_create(**kwargs) -> OpportunityCreate:
    data = {"title": "Spring campaign", "value": 1000}
    data.update(kwargs)
    return OpportunityCreate(**data)


class TestCreate:
    """Tests for OpportunityService.create."""

    def test_maps_status_type_and_dates(self, service: OpportunityService) -> None:
        """Stage ids, niche type and local dates are normalized before storage."""
        data = _make_create(
            status="contract",
            niche="freelancer",
            expected_close_date="2025-04-01T09:00",
            follow_up_date="2025-03-20",
        )
        result = service.create("user-1", data, user_timezone=NY)
        opp = result.opportunity

        assert opp.status == "negotiation"
        assert opp.type == "consulting"
        assert opp.niche == "freelancer"
        assert opp.expected_close_date == "2025-04-01T13:00:00.000Z"
        assert opp.follow_up_date == "2025-03-20T00:00:00.000Z"
        assert opp.user_timezone == NY
        assert opp.created_at == "2025-03-15T12:00:00.000Z"
        assert opp.updated_at == opp.created_at

    def test_defaults(self, service: OpportunityService) -> None:
        """Missing niche, status and probability get their defaults."""
        opp = service.create("user-1", _make_create()).opportunity
        assert opp.niche == "creator"
        assert opp.type == "brand_deal"
        assert opp.status == "prospecting"
        assert opp.probability == 50
        assert opp.user_timezone == "UTC"

    def test_probability_from_settings_and_explicit_zero(self, store: SQLiteStore, clock: FixedClock) -> None:
        """Configured default applies only when probability is absent."""
        service = OpportunityService(store, clock=clock, settings=Settings(default_probability=70))
        assert service.create("user-1", _make_create()).opportunity.probability == 70
        assert service.create("user-1", _make_create(probability=0)).opportunity.probability == 0

    def test_persisted_and_activity_recorded(self, service: OpportunityService, store: SQLiteStore) -> None:
        """The record is stored and a created activity follows."""
        result = service.create("user-1", _make_create())
        assert store.get_one("opportunities", result.opportunity.id, owner_id="user-1") is not None
        assert [s.name for s in result.side_effects] == ["activity"]
        activities = store.get("opportunity_activities", {"opportunity_id": result.opportunity.id})
        assert len(activities) == 1
        assert activities[0]["type"] == "created"
        assert activities[0]["description"] == 'Opportunity "Spring campaign" was created'

    def test_won_creates_client(self, service: OpportunityService, store: SQLiteStore) -> None:
        """A won opportunity promotes its counterparty to a client."""
        data = _make_create(
            status="paid",
            niche="coach",
            custom_fields=CustomFields(clientName="Jane Doe", contactEmail="jane@example.com"),
        )
        result = service.create("user-1", data)

        assert result.opportunity.status == "won"
        assert result.side_effects[0].name == "won_client_sync"
        assert result.side_effects[0].status == "created"
        clients = store.get("clients", {"user_id": "user-1"})
        assert len(clients) == 1
        assert clients[0]["name"] == "Jane Doe"
        assert clients[0]["email"] == "jane@example.com"
        assert clients[0]["status"] == "client"
        assert clients[0]["niche"] == "coach"
        assert clients[0]["tags"] == ["from-opportunity"]
        assert clients[0]["notes"] == "Created from won opportunity: Spring campaign"

    def test_client_failure_does_not_fail_write(self, temp_db: Path, clock: FixedClock) -> None:
        """A broken clients collection is reported, not raised."""
        store = _FailingStore(temp_db, "clients")
        service = OpportunityService(store, clock=clock)
        data = _make_create(status="won", custom_fields=CustomFields(brandName="Acme"))

        result = service.create("user-1", data)

        assert store.get_one("opportunities", result.opportunity.id) is not None
        failed = result.failed_side_effects
        assert len(failed) == 1
        assert failed[0].name == "won_client_sync"
        assert "clients unavailable" in failed[0].error

    def test_activity_failure_does_not_fail_write(self, temp_db: Path, clock: FixedClock) -> None:
        """A broken activity collection is reported, not raised."""
        store = _FailingStore(temp_db, "opportunity_activities")
        result = OpportunityService(store, clock=clock).create("user-1", _make_create())
        assert result.failed_side_effects[0].name == "activity"
        assert len(store.get("opportunities")) == 1

    def test_primary_failure_raises(self, temp_db: Path, clock: FixedClock) -> None:
        """Failure of the opportunity insert itself propagates."""
        store = _FailingStore(temp_db, "opportunities")
        with pytest.raises(StoreError):
            OpportunityService(store, clock=clock).create("user-1", _make_create())


class TestUpdate:
    """Tests for OpportunityService.update."""

    def test_niche_change_recomputes_type(self, service: OpportunityService) -> None:
        """Type follows niche."""
        opp = service.create("user-1", _make_create()).opportunity
        updated = service.update("user-1", opp.id, OpportunityUpdate(niche="podcaster")).opportunity
        assert updated.niche == "podcaster"
        assert updated.type == "sponsorship"

    def test_stage_id_uses_niche(self, service: OpportunityService) -> None:
        """Stage ids are mapped with the stored niche."""
        opp = service.create("user-1", _make_create(niche="podcaster")).opportunity
        updated = service.update("user-1", opp.id, OpportunityUpdate(status="agreement")).opportunity
        assert updated.status == "proposal"

    def test_only_provided_fields_change(self, service: OpportunityService, clock: FixedClock) -> None:
        """Unset fields keep their stored values; updated_at moves."""
        opp = service.create("user-1", _make_create(description="keep me", probability=30)).opportunity
        clock.advance(timedelta(hours=1))
        updated = service.update("user-1", opp.id, OpportunityUpdate(value=2500)).opportunity
        assert updated.value == 2500
        assert updated.description == "keep me"
        assert updated.probability == 30
        assert updated.created_at == "2025-03-15T12:00:00.000Z"
        assert updated.updated_at == "2025-03-15T13:00:00.000Z"

    def test_null_on_required_field_is_ignored(self, service: OpportunityService) -> None:
        """Explicit None cannot clear title; it can clear description."""
        opp = service.create("user-1", _make_create(description="old")).opportunity
        updated = service.update("user-1", opp.id, OpportunityUpdate(title=None, description=None)).opportunity
        assert updated.title == "Spring campaign"
        assert updated.description is None

    def test_dates_use_stored_timezone(self, service: OpportunityService) -> None:
        """Without a timezone on the update, the record's zone is used."""
        opp = service.create("user-1", _make_create(), user_timezone=NY).opportunity
        data = OpportunityUpdate(follow_up_date="2025-03-20T09:00")
        updated = service.update("user-1", opp.id, data).opportunity
        assert updated.follow_up_date == "2025-03-20T13:00:00.000Z"

    def test_notes_are_merged(self, service: OpportunityService) -> None:
        """Updating notes appends to the history instead of replacing."""
        opp = service.create("user-1", _make_create(notes='{"notes": "first"}')).opportunity
        updated = service.update("user-1", opp.id, OpportunityUpdate(notes="second")).opportunity
        notes = json.loads(updated.notes)
        assert notes["notes"] == "second"
        assert [h["notes"] for h in notes["noteHistory"]] == ["first", "second"]

    def test_won_transition_marks_linked_client(self, service: OpportunityService, store: SQLiteStore) -> None:
        """A linked client_id is updated to status client."""
        client = store.insert("clients", {"user_id": "user-1", "name": "Acme", "status": "lead"})
        opp = service.create("user-1", _make_create(client_id=client["id"])).opportunity
        result = service.update("user-1", opp.id, OpportunityUpdate(status="paid"))
        assert result.opportunity.status == "won"
        assert result.side_effects[0].status == "updated"
        assert store.get_one("clients", client["id"])["status"] == "client"

    def test_won_transition_reuses_existing_client(self, service: OpportunityService, store: SQLiteStore) -> None:
        """A same-named client is updated rather than duplicated."""
        store.insert("clients", {"id": "c-1", "user_id": "user-1", "name": "Acme", "status": "lead"})
        opp = service.create("user-1", _make_create(custom_fields=CustomFields(brandName="Acme"))).opportunity
        service.update("user-1", opp.id, OpportunityUpdate(status="won"))
        clients = store.get("clients", {"user_id": "user-1"})
        assert len(clients) == 1
        assert clients[0]["status"] == "client"

    def test_update_activity_lists_changes(self, service: OpportunityService, store: SQLiteStore) -> None:
        """Tracked field changes are recorded; untracked ones are skipped."""
        opp = service.create("user-1", _make_create()).opportunity
        result = service.update("user-1", opp.id, OpportunityUpdate(value=1500))
        activity = [s for s in result.side_effects if s.name == "activity"][0]
        assert activity.status == "created"
        entries = store.get("opportunity_activities", {"type": "updated"})
        assert entries[0]["description"] == 'Opportunity "Spring campaign" was updated (value)'
        assert entries[0]["metadata"]["changes"] == [{"field": "value", "old_value": 1000.0, "new_value": 1500.0}]

        result = service.update("user-1", opp.id, OpportunityUpdate(tags=["vip"]))
        assert result.side_effects[-1].status == "skipped"

    def test_missing_raises(self, service: OpportunityService) -> None:
        """Unknown ids raise RecordNotFoundError."""
        with pytest.raises(RecordNotFoundError):
            service.update("user-1", "missing", OpportunityUpdate(value=1))

    def test_other_owner_raises(self, service: OpportunityService) -> None:
        """An opportunity is invisible to other users."""
        opp = service.create("user-1", _make_create()).opportunity
        with pytest.raises(RecordNotFoundError):
            service.update("user-2", opp.id, OpportunityUpdate(value=1))
        assert service.get("user-1", opp.id).value == 1000

    def test_invalid_payload_rejected(self) -> None:
        """Negative values and out-of-range probabilities fail validation."""
        with pytest.raises(ValidationError):
            OpportunityUpdate(value=-1)
        with pytest.raises(ValidationError):
            OpportunityUpdate(probability=101)


class TestLegacyStatus:
    """Tests for stored rows whose status is a stage id rather than a canonical status."""

    def _seed_legacy_paid(self, store: SQLiteStore) -> None:
        store.insert(
            "opportunities",
            {
                "id": "legacy-1",
                "user_id": "user-1",
                "title": "Old coaching deal",
                "value": 500,
                "status": "paid",
                "niche": "coach",
                "type": "coaching",
                "created_at": "2025-03-05T10:00:00.000Z",
                "updated_at": "2025-03-05T10:00:00.000Z",
            },
        )

    def test_list_and_get_read_paid_as_won(self, service: OpportunityService, store: SQLiteStore) -> None:
        """A legacy "paid" row is returned as won."""
        self._seed_legacy_paid(store)
        listed = service.list("user-1", niche="coach")
        assert [(o.id, o.status) for o in listed] == [("legacy-1", "won")]
        assert service.get("user-1", "legacy-1").status == "won"

    def test_update_legacy_row(
        self, service: OpportunityService, store: SQLiteStore, clock: FixedClock
    ) -> None:
        """Renaming works; the stored status is untouched so coach revenue still counts it."""
        self._seed_legacy_paid(store)
        result = service.update("user-1", "legacy-1", OpportunityUpdate(title="Renamed"))
        assert result.opportunity.title == "Renamed"
        assert result.opportunity.status == "won"
        assert store.get_one("opportunities", "legacy-1")["status"] == "paid"

        growth = RevenueGrowthCalculator(store, clock=clock).calculate_growth_rate("user-1", "coach")
        assert growth.current_period == 500


class TestReadDelete:
    """Tests for get, list and delete."""

    def test_list_newest_first_and_niche_filter(self, service: OpportunityService, clock: FixedClock) -> None:
        """Listing is owner-scoped, newest first and filterable by niche."""
        first = service.create("user-1", _make_create(title="First")).opportunity
        clock.advance(timedelta(minutes=5))
        second = service.create("user-1", _make_create(title="Second", niche="coach")).opportunity
        service.create("user-2", _make_create(title="Other user"))

        assert [o.id for o in service.list("user-1")] == [second.id, first.id]
        assert [o.title for o in service.list("user-1", niche="coach")] == ["Second"]

    def test_get_missing_is_none(self, service: OpportunityService) -> None:
        """Missing or foreign ids give None."""
        opp = service.create("user-1", _make_create()).opportunity
        assert service.get("user-1", "missing") is None
        assert service.get("user-2", opp.id) is None

    def test_delete(self, service: OpportunityService) -> None:
        """Deleted opportunities are gone; other owners cannot delete."""
        opp = service.create("user-1", _make_create()).opportunity
        with pytest.raises(RecordNotFoundError):
            service.delete("user-2", opp.id)
        service.delete("user-1", opp.id)
        assert service.get("user-1", opp.id) is None
