import pytest

from signage.models.campaign import Campaign
from signage.models.models import TV
from signage.models.placement_models import AssignmentResult
from signage.storage.base import SignageStore, new_id
from signage.storage.memory_store import InMemoryStore
from signage.storage.postgres_store import PostgresStore

from conftest import day


def test_both_stores_satisfy_the_contract():
    assert isinstance(InMemoryStore(), SignageStore)
    assert isinstance(PostgresStore(connection_factory=lambda: None), SignageStore)


def test_new_id_format():
    ident = new_id("campaign")
    prefix, millis, suffix = ident.split("-")
    assert prefix == "campaign"
    assert millis.isdigit()
    assert len(suffix) == 5


class TestInMemoryStore:
    @pytest.fixture
    def seeded(self, store):
        store.create_tv(TV(id="tv-1", name="Lobby TV"))
        store.create_campaign(Campaign(id="c-1", name="Spring sale", start=day(0), end=day(7)))
        return store

    def test_returned_models_are_copies(self, seeded):
        campaign = seeded.get_campaign("c-1")
        campaign.name = "changed"
        campaign.assigned_tv_ids.append("tv-9")
        assert seeded.get_campaign("c-1").name == "Spring sale"
        assert seeded.get_campaign("c-1").assigned_tv_ids == []

    def test_assignment_uniqueness(self, seeded):
        assert seeded.create_assignment("c-1", "tv-1") == AssignmentResult.CREATED
        assert seeded.create_assignment("c-1", "tv-1") == AssignmentResult.ALREADY_EXISTS
        assert len(seeded.list_assignments("tv-1")) == 1

    def test_assignment_needs_existing_rows(self, seeded):
        with pytest.raises(KeyError):
            seeded.create_assignment("c-1", "tv-missing")

    def test_delete_assignment(self, seeded):
        seeded.create_assignment("c-1", "tv-1")
        assert seeded.delete_assignment("c-1", "tv-1")
        assert not seeded.delete_assignment("c-1", "tv-1")

    def test_update_campaign_keeps_ads_and_links(self, seeded):
        seeded.create_assignment("c-1", "tv-1")
        updated = seeded.update_campaign(Campaign(id="c-1", name="Renamed", start=day(1), end=day(6)))
        assert updated.name == "Renamed"
        assert updated.assigned_tv_ids == ["tv-1"]
        assert seeded.update_campaign(Campaign(id="c-x", name="Ghost", start=day(1), end=day(2))) is None
