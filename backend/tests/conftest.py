"""
Shared fixtures: an in-memory store, services on top of it, and an
authenticated TestClient with the store injected through dependency_overrides.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from signage import config
from signage.dependencies import get_store
from signage.main import app
from signage.models.advertisement import AdKind
from signage.schemas.schemas import AdSchema
from signage.services.assignment_service import AssignmentService
from signage.services.campaign_service import CampaignService
from signage.services.tv_service import TVService
from signage.storage.memory_store import InMemoryStore

DAY0 = datetime(2025, 3, 1, tzinfo=timezone.utc)


def day(n: float) -> datetime:
    return DAY0 + timedelta(days=n)


def image_ad(name: str, seconds: int = 5, start=None, end=None) -> AdSchema:
    return AdSchema(
        name=name,
        kind=AdKind.IMAGE,
        media_url=f"https://cdn.example.com/{name}.png",
        display_seconds=seconds,
        start=start,
        end=end,
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def tvs(store):
    return TVService(store)


@pytest.fixture
def campaigns(store):
    return CampaignService(store)


@pytest.fixture
def assignments(store):
    return AssignmentService(store)


@pytest.fixture
def anon_client(store):
    app.dependency_overrides[get_store] = lambda: store
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def client(anon_client):
    response = anon_client.post(
        "/auth/login",
        json={"username": config.ADMIN_USERNAME, "password": config.ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return anon_client
