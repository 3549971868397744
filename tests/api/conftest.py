"""Fixtures for HTTP wizard API tests (FastAPI)."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

import teamtwin.dashboard as dash_module
from teamtwin.dashboard import create_app
from teamtwin.store import InMemorySnapshotStore
from teamtwin.wizard import WizardController


@pytest.fixture
def api_store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def api_wizard(api_store: InMemorySnapshotStore) -> WizardController:
    return WizardController(api_store)


@pytest.fixture
async def client(api_wizard: WizardController) -> AsyncIterator[AsyncClient]:
    """Test client backed by a fresh wizard session at the entry stage."""
    dash_module._wizard = api_wizard
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    dash_module._wizard = None


@pytest.fixture
async def team_client(client: AsyncClient) -> AsyncClient:
    """Client whose wizard has already passed the entry form for team T1."""
    resp = await client.post("/api/entry", json={"team_id": "T1", "team_name": "Team One"})
    assert resp.status_code == 200
    return client
