"""Shared pytest fixtures for teamtwin tests."""

from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from teamtwin.composition import TeamComposition
from teamtwin.core import DB_FILENAME, TEAMTWIN_DIR_NAME, write_config
from teamtwin.store import InMemorySnapshotStore, SqliteSnapshotStore
from teamtwin.templates import WorkflowTemplateSet
from teamtwin.wizard import WizardController


@pytest.fixture
def store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> Generator[SqliteSnapshotStore, None, None]:
    """Fresh SQLite-backed store for each test."""
    s = SqliteSnapshotStore(tmp_path / "teamtwin.db")
    s.initialize()
    yield s
    s.close()


@pytest.fixture
def composition(store: InMemorySnapshotStore) -> TeamComposition:
    """Seeded composition for team ``T1`` that autosaves into ``store``."""
    return TeamComposition(store, team_code="T1", team_name="Team One")


@pytest.fixture
def populated(composition: TeamComposition) -> TeamComposition:
    """Composition with capabilities C1..C3 and staff S1..S2.

    S1 holds C1 and C2; S2 holds C2.
    """
    c1 = composition.capabilities[0]
    c2 = composition.add_capability()
    composition.add_capability()
    s1 = composition.staff_members[0]
    s2 = composition.add_staff_member()
    composition.toggle_staff_capability(s1.id, c1.id)
    composition.toggle_staff_capability(s1.id, c2.id)
    composition.toggle_staff_capability(s2.id, c2.id)
    return composition


@pytest.fixture
def template_set(composition: TeamComposition) -> WorkflowTemplateSet:
    return WorkflowTemplateSet(lambda: composition.capabilities)


@pytest.fixture
def wizard(store: InMemorySnapshotStore) -> WizardController:
    return WizardController(store)


@pytest.fixture
def teamtwin_project(tmp_path: Path) -> Path:
    """A tmp directory set up as a teamtwin project (.teamtwin/ with config + store).

    Returns the project root (parent of .teamtwin/).
    """
    teamtwin_dir = tmp_path / TEAMTWIN_DIR_NAME
    teamtwin_dir.mkdir()
    write_config(teamtwin_dir, {"version": 1, "port": 8377, "export_dir": "."})
    with SqliteSnapshotStore(teamtwin_dir / DB_FILENAME) as s:
        s.initialize()
    return tmp_path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def snapshot_payload() -> dict[str, object]:
    """A well-formed exported snapshot document."""
    return {
        "teamCode": "T1",
        "teamName": "Team One",
        "capabilities": [
            {"id": "cap-a", "code": "C1", "description": "Backend"},
            {"id": "cap-b", "code": "C2", "description": "Frontend"},
        ],
        "staffMembers": [
            {"id": "st-1", "code": "S1", "name": "Ada", "capacity": 1.25, "capabilityIds": ["cap-a", "cap-b"]},
            {"id": "st-2", "code": "S2", "name": "Linus", "capacity": 0.75, "capabilityIds": ["cap-b"]},
        ],
        "savedAt": "2026-01-01T00:00:00+00:00",
    }


@pytest.fixture
def snapshot_text(snapshot_payload: dict[str, object]) -> str:
    return json.dumps(snapshot_payload)
