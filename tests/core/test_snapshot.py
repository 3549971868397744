"""Tests for snapshot normalization — tolerant loading of saved and imported setups."""

from __future__ import annotations

import json
import math

import pytest

from teamtwin.core import Capability, StaffMember
from teamtwin.snapshot import LoadResult, Snapshot, normalize_snapshot, parse_snapshot_text


class TestRejection:
    @pytest.mark.parametrize("raw", [None, [], "text", 3, True])
    def test_non_object_is_invalid(self, raw: object) -> None:
        result = normalize_snapshot(raw)
        assert result.ok is False
        assert result.snapshot is None
        assert "object" in result.reason

    def test_capabilities_not_an_array(self) -> None:
        result = normalize_snapshot({"capabilities": "not-an-array", "staffMembers": []})
        assert not result.ok
        assert "capabilities" in result.reason

    def test_staff_members_missing(self) -> None:
        result = normalize_snapshot({"capabilities": []})
        assert not result.ok
        assert "staffMembers" in result.reason

    def test_parse_error_is_invalid_not_raised(self) -> None:
        result = parse_snapshot_text("{broken")
        assert not result.ok
        assert result.reason.startswith("invalid JSON")

    def test_empty_text_is_invalid(self) -> None:
        assert not parse_snapshot_text("").ok

    def test_deeply_nested_json_is_invalid(self) -> None:
        result = parse_snapshot_text("[" * 100_000)
        assert not result.ok
        assert result.reason.startswith("invalid JSON")


class TestCapabilityDefaults:
    def test_keeps_well_formed_fields(self, snapshot_payload: dict[str, object]) -> None:
        result = normalize_snapshot(snapshot_payload)
        assert result.ok and result.snapshot is not None
        assert [c.id for c in result.snapshot.capabilities] == ["cap-a", "cap-b"]
        assert result.snapshot.capabilities[0].description == "Backend"

    def test_missing_or_blank_id_gets_fresh_one(self) -> None:
        raw = {"capabilities": [{"code": "C1"}, {"id": "   ", "code": "C2"}, {"id": 7}], "staffMembers": []}
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        ids = [c.id for c in snap.capabilities]
        assert all(isinstance(i, str) and i.strip() for i in ids)
        assert len(set(ids)) == 3

    def test_duplicate_id_is_replaced(self) -> None:
        raw = {"capabilities": [{"id": "x", "code": "C1"}, {"id": "x", "code": "C2"}], "staffMembers": []}
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        assert snap.capabilities[0].id == "x"
        assert snap.capabilities[1].id != "x"

    def test_non_string_text_fields_become_empty(self) -> None:
        raw = {"capabilities": [{"id": "a", "code": 12, "description": None}], "staffMembers": []}
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        assert snap.capabilities[0] == Capability(id="a", code="", description="")

    def test_non_object_entries_skipped(self) -> None:
        raw = {"capabilities": ["junk", {"id": "a"}], "staffMembers": [42]}
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        assert [c.id for c in snap.capabilities] == ["a"]
        assert snap.staff_members == ()


class TestStaffDefaults:
    def test_unknown_capability_ids_dropped(self) -> None:
        raw = {
            "capabilities": [{"id": "X", "code": "C1"}],
            "staffMembers": [{"id": "s", "capabilityIds": ["X", "Y"]}],
        }
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        assert snap.staff_members[0].capability_ids == ["X"]

    def test_capability_ids_not_a_list(self) -> None:
        raw = {"capabilities": [{"id": "X"}], "staffMembers": [{"id": "s", "capabilityIds": "X"}]}
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        assert snap.staff_members[0].capability_ids == []

    def test_duplicate_references_collapsed(self) -> None:
        raw = {"capabilities": [{"id": "X"}], "staffMembers": [{"id": "s", "capabilityIds": ["X", "X", 5]}]}
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        assert snap.staff_members[0].capability_ids == ["X"]

    @pytest.mark.parametrize(
        ("capacity", "expected"),
        [
            (None, 1.0),
            ("1.2", 1.0),
            (True, 1.0),
            (math.nan, 1.0),
            (math.inf, 1.0),
            (0.1, 0.5),
            (3, 1.5),
            (1.25, 1.25),
        ],
    )
    def test_capacity_defaults_and_clamps(self, capacity: object, expected: float) -> None:
        raw = {"capabilities": [], "staffMembers": [{"id": "s", "capacity": capacity}]}
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        assert snap.staff_members[0].capacity == expected

    @pytest.mark.parametrize(("digits", "expected"), [("1" + "0" * 400, 1.5), ("-1" + "0" * 400, 0.5)])
    def test_capacity_beyond_float_range_is_clamped(self, digits: str, expected: float) -> None:
        text = '{"capabilities": [], "staffMembers": [{"id": "s", "capacity": ' + digits + "}]}"
        result = parse_snapshot_text(text)
        assert result.ok
        assert result.snapshot is not None
        assert result.snapshot.staff_members[0].capacity == expected

    def test_text_fields_default(self) -> None:
        raw = {"capabilities": [], "staffMembers": [{"id": "s", "code": ["S1"], "name": 3}]}
        snap = normalize_snapshot(raw).snapshot
        assert snap is not None
        assert snap.staff_members[0] == StaffMember(id="s", code="", name="", capacity=1.0, capability_ids=[])


class TestSerialization:
    def test_wire_shape(self) -> None:
        snap = Snapshot(
            team_code="T1",
            team_name="Team",
            capabilities=(Capability(id="a", code="C1", description="Backend"),),
            staff_members=(StaffMember(id="s", code="S1", name="Ada", capability_ids=["a"]),),
            saved_at="2026-01-01T00:00:00+00:00",
        )
        data = json.loads(snap.to_json())
        assert set(data) == {"teamCode", "teamName", "capabilities", "staffMembers", "savedAt"}
        assert data["staffMembers"][0]["capabilityIds"] == ["a"]
        assert data["savedAt"] == "2026-01-01T00:00:00+00:00"

    def test_missing_saved_at_is_stamped(self) -> None:
        snap = Snapshot(team_code="", team_name="", capabilities=(), staff_members=())
        assert snap.to_dict()["savedAt"]

    def test_export_then_load_is_idempotent(self, snapshot_payload: dict[str, object]) -> None:
        first = normalize_snapshot(snapshot_payload).snapshot
        assert first is not None
        second = parse_snapshot_text(first.to_json()).snapshot
        assert second is not None
        assert second.capabilities == first.capabilities
        assert second.staff_members == first.staff_members
        assert (second.team_code, second.team_name) == ("T1", "Team One")

    def test_load_result_constructors(self) -> None:
        assert LoadResult.invalid("nope") == LoadResult(ok=False, snapshot=None, reason="nope")
        snap = Snapshot(team_code="", team_name="", capabilities=(), staff_members=())
        assert LoadResult.valid(snap).snapshot is snap
