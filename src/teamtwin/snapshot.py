"""Snapshot serialization and tolerant loading.

A snapshot is the ``{teamCode, teamName, capabilities, staffMembers, savedAt}``
document used both for autosave and for explicit export/import. Loading never
raises: untrusted input is shape-checked field by field and either normalized
into a :class:`Snapshot` or rejected with a reason.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any

from teamtwin.core import (
    CAPACITY_DEFAULT,
    CAPACITY_MAX,
    CAPACITY_MIN,
    Capability,
    StaffMember,
    _now_iso,
    clamp_capacity,
    generate_id,
)
from teamtwin.types.core import SnapshotDict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Serialized team composition at a point in time."""

    team_code: str
    team_name: str
    capabilities: tuple[Capability, ...]
    staff_members: tuple[StaffMember, ...]
    saved_at: str = ""

    def to_dict(self) -> SnapshotDict:
        return {
            "teamCode": self.team_code,
            "teamName": self.team_name,
            "capabilities": [c.to_dict() for c in self.capabilities],
            "staffMembers": [s.to_dict() for s in self.staff_members],
            "savedAt": self.saved_at or _now_iso(),
        }

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)


@dataclass(frozen=True)
class LoadResult:
    """Tagged outcome of :func:`normalize_snapshot`: valid snapshot or a reason."""

    ok: bool
    snapshot: Snapshot | None = None
    reason: str = ""

    @classmethod
    def valid(cls, snapshot: Snapshot) -> LoadResult:
        return cls(ok=True, snapshot=snapshot)

    @classmethod
    def invalid(cls, reason: str) -> LoadResult:
        return cls(ok=False, reason=reason)


def _str_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _usable_id(value: Any, seen: set[str]) -> str:
    if isinstance(value, str) and value.strip() and value not in seen:
        return value
    return generate_id(seen)


def _coerce_capacity(value: Any) -> float:
    # bool is an int subclass; a JSON true is not a capacity
    if isinstance(value, bool) or not isinstance(value, int | float):
        return CAPACITY_DEFAULT
    try:
        number = float(value)
    except OverflowError:
        # integer beyond float range: clamp by sign
        return CAPACITY_MAX if value > 0 else CAPACITY_MIN
    if not math.isfinite(number):
        return CAPACITY_DEFAULT
    return clamp_capacity(number)


def normalize_snapshot(raw: Any) -> LoadResult:
    """Normalize an untrusted decoded JSON value into a Snapshot.

    Rejects anything that is not an object with list-typed ``capabilities``
    and ``staffMembers``. Everything below that is defaulted rather than
    rejected; staff capability references to unknown ids are dropped.
    """
    if not isinstance(raw, dict):
        return LoadResult.invalid("snapshot must be a JSON object")
    raw_caps = raw.get("capabilities")
    raw_staff = raw.get("staffMembers")
    if not isinstance(raw_caps, list):
        return LoadResult.invalid("'capabilities' must be an array")
    if not isinstance(raw_staff, list):
        return LoadResult.invalid("'staffMembers' must be an array")

    capabilities: list[Capability] = []
    cap_ids: set[str] = set()
    for entry in raw_caps:
        if not isinstance(entry, dict):
            logger.debug("Skipping non-object capability entry: %r", entry)
            continue
        cap_id = _usable_id(entry.get("id"), cap_ids)
        cap_ids.add(cap_id)
        capabilities.append(
            Capability(
                id=cap_id,
                code=_str_or_empty(entry.get("code")),
                description=_str_or_empty(entry.get("description")),
            )
        )

    staff_members: list[StaffMember] = []
    staff_ids: set[str] = set()
    for entry in raw_staff:
        if not isinstance(entry, dict):
            logger.debug("Skipping non-object staff entry: %r", entry)
            continue
        staff_id = _usable_id(entry.get("id"), staff_ids)
        staff_ids.add(staff_id)
        refs = entry.get("capabilityIds")
        capability_ids: list[str] = []
        if isinstance(refs, list):
            for ref in refs:
                if isinstance(ref, str) and ref in cap_ids and ref not in capability_ids:
                    capability_ids.append(ref)
        staff_members.append(
            StaffMember(
                id=staff_id,
                code=_str_or_empty(entry.get("code")),
                name=_str_or_empty(entry.get("name")),
                capacity=_coerce_capacity(entry.get("capacity")),
                capability_ids=capability_ids,
            )
        )

    return LoadResult.valid(
        Snapshot(
            team_code=_str_or_empty(raw.get("teamCode")),
            team_name=_str_or_empty(raw.get("teamName")),
            capabilities=tuple(capabilities),
            staff_members=tuple(staff_members),
            saved_at=_str_or_empty(raw.get("savedAt")),
        )
    )


def parse_snapshot_text(text: str) -> LoadResult:
    """Decode JSON *text* and normalize it. Parse errors become invalid results."""
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError) as exc:
        return LoadResult.invalid(f"invalid JSON: {exc}")
    except RecursionError:
        return LoadResult.invalid("invalid JSON: nested too deeply")
    return normalize_snapshot(raw)
