"""Foundational TypedDicts for dataclass to_dict() returns and the snapshot wire shape."""

from __future__ import annotations

from typing import Literal, NewType, TypedDict

ISOTimestamp = NewType("ISOTimestamp", str)

Stage = Literal["entry", "compose", "templates"]
StatusKind = Literal["success", "error"]


class ProjectConfig(TypedDict, total=False):
    """Shape of .teamtwin/config.json."""

    version: int
    port: int
    export_dir: str
    log_level: str


class CapabilityDict(TypedDict):
    id: str
    code: str
    description: str


# Wire keys are camelCase so files written by earlier tooling load unchanged.
StaffMemberDict = TypedDict(
    "StaffMemberDict",
    {"id": str, "code": str, "name": str, "capacity": float, "capabilityIds": list[str]},
)

SnapshotDict = TypedDict(
    "SnapshotDict",
    {
        "teamCode": str,
        "teamName": str,
        "capabilities": list[CapabilityDict],
        "staffMembers": list[StaffMemberDict],
        "savedAt": ISOTimestamp,
    },
)


class StatusDict(TypedDict):
    kind: StatusKind
    text: str
