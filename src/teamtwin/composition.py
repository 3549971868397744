"""Team composition editor — capabilities, staff members, and their links.

Keeps the two collections referentially consistent (a staff member only ever
references existing capabilities), derives the next ``C<n>``/``S<n>`` codes,
autosaves a snapshot after every mutation, and handles JSON export/import.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from dataclasses import dataclass, replace
from pathlib import Path

from teamtwin.core import (
    CAPACITY_DEFAULT,
    Capability,
    StaffMember,
    _now_iso,
    generate_id,
    write_atomic,
)
from teamtwin.snapshot import Snapshot, parse_snapshot_text
from teamtwin.store import SnapshotStore, snapshot_key
from teamtwin.types.core import StatusDict, StatusKind
from teamtwin.types.workflow import CompositionDict
from teamtwin.validation import parse_capacity_percent, sanitize_export_name

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")
EXPORT_SUFFIX = "_Team_Setup.json"


def code_number(code: str) -> int | None:
    """Digits of *code* read as one integer ("C1a2" -> 12), or None if it has none."""
    digits = _NON_DIGITS.sub("", code)
    return int(digits) if digits else None


def next_code(prefix: str, codes: list[str]) -> str:
    numbers = [n for n in (code_number(c) for c in codes) if n is not None]
    return f"{prefix}{max(numbers) + 1 if numbers else 1}"


def export_filename(team_code: str) -> str:
    return f"{sanitize_export_name(team_code)}{EXPORT_SUFFIX}"


@dataclass(frozen=True)
class StatusMessage:
    """Transient user-facing outcome of an export or import."""

    kind: StatusKind
    text: str

    def to_dict(self) -> StatusDict:
        return {"kind": self.kind, "text": self.text}


class TeamComposition:
    """Editable capabilities and staff for one team.

    Every mutating method autosaves to *store* while ``team_code`` is set.
    Unknown capability or staff ids raise ``KeyError``.
    """

    def __init__(
        self,
        store: SnapshotStore | None = None,
        *,
        team_code: str = "",
        team_name: str = "",
        seed: bool = True,
    ) -> None:
        self.store = store
        self.team_code = team_code
        self.team_name = team_name
        self.capabilities: list[Capability] = []
        self.staff_members: list[StaffMember] = []
        self.status: StatusMessage | None = None
        if seed:
            self.capabilities.append(Capability(id=generate_id(), code="C1", description="Capability 1"))
            self.staff_members.append(StaffMember(id=generate_id(), code="S1", name="Staff 1"))

    # -- lookups -------------------------------------------------------------

    def get_capability(self, capability_id: str) -> Capability:
        for cap in self.capabilities:
            if cap.id == capability_id:
                return cap
        raise KeyError(capability_id)

    def get_staff_member(self, staff_id: str) -> StaffMember:
        for member in self.staff_members:
            if member.id == staff_id:
                return member
        raise KeyError(staff_id)

    def has_capability(self, capability_id: str) -> bool:
        return any(cap.id == capability_id for cap in self.capabilities)

    def next_capability_code(self) -> str:
        return next_code("C", [c.code for c in self.capabilities])

    def next_staff_code(self) -> str:
        return next_code("S", [m.code for m in self.staff_members])

    # -- capabilities --------------------------------------------------------

    def add_capability(self) -> Capability:
        code = self.next_capability_code()
        cap = Capability(
            id=generate_id(c.id for c in self.capabilities),
            code=code,
            description=f"Capability {code_number(code)}",
        )
        self.capabilities.append(cap)
        self._autosave()
        return cap

    def update_capability(self, capability_id: str, *, code: str | None = None, description: str | None = None) -> Capability:
        cap = self.get_capability(capability_id)
        if code is not None:
            cap.code = code
        if description is not None:
            cap.description = description
        self._autosave()
        return cap

    def delete_capability(self, capability_id: str) -> None:
        """Remove a capability and unassign it from every staff member.

        Template tasks referencing it are left alone.
        """
        self.get_capability(capability_id)
        self.capabilities = [c for c in self.capabilities if c.id != capability_id]
        for member in self.staff_members:
            member.capability_ids = [cid for cid in member.capability_ids if cid != capability_id]
        self._autosave()

    # -- staff ---------------------------------------------------------------

    def add_staff_member(self) -> StaffMember:
        code = self.next_staff_code()
        member = StaffMember(
            id=generate_id(m.id for m in self.staff_members),
            code=code,
            name=f"Staff {code_number(code)}",
            capacity=CAPACITY_DEFAULT,
        )
        self.staff_members.append(member)
        self._autosave()
        return member

    def update_staff_member(self, staff_id: str, *, code: str | None = None, name: str | None = None) -> StaffMember:
        member = self.get_staff_member(staff_id)
        if code is not None:
            member.code = code
        if name is not None:
            member.name = name
        self._autosave()
        return member

    def delete_staff_member(self, staff_id: str) -> None:
        self.get_staff_member(staff_id)
        self.staff_members = [m for m in self.staff_members if m.id != staff_id]
        self._autosave()

    def toggle_staff_capability(self, staff_id: str, capability_id: str) -> bool:
        """Flip assignment of *capability_id* on a staff member. Returns the new membership."""
        member = self.get_staff_member(staff_id)
        if capability_id in member.capability_ids:
            member.capability_ids = [cid for cid in member.capability_ids if cid != capability_id]
            assigned = False
        else:
            self.get_capability(capability_id)
            member.capability_ids = [*member.capability_ids, capability_id]
            assigned = True
        self._autosave()
        return assigned

    def set_staff_capacity(self, staff_id: str, raw_percent: str) -> float:
        member = self.get_staff_member(staff_id)
        member.capacity = parse_capacity_percent(raw_percent)
        self._autosave()
        return member.capacity

    # -- snapshots -----------------------------------------------------------

    def snapshot(self) -> Snapshot:
        return Snapshot(
            team_code=self.team_code,
            team_name=self.team_name,
            capabilities=tuple(replace(c) for c in self.capabilities),
            staff_members=tuple(replace(m, capability_ids=list(m.capability_ids)) for m in self.staff_members),
            saved_at=_now_iso(),
        )

    def load_snapshot(self, snapshot: Snapshot) -> None:
        """Replace both collections wholesale. Team code and name are kept."""
        self.capabilities = [replace(c) for c in snapshot.capabilities]
        self.staff_members = [replace(m, capability_ids=list(m.capability_ids)) for m in snapshot.staff_members]

    def _autosave(self) -> None:
        if not self.team_code or self.store is None:
            return
        try:
            self.store.put(snapshot_key(self.team_code), self.snapshot().to_json())
        except (sqlite3.Error, OSError) as exc:
            logger.warning(
                "Autosave failed for team %s",
                self.team_code,
                extra={"team": self.team_code, "op": "autosave", "error": str(exc)},
            )

    def restore(self) -> bool:
        """Load the stored snapshot for ``team_code`` if a usable one exists.

        Missing, unreadable, or malformed snapshots are logged and ignored.
        """
        if not self.team_code or self.store is None:
            return False
        key = snapshot_key(self.team_code)
        try:
            text = self.store.get(key)
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Failed to read snapshot %s", key, extra={"team": self.team_code, "op": "restore", "error": str(exc)})
            return False
        if text is None:
            return False
        result = parse_snapshot_text(text)
        if not result.ok or result.snapshot is None:
            logger.warning(
                "Ignoring stored snapshot %s: %s",
                key,
                result.reason,
                extra={"team": self.team_code, "op": "restore", "error": result.reason},
            )
            return False
        self.load_snapshot(result.snapshot)
        logger.info("Restored snapshot %s", key, extra={"team": self.team_code, "op": "restore"})
        return True

    # -- export / import -----------------------------------------------------

    def export_snapshot(self) -> tuple[str, str]:
        """Return ``(filename, json_text)`` for a download of the current state."""
        filename = export_filename(self.team_code)
        text = self.snapshot().to_json(indent=2) + "\n"
        self.status = StatusMessage("success", f"Exported {filename}")
        return filename, text

    def export_to(self, directory: Path) -> Path | None:
        """Write the export file into *directory*. Returns its path, or None on failure."""
        filename, text = self.export_snapshot()
        path = directory / filename
        try:
            write_atomic(path, text)
        except OSError as exc:
            logger.error("Export failed: %s", path, exc_info=True, extra={"team": self.team_code, "op": "export", "error": str(exc)})
            self.status = StatusMessage("error", "Failed to export team setup.")
            return None
        logger.info("Exported %s", path, extra={"team": self.team_code, "op": "export"})
        return path

    def import_text(self, text: str) -> bool:
        """Replace state with the snapshot in *text*. Leaves state untouched on failure."""
        result = parse_snapshot_text(text)
        if not result.ok or result.snapshot is None:
            logger.warning("Import rejected: %s", result.reason, extra={"team": self.team_code, "op": "import", "error": result.reason})
            self.status = StatusMessage("error", f"Import failed: {result.reason}")
            return False
        self.load_snapshot(result.snapshot)
        self._autosave()
        self.status = StatusMessage(
            "success",
            f"Imported {len(self.capabilities)} capabilities and {len(self.staff_members)} staff members.",
        )
        return True

    def import_file(self, path: Path) -> bool:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Import read failed: %s", path, extra={"team": self.team_code, "op": "import", "error": str(exc)})
            self.status = StatusMessage("error", f"Import failed: could not read {path.name}")
            return False
        return self.import_text(text)

    def clear_status(self) -> StatusMessage | None:
        """Drop and return the pending status message."""
        status, self.status = self.status, None
        return status

    def to_dict(self) -> CompositionDict:
        return {
            "team_code": self.team_code,
            "team_name": self.team_name,
            "capabilities": [c.to_dict() for c in self.capabilities],
            "staff_members": [m.to_dict() for m in self.staff_members],
            "status": self.status.to_dict() if self.status else None,
        }
