"""Core data model and project conventions for the team setup wizard.

Capabilities and staff members are plain mutable dataclasses; the editors in
``composition.py`` and ``templates.py`` own the reconciliation rules that keep
them consistent.

Convention-based discovery: each project has a `.teamtwin/` directory
containing `teamtwin.db` (SQLite snapshot store) and `config.json`.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from teamtwin.types.core import CapabilityDict, ISOTimestamp, ProjectConfig, StaffMemberDict

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Convention-based discovery
# ---------------------------------------------------------------------------

TEAMTWIN_DIR_NAME = ".teamtwin"
DB_FILENAME = "teamtwin.db"
CONFIG_FILENAME = "config.json"
DEFAULT_PORT = 8377


def find_teamtwin_root(start: Path | None = None) -> Path:
    """Walk up from start (default cwd) looking for .teamtwin/ directory.

    Returns the .teamtwin/ directory path (not the project root).
    """
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / TEAMTWIN_DIR_NAME
        if candidate.is_dir():
            return candidate
    msg = f"No {TEAMTWIN_DIR_NAME}/ directory found in {current} or any parent"
    raise FileNotFoundError(msg)


def read_config(teamtwin_dir: Path) -> ProjectConfig:
    """Read .teamtwin/config.json. Returns defaults if missing or corrupt."""
    defaults = ProjectConfig(version=1, port=DEFAULT_PORT, export_dir=".", log_level="INFO")
    config_path = teamtwin_dir / CONFIG_FILENAME
    if not config_path.exists():
        return defaults
    try:
        loaded = json.loads(config_path.read_text())
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read %s, using defaults: %s", config_path, exc)
        return defaults
    if not isinstance(loaded, dict):
        logger.warning("Ignoring %s: expected a JSON object", config_path)
        return defaults
    result: ProjectConfig = {**defaults, **loaded}  # type: ignore[typeddict-item]
    return result


def write_config(teamtwin_dir: Path, config: dict[str, Any] | ProjectConfig) -> None:
    """Write .teamtwin/config.json."""
    config_path = teamtwin_dir / CONFIG_FILENAME
    config_path.write_text(json.dumps(config, indent=2) + "\n")


def write_atomic(path: Path, content: str) -> None:
    """Write content to path atomically via temp file + os.replace()."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


def _now_iso() -> ISOTimestamp:
    return ISOTimestamp(datetime.now(UTC).isoformat())


# ---------------------------------------------------------------------------
# ID generation
# ---------------------------------------------------------------------------


def generate_id(existing: Iterable[str] = ()) -> str:
    """Return a fresh opaque id that does not appear in *existing*."""
    taken = set(existing)
    for _ in range(10):
        candidate = uuid.uuid4().hex[:8]
        if candidate not in taken:
            return candidate
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Capacity bounds
# ---------------------------------------------------------------------------

CAPACITY_MIN = 0.5
CAPACITY_MAX = 1.5
CAPACITY_DEFAULT = 1.0


def clamp_capacity(value: float) -> float:
    return min(CAPACITY_MAX, max(CAPACITY_MIN, value))


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass
class Capability:
    id: str
    code: str = ""
    description: str = ""

    def to_dict(self) -> CapabilityDict:
        return {"id": self.id, "code": self.code, "description": self.description}


@dataclass
class StaffMember:
    id: str
    code: str = ""
    name: str = ""
    capacity: float = CAPACITY_DEFAULT
    capability_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> StaffMemberDict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "capacity": self.capacity,
            "capabilityIds": list(self.capability_ids),
        }
