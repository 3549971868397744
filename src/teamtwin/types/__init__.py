# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
# NEVER import from core.py, composition.py, or any editor module; that would create circular imports.
"""Typed return-value contracts for teamtwin editors and API layers."""

from __future__ import annotations

from teamtwin.types.core import (
    CapabilityDict,
    ISOTimestamp,
    ProjectConfig,
    SnapshotDict,
    Stage,
    StaffMemberDict,
    StatusDict,
    StatusKind,
)
from teamtwin.types.workflow import (
    CompositionDict,
    MoveDirection,
    TaskField,
    TemplateInfo,
    TemplateKey,
    TemplateSetDict,
    TemplateTaskDict,
    WizardStateDict,
)

__all__ = [
    "CapabilityDict",
    "CompositionDict",
    "ISOTimestamp",
    "MoveDirection",
    "ProjectConfig",
    "SnapshotDict",
    "Stage",
    "StaffMemberDict",
    "StatusDict",
    "StatusKind",
    "TaskField",
    "TemplateInfo",
    "TemplateKey",
    "TemplateSetDict",
    "TemplateTaskDict",
    "WizardStateDict",
]
