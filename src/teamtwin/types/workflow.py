"""TypedDicts for templates.py and wizard.py return types."""

from __future__ import annotations

from typing import Literal, TypedDict

from teamtwin.types.core import CapabilityDict, Stage, StaffMemberDict, StatusDict

TemplateKey = Literal["enhancement", "defect", "incident"]
TaskField = Literal["task", "estimate", "capabilityId"]
MoveDirection = Literal["up", "down"]

TemplateTaskDict = TypedDict(
    "TemplateTaskDict",
    {"id": str, "seqNumber": int, "task": str, "estimate": str, "capabilityId": str},
)


class TemplateInfo(TypedDict):
    """One template as returned by ``WorkflowTemplateSet.to_dict()``."""

    key: TemplateKey
    title: str
    tasks: list[TemplateTaskDict]


class TemplateSetDict(TypedDict):
    capability_selectable: bool
    templates: list[TemplateInfo]


class CompositionDict(TypedDict):
    team_code: str
    team_name: str
    capabilities: list[CapabilityDict]
    staff_members: list[StaffMemberDict]
    status: StatusDict | None


class WizardStateDict(TypedDict):
    """Full wizard state exposed to outer surfaces."""

    stage: Stage
    team_id: str
    team_name: str
    composition: CompositionDict
    templates: TemplateSetDict
