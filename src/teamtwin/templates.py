"""Workflow task templates — one ordered checklist per issue type.

Three fixed templates (enhancement, defect, incident). Each holds
:class:`TemplateTask` rows that reference a capability. Sequence numbers are
derived: after every change they are rewritten as 10, 20, 30, ... in list order.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, get_args

from teamtwin.core import Capability, generate_id
from teamtwin.types.workflow import (
    MoveDirection,
    TaskField,
    TemplateKey,
    TemplateSetDict,
    TemplateTaskDict,
)

TEMPLATE_DEFINITIONS: Final[tuple[tuple[TemplateKey, str], ...]] = (
    ("enhancement", "Enhancement Template"),
    ("defect", "Defect Template"),
    ("incident", "Incident Template"),
)
SEQ_STEP = 10
_EDITABLE_FIELDS: frozenset[str] = frozenset(get_args(TaskField))
_DIRECTIONS: frozenset[str] = frozenset(get_args(MoveDirection))


@dataclass
class TemplateTask:
    id: str
    seq_number: int = 0
    task: str = ""
    estimate: str = ""
    capability_id: str = ""

    def to_dict(self) -> TemplateTaskDict:
        return {
            "id": self.id,
            "seqNumber": self.seq_number,
            "task": self.task,
            "estimate": self.estimate,
            "capabilityId": self.capability_id,
        }


def resequence(tasks: list[TemplateTask]) -> list[TemplateTask]:
    """Renumber *tasks* in list order and return them sorted by sequence number."""
    for index, task in enumerate(tasks):
        task.seq_number = (index + 1) * SEQ_STEP
    return sorted(tasks, key=lambda t: t.seq_number)


class WorkflowTemplateSet:
    """The three workflow templates for a team.

    *capabilities* is called whenever the current capability list is needed,
    so edits made in the composition editor are always visible here.
    Task references are not re-validated when capabilities change.
    """

    def __init__(self, capabilities: Callable[[], list[Capability]]) -> None:
        self._capabilities = capabilities
        self._tasks: dict[TemplateKey, list[TemplateTask]] = {key: [] for key, _ in TEMPLATE_DEFINITIONS}

    def _template(self, key: str) -> list[TemplateTask]:
        if key not in self._tasks:
            valid = ", ".join(k for k, _ in TEMPLATE_DEFINITIONS)
            msg = f"Unknown template '{key}'. Valid templates: {valid}"
            raise ValueError(msg)
        return self._tasks[key]  # type: ignore[index]

    def tasks(self, key: str) -> list[TemplateTask]:
        return list(self._template(key))

    def get_task(self, key: str, task_id: str) -> TemplateTask:
        for task in self._template(key):
            if task.id == task_id:
                return task
        raise KeyError(task_id)

    @property
    def capability_selectable(self) -> bool:
        return bool(self._capabilities())

    def capability_label(self, task: TemplateTask) -> str | None:
        """Display label for the task's capability, or None when it does not resolve."""
        for cap in self._capabilities():
            if cap.id == task.capability_id:
                return cap.description or cap.code or "Capability"
        return None

    def add_task(self, key: str) -> TemplateTask:
        current = self._template(key)
        if current:
            capability_id = current[-1].capability_id
        else:
            caps = self._capabilities()
            capability_id = caps[0].id if caps else ""
        task = TemplateTask(id=generate_id(t.id for t in current), capability_id=capability_id)
        self._tasks[key] = resequence([*current, task])  # type: ignore[index]
        return task

    def edit_task(self, key: str, task_id: str, field: str, value: str) -> None:
        """Set one editable field on a task. Unknown task ids change nothing but the numbering."""
        current = self._template(key)
        if field not in _EDITABLE_FIELDS:
            msg = f"Unknown task field '{field}'. Editable fields: {', '.join(sorted(_EDITABLE_FIELDS))}"
            raise ValueError(msg)
        if field == "capabilityId" and not self.capability_selectable:
            msg = "No capabilities defined; define one in team setup first"
            raise ValueError(msg)
        for task in current:
            if task.id != task_id:
                continue
            if field == "task":
                task.task = value
            elif field == "estimate":
                task.estimate = value
            else:
                task.capability_id = value
        self._tasks[key] = resequence(current)  # type: ignore[index]

    def move_task(self, key: str, task_id: str, direction: str) -> bool:
        """Swap a task with its neighbour. Returns False (no change) at a boundary."""
        if direction not in _DIRECTIONS:
            msg = f"Invalid direction '{direction}': must be 'up' or 'down'"
            raise ValueError(msg)
        tasks = list(self._template(key))
        index = next((i for i, t in enumerate(tasks) if t.id == task_id), -1)
        if index == -1:
            return False
        swap = index - 1 if direction == "up" else index + 1
        if swap < 0 or swap >= len(tasks):
            return False
        tasks[index], tasks[swap] = tasks[swap], tasks[index]
        self._tasks[key] = resequence(tasks)  # type: ignore[index]
        return True

    def delete_task(self, key: str, task_id: str) -> None:
        current = self._template(key)
        self._tasks[key] = resequence([t for t in current if t.id != task_id])  # type: ignore[index]

    def clear(self) -> None:
        for key in self._tasks:
            self._tasks[key] = []

    def to_dict(self) -> TemplateSetDict:
        return {
            "capability_selectable": self.capability_selectable,
            "templates": [
                {"key": key, "title": title, "tasks": [t.to_dict() for t in self._tasks[key]]}
                for key, title in TEMPLATE_DEFINITIONS
            ],
        }
