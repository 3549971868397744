"""Wizard controller — owns the authoritative state and the stage transitions.

Stages run entry -> compose -> templates, with templates -> compose as "back"
and templates -> entry as "finish".
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from teamtwin.composition import TeamComposition
from teamtwin.store import SnapshotStore
from teamtwin.templates import WorkflowTemplateSet
from teamtwin.types.core import Stage
from teamtwin.types.workflow import WizardStateDict
from teamtwin.validation import sanitize_entry_field

logger = logging.getLogger(__name__)


class WizardController:
    """Single owner of the team id/name, current stage, and both editors."""

    def __init__(self, store: SnapshotStore | None = None, *, on_close: Callable[[], None] | None = None) -> None:
        self.store = store
        self.on_close = on_close
        self.team_id = ""
        self.team_name = ""
        self.stage: Stage = "entry"
        self.composition = TeamComposition(store)
        self.templates = WorkflowTemplateSet(lambda: self.composition.capabilities)

    def submit_entry(self, team_id: str, team_name: str) -> bool:
        """Accept the entry form. Returns False, changing nothing, if either field is blank."""
        cleaned_id, id_err = sanitize_entry_field(team_id, "team id")
        cleaned_name, name_err = sanitize_entry_field(team_name, "team name")
        if id_err or name_err:
            return False
        self.team_id = cleaned_id
        self.team_name = cleaned_name
        self.composition.team_code = cleaned_id
        self.composition.team_name = cleaned_name
        self.stage = "compose"
        restored = self.composition.restore()
        logger.info(
            "Entered team setup for %s (snapshot %s)",
            cleaned_id,
            "restored" if restored else "not found",
            extra={"team": cleaned_id, "op": "submit_entry"},
        )
        return True

    def advance_to_templates(self) -> None:
        self.stage = "templates"

    def return_to_compose(self) -> None:
        self.stage = "compose"

    def finish_templates(self) -> None:
        """Close the host (if a callback was given) and start over at the entry stage.

        The entered team id and name stay populated.
        """
        if self.on_close is not None:
            self.on_close()
        self.templates.clear()
        self.stage = "entry"
        logger.info("Finished team setup for %s", self.team_id, extra={"team": self.team_id, "op": "finish"})

    def to_dict(self) -> WizardStateDict:
        return {
            "stage": self.stage,
            "team_id": self.team_id,
            "team_name": self.team_name,
            "composition": self.composition.to_dict(),
            "templates": self.templates.to_dict(),
        }
