"""Route handlers for the workflow template editor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import APIRouter
    from fastapi.responses import JSONResponse

from starlette.requests import Request

from teamtwin.dashboard_routes.common import _error_response, _not_found, _parse_json_body, _state_response
from teamtwin.templates import TEMPLATE_DEFINITIONS
from teamtwin.wizard import WizardController

logger = logging.getLogger(__name__)

_TEMPLATE_KEYS = frozenset(key for key, _ in TEMPLATE_DEFINITIONS)
_TASK_FIELDS = ("task", "estimate", "capabilityId")


def _unknown_template(key: str) -> JSONResponse | None:
    if key in _TEMPLATE_KEYS:
        return None
    return _error_response(
        f"Unknown template: {key}",
        "NOT_FOUND",
        404,
        {"template": key, "valid": sorted(_TEMPLATE_KEYS)},
    )


def create_router() -> APIRouter:
    """Build the APIRouter for workflow template endpoints."""
    from fastapi import APIRouter, Depends
    from fastapi.responses import JSONResponse

    from teamtwin.dashboard import _get_wizard

    router = APIRouter()

    @router.get("/templates")
    async def api_templates(wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        return JSONResponse(wizard.templates.to_dict())

    @router.post("/templates/{key}/tasks")
    async def api_add_task(key: str, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        if (err := _unknown_template(key)) is not None:
            return err
        task = wizard.templates.add_task(key)
        return _state_response(wizard, status_code=201, created=task.to_dict())

    @router.patch("/templates/{key}/tasks/{task_id}")
    async def api_edit_task(key: str, task_id: str, request: Request, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        if (err := _unknown_template(key)) is not None:
            return err
        body = await _parse_json_body(request)
        if isinstance(body, JSONResponse):
            return body
        updates = {f: body[f] for f in _TASK_FIELDS if f in body}
        if not updates:
            return _error_response(
                f"Body must contain at least one of: {', '.join(_TASK_FIELDS)}",
                "VALIDATION_ERROR",
                400,
            )
        for field, value in updates.items():
            if not isinstance(value, str):
                return _error_response(f"{field} must be a string", "VALIDATION_ERROR", 400, {"field": field})
        if "capabilityId" in updates and not wizard.templates.capability_selectable:
            return _error_response(
                "No capabilities defined; define one in team setup first",
                "VALIDATION_ERROR",
                400,
                {"field": "capabilityId"},
            )
        try:
            wizard.templates.get_task(key, task_id)
        except KeyError:
            return _not_found("Task", task_id)
        # Nothing is written until every check above has passed.
        for field, value in updates.items():
            wizard.templates.edit_task(key, task_id, field, value)
        return _state_response(wizard)

    @router.post("/templates/{key}/tasks/{task_id}/move")
    async def api_move_task(key: str, task_id: str, request: Request, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        if (err := _unknown_template(key)) is not None:
            return err
        body = await _parse_json_body(request)
        if isinstance(body, JSONResponse):
            return body
        direction = body.get("direction")
        if direction not in ("up", "down"):
            return _error_response("direction must be 'up' or 'down'", "VALIDATION_ERROR", 400, {"field": "direction"})
        try:
            wizard.templates.get_task(key, task_id)
        except KeyError:
            return _not_found("Task", task_id)
        moved = wizard.templates.move_task(key, task_id, direction)
        return _state_response(wizard, moved=moved)

    @router.delete("/templates/{key}/tasks/{task_id}")
    async def api_delete_task(key: str, task_id: str, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        if (err := _unknown_template(key)) is not None:
            return err
        try:
            wizard.templates.get_task(key, task_id)
        except KeyError:
            return _not_found("Task", task_id)
        wizard.templates.delete_task(key, task_id)
        return _state_response(wizard)

    return router
