"""Route handlers for the entry form, stage transitions, and team composition."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi import APIRouter

from starlette.requests import Request

from teamtwin.dashboard_routes.common import (
    _error_response,
    _not_found,
    _optional_str,
    _parse_json_body,
    _state_response,
)
from teamtwin.wizard import WizardController

logger = logging.getLogger(__name__)


def create_router() -> APIRouter:
    """Build the APIRouter for wizard state and composition endpoints.

    NOTE: All handlers are async so every mutation runs on the event loop
    thread; the wizard is a single in-memory object with no locking.
    """
    from fastapi import APIRouter, Depends
    from fastapi.responses import JSONResponse, Response

    from teamtwin.dashboard import _get_wizard

    router = APIRouter()

    # -- wizard state & stages -------------------------------------------------

    @router.get("/state")
    async def api_state(wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        return _state_response(wizard)

    @router.post("/entry")
    async def api_entry(request: Request, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        body = await _parse_json_body(request)
        if isinstance(body, JSONResponse):
            return body
        team_id = body.get("team_id", "")
        team_name = body.get("team_name", "")
        if not isinstance(team_id, str) or not isinstance(team_name, str) or not wizard.submit_entry(team_id, team_name):
            return _error_response("team_id and team_name are required", "VALIDATION_ERROR", 400)
        return _state_response(wizard)

    @router.post("/stage/templates")
    async def api_to_templates(wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        wizard.advance_to_templates()
        return _state_response(wizard)

    @router.post("/stage/compose")
    async def api_to_compose(wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        wizard.return_to_compose()
        return _state_response(wizard)

    @router.post("/finish")
    async def api_finish(wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        wizard.finish_templates()
        return _state_response(wizard)

    # -- capabilities ----------------------------------------------------------

    @router.post("/capabilities")
    async def api_add_capability(wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        cap = wizard.composition.add_capability()
        return _state_response(wizard, status_code=201, created=cap.to_dict())

    @router.patch("/capabilities/{capability_id}")
    async def api_update_capability(
        capability_id: str, request: Request, wizard: WizardController = Depends(_get_wizard)
    ) -> JSONResponse:
        body = await _parse_json_body(request)
        if isinstance(body, JSONResponse):
            return body
        code = _optional_str(body, "code")
        if isinstance(code, JSONResponse):
            return code
        description = _optional_str(body, "description")
        if isinstance(description, JSONResponse):
            return description
        try:
            wizard.composition.update_capability(capability_id, code=code, description=description)
        except KeyError:
            return _not_found("Capability", capability_id)
        return _state_response(wizard)

    @router.delete("/capabilities/{capability_id}")
    async def api_delete_capability(capability_id: str, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        try:
            wizard.composition.delete_capability(capability_id)
        except KeyError:
            return _not_found("Capability", capability_id)
        return _state_response(wizard)

    # -- staff -----------------------------------------------------------------

    @router.post("/staff")
    async def api_add_staff(wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        member = wizard.composition.add_staff_member()
        return _state_response(wizard, status_code=201, created=member.to_dict())

    @router.patch("/staff/{staff_id}")
    async def api_update_staff(staff_id: str, request: Request, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        body = await _parse_json_body(request)
        if isinstance(body, JSONResponse):
            return body
        code = _optional_str(body, "code")
        if isinstance(code, JSONResponse):
            return code
        name = _optional_str(body, "name")
        if isinstance(name, JSONResponse):
            return name
        capacity: Any = body.get("capacity")
        if capacity is not None and not isinstance(capacity, str | int | float):
            return _error_response("capacity must be a percentage", "VALIDATION_ERROR", 400, {"field": "capacity"})
        try:
            wizard.composition.update_staff_member(staff_id, code=code, name=name)
            if capacity is not None:
                wizard.composition.set_staff_capacity(staff_id, str(capacity))
        except KeyError:
            return _not_found("Staff member", staff_id)
        return _state_response(wizard)

    @router.delete("/staff/{staff_id}")
    async def api_delete_staff(staff_id: str, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        try:
            wizard.composition.delete_staff_member(staff_id)
        except KeyError:
            return _not_found("Staff member", staff_id)
        return _state_response(wizard)

    @router.post("/staff/{staff_id}/capabilities/{capability_id}")
    async def api_toggle_staff_capability(
        staff_id: str, capability_id: str, wizard: WizardController = Depends(_get_wizard)
    ) -> JSONResponse:
        try:
            assigned = wizard.composition.toggle_staff_capability(staff_id, capability_id)
        except KeyError as exc:
            missing = str(exc.args[0]) if exc.args else staff_id
            kind = "Staff member" if missing == staff_id else "Capability"
            return _not_found(kind, missing)
        return _state_response(wizard, assigned=assigned)

    # -- export / import -------------------------------------------------------

    @router.get("/export")
    async def api_export(wizard: WizardController = Depends(_get_wizard)) -> Response:
        filename, text = wizard.composition.export_snapshot()
        wizard.composition.clear_status()
        return Response(
            content=text,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @router.post("/import")
    async def api_import(request: Request, wizard: WizardController = Depends(_get_wizard)) -> JSONResponse:
        raw = await request.body()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            text = ""
        if not wizard.composition.import_text(text):
            status = wizard.composition.clear_status()
            return _error_response(status.text if status else "Import failed", "IMPORT_FAILED", 400)
        return _state_response(wizard)

    return router
