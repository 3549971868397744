"""Shared helpers for dashboard route modules."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi.responses import JSONResponse
    from starlette.requests import Request

from teamtwin.wizard import WizardController

logger = logging.getLogger(__name__)


def _error_response(
    message: str,
    code: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Return a structured error response and log the error."""
    from fastapi.responses import JSONResponse

    logger.warning("API error [%s] %s: %s", status_code, code, message)
    return JSONResponse(
        {"error": {"message": message, "code": code, "details": details or {}}},
        status_code=status_code,
    )


async def _parse_json_body(request: Request) -> dict[str, Any] | JSONResponse:
    """Parse and validate a JSON object body, returning 400 on failure."""
    import json

    try:
        body = await request.json()
    except (json.JSONDecodeError, ValueError, UnicodeDecodeError):
        return _error_response("Invalid JSON body", "VALIDATION_ERROR", 400)
    if not isinstance(body, dict):
        return _error_response("Request body must be a JSON object", "VALIDATION_ERROR", 400)
    return body


def _optional_str(body: dict[str, Any], name: str) -> str | None | JSONResponse:
    """Return ``body[name]`` if present and a string, None if absent, 400 otherwise."""
    if name not in body:
        return None
    value = body[name]
    if not isinstance(value, str):
        return _error_response(f"{name} must be a string", "VALIDATION_ERROR", 400, {"field": name})
    return value


def _not_found(kind: str, item_id: str) -> JSONResponse:
    return _error_response(f"{kind} not found: {item_id}", "NOT_FOUND", 404, {"id": item_id})


def _state_response(wizard: WizardController, *, status_code: int = 200, **extra: Any) -> JSONResponse:
    """Full wizard state plus *extra* keys. The pending status message is delivered once."""
    from fastapi.responses import JSONResponse

    payload: dict[str, Any] = {**extra, "state": wizard.to_dict()}
    wizard.composition.clear_status()
    return JSONResponse(payload, status_code=status_code)
