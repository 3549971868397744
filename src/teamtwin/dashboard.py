"""Web API for the team setup wizard.

Serves one in-memory :class:`WizardController` per process. A module-level
``_wizard`` is set at startup (or by test fixtures) and injected into the
route handlers via ``Depends(_get_wizard)``. Composition edits autosave to
the project's SQLite snapshot store.

Usage:
    teamtwin dashboard                    # Opens browser at localhost:8377
    teamtwin dashboard --port 9000        # Custom port
    teamtwin dashboard --no-browser       # Skip auto-open
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Any

from teamtwin.core import DB_FILENAME, DEFAULT_PORT, find_teamtwin_root, read_config
from teamtwin.logging import DEFAULT_LOG_LEVEL, setup_logging
from teamtwin.store import SqliteSnapshotStore
from teamtwin.wizard import WizardController

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level state, set by main() or test fixtures
# ---------------------------------------------------------------------------

_wizard: WizardController | None = None


def _get_wizard() -> WizardController:
    """Return the active wizard session."""
    from fastapi import HTTPException

    if _wizard is None:
        raise HTTPException(status_code=500, detail="Wizard not initialized")
    return _wizard


def create_app() -> Any:
    """Create the FastAPI application with all wizard endpoints under ``/api``."""
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse

    from teamtwin.dashboard_routes import team, templates

    app = FastAPI(title="Teamtwin Setup", docs_url=None, redoc_url=None)
    app.include_router(team.create_router(), prefix="/api")
    app.include_router(templates.create_router(), prefix="/api")

    @app.get("/api/health")
    async def api_health() -> JSONResponse:
        stage = _wizard.stage if _wizard is not None else None
        return JSONResponse({"status": "ok", "stage": stage})

    return app


def main(port: int = DEFAULT_PORT, *, no_browser: bool = False) -> None:
    """Start the wizard server for the project discovered from cwd."""
    import threading

    import uvicorn

    global _wizard

    teamtwin_dir = find_teamtwin_root()
    setup_logging(teamtwin_dir, level=read_config(teamtwin_dir).get("log_level", DEFAULT_LOG_LEVEL))
    store = SqliteSnapshotStore(teamtwin_dir / DB_FILENAME, check_same_thread=False)
    store.initialize()
    _wizard = WizardController(store)

    app = create_app()

    if not no_browser:
        threading.Timer(0.5, lambda: webbrowser.open(f"http://localhost:{port}/api/state")).start()

    print(f"Teamtwin Setup: http://localhost:{port}/api/state")
    try:
        uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")
    finally:
        store.close()
