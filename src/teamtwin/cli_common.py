"""Shared CLI helpers.

Provides ``get_teamtwin_dir()`` and ``get_store()`` so that ``cli.py`` and the
dashboard entry point discover the project the same way.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from teamtwin.core import DB_FILENAME, TEAMTWIN_DIR_NAME, find_teamtwin_root, read_config
from teamtwin.logging import DEFAULT_LOG_LEVEL, setup_logging
from teamtwin.store import SqliteSnapshotStore


def get_teamtwin_dir() -> Path:
    """Discover .teamtwin/ or exit with a hint."""
    try:
        teamtwin_dir = find_teamtwin_root()
    except FileNotFoundError:
        click.echo(f"No {TEAMTWIN_DIR_NAME}/ found. Run 'teamtwin init' first.", err=True)
        sys.exit(1)
    setup_logging(teamtwin_dir, level=read_config(teamtwin_dir).get("log_level", DEFAULT_LOG_LEVEL))
    return teamtwin_dir


def get_store(*, check_same_thread: bool = True) -> SqliteSnapshotStore:
    """Discover .teamtwin/ and return an initialized snapshot store."""
    teamtwin_dir = get_teamtwin_dir()
    store = SqliteSnapshotStore(teamtwin_dir / DB_FILENAME, check_same_thread=check_same_thread)
    store.initialize()
    return store
