"""CLI for the teamtwin setup wizard.

Convention-based: discovers .teamtwin/ by walking up from cwd.

Usage:
    teamtwin init                                # Initialize .teamtwin/ in cwd
    teamtwin list                                # List saved team setups
    teamtwin show <team-id>                      # Show a saved team setup
    teamtwin export <team-id> -o exports/        # Write <team>_Team_Setup.json
    teamtwin import <team-id> setup.json         # Load a setup file into the store
    teamtwin dashboard                           # Run the wizard API at localhost:8377
"""

from __future__ import annotations

import json as json_mod
import sys
from pathlib import Path

import click

from teamtwin import __version__
from teamtwin.cli_common import get_store, get_teamtwin_dir
from teamtwin.composition import TeamComposition
from teamtwin.core import (
    DB_FILENAME,
    TEAMTWIN_DIR_NAME,
    read_config,
    write_config,
)
from teamtwin.snapshot import parse_snapshot_text
from teamtwin.store import KEY_PREFIX, SnapshotStore, SqliteSnapshotStore, snapshot_key


def _load_composition(store: SnapshotStore, team_id: str) -> TeamComposition | None:
    """Build an editor from the stored snapshot for *team_id*, or None if absent/invalid."""
    text = store.get(snapshot_key(team_id))
    if text is None:
        return None
    result = parse_snapshot_text(text)
    if not result.ok or result.snapshot is None:
        return None
    composition = TeamComposition(store, team_code=team_id, team_name=result.snapshot.team_name, seed=False)
    composition.load_snapshot(result.snapshot)
    return composition


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="teamtwin")
def cli() -> None:
    """Teamtwin — team setup wizard for development-team simulations."""


@cli.command()
def init() -> None:
    """Initialize .teamtwin/ in the current directory."""
    cwd = Path.cwd()
    teamtwin_dir = cwd / TEAMTWIN_DIR_NAME

    if teamtwin_dir.exists():
        click.echo(f"{TEAMTWIN_DIR_NAME}/ already exists in {cwd}")
        with SqliteSnapshotStore(teamtwin_dir / DB_FILENAME) as store:
            store.initialize()
        return

    teamtwin_dir.mkdir()
    write_config(teamtwin_dir, read_config(teamtwin_dir))
    with SqliteSnapshotStore(teamtwin_dir / DB_FILENAME) as store:
        store.initialize()

    click.echo(f"Initialized {TEAMTWIN_DIR_NAME}/ in {cwd}")
    click.echo(f"  Store: {teamtwin_dir / DB_FILENAME}")
    click.echo("\nNext: teamtwin dashboard")


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_teams(as_json: bool) -> None:
    """List saved team setups."""
    with get_store() as store:
        rows = []
        for key in store.keys():
            if not key.startswith(KEY_PREFIX):
                continue
            team_id = key[len(KEY_PREFIX) :]
            composition = _load_composition(store, team_id)
            rows.append(
                {
                    "team_id": team_id,
                    "team_name": composition.team_name if composition else "",
                    "capabilities": len(composition.capabilities) if composition else 0,
                    "staff_members": len(composition.staff_members) if composition else 0,
                    "valid": composition is not None,
                }
            )
    if as_json:
        click.echo(json_mod.dumps(rows, indent=2))
        return
    if not rows:
        click.echo("No saved team setups.")
        return
    for row in rows:
        if not row["valid"]:
            click.echo(f"  {row['team_id']:<20} (unreadable snapshot)")
            continue
        click.echo(f"  {row['team_id']:<20} {row['team_name']}  [{row['capabilities']} capabilities, {row['staff_members']} staff]")


@cli.command()
@click.argument("team_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(team_id: str, as_json: bool) -> None:
    """Show a saved team setup."""
    with get_store() as store:
        composition = _load_composition(store, team_id)
    if composition is None:
        click.echo(f"Not found: {team_id}", err=True)
        sys.exit(1)
    if as_json:
        click.echo(json_mod.dumps(composition.snapshot().to_dict(), indent=2))
        return

    names = {c.id: c.code or c.description for c in composition.capabilities}
    click.echo(f"{composition.team_code}: {composition.team_name}")
    click.echo("\nCapabilities:")
    for cap in composition.capabilities:
        click.echo(f"  {cap.code:<8} {cap.description}")
    click.echo("\nStaff:")
    for member in composition.staff_members:
        assigned = ", ".join(names[cid] for cid in member.capability_ids) or "(none)"
        click.echo(f"  {member.code:<8} {member.name:<24} {member.capacity:.0%}  {assigned}")


@cli.command("export")
@click.argument("team_id")
@click.option("--output", "-o", "output_dir", default=None, type=click.Path(file_okay=False), help="Target directory (default: config export_dir)")
def export_data(team_id: str, output_dir: str | None) -> None:
    """Export a saved team setup to <team>_Team_Setup.json."""
    teamtwin_dir = get_teamtwin_dir()
    directory = Path(output_dir or read_config(teamtwin_dir).get("export_dir", "."))
    with get_store() as store:
        composition = _load_composition(store, team_id)
        if composition is None:
            click.echo(f"Not found: {team_id}", err=True)
            sys.exit(1)
        directory.mkdir(parents=True, exist_ok=True)
        path = composition.export_to(directory)
    if path is None:
        status = composition.clear_status()
        click.echo(f"Error: {status.text if status else 'export failed'}", err=True)
        sys.exit(1)
    click.echo(f"Exported {team_id} to {path}")


@cli.command("import")
@click.argument("team_id")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", "team_name", default=None, help="Team name for a new setup (default: keep existing, else team id)")
def import_data(team_id: str, input_file: str, team_name: str | None) -> None:
    """Import a team setup file and save it under TEAM_ID."""
    with get_store() as store:
        composition = _load_composition(store, team_id)
        if composition is None:
            composition = TeamComposition(store, team_code=team_id, team_name=team_name or team_id, seed=False)
        elif team_name:
            composition.team_name = team_name
        ok = composition.import_file(Path(input_file))
    status = composition.clear_status()
    if not ok:
        click.echo(f"Error: {status.text if status else 'import failed'}", err=True)
        sys.exit(1)
    click.echo(status.text if status else f"Imported {input_file}")


@cli.command()
@click.option("--port", default=None, type=int, help="Server port (default from config, 8377)")
@click.option("--no-browser", is_flag=True, help="Don't auto-open browser")
def dashboard(port: int | None, no_browser: bool) -> None:
    """Launch the wizard web API (requires teamtwin[dashboard])."""
    try:
        from teamtwin.dashboard import main as dashboard_main
    except ImportError:
        click.echo('Dashboard requires extra dependencies. Install with: pip install "teamtwin[dashboard]"', err=True)
        sys.exit(1)
    teamtwin_dir = get_teamtwin_dir()
    dashboard_main(port=port or read_config(teamtwin_dir).get("port", 8377), no_browser=no_browser)


if __name__ == "__main__":
    cli()
