"""Operator entry points for the taskly reconciliation jobs.

Each command opens one database session, runs one job and prints a summary.
Per-row problems are printed as warnings and still exit 0; only missing
preconditions (unknown workspace, unusable credentials, failed fetch) exit 1.
"""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from typing import Optional

import typer
from dotenv import load_dotenv

from taskly.database.database import SessionLocal, init_db
from taskly.database.workspace_repository import WorkspaceRepository
from taskly.engine.asset_sync import InvoiceAssetSync
from taskly.engine.demo_client import DemoClientProvisioner
from taskly.engine.maintenance import MaintenanceTaskGenerator
from taskly.engine.sheet_sync import GoogleSheetsTaskSource, GoogleSheetsTaskSync
from taskly.integrations.google_sheets import CREDENTIALS_HELP, GoogleSheetsClient, SheetsCredentialsError
from taskly.models.constants import DEFAULT_SHEET_NAME, DEMO_CLIENT_EMAIL, DEMO_CLIENT_NAME
from taskly.models.reconciliation import ReconciliationResult

load_dotenv()

logger = logging.getLogger(__name__)

app = typer.Typer(help="taskly scheduled reconciliation jobs", no_args_is_help=True)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level")) -> None:
    level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _report(result: ReconciliationResult) -> None:
    typer.echo(result.summary())
    for err in result.errors:
        typer.secho(err, fg=typer.colors.YELLOW, err=True)


def _parse_day(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")


@app.command("db:init")
def db_init() -> None:
    """Create the database schema."""
    init_db()
    typer.echo("Database initialized.")


@app.command("equipment:generate-maintenance-tasks")
def generate_maintenance_tasks(
    on: Optional[str] = typer.Option(None, "--date", help="Evaluate as of this day (YYYY-MM-DD); default today"),
) -> None:
    """Create maintenance tasks for every due equipment schedule."""
    today = _parse_day(on)
    db = SessionLocal()
    try:
        result = MaintenanceTaskGenerator(db).run(today=today)
    finally:
        db.close()
    _report(result)


@app.command("assets:sync-from-invoices")
def sync_assets_from_invoices() -> None:
    """Link invoice asset items to assets, creating missing assets."""
    db = SessionLocal()
    try:
        result = InvoiceAssetSync(db).run()
    finally:
        db.close()
    _report(result)


@app.command("tasks:sync-from-google-sheet")
def sync_tasks_from_google_sheet(
    spreadsheet_id: str = typer.Argument(..., help="Google Spreadsheet ID or URL"),
    workspace_id: int = typer.Argument(..., help="Workspace ID"),
    sheet: str = typer.Option(DEFAULT_SHEET_NAME, "--sheet", help="Sheet tab name"),
    project: Optional[int] = typer.Option(
        None, "--project", help="Default project ID when a row's store matches no project"
    ),
    user: Optional[int] = typer.Option(None, "--user", help="User ID for created_by; default workspace owner"),
) -> None:
    """Create or update tasks from a Google Sheet."""
    db = SessionLocal()
    try:
        workspace = WorkspaceRepository(db).get(workspace_id)
        if workspace is None:
            typer.secho(f"Workspace {workspace_id} not found.", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)

        try:
            client = GoogleSheetsClient()
        except SheetsCredentialsError as e:
            typer.secho(str(e), fg=typer.colors.RED, err=True)
            typer.echo("To use this command:")
            for line in CREDENTIALS_HELP:
                typer.echo(line)
            raise typer.Exit(code=1)

        typer.echo(
            f"Syncing from spreadsheet {spreadsheet_id}, sheet '{sheet}', "
            f"workspace: {workspace.name} (ID {workspace_id})..."
        )
        created_by = user if user is not None else workspace.owner_id

        try:
            rows = GoogleSheetsTaskSource(client).fetch(spreadsheet_id, sheet)
        except Exception as e:
            logger.exception("Google Sheet fetch failed")
            typer.secho(f"Sync failed: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)

        result = GoogleSheetsTaskSync(db).sync_to_project(rows, workspace_id, project, created_by)
    finally:
        db.close()
    _report(result)


@app.command("projects:add-demo-client")
def add_demo_client(
    email: str = typer.Option(DEMO_CLIENT_EMAIL, "--email"),
    name: str = typer.Option(DEMO_CLIENT_NAME, "--name"),
) -> None:
    """Attach the demo client user to every project."""
    db = SessionLocal()
    try:
        result = DemoClientProvisioner(db).run(email=email, name=name)
    finally:
        db.close()
    typer.echo(f"Demo client {email} added to {result.created} projects.")
    _report(result)


if __name__ == "__main__":
    app()
