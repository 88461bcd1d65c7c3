"""Tests for the taskly command line."""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from taskly.cli import app
from taskly.database.models import ProjectClientDB, TaskDB
from taskly.integrations.google_sheets import SheetsCredentialsError, SheetsFetchError


runner = CliRunner()


@pytest.fixture
def cli_session(db_session):
    """Point the CLI at the test database."""
    with patch("taskly.cli.SessionLocal", return_value=db_session):
        yield db_session


def test_db_init_creates_schema():
    with patch("taskly.cli.init_db") as init_db:
        result = runner.invoke(app, ["db:init"])

    assert result.exit_code == 0
    init_db.assert_called_once_with()
    assert "Database initialized." in result.output


def test_generate_maintenance_tasks(cli_session, stage, make_schedule):
    make_schedule()

    result = runner.invoke(app, ["equipment:generate-maintenance-tasks", "--date", "2024-01-25"])

    assert result.exit_code == 0, result.output
    assert "Created: 1, Updated: 0, Linked: 0, Skipped: 0, Errors: 0." in result.output
    assert cli_session.query(TaskDB).count() == 1


def test_generate_maintenance_tasks_rejects_bad_date(cli_session):
    result = runner.invoke(app, ["equipment:generate-maintenance-tasks", "--date", "25/01/2024"])

    assert result.exit_code != 0
    assert cli_session.query(TaskDB).count() == 0


def test_sync_assets_from_invoices(cli_session, paid_invoice, add_items):
    add_items(paid_invoice, ["Router", "Switch"])

    result = runner.invoke(app, ["assets:sync-from-invoices"])

    assert result.exit_code == 0, result.output
    assert "Created: 2, Updated: 0, Linked: 2" in result.output


def test_sheet_sync_unknown_workspace_exits_1(cli_session):
    result = runner.invoke(app, ["tasks:sync-from-google-sheet", "1AbC", "999"])

    assert result.exit_code == 1
    assert "Workspace 999 not found." in result.output


def test_sheet_sync_without_credentials_prints_help(cli_session, workspace):
    with patch("taskly.cli.GoogleSheetsClient", side_effect=SheetsCredentialsError("credentials file not found")):
        result = runner.invoke(app, ["tasks:sync-from-google-sheet", "1AbC", str(workspace.id)])

    assert result.exit_code == 1
    assert "credentials file not found" in result.output
    assert "GOOGLE_SHEETS_CREDENTIALS_PATH" in result.output


def test_sheet_sync_fetch_failure_exits_1(cli_session, workspace):
    client = MagicMock()
    client.fetch.side_effect = SheetsFetchError("Permission denied.")
    with patch("taskly.cli.GoogleSheetsClient", return_value=client):
        result = runner.invoke(app, ["tasks:sync-from-google-sheet", "1AbC", str(workspace.id)])

    assert result.exit_code == 1
    assert "Sync failed: Permission denied." in result.output


def test_sheet_sync_creates_tasks(cli_session, workspace, project, stage, owner):
    # The command closes the shared session, detaching fixture objects.
    owner_id = owner.id
    client = MagicMock()
    client.fetch.return_value = [
        ["title", "description", "due date"],
        ["Fix door", "Front", "2024-05-01"],
        ["", "no title", ""],
    ]
    with patch("taskly.cli.GoogleSheetsClient", return_value=client):
        result = runner.invoke(
            app,
            ["tasks:sync-from-google-sheet", "1AbC", str(workspace.id), "--project", str(project.id)],
        )

    assert result.exit_code == 0, result.output
    client.fetch.assert_called_once_with("1AbC", "ია")
    assert "Created: 1, Updated: 0, Linked: 0, Skipped: 1, Errors: 0." in result.output
    task = cli_session.query(TaskDB).one()
    assert task.created_by == owner_id
    assert task.due_date == date(2024, 5, 1)


def test_sheet_sync_row_errors_still_exit_0(cli_session, workspace, stage):
    client = MagicMock()
    client.fetch.return_value = [["title"], ["Orphan row"]]
    with patch("taskly.cli.GoogleSheetsClient", return_value=client):
        result = runner.invoke(app, ["tasks:sync-from-google-sheet", "1AbC", str(workspace.id), "--sheet", "Tasks"])

    assert result.exit_code == 0
    assert "Row 2: project not found for this store, skipped." in result.output


def test_add_demo_client(cli_session, project):
    result = runner.invoke(app, ["projects:add-demo-client"])

    assert result.exit_code == 0, result.output
    assert "Demo client demo@demo.ge added to 1 projects." in result.output
    assert cli_session.query(ProjectClientDB).count() == 1
