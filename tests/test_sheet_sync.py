"""Tests for Google Sheet row normalization and the task sync."""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from taskly.database.models import ProjectDB, TaskDB
from taskly.database.settings_repository import SettingsStore
from taskly.engine.sheet_sync import (
    GoogleSheetsTaskSource,
    GoogleSheetsTaskSync,
    normalize_rows,
    parse_date,
    parse_task_id,
)
from taskly.models.constants import SHEET_SYNC_LAST_RUN_KEY
from taskly.models.external_row import ExternalRow


SHEET_ID = "1AbCdEf"


def _row(row_number, **fields):
    data = {"row_number": row_number, "sync_key": f"{SHEET_ID}|ია|{row_number}"}
    data.update(fields)
    return ExternalRow(**data)


def _tasks(db_session):
    return db_session.query(TaskDB).order_by(TaskDB.id).all()


class TestParseDate:
    def test_iso_date(self):
        assert parse_date("2024-05-01") == date(2024, 5, 1)

    def test_other_formats(self):
        assert parse_date("May 1, 2024") == date(2024, 5, 1)

    def test_garbage_and_empty(self):
        assert parse_date("soon") is None
        assert parse_date("") is None
        assert parse_date(None) is None

    def test_invalid_iso_date(self):
        assert parse_date("2024-13-45") is None


class TestParseTaskId:
    @pytest.mark.parametrize("raw, expected", [
        ("42", 42),
        ("12.0", 12),
        (" 7 ", 7),
        ("12.5", None),
        ("0", None),
        ("-3", None),
        ("abc", None),
        ("nan", None),
        ("\u0663", None),
        ("", None),
        (None, None),
    ])
    def test_mapping(self, raw, expected):
        assert parse_task_id(raw) == expected


class TestNormalizeRows:
    def test_header_names_locate_columns(self):
        values = [
            ["Due Date", "Title", "Priority", "Description"],
            ["2024-05-01", "Fix door", "High", "Front door sticks"],
        ]

        rows = normalize_rows(values, SHEET_ID, "Tasks")

        assert len(rows) == 1
        row = rows[0]
        assert row.row_number == 2
        assert row.sync_key == f"{SHEET_ID}|Tasks|2"
        assert row.title == "Fix door"
        assert row.description == "Front door sticks"
        assert row.priority == "high"
        assert row.due_date == date(2024, 5, 1)
        assert row.store is None
        assert row.task_id is None

    def test_georgian_headers_with_store_column(self):
        values = [
            ["მაღაზია", "სათაური", "აღწერა", "პრიორიტეტი", "ვადა"],
            ["ვაკე", "კონდიციონერი", "შემოწმება", "low", "2024-06-10"],
        ]

        row = normalize_rows(values, SHEET_ID, "ია")[0]

        assert row.store == "ვაკე"
        assert row.title == "კონდიციონერი"
        assert row.description == "შემოწმება"
        assert row.priority == "low"
        assert row.due_date == date(2024, 6, 10)

    def test_positional_fallback_without_store(self):
        values = [["a", "b", "c", "d"], ["Paint wall", "Lobby", "critical", "2024-07-01"]]

        row = normalize_rows(values, SHEET_ID, "ია")[0]

        assert row.title == "Paint wall"
        assert row.description == "Lobby"
        assert row.priority == "critical"
        assert row.due_date == date(2024, 7, 1)

    def test_positional_fallback_shifts_after_store_column(self):
        values = [["store", "x", "y", "z", "w"], ["Saburtalo", "Paint wall", "Lobby", "low", "2024-07-01"]]

        row = normalize_rows(values, SHEET_ID, "ია")[0]

        assert row.store == "Saburtalo"
        assert row.title == "Paint wall"
        assert row.description == "Lobby"
        assert row.priority == "low"

    def test_unknown_priority_defaults_to_medium(self):
        values = [["title", "priority"], ["Fix", "urgent!!"]]

        assert normalize_rows(values, SHEET_ID, "ია")[0].priority == "medium"

    def test_explicit_id_column(self):
        values = [["title", "taskly id"], ["Fix", "42"], ["Other", "abc"]]

        rows = normalize_rows(values, SHEET_ID, "ია")

        assert rows[0].task_id == 42
        assert rows[1].task_id is None

    def test_sheet_formatted_numeric_id(self):
        values = [["title", "id"], ["Fix", "12.0"]]

        assert normalize_rows(values, SHEET_ID, "ია")[0].task_id == 12

    def test_short_rows_and_sync_keys(self):
        values = [["title", "description"], ["Only title"], [], ["Third"]]

        rows = normalize_rows(values, SHEET_ID, "Tab!A1:D")

        assert [r.row_number for r in rows] == [2, 3, 4]
        assert [r.sync_key for r in rows] == [f"{SHEET_ID}|Tab|{i}" for i in (2, 3, 4)]
        assert rows[0].description is None
        assert rows[1].title is None

    def test_empty_sheet(self):
        assert normalize_rows([], SHEET_ID, "ია") == []


class TestGoogleSheetsTaskSource:
    def test_fetch_normalizes_client_values(self):
        client = MagicMock()
        client.fetch.return_value = [["title"], ["Fix door"]]

        rows = GoogleSheetsTaskSource(client).fetch(SHEET_ID, "ია")

        client.fetch.assert_called_once_with(SHEET_ID, "ია")
        assert [r.title for r in rows] == ["Fix door"]

    def test_sync_keys_use_bare_id_for_urls(self):
        client = MagicMock()
        client.fetch.return_value = [["title"], ["Fix door"]]
        url = f"https://docs.google.com/spreadsheets/d/{SHEET_ID}/edit"

        rows = GoogleSheetsTaskSource(client).fetch(url, "ია")

        assert rows[0].sync_key == f"{SHEET_ID}|ია|2"


class TestGoogleSheetsTaskSync:
    @pytest.fixture
    def branch(self, db_session, workspace):
        p = ProjectDB(workspace_id=workspace.id, name="ვაკე ფილიალი")
        db_session.add(p)
        db_session.commit()
        return p

    def test_creates_tasks_in_default_project(self, db_session, workspace, project, stage, owner):
        rows = [_row(2, title="Fix door", priority="high", due_date=date(2024, 5, 1))]

        result = GoogleSheetsTaskSync(db_session).sync_to_project(rows, workspace.id, project.id, owner.id)

        assert result.created == 1
        task = _tasks(db_session)[0]
        assert task.project_id == project.id
        assert task.task_stage_id == stage.id
        assert task.title == "Fix door"
        assert task.priority == "high"
        assert task.due_date == date(2024, 5, 1)
        assert task.created_by == owner.id
        assert task.google_sheet_sync_key == f"{SHEET_ID}|ია|2"

    def test_store_routes_to_branch_project(self, db_session, workspace, project, stage, branch):
        rows = [_row(2, store="ვაკე", title="Fix AC")]

        GoogleSheetsTaskSync(db_session).sync_to_project(rows, workspace.id, project.id, None)

        assert _tasks(db_session)[0].project_id == branch.id

    def test_store_matches_project_name_containing_it(self, db_session, workspace, stage):
        mall = ProjectDB(workspace_id=workspace.id, name="Tbilisi Mall - Saburtalo")
        db_session.add(mall)
        db_session.commit()

        GoogleSheetsTaskSync(db_session).sync_to_project(
            [_row(2, store="Saburtalo", title="Fix AC")], workspace.id, None, None
        )

        assert _tasks(db_session)[0].project_id == mall.id

    def test_unknown_store_uses_default_project(self, db_session, workspace, project, stage):
        rows = [_row(2, store="Batumi", title="Fix AC")]

        GoogleSheetsTaskSync(db_session).sync_to_project(rows, workspace.id, project.id, None)

        assert _tasks(db_session)[0].project_id == project.id

    def test_unresolvable_row_is_reported(self, db_session, workspace, stage):
        rows = [_row(2, store="Batumi", title="Fix AC"), _row(3, title="No store")]

        result = GoogleSheetsTaskSync(db_session).sync_to_project(rows, workspace.id, None, None)

        assert result.created == 0
        assert result.errors == [
            "Row 2: project not found for this store, skipped.",
            "Row 3: project not found for this store, skipped.",
        ]

    def test_missing_default_project_is_reported(self, db_session, workspace, stage):
        result = GoogleSheetsTaskSync(db_session).sync_to_project([_row(2, title="Fix")], workspace.id, 999, None)

        assert result.errors == ["Row 2: project 999 does not exist, skipped."]

    def test_workspace_without_stage_is_reported(self, db_session, workspace, project):
        result = GoogleSheetsTaskSync(db_session).sync_to_project(
            [_row(2, title="Fix")], workspace.id, project.id, None
        )

        assert result.errors == ["Row 2: no task stage for workspace."]
        assert _tasks(db_session) == []

    def test_row_without_title_is_skipped(self, db_session, workspace, project, stage):
        result = GoogleSheetsTaskSync(db_session).sync_to_project([_row(2)], workspace.id, project.id, None)

        assert result.skipped == 1
        assert _tasks(db_session) == []

    def test_resync_updates_by_sync_key(self, db_session, workspace, project, stage):
        sync = GoogleSheetsTaskSync(db_session)
        sync.sync_to_project([_row(2, title="Fix door")], workspace.id, project.id, None)

        result = sync.sync_to_project(
            [_row(2, title="Fix front door", description="Sticks", priority="critical")],
            workspace.id,
            project.id,
            None,
        )

        assert result.created == 0
        assert result.updated == 1
        tasks = _tasks(db_session)
        assert len(tasks) == 1
        assert tasks[0].title == "Fix front door"
        assert tasks[0].description == "Sticks"
        assert tasks[0].priority == "critical"

    def test_explicit_task_id_updates_that_task(self, db_session, workspace, project, stage):
        sync = GoogleSheetsTaskSync(db_session)
        sync.sync_to_project([_row(5, title="Original")], workspace.id, project.id, None)
        existing = _tasks(db_session)[0]

        result = sync.sync_to_project([_row(9, title="Renamed", task_id=existing.id)], workspace.id, project.id, None)

        assert result.updated == 1
        assert [t.title for t in _tasks(db_session)] == ["Renamed"]

    def test_explicit_task_id_in_other_project_is_not_touched(self, db_session, workspace, project, stage, branch):
        sync = GoogleSheetsTaskSync(db_session)
        sync.sync_to_project([_row(2, store="ვაკე", title="Branch task")], workspace.id, project.id, None)
        branch_task = _tasks(db_session)[0]

        result = sync.sync_to_project([_row(3, title="Head office", task_id=branch_task.id)], workspace.id, project.id, None)

        assert result.created == 1
        assert result.updated == 0
        assert [t.title for t in _tasks(db_session)] == ["Branch task", "Head office"]

    def test_records_last_run_per_workspace(self, db_session, workspace, project, stage):
        GoogleSheetsTaskSync(db_session).sync_to_project([], workspace.id, project.id, None)

        store = SettingsStore(db_session)
        assert store.get(SHEET_SYNC_LAST_RUN_KEY, scope=workspace.id) is not None
        assert store.get(SHEET_SYNC_LAST_RUN_KEY) is None

    def test_row_exception_is_recorded_and_batch_continues(self, db_session, workspace, project, stage):
        sync = GoogleSheetsTaskSync(db_session)
        original_create = sync.tasks.create

        def flaky_create(task):
            if task.title == "Broken":
                raise RuntimeError("db down")
            return original_create(task)

        rows = [_row(2, title="Broken"), _row(3, title="Fine")]
        with patch.object(sync.tasks, "create", side_effect=flaky_create):
            result = sync.sync_to_project(rows, workspace.id, project.id, None)

        assert result.created == 1
        assert result.errors == ["Row 2: db down"]
        assert [t.title for t in _tasks(db_session)] == ["Fine"]
