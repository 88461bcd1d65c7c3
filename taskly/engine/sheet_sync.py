"""Create-or-update tasks from Google Sheet rows.

Columns are located by header name (English or Georgian). When the sheet has
a store/branch column, each row is routed to the project named
"<store> ფილიალი" (or containing the store name) in the workspace; other rows
go to the caller's default project.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from dateutil import parser as date_parser
from sqlalchemy.orm import Session

from taskly.database.repository import TaskRepository
from taskly.database.settings_repository import SettingsStore
from taskly.database.workspace_repository import ProjectRepository, WorkspaceRepository
from taskly.integrations.google_sheets import GoogleSheetsClient, extract_spreadsheet_id
from taskly.models.constants import BRANCH_PROJECT_SUFFIX, SHEET_SYNC_LAST_RUN_KEY
from taskly.models.external_row import ExternalRow
from taskly.models.reconciliation import ReconciliationResult
from taskly.models.task_factory import create_task_base, normalize_priority

logger = logging.getLogger(__name__)

STORE_HEADERS = ['მაღაზია', 'store', 'magazia', 'ფილიალი', 'branch']
TITLE_HEADERS = ['title', 'task', 'name', 'სათაური', 'task title']
DESCRIPTION_HEADERS = ['description', 'desc', 'details', 'აღწერა', 'notes']
PRIORITY_HEADERS = ['priority', 'პრიორიტეტი', 'prio']
DUE_HEADERS = ['due date', 'due', 'due_date', 'deadline', 'ვადა', 'date']
ID_HEADERS = ['taskly id', 'taskly_id', 'id', 'taskly']


def column_index(header: Sequence[str], candidates: Iterable[str]) -> Optional[int]:
    """Index of the first candidate present in the (lowercased) header."""
    for candidate in candidates:
        if candidate in header:
            return header.index(candidate)
    return None


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD or anything dateutil understands; None if unparseable."""
    if not value:
        return None
    value = value.strip()
    if re.match(r'^\d{4}-\d{2}-\d{2}$', value):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        return None


def parse_task_id(value: Optional[str]) -> Optional[int]:
    """Positive integer id from a cell; sheets may render 12 as "12.0"."""
    if not value or not value.isascii():
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if not number.is_integer() or number < 1:
        return None
    return int(number)


def _cell(row: Sequence, index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(row):
        return None
    value = str(row[index]).strip()
    return value or None


def normalize_rows(values: List[List[str]], spreadsheet_id: str, sheet_name: str) -> List[ExternalRow]:
    """Turn raw sheet values (header first) into ExternalRows.

    Without a store column, title/description/priority/due default to
    columns A-D; with one, to columns B-E.
    """
    if not values:
        return []

    header = [str(h).strip().lower() for h in values[0]]
    store_col = column_index(header, STORE_HEADERS)
    offset = 1 if store_col is not None else 0
    title_col = column_index(header, TITLE_HEADERS)
    title_col = offset if title_col is None else title_col
    desc_col = column_index(header, DESCRIPTION_HEADERS)
    desc_col = offset + 1 if desc_col is None else desc_col
    priority_col = column_index(header, PRIORITY_HEADERS)
    priority_col = offset + 2 if priority_col is None else priority_col
    due_col = column_index(header, DUE_HEADERS)
    due_col = offset + 3 if due_col is None else due_col
    id_col = column_index(header, ID_HEADERS)

    tab = sheet_name.split('!')[0]
    rows: List[ExternalRow] = []
    for i, row in enumerate(values[1:], start=2):
        rows.append(
            ExternalRow(
                row_number=i,
                sync_key=f"{spreadsheet_id}|{tab}|{i}",
                store=_cell(row, store_col),
                title=_cell(row, title_col),
                description=_cell(row, desc_col),
                priority=normalize_priority(_cell(row, priority_col)),
                due_date=parse_date(_cell(row, due_col)),
                task_id=parse_task_id(_cell(row, id_col)),
            )
        )
    return rows


class GoogleSheetsTaskSource:
    """Fetch a sheet tab and normalize it into ExternalRows."""

    def __init__(self, client: GoogleSheetsClient):
        self.client = client

    def fetch(self, spreadsheet_id: str, sheet_name: str) -> List[ExternalRow]:
        values = self.client.fetch(spreadsheet_id, sheet_name)
        return normalize_rows(values, extract_spreadsheet_id(spreadsheet_id), sheet_name)


class GoogleSheetsTaskSync:
    def __init__(self, db: Session, *, settings: Optional[SettingsStore] = None):
        self.db = db
        self.tasks = TaskRepository(db)
        self.projects = ProjectRepository(db)
        self.workspaces = WorkspaceRepository(db)
        self.settings = settings or SettingsStore(db)

    def _resolve_project_id(self, row: ExternalRow, workspace_id: int, default_project_id: Optional[int]) -> Optional[int]:
        if row.store:
            project = self.projects.find_by_store_name(workspace_id, row.store, BRANCH_PROJECT_SUFFIX)
            if project is not None:
                return project.id
        return default_project_id

    def _sync_row(
        self,
        row: ExternalRow,
        workspace_id: int,
        default_project_id: Optional[int],
        user_id: Optional[int],
        result: ReconciliationResult,
    ) -> None:
        project_id = self._resolve_project_id(row, workspace_id, default_project_id)
        if project_id is None:
            result.add_error(f"Row {row.row_number}: project not found for this store, skipped.")
            return

        project = self.projects.get(project_id)
        if project is None:
            result.add_error(f"Row {row.row_number}: project {project_id} does not exist, skipped.")
            return
        stage = self.workspaces.first_stage(project.workspace_id)
        if stage is None:
            result.add_error(f"Row {row.row_number}: no task stage for workspace.")
            return

        if not row.title:
            result.skipped += 1
            return

        task = None
        if row.task_id:
            task = self.tasks.get_in_project(project_id, row.task_id)
        if task is None:
            task = self.tasks.find_by_sync_key(project_id, row.sync_key)

        if task is not None:
            self.tasks.update(
                task.model_copy(
                    update={
                        "title": row.title,
                        "description": row.description,
                        "priority": row.priority,
                        "due_date": row.due_date,
                    }
                )
            )
            result.updated += 1
            return

        self.tasks.create(
            create_task_base(
                project_id=project_id,
                task_stage_id=stage.id,
                title=row.title,
                description=row.description,
                priority=row.priority,
                due_date=row.due_date,
                created_by=user_id,
                google_sheet_sync_key=row.sync_key,
            )
        )
        result.created += 1

    def sync_to_project(
        self,
        rows: Iterable[ExternalRow],
        workspace_id: int,
        default_project_id: Optional[int],
        user_id: Optional[int],
    ) -> ReconciliationResult:
        """Create or update one task per row.

        Per-row failures are collected in `errors`; earlier rows stay committed.
        """
        result = ReconciliationResult()
        for row in rows:
            try:
                self._sync_row(row, workspace_id, default_project_id, user_id, result)
            except Exception as e:
                self.db.rollback()
                logger.warning(f"Google Sheets task sync row {row.row_number} error: {type(e).__name__}: {str(e)[:200]}")
                result.add_error(f"Row {row.row_number}: {e}")

        self.settings.set(SHEET_SYNC_LAST_RUN_KEY, datetime.utcnow().isoformat(), scope=workspace_id)
        return result
