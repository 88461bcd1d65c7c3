"""Generate maintenance tasks from equipment schedules.

Runs on every scheduler tick. For each due schedule at most one open task is
created; once that task is completed the schedule's last service date moves
forward and the next cycle starts.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Set

from sqlalchemy.orm import Session

from taskly.database.repository import TaskRepository
from taskly.database.schedule_repository import ScheduleRepository
from taskly.database.settings_repository import SettingsStore
from taskly.database.workspace_repository import WorkspaceRepository
from taskly.engine.guard import IdempotencyGuard
from taskly.engine.threshold import is_due
from taskly.i18n import Translator
from taskly.models.constants import MAINTENANCE_LAST_RUN_KEY
from taskly.models.reconciliation import ReconciliationResult
from taskly.models.schedule import Schedule
from taskly.models.task_factory import create_task_base

logger = logging.getLogger(__name__)

TITLE_KEY = "{service_type} - {equipment}"
DESCRIPTION_KEY = "Scheduled {service_type} for {equipment}. Service due on {next_service_date}."


class MaintenanceTaskGenerator:
    def __init__(
        self,
        db: Session,
        *,
        translator: Optional[Translator] = None,
        settings: Optional[SettingsStore] = None,
    ):
        self.db = db
        self.schedules = ScheduleRepository(db)
        self.tasks = TaskRepository(db)
        self.workspaces = WorkspaceRepository(db)
        self.guard = IdempotencyGuard(db)
        self.translator = translator or Translator()
        self.settings = settings or SettingsStore(db)

    def roll_forward_completed(
        self,
        result: Optional[ReconciliationResult] = None,
        failed: Optional[Set[int]] = None,
    ) -> int:
        """Advance last_service_date for schedules whose task was completed since.

        A failure on one schedule is rolled back and, when `result` is given,
        recorded in its errors and its id added to `failed`; the remaining
        schedules are still processed.

        Returns the number of schedules moved forward.
        """
        advanced = 0
        for schedule in self.schedules.list_all():
            try:
                completed_on = self.tasks.latest_completion_for_schedule(schedule.id)
                if completed_on is None:
                    continue
                if schedule.last_service_date is not None and completed_on <= schedule.last_service_date:
                    continue
                self.schedules.update_last_service_date(schedule.id, completed_on)
            except Exception as e:
                self.db.rollback()
                logger.warning(f"Schedule {schedule.id}: roll-forward failed: {type(e).__name__}: {str(e)[:200]}")
                if result is None:
                    raise
                result.add_error(f"Schedule {schedule.id}: {e}")
                if failed is not None:
                    failed.add(schedule.id)
                continue
            logger.info(f"Schedule {schedule.id}: last service date advanced to {completed_on.isoformat()}")
            advanced += 1
        return advanced

    def _resolve_creator(self, schedule: Schedule) -> Optional[int]:
        if schedule.equipment_created_by:
            return schedule.equipment_created_by
        workspace = self.workspaces.get(schedule.workspace_id)
        return workspace.owner_id if workspace else None

    def _process(self, schedule: Schedule, today: date, result: ReconciliationResult) -> None:
        if not schedule.project_id:
            logger.debug(f"Schedule {schedule.id}: equipment has no project, skipped")
            result.skipped += 1
            return
        stage = self.workspaces.first_stage(schedule.workspace_id)
        if stage is None:
            logger.debug(f"Schedule {schedule.id}: workspace {schedule.workspace_id} has no task stage, skipped")
            result.skipped += 1
            return
        if not is_due(schedule, today):
            result.skipped += 1
            return
        if self.guard.has_open_derivative(schedule):
            result.skipped += 1
            return

        params = {
            "service_type": schedule.service_type_name,
            "equipment": schedule.equipment_name,
            "next_service_date": schedule.next_service_date.isoformat(),
        }
        task = create_task_base(
            project_id=schedule.project_id,
            task_stage_id=stage.id,
            title=self.translator.format(TITLE_KEY, params),
            description=self.translator.format(DESCRIPTION_KEY, params),
            start_date=schedule.task_due_date,
            due_date=schedule.next_service_date,
            created_by=self._resolve_creator(schedule),
            equipment_id=schedule.equipment_id,
            equipment_schedule_id=schedule.id,
        )
        created = self.tasks.create(task)
        logger.info(f"Schedule {schedule.id}: created maintenance task {created.id}")
        result.created += 1

    def run(self, candidates: Optional[Iterable[Schedule]] = None, today: Optional[date] = None) -> ReconciliationResult:
        """Create one open task per due schedule that has none.

        Args:
            candidates: Schedules to consider; defaults to every schedule due as of `today`
            today: Reference date (defaults to the current UTC date)

        Returns:
            ReconciliationResult with created/skipped counts and per-schedule errors
        """
        today = today or datetime.utcnow().date()
        result = ReconciliationResult()

        failed: Set[int] = set()
        self.roll_forward_completed(result, failed)

        reload = candidates is not None
        if candidates is None:
            candidates = self.schedules.find_due_candidates(as_of=today)

        for schedule in candidates:
            if schedule.id in failed:
                continue
            try:
                if reload:
                    # Caller snapshots predate the roll-forward above.
                    current = self.schedules.get(schedule.id)
                    if current is None:
                        result.skipped += 1
                        continue
                else:
                    current = schedule
                self._process(current, today, result)
            except Exception as e:
                self.db.rollback()
                logger.warning(f"Schedule {schedule.id}: {type(e).__name__}: {str(e)[:200]}")
                result.add_error(f"Schedule {schedule.id}: {e}")

        self.settings.set(MAINTENANCE_LAST_RUN_KEY, datetime.utcnow().isoformat())
        return result
