"""Repository layer for task database operations."""

import logging
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from taskly.models.task import Task, TASK_COMPLETE_PROGRESS
from taskly.database.models import TaskDB, enum_to_value

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task_db.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task '{task.title[:50]}': {type(e).__name__}: {str(e)}")
            raise

    def get(self, task_id: int) -> Optional[Task]:
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        return task_db.to_pydantic() if task_db else None

    def get_in_project(self, project_id: int, task_id: int) -> Optional[Task]:
        """Get a task by id, only if it belongs to the given project."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.project_id == project_id,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def find_by_sync_key(self, project_id: int, sync_key: str) -> Optional[Task]:
        """Find the task previously imported from a given sheet row."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.project_id == project_id,
            TaskDB.google_sheet_sync_key == sync_key,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def get_for_schedule(self, schedule_id: int) -> List[Task]:
        """All tasks generated from a maintenance schedule, newest first."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.equipment_schedule_id == schedule_id,
        ).order_by(desc(TaskDB.created_at), desc(TaskDB.id)).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def has_open_for_schedule(self, schedule_id: int) -> bool:
        """True if a not-yet-complete task exists for the schedule."""
        row = self.db.query(TaskDB.id).filter(
            TaskDB.equipment_schedule_id == schedule_id,
            TaskDB.progress < TASK_COMPLETE_PROGRESS,
        ).first()
        return row is not None

    def latest_completion_for_schedule(self, schedule_id: int) -> Optional[date]:
        """Completion date of the most recently finished task for a schedule.

        A task's completion date is its end_date, or the date it was last
        updated when no end_date was recorded.
        """
        completions = [
            task.end_date or task.updated_at.date()
            for task in self.get_for_schedule(schedule_id)
            if task.is_complete
        ]
        return max(completions) if completions else None

    def update(self, task: Task) -> Task:
        """Update an existing task."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task.id).first()
        if not task_db:
            raise ValueError(f"Task {task.id} not found")

        task_db.project_id = task.project_id
        task_db.task_stage_id = task.task_stage_id
        task_db.title = task.title
        task_db.description = task.description
        task_db.priority = enum_to_value(task.priority)
        task_db.start_date = task.start_date
        task_db.due_date = task.due_date
        task_db.end_date = task.end_date
        task_db.progress = task.progress
        task_db.updated_at = datetime.utcnow()

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task.id}: {type(e).__name__}: {str(e)}")
            raise
