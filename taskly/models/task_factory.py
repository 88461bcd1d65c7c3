"""Task creation factory for taskly.

Every job that materializes a task goes through here so that derived tasks
start from the same defaults.
"""

from datetime import date, datetime
from typing import Optional

from taskly.models.task import Task, TaskPriority
from taskly.models.constants import DEFAULT_PRIORITY, INITIAL_PROGRESS


def normalize_priority(value: Optional[str]) -> TaskPriority:
    """Map free text to a TaskPriority, falling back to the default."""
    if not value:
        return DEFAULT_PRIORITY
    try:
        return TaskPriority(value.strip().lower())
    except ValueError:
        return DEFAULT_PRIORITY


def create_task_base(
    project_id: int,
    title: str,
    task_stage_id: Optional[int] = None,
    description: Optional[str] = None,
    priority: Optional[TaskPriority] = None,
    start_date: Optional[date] = None,
    due_date: Optional[date] = None,
    created_by: Optional[int] = None,
    equipment_id: Optional[int] = None,
    equipment_schedule_id: Optional[int] = None,
    google_sheet_sync_key: Optional[str] = None,
) -> Task:
    """Create an unsaved, not-started task with defaults applied.

    Args:
        project_id: Project the task belongs to (required)
        title: Task title (required)
        task_stage_id: Workflow stage, usually the workspace's first stage
        description: Task description
        priority: Task priority (defaults to medium)
        start_date: Date work may start
        due_date: Date the work is due
        created_by: User credited with creating the task
        equipment_id: Serviced equipment, for maintenance tasks
        equipment_schedule_id: Originating maintenance schedule
        google_sheet_sync_key: Natural key for tasks imported from a sheet

    Returns:
        Task object with no id yet
    """
    now = datetime.utcnow()
    return Task(
        id=None,
        project_id=project_id,
        task_stage_id=task_stage_id,
        equipment_id=equipment_id,
        equipment_schedule_id=equipment_schedule_id,
        title=title,
        description=description,
        priority=priority if priority is not None else DEFAULT_PRIORITY,
        start_date=start_date,
        due_date=due_date,
        progress=INITIAL_PROGRESS,
        created_by=created_by,
        google_sheet_sync_key=google_sheet_sync_key,
        created_at=now,
        updated_at=now,
    )
