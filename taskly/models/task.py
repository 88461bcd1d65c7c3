"""Task data model for taskly."""

from datetime import date, datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Progress value at which a task counts as done.
TASK_COMPLETE_PROGRESS = 100


class Task(BaseModel):
    """Canonical Task model."""

    id: Optional[int] = Field(None, description="Database id (null until persisted)")
    project_id: int = Field(..., description="Project the task belongs to")
    task_stage_id: Optional[int] = Field(None, description="Workflow stage")
    equipment_id: Optional[int] = Field(None, description="Serviced equipment, for maintenance tasks")
    equipment_schedule_id: Optional[int] = Field(
        None, description="Maintenance schedule this task was generated from"
    )
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    end_date: Optional[date] = Field(None, description="Date the work was finished")
    progress: int = Field(0, ge=0, le=100, description="Completion percentage")
    created_by: Optional[int] = Field(None, description="User id credited with creating the task")
    google_sheet_sync_key: Optional[str] = Field(
        None, description="'<spreadsheet_id>|<sheet>|<row>' for tasks imported from Google Sheets"
    )
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")

    @property
    def is_complete(self) -> bool:
        return self.progress >= TASK_COMPLETE_PROGRESS

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
