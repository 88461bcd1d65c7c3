"""Normalized row fetched from an external tabular source."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from taskly.models.task import TaskPriority


class ExternalRow(BaseModel):
    """One spreadsheet row in the shape the task sync expects."""

    row_number: int = Field(..., ge=1, description="1-based row number in the sheet (header is row 1)")
    sync_key: str = Field(..., description="Natural key: '<spreadsheet_id>|<sheet>|<row_number>'")
    store: Optional[str] = Field(None, description="Branch/store column value used for project routing")
    title: Optional[str] = None
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    task_id: Optional[int] = Field(None, description="Explicit local task id column, if the sheet has one")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
