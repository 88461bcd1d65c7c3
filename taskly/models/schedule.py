"""Equipment maintenance schedule model.

A schedule says "service this equipment every `interval_days` days and open
the task `advance_days` before the service is due". Both derived dates are
null until the equipment has been serviced at least once.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel, Field, computed_field


def compute_next_service_date(last_service_date: Optional[date], interval_days: int) -> Optional[date]:
    if last_service_date is None:
        return None
    return last_service_date + timedelta(days=interval_days)


def compute_task_due_date(next_service_date: Optional[date], advance_days: int) -> Optional[date]:
    if next_service_date is None:
        return None
    return next_service_date - timedelta(days=advance_days)


class Schedule(BaseModel):
    """Recurring maintenance cadence for a piece of equipment."""

    id: int
    equipment_id: int
    service_type_id: int
    interval_days: int = Field(..., ge=1, description="Days between services")
    advance_days: int = Field(0, ge=0, description="Days before the service date the task is opened")
    last_service_date: Optional[date] = None

    # Denormalized for task titles; filled by the repository.
    equipment_name: Optional[str] = None
    service_type_name: Optional[str] = None
    workspace_id: Optional[int] = None
    project_id: Optional[int] = None
    equipment_created_by: Optional[int] = None

    @computed_field
    @property
    def next_service_date(self) -> Optional[date]:
        return compute_next_service_date(self.last_service_date, self.interval_days)

    @computed_field
    @property
    def task_due_date(self) -> Optional[date]:
        return compute_task_due_date(self.next_service_date, self.advance_days)
