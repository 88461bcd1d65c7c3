"""Data models for taskly."""

from taskly.models.task import Task, TaskPriority
from taskly.models.schedule import Schedule
from taskly.models.external_row import ExternalRow
from taskly.models.reconciliation import ReconciliationResult

__all__ = [
    "Task",
    "TaskPriority",
    "Schedule",
    "ExternalRow",
    "ReconciliationResult",
]
