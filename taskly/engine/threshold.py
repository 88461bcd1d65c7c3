"""Due-date threshold for maintenance schedules."""

from datetime import date

from taskly.models.schedule import Schedule


def is_due(schedule: Schedule, today: date) -> bool:
    """True iff the schedule has a task due date on or before `today`.

    Schedules without a due date (never serviced) are never due.
    """
    due = schedule.task_due_date
    return due is not None and due <= today
