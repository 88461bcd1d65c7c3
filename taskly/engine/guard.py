"""Existence checks that keep reconciliation jobs safe to re-run.

None of these checks are backed by a unique constraint: two jobs running at
the same time can both pass the check and both insert.
"""

from sqlalchemy.orm import Session

from taskly.database.repository import TaskRepository
from taskly.database.workspace_repository import ProjectRepository, WorkspaceRepository
from taskly.models.schedule import Schedule


class IdempotencyGuard:
    def __init__(self, db: Session):
        self.tasks = TaskRepository(db)
        self.workspaces = WorkspaceRepository(db)
        self.projects = ProjectRepository(db)

    def has_open_derivative(self, schedule: Schedule) -> bool:
        """A task generated from this schedule exists and is below 100% progress."""
        return self.tasks.has_open_for_schedule(schedule.id)

    def has_workspace_membership(self, workspace_id: int, user_id: int) -> bool:
        return self.workspaces.has_member(workspace_id, user_id)

    def has_project_client(self, project_id: int, user_id: int) -> bool:
        return self.projects.has_client(project_id, user_id)
