"""Attach a demo client user to every project and its workspace."""

from __future__ import annotations

import logging
from typing import Optional, Set

from sqlalchemy.orm import Session

from taskly.database.user_repository import UserRepository
from taskly.database.workspace_repository import ProjectRepository, WorkspaceRepository
from taskly.engine.guard import IdempotencyGuard
from taskly.models.constants import CLIENT_ROLE, DEMO_CLIENT_EMAIL, DEMO_CLIENT_NAME
from taskly.models.reconciliation import ReconciliationResult

logger = logging.getLogger(__name__)


class DemoClientProvisioner:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.projects = ProjectRepository(db)
        self.workspaces = WorkspaceRepository(db)
        self.guard = IdempotencyGuard(db)

    def _assigner_for(self, project) -> Optional[int]:
        """Project creator, else the workspace owner."""
        if project.created_by:
            return project.created_by
        workspace = self.workspaces.get(project.workspace_id)
        return workspace.owner_id if workspace else None

    def run(self, email: str = DEMO_CLIENT_EMAIL, name: str = DEMO_CLIENT_NAME) -> ReconciliationResult:
        result = ReconciliationResult()
        user = self.users.get_or_create(email, name=name, user_type=CLIENT_ROLE)

        seen_workspaces: Set[int] = set()
        for project in self.projects.list_all():
            try:
                if self.guard.has_project_client(project.id, user.id):
                    result.skipped += 1
                else:
                    assigned_by = self._assigner_for(project)
                    if assigned_by is None:
                        result.add_error(f"Project {project.id}: no creator or workspace owner to assign from, skipped.")
                    else:
                        self.projects.attach_client(project.id, user.id, assigned_by=assigned_by)
                        result.created += 1

                workspace_id = project.workspace_id
                if workspace_id and workspace_id not in seen_workspaces:
                    seen_workspaces.add(workspace_id)
                    if not self.guard.has_workspace_membership(workspace_id, user.id):
                        self.workspaces.add_member(workspace_id, user.id, role=CLIENT_ROLE)
                        result.linked += 1
            except Exception as e:
                self.db.rollback()
                logger.warning(f"Project {project.id}: {type(e).__name__}: {str(e)[:200]}")
                result.add_error(f"Project {project.id}: {e}")

        self.users.activate(user.id, current_workspace_id=self.workspaces.first_workspace_of(user.id))
        logger.info(f"Demo client {email} added to {result.created} project(s)")
        return result
