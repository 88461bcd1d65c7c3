"""Repository for workspaces, their members, projects and workflow stages."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from taskly.database.models import (
    ProjectClientDB,
    ProjectDB,
    TaskStageDB,
    WorkspaceDB,
    WorkspaceMemberDB,
)

logger = logging.getLogger(__name__)


class WorkspaceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, workspace_id: int) -> Optional[WorkspaceDB]:
        return self.db.query(WorkspaceDB).filter(WorkspaceDB.id == workspace_id).first()

    def first_stage(self, workspace_id: int) -> Optional[TaskStageDB]:
        """The stage new tasks start in: lowest `order`, then lowest id."""
        return (
            self.db.query(TaskStageDB)
            .filter(TaskStageDB.workspace_id == workspace_id)
            .order_by(TaskStageDB.order, TaskStageDB.id)
            .first()
        )

    def has_member(self, workspace_id: int, user_id: int) -> bool:
        row = (
            self.db.query(WorkspaceMemberDB.id)
            .filter(WorkspaceMemberDB.workspace_id == workspace_id, WorkspaceMemberDB.user_id == user_id)
            .first()
        )
        return row is not None

    def first_workspace_of(self, user_id: int) -> Optional[int]:
        row = (
            self.db.query(WorkspaceMemberDB.workspace_id)
            .filter(WorkspaceMemberDB.user_id == user_id)
            .order_by(WorkspaceMemberDB.id)
            .first()
        )
        return row[0] if row else None

    def add_member(self, workspace_id: int, user_id: int, *, role: str, status: str = "active") -> WorkspaceMemberDB:
        row = WorkspaceMemberDB(
            workspace_id=workspace_id,
            user_id=user_id,
            role=role,
            status=status,
            joined_at=datetime.utcnow(),
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Added user {user_id} to workspace {workspace_id} as {role}")
            return row
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to add user {user_id} to workspace {workspace_id}: {type(e).__name__}: {str(e)}"
            )
            raise


class ProjectRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, project_id: int) -> Optional[ProjectDB]:
        return self.db.query(ProjectDB).filter(ProjectDB.id == project_id).first()

    def list_all(self) -> List[ProjectDB]:
        return self.db.query(ProjectDB).order_by(ProjectDB.id).all()

    def find_by_store_name(self, workspace_id: int, store_name: str, suffix: str) -> Optional[ProjectDB]:
        """Resolve a branch/store value to a project of the workspace.

        Matches the project named exactly "<store> <suffix>" or any project
        whose name contains the store value. Exact matches win.
        """
        name = (store_name or "").strip()
        if not name:
            return None
        exact = f"{name} {suffix}"
        candidates = (
            self.db.query(ProjectDB)
            .filter(
                ProjectDB.workspace_id == workspace_id,
                or_(ProjectDB.name == exact, ProjectDB.name.contains(name, autoescape=True)),
            )
            .order_by(ProjectDB.id)
            .all()
        )
        for project in candidates:
            if project.name == exact:
                return project
        return candidates[0] if candidates else None

    def has_client(self, project_id: int, user_id: int) -> bool:
        row = (
            self.db.query(ProjectClientDB.id)
            .filter(ProjectClientDB.project_id == project_id, ProjectClientDB.user_id == user_id)
            .first()
        )
        return row is not None

    def attach_client(self, project_id: int, user_id: int, *, assigned_by: Optional[int]) -> ProjectClientDB:
        row = ProjectClientDB(
            project_id=project_id,
            user_id=user_id,
            assigned_at=datetime.utcnow(),
            assigned_by=assigned_by,
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return row
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to attach client {user_id} to project {project_id}: {type(e).__name__}: {str(e)}"
            )
            raise
