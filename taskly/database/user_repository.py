"""Repository for User database operations."""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from taskly.database.models import UserDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[UserDB]:
        """Get user by ID."""
        return self.db.query(UserDB).filter(UserDB.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[UserDB]:
        """Get user by email."""
        return self.db.query(UserDB).filter(UserDB.email == email).first()

    def get_or_create(self, email: str, *, name: str, user_type: str) -> UserDB:
        """Return the user with this email, creating an active one if absent."""
        user_db = self.get_by_email(email)
        if user_db:
            return user_db
        user_db = UserDB(email=email, name=name, type=user_type, status="active")
        try:
            self.db.add(user_db)
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Created user {user_db.id}: {email}")
            return user_db
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user {email}: {type(e).__name__}: {str(e)}")
            raise

    def activate(self, user_id: int, *, current_workspace_id: Optional[int]) -> Optional[UserDB]:
        """Mark the user active and set a current workspace if none is set."""
        user_db = self.get(user_id)
        if user_db is None:
            return None
        user_db.status = "active"
        if not user_db.current_workspace_id:
            user_db.current_workspace_id = current_workspace_id
        user_db.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(user_db)
            return user_db
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update user {user_id}: {type(e).__name__}: {str(e)}")
            raise
