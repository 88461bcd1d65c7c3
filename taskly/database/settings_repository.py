"""Key/value settings store.

Jobs receive a SettingsStore instead of writing settings through a global
helper; `scope` is a workspace id, or None for global settings.
"""

import logging
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from taskly.database.models import SettingDB

logger = logging.getLogger(__name__)

Scope = Optional[Union[int, str]]


def _scope_value(scope: Scope) -> Optional[str]:
    return None if scope is None else str(scope)


class SettingsStore:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, key: str, scope: Scope) -> Optional[SettingDB]:
        query = self.db.query(SettingDB).filter(SettingDB.key == key)
        scope_value = _scope_value(scope)
        if scope_value is None:
            query = query.filter(SettingDB.scope.is_(None))
        else:
            query = query.filter(SettingDB.scope == scope_value)
        return query.first()

    def get(self, key: str, scope: Scope = None, default: Optional[str] = None) -> Optional[str]:
        row = self._find(key, scope)
        return row.value if row is not None else default

    def set(self, key: str, value: Optional[str], scope: Scope = None) -> None:
        """Insert or overwrite a setting."""
        row = self._find(key, scope)
        if row is None:
            row = SettingDB(key=key, value=value, scope=_scope_value(scope))
            self.db.add(row)
        else:
            row.value = value
            row.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save setting {key} (scope={scope}): {type(e).__name__}: {str(e)}")
            raise
