"""Repository for equipment maintenance schedules."""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from taskly.database.models import EquipmentDB, EquipmentScheduleDB, ServiceTypeDB
from taskly.models.schedule import Schedule, compute_next_service_date, compute_task_due_date

logger = logging.getLogger(__name__)


class ScheduleRepository:
    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return (
            self.db.query(EquipmentScheduleDB, EquipmentDB, ServiceTypeDB)
            .join(EquipmentDB, EquipmentDB.id == EquipmentScheduleDB.equipment_id)
            .join(ServiceTypeDB, ServiceTypeDB.id == EquipmentScheduleDB.service_type_id)
        )

    @staticmethod
    def _to_schedule(row: EquipmentScheduleDB, equipment: EquipmentDB, service_type: ServiceTypeDB) -> Schedule:
        return Schedule(
            id=row.id,
            equipment_id=row.equipment_id,
            service_type_id=row.service_type_id,
            interval_days=row.interval_days,
            advance_days=row.advance_days,
            last_service_date=row.last_service_date,
            equipment_name=equipment.name,
            service_type_name=service_type.name,
            workspace_id=equipment.workspace_id,
            project_id=equipment.project_id,
            equipment_created_by=equipment.created_by,
        )

    @staticmethod
    def _recompute(row: EquipmentScheduleDB) -> None:
        row.next_service_date = compute_next_service_date(row.last_service_date, row.interval_days)
        row.task_due_date = compute_task_due_date(row.next_service_date, row.advance_days)

    def create(
        self,
        *,
        equipment_id: int,
        service_type_id: int,
        interval_days: int,
        advance_days: int = 0,
        last_service_date: Optional[date] = None,
    ) -> Schedule:
        if interval_days < 1:
            raise ValueError("interval_days must be >= 1")
        if advance_days < 0:
            raise ValueError("advance_days must be >= 0")
        row = EquipmentScheduleDB(
            equipment_id=equipment_id,
            service_type_id=service_type_id,
            interval_days=int(interval_days),
            advance_days=int(advance_days),
            last_service_date=last_service_date,
        )
        self._recompute(row)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create equipment schedule: {type(e).__name__}: {str(e)}")
            raise
        return self.get(row.id)

    def get(self, schedule_id: int) -> Optional[Schedule]:
        found = self._base_query().filter(EquipmentScheduleDB.id == schedule_id).first()
        return self._to_schedule(*found) if found else None

    def list_all(self) -> List[Schedule]:
        rows = self._base_query().order_by(EquipmentScheduleDB.id).all()
        return [self._to_schedule(*r) for r in rows]

    def find_due_candidates(self, as_of: date) -> List[Schedule]:
        """Schedules whose task due date is on or before `as_of`."""
        rows = (
            self._base_query()
            .filter(
                EquipmentScheduleDB.task_due_date.isnot(None),
                EquipmentScheduleDB.task_due_date <= as_of,
            )
            .order_by(EquipmentScheduleDB.id)
            .all()
        )
        return [self._to_schedule(*r) for r in rows]

    def update_last_service_date(self, schedule_id: int, last_service_date: date) -> Optional[Schedule]:
        """Record a completed service and roll the derived dates forward."""
        row = self.db.query(EquipmentScheduleDB).filter(EquipmentScheduleDB.id == schedule_id).first()
        if row is None:
            return None
        row.last_service_date = last_service_date
        self._recompute(row)
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update equipment schedule {schedule_id}: {type(e).__name__}: {str(e)}")
            raise
        return self.get(schedule_id)
