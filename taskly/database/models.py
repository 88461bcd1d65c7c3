"""SQLAlchemy database models for taskly."""

from datetime import datetime
from typing import Union, TypeVar, Type
from sqlalchemy import (
    Column,
    String,
    Integer,
    Date,
    DateTime,
    Numeric,
    Text,
    ForeignKey,
    UniqueConstraint,
)

from taskly.database.database import Base
from taskly.models.task import TaskPriority

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default."""
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class WorkspaceDB(Base):
    """Tenant container for projects and members."""

    __tablename__ = "workspaces"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True)
    type = Column(String, nullable=False, default="company")
    status = Column(String, nullable=False, default="active")
    current_workspace_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class WorkspaceMemberDB(Base):
    """Membership of a user in a workspace.

    At most one row per (workspace, user) is expected; this is enforced by an
    existence check in the repository, not by a constraint.
    """

    __tablename__ = "workspace_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False, default="member")
    status = Column(String, nullable=False, default="active")
    joined_at = Column(DateTime, nullable=True)


class ProjectDB(Base):
    """Database model for Project."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class ProjectClientDB(Base):
    """Client users attached to a project."""

    __tablename__ = "project_clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    assigned_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)


class TaskStageDB(Base):
    """Workflow stage (kanban column) of a workspace."""

    __tablename__ = "task_stages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    order = Column(Integer, nullable=False, default=0)


class EquipmentDB(Base):
    """A piece of equipment that receives recurring maintenance."""

    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class ServiceTypeDB(Base):
    """Kind of maintenance performed (e.g. filter change, inspection)."""

    __tablename__ = "service_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)


class EquipmentScheduleDB(Base):
    """Recurring maintenance cadence for a piece of equipment.

    `next_service_date` and `task_due_date` are derived from the other columns
    and are recomputed by ScheduleRepository on every write.
    """

    __tablename__ = "equipment_schedules"
    __table_args__ = (
        UniqueConstraint("equipment_id", "service_type_id", name="uq_equipment_schedule_service"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False, index=True)
    service_type_id = Column(Integer, ForeignKey("service_types.id", ondelete="CASCADE"), nullable=False)

    interval_days = Column(Integer, nullable=False)
    advance_days = Column(Integer, nullable=False, default=0)
    last_service_date = Column(Date, nullable=True)
    next_service_date = Column(Date, nullable=True)
    task_due_date = Column(Date, nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    task_stage_id = Column(Integer, ForeignKey("task_stages.id", ondelete="SET NULL"), nullable=True)

    # Maintenance linkage (optional)
    equipment_id = Column(Integer, ForeignKey("equipment.id", ondelete="SET NULL"), nullable=True, index=True)
    equipment_schedule_id = Column(
        Integer, ForeignKey("equipment_schedules.id", ondelete="SET NULL"), nullable=True, index=True
    )

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)

    start_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    progress = Column(Integer, nullable=False, default=0)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # "<spreadsheet_id>|<sheet>|<row>" for tasks imported from Google Sheets
    google_sheet_sync_key = Column(String, nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskly.models.task import Task

        return Task(
            id=self.id,
            project_id=self.project_id,
            task_stage_id=self.task_stage_id,
            equipment_id=self.equipment_id,
            equipment_schedule_id=self.equipment_schedule_id,
            title=self.title,
            description=self.description,
            priority=value_to_enum(self.priority, TaskPriority, TaskPriority.MEDIUM),
            start_date=self.start_date,
            due_date=self.due_date,
            end_date=self.end_date,
            progress=self.progress,
            created_by=self.created_by,
            google_sheet_sync_key=self.google_sheet_sync_key,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            project_id=task.project_id,
            task_stage_id=task.task_stage_id,
            equipment_id=task.equipment_id,
            equipment_schedule_id=task.equipment_schedule_id,
            title=task.title,
            description=task.description,
            priority=enum_to_value(task.priority),
            start_date=task.start_date,
            due_date=task.due_date,
            end_date=task.end_date,
            progress=task.progress,
            created_by=task.created_by,
            google_sheet_sync_key=task.google_sheet_sync_key,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class InvoiceDB(Base):
    """Database model for Invoice."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    invoice_number = Column(String, nullable=False, unique=True)
    invoice_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="draft")
    approved_at = Column(DateTime, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class InvoiceItemDB(Base):
    """Invoice line item; `type` is 'asset' or 'service'."""

    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False, default="service")
    description = Column(String, nullable=True)
    asset_name = Column(String, nullable=True)
    asset_category_id = Column(Integer, nullable=True)
    amount = Column(Numeric(15, 2), nullable=False, default=0)
    sort_order = Column(Integer, nullable=False, default=0)
    asset_id = Column(Integer, ForeignKey("assets.id", ondelete="SET NULL"), nullable=True, index=True)


class AssetDB(Base):
    """Database model for Asset."""

    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True)
    asset_category_id = Column(Integer, nullable=True)
    name = Column(String, nullable=False)
    asset_code = Column(String, nullable=True, index=True)
    location = Column(String, nullable=True)
    purchase_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="active")
    value = Column(Numeric(15, 2), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class SettingDB(Base):
    """Key/value setting, global (scope NULL) or scoped to a workspace."""

    __tablename__ = "settings"
    __table_args__ = (
        UniqueConstraint("key", "scope", name="uq_setting_key_scope"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String, nullable=False, index=True)
    value = Column(Text, nullable=True)
    scope = Column(String, nullable=True)

    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
