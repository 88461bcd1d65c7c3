"""Pytest fixtures and configuration for taskly tests."""

import pytest
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from taskly.database.database import Base
from taskly.database.models import (
    EquipmentDB,
    InvoiceDB,
    InvoiceItemDB,
    ProjectDB,
    ServiceTypeDB,
    TaskStageDB,
    UserDB,
    WorkspaceDB,
)
from taskly.database.repository import TaskRepository
from taskly.database.schedule_repository import ScheduleRepository


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from sqlalchemy import event
    from sqlalchemy.engine import Engine

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(Engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def schedule_repository(db_session: Session):
    return ScheduleRepository(db_session)


@pytest.fixture
def owner(db_session: Session):
    """Workspace owner user."""
    user = UserDB(email="owner@example.com", name="Owner", type="company", status="active")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def workspace(db_session: Session, owner):
    ws = WorkspaceDB(name="Main Workspace", owner_id=owner.id)
    db_session.add(ws)
    db_session.commit()
    return ws


@pytest.fixture
def stage(db_session: Session, workspace):
    """First (lowest order) task stage of the workspace."""
    later = TaskStageDB(workspace_id=workspace.id, name="Done", order=2)
    first = TaskStageDB(workspace_id=workspace.id, name="To Do", order=0)
    db_session.add_all([later, first])
    db_session.commit()
    return first


@pytest.fixture
def project(db_session: Session, workspace, owner):
    p = ProjectDB(workspace_id=workspace.id, name="Head Office", address="1 Rustaveli Ave", created_by=owner.id)
    db_session.add(p)
    db_session.commit()
    return p


@pytest.fixture
def technician(db_session: Session):
    user = UserDB(email="tech@example.com", name="Technician", type="company", status="active")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def equipment(db_session: Session, workspace, project, technician):
    eq = EquipmentDB(workspace_id=workspace.id, project_id=project.id, name="Boiler A", created_by=technician.id)
    db_session.add(eq)
    db_session.commit()
    return eq


@pytest.fixture
def service_type(db_session: Session, workspace):
    st = ServiceTypeDB(workspace_id=workspace.id, name="Filter change")
    db_session.add(st)
    db_session.commit()
    return st


@pytest.fixture
def make_schedule(schedule_repository, equipment, service_type):
    """Factory for schedules on the default equipment/service type."""

    def _make(interval_days=30, advance_days=7, last_service_date=date(2024, 1, 1), **overrides):
        return schedule_repository.create(
            equipment_id=overrides.get("equipment_id", equipment.id),
            service_type_id=overrides.get("service_type_id", service_type.id),
            interval_days=interval_days,
            advance_days=advance_days,
            last_service_date=last_service_date,
        )

    return _make


@pytest.fixture
def paid_invoice(db_session: Session, workspace, project, owner):
    invoice = InvoiceDB(
        workspace_id=workspace.id,
        project_id=project.id,
        invoice_number="INV-0001",
        invoice_date=date(2024, 3, 15),
        status="paid",
        approved_at=datetime(2024, 3, 16, 9, 0),
        created_by=owner.id,
    )
    db_session.add(invoice)
    db_session.commit()
    return invoice


@pytest.fixture
def add_items(db_session: Session):
    """Factory adding invoice items; names given in sort order."""

    def _add(invoice, names, item_type="asset"):
        items = []
        for i, name in enumerate(names):
            item = InvoiceItemDB(
                invoice_id=invoice.id,
                type=item_type,
                description=name,
                asset_name=name,
                amount=Decimal("100.00") * (i + 1),
                sort_order=i,
            )
            db_session.add(item)
            items.append(item)
        db_session.commit()
        return items

    return _add
