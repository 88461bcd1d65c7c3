"""Tests for attaching the demo client to every project."""

from taskly.database.models import ProjectClientDB, ProjectDB, UserDB, WorkspaceDB, WorkspaceMemberDB
from taskly.engine.demo_client import DemoClientProvisioner


def _demo_user(db_session):
    return db_session.query(UserDB).filter(UserDB.email == "demo@demo.ge").one()


class TestDemoClientProvisioner:
    def test_attaches_client_to_every_project(self, db_session, workspace, project, owner):
        second = ProjectDB(workspace_id=workspace.id, name="Warehouse")
        db_session.add(second)
        db_session.commit()

        result = DemoClientProvisioner(db_session).run()

        assert result.created == 2
        assert result.linked == 1
        assert result.errors == []
        demo = _demo_user(db_session)
        assert demo.type == "client"
        assert demo.status == "active"
        assert demo.current_workspace_id == workspace.id
        links = db_session.query(ProjectClientDB).order_by(ProjectClientDB.project_id).all()
        assert [(l.project_id, l.assigned_by) for l in links] == [(project.id, owner.id), (second.id, owner.id)]
        members = db_session.query(WorkspaceMemberDB).filter(WorkspaceMemberDB.user_id == demo.id).all()
        assert [(m.workspace_id, m.role) for m in members] == [(workspace.id, "client")]

    def test_rerun_changes_nothing(self, db_session, workspace, project):
        provisioner = DemoClientProvisioner(db_session)
        provisioner.run()

        second = provisioner.run()

        assert second.created == 0
        assert second.linked == 0
        assert second.skipped == 1
        assert db_session.query(ProjectClientDB).count() == 1
        assert db_session.query(WorkspaceMemberDB).count() == 1

    def test_reuses_existing_user(self, db_session, workspace, project):
        existing = UserDB(email="demo@demo.ge", name="Already here", type="client", status="pending")
        db_session.add(existing)
        db_session.commit()

        DemoClientProvisioner(db_session).run()

        assert db_session.query(UserDB).filter(UserDB.email == "demo@demo.ge").count() == 1
        demo = _demo_user(db_session)
        assert demo.name == "Already here"
        assert demo.status == "active"

    def test_custom_email_and_name(self, db_session, workspace, project):
        DemoClientProvisioner(db_session).run(email="client@example.com", name="Client Co")

        user = db_session.query(UserDB).filter(UserDB.email == "client@example.com").one()
        assert user.name == "Client Co"

    def test_project_without_creator_or_owner_is_reported(self, db_session):
        orphan_ws = WorkspaceDB(name="Orphan", owner_id=None)
        db_session.add(orphan_ws)
        db_session.commit()
        orphan = ProjectDB(workspace_id=orphan_ws.id, name="Nobody's")
        db_session.add(orphan)
        db_session.commit()

        result = DemoClientProvisioner(db_session).run()

        assert result.created == 0
        assert result.errors == [
            f"Project {orphan.id}: no creator or workspace owner to assign from, skipped."
        ]
        assert db_session.query(ProjectClientDB).count() == 0
        # Membership is still granted.
        assert result.linked == 1

    def test_project_creator_is_preferred_assigner(self, db_session, workspace, technician):
        p = ProjectDB(workspace_id=workspace.id, name="Site", created_by=technician.id)
        db_session.add(p)
        db_session.commit()

        DemoClientProvisioner(db_session).run()

        link = db_session.query(ProjectClientDB).one()
        assert link.assigned_by == technician.id
