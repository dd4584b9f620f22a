import uuid

from conducky.db.models.audit import AuditLog
from conducky.db.models.user_role import UserRole
from conducky.domain.enums import AuditAction, RoleName, ScopeType


class TestCreateEvent:
    def test_system_admin_creates_and_becomes_event_admin(self, client, auth_header, db):
        body = {"name": "PyCon", "slug": "pycon-2026"}
        r = client.post("/api/v1/events", json=body, headers=auth_header)
        assert r.status_code == 201
        data = r.json()
        assert data["slug"] == "pycon-2026"
        assert data["organization_id"] is None

        my = client.get("/api/v1/events/pycon-2026/my-roles", headers=auth_header)
        assert my.json() == {"roles": ["event_admin"]}

    def test_bad_slug(self, client, auth_header):
        r = client.post(
            "/api/v1/events", json={"name": "X", "slug": "Bad Slug"}, headers=auth_header
        )
        assert r.status_code == 400

    def test_duplicate_slug(self, client, auth_header, event):
        r = client.post(
            "/api/v1/events", json={"name": "X", "slug": "test-conf"}, headers=auth_header
        )
        assert r.status_code == 409

    def test_unknown_organization(self, client, auth_header):
        body = {"name": "X", "slug": "x", "organization_id": str(uuid.uuid4())}
        r = client.post("/api/v1/events", json=body, headers=auth_header)
        assert r.status_code == 404

    def test_non_admin_forbidden(self, client, make_user, headers_for):
        user = make_user("u@test.local")
        r = client.post(
            "/api/v1/events", json={"name": "X", "slug": "x"}, headers=headers_for(user)
        )
        assert r.status_code == 403
        assert r.json() == {"detail": "Insufficient permissions"}


class TestEventGuards:
    def test_requires_auth(self, client, event):
        r = client.get("/api/v1/events/test-conf")
        assert r.status_code == 401

    def test_missing_event_is_404_before_403(self, client, make_user, headers_for):
        user = make_user("u@test.local")
        r = client.get("/api/v1/events/no-such-event", headers=headers_for(user))
        assert r.status_code == 404
        assert r.json()["detail"] == "Event not found"

    def test_no_role_is_403(self, client, make_user, headers_for, event):
        user = make_user("u@test.local")
        r = client.get("/api/v1/events/test-conf", headers=headers_for(user))
        assert r.status_code == 403
        assert "reporter" not in r.text

    def test_reporter_reads_by_slug_and_id(self, client, make_user, grant, headers_for, event):
        user = make_user("u@test.local")
        grant(user, RoleName.reporter, ScopeType.event, event.id)
        for ref in ("test-conf", str(event.id)):
            r = client.get(f"/api/v1/events/{ref}", headers=headers_for(user))
            assert r.status_code == 200
            assert r.json()["id"] == str(event.id)

    def test_org_admin_inherits_event_admin(self, client, make_user, grant, headers_for, org, event):
        user = make_user("u@test.local")
        target = make_user("t@test.local")
        grant(user, RoleName.org_admin, ScopeType.organization, org.id)
        r = client.post(
            "/api/v1/events/test-conf/roles",
            json={"user_id": str(target.id), "role": "responder"},
            headers=headers_for(user),
        )
        assert r.status_code == 201

    def test_org_viewer_cannot_read_event(self, client, make_user, grant, headers_for, org, event):
        user = make_user("u@test.local")
        grant(user, RoleName.org_viewer, ScopeType.organization, org.id)
        r = client.get("/api/v1/events/test-conf", headers=headers_for(user))
        assert r.status_code == 403

    def test_reporter_cannot_grant(self, client, make_user, grant, headers_for, event):
        user = make_user("u@test.local")
        grant(user, RoleName.reporter, ScopeType.event, event.id)
        r = client.post(
            "/api/v1/events/test-conf/roles",
            json={"user_id": str(user.id), "role": "event_admin"},
            headers=headers_for(user),
        )
        assert r.status_code == 403

    def test_denial_audited_when_enabled(
        self, client, make_user, headers_for, event, db, monkeypatch
    ):
        from conducky.core.config import settings

        monkeypatch.setattr(settings, "AUDIT_ACCESS_DENIALS", True)
        user = make_user("u@test.local")
        r = client.get("/api/v1/events/test-conf", headers=headers_for(user))
        assert r.status_code == 403

        entry = db.query(AuditLog).filter(AuditLog.action == AuditAction.access_denied).one()
        assert entry.user_id == user.id
        assert entry.event_id == event.id
        assert entry.detail is None

    def test_denial_not_audited_by_default(self, client, make_user, headers_for, event, db):
        user = make_user("u@test.local")
        client.get("/api/v1/events/test-conf", headers=headers_for(user))
        assert db.query(AuditLog).filter(AuditLog.action == AuditAction.access_denied).count() == 0


class TestEventRoles:
    def test_grant_list_revoke(self, client, auth_header, make_user, event):
        target = make_user("t@test.local", "Target")
        r = client.post(
            "/api/v1/events/test-conf/roles",
            json={"user_id": str(target.id), "role": "responder"},
            headers=auth_header,
        )
        assert r.status_code == 201

        users = client.get("/api/v1/events/test-conf/users", headers=auth_header).json()["users"]
        assert users == [
            {"id": str(target.id), "email": "t@test.local", "name": "Target", "roles": ["responder"]}
        ]

        r = client.delete(
            f"/api/v1/events/test-conf/users/{target.id}/roles/responder", headers=auth_header
        )
        assert r.status_code == 204
        users = client.get("/api/v1/events/test-conf/users", headers=auth_header).json()["users"]
        assert users == []

    def test_grant_org_role_at_event_rejected(self, client, auth_header, make_user, event):
        target = make_user("t@test.local")
        r = client.post(
            "/api/v1/events/test-conf/roles",
            json={"user_id": str(target.id), "role": "org_admin"},
            headers=auth_header,
        )
        assert r.status_code == 400

    def test_grant_unknown_role(self, client, auth_header, make_user, event):
        target = make_user("t@test.local")
        r = client.post(
            "/api/v1/events/test-conf/roles",
            json={"user_id": str(target.id), "role": "janitor"},
            headers=auth_header,
        )
        assert r.status_code == 400

    def test_grant_unknown_user(self, client, auth_header, event):
        r = client.post(
            "/api/v1/events/test-conf/roles",
            json={"user_id": str(uuid.uuid4()), "role": "reporter"},
            headers=auth_header,
        )
        assert r.status_code == 400
        assert r.json()["detail"] == "User not found"

    def test_revoke_missing_assignment(self, client, auth_header, make_user, event):
        target = make_user("t@test.local")
        r = client.delete(
            f"/api/v1/events/test-conf/users/{target.id}/roles/reporter", headers=auth_header
        )
        assert r.status_code == 404

    def test_remove_user(self, client, auth_header, make_user, grant, event):
        target = make_user("t@test.local")
        grant(target, RoleName.responder, ScopeType.event, event.id)
        grant(target, RoleName.reporter, ScopeType.event, event.id)

        r = client.delete(f"/api/v1/events/test-conf/users/{target.id}", headers=auth_header)
        assert r.status_code == 200
        assert sorted(r.json()["revoked"]) == ["reporter", "responder"]


class TestDeleteEvent:
    def test_delete_cascades_assignments(self, client, auth_header, make_user, grant, event, db):
        target = make_user("t@test.local")
        grant(target, RoleName.responder, ScopeType.event, event.id)

        r = client.delete("/api/v1/events/test-conf", headers=auth_header)
        assert r.status_code == 204
        assert db.query(UserRole).filter(UserRole.scope_type == ScopeType.event).count() == 0
        assert client.get("/api/v1/events/test-conf", headers=auth_header).status_code == 404

    def test_event_admin_cannot_delete(self, client, make_user, grant, headers_for, event):
        user = make_user("u@test.local")
        grant(user, RoleName.event_admin, ScopeType.event, event.id)
        r = client.delete("/api/v1/events/test-conf", headers=headers_for(user))
        assert r.status_code == 403
