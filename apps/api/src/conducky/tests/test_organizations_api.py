import uuid

from conducky.db.models.audit import AuditLog
from conducky.db.models.user_role import UserRole
from conducky.domain.enums import AuditAction, RoleName, ScopeType


class TestCreateOrganization:
    def test_creator_becomes_org_admin(self, client, auth_header, system_admin, db):
        r = client.post(
            "/api/v1/organizations",
            json={"name": "PSF", "slug": "psf", "description": "Foundation"},
            headers=auth_header,
        )
        assert r.status_code == 201
        org_id = r.json()["id"]

        roles = client.get("/api/v1/auth/me/roles", headers=auth_header).json()
        assert roles["organizations"] == {org_id: ["org_admin"]}
        assert (
            db.query(AuditLog).filter(AuditLog.action == AuditAction.organization_created).count()
            == 1
        )

    def test_non_admin_forbidden(self, client, make_user, headers_for):
        user = make_user("u@test.local")
        r = client.post(
            "/api/v1/organizations", json={"name": "X", "slug": "x"}, headers=headers_for(user)
        )
        assert r.status_code == 403

    def test_duplicate_slug(self, client, auth_header, org):
        r = client.post(
            "/api/v1/organizations", json={"name": "X", "slug": "test-org"}, headers=auth_header
        )
        assert r.status_code == 409


class TestOrganizationGuards:
    def test_missing_org_is_404_before_403(self, client, make_user, headers_for):
        user = make_user("u@test.local")
        r = client.get("/api/v1/organizations/ghost-org", headers=headers_for(user))
        assert r.status_code == 404
        assert r.json()["detail"] == "Organization not found"

    def test_org_viewer_reads(self, client, make_user, grant, headers_for, org):
        user = make_user("u@test.local")
        grant(user, RoleName.org_viewer, ScopeType.organization, org.id)
        r = client.get("/api/v1/organizations/test-org", headers=headers_for(user))
        assert r.status_code == 200
        assert r.json()["slug"] == "test-org"

    def test_event_admin_does_not_pass_org_gate(
        self, client, make_user, grant, headers_for, org, event
    ):
        user = make_user("u@test.local")
        grant(user, RoleName.event_admin, ScopeType.event, event.id)
        r = client.get("/api/v1/organizations/test-org", headers=headers_for(user))
        assert r.status_code == 403

    def test_org_viewer_cannot_grant(self, client, make_user, grant, headers_for, org):
        user = make_user("u@test.local")
        grant(user, RoleName.org_viewer, ScopeType.organization, org.id)
        r = client.post(
            "/api/v1/organizations/test-org/roles",
            json={"user_id": str(user.id), "role": "org_admin"},
            headers=headers_for(user),
        )
        assert r.status_code == 403

    def test_system_admin_passes_org_admin_gate(self, client, auth_header, org):
        r = client.get("/api/v1/organizations/test-org/invites", headers=auth_header)
        assert r.status_code == 200


class TestMembers:
    def test_grant_list_revoke(self, client, auth_header, make_user, org):
        member = make_user("m@test.local", "Member")
        r = client.post(
            "/api/v1/organizations/test-org/roles",
            json={"user_id": str(member.id), "role": "org_viewer"},
            headers=auth_header,
        )
        assert r.status_code == 201

        users = client.get("/api/v1/organizations/test-org/users", headers=auth_header).json()
        assert users["users"][0]["roles"] == ["org_viewer"]

        r = client.delete(
            f"/api/v1/organizations/test-org/users/{member.id}/roles/org_viewer",
            headers=auth_header,
        )
        assert r.status_code == 204
        r = client.delete(
            f"/api/v1/organizations/test-org/users/{member.id}/roles/org_viewer",
            headers=auth_header,
        )
        assert r.status_code == 404

    def test_event_role_at_org_rejected(self, client, auth_header, make_user, org):
        member = make_user("m@test.local")
        r = client.post(
            "/api/v1/organizations/test-org/roles",
            json={"user_id": str(member.id), "role": "responder"},
            headers=auth_header,
        )
        assert r.status_code == 400

    def test_remove_member(self, client, auth_header, make_user, grant, org):
        member = make_user("m@test.local")
        grant(member, RoleName.org_admin, ScopeType.organization, org.id)
        r = client.delete(f"/api/v1/organizations/test-org/users/{member.id}", headers=auth_header)
        assert r.status_code == 200
        assert r.json() == {"revoked": ["org_admin"]}

    def test_remove_non_member(self, client, auth_header, org):
        r = client.delete(
            f"/api/v1/organizations/test-org/users/{uuid.uuid4()}", headers=auth_header
        )
        assert r.status_code == 404


class TestOrganizationEvents:
    def test_org_admin_creates_event(self, client, make_user, grant, headers_for, org):
        user = make_user("u@test.local")
        grant(user, RoleName.org_admin, ScopeType.organization, org.id)
        r = client.post(
            "/api/v1/organizations/test-org/events",
            json={"name": "Sprint", "slug": "sprint"},
            headers=headers_for(user),
        )
        assert r.status_code == 201
        assert r.json()["organization_id"] == str(org.id)

        roles = client.get("/api/v1/events/sprint/my-roles", headers=headers_for(user)).json()
        assert roles == {"roles": ["event_admin"]}


class TestDeleteOrganization:
    def test_refused_while_events_exist(self, client, auth_header, event):
        r = client.delete("/api/v1/organizations/test-org", headers=auth_header)
        assert r.status_code == 409

    def test_delete_cascades_assignments(self, client, auth_header, make_user, grant, org, db):
        member = make_user("m@test.local")
        grant(member, RoleName.org_viewer, ScopeType.organization, org.id)

        r = client.delete("/api/v1/organizations/test-org", headers=auth_header)
        assert r.status_code == 204
        assert (
            db.query(UserRole).filter(UserRole.scope_type == ScopeType.organization).count() == 0
        )

    def test_org_admin_cannot_delete(self, client, make_user, grant, headers_for, org):
        user = make_user("u@test.local")
        grant(user, RoleName.org_admin, ScopeType.organization, org.id)
        r = client.delete("/api/v1/organizations/test-org", headers=headers_for(user))
        assert r.status_code == 403
