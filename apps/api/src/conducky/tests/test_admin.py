from conducky.domain.enums import RoleName, ScopeType


def test_grant_and_revoke_system_admin(client, auth_header, make_user, headers_for):
    user = make_user("u@test.local")
    r = client.post(
        "/api/v1/admin/roles",
        json={"user_id": str(user.id), "role": "system_admin"},
        headers=auth_header,
    )
    assert r.status_code == 201
    assert r.json()["scope_id"] == "SYSTEM"
    assert client.get("/api/v1/audit/system", headers=headers_for(user)).status_code == 200

    r = client.delete(f"/api/v1/admin/users/{user.id}/roles/system_admin", headers=auth_header)
    assert r.status_code == 204
    assert client.get("/api/v1/audit/system", headers=headers_for(user)).status_code == 403


def test_grant_non_system_role_rejected(client, auth_header, make_user):
    user = make_user("u@test.local")
    r = client.post(
        "/api/v1/admin/roles",
        json={"user_id": str(user.id), "role": "org_admin"},
        headers=auth_header,
    )
    assert r.status_code == 400


def test_user_roles_grouped(client, auth_header, make_user, grant, org, event):
    user = make_user("u@test.local")
    grant(user, RoleName.org_viewer, ScopeType.organization, org.id)
    grant(user, RoleName.responder, ScopeType.event, event.id)

    r = client.get(f"/api/v1/admin/users/{user.id}/roles", headers=auth_header)
    assert r.json() == {
        "system": [],
        "organizations": {str(org.id): ["org_viewer"]},
        "events": {str(event.id): ["responder"]},
    }


def test_requires_system_admin(client, make_user, grant, headers_for, org):
    user = make_user("u@test.local")
    grant(user, RoleName.org_admin, ScopeType.organization, org.id)
    r = client.post(
        "/api/v1/admin/roles",
        json={"user_id": str(user.id), "role": "system_admin"},
        headers=headers_for(user),
    )
    assert r.status_code == 403
