from datetime import timedelta

import pytest

from mbo_platform.tests.utils import auth_headers, make_token


def _user_payload(**overrides):
    payload = {
        "email": "giulia.verdi@acme.it",
        "first_name": "Giulia",
        "last_name": "Verdi",
        "department": "Finance",
        "ral": 42000,
        "mbo_percentage": 15,
    }
    payload.update(overrides)
    return payload


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/auth/user")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_invalid_and_expired_tokens_are_unauthorized(client, employee):
    invalid = client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-jwt"})
    expired = client.get(
        "/api/auth/user",
        headers={"Authorization": f"Bearer {make_token(employee.id, expires_in=timedelta(minutes=-5))}"},
    )
    assert invalid.status_code == 401
    assert expired.status_code == 401
    assert expired.json()["detail"] == "Token expirado"


def test_unknown_user_is_unauthorized(client):
    response = client.get("/api/auth/user", headers={"Authorization": f"Bearer {make_token(4242)}"})
    assert response.status_code == 401


def test_inactive_user_is_forbidden(client, make_user):
    user = make_user(is_active=False)
    response = client.get("/api/auth/user", headers=auth_headers(user))
    assert response.status_code == 403


def test_current_user_profile(client, employee):
    response = client.get("/api/auth/user", headers=auth_headers(employee))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == "mario.rossi@acme.it"
    assert data["mbo_target"] == 5000
    assert data["mbo_regulation_accepted_at"] is None


def test_current_user_profile_lists_role_permissions(client, employee):
    response = client.get("/api/auth/user", headers=auth_headers(employee))

    permissions = response.json()["metadata"]["permissions"]
    assert "profile:update" in permissions
    assert "users:manage" not in permissions
    assert permissions == sorted(permissions)


def test_employee_updates_own_profile(client, db, employee):
    response = client.post(
        "/api/auth/profile",
        json={"phone": "+39 02 1234567", "city": "Milano", "role": "admin", "ral": 90000},
        headers=auth_headers(employee),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["phone"] == "+39 02 1234567"
    assert data["city"] == "Milano"
    db.refresh(employee)
    assert employee.role == "employee"
    assert employee.ral == 50000


def test_profile_names_cannot_be_cleared(client, employee):
    response = client.post("/api/auth/profile", json={"last_name": None}, headers=auth_headers(employee))

    assert response.status_code == 400
    assert response.json()["metadata"]["errors"][0]["field"] == "last_name"


def test_admin_creates_user(client, admin):
    response = client.post("/api/users", json=_user_payload(), headers=auth_headers(admin))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["full_name"] == "Giulia Verdi"
    assert data["role"] == "employee"
    assert data["mbo_target"] == pytest.approx(6300)


def test_duplicate_email_conflicts(client, admin, employee):
    response = client.post(
        "/api/users",
        json=_user_payload(email="mario.rossi@acme.it"),
        headers=auth_headers(admin),
    )
    assert response.status_code == 409


def test_mbo_percentage_and_ral_are_validated(client, admin):
    bad_percentage = client.post("/api/users", json=_user_payload(mbo_percentage=12), headers=auth_headers(admin))
    over_hundred = client.post("/api/users", json=_user_payload(mbo_percentage=105), headers=auth_headers(admin))
    negative_ral = client.post("/api/users", json=_user_payload(ral=-1), headers=auth_headers(admin))

    assert bad_percentage.status_code == 400
    assert bad_percentage.json()["metadata"]["errors"][0]["field"] == "mbo_percentage"
    assert over_hundred.status_code == 400
    assert negative_ral.status_code == 400


def test_employee_cannot_manage_users(client, employee):
    assert client.get("/api/users", headers=auth_headers(employee)).status_code == 403
    assert client.post("/api/users", json=_user_payload(), headers=auth_headers(employee)).status_code == 403


def test_list_users_with_filters(client, admin, employee, make_user):
    make_user(department="Marketing", last_name="Colombo")

    response = client.get("/api/users", params={"department": "Sales"}, headers=auth_headers(admin))

    body = response.json()
    assert response.status_code == 200
    assert body["total"] == 1
    assert body["data"][0]["id"] == employee.id
    assert body["metadata"]["filters"] == {"department": "Sales"}

    search = client.get("/api/users", params={"search": "colom"}, headers=auth_headers(admin))
    assert search.json()["total"] == 1


def test_update_user(client, admin, employee):
    response = client.patch(
        f"/api/users/{employee.id}",
        json={"mbo_percentage": 20, "department": "Operations"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["mbo_percentage"] == 20
    assert data["department"] == "Operations"
    assert data["mbo_target"] == 10000


def test_manager_cannot_be_self(client, admin, employee):
    response = client.patch(
        f"/api/users/{employee.id}",
        json={"manager_id": employee.id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert response.json()["metadata"]["errors"][0]["field"] == "manager_id"


def test_manager_cycle_is_rejected(client, admin, make_user):
    boss = make_user()
    middle = make_user(manager_id=boss.id)
    report = make_user(manager_id=middle.id)

    response = client.patch(
        f"/api/users/{boss.id}",
        json={"manager_id": report.id},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert "ciclo" in response.json()["detail"]


def test_unknown_manager_is_not_found(client, admin, employee):
    response = client.patch(
        f"/api/users/{employee.id}",
        json={"manager_id": 999},
        headers=auth_headers(admin),
    )
    assert response.status_code == 404


def test_create_user_with_manager(client, admin, employee):
    response = client.post(
        "/api/users",
        json=_user_payload(manager_id=employee.id),
        headers=auth_headers(admin),
    )
    assert response.status_code == 201
    assert response.json()["data"]["manager_id"] == employee.id


def test_delete_user_deactivates(client, db, admin, employee):
    response = client.delete(f"/api/users/{employee.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    db.refresh(employee)
    assert employee.is_active is False
    assert client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin)).status_code == 400


def test_read_unknown_user(client, admin):
    assert client.get("/api/users/999", headers=auth_headers(admin)).status_code == 404
