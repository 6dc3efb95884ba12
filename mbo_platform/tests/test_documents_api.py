import pytest

from mbo_platform.models import MboRegulationAcceptance
from mbo_platform.tests.utils import auth_headers


@pytest.fixture()
def policy(client, admin):
    response = client.post(
        "/api/documents",
        json={"title": "Regolamento MBO 2025", "doc_type": "regulation", "requires_acceptance": True},
        headers=auth_headers(admin),
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_admin_manages_documents(client, admin, policy):
    listed = client.get("/api/documents", headers=auth_headers(admin))
    assert [d["id"] for d in listed.json()["data"]] == [policy["id"]]

    updated = client.patch(
        f"/api/documents/{policy['id']}",
        json={"description": "Versione aggiornata", "title": None},
        headers=auth_headers(admin),
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["description"] == "Versione aggiornata"
    assert updated.json()["data"]["title"] == "Regolamento MBO 2025"

    deleted = client.delete(f"/api/documents/{policy['id']}", headers=auth_headers(admin))
    assert deleted.status_code == 200
    assert client.get(f"/api/documents/{policy['id']}", headers=auth_headers(admin)).status_code == 404


def test_employee_reads_but_cannot_manage_documents(client, employee, policy):
    assert client.get("/api/documents", headers=auth_headers(employee)).status_code == 200
    response = client.post("/api/documents", json={"title": "Abusivo"}, headers=auth_headers(employee))
    assert response.status_code == 403


def test_acceptance_is_idempotent(client, employee, policy):
    first = client.post("/api/acceptances", json={"document_id": policy["id"]}, headers=auth_headers(employee))
    second = client.post("/api/acceptances", json={"document_id": policy["id"]}, headers=auth_headers(employee))

    assert first.status_code == 201
    assert second.json()["data"]["id"] == first.json()["data"]["id"]

    mine = client.get("/api/my-acceptances", headers=auth_headers(employee))
    assert len(mine.json()["data"]) == 1


def test_acceptance_status(client, employee, policy):
    url = f"/api/acceptances/{policy['id']}/status"

    before = client.get(url, headers=auth_headers(employee)).json()["data"]
    client.post("/api/acceptances", json={"document_id": policy["id"]}, headers=auth_headers(employee))
    after = client.get(url, headers=auth_headers(employee)).json()["data"]

    assert before["accepted"] is False
    assert before["accepted_at"] is None
    assert after["accepted"] is True
    assert after["accepted_at"] is not None


def test_accepting_unknown_document(client, employee):
    response = client.post("/api/acceptances", json={"document_id": 999}, headers=auth_headers(employee))
    assert response.status_code == 404
    assert client.get("/api/acceptances/999/status", headers=auth_headers(employee)).status_code == 404


def test_mbo_regulation_is_accepted_once(client, db, employee):
    first = client.post("/api/accept-mbo-regulation", headers=auth_headers(employee))
    second = client.post("/api/accept-mbo-regulation", headers=auth_headers(employee))

    assert first.status_code == 200
    accepted_at = first.json()["data"]["mbo_regulation_accepted_at"]
    assert accepted_at is not None
    assert second.json()["data"]["mbo_regulation_accepted_at"] == accepted_at
    assert db.query(MboRegulationAcceptance).filter_by(user_id=employee.id).count() == 1

    profile = client.get("/api/auth/user", headers=auth_headers(employee))
    assert profile.json()["data"]["mbo_regulation_accepted_at"] is not None
