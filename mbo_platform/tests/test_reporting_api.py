from mbo_platform.tests.utils import auth_headers


def test_admin_reports_numeric_objective(client, db, admin, employee, make_dictionary, make_assignment):
    assignment = make_assignment(employee, make_dictionary())

    response = client.patch(
        f"/api/objectives/{assignment.objective_id}/report",
        json={"actual_value": 75000},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["multiplier"] == 0.5
    assert data["qualitative_result"] == "partial"
    assert data["actual_value"] == 75000
    assert data["is_reported"] is True
    db.refresh(assignment)
    assert assignment.progress == 50


def test_employee_reports_own_objective(client, db, employee, make_dictionary, make_assignment):
    assignment = make_assignment(employee, make_dictionary(target_value=100, threshold_value=None))

    response = client.patch(
        f"/api/objectives/{assignment.objective_id}/report",
        json={"actual_value": 100},
        headers=auth_headers(employee),
    )

    assert response.status_code == 200
    db.refresh(assignment)
    assert assignment.progress == 100
    assert assignment.multiplier == 1


def test_employee_cannot_report_someone_elses_objective(
    client, employee, make_user, make_dictionary, make_assignment
):
    other = make_user(department="Sales")
    assignment = make_assignment(other, make_dictionary())

    response = client.patch(
        f"/api/objectives/{assignment.objective_id}/report",
        json={"actual_value": 75000},
        headers=auth_headers(employee),
    )

    assert response.status_code == 403
    assert response.json()["success"] is False


def test_numeric_report_without_actual_value_changes_nothing(
    client, db, admin, employee, make_dictionary, make_assignment
):
    assignment = make_assignment(employee, make_dictionary(), progress=30)

    response = client.patch(
        f"/api/objectives/{assignment.objective_id}/report",
        json={},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    body = response.json()
    assert body["metadata"]["errors"][0]["field"] == "actual_value"
    db.refresh(assignment)
    assert assignment.progress == 30
    assert assignment.reported_at is None


def test_non_numeric_actual_value_is_a_validation_error(client, admin, employee, make_dictionary, make_assignment):
    assignment = make_assignment(employee, make_dictionary())

    response = client.patch(
        f"/api/objectives/{assignment.objective_id}/report",
        json={"actual_value": "molto"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["metadata"]["errors"][0]["field"] == "actual_value"


def test_qualitative_report_requires_result(client, admin, employee, make_dictionary, make_assignment):
    assignment = make_assignment(employee, make_dictionary("qualitative"))

    response = client.patch(
        f"/api/objectives/{assignment.objective_id}/report",
        json={"actual_value": 10},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["metadata"]["errors"][0]["field"] == "qualitative_result"


def test_qualitative_partial_report(client, db, admin, employee, make_dictionary, make_assignment):
    assignment = make_assignment(employee, make_dictionary("qualitative"))

    response = client.patch(
        f"/api/objectives/{assignment.objective_id}/report",
        json={"qualitative_result": "partial"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["data"]["multiplier"] == 0.5
    db.refresh(assignment)
    assert assignment.progress == 50


def test_re_report_overwrites_previous_result(client, db, admin, employee, make_dictionary, make_assignment):
    assignment = make_assignment(employee, make_dictionary())
    url = f"/api/objectives/{assignment.objective_id}/report"

    client.patch(url, json={"actual_value": 75000}, headers=auth_headers(admin))
    response = client.patch(url, json={"actual_value": 40000}, headers=auth_headers(admin))

    data = response.json()["data"]
    assert data["multiplier"] == 0
    assert data["actual_value"] == 40000
    assert data["qualitative_result"] == "not_reached"
    db.refresh(assignment)
    assert assignment.progress == 0


def test_report_unknown_objective(client, admin):
    response = client.patch("/api/objectives/999/report", json={"actual_value": 1}, headers=auth_headers(admin))
    assert response.status_code == 404


def test_dictionary_report_propagates_to_every_instance(
    client, db, admin, employee, make_user, make_dictionary, make_assignment
):
    item = make_dictionary()
    first = make_assignment(employee, item)
    second = make_assignment(make_user(), item)

    response = client.patch(
        f"/api/dictionary/{item.id}/report",
        json={"actual_value": 100000},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["metadata"]["updated_objectives"] == 2
    assert body["data"]["actual_value"] == 100000
    assert body["data"]["reported_at"] is not None
    for assignment in (first, second):
        db.refresh(assignment)
        assert assignment.progress == 100
        assert assignment.objective.multiplier == 1
        assert assignment.objective.qualitative_result == "reached"


def test_dictionary_report_is_admin_only(client, employee, make_dictionary, make_assignment):
    item = make_dictionary()
    make_assignment(employee, item)

    response = client.patch(
        f"/api/dictionary/{item.id}/report",
        json={"actual_value": 100000},
        headers=auth_headers(employee),
    )

    assert response.status_code == 403
