from mbo_platform.core.initial_data import seed_bootstrap_admin, seed_catalog
from mbo_platform.models import CalculationType, IndicatorCluster, Objective, ObjectiveAssignment
from mbo_platform.tests.utils import auth_headers


def _dictionary_payload(catalog, **overrides):
    cluster, calculation_type = catalog
    payload = {
        "title": "Riduzione costi",
        "indicator_cluster_id": cluster.id,
        "calculation_type_id": calculation_type.id,
        "objective_type": "numeric",
        "target_value": 200,
        "threshold_value": 100,
    }
    payload.update(overrides)
    return payload


def test_catalog_listing_and_creation(client, admin, employee, catalog):
    listed = client.get("/api/indicator-clusters", headers=auth_headers(employee))
    assert [c["name"] for c in listed.json()["data"]] == ["Obiettivi Individuali"]

    created = client.post(
        "/api/calculation-types",
        json={"name": "Soglia On/Off", "formula": "valore >= soglia ? 100 : 0"},
        headers=auth_headers(admin),
    )
    assert created.status_code == 201
    assert created.json()["data"]["formula"] == "valore >= soglia ? 100 : 0"

    forbidden = client.post("/api/indicator-clusters", json={"name": "ESG"}, headers=auth_headers(employee))
    assert forbidden.status_code == 403


def test_catalog_names_cannot_be_cleared(client, admin, catalog):
    cluster, calculation_type = catalog

    cleared_cluster = client.patch(
        f"/api/indicator-clusters/{cluster.id}", json={"name": None}, headers=auth_headers(admin)
    )
    cleared_type = client.patch(
        f"/api/calculation-types/{calculation_type.id}", json={"name": None}, headers=auth_headers(admin)
    )
    renamed = client.patch(
        f"/api/calculation-types/{calculation_type.id}",
        json={"description": "Proporzionale tra soglia e target"},
        headers=auth_headers(admin),
    )

    assert cleared_cluster.status_code == 400
    assert cleared_cluster.json()["metadata"]["errors"][0]["field"] == "name"
    assert cleared_type.status_code == 400
    assert cleared_type.json()["metadata"]["errors"][0]["field"] == "name"
    assert renamed.status_code == 200
    assert renamed.json()["data"]["name"] == "Interpolazione Lineare"


def test_cluster_in_use_cannot_be_deleted(client, admin, catalog, make_dictionary):
    cluster, _ = catalog
    make_dictionary()

    response = client.delete(f"/api/indicator-clusters/{cluster.id}", headers=auth_headers(admin))
    assert response.status_code == 409


def test_business_functions_crud(client, admin, employee):
    headers = auth_headers(admin)
    sales = client.post("/api/business-functions", json={"name": "Vendite"}, headers=headers)
    assert sales.status_code == 201
    sales_id = sales.json()["data"]["id"]

    north = client.post(
        "/api/business-functions",
        json={"name": "Area Nord", "description": "Filiali del nord", "first_level_id": sales_id},
        headers=headers,
    )
    assert north.status_code == 201
    north_id = north.json()["data"]["id"]
    assert north.json()["data"]["first_level_id"] == sales_id

    listed = client.get("/api/business-functions", headers=auth_headers(employee))
    assert [f["name"] for f in listed.json()["data"]] == ["Area Nord", "Vendite"]

    updated = client.patch(
        f"/api/business-functions/{north_id}", json={"description": "Nord Italia"}, headers=headers
    )
    assert updated.json()["data"]["description"] == "Nord Italia"

    deleted = client.delete(f"/api/business-functions/{sales_id}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"/api/business-functions/{sales_id}", headers=headers).status_code == 404
    remaining = client.get(f"/api/business-functions/{north_id}", headers=headers).json()["data"]
    assert remaining["first_level_id"] is None


def test_business_function_rules(client, admin, employee):
    headers = auth_headers(admin)
    created = client.post("/api/business-functions", json={"name": "Finanza"}, headers=headers)
    function_id = created.json()["data"]["id"]

    unknown_level = client.post(
        "/api/business-functions", json={"name": "Tesoreria", "second_level_id": 999}, headers=headers
    )
    own_level = client.patch(
        f"/api/business-functions/{function_id}", json={"first_level_id": function_id}, headers=headers
    )
    cleared = client.patch(f"/api/business-functions/{function_id}", json={"name": None}, headers=headers)
    forbidden = client.post("/api/business-functions", json={"name": "HR"}, headers=auth_headers(employee))

    assert unknown_level.status_code == 400
    assert unknown_level.json()["metadata"]["errors"][0]["field"] == "second_level_id"
    assert own_level.status_code == 400
    assert cleared.status_code == 400
    assert forbidden.status_code == 403
    assert client.get("/api/business-functions/999", headers=headers).status_code == 404


def test_create_dictionary_item(client, admin, catalog):
    response = client.post("/api/objectives-dictionary", json=_dictionary_payload(catalog), headers=auth_headers(admin))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["target_value"] == 200
    assert data["indicator_cluster"]["name"] == "Obiettivi Individuali"


def test_dictionary_value_rules(client, admin, catalog):
    missing_target = client.post(
        "/api/objectives-dictionary",
        json=_dictionary_payload(catalog, target_value=None),
        headers=auth_headers(admin),
    )
    inverted = client.post(
        "/api/objectives-dictionary",
        json=_dictionary_payload(catalog, threshold_value=300),
        headers=auth_headers(admin),
    )
    unknown_cluster = client.post(
        "/api/objectives-dictionary",
        json=_dictionary_payload(catalog, indicator_cluster_id=999),
        headers=auth_headers(admin),
    )

    assert missing_target.status_code == 400
    assert inverted.status_code == 400
    assert unknown_cluster.status_code == 400
    assert unknown_cluster.json()["metadata"]["errors"][0]["field"] == "indicator_cluster_id"


def test_qualitative_entries_drop_target_and_threshold(client, admin, catalog, make_dictionary):
    created = client.post(
        "/api/objectives-dictionary",
        json=_dictionary_payload(catalog, objective_type="qualitative"),
        headers=auth_headers(admin),
    )
    assert created.json()["data"]["target_value"] is None
    assert created.json()["data"]["threshold_value"] is None

    item = make_dictionary()
    switched = client.patch(
        f"/api/objectives-dictionary/{item.id}",
        json={"objective_type": "qualitative"},
        headers=auth_headers(admin),
    )
    assert switched.status_code == 200
    assert switched.json()["data"]["target_value"] is None


def test_update_rejects_threshold_above_target(client, admin, make_dictionary):
    item = make_dictionary()
    response = client.patch(
        f"/api/objectives-dictionary/{item.id}",
        json={"threshold_value": 150000},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert response.json()["metadata"]["errors"][0]["field"] == "threshold_value"


def test_dictionary_filters(client, employee, make_dictionary):
    make_dictionary(title="Fatturato Nord")
    make_dictionary("qualitative", title="Clima aziendale")

    response = client.get(
        "/api/objectives-dictionary",
        params={"objective_type": "qualitative"},
        headers=auth_headers(employee),
    )

    body = response.json()
    assert body["total"] == 1
    assert body["data"][0]["title"] == "Clima aziendale"


def test_delete_in_use_requires_force(client, db, admin, employee, make_dictionary, make_assignment):
    item = make_dictionary()
    make_assignment(employee, item)

    refused = client.delete(f"/api/objectives-dictionary/{item.id}", headers=auth_headers(admin))
    assert refused.status_code == 409
    assert refused.json()["metadata"]["errors"][0]["active_assignments"] == 1

    forced = client.delete(
        f"/api/objectives-dictionary/{item.id}",
        params={"force": "true"},
        headers=auth_headers(admin),
    )
    assert forced.status_code == 200
    assert forced.json()["data"]["removed_assignments"] == 1
    assert db.query(Objective).count() == 0
    assert db.query(ObjectiveAssignment).count() == 0


def test_objective_instances(client, admin, employee, make_dictionary, make_assignment):
    item = make_dictionary()

    created = client.post("/api/objectives", json={"dictionary_id": item.id}, headers=auth_headers(admin))
    assert created.status_code == 201
    objective = created.json()["data"]
    assert objective["cluster_id"] == item.indicator_cluster_id
    assert objective["title"] == "Fatturato"
    assert objective["is_reported"] is False

    assert client.get(f"/api/objectives/{objective['id']}", headers=auth_headers(employee)).status_code == 403

    bad_cluster = client.patch(
        f"/api/objectives/{objective['id']}",
        json={"cluster_id": 999},
        headers=auth_headers(admin),
    )
    assert bad_cluster.status_code == 400

    deleted = client.delete(f"/api/objectives/{objective['id']}", headers=auth_headers(admin))
    assert deleted.status_code == 200
    assert client.get(f"/api/objectives/{objective['id']}", headers=auth_headers(admin)).status_code == 404


def test_objectives_are_scoped_to_the_employee(client, admin, employee, make_user, make_dictionary, make_assignment):
    mine = make_assignment(employee, make_dictionary())
    make_assignment(make_user(), make_dictionary(title="NPS"))

    own = client.get("/api/objectives", headers=auth_headers(employee))
    everything = client.get("/api/objectives", headers=auth_headers(admin))

    assert [o["id"] for o in own.json()["data"]] == [mine.objective_id]
    assert everything.json()["total"] == 2


def test_objectives_with_assignments(client, admin, employee, make_dictionary, make_assignment):
    assignment = make_assignment(employee, make_dictionary(), weight=25)

    response = client.get("/api/objectives-with-assignments", headers=auth_headers(admin))

    (entry,) = response.json()["data"]
    assert entry["assigned_users"] == [
        {
            "assignment_id": assignment.id,
            "user_id": employee.id,
            "full_name": "Mario Rossi",
            "department": "Sales",
            "weight": 25,
            "status": "assigned",
            "progress": 0,
        }
    ]
    assert client.get("/api/objectives-with-assignments", headers=auth_headers(employee)).status_code == 403


def test_seed_catalog_is_idempotent(db):
    assert seed_catalog(db) == 8
    assert seed_catalog(db) == 0
    assert db.query(IndicatorCluster).count() == 4
    assert db.query(CalculationType).count() == 4


def test_bootstrap_admin_promotes_existing_user(db, employee):
    promoted = seed_bootstrap_admin(db, "MARIO.ROSSI@acme.it")
    assert promoted.id == employee.id
    assert promoted.role == "admin"

    created = seed_bootstrap_admin(db, "hr@acme.it")
    assert created.role == "admin"
    assert seed_bootstrap_admin(db, None) is None
