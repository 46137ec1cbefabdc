import pytest

from tests.conftest import LOCATION_A1, LOCATION_A2, LOCATION_B1, auth


def test_list_units_for_location(client):
    response = client.get("/api/v1/units", params={"location_id": LOCATION_A1}, headers=auth("manager-a"))
    assert response.status_code == 200
    assert [(unit["name"], unit["type"]) for unit in response.json()] == [
        ("Chest freezer", "freezer"),
        ("Walk-in fridge", "fridge"),
    ]


@pytest.mark.parametrize("path", ["/api/v1/units", "/api/v1/suppliers", "/api/v1/food-items"])
def test_list_outside_scope_denied(client, path):
    assert client.get(path, params={"location_id": LOCATION_A2}, headers=auth("manager-a")).status_code == 403
    assert client.get(path, params={"location_id": LOCATION_B1}, headers=auth("ops-a")).status_code == 403


def test_list_food_items_and_suppliers(client):
    food = client.get("/api/v1/food-items", params={"location_id": LOCATION_A2}, headers=auth("ops-a"))
    assert [item["id"] for item in food.json()] == ["lasagne"]
    suppliers = client.get("/api/v1/suppliers", params={"location_id": LOCATION_A1}, headers=auth("manager-a"))
    assert [supplier["name"] for supplier in suppliers.json()] == ["Fresh Farms"]


def test_admin_creates_unit(client, db):
    response = client.post("/api/v1/units", headers=auth("admin-a"), json={
        "location_id": LOCATION_A2, "name": "Prep fridge", "type": "fridge",
    })
    assert response.status_code == 201
    assert response.json()["location_id"] == LOCATION_A2
    assert db.tables["units"][-1]["type"] == "fridge"


def test_create_unit_rejects_unknown_type(client):
    response = client.post("/api/v1/units", headers=auth("admin-a"), json={
        "location_id": LOCATION_A2, "name": "Oven", "type": "oven",
    })
    assert response.status_code == 422


@pytest.mark.parametrize("user_id, location_id, expected", [
    ("manager-a", LOCATION_A1, 403),
    ("ops-a", LOCATION_A1, 403),
    ("admin-b", LOCATION_A1, 403),
    ("admin-a", "nowhere", 404),
    ("super", LOCATION_B1, 201),
])
def test_create_supplier_access(client, user_id, location_id, expected):
    response = client.post("/api/v1/suppliers", headers=auth(user_id), json={
        "location_id": location_id, "name": "Harbour Fish",
    })
    assert response.status_code == expected


def test_create_requires_name(client):
    response = client.post("/api/v1/food-items", headers=auth("admin-a"), json={
        "location_id": LOCATION_A1, "name": "  ",
    })
    assert response.status_code == 400


def test_update_unit(client):
    response = client.put("/api/v1/units/walk-in-1", headers=auth("admin-a"), json={"name": "Walk-in 1"})
    assert response.status_code == 200
    assert response.json()["name"] == "Walk-in 1"
    assert response.json()["type"] == "fridge"

    denied = client.put("/api/v1/units/walk-in-1", headers=auth("admin-b"), json={"name": "Mine now"})
    assert denied.status_code == 403


def test_delete_food_item(client, db):
    assert client.delete("/api/v1/food-items/lasagne", headers=auth("admin-b")).status_code == 403
    assert client.delete("/api/v1/food-items/lasagne", headers=auth("admin-a")).status_code == 204
    assert db.tables["food_items"] == []
    assert client.delete("/api/v1/food-items/lasagne", headers=auth("admin-a")).status_code == 404


def test_new_unit_can_take_readings(client):
    created = client.post("/api/v1/units", headers=auth("admin-a"), json={
        "location_id": LOCATION_A1, "name": "Blast chiller", "type": "freezer",
    }).json()
    response = client.post("/api/v1/temperatures", headers=auth("manager-a"), json={
        "location_id": LOCATION_A1, "type": "freezer", "value": -20, "unit_id": created["id"],
    })
    assert response.status_code == 201
    assert response.json()["out_of_range"] is False
