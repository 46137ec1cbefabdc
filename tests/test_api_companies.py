from tests.conftest import COMPANY_A, COMPANY_B, auth


def test_super_user_creates_company(client):
    response = client.post("/api/v1/companies", headers=auth("super"), json={"name": "Charlie Cafe"})
    assert response.status_code == 201
    assert response.json()["name"] == "Charlie Cafe"


def test_blank_company_name_rejected(client):
    response = client.post("/api/v1/companies", headers=auth("super"), json={"name": "  "})
    assert response.status_code == 400


def test_admin_cannot_create_company(client):
    assert client.post("/api/v1/companies", headers=auth("admin-a"), json={"name": "X"}).status_code == 403


def test_list_is_scoped(client):
    assert [c["id"] for c in client.get("/api/v1/companies", headers=auth("ops-a")).json()] == [COMPANY_A]
    assert len(client.get("/api/v1/companies", headers=auth("super")).json()) == 2


def test_get_other_company_denied(client):
    assert client.get(f"/api/v1/companies/{COMPANY_B}", headers=auth("admin-a")).status_code == 403
    assert client.get(f"/api/v1/companies/{COMPANY_A}", headers=auth("manager-a")).status_code == 200


def test_company_admin_updates_own_company(client):
    response = client.put(f"/api/v1/companies/{COMPANY_A}", headers=auth("admin-a"), json={"phone": "555-0100"})
    assert response.status_code == 200
    assert response.json()["phone"] == "555-0100"


def test_company_update_restrictions(client):
    assert client.put(f"/api/v1/companies/{COMPANY_B}", headers=auth("admin-a"), json={"name": "Mine"}).status_code == 403
    assert client.put(f"/api/v1/companies/{COMPANY_A}", headers=auth("ops-a"), json={"name": "Ops Co"}).status_code == 403


def test_delete_company(client, db):
    assert client.delete(f"/api/v1/companies/{COMPANY_B}", headers=auth("admin-b")).status_code == 403
    assert client.delete(f"/api/v1/companies/{COMPANY_B}", headers=auth("super")).status_code == 204
    assert [row["id"] for row in db.tables["companies"]] == [COMPANY_A]
