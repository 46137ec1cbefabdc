from safebite.modules.auth import service as auth_service_module
from safebite.modules.auth.service import AuthService
from tests.conftest import COMPANY_A, auth, profile_row


def test_public_endpoints(client):
    assert client.get("/").json()["status"] == "healthy"
    assert client.get("/health").json() == {"status": "healthy"}


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_ready_requires_supabase_settings(client, monkeypatch):
    from safebite.config.settings import settings

    monkeypatch.setattr(settings, "supabase_url", "")
    assert client.get("/ready").status_code == 503

    monkeypatch.setattr(settings, "supabase_url", "https://project.supabase.co")
    monkeypatch.setattr(settings, "supabase_key", "anon-key")
    assert client.get("/ready").json() == {"status": "ready"}


def test_missing_token_redirects_to_login(client):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"
    assert response.headers["Location"] == "/login"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token_is_unauthenticated(client):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer forged"})
    assert response.status_code == 401


def test_identity_without_profile_is_unauthenticated(client):
    assert client.get("/api/v1/auth/me", headers=auth("ghost")).status_code == 401


def test_unknown_role_fails_closed(client, db):
    db.tables["profiles"].append(profile_row("broken-role", "head_chef", COMPANY_A))
    db.tokens["token-broken-role"] = "broken-role"
    assert client.get("/api/v1/auth/me", headers=auth("broken-role")).status_code == 401


def test_profile_store_outage_fails_closed(client, db):
    db.fail_tables.add("profiles")
    response = client.get("/api/v1/auth/me", headers=auth("super"))
    assert response.status_code == 401
    assert "Traceback" not in response.text


def test_me_for_manager(client):
    response = client.get("/api/v1/auth/me", headers=auth("manager-a"))
    assert response.status_code == 200
    body = response.json()
    assert body["profile"]["role"] == "manager"
    assert body["role_display_name"] == "Manager"
    assert body["access_scope"] == "1 assigned location(s)"
    assert body["profile_complete"] is True
    assert body["permissions"] == [
        "canRecordTemperatures", "canCompleteChecklists", "canViewAllRecords", "canDownloadRecords"
    ]


def test_me_reports_incomplete_profile(client, db):
    db.tables["profiles"].append(profile_row("new-hire", "ops", None))
    db.tokens["token-new-hire"] = "new-hire"
    body = client.get("/api/v1/auth/me", headers=auth("new-hire")).json()
    assert body["profile_complete"] is False


def test_roles_lists_assignable_roles(client):
    body = client.get("/api/v1/auth/roles", headers=auth("admin-a")).json()
    assert body["assignable_roles"] == ["ops", "manager"]
    assert len(body["capabilities"]) == 13
    assert [role["name"] for role in body["roles"]] == ["super_user", "company_admin", "ops", "manager"]


def test_login(client):
    response = client.post("/api/v1/auth/login", json={"email": "ops-a@example.com", "password": "correct-password"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["profile"]["id"] == "ops-a"


def test_login_with_wrong_password(client):
    response = client.post("/api/v1/auth/login", json={"email": "ops-a@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_register_creates_manager_profile(client, db):
    response = client.post("/api/v1/auth/register", json={
        "email": "newcomer@example.com",
        "password": "s3cret-pass",
        "full_name": "New Comer",
    })
    assert response.status_code == 201
    user_id = response.json()["user_id"]
    profile = next(row for row in db.tables["profiles"] if row["id"] == user_id)
    assert profile["role"] == "manager"
    assert profile["location_ids"] == []


def test_logout(client, db):
    response = client.post("/api/v1/auth/logout", headers=auth("ops-a"))
    assert response.status_code == 200
    assert db.auth.signed_out is True


def test_logout_requires_token(client):
    assert client.post("/api/v1/auth/logout").status_code == 401


def test_register_rolls_back_auth_user_when_profile_fails(client, service_client, db):
    db.fail_tables.add("profiles")
    response = client.post("/api/v1/auth/register", json={
        "email": "orphan@example.com",
        "password": "s3cret-pass",
        "full_name": "Orphan",
    })
    assert response.status_code == 500
    assert len(db.deleted_auth_users) == 1


def test_expired_cache_entries_are_evicted_when_full(db, monkeypatch):
    monkeypatch.setattr(auth_service_module, "_AUTH_CACHE_MAX_SIZE", 2)
    auth_service_module._AUTH_USER_CACHE["stale-1"] = ({"id": "gone"}, 0.0)
    auth_service_module._AUTH_USER_CACHE["stale-2"] = ({"id": "gone"}, 0.0)

    user = AuthService(db).get_current_user("token-ops-a")

    assert user["id"] == "ops-a"
    assert "stale-1" not in auth_service_module._AUTH_USER_CACHE
    assert "stale-2" not in auth_service_module._AUTH_USER_CACHE
    assert len(auth_service_module._AUTH_USER_CACHE) == 1
