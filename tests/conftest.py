import pytest
from fastapi.testclient import TestClient

from safebite.database.supabase_client import SupabaseClient, get_supabase
from safebite.main import app
from safebite.modules.auth.service import clear_auth_cache
from tests.fakes import FakeSupabase

COMPANY_A = "company-a"
COMPANY_B = "company-b"
LOCATION_A1 = "location-a1"
LOCATION_A2 = "location-a2"
LOCATION_B1 = "location-b1"


def profile_row(user_id, role, company_id=None, location_ids=None, full_name="Test User"):
    return {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "full_name": full_name,
        "company_id": company_id,
        "role": role,
        "location_ids": location_ids or [],
        "created_at": "2026-01-01T00:00:00+00:00",
    }


SEED = {
    "companies": [
        {"id": COMPANY_A, "name": "Alpha Catering", "created_at": "2026-01-01T00:00:00+00:00"},
        {"id": COMPANY_B, "name": "Bravo Bistro", "created_at": "2026-01-01T00:00:00+00:00"},
    ],
    "locations": [
        {"id": LOCATION_A1, "company_id": COMPANY_A, "name": "Alpha Central"},
        {"id": LOCATION_A2, "company_id": COMPANY_A, "name": "Alpha Harbour"},
        {"id": LOCATION_B1, "company_id": COMPANY_B, "name": "Bravo Main"},
    ],
    "profiles": [
        profile_row("super", "super_user"),
        profile_row("admin-a", "company_admin", COMPANY_A),
        profile_row("ops-a", "ops", COMPANY_A),
        profile_row("manager-a", "manager", COMPANY_A, [LOCATION_A1]),
        profile_row("manager-unassigned", "manager", COMPANY_A, []),
        profile_row("admin-b", "company_admin", COMPANY_B),
    ],
    "units": [
        {"id": "walk-in-1", "location_id": LOCATION_A1, "name": "Walk-in fridge", "type": "fridge"},
        {"id": "freezer-1", "location_id": LOCATION_A1, "name": "Chest freezer", "type": "freezer"},
        {"id": "bravo-fridge", "location_id": LOCATION_B1, "name": "Bar fridge", "type": "fridge"},
    ],
    "suppliers": [
        {"id": "fresh-farms", "location_id": LOCATION_A1, "name": "Fresh Farms"},
    ],
    "food_items": [
        {"id": "lasagne", "location_id": LOCATION_A2, "name": "Lasagne"},
    ],
}


@pytest.fixture(autouse=True)
def _reset_auth_state():
    clear_auth_cache()
    SupabaseClient.reset_client()
    yield
    clear_auth_cache()
    SupabaseClient.reset_client()


@pytest.fixture
def db():
    fake = FakeSupabase(SEED)
    for profile in SEED["profiles"]:
        fake.tokens[f"token-{profile['id']}"] = profile["id"]
    # An identity that authenticates but has no profile row
    fake.tokens["token-ghost"] = "ghost"
    return fake


@pytest.fixture
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def service_client(db, monkeypatch):
    """Route admin (service role) calls to the fake as well"""
    monkeypatch.setattr(SupabaseClient, "get_service_client", classmethod(lambda cls: db))
    return db


def auth(user_id):
    return {"Authorization": f"Bearer token-{user_id}"}
