import asyncio
from types import SimpleNamespace

from safebite.core.session import AuthEvent, SessionStore
from safebite.modules.auth.service import AuthService, BearerTokenAuthProvider, SupabaseSessionAuthProvider
from safebite.modules.users.service import SupabaseProfileRepository
from tests.conftest import COMPANY_A, SEED, profile_row
from tests.fakes import FakeSupabase


class SessionClient:
    """Supabase client whose auth object keeps its own session and listeners"""

    def __init__(self, user=None):
        self.session = SimpleNamespace(user=user) if user else None
        self.listeners = []
        self.auth = SimpleNamespace(
            get_session=lambda: self.session,
            on_auth_state_change=self._on_auth_state_change,
        )

    def _on_auth_state_change(self, callback):
        self.listeners.append(callback)
        return SimpleNamespace(unsubscribe=lambda: self.listeners.remove(callback))

    def emit(self, event, user):
        self.session = SimpleNamespace(user=user) if user else None
        for callback in list(self.listeners):
            callback(event, self.session)


def user(user_id):
    return SimpleNamespace(id=user_id, email=f"{user_id}@example.com", user_metadata={"full_name": user_id})


def test_bearer_provider_resolves_token():
    db = FakeSupabase(SEED)
    db.tokens["token-ops-a"] = "ops-a"
    provider = BearerTokenAuthProvider(AuthService(db), "token-ops-a")
    identity = provider.get_current_session()
    assert identity.id == "ops-a"
    assert identity.email == "ops-a@example.com"


def test_bearer_provider_without_valid_token():
    db = FakeSupabase(SEED)
    assert BearerTokenAuthProvider(AuthService(db), None).get_current_session() is None
    assert BearerTokenAuthProvider(AuthService(db), "forged").get_current_session() is None


def test_profile_repository():
    db = FakeSupabase(SEED)
    db.tables["profiles"].append(profile_row("odd", "head_chef", COMPANY_A))
    db.tables["profiles"].append(dict(profile_row("legacy", "ops", COMPANY_A), location_ids=None))
    repository = SupabaseProfileRepository(db)
    assert repository.fetch_profile("manager-a").location_ids == ["location-a1"]
    assert repository.fetch_profile("nobody") is None
    assert repository.fetch_profile("odd") is None
    assert repository.fetch_profile("legacy").location_ids == []


def test_session_provider_drives_store():
    async def scenario():
        client = SessionClient(user("ops-a"))
        store = SessionStore(SupabaseSessionAuthProvider(client), SupabaseProfileRepository(FakeSupabase(SEED)))
        await store.start()
        initial = store.state

        await asyncio.to_thread(client.emit, AuthEvent.SIGNED_IN.value, user("admin-a"))
        await asyncio.sleep(0)
        await store.wait_idle()
        switched = store.state

        await asyncio.to_thread(client.emit, AuthEvent.SIGNED_OUT.value, None)
        await asyncio.sleep(0)
        await store.wait_idle()
        signed_out = store.state

        await store.close()
        return client, initial, switched, signed_out

    client, initial, switched, signed_out = asyncio.run(scenario())
    assert initial.profile.id == "ops-a"
    assert switched.profile.id == "admin-a"
    assert signed_out.authenticated is False
    assert client.listeners == []
