import asyncio
import threading

from safebite.config.permissions_config import Capability, Role
from safebite.core.session import (
    NO_PROFILE_ERROR, PROFILE_FETCH_ERROR, SESSION_INIT_ERROR,
    AuthEvent, Identity, SessionState, SessionStore
)
from safebite.modules.users.schemas import UserProfile


def make_profile(user_id, role=Role.OPS):
    return UserProfile(id=user_id, email=f"{user_id}@example.com", full_name=user_id, role=role, company_id="c1")


class StubAuthProvider:
    def __init__(self, identity=None, error=None):
        self.identity = identity
        self.error = error
        self.callback = None
        self.unsubscribed = False

    def get_current_session(self):
        if self.error:
            raise self.error
        return self.identity

    def subscribe(self, callback):
        self.callback = callback

        def unsubscribe():
            self.unsubscribed = True

        return unsubscribe

    def emit(self, event, identity):
        self.callback(event, identity)


class StubProfileRepository:
    """Profiles by id; ids listed in `blocking` wait for their gate before answering"""

    def __init__(self, profiles=None, errors=None, blocking=()):
        self.profiles = profiles or {}
        self.errors = errors or {}
        self.started = {user_id: threading.Event() for user_id in blocking}
        self.gates = {user_id: threading.Event() for user_id in blocking}
        self.calls = []

    def fetch_profile(self, identity_id):
        self.calls.append(identity_id)
        if identity_id in self.gates:
            self.started[identity_id].set()
            self.gates[identity_id].wait(timeout=5)
        if identity_id in self.errors:
            raise self.errors[identity_id]
        return self.profiles.get(identity_id)


def test_initial_state_is_empty():
    store = SessionStore(StubAuthProvider(), StubProfileRepository())
    assert store.state == SessionState()
    assert store.authenticated is False
    assert store.profile is None
    assert store.loading is False


def test_initialize_loads_profile():
    async def scenario():
        store = SessionStore(StubAuthProvider(Identity("u1")), StubProfileRepository({"u1": make_profile("u1")}))
        await store.initialize()
        return store

    store = asyncio.run(scenario())
    assert store.authenticated is True
    assert store.profile.id == "u1"
    assert store.loading is False
    assert store.state.has_role(Role.OPS)
    assert store.state.has_permission(Capability.VIEW_ALL_LOCATIONS)
    assert not store.state.has_permission(Capability.MANAGE_USERS)


def test_initialize_without_session():
    async def scenario():
        store = SessionStore(StubAuthProvider(None), StubProfileRepository())
        await store.initialize()
        return store

    store = asyncio.run(scenario())
    assert store.state == SessionState()


def test_initialize_failure_sets_error():
    async def scenario():
        store = SessionStore(StubAuthProvider(error=RuntimeError("offline")), StubProfileRepository())
        await store.initialize()
        return store

    store = asyncio.run(scenario())
    assert store.authenticated is False
    assert store.error == SESSION_INIT_ERROR


def test_missing_profile_fails_closed():
    async def scenario():
        store = SessionStore(StubAuthProvider(), StubProfileRepository())
        await store.session_established(Identity("u1"))
        return store

    store = asyncio.run(scenario())
    assert store.authenticated is False
    assert store.profile is None
    assert store.state.identity == Identity("u1")
    assert store.error == NO_PROFILE_ERROR
    assert store.state.has_permission(Capability.RECORD_TEMPERATURES) is False


def test_profile_fetch_failure_fails_closed():
    async def scenario():
        repository = StubProfileRepository(errors={"u1": ConnectionError("store unavailable")})
        store = SessionStore(StubAuthProvider(), repository)
        await store.session_established(Identity("u1"))
        return store

    store = asyncio.run(scenario())
    assert store.authenticated is False
    assert store.profile is None
    assert store.error == PROFILE_FETCH_ERROR


def test_session_ended_before_fetch_resolves_discards_profile():
    async def scenario():
        repository = StubProfileRepository({"u1": make_profile("u1")}, blocking=["u1"])
        store = SessionStore(StubAuthProvider(), repository)
        pending = asyncio.create_task(store.session_established(Identity("u1")))
        await asyncio.to_thread(repository.started["u1"].wait, 5)
        assert store.loading is True

        store.session_ended()
        repository.gates["u1"].set()
        await pending
        return store

    store = asyncio.run(scenario())
    assert store.authenticated is False
    assert store.profile is None
    assert store.loading is False
    assert store.error is None


def test_latest_identity_wins():
    async def scenario():
        repository = StubProfileRepository(
            {"u1": make_profile("u1"), "u2": make_profile("u2", Role.MANAGER)},
            blocking=["u1"]
        )
        store = SessionStore(StubAuthProvider(), repository)
        first = asyncio.create_task(store.session_established(Identity("u1")))
        await asyncio.to_thread(repository.started["u1"].wait, 5)

        await store.session_established(Identity("u2"))
        repository.gates["u1"].set()
        await first
        return store

    store = asyncio.run(scenario())
    assert store.profile.id == "u2"
    assert store.state.identity.id == "u2"
    assert store.loading is False


def test_refresh_for_same_identity_keeps_profile_visible():
    async def scenario():
        store = SessionStore(StubAuthProvider(), StubProfileRepository({"u1": make_profile("u1")}))
        await store.session_established(Identity("u1"))
        seen = []
        store.add_listener(seen.append)
        await store.handle_auth_event(AuthEvent.TOKEN_REFRESHED, Identity("u1"))
        return store, seen

    store, seen = asyncio.run(scenario())
    assert seen[0].loading is True
    assert seen[0].profile.id == "u1"
    assert seen[-1].loading is False
    assert store.authenticated is True


def test_new_identity_does_not_show_previous_profile():
    async def scenario():
        repository = StubProfileRepository({"u1": make_profile("u1"), "u2": make_profile("u2")})
        store = SessionStore(StubAuthProvider(), repository)
        await store.session_established(Identity("u1"))
        seen = []
        store.add_listener(seen.append)
        await store.session_established(Identity("u2"))
        return seen

    seen = asyncio.run(scenario())
    assert seen[0].loading is True
    assert seen[0].profile is None


def test_provider_events_are_applied_in_order():
    async def scenario():
        provider = StubAuthProvider()
        store = SessionStore(provider, StubProfileRepository({"u1": make_profile("u1")}))
        await store.start()
        assert provider.callback is not None

        await asyncio.to_thread(provider.emit, AuthEvent.SIGNED_IN, Identity("u1"))
        await asyncio.sleep(0)
        await store.wait_idle()
        signed_in = store.state

        await asyncio.to_thread(provider.emit, AuthEvent.SIGNED_OUT, None)
        await asyncio.sleep(0)
        await store.wait_idle()
        signed_out = store.state

        await store.close()
        return provider, signed_in, signed_out

    provider, signed_in, signed_out = asyncio.run(scenario())
    assert signed_in.authenticated is True
    assert signed_out == SessionState()
    assert provider.unsubscribed is True


def test_listener_errors_do_not_break_the_store():
    async def scenario():
        store = SessionStore(StubAuthProvider(), StubProfileRepository({"u1": make_profile("u1")}))

        def broken(state):
            raise ValueError("listener bug")

        store.add_listener(broken)
        await store.session_established(Identity("u1"))
        return store

    store = asyncio.run(scenario())
    assert store.authenticated is True


def test_removed_listener_stops_receiving():
    store = SessionStore(StubAuthProvider(), StubProfileRepository())
    seen = []
    remove = store.add_listener(seen.append)
    store.session_ended()
    remove()
    store.session_ended()
    assert len(seen) == 1
