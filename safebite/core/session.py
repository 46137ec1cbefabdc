"""
Session/profile store: holds at most one authenticated identity and its profile.

The store has a single writer (the auth event handler) and any number of
readers. Readers get immutable SessionState snapshots, either by reading
``store.state`` or by registering a listener.

Only the identity and profile lookups are asynchronous. Each auth event bumps
a generation counter; a lookup that finishes after a newer event was handled
is discarded instead of applied, so the latest event always wins.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Set, Union

from safebite.config.permissions_config import Role, coerce_role, has_permission
from safebite.modules.users.schemas import UserProfile

logger = logging.getLogger(__name__)

NO_PROFILE_ERROR = "No profile found"
PROFILE_FETCH_ERROR = "Failed to load user profile"
SESSION_INIT_ERROR = "Failed to initialize authentication"


class AuthEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


@dataclass(frozen=True)
class Identity:
    """Authenticated identity as reported by the auth provider"""
    id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)


AuthStateCallback = Callable[[Union[AuthEvent, str], Optional[Identity]], None]


class AuthProvider(Protocol):
    def get_current_session(self) -> Optional[Identity]:
        ...

    def subscribe(self, callback: AuthStateCallback) -> Callable[[], None]:
        """Register for auth state changes; returns the unsubscribe function"""
        ...


class ProfileRepository(Protocol):
    def fetch_profile(self, identity_id: str) -> Optional[UserProfile]:
        """Return the profile, None when there is none, raise when the store is unavailable"""
        ...


@dataclass(frozen=True)
class SessionState:
    identity: Optional[Identity] = None
    profile: Optional[UserProfile] = None
    loading: bool = False
    error: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.identity is not None and self.profile is not None

    def has_role(self, roles: Union[Role, str, Iterable[Union[Role, str]]]) -> bool:
        if self.profile is None:
            return False
        if isinstance(roles, (Role, str)):
            roles = [roles]
        wanted = {coerce_role(role) for role in roles}
        return self.profile.role in wanted

    def has_permission(self, capability: Any) -> bool:
        if self.profile is None:
            return False
        return has_permission(self.profile.role, capability)


StateListener = Callable[[SessionState], None]


class SessionStore:
    def __init__(self, auth_provider: AuthProvider, profile_repository: ProfileRepository):
        self._auth = auth_provider
        self._profiles = profile_repository
        self._state = SessionState()
        self._generation = 0
        self._listeners: List[StateListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Set[asyncio.Task] = set()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def authenticated(self) -> bool:
        return self._state.authenticated

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._state.profile

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def start(self) -> None:
        """Subscribe to provider events, then resolve the current session"""
        self._loop = asyncio.get_running_loop()
        if self._unsubscribe is None:
            self._unsubscribe = self._auth.subscribe(self._on_auth_state_change)
        await self.initialize()

    async def initialize(self) -> None:
        generation = self._next_generation()
        self._set_state(replace(self._state, loading=True, error=None))
        try:
            identity = await asyncio.to_thread(self._auth.get_current_session)
        except Exception as e:
            if not self._is_current(generation):
                return
            logger.error(f"Error initializing auth: {e}")
            self._set_state(SessionState(error=SESSION_INIT_ERROR))
            return
        if not self._is_current(generation):
            logger.debug("Initial session lookup superseded by a newer auth event")
            return
        if identity is None:
            self._set_state(SessionState())
            return
        await self._establish(identity, generation)

    async def handle_auth_event(self, event: Union[AuthEvent, str], identity: Optional[Identity]) -> None:
        if event == AuthEvent.SIGNED_OUT or identity is None:
            self.session_ended()
        else:
            await self.session_established(identity)

    async def session_established(self, identity: Identity) -> None:
        await self._establish(identity, self._next_generation())

    def session_ended(self) -> None:
        self._next_generation()
        self._set_state(SessionState())

    async def _establish(self, identity: Identity, generation: int) -> None:
        # A refresh for the same identity keeps the profile visible while it reloads
        current = self._state
        keep_profile = current.profile if current.identity and current.identity.id == identity.id else None
        self._set_state(SessionState(identity=identity, profile=keep_profile, loading=True))
        try:
            profile = await asyncio.to_thread(self._profiles.fetch_profile, identity.id)
        except Exception as e:
            if not self._is_current(generation):
                logger.debug(f"Discarding superseded profile failure for {identity.id}")
                return
            logger.error(f"Error fetching profile for {identity.id}: {e}")
            self._set_state(SessionState(identity=identity, error=PROFILE_FETCH_ERROR))
            return
        if not self._is_current(generation):
            logger.debug(f"Discarding superseded profile for {identity.id}")
            return
        if profile is None:
            logger.warning(f"No profile found for user {identity.id}")
            self._set_state(SessionState(identity=identity, error=NO_PROFILE_ERROR))
            return
        self._set_state(SessionState(identity=identity, profile=profile))

    def _on_auth_state_change(self, event: Union[AuthEvent, str], identity: Optional[Identity]) -> None:
        """Provider callback; may run on a foreign thread, so hop onto the store's loop"""
        if self._loop is None:
            logger.warning(f"Auth event {event} received before the session store was started")
            return
        self._loop.call_soon_threadsafe(self._schedule, event, identity)

    def _schedule(self, event: Union[AuthEvent, str], identity: Optional[Identity]) -> None:
        task = asyncio.ensure_future(self.handle_auth_event(event, identity))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def wait_idle(self) -> None:
        """Wait until every scheduled auth event has been handled"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._next_generation()
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*list(self._pending), return_exceptions=True)
        self._pending.clear()
        self._set_state(SessionState())
        self._listeners.clear()
        self._loop = None
