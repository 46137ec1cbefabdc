import hashlib
import logging
import time
from supabase import Client
from safebite.config.permissions_config import Role
from safebite.core.session import AuthStateCallback, Identity
from safebite.database.supabase_client import SupabaseClient
from safebite.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, AuthUser
from fastapi import HTTPException
from typing import Callable, Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


def _evict_expired(now: float) -> None:
    for key in [key for key, (_, expiry) in _AUTH_USER_CACHE.items() if expiry <= now]:
        del _AUTH_USER_CACHE[key]


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user; new accounts start as managers with no company or locations"""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": {"full_name": register_data.full_name}
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            try:
                profile_result = self.supabase.table("profiles").insert({
                    "id": auth_response.user.id,
                    "email": register_data.email,
                    "full_name": register_data.full_name,
                    "role": Role.MANAGER.value,
                    "location_ids": [],
                }).execute()

                if not profile_result.data:
                    raise HTTPException(status_code=500, detail="Failed to create user profile")
            except Exception:
                # An auth user without a profile would block the email forever
                self.discard_auth_user(auth_response.user.id)
                raise

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="User registered successfully"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Registration failed for {register_data.email}: {error_message}")
            raise HTTPException(status_code=500, detail="Registration failed")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid email or password")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error(f"Login failed for {login_data.email}: {error_message}")
            raise HTTPException(status_code=500, detail="Login failed")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
                _evict_expired(now)
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        try:
            # Supabase Auth tokens are stateless JWTs, so logout is mainly client-side;
            # drop our cached lookup so the token stops resolving here right away
            _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def create_auth_user(self, email: str, full_name: str, password: Optional[str] = None) -> AuthUser:
        """Provision an auth user with the service role key; without a password an invite email is sent"""
        admin_client = SupabaseClient.get_service_client()
        try:
            if password:
                response = admin_client.auth.admin.create_user({
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": {"full_name": full_name},
                })
            else:
                response = admin_client.auth.admin.invite_user_by_email(
                    email, {"data": {"full_name": full_name}}
                )
            if not response.user:
                raise HTTPException(status_code=500, detail="Failed to create auth user")
            return AuthUser(id=response.user.id, email=response.user.email or email)
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Failed to create auth user {email}: {error_message}")
            raise HTTPException(status_code=500, detail="Failed to create auth user")

    def delete_auth_user(self, user_id: str) -> bool:
        """Remove the auth.users row (service role key required)"""
        admin_client = SupabaseClient.get_service_client()
        try:
            admin_client.auth.admin.delete_user(user_id)
            return True
        except Exception as e:
            logger.error(f"Failed to delete auth user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete auth user")

    def discard_auth_user(self, user_id: str) -> None:
        """Roll back an auth user whose profile could not be created; failures are logged, not raised"""
        try:
            self.delete_auth_user(user_id)
            logger.warning(f"Rolled back auth user {user_id} after profile creation failed")
        except HTTPException as e:
            logger.error(f"Could not roll back auth user {user_id}: {e.detail}")


def _noop() -> None:
    return None


class BearerTokenAuthProvider:
    """Per-request auth provider: the session is whatever the bearer token resolves to"""

    def __init__(self, auth_service: AuthService, token: Optional[str]):
        self.auth_service = auth_service
        self.token = token

    def get_current_session(self) -> Optional[Identity]:
        if not self.token:
            return None
        try:
            user_data = self.auth_service.get_current_user(self.token)
        except HTTPException as e:
            logger.debug(f"Bearer token rejected: {e.detail}")
            return None
        return Identity(
            id=user_data["id"],
            email=user_data.get("email"),
            metadata=user_data.get("user_metadata") or {},
        )

    def subscribe(self, callback: AuthStateCallback) -> Callable[[], None]:
        # A request-scoped token never changes state mid-request
        return _noop


class SupabaseSessionAuthProvider:
    """Long-lived provider backed by a Supabase client's own session (scripts, workers, desktop clients)"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    @staticmethod
    def _identity(session: Any) -> Optional[Identity]:
        user = getattr(session, "user", None)
        if user is None:
            return None
        return Identity(id=user.id, email=user.email, metadata=user.user_metadata or {})

    def get_current_session(self) -> Optional[Identity]:
        return self._identity(self.supabase.auth.get_session())

    def subscribe(self, callback: AuthStateCallback) -> Callable[[], None]:
        def on_change(event, session):
            callback(event, self._identity(session))

        subscription = self.supabase.auth.on_auth_state_change(on_change)
        return subscription.unsubscribe
