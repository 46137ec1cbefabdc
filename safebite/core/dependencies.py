"""
Core dependencies for route protection and scope checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from safebite.config.permissions_config import Capability, Role
from safebite.core.guard import GuardOutcome, RouteGuard
from safebite.core.scope import RecordAction, ScopeResolver
from safebite.core.session import SessionState, SessionStore
from safebite.database.supabase_client import get_supabase
from safebite.modules.auth.service import AuthService, BearerTokenAuthProvider
from safebite.modules.locations.schemas import LocationResponse
from safebite.modules.locations.service import LocationService
from safebite.modules.users.schemas import UserProfile
from safebite.modules.users.service import SupabaseProfileRepository
from supabase import Client
from typing import Any, Iterable, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ACCESS_DENIED_MESSAGE = "You do not have access to this resource"


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_auth_provider(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> BearerTokenAuthProvider:
    return BearerTokenAuthProvider(auth_service, credentials.credentials if credentials else None)


def get_profile_repository(supabase: Client = Depends(get_supabase)) -> SupabaseProfileRepository:
    return SupabaseProfileRepository(supabase)


async def get_session_state(
    provider=Depends(get_auth_provider),
    profiles=Depends(get_profile_repository)
) -> SessionState:
    """Resolve the request's session (identity + profile) once per request"""
    store = SessionStore(provider, profiles)
    await store.initialize()
    return store.state


def require_access(
    required_roles: Optional[Iterable[Any]] = None,
    required_permission: Optional[Any] = None
):
    """Factory function to create a guard dependency; returns the caller's profile when access is granted"""
    guard = RouteGuard(required_roles=required_roles, required_permission=required_permission)

    def check_access(state: SessionState = Depends(get_session_state)) -> UserProfile:
        decision = guard.evaluate(state)
        if decision.allowed:
            return state.profile
        if decision.outcome is GuardOutcome.REDIRECT:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=decision.message,
                headers={"WWW-Authenticate": "Bearer", "Location": decision.redirect_to},
            )
        if decision.outcome is GuardOutcome.LOADING:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=decision.message)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.message)

    return check_access


def require_permission(capability: Capability):
    return require_access(required_permission=capability)


def require_roles(*roles: Role):
    return require_access(required_roles=roles)


get_current_profile = require_access()


def check_company_access(profile: UserProfile, company_id: Optional[str]) -> None:
    """Raise 403 unless the caller can see company_id"""
    if not ScopeResolver(profile).can_access_company(company_id):
        logger.info(f"User {profile.id} denied access to company {company_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED_MESSAGE)


def check_location_access(profile: UserProfile, location: Any) -> Any:
    """Raise 403 unless the caller can act on location (anything with id and company_id)"""
    if not ScopeResolver(profile).can_access_location(location.company_id, location.id):
        logger.info(f"User {profile.id} denied access to location {location.id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED_MESSAGE)
    return location


def load_location_in_scope(location_id: str, profile: UserProfile, supabase: Client) -> LocationResponse:
    """Fetch a location (404) and make sure the caller may act on it (403)"""
    location = LocationService(supabase).get_location_by_id(location_id)
    return check_location_access(profile, location)


def check_record_action(profile: UserProfile, record_company_id: Optional[str], action: RecordAction) -> None:
    """Raise 403 unless the caller's role allows action on a record of record_company_id"""
    if not ScopeResolver(profile).can_perform_action(record_company_id, action):
        logger.info(f"User {profile.id} denied {action.value} on record of company {record_company_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You are not allowed to {action.value} this record"
        )
