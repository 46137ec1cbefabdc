import logging
from fastapi import APIRouter, Depends, HTTPException, status
from safebite.database.supabase_client import get_supabase
from safebite.modules.users.schemas import UserProfile, UserCreate, UserUpdate
from safebite.modules.users.service import UserService
from safebite.modules.auth.service import AuthService
from safebite.modules.locations.service import LocationService
from safebite.core.dependencies import (
    get_auth_service, get_current_profile, require_permission, check_record_action
)
from safebite.core.scope import RecordAction, ScopeResolver
from safebite.config.permissions_config import Capability, Role, can_manage_role, has_permission
from supabase import Client
from typing import List, Optional

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def get_location_service(supabase: Client = Depends(get_supabase)) -> LocationService:
    return LocationService(supabase)


def check_can_manage(actor: UserProfile, target: UserProfile, action: RecordAction) -> None:
    """Actor must be able to act on the target's company and outrank the target's role"""
    check_record_action(actor, target.company_id, action)
    if not can_manage_role(actor.role, target.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You cannot manage users with role {target.role.value}"
        )


def check_can_assign(actor: UserProfile, role: Role) -> None:
    if not can_manage_role(actor.role, role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You cannot assign role {role.value}"
        )


def resolve_company(actor: UserProfile, role: Role, requested_company_id: Optional[str]) -> Optional[str]:
    """Company a managed profile ends up in: only super users may pick one, everyone else provisions into their own"""
    if actor.role is not Role.SUPER_USER:
        if requested_company_id is not None and requested_company_id != actor.company_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only manage users in your own company"
            )
        return actor.company_id
    if requested_company_id is None and role is not Role.SUPER_USER:
        raise HTTPException(status_code=400, detail="Company is required for this role")
    return requested_company_id


def validate_location_ids(
    location_service: LocationService,
    company_id: Optional[str],
    location_ids: List[str]
) -> None:
    if not location_ids:
        return
    if company_id is None:
        raise HTTPException(status_code=400, detail="Locations require a company")
    found = location_service.list_locations(company_ids=[company_id], location_ids=location_ids, limit=len(location_ids))
    if len({location.id for location in found}) != len(set(location_ids)):
        raise HTTPException(status_code=400, detail="All locations must belong to the user's company")


@router.get("", response_model=List[UserProfile])
async def list_users(
    limit: int = 50,
    offset: int = 0,
    profile: UserProfile = Depends(require_permission(Capability.MANAGE_USERS)),
    service: UserService = Depends(get_user_service)
):
    """List users: super_user gets all users, company admins their own company"""
    return service.list_users(company_ids=ScopeResolver(profile).company_filter(), limit=limit, offset=offset)


@router.get("/{user_id}", response_model=UserProfile)
async def get_user(
    user_id: str,
    profile: UserProfile = Depends(get_current_profile),
    service: UserService = Depends(get_user_service)
):
    """Get user by ID (self, or a user the caller manages)"""
    if user_id == profile.id:
        return profile
    if not has_permission(profile.role, Capability.MANAGE_USERS):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not accessible")
    target = service.get_user_by_id(user_id)
    check_record_action(profile, target.company_id, RecordAction.VIEW)
    return target


@router.post("", response_model=UserProfile, status_code=201)
async def create_user(
    user_data: UserCreate,
    profile: UserProfile = Depends(require_permission(Capability.MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
    auth_service: AuthService = Depends(get_auth_service),
    location_service: LocationService = Depends(get_location_service)
):
    """Provision a user (auth account + profile) in the caller's scope"""
    check_can_assign(profile, user_data.role)
    company_id = resolve_company(profile, user_data.role, user_data.company_id)
    validate_location_ids(location_service, company_id, user_data.location_ids)
    auth_user = auth_service.create_auth_user(user_data.email, user_data.full_name, user_data.password)
    try:
        created = service.create_profile(auth_user.id, user_data, company_id)
    except HTTPException:
        auth_service.discard_auth_user(auth_user.id)
        raise
    logger.info(f"User {profile.id} created user {created.id} with role {created.role.value}")
    return created


@router.put("/{user_id}", response_model=UserProfile)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    profile: UserProfile = Depends(require_permission(Capability.MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
    location_service: LocationService = Depends(get_location_service)
):
    """Update name, role, company or locations of a user the caller manages"""
    target = service.get_user_by_id(user_id)
    check_can_manage(profile, target, RecordAction.EDIT)
    new_role = user_data.role or target.role
    if user_data.role is not None:
        check_can_assign(profile, user_data.role)

    company_id = target.company_id
    if user_data.company_id is not None and user_data.company_id != target.company_id:
        company_id = resolve_company(profile, new_role, user_data.company_id)
    elif company_id is None and new_role is not Role.SUPER_USER:
        # Only super users may live outside a company
        company_id = resolve_company(profile, new_role, None)

    changes = {}
    if company_id != target.company_id:
        changes["company_id"] = company_id
        if user_data.location_ids is None:
            # Assignments never follow a profile into another company
            changes["location_ids"] = []
    if user_data.location_ids is not None:
        validate_location_ids(location_service, company_id, user_data.location_ids)
    if changes:
        user_data = user_data.model_copy(update=changes)

    updated = service.update_user(user_id, user_data)
    logger.info(f"User {profile.id} updated user {user_id}")
    return updated


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    profile: UserProfile = Depends(require_permission(Capability.MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Delete a user the caller manages (profile and auth account)"""
    if user_id == profile.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    target = service.get_user_by_id(user_id)
    check_can_manage(profile, target, RecordAction.DELETE)
    service.delete_user(user_id)
    auth_service.delete_auth_user(user_id)
    logger.info(f"User {profile.id} deleted user {user_id}")
    return None
