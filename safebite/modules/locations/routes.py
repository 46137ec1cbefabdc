from fastapi import APIRouter, Depends
from safebite.database.supabase_client import get_supabase
from safebite.modules.locations.schemas import LocationCreate, LocationUpdate, LocationResponse
from safebite.modules.locations.service import LocationService
from safebite.modules.users.schemas import UserProfile
from safebite.core.dependencies import (
    get_current_profile, require_roles, check_company_access, check_record_action, load_location_in_scope
)
from safebite.core.scope import RecordAction, ScopeResolver
from safebite.config.permissions_config import Role
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/locations", tags=["locations"])

location_admin = require_roles(Role.SUPER_USER, Role.COMPANY_ADMIN)


def get_location_service(supabase: Client = Depends(get_supabase)) -> LocationService:
    return LocationService(supabase)


@router.post("", response_model=LocationResponse, status_code=201)
async def create_location(
    location_data: LocationCreate,
    profile: UserProfile = Depends(location_admin),
    service: LocationService = Depends(get_location_service)
):
    """Create a location in a company the caller administers"""
    check_record_action(profile, location_data.company_id, RecordAction.EDIT)
    return service.create_location(location_data)


@router.get("", response_model=List[LocationResponse])
async def list_locations(
    company_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    profile: UserProfile = Depends(get_current_profile),
    service: LocationService = Depends(get_location_service)
):
    """List locations visible to the caller, optionally for one company. Managers only get their assigned ones."""
    scope = ScopeResolver(profile)
    company_ids = scope.company_filter()
    if company_id is not None:
        check_company_access(profile, company_id)
        company_ids = [company_id]
    return service.list_locations(
        company_ids=company_ids,
        location_ids=scope.location_filter(),
        limit=limit,
        offset=offset
    )


@router.get("/{location_id}", response_model=LocationResponse)
async def get_location(
    location_id: str,
    profile: UserProfile = Depends(get_current_profile),
    supabase: Client = Depends(get_supabase)
):
    """Get location by ID (only if in the caller's scope)"""
    return load_location_in_scope(location_id, profile, supabase)


@router.put("/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: str,
    location_data: LocationUpdate,
    profile: UserProfile = Depends(location_admin),
    service: LocationService = Depends(get_location_service)
):
    """Update location details"""
    location = service.get_location_by_id(location_id)
    check_record_action(profile, location.company_id, RecordAction.EDIT)
    return service.update_location(location_id, location_data)


@router.delete("/{location_id}", status_code=204)
async def delete_location(
    location_id: str,
    profile: UserProfile = Depends(location_admin),
    service: LocationService = Depends(get_location_service)
):
    """Delete location"""
    location = service.get_location_by_id(location_id)
    check_record_action(profile, location.company_id, RecordAction.DELETE)
    service.delete_location(location_id)
    return None
