from fastapi import APIRouter, Depends
from safebite.database.supabase_client import get_supabase
from safebite.modules.companies.schemas import CompanyCreate, CompanyUpdate, CompanyResponse
from safebite.modules.companies.service import CompanyService
from safebite.modules.users.schemas import UserProfile
from safebite.core.dependencies import (
    get_current_profile, require_permission, require_roles, check_company_access, check_record_action
)
from safebite.core.scope import RecordAction, ScopeResolver
from safebite.config.permissions_config import Capability, Role
from supabase import Client
from typing import List

router = APIRouter(prefix="/companies", tags=["companies"])


def get_company_service(supabase: Client = Depends(get_supabase)) -> CompanyService:
    return CompanyService(supabase)


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    company_data: CompanyCreate,
    profile: UserProfile = Depends(require_permission(Capability.CREATE_COMPANIES)),
    service: CompanyService = Depends(get_company_service)
):
    """Create a new company (super users only)"""
    return service.create_company(company_data)


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    limit: int = 50,
    offset: int = 0,
    profile: UserProfile = Depends(get_current_profile),
    service: CompanyService = Depends(get_company_service)
):
    """List companies visible to the caller (all for super users, otherwise their own)"""
    return service.list_companies(company_ids=ScopeResolver(profile).company_filter(), limit=limit, offset=offset)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: str,
    profile: UserProfile = Depends(get_current_profile),
    service: CompanyService = Depends(get_company_service)
):
    """Get company by ID (only if visible to the caller)"""
    check_company_access(profile, company_id)
    return service.get_company_by_id(company_id)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: str,
    company_data: CompanyUpdate,
    profile: UserProfile = Depends(require_roles(Role.SUPER_USER, Role.COMPANY_ADMIN)),
    service: CompanyService = Depends(get_company_service)
):
    """Update company details (super users, or company admins for their own company)"""
    check_record_action(profile, company_id, RecordAction.EDIT)
    return service.update_company(company_id, company_data)


@router.delete("/{company_id}", status_code=204)
async def delete_company(
    company_id: str,
    profile: UserProfile = Depends(require_permission(Capability.CREATE_COMPANIES)),
    service: CompanyService = Depends(get_company_service)
):
    """Delete company and everything under it (super users only)"""
    service.delete_company(company_id)
    return None
