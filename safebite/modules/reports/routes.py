from datetime import date
from fastapi import APIRouter, Depends
from safebite.database.supabase_client import get_supabase
from safebite.modules.reports.schemas import DashboardResponse, UserActivity
from safebite.modules.reports.service import ReportService
from safebite.modules.checklists.routes import today
from safebite.modules.temperatures.routes import record_day_window
from safebite.modules.users.schemas import UserProfile
from safebite.core.dependencies import require_permission, load_location_in_scope
from safebite.config.permissions_config import Capability
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(supabase: Client = Depends(get_supabase)) -> ReportService:
    return ReportService(supabase)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    location_id: str,
    day: Optional[date] = None,
    profile: UserProfile = Depends(require_permission(Capability.VIEW_ALL_RECORDS)),
    service: ReportService = Depends(get_report_service),
    supabase: Client = Depends(get_supabase)
):
    """Today's readings against targets and the caller's checklist progress at a location"""
    load_location_in_scope(location_id, profile, supabase)
    start, end = record_day_window(day)
    return service.dashboard(location_id, start, end, profile.id, day or today())


@router.get("/user-activity", response_model=List[UserActivity])
async def get_user_activity(
    location_id: str,
    profile: UserProfile = Depends(require_permission(Capability.GENERATE_REPORTS)),
    service: ReportService = Depends(get_report_service),
    supabase: Client = Depends(get_supabase)
):
    """Per-user reading and checklist counts at a location"""
    location = load_location_in_scope(location_id, profile, supabase)
    return service.user_activity(location_id, location.company_id)
