from datetime import date, datetime, time, timezone
from fastapi import APIRouter, Depends
from safebite.config.settings import settings
from safebite.database.supabase_client import get_supabase
from safebite.modules.temperatures.schemas import (
    TemperatureCreate, TemperatureResponse, CorrectiveActionUpdate, TemperatureRangeResponse
)
from safebite.modules.temperatures.service import TemperatureService
from safebite.modules.temperatures.ranges import TEMPERATURE_RANGES, get_record_day_window
from safebite.modules.users.schemas import UserProfile
from safebite.core.dependencies import (
    get_current_profile, require_permission, check_record_action, load_location_in_scope
)
from safebite.core.scope import RecordAction
from safebite.config.permissions_config import Capability
from supabase import Client
from typing import List, Optional, Tuple

router = APIRouter(prefix="/temperatures", tags=["temperatures"])


def get_temperature_service(supabase: Client = Depends(get_supabase)) -> TemperatureService:
    return TemperatureService(supabase)


def record_day_window(day: Optional[date] = None) -> Tuple[datetime, datetime]:
    """Window of the given log day, or of the current one"""
    if day is None:
        return get_record_day_window(day_start_hour=settings.record_day_start_hour)
    anchor = datetime.combine(day, time(hour=settings.record_day_start_hour), tzinfo=timezone.utc)
    return get_record_day_window(anchor, settings.record_day_start_hour)


@router.get("/ranges", response_model=List[TemperatureRangeResponse])
async def list_ranges(profile: UserProfile = Depends(get_current_profile)):
    """Safe temperature guidelines per reading type"""
    return [
        TemperatureRangeResponse(type=temperature_type, min=temperature_range.min, max=temperature_range.max)
        for temperature_type, temperature_range in TEMPERATURE_RANGES.items()
    ]


@router.post("", response_model=TemperatureResponse, status_code=201)
async def record_temperature(
    temperature_data: TemperatureCreate,
    profile: UserProfile = Depends(require_permission(Capability.RECORD_TEMPERATURES)),
    service: TemperatureService = Depends(get_temperature_service),
    supabase: Client = Depends(get_supabase)
):
    """Log a temperature reading at a location in the caller's scope"""
    load_location_in_scope(temperature_data.location_id, profile, supabase)
    return service.record_temperature(temperature_data, profile.id)


@router.get("", response_model=List[TemperatureResponse])
async def list_temperatures(
    location_id: str,
    day: Optional[date] = None,
    profile: UserProfile = Depends(require_permission(Capability.VIEW_ALL_RECORDS)),
    service: TemperatureService = Depends(get_temperature_service),
    supabase: Client = Depends(get_supabase)
):
    """Readings for one log day (the current one when day is omitted)"""
    load_location_in_scope(location_id, profile, supabase)
    start, end = record_day_window(day)
    return service.list_temperatures(location_id, start, end)


@router.patch("/{temperature_id}/corrective-action", response_model=TemperatureResponse)
async def set_corrective_action(
    temperature_id: str,
    update: CorrectiveActionUpdate,
    profile: UserProfile = Depends(require_permission(Capability.RECORD_TEMPERATURES)),
    service: TemperatureService = Depends(get_temperature_service),
    supabase: Client = Depends(get_supabase)
):
    """Attach a corrective action note to a reading"""
    record = service.get_temperature_by_id(temperature_id)
    load_location_in_scope(record.location_id, profile, supabase)
    return service.set_corrective_action(temperature_id, update.corrective_action)


@router.delete("/{temperature_id}", status_code=204)
async def delete_temperature(
    temperature_id: str,
    profile: UserProfile = Depends(get_current_profile),
    service: TemperatureService = Depends(get_temperature_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete a reading (company admins and super users)"""
    record = service.get_temperature_by_id(temperature_id)
    location = load_location_in_scope(record.location_id, profile, supabase)
    check_record_action(profile, location.company_id, RecordAction.DELETE)
    service.delete_temperature(temperature_id)
    return None
