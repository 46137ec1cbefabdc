from datetime import date, datetime, timezone
from fastapi import APIRouter, Depends
from safebite.database.supabase_client import get_supabase
from safebite.modules.checklists.schemas import (
    ChecklistCreate, ChecklistUpdate, ChecklistResponse, TaskCreate, TaskResponse,
    SubtaskCreate, SubtaskResponse, CompletionToggle, CompletionResponse, Frequency, ProgressResponse
)
from safebite.modules.checklists.service import ChecklistService
from safebite.modules.checklists.progress import compute_progress
from safebite.modules.users.schemas import UserProfile
from safebite.core.dependencies import (
    get_current_profile, require_permission, check_record_action, load_location_in_scope
)
from safebite.core.scope import RecordAction
from safebite.config.permissions_config import Capability
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/checklists", tags=["checklists"])


def get_checklist_service(supabase: Client = Depends(get_supabase)) -> ChecklistService:
    return ChecklistService(supabase)


def today() -> date:
    return datetime.now(timezone.utc).date()


@router.get("", response_model=List[ChecklistResponse])
async def list_checklists(
    location_id: str,
    frequency: Optional[Frequency] = None,
    day: Optional[date] = None,
    profile: UserProfile = Depends(get_current_profile),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    """Checklists of a location with tasks, subtasks and the caller's completion state for the day"""
    load_location_in_scope(location_id, profile, supabase)
    return service.list_checklists(location_id, frequency, user_id=profile.id, on_date=day or today())


@router.post("", response_model=ChecklistResponse, status_code=201)
async def create_checklist(
    checklist_data: ChecklistCreate,
    profile: UserProfile = Depends(require_permission(Capability.CREATE_CHECKLISTS)),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    load_location_in_scope(checklist_data.location_id, profile, supabase)
    return service.create_checklist(checklist_data)


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(
    location_id: str,
    day: Optional[date] = None,
    profile: UserProfile = Depends(require_permission(Capability.COMPLETE_CHECKLISTS)),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    """Caller's completion progress per frequency at a location"""
    load_location_in_scope(location_id, profile, supabase)
    on_date = day or today()
    checklists = service.list_checklists(location_id)
    completed = service.completed_subtask_ids(profile.id, on_date)
    return ProgressResponse(
        location_id=location_id,
        date=on_date,
        progress=compute_progress(checklists, completed)
    )


@router.get("/{checklist_id}", response_model=ChecklistResponse)
async def get_checklist(
    checklist_id: str,
    profile: UserProfile = Depends(get_current_profile),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    checklist = service.get_checklist_by_id(checklist_id)
    load_location_in_scope(checklist.location_id, profile, supabase)
    return checklist


@router.put("/{checklist_id}", response_model=ChecklistResponse)
async def update_checklist(
    checklist_id: str,
    checklist_data: ChecklistUpdate,
    profile: UserProfile = Depends(require_permission(Capability.EDIT_CHECKLISTS)),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    checklist = service.get_checklist_by_id(checklist_id)
    load_location_in_scope(checklist.location_id, profile, supabase)
    return service.update_checklist(checklist_id, checklist_data)


@router.delete("/{checklist_id}", status_code=204)
async def delete_checklist(
    checklist_id: str,
    profile: UserProfile = Depends(require_permission(Capability.DELETE_CHECKLISTS)),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete a checklist with everything under it"""
    checklist = service.get_checklist_by_id(checklist_id)
    location = load_location_in_scope(checklist.location_id, profile, supabase)
    check_record_action(profile, location.company_id, RecordAction.DELETE)
    service.delete_checklist(checklist_id)
    return None


@router.post("/{checklist_id}/tasks", response_model=TaskResponse, status_code=201)
async def add_task(
    checklist_id: str,
    task_data: TaskCreate,
    profile: UserProfile = Depends(require_permission(Capability.EDIT_CHECKLISTS)),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    checklist = service.get_checklist_by_id(checklist_id)
    load_location_in_scope(checklist.location_id, profile, supabase)
    return service.add_task(checklist_id, task_data)


@router.post("/tasks/{task_id}/subtasks", response_model=SubtaskResponse, status_code=201)
async def add_subtask(
    task_id: str,
    subtask_data: SubtaskCreate,
    profile: UserProfile = Depends(require_permission(Capability.EDIT_CHECKLISTS)),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    task = service.get_task(task_id)
    checklist = service.get_checklist_by_id(task["checklist_id"])
    load_location_in_scope(checklist.location_id, profile, supabase)
    return service.add_subtask(task_id, subtask_data)


@router.put("/subtasks/{subtask_id}/completion", response_model=CompletionResponse)
async def set_subtask_completion(
    subtask_id: str,
    toggle: CompletionToggle,
    profile: UserProfile = Depends(require_permission(Capability.COMPLETE_CHECKLISTS)),
    service: ChecklistService = Depends(get_checklist_service),
    supabase: Client = Depends(get_supabase)
):
    """Mark a subtask done (or not done) for the caller on a day"""
    location_id = service.get_subtask_location_id(subtask_id)
    load_location_in_scope(location_id, profile, supabase)
    return service.set_completion(subtask_id, profile.id, toggle.date or today(), toggle.completed)
