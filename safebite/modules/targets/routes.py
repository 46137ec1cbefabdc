from fastapi import APIRouter, Depends
from safebite.database.supabase_client import get_supabase
from safebite.modules.targets.schemas import (
    TargetCreate, TargetUpdate, TargetResponse, UnitCreate, UnitUpdate, UnitResponse
)
from safebite.modules.targets.service import UnitService, SupplierService, FoodItemService
from safebite.modules.users.schemas import UserProfile
from safebite.core.dependencies import (
    get_current_profile, require_roles, check_record_action, load_location_in_scope
)
from safebite.core.scope import RecordAction
from safebite.config.permissions_config import Role
from supabase import Client
from typing import List

router = APIRouter(tags=["targets"])

catalog_admin = require_roles(Role.SUPER_USER, Role.COMPANY_ADMIN)


def get_unit_service(supabase: Client = Depends(get_supabase)) -> UnitService:
    return UnitService(supabase)


def get_supplier_service(supabase: Client = Depends(get_supabase)) -> SupplierService:
    return SupplierService(supabase)


def get_food_item_service(supabase: Client = Depends(get_supabase)) -> FoodItemService:
    return FoodItemService(supabase)


def check_catalog_action(location_id: str, profile: UserProfile, supabase: Client, action: RecordAction) -> None:
    """Catalog changes need the location in scope and the action allowed on its company"""
    location = load_location_in_scope(location_id, profile, supabase)
    check_record_action(profile, location.company_id, action)


# Units (fridges and freezers)

@router.get("/units", response_model=List[UnitResponse])
async def list_units(
    location_id: str,
    profile: UserProfile = Depends(get_current_profile),
    service: UnitService = Depends(get_unit_service),
    supabase: Client = Depends(get_supabase)
):
    load_location_in_scope(location_id, profile, supabase)
    return service.list_for_location(location_id)


@router.post("/units", response_model=UnitResponse, status_code=201)
async def create_unit(
    unit_data: UnitCreate,
    profile: UserProfile = Depends(catalog_admin),
    service: UnitService = Depends(get_unit_service),
    supabase: Client = Depends(get_supabase)
):
    check_catalog_action(unit_data.location_id, profile, supabase, RecordAction.EDIT)
    return service.create(unit_data)


@router.put("/units/{unit_id}", response_model=UnitResponse)
async def update_unit(
    unit_id: str,
    unit_data: UnitUpdate,
    profile: UserProfile = Depends(catalog_admin),
    service: UnitService = Depends(get_unit_service),
    supabase: Client = Depends(get_supabase)
):
    unit = service.get_by_id(unit_id)
    check_catalog_action(unit.location_id, profile, supabase, RecordAction.EDIT)
    return service.update(unit_id, unit_data)


@router.delete("/units/{unit_id}", status_code=204)
async def delete_unit(
    unit_id: str,
    profile: UserProfile = Depends(catalog_admin),
    service: UnitService = Depends(get_unit_service),
    supabase: Client = Depends(get_supabase)
):
    unit = service.get_by_id(unit_id)
    check_catalog_action(unit.location_id, profile, supabase, RecordAction.DELETE)
    service.delete(unit_id)
    return None


# Suppliers (delivery readings)

@router.get("/suppliers", response_model=List[TargetResponse])
async def list_suppliers(
    location_id: str,
    profile: UserProfile = Depends(get_current_profile),
    service: SupplierService = Depends(get_supplier_service),
    supabase: Client = Depends(get_supabase)
):
    load_location_in_scope(location_id, profile, supabase)
    return service.list_for_location(location_id)


@router.post("/suppliers", response_model=TargetResponse, status_code=201)
async def create_supplier(
    supplier_data: TargetCreate,
    profile: UserProfile = Depends(catalog_admin),
    service: SupplierService = Depends(get_supplier_service),
    supabase: Client = Depends(get_supabase)
):
    check_catalog_action(supplier_data.location_id, profile, supabase, RecordAction.EDIT)
    return service.create(supplier_data)


@router.put("/suppliers/{supplier_id}", response_model=TargetResponse)
async def update_supplier(
    supplier_id: str,
    supplier_data: TargetUpdate,
    profile: UserProfile = Depends(catalog_admin),
    service: SupplierService = Depends(get_supplier_service),
    supabase: Client = Depends(get_supabase)
):
    supplier = service.get_by_id(supplier_id)
    check_catalog_action(supplier.location_id, profile, supabase, RecordAction.EDIT)
    return service.update(supplier_id, supplier_data)


@router.delete("/suppliers/{supplier_id}", status_code=204)
async def delete_supplier(
    supplier_id: str,
    profile: UserProfile = Depends(catalog_admin),
    service: SupplierService = Depends(get_supplier_service),
    supabase: Client = Depends(get_supabase)
):
    supplier = service.get_by_id(supplier_id)
    check_catalog_action(supplier.location_id, profile, supabase, RecordAction.DELETE)
    service.delete(supplier_id)
    return None


# Food items (food readings)

@router.get("/food-items", response_model=List[TargetResponse])
async def list_food_items(
    location_id: str,
    profile: UserProfile = Depends(get_current_profile),
    service: FoodItemService = Depends(get_food_item_service),
    supabase: Client = Depends(get_supabase)
):
    load_location_in_scope(location_id, profile, supabase)
    return service.list_for_location(location_id)


@router.post("/food-items", response_model=TargetResponse, status_code=201)
async def create_food_item(
    food_item_data: TargetCreate,
    profile: UserProfile = Depends(catalog_admin),
    service: FoodItemService = Depends(get_food_item_service),
    supabase: Client = Depends(get_supabase)
):
    check_catalog_action(food_item_data.location_id, profile, supabase, RecordAction.EDIT)
    return service.create(food_item_data)


@router.put("/food-items/{food_item_id}", response_model=TargetResponse)
async def update_food_item(
    food_item_id: str,
    food_item_data: TargetUpdate,
    profile: UserProfile = Depends(catalog_admin),
    service: FoodItemService = Depends(get_food_item_service),
    supabase: Client = Depends(get_supabase)
):
    food_item = service.get_by_id(food_item_id)
    check_catalog_action(food_item.location_id, profile, supabase, RecordAction.EDIT)
    return service.update(food_item_id, food_item_data)


@router.delete("/food-items/{food_item_id}", status_code=204)
async def delete_food_item(
    food_item_id: str,
    profile: UserProfile = Depends(catalog_admin),
    service: FoodItemService = Depends(get_food_item_service),
    supabase: Client = Depends(get_supabase)
):
    food_item = service.get_by_id(food_item_id)
    check_catalog_action(food_item.location_id, profile, supabase, RecordAction.DELETE)
    service.delete(food_item_id)
    return None
