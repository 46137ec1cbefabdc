import logging
from supabase import Client
from pydantic import BaseModel
from safebite.modules.targets.schemas import TargetResponse, UnitResponse
from typing import List, Type
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class CatalogService:
    """CRUD for one location-scoped catalog of reading targets"""

    table = ""
    label = ""
    response_model: Type[TargetResponse] = TargetResponse

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create(self, target_data: BaseModel) -> TargetResponse:
        try:
            if not target_data.name.strip():
                raise HTTPException(status_code=400, detail=f"{self.label} name is required")

            result = self.supabase.table(self.table).insert(target_data.model_dump(mode="json")).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail=f"Failed to create {self.label.lower()}")

            return self.response_model(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating {self.table} row: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to create {self.label.lower()}")

    def get_by_id(self, target_id: str) -> TargetResponse:
        try:
            result = self.supabase.table(self.table)\
                .select("*")\
                .eq("id", target_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail=f"{self.label} not found")

            return self.response_model(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting {self.table} row {target_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to load {self.label.lower()}")

    def list_for_location(self, location_id: str) -> List[TargetResponse]:
        """All targets of a location ordered by name"""
        try:
            result = self.supabase.table(self.table)\
                .select("*")\
                .eq("location_id", location_id)\
                .order("name")\
                .execute()
            return [self.response_model(**row) for row in result.data]
        except Exception as e:
            logger.error(f"Error listing {self.table} for location {location_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to list {self.table.replace('_', ' ')}")

    def update(self, target_id: str, target_data: BaseModel) -> TargetResponse:
        try:
            update_data = target_data.model_dump(exclude_none=True, mode="json")
            if "name" in update_data and not update_data["name"].strip():
                raise HTTPException(status_code=400, detail=f"{self.label} name is required")
            if not update_data:
                return self.get_by_id(target_id)

            result = self.supabase.table(self.table)\
                .update(update_data)\
                .eq("id", target_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail=f"{self.label} not found")

            return self.response_model(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating {self.table} row {target_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to update {self.label.lower()}")

    def delete(self, target_id: str) -> bool:
        try:
            result = self.supabase.table(self.table)\
                .delete()\
                .eq("id", target_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting {self.table} row {target_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to delete {self.label.lower()}")


class UnitService(CatalogService):
    table = "units"
    label = "Unit"
    response_model = UnitResponse


class SupplierService(CatalogService):
    table = "suppliers"
    label = "Supplier"


class FoodItemService(CatalogService):
    table = "food_items"
    label = "Food item"
