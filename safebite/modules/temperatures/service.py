import logging
from datetime import datetime, timezone
from supabase import Client
from safebite.modules.temperatures.schemas import TemperatureCreate, TemperatureResponse
from safebite.modules.temperatures.ranges import TemperatureType, is_out_of_range
from typing import Any, Dict, List
from fastapi import HTTPException

logger = logging.getLogger(__name__)

# Which target column a reading of each type is attached to
TARGET_FIELDS = {
    TemperatureType.FRIDGE: "unit_id",
    TemperatureType.FREEZER: "unit_id",
    TemperatureType.FOOD: "food_item_id",
    TemperatureType.DELIVERY: "supplier_id",
}

# Catalog table and label behind each target column
TARGET_TABLES = {
    "unit_id": ("units", "Unit"),
    "food_item_id": ("food_items", "Food item"),
    "supplier_id": ("suppliers", "Supplier"),
}


def to_response(row: Dict[str, Any]) -> TemperatureResponse:
    return TemperatureResponse(**row, out_of_range=is_out_of_range(row.get("type"), float(row["value"])))


class TemperatureService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _check_target(self, temperature_data: TemperatureCreate, target_field: str) -> None:
        """The reading's target must exist at the reading's location; units must match the reading type"""
        target_id = getattr(temperature_data, target_field)
        if target_id is None:
            return
        table, label = TARGET_TABLES[target_field]
        result = self.supabase.table(table)\
            .select("*")\
            .eq("id", target_id)\
            .limit(1)\
            .execute()
        if not result.data or result.data[0].get("location_id") != temperature_data.location_id:
            raise HTTPException(status_code=400, detail=f"{label} not found at this location")
        if target_field == "unit_id" and result.data[0].get("type") != temperature_data.type.value:
            raise HTTPException(status_code=400, detail=f"Unit is not a {temperature_data.type.value}")

    def record_temperature(self, temperature_data: TemperatureCreate, user_id: str) -> TemperatureResponse:
        """Log a reading; only the target column matching the reading type is stored"""
        try:
            payload = {
                "location_id": temperature_data.location_id,
                "type": temperature_data.type.value,
                "value": temperature_data.value,
                "created_by": user_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
            target_field = TARGET_FIELDS[temperature_data.type]
            self._check_target(temperature_data, target_field)
            payload[target_field] = getattr(temperature_data, target_field)

            result = self.supabase.table("temperatures").insert(payload).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to log temperature")

            record = to_response(result.data[0])
            if record.out_of_range:
                logger.warning(
                    f"Unsafe {record.type} temperature {record.value} at location {record.location_id} "
                    f"(record {record.id})"
                )
            return record
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error logging temperature: {e}")
            raise HTTPException(status_code=500, detail="Failed to log temperature")

    def get_temperature_by_id(self, temperature_id: str) -> TemperatureResponse:
        try:
            result = self.supabase.table("temperatures")\
                .select("*")\
                .eq("id", temperature_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Temperature record not found")

            return to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting temperature {temperature_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load temperature record")

    def list_temperatures(self, location_id: str, start: datetime, end: datetime) -> List[TemperatureResponse]:
        """Readings for a location with start <= timestamp < end, newest first"""
        try:
            result = self.supabase.table("temperatures")\
                .select("*")\
                .eq("location_id", location_id)\
                .gte("timestamp", start.isoformat())\
                .lt("timestamp", end.isoformat())\
                .order("timestamp", desc=True)\
                .execute()
            return [to_response(row) for row in result.data]
        except Exception as e:
            logger.error(f"Error listing temperatures for location {location_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to list temperatures")

    def set_corrective_action(self, temperature_id: str, corrective_action: str) -> TemperatureResponse:
        try:
            result = self.supabase.table("temperatures")\
                .update({"corrective_action": corrective_action})\
                .eq("id", temperature_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Temperature record not found")

            return to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error saving corrective action for {temperature_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to save corrective action")

    def delete_temperature(self, temperature_id: str) -> bool:
        try:
            result = self.supabase.table("temperatures")\
                .delete()\
                .eq("id", temperature_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting temperature {temperature_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete temperature record")
