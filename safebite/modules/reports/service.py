"""
Read-only summaries over temperature readings and checklist completions.

Daily reading targets: every fridge and freezer unit is checked twice a
log day, a kitchen takes twelve food readings, deliveries have no target.
"""

import logging
from collections import Counter
from datetime import date, datetime
from supabase import Client
from safebite.modules.checklists.progress import compute_progress
from safebite.modules.checklists.service import ChecklistService
from safebite.modules.reports.schemas import DashboardResponse, ReadingCount, UserActivity
from safebite.modules.targets.schemas import UnitResponse
from safebite.modules.targets.service import UnitService
from safebite.modules.temperatures.ranges import TemperatureType
from safebite.modules.temperatures.service import TemperatureService
from typing import Dict, Iterable, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

READINGS_PER_UNIT = 2
FOOD_READINGS_TARGET = 12


def reading_targets(units: Iterable[UnitResponse]) -> Dict[TemperatureType, Optional[int]]:
    unit_counts = Counter(unit.type.value for unit in units)
    return {
        TemperatureType.FRIDGE: unit_counts[TemperatureType.FRIDGE.value] * READINGS_PER_UNIT,
        TemperatureType.FREEZER: unit_counts[TemperatureType.FREEZER.value] * READINGS_PER_UNIT,
        TemperatureType.FOOD: FOOD_READINGS_TARGET,
        TemperatureType.DELIVERY: None,
    }


class ReportService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.temperatures = TemperatureService(supabase)
        self.units = UnitService(supabase)
        self.checklists = ChecklistService(supabase)

    def dashboard(
        self,
        location_id: str,
        start: datetime,
        end: datetime,
        user_id: str,
        on_date: date
    ) -> DashboardResponse:
        """Readings per type in [start, end) against targets, plus the user's checklist progress for on_date"""
        readings = self.temperatures.list_temperatures(location_id, start, end)
        counts = Counter(reading.type for reading in readings)
        targets = reading_targets(self.units.list_for_location(location_id))

        checklists = self.checklists.list_checklists(location_id)
        completed = self.checklists.completed_subtask_ids(user_id, on_date)

        return DashboardResponse(
            location_id=location_id,
            date=on_date,
            window_start=start,
            window_end=end,
            readings=[
                ReadingCount(type=reading_type, count=counts[reading_type.value], target=targets[reading_type])
                for reading_type in TemperatureType
            ],
            checklists=compute_progress(checklists, completed)
        )

    def user_activity(self, location_id: str, company_id: Optional[str]) -> List[UserActivity]:
        """Readings taken and subtasks completed at a location, per member of the location's company"""
        try:
            if company_id is None:
                return []
            profiles = self.supabase.table("profiles")\
                .select("id, full_name")\
                .eq("company_id", company_id)\
                .order("full_name")\
                .execute().data

            readings = self.supabase.table("temperatures")\
                .select("created_by")\
                .eq("location_id", location_id)\
                .execute().data
            reading_counts = Counter(row["created_by"] for row in readings)

            subtask_ids = [
                subtask.id
                for checklist in self.checklists.list_checklists(location_id)
                for task in checklist.tasks
                for subtask in task.subtasks
            ]
            completion_counts = Counter()
            if subtask_ids:
                completions = self.supabase.table("checklist_subtask_completions")\
                    .select("user_id")\
                    .in_("subtask_id", subtask_ids)\
                    .eq("completed", True)\
                    .execute().data
                completion_counts = Counter(row["user_id"] for row in completions)

            return [
                UserActivity(
                    user_id=profile["id"],
                    full_name=profile.get("full_name"),
                    temperature_count=reading_counts[profile["id"]],
                    checklist_count=completion_counts[profile["id"]]
                )
                for profile in profiles
            ]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error building user activity for location {location_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to build user activity report")
