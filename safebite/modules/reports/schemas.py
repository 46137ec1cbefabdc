from pydantic import BaseModel
from typing import List, Optional
from datetime import date as Date, datetime

from safebite.modules.checklists.schemas import FrequencyProgress
from safebite.modules.temperatures.ranges import TemperatureType


class ReadingCount(BaseModel):
    type: TemperatureType
    count: int
    target: Optional[int] = None  # None when there is no daily target


class DashboardResponse(BaseModel):
    location_id: str
    date: Date
    window_start: datetime
    window_end: datetime
    readings: List[ReadingCount]
    checklists: List[FrequencyProgress]


class UserActivity(BaseModel):
    user_id: str
    full_name: Optional[str] = None
    temperature_count: int
    checklist_count: int
