from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from safebite.modules.temperatures.ranges import TemperatureType


class TemperatureCreate(BaseModel):
    location_id: str
    type: TemperatureType
    value: float = Field(allow_inf_nan=False)
    unit_id: Optional[str] = None  # fridge / freezer
    food_item_id: Optional[str] = None  # food
    supplier_id: Optional[str] = None  # delivery


class CorrectiveActionUpdate(BaseModel):
    corrective_action: str


class TemperatureResponse(BaseModel):
    id: str
    location_id: str
    type: str
    value: float
    unit_id: Optional[str] = None
    food_item_id: Optional[str] = None
    supplier_id: Optional[str] = None
    created_by: Optional[str] = None
    timestamp: datetime
    corrective_action: Optional[str] = None
    out_of_range: bool = False

    class Config:
        from_attributes = True


class TemperatureRangeResponse(BaseModel):
    type: TemperatureType
    min: float
    max: float
