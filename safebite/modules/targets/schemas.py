from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UnitType(str, Enum):
    FRIDGE = "fridge"
    FREEZER = "freezer"


class TargetCreate(BaseModel):
    location_id: str
    name: str


class TargetUpdate(BaseModel):
    name: Optional[str] = None


class TargetResponse(BaseModel):
    id: str
    location_id: str
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnitCreate(TargetCreate):
    type: UnitType


class UnitUpdate(TargetUpdate):
    type: Optional[UnitType] = None


class UnitResponse(TargetResponse):
    type: UnitType
