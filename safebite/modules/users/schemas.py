from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional, List
from datetime import datetime

from safebite.config.permissions_config import Role


class UserProfile(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    company_id: Optional[str] = None  # null only for super_user
    role: Role
    location_ids: List[str] = []
    created_at: Optional[datetime] = None

    @field_validator("location_ids", mode="before")
    @classmethod
    def _null_locations_as_empty(cls, value):
        return value or []

    @property
    def is_complete(self) -> bool:
        """A profile is complete once it has identity, name, role and (unless super_user) a company"""
        if not (self.id and self.email and self.full_name):
            return False
        return self.role is Role.SUPER_USER or bool(self.company_id)

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    email: EmailStr
    full_name: str
    password: Optional[str] = None  # invite without password when omitted
    role: Role = Role.MANAGER
    company_id: Optional[str] = None
    location_ids: List[str] = []


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    role: Optional[Role] = None
    company_id: Optional[str] = None
    location_ids: Optional[List[str]] = None
