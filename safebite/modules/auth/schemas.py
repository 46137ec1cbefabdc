from pydantic import BaseModel, EmailStr
from typing import Optional, List

from safebite.modules.users.schemas import UserProfile


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class MeResponse(BaseModel):
    profile: UserProfile
    role_display_name: str
    access_scope: str
    permissions: List[str]
    profile_complete: bool


class RoleInfo(BaseModel):
    name: str
    display_name: str
    description: str
    permissions: List[str]


class RolesResponse(BaseModel):
    capabilities: List[str]
    roles: List[RoleInfo]
    assignable_roles: List[str]


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
