from fastapi import APIRouter, Depends
from safebite.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    MeResponse, RolesResponse
)
from safebite.modules.auth.service import AuthService
from safebite.modules.users.schemas import UserProfile
from safebite.core.dependencies import get_auth_service, get_current_profile, get_current_token
from safebite.core.scope import ScopeResolver
from safebite.config.permissions_config import (
    get_permission_matrix, get_role_capabilities, get_role_display_name, get_assignable_roles
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(profile: UserProfile = Depends(get_current_profile)):
    """Current profile with its granted capabilities and access scope (for frontend UI)."""
    return MeResponse(
        profile=profile,
        role_display_name=get_role_display_name(profile.role),
        access_scope=ScopeResolver(profile).describe(),
        permissions=get_role_capabilities(profile.role),
        profile_complete=profile.is_complete,
    )


@router.get("/roles", response_model=RolesResponse)
async def get_roles(profile: UserProfile = Depends(get_current_profile)):
    """Role permission table plus the roles the caller may assign"""
    matrix = get_permission_matrix()
    return RolesResponse(
        capabilities=matrix["capabilities"],
        roles=matrix["roles"],
        assignable_roles=[role.value for role in get_assignable_roles(profile.role)],
    )
