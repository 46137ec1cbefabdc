"""
Roles and Permissions Configuration
This config defines the fixed role -> capability table for the app.
The table is built once at import time and is read-only afterwards; consumers
import it (or the helpers below) and never resolve it lazily at request time.
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class Role(str, Enum):
    SUPER_USER = "super_user"
    COMPANY_ADMIN = "company_admin"
    OPS = "ops"
    MANAGER = "manager"


class Capability(str, Enum):
    VIEW_ALL_COMPANIES = "canViewAllCompanies"
    VIEW_ALL_LOCATIONS = "canViewAllLocations"
    CREATE_COMPANIES = "canCreateCompanies"
    MANAGE_USERS = "canManageUsers"
    CREATE_CHECKLISTS = "canCreateChecklists"
    EDIT_CHECKLISTS = "canEditChecklists"
    DELETE_CHECKLISTS = "canDeleteChecklists"
    RECORD_TEMPERATURES = "canRecordTemperatures"
    COMPLETE_CHECKLISTS = "canCompleteChecklists"
    VIEW_ALL_RECORDS = "canViewAllRecords"
    DOWNLOAD_RECORDS = "canDownloadRecords"
    GENERATE_REPORTS = "canGenerateReports"
    MANAGE_ROLES = "canManageRoles"


# Capabilities granted per role; anything not listed is denied
_GRANTS = {
    Role.SUPER_USER: set(Capability),
    Role.COMPANY_ADMIN: {
        Capability.VIEW_ALL_LOCATIONS,
        Capability.MANAGE_USERS,
        Capability.CREATE_CHECKLISTS,
        Capability.EDIT_CHECKLISTS,
        Capability.DELETE_CHECKLISTS,
        Capability.RECORD_TEMPERATURES,
        Capability.COMPLETE_CHECKLISTS,
        Capability.VIEW_ALL_RECORDS,
        Capability.DOWNLOAD_RECORDS,
        Capability.GENERATE_REPORTS,
    },
    Role.OPS: {
        Capability.VIEW_ALL_LOCATIONS,
        Capability.RECORD_TEMPERATURES,
        Capability.COMPLETE_CHECKLISTS,
        Capability.VIEW_ALL_RECORDS,
        Capability.DOWNLOAD_RECORDS,
    },
    Role.MANAGER: {
        Capability.RECORD_TEMPERATURES,
        Capability.COMPLETE_CHECKLISTS,
        Capability.VIEW_ALL_RECORDS,
        Capability.DOWNLOAD_RECORDS,
    },
}

ROLE_PERMISSIONS: Mapping[Role, Mapping[Capability, bool]] = MappingProxyType({
    role: MappingProxyType({capability: capability in _GRANTS[role] for capability in Capability})
    for role in Role
})

ROLE_DISPLAY_NAMES = MappingProxyType({
    Role.SUPER_USER: "App Super User",
    Role.COMPANY_ADMIN: "Company Admin",
    Role.OPS: "Operations Manager",
    Role.MANAGER: "Manager",
})

ROLE_DESCRIPTIONS = MappingProxyType({
    Role.SUPER_USER: "Full access to all companies, locations, and features. Can manage users and roles.",
    Role.COMPANY_ADMIN: "Access to all locations within their company. Can create and manage checklists, items, and users.",
    Role.OPS: "Access to all locations within their company. Can record temperatures and complete checklists.",
    Role.MANAGER: "Access to assigned locations only. Can record temperatures and complete checklists.",
})

# Roles a user may assign to (and manage on) other profiles
ASSIGNABLE_ROLES = MappingProxyType({
    Role.SUPER_USER: (Role.SUPER_USER, Role.COMPANY_ADMIN, Role.OPS, Role.MANAGER),
    Role.COMPANY_ADMIN: (Role.OPS, Role.MANAGER),
    Role.OPS: (),
    Role.MANAGER: (),
})


def coerce_role(role: Any) -> Optional[Role]:
    """Return the Role for a role value, or None (logged) when it is not one."""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except (ValueError, TypeError):
        logger.warning(f"Unknown role: {role!r}")
        return None


def coerce_capability(capability: Any) -> Optional[Capability]:
    if isinstance(capability, Capability):
        return capability
    try:
        return Capability(capability)
    except (ValueError, TypeError):
        logger.warning(f"Unknown capability: {capability!r}")
        return None


def has_permission(role: Any, capability: Any) -> bool:
    """Check if a role has a capability. Unknown roles and capabilities are denied, never raised."""
    resolved_role = coerce_role(role)
    resolved_capability = coerce_capability(capability)
    if resolved_role is None or resolved_capability is None:
        return False
    return ROLE_PERMISSIONS[resolved_role][resolved_capability]


def get_role_capabilities(role: Any) -> List[str]:
    """Names of the capabilities granted to a role (empty for unknown roles)"""
    resolved = coerce_role(role)
    if resolved is None:
        return []
    return [capability.value for capability, granted in ROLE_PERMISSIONS[resolved].items() if granted]


def get_all_roles() -> List[Role]:
    return list(Role)


def get_assignable_roles(role: Any) -> List[Role]:
    resolved = coerce_role(role)
    if resolved is None:
        return []
    return list(ASSIGNABLE_ROLES[resolved])


def can_manage_role(manager_role: Any, target_role: Any) -> bool:
    """Check if a user with manager_role may create, edit or delete a profile holding target_role"""
    target = coerce_role(target_role)
    if target is None:
        return False
    return target in get_assignable_roles(manager_role)


def get_role_display_name(role: Any) -> str:
    resolved = coerce_role(role)
    return ROLE_DISPLAY_NAMES[resolved] if resolved else str(role)


def get_role_description(role: Any) -> str:
    resolved = coerce_role(role)
    return ROLE_DESCRIPTIONS[resolved] if resolved else ""


def get_permission_matrix() -> Dict[str, Any]:
    """
    Returns the whole table as a plain document for clients
    Format: {
        "capabilities": ["canViewAllCompanies", ...],
        "roles": [
            {
                "name": "super_user",
                "display_name": "App Super User",
                "description": "...",
                "permissions": ["canViewAllCompanies", ...]
            },
            ...
        ]
    }
    """
    return {
        "capabilities": [capability.value for capability in Capability],
        "roles": [
            {
                "name": role.value,
                "display_name": ROLE_DISPLAY_NAMES[role],
                "description": ROLE_DESCRIPTIONS[role],
                "permissions": get_role_capabilities(role),
            }
            for role in Role
        ],
    }
