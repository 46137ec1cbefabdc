"""
Company/location scoping for the multi-tenant hierarchy.

Every check here is a pure function of the caller's role and tenant binding;
anything ambiguous (unknown role or action, missing company) is denied.
"""

import logging
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, TypeVar

from safebite.config.permissions_config import Role, coerce_role

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordAction(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"


# Actions allowed inside the caller's own company
_COMPANY_ACTIONS = {
    Role.COMPANY_ADMIN: {RecordAction.VIEW, RecordAction.EDIT, RecordAction.DELETE},
    Role.OPS: {RecordAction.VIEW, RecordAction.EDIT},
    Role.MANAGER: {RecordAction.VIEW},
}


def _coerce_action(action: Any) -> Optional[RecordAction]:
    if isinstance(action, RecordAction):
        return action
    try:
        return RecordAction(action)
    except (ValueError, TypeError):
        logger.warning(f"Unknown record action: {action!r}")
        return None


def can_access_company(role: Any, user_company_id: Optional[str], target_company_id: Optional[str]) -> bool:
    resolved = coerce_role(role)
    if resolved is None:
        return False
    if resolved is Role.SUPER_USER:
        return True
    return user_company_id is not None and user_company_id == target_company_id


def can_access_location(
    role: Any,
    user_company_id: Optional[str],
    user_location_ids: Optional[Iterable[str]],
    target_company_id: Optional[str],
    target_location_id: Optional[str],
) -> bool:
    """Location visibility: company access first, then managers are limited to their assigned ids."""
    resolved = coerce_role(role)
    if resolved is None:
        return False
    if not can_access_company(resolved, user_company_id, target_company_id):
        return False
    if resolved in (Role.SUPER_USER, Role.COMPANY_ADMIN, Role.OPS):
        return True
    # Managers: explicit assignment only, an empty assignment means no locations
    return target_location_id is not None and target_location_id in set(user_location_ids or ())


def can_perform_action(
    role: Any,
    user_company_id: Optional[str],
    record_company_id: Optional[str],
    action: Any,
) -> bool:
    """Check if a user can view, edit or delete a record owned by record_company_id"""
    resolved = coerce_role(role)
    resolved_action = _coerce_action(action)
    if resolved is None or resolved_action is None:
        return False
    if resolved is Role.SUPER_USER:
        return True
    if not can_access_company(resolved, user_company_id, record_company_id):
        return False
    return resolved_action in _COMPANY_ACTIONS.get(resolved, set())


def get_company_filter(role: Any, user_company_id: Optional[str]) -> Optional[List[str]]:
    """
    Company ids a list query must be restricted to.
    None means unrestricted (super_user); an empty list means nothing is visible.
    """
    resolved = coerce_role(role)
    if resolved is Role.SUPER_USER:
        return None
    if resolved is None or user_company_id is None:
        return []
    return [user_company_id]


def get_location_filter(role: Any, user_location_ids: Optional[Iterable[str]]) -> Optional[List[str]]:
    """Location ids a list query must be restricted to on top of the company filter (None = whole company)."""
    resolved = coerce_role(role)
    if resolved in (Role.SUPER_USER, Role.COMPANY_ADMIN, Role.OPS):
        return None
    if resolved is None:
        return []
    return list(user_location_ids or [])


def get_access_scope_description(role: Any, user_location_ids: Optional[Sequence[str]]) -> str:
    resolved = coerce_role(role)
    if resolved is Role.SUPER_USER:
        return "All companies and locations"
    if resolved in (Role.COMPANY_ADMIN, Role.OPS):
        return "All locations in company"
    if resolved is Role.MANAGER:
        return f"{len(user_location_ids or [])} assigned location(s)"
    return "No access"


class ScopeResolver:
    """Scope checks bound to one caller's profile (anything with role, company_id and location_ids)."""

    def __init__(self, profile: Any):
        self.role = getattr(profile, "role", None)
        self.company_id = getattr(profile, "company_id", None)
        self.location_ids = list(getattr(profile, "location_ids", None) or [])

    def can_access_company(self, company_id: Optional[str]) -> bool:
        return can_access_company(self.role, self.company_id, company_id)

    def can_access_location(self, company_id: Optional[str], location_id: Optional[str]) -> bool:
        return can_access_location(self.role, self.company_id, self.location_ids, company_id, location_id)

    def can_perform_action(self, record_company_id: Optional[str], action: Any) -> bool:
        return can_perform_action(self.role, self.company_id, record_company_id, action)

    def company_filter(self) -> Optional[List[str]]:
        return get_company_filter(self.role, self.company_id)

    def location_filter(self) -> Optional[List[str]]:
        return get_location_filter(self.role, self.location_ids)

    def filter_locations(self, locations: Iterable[T]) -> List[T]:
        """Keep only the locations (objects with id and company_id) this caller may see"""
        return [
            location for location in locations
            if self.can_access_location(getattr(location, "company_id", None), getattr(location, "id", None))
        ]

    def describe(self) -> str:
        return get_access_scope_description(self.role, self.location_ids)
