"""
Route guard: decides what a protected view may render for the current session.

The decision is a pure function of a SessionState snapshot; nothing is retried.
Protected content is passed in as a callable so it is only produced once
access has been granted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Tuple, TypeVar, Union

from safebite.config.permissions_config import coerce_role, has_permission
from safebite.config.settings import settings
from safebite.core.session import SessionState

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOADING_MESSAGE = "Loading..."
UNAUTHENTICATED_MESSAGE = "Not authenticated"
ROLE_DENIED_MESSAGE = "You do not have the required permissions to access this page."
PERMISSION_DENIED_MESSAGE = "You do not have permission to access this feature."


class GuardOutcome(str, Enum):
    LOADING = "loading"
    REDIRECT = "redirect"
    DENIED = "denied"
    ALLOWED = "allowed"


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    message: Optional[str] = None
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GuardOutcome.ALLOWED


ALLOWED = GuardDecision(GuardOutcome.ALLOWED)


class RouteGuard:
    """
    Gate for one protected view.

    required_roles and required_permission are independent; when both are
    given, both must pass.
    """

    def __init__(
        self,
        required_roles: Optional[Iterable[Any]] = None,
        required_permission: Optional[Any] = None,
        login_path: Optional[str] = None,
    ):
        self.required_roles: Tuple[Any, ...] = tuple(required_roles or ())
        self.required_permission = required_permission
        self.login_path = login_path or settings.login_path

    def evaluate(self, state: SessionState) -> GuardDecision:
        if state.loading:
            return GuardDecision(GuardOutcome.LOADING, message=LOADING_MESSAGE)
        if not state.authenticated or state.profile is None:
            return GuardDecision(GuardOutcome.REDIRECT, message=UNAUTHENTICATED_MESSAGE, redirect_to=self.login_path)

        role = state.profile.role
        if self.required_roles:
            allowed_roles = {coerce_role(r) for r in self.required_roles}
            if role not in allowed_roles:
                logger.info(f"Access denied for user {state.profile.id}: role {role.value} not in required roles")
                return GuardDecision(GuardOutcome.DENIED, message=ROLE_DENIED_MESSAGE)

        if self.required_permission is not None and not has_permission(role, self.required_permission):
            logger.info(f"Access denied for user {state.profile.id}: missing {self.required_permission}")
            return GuardDecision(GuardOutcome.DENIED, message=PERMISSION_DENIED_MESSAGE)

        return ALLOWED

    def render(self, state: SessionState, content: Callable[[], T]) -> Union[T, GuardDecision]:
        """Return content() when allowed, otherwise the decision describing the placeholder to show"""
        decision = self.evaluate(state)
        if decision.allowed:
            return content()
        return decision


def role_based_access(
    state: SessionState,
    content: Callable[[], T],
    allowed_roles: Optional[Iterable[Any]] = None,
    required_permission: Optional[Any] = None,
    fallback: Optional[T] = None,
) -> Optional[T]:
    """Conditional fragment: content() when the session passes the checks, fallback otherwise (never redirects)."""
    decision = RouteGuard(allowed_roles, required_permission).evaluate(state)
    if decision.allowed:
        return content()
    return fallback
