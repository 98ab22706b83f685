"""Centralized authorization policies.

Every request resolves one :class:`Principal` up front (see
``daysheets.api.dependencies``); services receive it explicitly and call
:func:`authorize` / :func:`require_artist_access` instead of re-reading the
user row and comparing roles inline.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from daysheets.models.user import UserRole
from daysheets.utils.errors import AuthError, ForbiddenError

STAFF_ROLES = frozenset({UserRole.AGENT, UserRole.ADMIN})
ALL_ROLES = frozenset(UserRole)


class Principal(BaseModel):
    """Session context for an authenticated request."""

    user_id: str
    email: str
    role: UserRole
    full_name: Optional[str] = None
    # Only meaningful for clients; staff see every artist
    artist_ids: frozenset[str] = frozenset()

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def can_access_artist(self, artist_id: Optional[str]) -> bool:
        if self.is_staff:
            return True
        return artist_id is not None and artist_id in self.artist_ids


@dataclass(frozen=True)
class ActionPolicy:
    """Roles allowed to perform one action."""

    roles: frozenset
    message: str = "Insufficient permissions"


POLICIES: dict[str, ActionPolicy] = {
    "selections.select": ActionPolicy(ALL_ROLES),
    "selections.view": ActionPolicy(ALL_ROLES),
    "selections.confirm": ActionPolicy(ALL_ROLES),
    "selection_groups.seed": ActionPolicy(STAFF_ROLES, "Only agents can seed selection groups"),
    "selection_groups.view": ActionPolicy(ALL_ROLES),
    "queue.view": ActionPolicy(STAFF_ROLES, "Only agents can view the booking queue"),
    "queue.hold": ActionPolicy(STAFF_ROLES, "Only agents can place holds"),
    "queue.ticket": ActionPolicy(STAFF_ROLES, "Only agents can mark passengers ticketed"),
    "documents.view": ActionPolicy(ALL_ROLES),
    "documents.manage": ActionPolicy(STAFF_ROLES, "Only agents can manage documents"),
    "notifications.push": ActionPolicy(STAFF_ROLES, "Only agents can push notifications"),
    "notifications.view": ActionPolicy(ALL_ROLES),
    "chat.global_unread": ActionPolicy(STAFF_ROLES, "Clients cannot view global chat counts"),
    "chat.use": ActionPolicy(ALL_ROLES),
    "options.manage": ActionPolicy(STAFF_ROLES, "Only agents can manage flight options"),
    "options.view": ActionPolicy(ALL_ROLES),
    "invites.create": ActionPolicy(frozenset({UserRole.ADMIN}), "Only admins can invite users"),
    "tours.manage": ActionPolicy(STAFF_ROLES, "Only agents can manage tours"),
    "artists.view": ActionPolicy(STAFF_ROLES, "Employee access required"),
}


def require_authenticated(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise AuthError("Authentication required")
    return principal


def authorize(principal: Optional[Principal], action: str) -> Principal:
    """Return the principal if it may perform ``action``; raise otherwise."""
    principal = require_authenticated(principal)
    policy = POLICIES[action]
    if principal.role not in policy.roles:
        raise ForbiddenError(policy.message)
    return principal


def require_staff(principal: Optional[Principal]) -> Principal:
    return require_role(principal, *STAFF_ROLES)


def require_role(principal: Optional[Principal], *roles: UserRole) -> Principal:
    principal = require_authenticated(principal)
    if principal.role not in roles:
        raise ForbiddenError("Insufficient permissions")
    return principal


def require_artist_access(principal: Principal, artist_id: Optional[str]) -> None:
    if not principal.can_access_artist(artist_id):
        raise ForbiddenError("Access denied: not assigned to this artist")
