"""
Ownership/role authorization rules.

Every single-resource operation asks `authorize(caller, owner_id, action)`
before touching the row. The function is pure so the decision table can be
tested without HTTP or a database.

    VIEW, UPDATE                         owner or admin      (else 401)
    TRANSFER, LIST_ALL, MANAGE_LIBRARY   admin only          (else 403)
    DELETE, RESTORE                      current owner only  (else 401, admins included)
"""

import enum
from dataclasses import dataclass

from fastapi import status

from carsense_api.models.user import User
from carsense_api.utils.exceptions import ForbiddenException, UnauthorizedException


class Action(str, enum.Enum):
    LIST_ALL       = "list_all"
    VIEW           = "view"
    UPDATE         = "update"
    TRANSFER       = "transfer"
    DELETE         = "delete"
    RESTORE        = "restore"
    MANAGE_LIBRARY = "manage_library"


_OWNER_OR_ADMIN = {Action.VIEW, Action.UPDATE}
_ADMIN_ONLY     = {Action.TRANSFER, Action.LIST_ALL, Action.MANAGE_LIBRARY}
_OWNER_ONLY     = {Action.DELETE, Action.RESTORE}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str
    status_code: int = status.HTTP_200_OK


def authorize(caller: User | None, owner_id: str | None, action: Action) -> Decision:
    if caller is None:
        return Decision(False, "No authenticated user", status.HTTP_401_UNAUTHORIZED)

    is_owner = owner_id is not None and caller.id == owner_id

    if action in _OWNER_OR_ADMIN:
        if caller.is_admin:
            return Decision(True, "Caller is an admin")
        if is_owner:
            return Decision(True, "Caller owns the resource")
        return Decision(False, "Caller is neither the owner nor an admin", status.HTTP_401_UNAUTHORIZED)

    if action in _ADMIN_ONLY:
        if caller.is_admin:
            return Decision(True, "Caller is an admin")
        return Decision(False, f"Only admins may perform '{action.value}'", status.HTTP_403_FORBIDDEN)

    if action in _OWNER_ONLY:
        if is_owner:
            return Decision(True, "Caller owns the resource")
        return Decision(False, "Only the current owner may perform this action", status.HTTP_401_UNAUTHORIZED)

    raise ValueError(f"Unknown action: {action!r}")


def enforce(caller: User | None, owner_id: str | None, action: Action, message: str | None = None) -> User:
    """Raise the matching HTTP exception when `authorize` denies; return the caller otherwise."""
    decision = authorize(caller, owner_id, action)
    if decision.allowed:
        return caller
    if decision.status_code == status.HTTP_403_FORBIDDEN:
        raise ForbiddenException(message or decision.reason)
    raise UnauthorizedException()


def require_caller(caller: User | None) -> User:
    if caller is None:
        raise UnauthorizedException()
    return caller
