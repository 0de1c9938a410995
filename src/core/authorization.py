"""Role-based authorization.

The policy is a pure function of (principal, action, resource owner). Routes
and managers call the guards below, which turn a denial into
UnauthorizedError (no session) or ForbiddenError (insufficient role or
ownership).
"""

from enum import Enum
from typing import Optional

from core.exceptions import ForbiddenError, UnauthorizedError
from schemas.user import Principal


class Action(str, Enum):
    READ_CATALOG = "read_catalog"
    MANAGE_CATALOG = "manage_catalog"
    PLACE_ORDER = "place_order"
    READ_ORDERS = "read_orders"
    UPDATE_ORDER_STATUS = "update_order_status"
    DELETE_ORDER = "delete_order"


# Actions that ignore ownership and need the admin role
_ADMIN_ONLY = {Action.MANAGE_CATALOG, Action.UPDATE_ORDER_STATUS}

# Actions a regular user may perform on resources they own
_OWNER_ACTIONS = {Action.PLACE_ORDER, Action.READ_ORDERS, Action.DELETE_ORDER}


def is_allowed(
    principal: Optional[Principal],
    action: Action,
    owner_id: Optional[str] = None,
) -> bool:
    """Decide whether a principal may perform an action.

    Args:
        principal: The caller, or None for anonymous requests.
        action: What the caller wants to do.
        owner_id: Owner of the targeted resource, for owner-scoped actions.
            For PLACE_ORDER this is the user the order is placed for.

    Returns:
        True if the policy allows it.
    """
    if action == Action.READ_CATALOG:
        return True
    if principal is None:
        return False
    if principal.is_admin:
        return True
    if action in _ADMIN_ONLY:
        return False
    if action in _OWNER_ACTIONS:
        return owner_id is not None and owner_id == principal.user_id
    return False


def require_authenticated(principal: Optional[Principal]) -> Principal:
    """Return the principal, or raise UnauthorizedError for anonymous callers."""
    if principal is None:
        raise UnauthorizedError()
    return principal


def require_admin(principal: Optional[Principal]) -> Principal:
    """Return the principal if it is an admin.

    Raises:
        UnauthorizedError: If the caller is anonymous.
        ForbiddenError: If the caller is not an admin.
    """
    principal = require_authenticated(principal)
    if not principal.is_admin:
        raise ForbiddenError("Forbidden. Admin access required.")
    return principal


def require_owner_or_admin(principal: Optional[Principal], owner_id: str) -> Principal:
    """Return the principal if it owns the resource or is an admin.

    Raises:
        UnauthorizedError: If the caller is anonymous.
        ForbiddenError: If the caller neither owns the resource nor is admin.
    """
    principal = require_authenticated(principal)
    if principal.user_id != owner_id and not principal.is_admin:
        raise ForbiddenError("Forbidden. You can only access your own resources.")
    return principal


def authorize(
    principal: Optional[Principal],
    action: Action,
    owner_id: Optional[str] = None,
) -> Optional[Principal]:
    """Enforce ``is_allowed`` for a request.

    Returns:
        The principal (None only for anonymous catalog reads).

    Raises:
        UnauthorizedError: If an anonymous caller needs a session.
        ForbiddenError: If an authenticated caller is denied.
    """
    if is_allowed(principal, action, owner_id):
        return principal
    if principal is None:
        raise UnauthorizedError()
    if action in _ADMIN_ONLY:
        raise ForbiddenError("Forbidden. Admin access required.")
    raise ForbiddenError("Forbidden. You can only access your own resources.")
