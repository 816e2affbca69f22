"""
Authorization rules.

Two layers:
  - role gates (require_any_of and the canned require_* dependencies) decide
    whether a role may ever perform an action, before any record is loaded;
  - attribute rules decide whether a specific record or field value is allowed
    for the caller, once the record is at hand.
"""
import logging
from typing import AbstractSet, Callable, Optional
from fastapi import Depends, Request
from app.features.access.roles import (
    ADMIN_OR_ABOVE,
    MANAGER_OR_ABOVE,
    SUPER_ADMIN_ONLY,
    RoleName,
)
from app.features.auth.dependencies import client_ip, get_current_identity
from app.utils.errors import BadRequest, Forbidden, Unauthenticated
from app.utils.security import Identity

logger = logging.getLogger(__name__)

HIGH_PRIORITY = "high"


def has_any_role(identity: Identity, roles: AbstractSet[RoleName]) -> bool:
    return RoleName.parse(identity.role) in roles


def is_restricted_to_own_records(identity: Identity) -> bool:
    """Callers below Manager only ever see and touch records assigned to them."""
    return not has_any_role(identity, MANAGER_OR_ABOVE)


# =============================================================================
# Role gates
# =============================================================================

def check_roles(identity: Optional[Identity], allowed: AbstractSet[RoleName], ip: Optional[str] = None) -> Identity:
    if identity is None:
        logger.warning("Role check failed: no authenticated user ip=%s", ip)
        raise Unauthenticated()

    if not has_any_role(identity, allowed):
        logger.warning(
            "Role check failed: insufficient permissions user_id=%s role=%s required=%s ip=%s",
            identity.user_id, identity.role, sorted(role.value for role in allowed), ip,
        )
        raise Forbidden("Insufficient permissions")

    logger.info("Role check passed user_id=%s role=%s ip=%s", identity.user_id, identity.role, ip)
    return identity


def require_any_of(*roles: RoleName) -> Callable[..., Identity]:
    allowed = frozenset(roles)

    def role_gate(request: Request, identity: Identity = Depends(get_current_identity)) -> Identity:
        return check_roles(identity, allowed, client_ip(request))

    return role_gate


require_super_admin = require_any_of(*SUPER_ADMIN_ONLY)
require_admin = require_any_of(*ADMIN_OR_ABOVE)
require_manager = require_any_of(*MANAGER_OR_ABOVE)


# =============================================================================
# Attribute rules
# =============================================================================

def ensure_can_assign_priority(identity: Optional[Identity], priority, ip: Optional[str] = None) -> None:
    if identity is None:
        logger.warning("ABAC check failed: no authenticated user ip=%s", ip)
        raise Unauthenticated()

    if priority == HIGH_PRIORITY and not has_any_role(identity, MANAGER_OR_ABOVE):
        logger.warning(
            "ABAC check failed: cannot assign high priority task user_id=%s role=%s ip=%s",
            identity.user_id, identity.role, ip,
        )
        raise Forbidden("Only managers, admins, and super admins can assign high priority tasks")

    logger.info(
        "ABAC check passed for task priority user_id=%s role=%s priority=%s ip=%s",
        identity.user_id, identity.role, priority, ip,
    )


def ensure_owner_or_role(
    identity: Identity,
    owner_id: Optional[str],
    allowed_roles: AbstractSet[RoleName],
    message: str,
    ip: Optional[str] = None,
) -> None:
    if has_any_role(identity, allowed_roles) or identity.user_id == owner_id:
        return

    logger.warning(
        "Access denied: not owner user_id=%s role=%s owner_id=%s ip=%s",
        identity.user_id, identity.role, owner_id, ip,
    )
    raise Forbidden(message)


def ensure_no_role_change(identity: Identity, requested_role_id, ip: Optional[str] = None) -> None:
    if requested_role_id is not None and is_restricted_to_own_records(identity):
        logger.warning(
            "User update denied: role change attempted user_id=%s role=%s ip=%s",
            identity.user_id, identity.role, ip,
        )
        raise Forbidden("Access denied: You cannot change your role")


def ensure_not_self(identity: Identity, target_user_id: str, ip: Optional[str] = None) -> None:
    if identity.user_id == target_user_id:
        logger.warning("User deletion denied: self deletion user_id=%s ip=%s", identity.user_id, ip)
        raise BadRequest("Cannot delete your own account")


def _task_scope_gate(action: str) -> Callable[..., Identity]:
    # Employees pass through; the handler applies the ownership rule once the task is loaded
    def scope_gate(task_id: str, request: Request, identity: Identity = Depends(get_current_identity)) -> Identity:
        if has_any_role(identity, MANAGER_OR_ABOVE):
            logger.info(
                "ABAC check passed: %s any task user_id=%s role=%s task_id=%s ip=%s",
                action, identity.user_id, identity.role, task_id, client_ip(request),
            )
        else:
            logger.info(
                "ABAC check passed: %s assigned tasks only user_id=%s role=%s task_id=%s ip=%s",
                action, identity.user_id, identity.role, task_id, client_ip(request),
            )
        return identity

    return scope_gate


can_view_task = _task_scope_gate("view")
can_update_task = _task_scope_gate("update")
