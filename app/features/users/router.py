import logging
from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session
from app.config.database import get_db
from app.features.access.policies import (
    check_roles,
    ensure_no_role_change,
    ensure_not_self,
    ensure_owner_or_role,
    require_admin,
)
from app.features.access.roles import ADMIN_OR_ABOVE, MANAGER_OR_ABOVE
from app.features.auth.dependencies import client_ip, get_current_identity
from app.features.users.service import apply_user_update, get_user, serialize_user
from app.features.users.validators import validate_user_update
from app.models.user import User
from app.utils.errors import NotFound
from app.utils.responses import envelope
from app.utils.security import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

@router.get("")
def read_users(request: Request, db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    users = db.query(User).order_by(User.created_at.desc()).all()

    logger.info("All users retrieved successfully user_id=%s role=%s ip=%s", admin.user_id, admin.role, client_ip(request))
    return envelope([serialize_user(user) for user in users])

@router.get("/{user_id}")
def read_user(user_id: str, request: Request, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    ensure_owner_or_role(
        identity, user_id, MANAGER_OR_ABOVE,
        "Access denied: You can only view your own profile", ip=client_ip(request),
    )

    user = get_user(db, user_id)
    if not user:
        logger.warning("User not found target_user_id=%s user_id=%s ip=%s", user_id, identity.user_id, client_ip(request))
        raise NotFound("User not found")

    logger.info("User profile retrieved successfully user_id=%s target_user_id=%s ip=%s", identity.user_id, user_id, client_ip(request))
    return envelope(serialize_user(user))

@router.put("/{user_id}")
def update_user(
    user_id: str,
    request: Request,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    payload = validate_user_update(payload, db, user_id, actor_id=identity.user_id, ip=client_ip(request))
    ensure_owner_or_role(
        identity, user_id, MANAGER_OR_ABOVE,
        "Access denied: You can only update your own profile", ip=client_ip(request),
    )
    ensure_no_role_change(identity, payload.get("role_id"), ip=client_ip(request))

    user = get_user(db, user_id)
    if not user:
        logger.warning("User not found for update target_user_id=%s user_id=%s ip=%s", user_id, identity.user_id, client_ip(request))
        raise NotFound("User not found")

    user = apply_user_update(db, user, payload)

    logger.info("User updated successfully user_id=%s target_user_id=%s ip=%s", identity.user_id, user_id, client_ip(request))
    return envelope(serialize_user(user), "User updated successfully")

@router.delete("/{user_id}")
def delete_user(user_id: str, request: Request, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    # Self-deletion is a 400 for every role, ahead of the admin gate
    ensure_not_self(identity, user_id, ip=client_ip(request))
    admin = check_roles(identity, ADMIN_OR_ABOVE, client_ip(request))

    user = get_user(db, user_id)
    if not user:
        logger.warning("User not found for deletion target_user_id=%s user_id=%s ip=%s", user_id, admin.user_id, client_ip(request))
        raise NotFound("User not found")

    db.delete(user)
    db.commit()

    logger.info("User deleted successfully user_id=%s target_user_id=%s ip=%s", admin.user_id, user_id, client_ip(request))
    return envelope(message="User deleted successfully")
