import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.config.database import get_db
from app.features.access.policies import require_super_admin
from app.features.auth.dependencies import client_ip
from app.models.role import Role
from app.utils.errors import NotFound
from app.utils.responses import envelope
from app.utils.security import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/roles", tags=["Roles"])

class RoleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]

    class Config:
        from_attributes = True

class PermissionResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]

    class Config:
        from_attributes = True

class RolePermissionsResponse(RoleResponse):
    permissions: List[PermissionResponse]

@router.get("")
def read_roles(db: Session = Depends(get_db)):
    """Public: self-registration needs the id of the Employee role."""
    roles = db.query(Role).order_by(Role.name).all()
    return envelope([RoleResponse.model_validate(role).model_dump() for role in roles])

@router.get("/{role_id}/permissions")
def read_role_permissions(role_id: str, request: Request, db: Session = Depends(get_db), admin: Identity = Depends(require_super_admin)):
    role = db.query(Role).filter(Role.id == role_id).first()
    if not role:
        logger.warning("Role not found role_id=%s user_id=%s ip=%s", role_id, admin.user_id, client_ip(request))
        raise NotFound("Role not found")

    logger.info("Role permissions retrieved role_id=%s user_id=%s ip=%s", role_id, admin.user_id, client_ip(request))
    return envelope(RolePermissionsResponse.model_validate(role).model_dump())
