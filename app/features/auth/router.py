import logging
from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session
from app.config.database import get_db
from app.features.access.policies import require_admin
from app.features.auth.dependencies import client_ip, get_current_identity
from app.features.auth.service import authenticate_user, create_user_token
from app.features.auth.validators import validate_admin_user_creation, validate_login, validate_registration
from app.features.users.service import create_account, get_user, serialize_user
from app.models.role import Role
from app.utils.errors import NotFound, Unauthenticated
from app.utils.responses import envelope
from app.utils.security import Identity, TokenService, get_token_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

def _create_from_payload(db: Session, payload: dict):
    role = db.query(Role).filter(Role.id == str(payload["role_id"])).first()
    return create_account(db, payload["name"], payload["email"], payload["password"], role)

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(request: Request, payload: dict = Body(...), db: Session = Depends(get_db)):
    payload = validate_registration(payload, db, ip=client_ip(request))
    user = _create_from_payload(db, payload)

    logger.info("User registered successfully user_id=%s email=%s role=%s ip=%s", user.id, user.email, user.role_name, client_ip(request))
    return envelope(serialize_user(user), "User registered successfully")

@router.post("/login")
def login(
    request: Request,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
):
    payload = validate_login(payload, ip=client_ip(request))
    user = authenticate_user(db, payload["email"], payload["password"])
    if not user:
        logger.warning("Login failed email=%s ip=%s", payload["email"], client_ip(request))
        raise Unauthenticated("Invalid credentials")

    token = create_user_token(user, token_service)
    logger.info("User logged in successfully user_id=%s email=%s ip=%s", user.id, user.email, client_ip(request))
    return envelope({"token": token, "user": serialize_user(user)}, "Login successful")

@router.get("/profile")
def profile(request: Request, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    user = get_user(db, identity.user_id)
    if not user:
        logger.warning("Profile not found user_id=%s ip=%s", identity.user_id, client_ip(request))
        raise NotFound("User not found")

    logger.info("Profile retrieved successfully user_id=%s ip=%s", user.id, client_ip(request))
    return envelope(serialize_user(user))

@router.post("/admin/create-user", status_code=status.HTTP_201_CREATED)
def admin_create_user(
    request: Request,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    payload = validate_admin_user_creation(payload, db, actor_id=admin.user_id, ip=client_ip(request))
    user = _create_from_payload(db, payload)

    logger.info(
        "Admin created user successfully created_user_id=%s email=%s role=%s admin_user_id=%s ip=%s",
        user.id, user.email, user.role_name, admin.user_id, client_ip(request),
    )
    return envelope(serialize_user(user), "User created successfully")
