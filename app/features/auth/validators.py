import logging
from typing import Annotated, List, Optional, Set
from pydantic import BaseModel, EmailStr, Field, StringConstraints, UUID4, field_validator
from sqlalchemy.orm import Session
from app.features.access.roles import SELF_REGISTRATION_ROLE
from app.models.role import Role
from app.features.users.service import normalize_email
from app.models.user import User
from app.utils.errors import ValidationFailed
from app.utils.validation import MIN_PASSWORD_LENGTH, canonical_uuid, collect_errors

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 50

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=NAME_MAX_LENGTH)]
Password = Annotated[str, Field(min_length=MIN_PASSWORD_LENGTH)]

ACCOUNT_MESSAGES = {
    "name": "Name is required and must be a non-empty string.",
    ("name", "string_too_long"): f"Name must be at most {NAME_MAX_LENGTH} characters",
    ("email", "missing"): "Email is required",
    "email": "Must be a valid email",
    "password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
    "role_id": "Role ID must be a valid UUID",
}

LOGIN_MESSAGES = {
    ("email", "missing"): "Email is required",
    "email": "Must be a valid email",
    "password": "Password is required",
}

def check_email_length(value):
    if value is not None and len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"at most {EMAIL_MAX_LENGTH} characters")
    return value

class Registration(BaseModel):
    name: Name
    email: EmailStr
    password: Password
    role_id: UUID4

    @field_validator("email")
    @classmethod
    def email_length(cls, value):
        return check_email_length(value)

class Login(BaseModel):
    email: EmailStr
    password: Annotated[str, Field(min_length=1)]

def email_taken(db: Session, email: str, exclude_user_id: Optional[str] = None) -> bool:
    query = db.query(User).filter(User.email == normalize_email(email))
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None

def find_role(payload: dict, failed: Set[str], db: Session, errors: List[str]) -> Optional[Role]:
    """Resolve a well-formed ``role_id``; unknown ids are reported as "Role not found"."""
    if "role_id" in failed or "role_id" not in payload:
        return None
    role = db.query(Role).filter(Role.id == canonical_uuid(payload["role_id"])).first()
    if not role:
        errors.append("Role not found")
    return role

def _check_account(payload: dict, db: Session):
    account, errors, failed = collect_errors(Registration, payload, ACCOUNT_MESSAGES)
    role = find_role(payload, failed, db, errors)
    if "email" not in failed and "email" in payload and email_taken(db, payload["email"]):
        errors.append("User with this email already exists")
    return account, role, errors

def validate_registration(payload: dict, db: Session, ip: Optional[str] = None) -> dict:
    account, role, errors = _check_account(payload, db)
    if role and role.name.lower() != SELF_REGISTRATION_ROLE.value.lower():
        errors.append("Self-registration is only allowed for employee role")

    if errors:
        logger.warning("Registration validation failed errors=%s ip=%s", errors, ip)
        raise ValidationFailed(errors)
    return account.model_dump()

def validate_admin_user_creation(payload: dict, db: Session, actor_id: Optional[str] = None, ip: Optional[str] = None) -> dict:
    account, _, errors = _check_account(payload, db)

    if errors:
        logger.warning("Admin user creation validation failed errors=%s user_id=%s ip=%s", errors, actor_id, ip)
        raise ValidationFailed(errors)
    return account.model_dump()

def validate_login(payload: dict, ip: Optional[str] = None) -> dict:
    credentials, errors, _ = collect_errors(Login, payload, LOGIN_MESSAGES)

    if errors:
        logger.warning("Login validation failed errors=%s ip=%s", errors, ip)
        raise ValidationFailed(errors)
    return credentials.model_dump()
