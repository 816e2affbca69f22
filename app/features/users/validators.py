import logging
from typing import Optional
from pydantic import BaseModel, EmailStr, UUID4, field_validator
from sqlalchemy.orm import Session
from app.features.auth.validators import ACCOUNT_MESSAGES, Name, Password, check_email_length, email_taken, find_role
from app.utils.errors import ValidationFailed
from app.utils.validation import collect_errors

logger = logging.getLogger(__name__)

class UserUpdate(BaseModel):
    """Every field is optional; whatever is present must be valid and not null."""

    name: Name = None
    email: EmailStr = None
    password: Password = None
    role_id: UUID4 = None

    @field_validator("email")
    @classmethod
    def email_length(cls, value):
        return check_email_length(value)

def validate_user_update(payload: dict, db: Session, user_id: str, actor_id: Optional[str] = None, ip: Optional[str] = None) -> dict:
    update, errors, failed = collect_errors(UserUpdate, payload, ACCOUNT_MESSAGES)

    if "email" not in failed and "email" in payload and email_taken(db, payload["email"], exclude_user_id=user_id):
        errors.append("User with this email already exists")
    find_role(payload, failed, db, errors)

    if errors:
        logger.warning("User update validation failed errors=%s user_id=%s ip=%s", errors, actor_id, ip)
        raise ValidationFailed(errors)
    return update.model_dump(exclude_unset=True)
