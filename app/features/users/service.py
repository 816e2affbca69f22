from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.models.role import Role
from app.models.user import User
from app.utils.security import get_password_hash

class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Optional[str]
    created_at: datetime
    updated_at: datetime

def serialize_user(user: User) -> dict:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role_name,
        created_at=user.created_at,
        updated_at=user.updated_at,
    ).model_dump(mode="json")

def normalize_email(email: str) -> str:
    return email.strip().lower()

def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def create_account(db: Session, name: str, email: str, password: str, role: Role) -> User:
    user = User(
        name=name.strip(),
        email=normalize_email(email),
        hashed_password=get_password_hash(password),
        role_id=role.id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

def apply_user_update(db: Session, user: User, payload: dict) -> User:
    if "name" in payload:
        user.name = payload["name"]
    if "email" in payload:
        user.email = normalize_email(payload["email"])
    if "role_id" in payload:
        user.role_id = str(payload["role_id"])
    if "password" in payload:
        user.hashed_password = get_password_hash(payload["password"])
    db.commit()
    db.refresh(user)
    return user
