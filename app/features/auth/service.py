from typing import Optional
from sqlalchemy.orm import Session
from app.models.user import User
from app.utils.security import Identity, TokenService, verify_password, create_access_token

def authenticate_user(db: Session, email: str, password: str):
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        return False
    if not verify_password(password, user.hashed_password):
        return False
    return user

def identity_for(user: User) -> Identity:
    return Identity(user_id=user.id, email=user.email, role=user.role_name or "unknown")

def create_user_token(user: User, token_service: Optional[TokenService] = None) -> str:
    return create_access_token(identity_for(user), token_service)
