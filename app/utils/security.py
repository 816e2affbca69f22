from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import jwt, JWTError
from app.config.settings import settings

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, rebuilt from a verified token on every request."""
    user_id: str
    email: str
    role: str


class TokenConfigurationError(RuntimeError):
    pass


class InvalidToken(Exception):
    """Raised for every token that cannot be trusted: bad signature, expired or malformed."""


class TokenService:
    """Issues and verifies signed, time-limited identity tokens."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_delta: timedelta = timedelta(hours=24)):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(self, identity: Identity) -> str:
        if not self.secret_key:
            raise TokenConfigurationError("Token secret is not configured")

        now = datetime.now(timezone.utc)
        claims = {
            "sub": identity.user_id,
            "email": identity.email,
            "role": identity.role,
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        if not self.secret_key:
            raise InvalidToken("Invalid token")
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True},
            )
        except JWTError as exc:
            # Expiry and tampering are reported the same way
            raise InvalidToken("Invalid token") from exc

        user_id = payload.get("sub")
        email = payload.get("email")
        role = payload.get("role")
        if not all(isinstance(value, str) and value for value in (user_id, email, role)):
            raise InvalidToken("Invalid token")
        return Identity(user_id=user_id, email=email, role=role)


def get_token_service() -> TokenService:
    return TokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

def create_access_token(identity: Identity, token_service: Optional[TokenService] = None) -> str:
    return (token_service or get_token_service()).issue(identity)
