import logging
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.utils.errors import Unauthenticated
from app.utils.security import Identity, InvalidToken, TokenService, get_token_service

logger = logging.getLogger(__name__)

# auto_error=False so a missing or non-Bearer header reaches our own 401 message
bearer_scheme = HTTPBearer(auto_error=False)

def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None

def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> Identity:
    """Verify the bearer token and expose the caller's identity to downstream stages."""
    if credentials is None or not credentials.credentials:
        logger.warning(
            "Authentication failed: no token provided ip=%s user_agent=%s",
            client_ip(request), request.headers.get("user-agent"),
        )
        raise Unauthenticated("Access token required")

    try:
        identity = token_service.verify(credentials.credentials)
    except InvalidToken:
        logger.warning("Authentication failed: invalid token ip=%s", client_ip(request))
        raise Unauthenticated("Invalid or expired token")

    request.state.identity = identity
    logger.info(
        "Authentication successful user_id=%s email=%s ip=%s",
        identity.user_id, identity.email, client_ip(request),
    )
    return identity
