from typing import List, Optional
from fastapi import HTTPException, status

class AppError(HTTPException):
    """HTTPException carrying an optional list of field errors for the response envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None, headers: Optional[dict] = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message, headers=headers)
        self.errors = errors

class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})

class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"

class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"

class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: List[str]):
        super().__init__(self.default_message, errors=list(errors))

class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"
