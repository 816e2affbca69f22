import logging
import time
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config.database import engine, Base
from app.config.logging_config import configure_logging
from app.config.settings import settings
from app.features.auth.dependencies import client_ip
from app.features.auth.router import router as auth_router
from app.features.users.router import router as users_router
from app.features.roles.router import router as roles_router
from app.features.tasks.router import router as tasks_router
# Register every model with Base.metadata before create_all
from app.models.role import Role
from app.models.permission import Permission, RolePermission
from app.models.user import User
from app.models.task import Task
from app.utils.errors import AppError
from app.utils.responses import envelope

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("taskhub")

# Create Database Tables
Base.metadata.create_all(bind=engine)

STARTED_AT = time.monotonic()

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _actor_id(request: Request):
    identity = getattr(request.state, "identity", None)
    return identity.user_id if identity else "anonymous"

@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(
        "Incoming request method=%s url=%s ip=%s user_agent=%s",
        request.method, request.url.path, client_ip(request), request.headers.get("user-agent"),
    )
    return await call_next(request)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc, AppError):
        body = envelope(message=exc.detail, success=False, errors=exc.errors)
    elif exc.status_code == 404:
        logger.warning("Route not found method=%s url=%s ip=%s", request.method, request.url.path, client_ip(request))
        body = envelope(message="Route not found", success=False)
    else:
        body = envelope(message=str(exc.detail), success=False)
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    logger.warning(
        "Validation error errors=%s method=%s url=%s ip=%s user_id=%s",
        errors, request.method, request.url.path, client_ip(request), _actor_id(request),
    )
    return JSONResponse(status_code=400, content=envelope(message="Validation failed", success=False, errors=errors))

@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    # A unique index lost a race with the pre-commit check
    if "email" in str(exc.orig).lower():
        errors = ["User with this email already exists"]
    else:
        errors = ["Record conflicts with existing data"]

    logger.warning(
        "Integrity error errors=%s method=%s url=%s ip=%s user_id=%s",
        errors, request.method, request.url.path, client_ip(request), _actor_id(request),
    )
    return JSONResponse(status_code=400, content=envelope(message="Validation failed", success=False, errors=errors))

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error occurred method=%s url=%s ip=%s user_agent=%s user_id=%s",
        request.method, request.url.path, client_ip(request), request.headers.get("user-agent"), _actor_id(request),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=envelope(message="Internal server error", success=False))

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(roles_router)
app.include_router(tasks_router)

@app.get("/health")
def health(request: Request):
    logger.info("Health check requested ip=%s", client_ip(request))
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
    }

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
